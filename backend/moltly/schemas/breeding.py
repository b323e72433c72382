# backend/moltly/schemas/breeding.py
from typing import Annotated, Literal, Optional

from .commons import (
    AttachmentList,
    OptionalDate,
    OptionalInteger,
    RequiredDate,
    Text,
    WireModel,
    choice,
)

STATUSES = ("Planned", "Attempted", "Successful", "Failed", "Observation")
EGG_SAC_STATUSES = ("Not Laid", "Laid", "Pulled", "Failed", "Hatched")


class BreedingEntryIn(WireModel):
    female_specimen: Text(160) = None
    male_specimen: Text(160) = None
    species: Text(160) = None
    pairing_date: RequiredDate
    status: Annotated[
        Optional[Literal["Planned", "Attempted", "Successful", "Failed", "Observation"]], choice(*STATUSES)
    ] = None
    pairing_notes: Text(2000) = None
    egg_sac_date: OptionalDate = None
    egg_sac_status: Annotated[
        Optional[Literal["Not Laid", "Laid", "Pulled", "Failed", "Hatched"]], choice(*EGG_SAC_STATUSES)
    ] = None
    egg_sac_count: OptionalInteger = None
    hatch_date: OptionalDate = None
    sling_count: OptionalInteger = None
    follow_up_date: OptionalDate = None
    notes: Text(2000) = None
    attachments: AttachmentList = []
