# backend/moltly/schemas/molt.py
from typing import Annotated, Any, Literal, Optional

from pydantic import BeforeValidator, StringConstraints

from .commons import (
    AttachmentList,
    OptionalDate,
    OptionalNumber,
    RequiredDate,
    Text,
    WireModel,
    choice,
)

BUILTIN_ENTRY_TYPES = ("molt", "feeding", "water")
STAGES = ("Pre-molt", "Molt", "Post-molt")
FEEDING_OUTCOMES = ("Offered", "Ate", "Refused", "Not Observed")
FEEDING_FIELDS = ("feedingPrey", "feedingOutcome", "feedingAmount")


def _entry_type(value: Any) -> Any:
    # custom labels are kept verbatim, built-ins are matched case-insensitively
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    value = value.strip()
    if not value:
        return None
    return value.lower() if value.lower() in BUILTIN_ENTRY_TYPES else value


EntryType = Annotated[
    Optional[Annotated[str, StringConstraints(min_length=1, max_length=32)]],
    BeforeValidator(_entry_type),
]


class MoltEntryIn(WireModel):
    specimen: Text(160) = None
    species: Text(160) = None
    date: RequiredDate
    entry_type: EntryType = None
    stage: Annotated[Optional[Literal["Pre-molt", "Molt", "Post-molt"]], choice(*STAGES)] = None
    old_size: OptionalNumber = None
    new_size: OptionalNumber = None
    humidity: OptionalNumber = None
    temperature: OptionalNumber = None
    temperature_unit: Annotated[Optional[Literal["C", "F"]], choice("C", "F")] = None
    reminder_date: OptionalDate = None
    notes: Text(4000) = None
    feeding_prey: Text(256) = None
    feeding_outcome: Annotated[
        Optional[Literal["Offered", "Ate", "Refused", "Not Observed"]], choice(*FEEDING_OUTCOMES)
    ] = None
    feeding_amount: Text(128) = None
    attachments: AttachmentList = []
