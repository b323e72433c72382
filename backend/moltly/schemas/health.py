# backend/moltly/schemas/health.py
from typing import Annotated, Literal, Optional

from .commons import (
    AttachmentList,
    OptionalDate,
    OptionalNumber,
    RequiredDate,
    Text,
    WireModel,
    choice,
)

CONDITIONS = ("Stable", "Observation", "Critical")


class HealthEntryIn(WireModel):
    specimen: Text(160) = None
    species: Text(160) = None
    date: RequiredDate
    weight: OptionalNumber = None
    weight_unit: Annotated[Optional[Literal["g", "oz"]], choice("g", "oz")] = None
    enclosure_dimensions: Text(120) = None
    temperature: OptionalNumber = None
    temperature_unit: Annotated[Optional[Literal["C", "F"]], choice("C", "F")] = None
    humidity: OptionalNumber = None
    condition: Annotated[Optional[Literal["Stable", "Observation", "Critical"]], choice(*CONDITIONS)] = None
    behavior: Text(512) = None
    health_issues: Text(512) = None
    treatment: Text(512) = None
    follow_up_date: OptionalDate = None
    notes: Text(2000) = None
    attachments: AttachmentList = []
