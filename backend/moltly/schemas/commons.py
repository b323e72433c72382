# backend/moltly/schemas/commons.py
"""
Lenient field types shared by every record schema.

Incoming records come from request bodies and from export files written by
older app versions, so most fields coerce rather than reject: blank strings
become absent, unparseable optional dates and numbers become absent, unknown
enum values fall back to the documented default. Only structural problems
(missing required date, over-long text, wrong container types) fail.
"""
from datetime import date, datetime, timezone
from typing import Annotated, Any, Optional
import math
import re

from pydantic import BaseModel, BeforeValidator, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _trimmed(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def parse_datetime(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def coerce_date(value: Any) -> Any:
    """Return a date for anything date-like; leave the rest for pydantic to reject."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        s = value.strip()
        if _ISO_DATE.match(s):
            try:
                return date.fromisoformat(s)
            except ValueError:
                return value
        parsed = parse_datetime(s)
        if parsed is not None:
            return coerce_date(parsed)
    return value


def _optional_date(value: Any) -> Optional[date]:
    coerced = coerce_date(value)
    return coerced if isinstance(coerced, date) else None


def _datetime_string(value: Any) -> Optional[str]:
    if isinstance(value, datetime):
        return value.isoformat()
    s = _trimmed(value)
    if s and parse_datetime(s) is not None:
        return s
    return None


def _finite_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str) and value.strip():
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def _integer(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip():
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def choice(*allowed: str):
    """Unknown or blank values become None so the caller's default applies."""

    def _check(value: Any) -> Optional[str]:
        value = _trimmed(value)
        return value if value in allowed else None

    return BeforeValidator(_check)


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _dict_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, list):
        return [item for item in value if isinstance(item, dict)]
    return value


def Text(max_length: int = 512):
    return Annotated[
        Optional[Annotated[str, StringConstraints(max_length=max_length)]],
        BeforeValidator(_trimmed),
    ]


RequiredDate = Annotated[date, BeforeValidator(coerce_date)]
OptionalDate = Annotated[Optional[date], BeforeValidator(_optional_date)]
DateTimeString = Annotated[Optional[str], BeforeValidator(_datetime_string)]
OptionalNumber = Annotated[Optional[float], BeforeValidator(_finite_number)]
OptionalInteger = Annotated[Optional[int], BeforeValidator(_integer)]
StringList = Annotated[list[str], BeforeValidator(_string_list)]
DictList = BeforeValidator(_dict_list)


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python; unknown keys ignored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _attachment_url(value: Any) -> Optional[str]:
    value = _trimmed(value)
    if value is None:
        return None
    # data URLs may be arbitrarily long, plain URLs may not
    if value.startswith("data:") or len(value) <= 2048:
        return value
    return None


def _data_url(value: Any) -> Optional[str]:
    value = _trimmed(value)
    return value if value and value.startswith("data:") else None


class Attachment(WireModel):
    id: Text(128) = None
    name: Text(256) = None
    url: Annotated[Optional[str], BeforeValidator(_attachment_url)] = None
    type: Text(128) = None
    added_at: DateTimeString = None
    # only present inside export/import envelopes
    data_url: Annotated[Optional[str], BeforeValidator(_data_url)] = None


AttachmentList = Annotated[list[Attachment], DictList]
