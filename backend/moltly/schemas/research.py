# backend/moltly/schemas/research.py
from datetime import datetime, timezone
from typing import Annotated, Any, Optional
import uuid

from pydantic import BeforeValidator, model_validator

from .commons import DictList, StringList, Text, WireModel, parse_datetime

UNTITLED_NOTE = "Untitled note"


def _timestamp(value: Any) -> Optional[str]:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        parsed = parse_datetime(value.strip())
    else:
        return None
    if parsed is None:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed.isoformat(timespec="milliseconds") + "Z"


def _string_id(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _bool_or_none(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


Timestamp = Annotated[Optional[str], BeforeValidator(_timestamp)]
StringId = Annotated[Optional[str], BeforeValidator(_string_id)]


class ResearchNote(WireModel):
    id: StringId = None
    title: Text(256) = None
    individual_label: Text(160) = None
    content: Annotated[str, BeforeValidator(lambda v: v if isinstance(v, str) else "")] = ""
    tags: StringList = []
    created_at: Timestamp = None
    updated_at: Timestamp = None
    external_source: Text(128) = None
    external_id: StringId = None
    entry_type: Text(64) = None
    url: Text(2048) = None

    @model_validator(mode="after")
    def _defaults(self):
        if not self.id:
            self.id = str(uuid.uuid4())
        if not self.title:
            self.title = UNTITLED_NOTE
        if not self.created_at:
            self.created_at = _timestamp(datetime.now(timezone.utc))
        if not self.updated_at:
            self.updated_at = self.created_at
        return self


class ResearchStackIn(WireModel):
    name: Text(160) = None
    species: Text(160) = None
    category: Text(120) = None
    description: Text(2000) = None
    tags: StringList = []
    notes: Annotated[list[ResearchNote], DictList] = []
    external_source: Text(128) = None
    external_id: StringId = None
    is_public: Annotated[Optional[bool], BeforeValidator(_bool_or_none)] = None
    alias: Text(64) = None
