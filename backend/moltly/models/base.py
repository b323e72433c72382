# backend/moltly/models/base.py
import datetime as dt

from sqlalchemy import Date, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


def iso_utc(value: dt.datetime) -> str:
    # stored naive, always UTC
    return value.isoformat(timespec="milliseconds") + "Z"


class RecordMixin:
    """
    Maps between the camelCase wire record produced by the normalizer and
    the snake_case columns. FIELDS: wire key -> attribute name.
    """

    FIELDS: dict = {}

    def _column_type(self, attr: str):
        return self.__table__.columns[attr].type  # type: ignore[attr-defined]

    def apply_record(self, record: dict) -> None:
        # every mapped field is written, so keys absent from the record clear the column
        for key, attr in self.FIELDS.items():
            value = record.get(key)
            if value is not None and isinstance(self._column_type(attr), Date):
                value = dt.date.fromisoformat(value)
            setattr(self, attr, value)

    def to_record(self) -> dict:
        out: dict = {"id": str(self.id)}  # type: ignore[attr-defined]
        for key, attr in self.FIELDS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            if isinstance(value, dt.datetime):
                value = iso_utc(value)
            elif isinstance(value, dt.date):
                value = value.isoformat()
            out[key] = value
        if "attachments" in self.FIELDS:
            out["attachments"] = list(self.attachments or [])  # type: ignore[attr-defined]
        created = getattr(self, "created_at", None)
        updated = getattr(self, "updated_at", None)
        if created:
            out["createdAt"] = iso_utc(created)
        if updated:
            out["updatedAt"] = iso_utc(updated)
        return out
