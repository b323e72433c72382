# backend/moltly/services/normalize/records.py
"""
Parse-or-reject boundary for every record type.

Each ``normalize_*`` takes an untyped mapping (request body, export file
record, stored record) and returns a NormalizeResult: either a fully typed
camelCase record with absent optional fields omitted, or the list of field
issues explaining why the input was rejected. Expected malformed input never
raises.

Running a normalizer over its own output returns the identical structure.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Type

from pydantic import ValidationError

from moltly.errors import FieldIssue, RecordValidationError
from moltly.schemas.breeding import BreedingEntryIn
from moltly.schemas.commons import WireModel
from moltly.schemas.health import HealthEntryIn
from moltly.schemas.molt import FEEDING_FIELDS, MoltEntryIn
from moltly.schemas.research import ResearchStackIn


@dataclass
class NormalizeResult:
    record: Optional[dict] = None
    issues: list[FieldIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.record is not None

    def unwrap(self) -> dict:
        if self.record is None:
            raise RecordValidationError(self.issues)
        return self.record


def _issues_from(exc: ValidationError) -> list[FieldIssue]:
    issues = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        issues.append(FieldIssue(field=loc, message=err.get("msg", "Invalid value")))
    return issues


def _parse(schema: Type[WireModel], raw: Any) -> tuple[Optional[dict], list[FieldIssue]]:
    if not isinstance(raw, dict):
        return None, [FieldIssue(field="", message="Expected a JSON object.")]
    try:
        return schema.model_validate(raw).to_wire(), []
    except ValidationError as exc:
        return None, _issues_from(exc)


def _finish_attachments(record: dict, keep_data_urls: bool) -> None:
    if keep_data_urls:
        return
    for att in record.get("attachments", []):
        att.pop("dataUrl", None)


def normalize_molt_entry(raw: Any, keep_data_urls: bool = False) -> NormalizeResult:
    record, issues = _parse(MoltEntryIn, raw)
    if record is None:
        return NormalizeResult(issues=issues)

    kind = record.get("entryType") or "molt"
    record["entryType"] = kind
    if kind == "molt":
        record.setdefault("stage", "Molt")
        if not record.get("species"):
            return NormalizeResult(issues=[FieldIssue("species", "Species is required for molt entries.")])
    else:
        # older exports mix shapes; wrong-kind fields are dropped, not rejected
        record.pop("stage", None)
    if kind != "feeding":
        for key in FEEDING_FIELDS:
            record.pop(key, None)

    _finish_attachments(record, keep_data_urls)
    return NormalizeResult(record=record)


def normalize_health_entry(raw: Any, keep_data_urls: bool = False) -> NormalizeResult:
    record, issues = _parse(HealthEntryIn, raw)
    if record is None:
        return NormalizeResult(issues=issues)
    record.setdefault("condition", "Stable")
    if "weight" in record:
        record.setdefault("weightUnit", "g")
    _finish_attachments(record, keep_data_urls)
    return NormalizeResult(record=record)


def normalize_breeding_entry(raw: Any, keep_data_urls: bool = False) -> NormalizeResult:
    record, issues = _parse(BreedingEntryIn, raw)
    if record is None:
        return NormalizeResult(issues=issues)
    record.setdefault("status", "Planned")
    record.setdefault("eggSacStatus", "Not Laid")
    _finish_attachments(record, keep_data_urls)
    return NormalizeResult(record=record)


def normalize_stack(raw: Any, keep_data_urls: bool = False) -> NormalizeResult:
    record, issues = _parse(ResearchStackIn, raw)
    if record is None:
        return NormalizeResult(issues=issues)
    if not record.get("name"):
        return NormalizeResult(issues=[FieldIssue("name", "Name is required.")])
    return NormalizeResult(record=record)


# wire collection name -> normalizer
NORMALIZERS: dict[str, Callable[..., NormalizeResult]] = {
    "entries": normalize_molt_entry,
    "health": normalize_health_entry,
    "breeding": normalize_breeding_entry,
    "research": normalize_stack,
}

_READ_ONLY = ("id", "createdAt", "updatedAt", "userId")


def apply_patch(normalize: Callable[..., NormalizeResult], current: dict, patch: Any) -> NormalizeResult:
    """
    Partial update: only keys present in ``patch`` change. A key sent as
    null or blank clears that field. The merged record is re-normalized, so
    kind changes drop wrong-kind fields and required fields are re-checked.
    """
    if not isinstance(patch, dict):
        return NormalizeResult(issues=[FieldIssue(field="", message="Expected a JSON object.")])
    merged = {k: v for k, v in current.items() if k not in _READ_ONLY}
    for key, value in patch.items():
        if key in _READ_ONLY:
            continue
        merged[key] = value
    return normalize(merged)
