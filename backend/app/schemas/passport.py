"""
Passport schemas and the PassportPatch change set.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional
from pydantic import BaseModel, ConfigDict

from app.core.exceptions import ValidationError
from app.models.passport import PASSPORT_FIELDS, PASSPORT_DATE_FIELDS


class PassportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    passport_type: Optional[str] = None
    country_code: Optional[str] = None
    passport_number: Optional[str] = None
    full_name: Optional[str] = None
    nationality: Optional[str] = None
    sex: Optional[str] = None
    date_of_birth: Optional[date] = None
    place_of_birth: Optional[str] = None
    date_of_issue: Optional[date] = None
    date_of_expiry: Optional[date] = None
    place_of_issue: Optional[str] = None
    father_name: Optional[str] = None
    spouse_name: Optional[str] = None
    address: Optional[str] = None
    passport_photo: Optional[str] = None
    signature: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PassportWithOwner(PassportResponse):
    email: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None


class PassportEnvelope(BaseModel):
    message: Optional[str] = None
    passport: PassportResponse


class PassportList(BaseModel):
    passports: List[PassportWithOwner]


def _coerce(field: str, value: str) -> Any:
    if field in PASSPORT_DATE_FIELDS:
        try:
            return date.fromisoformat(value)
        except ValueError:
            raise ValidationError(f"{field} must be a date in YYYY-MM-DD format")
    return value


CLEAR_FIELDS_KEY = "clear_fields"


def _clear_requests(form: Mapping[str, Any]) -> List[str]:
    if hasattr(form, "getlist"):
        raw_values = form.getlist(CLEAR_FIELDS_KEY)
    else:
        raw_values = [form.get(CLEAR_FIELDS_KEY) or ""]

    names = []
    for raw in raw_values:
        if not isinstance(raw, str):
            raise ValidationError(f"{CLEAR_FIELDS_KEY} must be a text value")
        names.extend(name.strip() for name in raw.split(",") if name.strip())

    unknown = set(names) - set(PASSPORT_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown passport fields: {', '.join(sorted(unknown))}")
    return names


class PassportPatch:
    """
    Field-level change set for a passport record.

    Each passport field is in one of three states: absent from ``changes``
    (leave unchanged), mapped to ``None`` (clear), or mapped to a value (set).
    """

    def __init__(self, changes: Optional[Dict[str, Any]] = None):
        unknown = set(changes or {}) - set(PASSPORT_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown passport fields: {', '.join(sorted(unknown))}")
        self.changes: Dict[str, Any] = dict(changes or {})

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "PassportPatch":
        """
        Build a patch from submitted form data.

        Fields that are missing or submitted empty are left unchanged. To
        null a field, name it in ``clear_fields`` (comma separated, or the
        key repeated).
        """
        changes = {}
        for name in _clear_requests(form):
            changes[name] = None

        for field in PASSPORT_FIELDS:
            raw = form.get(field)
            if raw is None:
                continue
            if not isinstance(raw, str):
                raise ValidationError(f"{field} must be a text value")
            value = raw.strip()
            if not value:
                continue
            if field in changes:
                raise ValidationError(f"{field} cannot be both set and cleared")
            changes[field] = _coerce(field, value)
        return cls(changes)

    def __bool__(self) -> bool:
        return bool(self.changes)

    def __repr__(self) -> str:
        return f"<PassportPatch({self.changes!r})>"

    @property
    def cleared(self) -> List[str]:
        return [field for field, value in self.changes.items() if value is None]

    def as_values(self) -> Dict[str, Any]:
        """Full field mapping for a new record; unset fields become None."""
        return {field: self.changes.get(field) for field in PASSPORT_FIELDS}

    def apply(self, record: Any) -> None:
        for field, value in self.changes.items():
            setattr(record, field, value)
