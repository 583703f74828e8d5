"""
Raw Workdeck records — lenient models of the JSON returned by the query endpoints.

Every field is optional and coerced with a ``mode="before"`` validator, so a
single malformed value becomes ``None`` (or ``[]``) instead of costing the
whole record.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger("workdeck_planner.records")

_DATE_FORMATS = ("%d/%m/%Y", "%d/%m/%Y %H:%M:%S", "%Y-%m-%d %H:%M:%S")


def coerce_id(value: Any) -> Optional[str]:
    """Ids arrive as strings or numbers; compare them as strings."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def coerce_text(value: Any) -> Optional[str]:
    """Strings pass through, numbers are stringified, anything else is None."""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def coerce_float(value: Any) -> Optional[float]:
    """parseFloat-style coercion; anything unusable (including NaN/inf) becomes None."""
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def coerce_datetime(value: Any) -> Optional[datetime]:
    """Parse ISO-8601 (with or without 'Z') or dd/mm/yyyy. Naive values are UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            for fmt in _DATE_FORMATS:
                try:
                    parsed = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
            else:
                return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def coerce_label(value: Any) -> Optional[str]:
    """Plain string, or the ``name`` of a nested object."""
    if isinstance(value, dict):
        value = value.get("name")
    return coerce_text(value)


def coerce_ref(value: Any) -> Any:
    """A ``{"id", "name"}`` object, or a bare id promoted to one."""
    if isinstance(value, (dict, BaseModel)):
        return value
    ref_id = coerce_id(value)
    return {"id": ref_id} if ref_id else None


def coerce_list(value: Any) -> List[Any]:
    """Lists pass through; null or any other shape becomes empty."""
    return value if isinstance(value, list) else []


class WorkdeckRecord(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class RawRef(WorkdeckRecord):
    """Reference to another entity, e.g. ``{"id": "...", "name": "..."}``."""
    id: Optional[str] = None
    name: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Optional[str]:
        return coerce_id(v)

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Optional[str]:
        return coerce_text(v)


class RawUser(WorkdeckRecord):
    id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    department: Optional[str] = None
    office: Optional[RawRef] = None
    rol: Optional[str] = None
    avatar: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Optional[str]:
        return coerce_id(v)

    @field_validator("first_name", "last_name", "avatar", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Optional[str]:
        return coerce_text(v)

    @field_validator("department", "rol", mode="before")
    @classmethod
    def _coerce_label(cls, v: Any) -> Optional[str]:
        return coerce_label(v)

    @field_validator("office", mode="before")
    @classmethod
    def _coerce_office(cls, v: Any) -> Any:
        return coerce_ref(v)

    @property
    def display_name(self) -> str:
        """``"first last"`` trimmed; may be empty."""
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class RawTimetable(WorkdeckRecord):
    is_main: bool = False
    day_hours: Optional[float] = None

    @field_validator("is_main", mode="before")
    @classmethod
    def _coerce_flag(cls, v: Any) -> bool:
        return bool(v) if v is not None else False

    @field_validator("day_hours", mode="before")
    @classmethod
    def _coerce_hours(cls, v: Any) -> Optional[float]:
        return coerce_float(v)


class RawOffice(WorkdeckRecord):
    id: Optional[str] = None
    name: Optional[str] = None
    time_tables: List[RawTimetable] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Optional[str]:
        return coerce_id(v)

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Optional[str]:
        return coerce_text(v)

    @field_validator("time_tables", mode="before")
    @classmethod
    def _coerce_list(cls, v: Any) -> Any:
        return [t for t in coerce_list(v) if isinstance(t, dict)]


class RawParticipant(WorkdeckRecord):
    user: Optional[RawRef] = None

    @field_validator("user", mode="before")
    @classmethod
    def _coerce_user(cls, v: Any) -> Any:
        return coerce_ref(v)


class RawMember(WorkdeckRecord):
    user: Optional[RawRef] = None

    @field_validator("user", mode="before")
    @classmethod
    def _coerce_user(cls, v: Any) -> Any:
        return coerce_ref(v)


class RawActivityTask(WorkdeckRecord):
    name: Optional[str] = None
    participants: List[RawParticipant] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Optional[str]:
        return coerce_text(v)

    @field_validator("participants", mode="before")
    @classmethod
    def _coerce_list(cls, v: Any) -> Any:
        return [p for p in coerce_list(v) if isinstance(p, dict)]


class RawActivity(WorkdeckRecord):
    name: Optional[str] = None
    available_hours: Optional[float] = None
    tasks: List[RawActivityTask] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Optional[str]:
        return coerce_text(v)

    @field_validator("available_hours", mode="before")
    @classmethod
    def _coerce_hours(cls, v: Any) -> Optional[float]:
        return coerce_float(v)

    @field_validator("tasks", mode="before")
    @classmethod
    def _coerce_list(cls, v: Any) -> Any:
        return [t for t in coerce_list(v) if isinstance(t, dict)]


class RawProject(WorkdeckRecord):
    id: Optional[str] = None
    name: Optional[str] = None
    code: Optional[str] = None
    planned_hours: Optional[float] = None
    available_hours: Optional[float] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_draft: bool = False
    members: List[RawMember] = Field(default_factory=list)
    activities: List[RawActivity] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Optional[str]:
        return coerce_id(v)

    @field_validator("name", "code", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> Optional[str]:
        return coerce_text(v)

    @field_validator("planned_hours", "available_hours", mode="before")
    @classmethod
    def _coerce_hours(cls, v: Any) -> Optional[float]:
        return coerce_float(v)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _coerce_date(cls, v: Any) -> Optional[datetime]:
        return coerce_datetime(v)

    @field_validator("is_draft", mode="before")
    @classmethod
    def _coerce_flag(cls, v: Any) -> bool:
        return bool(v) if v is not None else False

    @field_validator("members", "activities", mode="before")
    @classmethod
    def _coerce_list(cls, v: Any) -> Any:
        return [item for item in coerce_list(v) if isinstance(item, dict)]

    @property
    def total_hours(self) -> float:
        """plannedHours, else availableHours, else 0 (zero counts as missing)."""
        return self.planned_hours or self.available_hours or 0.0


RecordT = TypeVar("RecordT", bound=WorkdeckRecord)


def parse_records(model: Type[RecordT], payload: Any) -> List[RecordT]:
    """
    Validate a list payload into records, skipping items that cannot be parsed.

    Only non-object items fail validation; bad field values inside an object
    are coerced to their defaults. A non-list payload yields an empty list.
    """
    if not isinstance(payload, list):
        if payload is not None:
            logger.warning(
                f"Expected a list of {model.__name__} records, got {type(payload).__name__}"
            )
        return []

    records: List[RecordT] = []
    for item in payload:
        try:
            records.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping malformed {model.__name__}: {e.error_count()} error(s)")
    return records
