"""Event record models.

`EventRecord` is the stored entity, `EventDraft` is what a user submits to
create one. Both are pydantic models; records are frozen so snapshots handed
out by the store cannot be changed in place.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from dateutil import parser as date_parser
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Category(str, Enum):
    ACADEMIC = "academic"
    TECHNICAL = "technical"
    CULTURAL = "cultural"
    SPORTS = "sports"
    WORKSHOP = "workshop"
    SEMINAR = "seminar"
    OTHER = "other"


CATEGORY_DISPLAY_NAMES = {
    Category.ACADEMIC.value: "Academic",
    Category.TECHNICAL.value: "Technical",
    Category.CULTURAL.value: "Cultural",
    Category.SPORTS.value: "Sports",
    Category.WORKSHOP.value: "Workshop",
    Category.SEMINAR.value: "Seminar",
    Category.OTHER.value: "Other",
}

EventId = Union[int, str]


def category_display_name(category: str) -> str:
    """Human name for a category; unknown categories are shown as-is."""
    return CATEGORY_DISPLAY_NAMES.get(category, category)


def to_local_naive(value: datetime) -> datetime:
    """Drop tzinfo after converting aware datetimes to local wall time."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def parse_instant(value: Any) -> Any:
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("empty timestamp")
        # ValueError / OverflowError are reported by pydantic as field errors
        return to_local_naive(date_parser.parse(text))
    if isinstance(value, datetime):
        return to_local_naive(value)
    return value


def same_id(a: EventId, b: EventId) -> bool:
    return str(a) == str(b)


class _EventFields(BaseModel):
    name: str = Field(..., min_length=1)
    date: datetime
    location: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    description: Optional[str] = None
    organizer: Optional[str] = None
    capacity: Optional[int] = Field(default=None, gt=0)

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v):
        return parse_instant(v)

    @field_validator("date", mode="after")
    @classmethod
    def _naive_date(cls, v: datetime) -> datetime:
        # numeric timestamps come out of pydantic as UTC-aware
        return to_local_naive(v)

    @field_validator("capacity", mode="before")
    @classmethod
    def _blank_capacity(cls, v):
        # form inputs send "" for "no limit"
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("category", mode="before")
    @classmethod
    def _category_value(cls, v):
        if isinstance(v, Category):
            return v.value
        return v


class EventDraft(_EventFields):
    """User input for a new event (id and created are assigned by the store)."""


class EventRecord(_EventFields):
    model_config = ConfigDict(frozen=True)

    id: EventId
    created: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v):
        if isinstance(v, bool):
            raise ValueError("id must be an integer or a string")
        # older exports carry fractional timestamp ids
        if isinstance(v, float):
            return int(v) if v.is_integer() else repr(v)
        return v

    @field_validator("created", mode="before")
    @classmethod
    def _parse_created(cls, v):
        if v in (None, ""):
            return None
        return parse_instant(v)

    @field_validator("created", mode="after")
    @classmethod
    def _naive_created(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(v) if v is not None else None

    @property
    def organizer_display(self) -> str:
        return self.organizer or "Not specified"

    @property
    def category_display(self) -> str:
        return category_display_name(self.category)

    def to_dict(self) -> dict:
        """Interchange form: ISO timestamps, every key present."""
        return {
            "id": self.id,
            "name": self.name,
            "date": self.date.isoformat(),
            "location": self.location,
            "category": self.category,
            "description": self.description,
            "organizer": self.organizer,
            "capacity": self.capacity,
            "created": self.created.isoformat() if self.created else None,
        }


__all__ = [
    "Category",
    "CATEGORY_DISPLAY_NAMES",
    "EventId",
    "EventDraft",
    "EventRecord",
    "category_display_name",
    "parse_instant",
    "same_id",
    "to_local_naive",
]
