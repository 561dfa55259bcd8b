from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional, Protocol

from ...exceptions import ValidationError
from ...utils import to_naive_utc
from .pagination import Page


class AppointmentStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"

    @classmethod
    def parse(cls, value: str) -> "AppointmentStatus":
        try:
            return cls(value)
        except ValueError:
            raise ValidationError("invalid status")


# Statuses that occupy a slot
ACTIVE_STATUSES = frozenset({AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED})


@dataclass
class AppointmentDto:
    id: str
    doctor_id: str
    patient_id: str
    created_by: str
    scheduled_at: datetime
    status: AppointmentStatus
    notes: str
    created_at: datetime
    updated_at: datetime

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


def _parse_day(value: str) -> date:
    """A plain YYYY-MM-DD, or a full ISO datetime reduced to its UTC day."""
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return to_naive_utc(datetime.fromisoformat(value)).date()
    except ValueError:
        raise ValidationError("invalid date. Use YYYY-MM-DD")


@dataclass(frozen=True)
class AppointmentFilters:
    """Listing options, validated on construction.

    ``day`` selects a whole calendar day. ``page`` is 1-indexed and
    ``limit`` is the page size.
    """

    status: Optional[AppointmentStatus] = None
    day: Optional[date] = None
    page: int = 1
    limit: int = 10
    max_limit: int = 100

    def __post_init__(self):
        if self.status is not None and not isinstance(self.status, AppointmentStatus):
            raise ValidationError("invalid status")
        if self.page < 1:
            raise ValidationError("page must be a positive integer")
        if self.limit < 1 or self.limit > self.max_limit:
            raise ValidationError(f"limit must be between 1 and {self.max_limit}")

    @classmethod
    def parse(cls, status: Optional[str] = None, date_str: Optional[str] = None, page: Optional[int] = None, limit: Optional[int] = None, max_limit: int = 100) -> "AppointmentFilters":
        day = None
        if date_str:
            day = _parse_day(date_str)
        return cls(
            status=AppointmentStatus.parse(status) if status else None,
            day=day,
            page=1 if page is None else page,
            limit=10 if limit is None else limit,
            max_limit=max_limit,
        )


@dataclass(frozen=True)
class AppointmentQuery:
    """Storage-level query built by the listing service."""

    doctor_id: Optional[str] = None
    patient_id: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    starts_at: Optional[datetime] = None
    ends_before: Optional[datetime] = None
    page: int = 1
    limit: int = 10
    # "scheduled_at" or "created_at", always descending
    order_by: str = "scheduled_at"


class AppointmentsRepository(Protocol):
    def get_by_id(self, appointment_id: str) -> Optional[AppointmentDto]:
        ...

    def find_active_in_slot(self, doctor_id: str, scheduled_at: datetime) -> Optional[AppointmentDto]:
        ...

    def create(self, doctor_id: str, patient_id: str, created_by: str, scheduled_at: datetime, notes: str) -> AppointmentDto:
        """Raises SlotTakenError if an active appointment already holds the slot."""
        ...

    def update(self, appointment_id: str, status: Optional[AppointmentStatus], notes: Optional[str]) -> Optional[AppointmentDto]:
        ...

    def list(self, query: AppointmentQuery) -> Page[AppointmentDto]:
        ...
