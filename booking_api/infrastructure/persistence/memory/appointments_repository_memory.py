import threading
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, Optional

from ....application.ports.appointments_repo import (
    AppointmentDto,
    AppointmentQuery,
    AppointmentsRepository,
    AppointmentStatus,
)
from ....application.ports.pagination import Page, offset_for
from ....exceptions import SlotTakenError
from ....utils import utcnow


class InMemoryAppointmentsRepository(AppointmentsRepository):
    """Dict-backed store used by tests and the ``memory`` storage backend.

    The slot check and insert share one lock, standing in for the partial
    unique index the SQL repository relies on. Reads take the same lock
    since request handlers run on a thread pool.
    """

    def __init__(self, clock: Callable = utcnow) -> None:
        self._appts: Dict[str, AppointmentDto] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def _active_in_slot(self, doctor_id: str, scheduled_at: datetime) -> Optional[AppointmentDto]:
        return next(
            (
                a for a in self._appts.values()
                if a.doctor_id == doctor_id and a.scheduled_at == scheduled_at and a.is_active
            ),
            None,
        )

    def get_by_id(self, appointment_id: str) -> Optional[AppointmentDto]:
        with self._lock:
            a = self._appts.get(appointment_id)
            return replace(a) if a else None

    def find_active_in_slot(self, doctor_id: str, scheduled_at: datetime) -> Optional[AppointmentDto]:
        with self._lock:
            a = self._active_in_slot(doctor_id, scheduled_at)
            return replace(a) if a else None

    def create(self, doctor_id: str, patient_id: str, created_by: str, scheduled_at: datetime, notes: str) -> AppointmentDto:
        with self._lock:
            if self._active_in_slot(doctor_id, scheduled_at):
                raise SlotTakenError(f"{doctor_id}@{scheduled_at.isoformat()}")
            now = self._clock()
            appt = AppointmentDto(
                id=str(uuid.uuid4()),
                doctor_id=doctor_id,
                patient_id=patient_id,
                created_by=created_by,
                scheduled_at=scheduled_at,
                status=AppointmentStatus.PENDING,
                notes=notes,
                created_at=now,
                updated_at=now,
            )
            self._appts[appt.id] = appt
            return replace(appt)

    def update(self, appointment_id: str, status: Optional[AppointmentStatus], notes: Optional[str]) -> Optional[AppointmentDto]:
        with self._lock:
            a = self._appts.get(appointment_id)
            if not a:
                return None
            if status is not None and status != a.status and status in (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED):
                other = self._active_in_slot(a.doctor_id, a.scheduled_at)
                if other and other.id != a.id:
                    raise SlotTakenError(f"{a.doctor_id}@{a.scheduled_at.isoformat()}")
            if status is not None:
                a.status = status
            if notes is not None:
                a.notes = notes
            a.updated_at = self._clock()
            return replace(a)

    def list(self, query: AppointmentQuery) -> Page[AppointmentDto]:
        with self._lock:
            rows = [replace(a) for a in self._appts.values()]
        if query.doctor_id is not None:
            rows = [a for a in rows if a.doctor_id == query.doctor_id]
        if query.patient_id is not None:
            rows = [a for a in rows if a.patient_id == query.patient_id]
        if query.status is not None:
            rows = [a for a in rows if a.status == query.status]
        if query.starts_at is not None:
            rows = [a for a in rows if a.scheduled_at >= query.starts_at]
        if query.ends_before is not None:
            rows = [a for a in rows if a.scheduled_at < query.ends_before]
        if query.order_by == "created_at":
            rows.sort(key=lambda a: (a.created_at, a.id), reverse=True)
        else:
            rows.sort(key=lambda a: (a.scheduled_at, a.id), reverse=True)
        start = offset_for(query.page, query.limit)
        return Page(
            items=rows[start:start + query.limit],
            page=query.page,
            limit=query.limit,
            total=len(rows),
        )
