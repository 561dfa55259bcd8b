from datetime import datetime
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, func, select

from .....db.models import Appointment
from .....application.ports.appointments_repo import (
    ACTIVE_STATUSES,
    AppointmentDto,
    AppointmentQuery,
    AppointmentsRepository,
    AppointmentStatus,
)
from .....application.ports.pagination import Page, offset_for
from .....exceptions import SlotTakenError
from .....utils import utcnow

_ACTIVE_VALUES = [s.value for s in ACTIVE_STATUSES]


def _is_slot_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    # PostgreSQL names the index, SQLite lists the indexed columns
    return (
        "uq_appointments_active_slot" in message
        or "appointments.doctor_id, appointments.scheduled_at" in message
    )


class SqlAppointmentsRepository(AppointmentsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _appt_to_dto(self, a: Appointment) -> AppointmentDto:
        return AppointmentDto(
            id=a.id,
            doctor_id=a.doctor_id,
            patient_id=a.patient_id,
            created_by=a.created_by,
            scheduled_at=a.scheduled_at,
            status=AppointmentStatus(a.status),
            notes=a.notes,
            created_at=a.created_at,
            updated_at=a.updated_at,
        )

    def _commit(self, slot: str) -> None:
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            if _is_slot_violation(e):
                raise SlotTakenError(slot) from e
            raise

    def get_by_id(self, appointment_id: str) -> Optional[AppointmentDto]:
        a = self.session.get(Appointment, appointment_id)
        return self._appt_to_dto(a) if a else None

    def find_active_in_slot(self, doctor_id: str, scheduled_at: datetime) -> Optional[AppointmentDto]:
        existing = self.session.exec(
            select(Appointment)
            .where(Appointment.doctor_id == doctor_id)
            .where(Appointment.scheduled_at == scheduled_at)
            .where(col(Appointment.status).in_(_ACTIVE_VALUES))
        ).first()
        return self._appt_to_dto(existing) if existing else None

    def create(self, doctor_id: str, patient_id: str, created_by: str, scheduled_at: datetime, notes: str) -> AppointmentDto:
        appt = Appointment(
            doctor_id=doctor_id,
            patient_id=patient_id,
            created_by=created_by,
            scheduled_at=scheduled_at,
            status=AppointmentStatus.PENDING.value,
            notes=notes,
        )
        self.session.add(appt)
        self._commit(f"{doctor_id}@{scheduled_at.isoformat()}")
        self.session.refresh(appt)
        return self._appt_to_dto(appt)

    def update(self, appointment_id: str, status: Optional[AppointmentStatus], notes: Optional[str]) -> Optional[AppointmentDto]:
        a = self.session.get(Appointment, appointment_id)
        if not a:
            return None
        if status is not None:
            a.status = status.value
        if notes is not None:
            a.notes = notes
        a.updated_at = utcnow()
        self.session.add(a)
        self._commit(f"{a.doctor_id}@{a.scheduled_at.isoformat()}")
        self.session.refresh(a)
        return self._appt_to_dto(a)

    def list(self, query: AppointmentQuery) -> Page[AppointmentDto]:
        conditions = []
        if query.doctor_id is not None:
            conditions.append(Appointment.doctor_id == query.doctor_id)
        if query.patient_id is not None:
            conditions.append(Appointment.patient_id == query.patient_id)
        if query.status is not None:
            conditions.append(Appointment.status == query.status.value)
        if query.starts_at is not None:
            conditions.append(Appointment.scheduled_at >= query.starts_at)
        if query.ends_before is not None:
            conditions.append(Appointment.scheduled_at < query.ends_before)

        order_column = Appointment.created_at if query.order_by == "created_at" else Appointment.scheduled_at
        total = self.session.exec(select(func.count()).select_from(Appointment).where(*conditions)).one()
        rows = self.session.exec(
            select(Appointment)
            .where(*conditions)
            .order_by(col(order_column).desc(), col(Appointment.id).desc())
            .offset(offset_for(query.page, query.limit))
            .limit(query.limit)
        ).all()
        return Page(items=[self._appt_to_dto(r) for r in rows], page=query.page, limit=query.limit, total=total)
