import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional, Union

from ...exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidReferenceError,
    NotFoundError,
    SlotTakenError,
    ValidationError,
)
from ...utils import earliest_bookable, to_naive_utc, utcnow
from ..ports.appointments_repo import AppointmentsRepository, AppointmentStatus
from ..ports.audit_logger import AuditLogger
from ..ports.user_repo import UserRepository, UserRole
from .expansion import ExpandedAppointment, expand_one
from .policies import Actor, authorize_update, check_transition

logger = logging.getLogger(__name__)


@dataclass
class AppointmentsService:
    """Booking and status lifecycle of appointments."""

    repo: AppointmentsRepository
    user_repo: UserRepository
    audit: Optional[AuditLogger] = None
    clock: Callable[[], datetime] = field(default=utcnow)

    def book(self, doctor_id: Optional[str], patient_id: Optional[str], scheduled_at: Optional[datetime], notes: Optional[str] = None, actor: Optional[Actor] = None) -> ExpandedAppointment:
        """Create a PENDING appointment.

        ``actor`` is the caller and becomes ``created_by``. A patient caller
        books for themselves: ``patient_id`` defaults to them and may not name
        anyone else. Without an actor the booking is recorded as made by the
        patient.
        """
        if not doctor_id or scheduled_at is None:
            raise ValidationError("missing required fields")
        if actor is not None and actor.role == UserRole.PATIENT:
            patient_id = patient_id or actor.user_id
            if patient_id != actor.user_id:
                raise ForbiddenError("patients may only book for themselves")
        if not patient_id:
            raise ValidationError("patient required")
        created_by = actor.user_id if actor is not None else patient_id

        scheduled_at = to_naive_utc(scheduled_at)
        if scheduled_at < earliest_bookable(self.clock()):
            raise ValidationError("date must be tomorrow or later")

        doctor = self.user_repo.get_by_id(doctor_id)
        if not doctor or not doctor.is_doctor:
            raise InvalidReferenceError("invalid doctor")
        patient = self.user_repo.get_by_id(patient_id)
        if not patient or not patient.is_patient:
            raise InvalidReferenceError("invalid patient")

        if self.repo.find_active_in_slot(doctor_id, scheduled_at):
            raise ConflictError("slot already booked")

        try:
            appt = self.repo.create(doctor_id, patient_id, created_by, scheduled_at, notes or "")
        except SlotTakenError:
            # Lost the race to a concurrent booking after the check above
            logger.info(f"Slot {doctor_id}@{scheduled_at.isoformat()} taken concurrently")
            raise ConflictError("slot already booked")

        logger.info(f"Appointment {appt.id} booked with doctor {doctor_id} at {scheduled_at.isoformat()}")
        self._audit("appointment.created", created_by, appt.id, {"doctor_id": doctor_id, "scheduled_at": scheduled_at.isoformat()})
        return ExpandedAppointment(appt, doctor, patient)

    def get(self, appointment_id: str) -> ExpandedAppointment:
        appt = self.repo.get_by_id(appointment_id)
        if not appt:
            raise NotFoundError("appointment not found")
        return expand_one(self.user_repo, appt)

    def update_status(self, appointment_id: str, actor: Actor, status: Union[str, AppointmentStatus, None] = None, notes: Optional[str] = None) -> ExpandedAppointment:
        appt = self.repo.get_by_id(appointment_id)
        if not appt:
            raise NotFoundError("appointment not found")

        target = AppointmentStatus.parse(status) if status else None
        authorize_update(actor, appt, target or appt.status)
        if target is not None:
            check_transition(appt.status, target)

        try:
            updated = self.repo.update(appointment_id, target, notes)
        except SlotTakenError:
            raise ConflictError("slot already booked")
        if not updated:
            raise NotFoundError("appointment not found")

        logger.info(f"Appointment {appointment_id} updated by {actor.user_id}: {appt.status.value} -> {updated.status.value}")
        self._audit(
            "appointment.updated",
            actor.user_id,
            appointment_id,
            {"from": appt.status.value, "to": updated.status.value, "notes_changed": notes is not None},
        )
        return expand_one(self.user_repo, updated)

    def cancel(self, appointment_id: str, actor: Actor) -> ExpandedAppointment:
        return self.update_status(appointment_id, actor, status=AppointmentStatus.CANCELLED)

    def _audit(self, action: str, actor_id: str, subject_id: str, details: dict) -> None:
        if self.audit is not None:
            self.audit.log(action, actor_id=actor_id, subject_id=subject_id, details=details)
