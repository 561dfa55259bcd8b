from dataclasses import dataclass
from typing import Dict, FrozenSet

from ...exceptions import ForbiddenError, ValidationError
from ..ports.appointments_repo import AppointmentDto, AppointmentStatus
from ..ports.user_repo import UserRole

S = AppointmentStatus

# Allowed status changes; same-status updates are always accepted
TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    S.PENDING: frozenset({S.CONFIRMED, S.COMPLETED, S.CANCELLED}),
    S.CONFIRMED: frozenset({S.COMPLETED, S.CANCELLED}),
    S.CANCELLED: frozenset(),
    S.COMPLETED: frozenset(),
}

DOCTOR_TARGETS = frozenset({S.CONFIRMED, S.COMPLETED, S.CANCELLED})
PATIENT_TARGETS = frozenset({S.CANCELLED})


@dataclass(frozen=True)
class Actor:
    """The authenticated caller of a workflow."""

    user_id: str
    role: UserRole


def check_transition(current: AppointmentStatus, target: AppointmentStatus) -> None:
    if target != current and target not in TRANSITIONS[current]:
        raise ValidationError("invalid status transition")


def authorize_update(actor: Actor, appointment: AppointmentDto, target: AppointmentStatus) -> None:
    """Owning doctor may confirm, complete or cancel; owning patient may only cancel.

    Both may edit notes, which is an update whose target is the current status.
    """
    if actor.role == UserRole.DOCTOR and actor.user_id == appointment.doctor_id:
        allowed = DOCTOR_TARGETS
    elif actor.role == UserRole.PATIENT and actor.user_id == appointment.patient_id:
        allowed = PATIENT_TARGETS
    else:
        raise ForbiddenError("not allowed to modify this appointment")
    if target != appointment.status and target not in allowed:
        raise ForbiddenError("not allowed to set this status")
