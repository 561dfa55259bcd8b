from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..ports.appointments_repo import AppointmentDto
from ..ports.user_repo import UserDto, UserRepository


def doctor_summary(user: Optional[UserDto]) -> Optional[dict]:
    if user is None:
        return None
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "specialization": user.specialization,
        "photo_url": user.photo_url,
    }


def patient_summary(user: Optional[UserDto]) -> Optional[dict]:
    if user is None:
        return None
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "photo_url": user.photo_url,
    }


@dataclass
class ExpandedAppointment:
    """An appointment plus display fields of the users it references.

    The stored foreign keys stay untouched; ``doctor`` and ``patient`` are
    ``None`` only if the referenced user has since disappeared.
    """

    appointment: AppointmentDto
    doctor: Optional[UserDto]
    patient: Optional[UserDto]

    @property
    def id(self) -> str:
        return self.appointment.id

    @property
    def status(self):
        return self.appointment.status

    def to_dict(self) -> dict:
        a = self.appointment
        return {
            "id": a.id,
            "doctorId": a.doctor_id,
            "patientId": a.patient_id,
            "doctor": doctor_summary(self.doctor),
            "patient": patient_summary(self.patient),
            "date": a.scheduled_at.isoformat(),
            "status": a.status.value,
            "notes": a.notes,
            "createdBy": a.created_by,
            "createdAt": a.created_at.isoformat(),
            "updatedAt": a.updated_at.isoformat(),
        }


def expand_many(user_repo: UserRepository, appointments: Iterable[AppointmentDto]) -> List[ExpandedAppointment]:
    appointments = list(appointments)
    ids = set()
    for a in appointments:
        ids.add(a.doctor_id)
        ids.add(a.patient_id)
    users: Dict[str, UserDto] = user_repo.get_many(ids)
    return [ExpandedAppointment(a, users.get(a.doctor_id), users.get(a.patient_id)) for a in appointments]


def expand_one(user_repo: UserRepository, appointment: AppointmentDto) -> ExpandedAppointment:
    return expand_many(user_repo, [appointment])[0]
