from dataclasses import dataclass
from typing import Optional

from ...exceptions import NotFoundError
from ...utils import day_bounds
from ..ports.appointments_repo import AppointmentFilters, AppointmentQuery, AppointmentsRepository
from ..ports.pagination import Page
from ..ports.user_repo import UserRepository
from .expansion import ExpandedAppointment, expand_many


@dataclass
class ListingService:
    """Read-only, paginated appointment listings with user expansion."""

    repo: AppointmentsRepository
    user_repo: UserRepository

    def list_for_doctor(self, doctor_id: str, filters: AppointmentFilters = AppointmentFilters()) -> Page[ExpandedAppointment]:
        doctor = self.user_repo.get_by_id(doctor_id)
        if not doctor or not doctor.is_doctor:
            raise NotFoundError("doctor not found")
        return self._list(filters, doctor_id=doctor_id)

    def list_for_patient(self, patient_id: str, filters: AppointmentFilters = AppointmentFilters()) -> Page[ExpandedAppointment]:
        patient = self.user_repo.get_by_id(patient_id)
        if not patient or not patient.is_patient:
            raise NotFoundError("patient not found")
        return self._list(filters, patient_id=patient_id)

    def list_all(self, filters: AppointmentFilters = AppointmentFilters(), doctor_id: Optional[str] = None, patient_id: Optional[str] = None) -> Page[ExpandedAppointment]:
        return self._list(filters, doctor_id=doctor_id, patient_id=patient_id, order_by="created_at")

    def _list(self, filters: AppointmentFilters, doctor_id: Optional[str] = None, patient_id: Optional[str] = None, order_by: str = "scheduled_at") -> Page[ExpandedAppointment]:
        starts_at = ends_before = None
        if filters.day is not None:
            starts_at, ends_before = day_bounds(filters.day)
        page = self.repo.list(AppointmentQuery(
            doctor_id=doctor_id,
            patient_id=patient_id,
            status=filters.status,
            starts_at=starts_at,
            ends_before=ends_before,
            page=filters.page,
            limit=filters.limit,
            order_by=order_by,
        ))
        return Page(
            items=expand_many(self.user_repo, page.items),
            page=page.page,
            limit=page.limit,
            total=page.total,
        )
