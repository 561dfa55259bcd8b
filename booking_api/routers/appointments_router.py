import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ..application.ports.appointments_repo import AppointmentFilters
from ..application.services.appointments_service import AppointmentsService
from ..application.services.listing_service import ListingService
from ..application.services.policies import Actor
from ..dependencies import (
    appointment_filters,
    get_appointments_service,
    get_current_actor,
    get_listing_service,
)
from ..exceptions import create_success_response
from ..schemas.appointments import AppointmentCreate, AppointmentUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def _page_response(page):
    return create_success_response(
        [item.to_dict() for item in page.items],
        pagination=page.pagination(),
    )


@router.get("")
def list_appointments(
    doctor_id: Optional[str] = Query(None, alias="doctorId"),
    patient_id: Optional[str] = Query(None, alias="patientId"),
    filters: AppointmentFilters = Depends(appointment_filters),
    actor: Actor = Depends(get_current_actor),
    listing: ListingService = Depends(get_listing_service),
):
    return _page_response(listing.list_all(filters, doctor_id=doctor_id, patient_id=patient_id))


@router.post("", status_code=201)
def book_appointment(
    body: AppointmentCreate,
    actor: Actor = Depends(get_current_actor),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.book(body.doctor_id, body.patient_id, body.date, body.notes, actor=actor)
    return JSONResponse(
        status_code=201,
        content=create_success_response(appt.to_dict(), message="Appointment booked successfully"),
    )


@router.get("/doctor/{doctor_id}")
def get_doctor_appointments(
    doctor_id: str,
    filters: AppointmentFilters = Depends(appointment_filters),
    actor: Actor = Depends(get_current_actor),
    listing: ListingService = Depends(get_listing_service),
):
    return _page_response(listing.list_for_doctor(doctor_id, filters))


@router.get("/patient/{patient_id}")
def get_patient_appointments(
    patient_id: str,
    filters: AppointmentFilters = Depends(appointment_filters),
    actor: Actor = Depends(get_current_actor),
    listing: ListingService = Depends(get_listing_service),
):
    return _page_response(listing.list_for_patient(patient_id, filters))


@router.get("/{appointment_id}")
def get_appointment(
    appointment_id: str,
    actor: Actor = Depends(get_current_actor),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    return create_success_response(appt_service.get(appointment_id).to_dict())


@router.put("/{appointment_id}")
def update_appointment(
    appointment_id: str,
    body: AppointmentUpdate,
    actor: Actor = Depends(get_current_actor),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.update_status(appointment_id, actor, status=body.status, notes=body.notes)
    return create_success_response(appt.to_dict(), message="Appointment updated successfully")


@router.delete("/{appointment_id}")
def cancel_appointment(
    appointment_id: str,
    actor: Actor = Depends(get_current_actor),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.cancel(appointment_id, actor)
    return create_success_response(appt.to_dict(), message="Appointment cancelled successfully")
