from datetime import date, datetime, timedelta

import pytest

from booking_api.application.ports.appointments_repo import AppointmentFilters, AppointmentStatus
from booking_api.application.ports.user_repo import UserRole
from booking_api.application.services.policies import Actor
from booking_api.exceptions import NotFoundError, ValidationError

BASE = datetime(2026, 3, 12, 9, 0)


def book_series(appt_service, doctor, patient, count, start=BASE):
    return [appt_service.book(doctor.id, patient.id, start + timedelta(hours=i)) for i in range(count)]


def test_doctor_listing_filters_by_status(appt_service, listing, doctor, patient):
    booked = book_series(appt_service, doctor, patient, 4)
    appt_service.cancel(booked[0].id, Actor(patient.id, UserRole.PATIENT))

    page = listing.list_for_doctor(doctor.id, AppointmentFilters(status=AppointmentStatus.PENDING, page=1, limit=10))
    assert len(page.items) == 3
    assert page.pagination() == {"page": 1, "limit": 10, "total": 3, "totalPages": 1}
    assert all(i.status == AppointmentStatus.PENDING for i in page.items)


def test_listing_is_newest_scheduled_first_and_expands_counterpart(appt_service, listing, doctor, patient):
    book_series(appt_service, doctor, patient, 3)
    items = listing.list_for_doctor(doctor.id).items
    times = [i.appointment.scheduled_at for i in items]
    assert times == sorted(times, reverse=True)
    first = items[0].to_dict()
    assert first["patient"] == {
        "id": patient.id,
        "name": "P",
        "email": "p@example.com",
        "photo_url": "https://img.example.com/p.png",
    }
    assert first["doctor"]["specialization"] == "Cardiology"


def test_patient_listing_expands_doctor(appt_service, listing, doctor, patient, other_patient):
    book_series(appt_service, doctor, patient, 2)
    appt_service.book(doctor.id, other_patient.id, BASE + timedelta(days=1))
    page = listing.list_for_patient(patient.id)
    assert page.total == 2
    assert {i.doctor.id for i in page.items} == {doctor.id}


def test_pages_concatenate_to_full_result(appt_service, listing, doctor, patient):
    book_series(appt_service, doctor, patient, 7)
    everything = [i.id for i in listing.list_for_doctor(doctor.id, AppointmentFilters(limit=100)).items]

    collected = []
    page_no = 1
    while True:
        page = listing.list_for_doctor(doctor.id, AppointmentFilters(page=page_no, limit=3))
        assert page.total_pages == 3
        if not page.items:
            break
        collected.extend(i.id for i in page.items)
        page_no += 1
    assert collected == everything
    assert len(set(collected)) == 7


def test_empty_listing_reports_zero_pages(listing, doctor):
    page = listing.list_for_doctor(doctor.id)
    assert page.items == []
    assert page.pagination() == {"page": 1, "limit": 10, "total": 0, "totalPages": 0}


def test_listing_is_repeatable(appt_service, listing, doctor, patient):
    book_series(appt_service, doctor, patient, 5)
    filters = AppointmentFilters(limit=2, page=2)
    first = [i.to_dict() for i in listing.list_for_doctor(doctor.id, filters).items]
    second = [i.to_dict() for i in listing.list_for_doctor(doctor.id, filters).items]
    assert first == second


def test_date_filter_matches_whole_calendar_day(appt_service, listing, doctor, patient):
    appt_service.book(doctor.id, patient.id, datetime(2026, 3, 12, 0, 0))
    appt_service.book(doctor.id, patient.id, datetime(2026, 3, 12, 14, 30))
    appt_service.book(doctor.id, patient.id, datetime(2026, 3, 12, 23, 59))
    appt_service.book(doctor.id, patient.id, datetime(2026, 3, 13, 0, 0))

    page = listing.list_for_doctor(doctor.id, AppointmentFilters(day=date(2026, 3, 12)))
    assert page.total == 3
    assert {i.appointment.scheduled_at.date() for i in page.items} == {date(2026, 3, 12)}


def test_unknown_or_wrong_role_owner(listing, doctor, patient):
    with pytest.raises(NotFoundError, match="doctor not found"):
        listing.list_for_doctor(patient.id)
    with pytest.raises(NotFoundError, match="patient not found"):
        listing.list_for_patient(doctor.id)
    with pytest.raises(NotFoundError, match="doctor not found"):
        listing.list_for_doctor("missing")


def test_list_all_filters_by_participant(appt_service, listing, doctor, patient, other_patient):
    book_series(appt_service, doctor, patient, 2)
    appt_service.book(doctor.id, other_patient.id, BASE + timedelta(days=2))
    assert listing.list_all().total == 3
    assert listing.list_all(patient_id=other_patient.id).total == 1


@pytest.mark.parametrize("kwargs", [
    {"page": 0},
    {"limit": 0},
    {"limit": 101},
    {"status": "DONE"},
])
def test_filters_validated_at_boundary(kwargs):
    with pytest.raises(ValidationError):
        AppointmentFilters.parse(**kwargs)


def test_filters_parse_strings():
    f = AppointmentFilters.parse(status="CANCELLED", date_str="2026-03-12", page=2, limit=5)
    assert f.status == AppointmentStatus.CANCELLED
    assert f.day == date(2026, 3, 12)
    assert (f.page, f.limit) == (2, 5)
    with pytest.raises(ValidationError, match="invalid date"):
        AppointmentFilters.parse(date_str="12/03/2026")


@pytest.mark.parametrize("value", ["2026-03-12junk", "2026-03-12 tomorrow", "2026-13-01"])
def test_filters_reject_malformed_dates(value):
    with pytest.raises(ValidationError, match="invalid date"):
        AppointmentFilters.parse(date_str=value)


@pytest.mark.parametrize("value", [
    "2026-03-12T23:30:00",
    "2026-03-13T01:00:00+02:00",
])
def test_filters_accept_full_datetimes_as_utc_day(value):
    assert AppointmentFilters.parse(date_str=value).day == date(2026, 3, 12)
