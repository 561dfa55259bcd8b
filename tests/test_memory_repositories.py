import threading
from datetime import datetime, timedelta

from booking_api.application.ports.appointments_repo import AppointmentQuery
from booking_api.application.ports.user_repo import UserRole
from booking_api.infrastructure.persistence.memory import InMemoryStore

SLOT = datetime(2026, 3, 12, 10, 0)


def test_reads_are_safe_while_bookings_are_written():
    store = InMemoryStore()
    doctor = store.users.create("Dr. A", "dr.a@example.com", "x", UserRole.DOCTOR, "Cardiology", None)
    patient = store.users.create("P", "p@example.com", "x", UserRole.PATIENT, None, None)
    errors = []
    done = threading.Event()

    def write():
        try:
            for i in range(5000):
                store.appointments.create(doctor.id, patient.id, patient.id, SLOT + timedelta(minutes=i), "")
                store.users.create(f"U{i}", f"u{i}@example.com", "x", UserRole.PATIENT, None, None)
        finally:
            done.set()

    def read():
        try:
            while not done.is_set():
                store.appointments.find_active_in_slot(doctor.id, SLOT - timedelta(days=1))
                store.appointments.list(AppointmentQuery(doctor_id=doctor.id, limit=5))
                store.users.get_by_email("nobody@example.com")
                store.users.find_doctors(None, None, 1, 5)
        except Exception as exc:  # surfaced below
            errors.append(exc)

    writer = threading.Thread(target=write)
    reader = threading.Thread(target=read)
    reader.start()
    writer.start()
    writer.join()
    reader.join()

    assert errors == []
    assert store.appointments.list(AppointmentQuery(limit=1)).total == 5000


def test_returned_records_are_copies():
    store = InMemoryStore()
    doctor = store.users.create("Dr. A", "dr.a@example.com", "x", UserRole.DOCTOR, "Cardiology", None)
    patient = store.users.create("P", "p@example.com", "x", UserRole.PATIENT, None, None)
    appt = store.appointments.create(doctor.id, patient.id, patient.id, SLOT, "")

    listed = store.appointments.list(AppointmentQuery(doctor_id=doctor.id)).items[0]
    listed.notes = "mutated"
    assert store.appointments.get_by_id(appt.id).notes == ""
