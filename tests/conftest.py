from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from booking_api.application.ports.user_repo import UserRole
from booking_api.application.services.appointments_service import AppointmentsService
from booking_api.application.services.listing_service import ListingService
from booking_api.core.config import Settings
from booking_api.database import build_engine
from booking_api.infrastructure.persistence.memory import InMemoryStore
from booking_api.main import create_app

NOW = datetime(2026, 3, 10, 15, 30)
TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


class FixedClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class RecordingAudit:
    def __init__(self):
        self.entries = []

    def log(self, action, actor_id=None, subject_id=None, success=True, details=None):
        self.entries.append((action, actor_id, subject_id, success, details or {}))


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def store(clock):
    return InMemoryStore(clock=clock)


@pytest.fixture
def audit():
    return RecordingAudit()


@pytest.fixture
def appt_service(store, clock, audit):
    return AppointmentsService(repo=store.appointments, user_repo=store.users, audit=audit, clock=clock)


@pytest.fixture
def listing(store):
    return ListingService(repo=store.appointments, user_repo=store.users)


@pytest.fixture
def doctor(store):
    return store.users.create("Dr. A", "dr.a@example.com", "x", UserRole.DOCTOR, "Cardiology", None)


@pytest.fixture
def patient(store):
    return store.users.create("P", "p@example.com", "x", UserRole.PATIENT, None, "https://img.example.com/p.png")


@pytest.fixture
def other_patient(store):
    return store.users.create("Q", "q@example.com", "x", UserRole.PATIENT, None, None)


@pytest.fixture(params=["memory", "sql"])
def client(request, clock):
    settings = Settings(
        STORAGE_BACKEND=request.param,
        SECRET_KEY=TEST_SECRET,
        RATE_LIMIT_PER_MINUTE=10_000,
    )
    engine = build_engine("sqlite://") if request.param == "sql" else None
    app = create_app(settings=settings, engine=engine, clock=clock, bcrypt_rounds=4)
    with TestClient(app) as c:
        yield c
