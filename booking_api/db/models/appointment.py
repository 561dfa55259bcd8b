# booking_api/db/models/appointment.py
from sqlalchemy import DateTime, Index, text
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

from ...utils import utcnow

# Partial unique index over active appointments: one PENDING/CONFIRMED per slot.
# Datetime columns hold naive UTC.
ACTIVE_SLOT_PREDICATE = "status IN ('PENDING', 'CONFIRMED')"

class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_doctor_scheduled", "doctor_id", "scheduled_at"),
        Index("ix_appointments_patient_scheduled", "patient_id", "scheduled_at"),
        Index("ix_appointments_scheduled_status", "scheduled_at", "status"),
        Index(
            "uq_appointments_active_slot",
            "doctor_id",
            "scheduled_at",
            unique=True,
            sqlite_where=text(ACTIVE_SLOT_PREDICATE),
            postgresql_where=text(ACTIVE_SLOT_PREDICATE),
        ),
    )

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=36)
    doctor_id: str = Field(foreign_key="users.id", max_length=36)
    patient_id: str = Field(foreign_key="users.id", max_length=36)
    created_by: str = Field(foreign_key="users.id", max_length=36)
    scheduled_at: datetime = Field(sa_type=DateTime(timezone=False))
    status: str = Field(default="PENDING", max_length=16)
    notes: str = Field(default="")
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=False))
