# booking_api/schemas/appointments.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

class AppointmentCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    doctor_id: Optional[str] = Field(None, alias="doctorId")
    patient_id: Optional[str] = Field(None, alias="patientId")
    date: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=2000)

class AppointmentUpdate(BaseModel):
    status: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)
