from pydantic import BaseModel
from typing import Optional

DEFAULT_STATUS = "Scheduled"
# Statuses accepted on transition; creation takes any string
APPOINTMENT_STATUSES = ("Scheduled", "Completed")


class AppointmentCreate(BaseModel):
    patient_id: Optional[str] = None
    doctor_id: Optional[str] = None
    date: Optional[str] = None  # "2024-01-01"
    time: Optional[str] = None  # "10:00"
    reason: str = ""
    notes: str = ""
    status: Optional[str] = None  # defaults to Scheduled


class StatusUpdate(BaseModel):
    status: Optional[str] = None
