from pydantic import BaseModel, Field

from typing import Any, Dict, Optional


# Stored values pass through as-is: diagnosis codes, dosages and the like
# may be numbers as well as strings.
class DiagnosisCount(BaseModel):
    diagnosis: Any
    count: int


class DoctorAppointmentCount(BaseModel):
    doctor_id: str
    name: Optional[str] = None
    specialization: Optional[Any] = None
    totalAppointments: int


class PrescribedMedication(BaseModel):
    patient_id: Any
    medication: Optional[Any] = None
    dosage: Optional[Any] = None
    duration: Optional[Any] = None
    prescribedDate: Optional[Any] = None


class AppointmentDetails(BaseModel):
    appointment_id: str = Field(alias="_id")
    date: Optional[Any] = None
    time: Optional[Any] = None
    reason: Optional[Any] = None
    status: Optional[Any] = None
    notes: Optional[Any] = None
    patientDetails: Optional[Dict[str, Any]] = None
    doctorDetails: Optional[Dict[str, Any]] = None


class DoctorPatient(BaseModel):
    appointment_id: str
    doctor_name: Optional[str] = None
    patient_name: Optional[str] = None
