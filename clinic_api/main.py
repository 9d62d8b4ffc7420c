import logging
import os
from typing import List, Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi_mcp import FastApiMCP

from clinic_api import appointments
from clinic_api.errors import register_exception_handlers
from clinic_api.identifiers import require_id
from clinic_api.models.appointment_model import AppointmentCreate, StatusUpdate
from clinic_api.models.models import (
    AppointmentDetails,
    DiagnosisCount,
    DoctorAppointmentCount,
    DoctorPatient,
    PrescribedMedication,
)
from clinic_api.mongo import APPOINTMENTS, DOCTORS, PATIENTS, get_db
from clinic_api.reports import (
    DIAGNOSIS_FREQUENCY,
    DOCTOR_APPOINTMENT_COUNTS,
    DOCTOR_PATIENTS,
    PRESCRIBED_MEDICATIONS,
    list_all,
    run_report,
)

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

PORT = int(os.getenv("PORT", "3000"))

app = FastAPI(title="Medical Appointments API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)


@app.get("/patients", operation_id="list_patients")
def list_patients(db=Depends(get_db)):
    return run_report(db, list_all(PATIENTS))


@app.get(
    "/patients/aggregated-diagnosis",
    operation_id="aggregated_diagnosis",
    response_model=List[DiagnosisCount],
)
def aggregated_diagnosis(db=Depends(get_db)):
    """
    How often each diagnosis appears across all patients' medical history
    """
    return run_report(db, DIAGNOSIS_FREQUENCY)


@app.get(
    "/patients/prescribed-meds",
    operation_id="prescribed_meds",
    response_model=List[PrescribedMedication],
)
def prescribed_meds(patientId: Optional[str] = Query(None), db=Depends(get_db)):
    patient_id = require_id(patientId, "patientId")
    return run_report(db, PRESCRIBED_MEDICATIONS, patient_id=patient_id)


@app.get("/doctors", operation_id="list_doctors")
def list_doctors(db=Depends(get_db)):
    return run_report(db, list_all(DOCTORS))


@app.get(
    "/doctors/appointments-count",
    operation_id="doctor_appointments_count",
    response_model=List[DoctorAppointmentCount],
)
def doctor_appointments_count(db=Depends(get_db)):
    """
    Appointments per doctor, busiest first. Appointments whose doctor
    no longer exists are left out.
    """
    return run_report(db, DOCTOR_APPOINTMENT_COUNTS)


@app.get(
    "/doctors/{doctor_id}/patients",
    operation_id="doctor_patients",
    response_model=List[DoctorPatient],
)
def doctor_patients(doctor_id: str, db=Depends(get_db)):
    doctor_id = require_id(doctor_id, "doctor id")
    return run_report(db, DOCTOR_PATIENTS, doctor_id=doctor_id)


@app.get("/appointments", operation_id="list_appointments")
def list_appointments(db=Depends(get_db)):
    return run_report(db, list_all(APPOINTMENTS))


@app.post("/appointments", status_code=201, operation_id="book_appointment")
def book_appointment(data: AppointmentCreate, db=Depends(get_db)):
    appointment_id = appointments.create_appointment(db, data)
    logging.info(f"Appointment {appointment_id} booked")
    return {
        "message": "Appointment booked successfully",
        "appointmentId": appointment_id,
    }


@app.get("/appointments/{appointment_id}", operation_id="get_appointment")
def get_appointment(appointment_id: str, db=Depends(get_db)):
    return appointments.get_appointment(db, appointment_id)


@app.get(
    "/appointments/{appointment_id}/details",
    operation_id="appointment_details",
    response_model=AppointmentDetails,
)
def appointment_details(appointment_id: str, db=Depends(get_db)):
    return appointments.get_appointment_details(db, appointment_id)


@app.put("/appointments/{appointment_id}", operation_id="update_appointment_status")
def update_appointment_status(appointment_id: str, data: StatusUpdate, db=Depends(get_db)):
    status = appointments.update_status(db, appointment_id, data.status)
    return {"message": "Appointment status updated", "status": status}


@app.delete("/appointments/{appointment_id}", operation_id="delete_appointment")
def delete_appointment(appointment_id: str, db=Depends(get_db)):
    appointments.delete_appointment(db, appointment_id)
    return {"message": "Appointment deleted successfully"}


mcp = FastApiMCP(app, include_operations=[
    "list_patients",
    "list_doctors",
    "list_appointments",
    "aggregated_diagnosis",
    "prescribed_meds",
    "doctor_appointments_count",
    "doctor_patients",
    "book_appointment",
    "get_appointment",
    "appointment_details",
    "update_appointment_status",
    "delete_appointment",
])
mcp.mount()


def run():
    uvicorn.run(app, host="0.0.0.0", port=PORT)


if __name__ == "__main__":
    run()
