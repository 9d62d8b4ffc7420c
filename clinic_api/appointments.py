from datetime import datetime, timezone

from clinic_api.errors import InvalidArgument, NotFound, store_errors
from clinic_api.identifiers import match_id, new_appointment_id, require_id
from clinic_api.models.appointment_model import (
    APPOINTMENT_STATUSES,
    DEFAULT_STATUS,
    AppointmentCreate,
)
from clinic_api.mongo import APPOINTMENTS
from clinic_api.reports import APPOINTMENT_DETAILS, run_report, serialize_document


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _require_text(value, field: str) -> str:
    if value is None or not value.strip():
        raise InvalidArgument(f"{field} is required")
    return value.strip()


def create_appointment(db, data: AppointmentCreate) -> str:
    patient_id = require_id(data.patient_id, "patient_id")
    doctor_id = require_id(data.doctor_id, "doctor_id")
    date = _require_text(data.date, "date")
    time = _require_text(data.time, "time")

    status = data.status.strip() if data.status and data.status.strip() else DEFAULT_STATUS
    now = _now()
    appointment = {
        "_id": new_appointment_id(),
        "patient_id": patient_id,
        "doctor_id": doctor_id,
        "date": date,
        "time": time,
        "reason": data.reason,
        "notes": data.notes,
        "status": status,
        "created_at": now,
        "updated_at": now,
    }
    with store_errors("create_appointment"):
        result = db[APPOINTMENTS].insert_one(appointment)
    return str(result.inserted_id)


def get_appointment(db, appointment_id: str) -> dict:
    appointment_id = require_id(appointment_id, "appointment id")
    with store_errors("get_appointment"):
        appointment = db[APPOINTMENTS].find_one({"_id": match_id(appointment_id)})
    if appointment is None:
        raise NotFound("Appointment not found")
    return serialize_document(appointment)


def get_appointment_details(db, appointment_id: str) -> dict:
    appointment_id = require_id(appointment_id, "appointment id")
    rows = run_report(db, APPOINTMENT_DETAILS, appointment_id=appointment_id)
    if not rows:
        raise NotFound("Appointment not found")
    return rows[0]


def update_status(db, appointment_id: str, status) -> str:
    appointment_id = require_id(appointment_id, "appointment id")
    if status is None or not status.strip():
        raise InvalidArgument("Status is required")
    status = status.strip()
    if status not in APPOINTMENT_STATUSES:
        raise InvalidArgument("Invalid status value")

    with store_errors("update_status"):
        result = db[APPOINTMENTS].update_one(
            {"_id": match_id(appointment_id)},
            {"$set": {"status": status, "updated_at": _now()}},
        )
    if result.matched_count == 0:
        raise NotFound("Appointment not found")
    return status


def delete_appointment(db, appointment_id: str) -> None:
    appointment_id = require_id(appointment_id, "appointment id")
    with store_errors("delete_appointment"):
        result = db[APPOINTMENTS].delete_one({"_id": match_id(appointment_id)})
    if result.deleted_count == 0:
        raise NotFound("Appointment not found")
