"""Aggregation pipelines behind the report endpoints.

Every report is plain data: the collection it reads, a function turning
request parameters into a list of pipeline stages, and a function shaping
each raw row into the response payload.  ``run_report`` is the only place
that talks to the store, so each endpoint is one line of wiring.

References between collections may be stored either as strings or as
native ObjectIds.  Joins therefore compare the string form of both sides
inside a ``$lookup`` sub-pipeline rather than relying on
``localField``/``foreignField`` equality.
"""

from typing import Callable, List, NamedTuple

from bson import ObjectId

from clinic_api.errors import store_errors
from clinic_api.identifiers import match_id
from clinic_api.mongo import APPOINTMENTS, DOCTORS, PATIENTS, PRESCRIPTIONS


def serialize_document(value):
    """Make a stored document JSON-safe (ObjectId -> hex string)."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: serialize_document(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_document(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# Stage helpers
# ---------------------------------------------------------------------------

def match(criteria: dict) -> dict:
    return {"$match": criteria}


def group_count(key, count_field: str = "count") -> dict:
    return {"$group": {"_id": key, count_field: {"$sum": 1}}}


def join_one(source: str, local_ref: str, as_field: str) -> dict:
    """Equality join on ``local_ref`` == ``source._id``, at most one match."""
    return {
        "$lookup": {
            "from": source,
            "let": {"ref": {"$toString": local_ref}},
            "pipeline": [
                {"$match": {"$expr": {"$eq": [{"$toString": "$_id"}, "$$ref"]}}},
                {"$limit": 1},
            ],
            "as": as_field,
        }
    }


def unwind(path: str, keep_empty: bool = False) -> dict:
    if keep_empty:
        return {"$unwind": {"path": path, "preserveNullAndEmptyArrays": True}}
    return {"$unwind": path}


def project(fields: dict) -> dict:
    return {"$project": fields}


def sort_desc(field: str) -> dict:
    return {"$sort": {field: -1}}


def limit(count: int) -> dict:
    return {"$limit": count}


def full_name(prefix: str) -> dict:
    return {"$concat": [f"${prefix}.first_name", " ", f"${prefix}.last_name"]}


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

class Report(NamedTuple):
    name: str
    collection: str
    stages: Callable[..., List[dict]]
    shape: Callable[[dict], dict] = serialize_document


def run_report(db, report: Report, **params) -> List[dict]:
    pipeline = report.stages(**params)
    with store_errors(report.name):
        rows = list(db[report.collection].aggregate(pipeline))
    return [report.shape(row) for row in rows]


def list_all(collection: str) -> Report:
    return Report(name=f"list_{collection}", collection=collection, stages=lambda: [])


def diagnosis_frequency_stages() -> List[dict]:
    # $unwind drops patients whose medical_history is empty or missing
    return [
        unwind("$medical_history"),
        group_count("$medical_history"),
        sort_desc("count"),
        project({"_id": 0, "diagnosis": "$_id", "count": 1}),
    ]


def doctor_appointment_count_stages() -> List[dict]:
    return [
        group_count({"$toString": "$doctor_id"}, "totalAppointments"),
        join_one(DOCTORS, "$_id", "doctor"),
        unwind("$doctor"),
        project({
            "_id": 0,
            "doctor_id": "$_id",
            "name": full_name("doctor"),
            "specialization": "$doctor.specialization",
            "totalAppointments": 1,
        }),
        sort_desc("totalAppointments"),
    ]


def prescribed_medication_stages(patient_id: str) -> List[dict]:
    return [
        match({"patient_id": match_id(patient_id)}),
        project({
            "_id": 0,
            "patient_id": 1,
            "medication": 1,
            "dosage": 1,
            "duration": 1,
            "prescribedDate": "$prescribed_date",
        }),
    ]


def appointment_detail_stages(appointment_id: str) -> List[dict]:
    return [
        match({"_id": match_id(appointment_id)}),
        limit(1),
        join_one(PATIENTS, "$patient_id", "patientDetails"),
        join_one(DOCTORS, "$doctor_id", "doctorDetails"),
        project({
            "_id": 1,
            "date": 1,
            "time": 1,
            "reason": 1,
            "status": 1,
            "notes": 1,
            "patientDetails": {"$arrayElemAt": ["$patientDetails", 0]},
            "doctorDetails": {"$arrayElemAt": ["$doctorDetails", 0]},
        }),
    ]


def shape_appointment_detail(row: dict) -> dict:
    row = serialize_document(row)
    # $arrayElemAt on an empty join leaves the field out entirely
    row.setdefault("patientDetails", None)
    row.setdefault("doctorDetails", None)
    return row


def doctor_patient_stages(doctor_id: str) -> List[dict]:
    return [
        match({"doctor_id": match_id(doctor_id)}),
        join_one(PATIENTS, "$patient_id", "patient"),
        join_one(DOCTORS, "$doctor_id", "doctor"),
        unwind("$patient", keep_empty=True),
        unwind("$doctor", keep_empty=True),
        project({
            "_id": 0,
            "appointment_id": {"$toString": "$_id"},
            "doctor_name": full_name("doctor"),
            "patient_name": full_name("patient"),
        }),
    ]


DIAGNOSIS_FREQUENCY = Report("aggregated_diagnosis", PATIENTS, diagnosis_frequency_stages)
DOCTOR_APPOINTMENT_COUNTS = Report("doctor_appointment_counts", APPOINTMENTS, doctor_appointment_count_stages)
PRESCRIBED_MEDICATIONS = Report("prescribed_meds", PRESCRIPTIONS, prescribed_medication_stages)
APPOINTMENT_DETAILS = Report("appointment_details", APPOINTMENTS, appointment_detail_stages, shape_appointment_detail)
DOCTOR_PATIENTS = Report("doctor_patients", APPOINTMENTS, doctor_patient_stages)
