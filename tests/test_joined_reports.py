"""Join reports executed by a real mongod.

References are seeded in both stored forms: doctor D1 and patient P1 have
string ids, the other doctor and patient have native ObjectIds, and the
appointments point at them either way.  Two appointments reference records
that do not exist.
"""

import pytest
from bson import ObjectId

from clinic_api.reports import (
    APPOINTMENT_DETAILS,
    DOCTOR_APPOINTMENT_COUNTS,
    DOCTOR_PATIENTS,
    run_report,
)

DERM_ID = ObjectId("64b7f0c2e4b0a1a2b3c4d5e6")
BEN_ID = ObjectId("64b7f0c2e4b0a1a2b3c4d5e7")


@pytest.fixture
def seeded_db(live_db):
    live_db.doctors.insert_many([
        {"_id": "D1", "first_name": "Sara", "last_name": "Malik", "specialization": "Cardiology"},
        {"_id": DERM_ID, "first_name": "Ahmed", "last_name": "Raza", "specialization": "Dermatology"},
    ])
    live_db.patients.insert_many([
        {"_id": "P1", "first_name": "Ana", "last_name": "Diaz", "medical_history": ["Asthma"]},
        {"_id": BEN_ID, "first_name": "Ben", "last_name": "Ode", "medical_history": []},
    ])
    live_db.appointments.insert_many([
        {"_id": "apt1", "patient_id": "P1", "doctor_id": "D1", "date": "2024-01-01", "time": "09:00", "status": "Scheduled"},
        {"_id": "apt2", "patient_id": str(BEN_ID), "doctor_id": DERM_ID, "date": "2024-01-02", "time": "10:00", "status": "Scheduled"},
        {"_id": "apt3", "patient_id": "P1", "doctor_id": str(DERM_ID), "date": "2024-01-03", "time": "11:00", "status": "Completed"},
        {"_id": "apt4", "patient_id": "P404", "doctor_id": DERM_ID, "date": "2024-01-04", "time": "12:00", "status": "Scheduled"},
        {"_id": "apt5", "patient_id": "P1", "doctor_id": "D404", "date": "2024-01-05", "time": "13:00", "status": "Scheduled"},
    ])
    return live_db


def test_doctor_counts_group_both_reference_forms(seeded_db):
    rows = run_report(seeded_db, DOCTOR_APPOINTMENT_COUNTS)

    assert rows == [
        {"doctor_id": str(DERM_ID), "name": "Ahmed Raza", "specialization": "Dermatology", "totalAppointments": 3},
        {"doctor_id": "D1", "name": "Sara Malik", "specialization": "Cardiology", "totalAppointments": 1},
    ]


def test_doctor_counts_drop_unknown_doctors(seeded_db):
    rows = run_report(seeded_db, DOCTOR_APPOINTMENT_COUNTS)

    assert "D404" not in {row["doctor_id"] for row in rows}
    resolvable = seeded_db.appointments.count_documents({"doctor_id": {"$ne": "D404"}})
    assert sum(row["totalAppointments"] for row in rows) == resolvable
    counts = [row["totalAppointments"] for row in rows]
    assert counts == sorted(counts, reverse=True)


def test_details_join_native_patient_through_string_reference(seeded_db):
    [row] = run_report(seeded_db, APPOINTMENT_DETAILS, appointment_id="apt2")

    assert row["_id"] == "apt2"
    assert row["patientDetails"]["_id"] == str(BEN_ID)
    assert row["patientDetails"]["first_name"] == "Ben"
    assert row["doctorDetails"]["_id"] == str(DERM_ID)


def test_details_with_dangling_patient(seeded_db):
    [row] = run_report(seeded_db, APPOINTMENT_DETAILS, appointment_id="apt4")

    assert row["patientDetails"] is None
    assert row["doctorDetails"]["specialization"] == "Dermatology"
    assert row["status"] == "Scheduled"


def test_details_of_unknown_appointment_is_empty(seeded_db):
    assert run_report(seeded_db, APPOINTMENT_DETAILS, appointment_id="apt404") == []


def test_doctor_patients_match_either_reference_form(seeded_db):
    rows = run_report(seeded_db, DOCTOR_PATIENTS, doctor_id=str(DERM_ID))

    by_appointment = {row["appointment_id"]: row for row in rows}
    assert set(by_appointment) == {"apt2", "apt3", "apt4"}
    assert by_appointment["apt2"]["patient_name"] == "Ben Ode"
    assert by_appointment["apt3"]["patient_name"] == "Ana Diaz"
    assert by_appointment["apt4"]["patient_name"] is None
    assert {row["doctor_name"] for row in rows} == {"Ahmed Raza"}


def test_doctor_patients_for_unknown_doctor_keep_the_row(seeded_db):
    rows = run_report(seeded_db, DOCTOR_PATIENTS, doctor_id="D404")

    assert rows == [{"appointment_id": "apt5", "doctor_name": None, "patient_name": "Ana Diaz"}]


def test_details_endpoint_against_mongod(make_client, seeded_db):
    client = make_client(seeded_db)

    response = client.get("/appointments/apt4/details")

    assert response.status_code == 200
    body = response.json()
    assert body["_id"] == "apt4"
    assert body["patientDetails"] is None
    assert body["doctorDetails"]["first_name"] == "Ahmed"
    assert client.get("/appointments/apt404/details").status_code == 404


def test_counts_endpoint_against_mongod(make_client, seeded_db):
    client = make_client(seeded_db)

    response = client.get("/doctors/appointments-count")

    assert response.status_code == 200
    assert [row["totalAppointments"] for row in response.json()] == [3, 1]
