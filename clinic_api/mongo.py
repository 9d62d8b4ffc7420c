import os
from functools import lru_cache

from pymongo import MongoClient
from dotenv import load_dotenv

load_dotenv()

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "MedicalAppointments")

# Canonical collection names
PATIENTS = "patients"
DOCTORS = "doctors"
APPOINTMENTS = "appointments"
PRESCRIPTIONS = "prescriptions"


@lru_cache(maxsize=1)
def get_client() -> MongoClient:
    # MongoClient connects lazily, so this never blocks at import time
    return MongoClient(MONGO_URI)


def get_db():
    """FastAPI dependency handing the database handle to each request."""
    return get_client()[MONGO_DB_NAME]
