from unittest.mock import MagicMock

import mongomock
import pytest
from fastapi.testclient import TestClient

from clinic_api.main import app
from clinic_api.mongo import get_db

LIVE_DB_NAME = "clinic_api_test"


@pytest.fixture
def mongo_db():
    return mongomock.MongoClient()["MedicalAppointments"]


@pytest.fixture
def mock_db():
    return MagicMock()


@pytest.fixture(scope="session")
def mongod_client():
    """A throwaway mongod, for pipelines mongomock cannot execute."""
    pymongo_inmemory = pytest.importorskip("pymongo_inmemory")
    try:
        client = pymongo_inmemory.MongoClient()
        client.admin.command("ping")
    except Exception as e:
        pytest.skip(f"mongod could not be started: {e}")
    yield client
    client.close()


@pytest.fixture
def live_db(mongod_client):
    yield mongod_client[LIVE_DB_NAME]
    mongod_client.drop_database(LIVE_DB_NAME)


@pytest.fixture
def make_client():
    def _make(db, raise_server_exceptions=True):
        app.dependency_overrides[get_db] = lambda: db
        return TestClient(app, raise_server_exceptions=raise_server_exceptions)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client, mongo_db):
    return make_client(mongo_db)
