from datetime import datetime, timedelta, timezone

import mongomock
import pytest
from fastapi.testclient import TestClient

import database

BASE_TIME = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def mongo_db(monkeypatch):
    """Swap the module-level MongoDB handle for an in-memory one."""
    fake_db = mongomock.MongoClient()["bloodDonation_test"]
    monkeypatch.setattr(database, "db", fake_db)
    database.ensure_indexes()
    return fake_db


@pytest.fixture
def client(mongo_db):
    from main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def clock():
    """Returns successive timestamps one minute apart."""
    ticks = iter(BASE_TIME + timedelta(minutes=i) for i in range(1000))
    return lambda: next(ticks)


def make_donor(**overrides):
    donor = {
        "name": "Rahim Uddin",
        "location": "Dhaka",
        "email": "rahim@gmail.com",
        "bloodGroup": "O+",
        "phoneNumber": "01712345678",
    }
    donor.update(overrides)
    return {key: value for key, value in donor.items() if value is not None}


@pytest.fixture
def donor_payload():
    return make_donor
