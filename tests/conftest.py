import os

# Set testing environment before the application reads its settings
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"

import pytest
from datetime import date
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from clinic_queue.main import app
from clinic_queue.core.database import get_db, get_redis, Base
from clinic_queue.models.appointment import Appointment, AppointmentStatus
from clinic_queue.models.doctor import Doctor
from clinic_queue.models.provider import HealthcareProvider, ProviderType

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False, "timeout": 30}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

VISIT_DAY = date(2026, 3, 2)


class FakeRedis:
    """In-memory stand-in for the few Redis commands the rate limiter uses."""

    def __init__(self):
        self.data = {}

    def setex(self, key, time, value):
        self.data[key] = str(value)
        return True

    def get(self, key):
        return self.data.get(key)

    def incr(self, key):
        self.data[key] = str(int(self.data.get(key, 0)) + 1)
        return int(self.data[key])


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(scope="function")
def test_db():
    # Create tables
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def client(test_db, fake_redis):
    app.dependency_overrides[get_redis] = lambda: fake_redis
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.pop(get_redis, None)


@pytest.fixture
def db_session(test_db):
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def doctor(db_session):
    provider = HealthcareProvider(
        name="City Clinic",
        type=ProviderType.CLINIC,
        address="12 Main Road",
        phone="555-0100"
    )
    db_session.add(provider)
    db_session.flush()

    doctor = Doctor(
        provider_id=provider.id,
        name="Dr. Asha Rao",
        specialty="General Medicine",
        consultation_fee=500
    )
    db_session.add(doctor)
    db_session.commit()
    db_session.refresh(doctor)
    return doctor


def booking_fields(doctor, patient_name="Test Patient"):
    return {
        "provider_id": doctor.provider_id,
        "doctor_name": doctor.name,
        "provider_name": "City Clinic",
        "patient_name": patient_name,
        "patient_phone": "555-0199",
        "consultation_fee": 500,
    }


def add_appointment(db, doctor, queue_number, time="09:00", day=VISIT_DAY,
                    status=AppointmentStatus.PENDING):
    """Insert an appointment with a fixed queue number, bypassing the allocator."""
    appointment = Appointment(
        **booking_fields(doctor, patient_name=f"Patient {queue_number}"),
        doctor_id=doctor.id,
        date=day,
        time=time,
        queue_number=queue_number,
        status=status
    )
    db.add(appointment)
    db.commit()
    db.refresh(appointment)
    return appointment
