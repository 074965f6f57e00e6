from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from claimdesk import models  # noqa: F401
from claimdesk.checklist import REQUIRED_ITEMS
from claimdesk.database import Base, get_db
from claimdesk.main import app
from claimdesk.schemas.invoice import InvoiceCreate
from claimdesk.services.auth import Actor, ActorRole, AuthService
from claimdesk.services.invoices import InvoiceService

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def staff():
    return Actor(id="staff-1", role=ActorRole.STAFF, name="Asha Staff")


@pytest.fixture
def doctor_staff():
    return Actor(id="doc-7", role=ActorRole.DOCTOR_STAFF, name="Dr. Ravi")


@pytest.fixture
def admin():
    return Actor(id="admin-1", role=ActorRole.ADMIN, name="Admin")


def auth_headers(actor: Actor) -> dict:
    return {"Authorization": f"Bearer {AuthService.create_access_token(actor)}"}


@pytest.fixture
def staff_headers(staff):
    return auth_headers(staff)


@pytest.fixture
def doctor_headers(doctor_staff):
    return auth_headers(doctor_staff)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


def full_checklist() -> dict:
    return {item.value: True for item in REQUIRED_ITEMS}


def invoice_payload(**overrides) -> dict:
    payload = {
        "invoiceNumber": "INV-1001",
        "emrNumber": "EMR-500",
        "firstName": "Meera",
        "lastName": "Nair",
        "email": "meera@example.com",
        "mobileNumber": "9876543210",
        "gender": "Female",
        "doctor": "Dr. Ravi",
        "service": "Treatment",
        "treatment": "Root canal",
        "patientType": "New",
        "amount": "1000",
        "paid": "400",
        "paymentMethod": "Cash",
        "insurance": "Yes",
        "insuranceType": "Advance",
        "coPayPercent": "10",
        "advanceGivenAmount": "300",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_invoice(db, staff):
    def _make(**overrides):
        data = InvoiceCreate.model_validate(invoice_payload(**overrides))
        return InvoiceService.create_invoice(db, data, staff)

    return _make


def money(value) -> Decimal:
    return Decimal(str(value))
