"""
Test configuration and fixtures.

Provides:
- In-memory SQLite engine shared by the app and the test (StaticPool)
- Users for each role and bearer headers for them
- A recording WhatsApp gateway in place of the Evolution API
- A frozen clinic clock (Tuesday 2026-03-10 09:30, UTC-3)
"""
from datetime import date, datetime
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from agenda_clinica.core.deps import get_gateway
from agenda_clinica.core.security import token_for_user
from agenda_clinica.database import get_session
from agenda_clinica.main import app
from agenda_clinica.models import appointment, client_plan, notification_setting  # noqa: F401
from agenda_clinica.models.appointment import Appointment, CONFIRMED
from agenda_clinica.models.notification_setting import NotificationSetting
from agenda_clinica.models.user import User


FIXED_NOW = datetime(2026, 3, 10, 9, 30)  # terça-feira
TODAY = FIXED_NOW.date()
NEXT_MONDAY = date(2026, 3, 16)
SUNDAY = date(2026, 3, 15)


class FakeGateway:
    """Records messages instead of calling the Evolution API."""

    def __init__(self):
        self.sent = []
        self.succeed = True
        self.raise_for = set()

    def send_text(self, phone: str, text: str) -> bool:
        if phone in self.raise_for:
            raise RuntimeError(f"boom for {phone}")
        self.sent.append((phone, text))
        return self.succeed


# =============================================================================
# Database
# =============================================================================

@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture()
def session(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


# =============================================================================
# Clock
# =============================================================================

@pytest.fixture()
def frozen_clock(monkeypatch):
    def _now():
        return FIXED_NOW

    monkeypatch.setattr("agenda_clinica.routers.appointments.clinic_now", _now)
    monkeypatch.setattr("agenda_clinica.services.reservations.clinic_now", _now)
    monkeypatch.setattr("agenda_clinica.services.reminders.clinic_now", _now)
    return FIXED_NOW


# =============================================================================
# Users
# =============================================================================

def _user(session: Session, **fields) -> User:
    user = User(**fields)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture()
def admin(session) -> User:
    return _user(session, full_name="Admin", email="admin@test.com", phone="11911112222", role="admin")


@pytest.fixture()
def client_user(session) -> User:
    return _user(session, full_name="Maria", email="maria@test.com", phone="(11) 98888-7777", role="user")


@pytest.fixture()
def other_client(session) -> User:
    return _user(session, full_name="Joana", email="joana@test.com", phone="11955554444", role="user")


@pytest.fixture()
def partner(session) -> User:
    return _user(session, full_name="Ana", email="ana@test.com", phone="11977776666", role="partner")


def auth(user: User) -> dict:
    return {"Authorization": f"Bearer {token_for_user(user)}"}


# =============================================================================
# App
# =============================================================================

@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def api(session, gateway, frozen_clock) -> Generator[TestClient, None, None]:
    def _get_session():
        yield session

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def notifications_on(session):
    values = {
        "evolution_enabled": "true",
        "evolution_notifications_enabled": "true",
        "evolution_api_url": "https://evo.test/",
        "evolution_api_key": "secret-key-1234",
        "evolution_instance_name": "clinica",
        "whatsapp_msg_reminder_enabled": "true",
    }
    for key, value in values.items():
        session.add(NotificationSetting(key=key, value=value))
    session.commit()
    return values


def add_appointment(session: Session, user: User, day: date, time: str, status: str = CONFIRMED, **fields) -> Appointment:
    appt = Appointment(
        user_id=user.id,
        service_slug="limpeza-de-pele",
        service_title="Limpeza de Pele",
        appointment_date=day,
        appointment_time=time,
        status=status,
        **fields,
    )
    session.add(appt)
    session.commit()
    session.refresh(appt)
    return appt
