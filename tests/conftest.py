"""
Shared pytest configuration.
Uses an in-memory SQLite database and a fixed reference date.
"""
import os
from datetime import date, datetime
from types import SimpleNamespace

import pytest

# Must be set before the application modules are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["APP_TIMEZONE"] = "Europe/Paris"
os.environ.pop("BREVO_API_KEY", None)

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from securifeu import models, security
from securifeu.config import LOCAL_TZ
from securifeu.database import Base, get_db
from securifeu.dependencies import get_now
from securifeu.main import app

# Reference instant used by every API test
NOW = datetime(2024, 7, 5, 10, 30, tzinfo=LOCAL_TZ)
PASSWORD = "Secret123"


@pytest.fixture()
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_now] = lambda: NOW
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def user(db_session):
    u = models.User(
        email="tech@securifeu.fr",
        hashed_password=security.get_password_hash(PASSWORD),
        full_name="Technicien Test",
        is_active=True,
        token_version=0,
    )
    db_session.add(u)
    db_session.commit()
    db_session.refresh(u)
    return u


@pytest.fixture()
def auth_headers(user):
    return {"Authorization": f"Bearer {security.create_user_token(user)}"}


@pytest.fixture()
def materials(db_session):
    """One template per type, with the usual durations."""
    rows = {
        "PA": models.Material(type=models.MaterialType.PA, validity_time=1825, time_before_control=365, time_before_reload=90),
        "PP": models.Material(type=models.MaterialType.PP, validity_time=3650, time_before_control=365),
        "ALARM": models.Material(type=models.MaterialType.ALARM, validity_time=3650, time_before_control=180),
    }
    db_session.add_all(rows.values())
    db_session.commit()
    return rows


# --- plain records for the pure core ---

def make_material(type="PP", validity_time=3650, time_before_control=365, time_before_reload=None):
    return SimpleNamespace(
        id=1,
        type=type,
        validity_time=validity_time,
        time_before_control=time_before_control,
        time_before_reload=time_before_reload,
    )


def make_equipment(material, commissioning_date=date(2024, 1, 1), number=1, id=None,
                   last_verification_date=None, last_recharge_date=None):
    return SimpleNamespace(
        id=id if id is not None else number,
        number=number,
        commissioning_date=commissioning_date,
        last_verification_date=last_verification_date,
        last_recharge_date=last_recharge_date,
        material=material,
    )


def make_client(id, name, equipments, location="Lyon", contact_name="M. Dupont", phone=None, created_at=None):
    return SimpleNamespace(
        id=id,
        name=name,
        location=location,
        contact_name=contact_name,
        phone=phone,
        created_at=created_at,
        equipments=equipments,
    )
