import os

os.environ["DATABASE_URL"] = "sqlite+pysqlite://"
os.environ.pop("SEED_SUPER_ADMIN_EMAIL", None)
os.environ.pop("SEED_SUPER_ADMIN_PASSWORD", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sukuu.api.deps import get_db
from sukuu.db.base import Base
from sukuu.db.bootstrap import ensure_super_admin
from sukuu.main import app
from sukuu.services.rate_limit import clear_rate_limiter

SUPER_ADMIN_EMAIL = "root@sukuu.co.ke"
SUPER_ADMIN_PASSWORD = "super-secret-1"


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    with TestingSessionLocal() as db:
        ensure_super_admin(db, email=SUPER_ADMIN_EMAIL, password=SUPER_ADMIN_PASSWORD)
    yield TestingSessionLocal
    engine.dispose()


@pytest.fixture()
def client(session_factory):
    clear_rate_limiter()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    clear_rate_limiter()


def login_user(client, email, password):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
def super_admin_headers(client):
    return login_user(client, SUPER_ADMIN_EMAIL, SUPER_ADMIN_PASSWORD)


def create_school(client, headers, **overrides):
    payload = {
        "name": "Greenfield Academy",
        "school_email": "office@greenfield.ac.ke",
        "current_academic_year": "2026-2027",
        "currency": "kes",
        "timezone": "Africa/Nairobi",
    }
    payload.update(overrides)
    response = client.post("/api/superadmin/schools", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def create_school_admin(client, headers, school_id, email="admin@greenfield.ac.ke", password="admin-pass-1"):
    response = client.post(
        f"/api/superadmin/schools/{school_id}/admins",
        json={"first_name": "Amina", "last_name": "Otieno", "email": email, "password": password},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return login_user(client, email, password)


@pytest.fixture()
def school(client, super_admin_headers):
    return create_school(client, super_admin_headers)


@pytest.fixture()
def admin_headers(client, super_admin_headers, school):
    return create_school_admin(client, super_admin_headers, school["id"])


@pytest.fixture()
def academics(client, school, admin_headers):
    """One class, two subjects and two teachers in ``school``."""
    base = f"/api/schools/{school['id']}"

    def post(path, payload):
        response = client.post(f"{base}/{path}", json=payload, headers=admin_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return {
        "class": post("classes", {"name": "Form 1", "section": "East", "academic_year": "2026-2027"}),
        "other_class": post("classes", {"name": "Form 2", "section": "East", "academic_year": "2026-2027"}),
        "math": post("subjects", {"name": "Mathematics", "code": "mat"}),
        "english": post("subjects", {"name": "English", "code": "eng"}),
        "teacher": post("teachers", {"first_name": "Grace", "last_name": "Wanjiru", "email": "grace@greenfield.ac.ke"}),
        "other_teacher": post("teachers", {"first_name": "Peter", "last_name": "Kamau", "email": "peter@greenfield.ac.ke"}),
    }


def create_student(client, school, headers, **overrides):
    payload = {
        "student_id_number": "GF-001",
        "first_name": "Baraka",
        "last_name": "Mwangi",
        "date_of_birth": "2012-03-14",
        "gender": "MALE",
        "enrollment_date": "2025-01-06",
    }
    payload.update(overrides)
    response = client.post(f"/api/schools/{school['id']}/students", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture()
def pupils(client, school, admin_headers, academics):
    """Two students in ``academics["class"]`` and one in the other class."""
    class_id = academics["class"]["id"]
    return {
        "baraka": create_student(client, school, admin_headers, current_class_id=class_id),
        "akinyi": create_student(
            client,
            school,
            admin_headers,
            student_id_number="GF-002",
            first_name="Akinyi",
            last_name="Achieng",
            gender="FEMALE",
            current_class_id=class_id,
        ),
        "otieno": create_student(
            client,
            school,
            admin_headers,
            student_id_number="GF-003",
            first_name="Otieno",
            last_name="Omondi",
            current_class_id=academics["other_class"]["id"],
        ),
    }
