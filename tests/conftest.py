import os
import tempfile

# Point the app at throw-away storage before anything imports db/config
_TMP_DIR = tempfile.mkdtemp(prefix="crm-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["METRICS_STORE_PATH"] = os.path.join(_TMP_DIR, "metrics.json")
os.environ["APP_ENV"] = "test"

import pytest
from fastapi.testclient import TestClient

from db import Base, SessionLocal, engine
from main import app
from models.auth.user_models import User, UserRole
from models.students.student_models import Student
from services.activity_feed import activity_feeds
from services.security import hash_password

DEFAULT_PASSWORD = "Secret@123"


@pytest.fixture
def client():
    Base.metadata.drop_all(bind=engine)
    with TestClient(app) as test_client:
        activity_feeds.reset()
        yield test_client
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(client):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def _make_user(db, name, role):
    user = User(
        name=name,
        email=f"{name.lower().replace(' ', '.')}@example.com",
        password=hash_password(DEFAULT_PASSWORD),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def users(db):
    return {
        "admin": _make_user(db, "Ada Admin", UserRole.admin),
        "counselor": _make_user(db, "Cory Counselor", UserRole.counselor),
        "marketing": _make_user(db, "Mia Marketing", UserRole.marketing),
        "outsider": _make_user(db, "Otto Outsider", UserRole.telecaller),
    }


@pytest.fixture
def student(db, users):
    record = Student(
        first_name="Sam",
        last_name="Student",
        email="sam@example.com",
        counselor_id=users["counselor"].id,
        marketing_owner_id=users["marketing"].id,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


@pytest.fixture
def headers_for():
    def build(user):
        return {"X-User-ID": str(user.id)}
    return build
