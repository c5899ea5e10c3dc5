"""
Pytest fixtures for Student Feedback Portal API tests.
Uses in-memory SQLite, a per-test upload directory and OTP store, provides student/admin users and tokens.
"""
import os
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Use in-memory SQLite for tests - set before config/session load
# Must override any .env DATABASE_URL
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"

from backend.app.db.base import Base
from backend.main import app
from backend.app.core.dependencies import get_db, get_otp_store, get_resume_directory
from backend.app.core.security import create_access_token, get_password_hash
from backend.app.models.user import User
from backend.app.services.otp_store import TtlStore
from backend.app.services.resume_storage import ResumeDirectory

# In-memory SQLite for tests - StaticPool ensures all sessions share same DB
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Patch the session module so app uses our test engine
import backend.app.db.session as session_module
session_module.engine = engine
session_module.SessionLocal = TestingSessionLocal
# main.py imports engine directly; patch so startup uses our engine
import backend.main as main_module
main_module.engine = engine


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_user(db, **overrides) -> User:
    """Insert a student; unspecified fields get valid defaults."""
    fields = dict(
        full_name="Test Student",
        email="student@example.com",
        roll_number="CS2021",
        college_name="City College",
        contact_no="9876543210",
        course="B.Tech",
        semester=3,
        hashed_password=get_password_hash("testpass123"),
        is_active=1,
    )
    fields.update(overrides)
    user = User(**fields)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def bearer(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.id), "email": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def db_session():
    """Create tables and a fresh DB session per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_user(db_session):
    """Create a test student in the DB."""
    return make_user(db_session, id=1)


@pytest.fixture
def admin_user(db_session):
    """Create an admin account (email carries the admin marker)."""
    return make_user(
        db_session,
        id=2,
        full_name="Site Admin",
        email="admin@college.edu",
        roll_number="ADM001",
        contact_no="9000000000",
    )


@pytest.fixture
def make_student(db_session):
    """Factory for extra students: make_student(full_name=..., roll_number=..., ...)."""
    return lambda **overrides: make_user(db_session, **overrides)


@pytest.fixture
def headers_for():
    """Bearer headers for any user."""
    return bearer


@pytest.fixture
def auth_headers(test_user):
    """Bearer token for test student."""
    return bearer(test_user)


@pytest.fixture
def admin_headers(admin_user):
    """Bearer token for admin."""
    return bearer(admin_user)


@pytest.fixture(autouse=True)
def upload_dir(tmp_path):
    """Per-test upload directory; the app's ResumeDirectory points here."""
    root = tmp_path / "uploads"
    root.mkdir()
    app.dependency_overrides[get_resume_directory] = lambda: ResumeDirectory(root)
    yield root
    app.dependency_overrides.pop(get_resume_directory, None)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def otp_store(clock):
    """Fresh OTP store per test, driven by the fake clock."""
    store = TtlStore(clock=clock)
    app.dependency_overrides[get_otp_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_otp_store, None)


@pytest.fixture
def client(db_session, test_user):
    """TestClient with DB and test student pre-seeded."""
    return TestClient(app)
