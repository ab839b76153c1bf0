# backend/tests/conftest.py
"""
Pytest configuration.

The environment is pinned BEFORE any pkasla import so the settings object,
the engine and the middleware stack are all built for an isolated SQLite
file database with rate limiting and Redis switched off.
"""

import os
from pathlib import Path
import tempfile

_TEST_DIR = Path(tempfile.mkdtemp(prefix="pkasla-tests-"))

os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DIR / 'test.db'}"
os.environ["NODE_ENV"] = "test"
os.environ["IS_TESTING"] = "true"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["REDIS_ENABLED"] = "false"
os.environ["STORAGE_PROVIDER"] = "local"
os.environ["STORAGE_LOCAL_PATH"] = str(_TEST_DIR / "uploads")
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Dict, Generator

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.orm import Session

from pkasla import models  # noqa: F401
from pkasla.auth import create_token_pair, get_password_hash
from pkasla.database import Base, SessionLocal, engine
from pkasla.main import app
from pkasla.models.user import User, UserRole, UserStatus
from pkasla.services.cache_service import reset_cache_service

TEST_PASSWORD = "TestPassword123!"


@pytest.fixture(autouse=True)
def _fresh_database() -> Generator[None, None, None]:
    """Every test starts with empty tables and an empty in-memory cache."""
    reset_cache_service()
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    reset_cache_service()


@pytest.fixture
def db() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def test_password() -> str:
    return TEST_PASSWORD


def _create_user(db: Session, email: str, name: str, role: str) -> User:
    user = User(
        name=name,
        email=email,
        hashed_password=get_password_hash(TEST_PASSWORD),
        role=role,
        status=UserStatus.ACTIVE.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_user(db: Session) -> User:
    return _create_user(db, "host@example.com", "Sophea Host", UserRole.USER.value)


@pytest.fixture
def other_user(db: Session) -> User:
    return _create_user(db, "other@example.com", "Dara Other", UserRole.USER.value)


@pytest.fixture
def test_admin(db: Session) -> User:
    return _create_user(db, "admin@example.com", "Site Admin", UserRole.ADMIN.value)


@pytest.fixture
def test_recruiter(db: Session) -> User:
    return _create_user(db, "recruiter@example.com", "Vanna Recruiter", UserRole.RECRUITER.value)


@pytest.fixture
def test_job_seeker(db: Session) -> User:
    return _create_user(db, "seeker@example.com", "Kanha Seeker", UserRole.JOB_SEEKER.value)


def bearer(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_token_pair(user)['access_token']}"}


@pytest.fixture
def headers_for():
    """Build bearer headers for an arbitrary user."""
    return bearer


@pytest.fixture
def auth_headers(test_user: User) -> Dict[str, str]:
    return bearer(test_user)


@pytest.fixture
def other_headers(other_user: User) -> Dict[str, str]:
    return bearer(other_user)


@pytest.fixture
def admin_headers(test_admin: User) -> Dict[str, str]:
    return bearer(test_admin)


@pytest.fixture
def recruiter_headers(test_recruiter: User) -> Dict[str, str]:
    return bearer(test_recruiter)


@pytest.fixture
def seeker_headers(test_job_seeker: User) -> Dict[str, str]:
    return bearer(test_job_seeker)
