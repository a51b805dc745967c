# backend/tests/conftest.py
"""
Pytest configuration for the Tutorly backend.

Every test gets a fresh in-memory SQLite database with all tables created.
Route tests share that database with the application by overriding the
``get_db`` dependency, so rows created through the ``db`` fixture are
visible to requests and vice versa.

PostgreSQL-only DDL (overlap EXCLUDE constraints) is skipped on SQLite;
those paths are covered with mocked sessions instead.
"""

import os

# Keep a developer's .env out of the test settings
os.environ.setdefault("CI", "1")

from typing import Generator

from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import SecretStr
import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from tutorly import models  # noqa: F401  (registers tables)
from tutorly.api.dependencies.database import get_db
from tutorly.auth import create_access_token
from tutorly.core.config import Settings
from tutorly.core.enums import RoleName
from tutorly.database import Base, build_engine, build_session_factory
from tutorly.main import create_app
from tutorly.models.teacher import TeacherProfile
from tutorly.models.user import User

TEST_SECRET_KEY = "test-secret-key-not-for-production-use"


@pytest.fixture
def test_settings() -> Settings:
    """Settings for tests: in-memory SQLite and dummy provider credentials."""
    return Settings(
        environment="test",
        database_url="sqlite://",
        secret_key=SecretStr(TEST_SECRET_KEY),
        app_url="http://testserver",
        log_level="DEBUG",
        zoom_client_id="zoom-client-id",
        zoom_client_secret=SecretStr("zoom-client-secret"),
        google_client_id="google-client-id",
        google_client_secret=SecretStr("google-client-secret"),
    )


@pytest.fixture
def engine(test_settings: Settings) -> Generator[Engine, None, None]:
    engine = build_engine(test_settings.database_url)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory) -> Generator[Session, None, None]:
    """Database session for arranging and inspecting rows."""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


def _create_user(db: Session, email: str, role: str, *, with_profile: bool) -> User:
    user = User(email=email, full_name=email.split("@")[0].title(), role=role)
    db.add(user)
    db.flush()
    if with_profile:
        db.add(TeacherProfile(user_id=user.id))
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def teacher_user(db: Session) -> User:
    return _create_user(db, "teacher@example.com", RoleName.TEACHER.value, with_profile=True)


@pytest.fixture
def other_teacher_user(db: Session) -> User:
    return _create_user(db, "other.teacher@example.com", RoleName.TEACHER.value, with_profile=True)


@pytest.fixture
def student_user(db: Session) -> User:
    return _create_user(db, "student@example.com", RoleName.STUDENT.value, with_profile=False)


@pytest.fixture
def teacher_profile(db: Session, teacher_user: User) -> TeacherProfile:
    return db.query(TeacherProfile).filter(TeacherProfile.user_id == teacher_user.id).one()


@pytest.fixture
def other_teacher_profile(db: Session, other_teacher_user: User) -> TeacherProfile:
    return db.query(TeacherProfile).filter(TeacherProfile.user_id == other_teacher_user.id).one()


def auth_headers_for(user: User, settings: Settings) -> dict[str, str]:
    token = create_access_token({"sub": user.id}, settings)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers_teacher(teacher_user: User, test_settings: Settings) -> dict[str, str]:
    return auth_headers_for(teacher_user, test_settings)


@pytest.fixture
def auth_headers_other_teacher(other_teacher_user: User, test_settings: Settings) -> dict[str, str]:
    return auth_headers_for(other_teacher_user, test_settings)


@pytest.fixture
def auth_headers_student(student_user: User, test_settings: Settings) -> dict[str, str]:
    return auth_headers_for(student_user, test_settings)


@pytest.fixture
def app(test_settings: Settings, session_factory) -> FastAPI:
    application = create_app(test_settings)

    def override_get_db() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client
