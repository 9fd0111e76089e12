"""Shared fixtures: an isolated SQLite database, sessions, an API client and tokens."""

import os
import tempfile
from typing import Generator
from uuid import uuid4

TEST_DB_PATH = os.path.join(tempfile.gettempdir(), f"droply_test_{os.getpid()}.db")
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["AUTH_JWT_SECRET"] = "test-secret"
os.environ["AUTH_JWT_ALGORITHM"] = "HS256"

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.orm import Session

from database import Base, SessionLocal, engine
from main import app


@pytest.fixture(scope="session", autouse=True)
def setup_test_database() -> Generator[None, None, None]:
    """Create the schema once and remove the database file afterwards."""
    Base.metadata.create_all(bind=engine)
    yield
    engine.dispose()
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def user_id() -> str:
    """A fresh owner per test keeps tests independent on the shared database."""
    return f"user_{uuid4().hex}"


@pytest.fixture()
def other_user_id() -> str:
    return f"user_{uuid4().hex}"


def make_token(user_id: str) -> str:
    return jwt.encode({"sub": user_id}, "test-secret", algorithm="HS256")


@pytest.fixture()
def auth_headers(user_id):
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client
