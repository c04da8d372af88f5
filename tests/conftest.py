# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from cti_registry.core.security import create_access_token
from cti_registry.db.session import Base
from cti_registry.db.session import get_db as app_get_session
from cti_registry.main import app as fastapi_app
from cti_registry.models import IntelRecord
from cti_registry.services.registry import RegistryService

TEST_DB_URL = "sqlite://"

SUBMITTER = "0x1111111111111111111111111111111111111111"
VOTER = "0x2222222222222222222222222222222222222222"
OTHER_VOTER = "0x3333333333333333333333333333333333333333"


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def registry(db_session: Session) -> RegistryService:
    return RegistryService(db_session)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def auth_headers(identity: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(identity)}"}


@pytest.fixture()
def submitter_headers() -> dict[str, str]:
    """Return authorization headers for the record submitter."""
    return auth_headers(SUBMITTER)


@pytest.fixture()
def voter_headers() -> dict[str, str]:
    """Return authorization headers for a second identity."""
    return auth_headers(VOTER)


@pytest.fixture()
def submit_record(registry: RegistryService) -> Callable[..., int]:
    """Return a helper that submits a record with sensible defaults."""

    def _submit(
        title: str = "Test Threat",
        *,
        submitter: str = SUBMITTER,
        content_ref: str = "QmTestHash",
        category: str = "Malware",
    ) -> int:
        return registry.submit(
            content_ref=content_ref,
            category=category,
            title=title,
            submitter=submitter,
        )

    return _submit


@pytest.fixture()
def deactivate(db_session: Session) -> Callable[[int], None]:
    """Flip a record's active flag directly in storage."""

    def _deactivate(record_id: int) -> None:
        record = db_session.get(IntelRecord, record_id)
        assert record is not None
        record.active = False
        db_session.commit()

    return _deactivate
