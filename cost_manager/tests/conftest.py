from __future__ import annotations

import os
import pathlib
import sys

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("COST_MANAGER_DATABASE_URL", "sqlite://")

import cost_manager.models  # noqa: E402,F401  # Ensure models are registered with metadata
from cost_manager import database  # noqa: E402
from cost_manager.database import Base, make_engine  # noqa: E402
from cost_manager.server import app  # noqa: E402
from cost_manager.store import SqlRecordStore  # noqa: E402


@pytest.fixture(scope="session")
def engine():
    test_engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture()
def db_session(engine):
    connection = engine.connect()
    transaction = connection.begin()
    TestingSessionLocal = sessionmaker(bind=connection, autoflush=False, autocommit=False, future=True)
    session: Session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture()
def store(db_session):
    return SqlRecordStore(db_session)


@pytest.fixture()
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[database.get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
