"""
Shared fixtures for the order record store test suite.

Every test gets its own in-memory SQLite engine; nothing is shared between tests.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OTEL_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from order_store.db import database
from order_store.db.database import build_engine, build_session_factory, create_tables, session_scope
from order_store.main import app


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    create_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
    with session_scope(session_factory) as session:
        yield session


@pytest.fixture
def client(session_factory):
    def override_get_db():
        with session_scope(session_factory) as session:
            yield session

    app.dependency_overrides[database.get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def product_id():
    return str(ObjectId())


@pytest.fixture
def buyer_id():
    return str(ObjectId())
