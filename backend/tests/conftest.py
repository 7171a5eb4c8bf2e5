"""
Pytest configuration for backend tests.

Provides an isolated SQLite database per test run using a temporary file
(rather than in-memory) to support multiple connections and sessions.

Fixtures:
- db_engine (session scope): Creates the engine, builds tables, and tears down.
- db_session (function scope): Provides a clean Session per test, with FK enabled.
- sql_store (function scope): SqlAlchemyStore over db_session.
- portal (function scope): seeded InMemoryStore world (see fakes.seed_portal).
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Generator

import pytest


# Ensure the 'backend' directory is on sys.path so we can import portal modules when running tests from repo root
CURRENT_DIR = Path(__file__).parent
BACKEND_ROOT = (CURRENT_DIR / "..").resolve()
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))
if str(CURRENT_DIR) not in sys.path:
    sys.path.insert(0, str(CURRENT_DIR))


@pytest.fixture(scope="session")
def db_engine(tmp_path_factory) -> "Generator":
    """
    Create a temporary file-based SQLite engine for the entire test session.
    Sets DATABASE_URL before importing the session module so it picks up this DB.
    """
    tmp_dir = tmp_path_factory.mktemp("db")
    db_file = tmp_dir / "test.db"
    db_url = f"sqlite:///{db_file.as_posix()}"

    os.environ["DATABASE_URL"] = db_url
    os.environ.setdefault("SQLALCHEMY_ECHO", "0")

    # Import after setting env vars so the module uses our test DB URL
    from portal.db.session import engine
    from portal.db.base import Base, import_all_models

    import_all_models()
    Base.metadata.create_all(bind=engine)

    try:
        yield engine
    finally:
        engine.dispose()
        if db_file.exists():
            db_file.unlink()


@pytest.fixture(scope="function")
def db_session(db_engine) -> "Generator":
    """
    Provide a fresh Session for each test function.
    Truncates tables before each test for isolation.
    """
    from portal.db.session import SessionLocal
    from portal.db.base import Base

    session = SessionLocal()

    # Truncate all tables before running the test (clean slate)
    try:
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
    except Exception:
        session.rollback()
        raise

    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def sql_store(db_session):
    from portal.repos.store import SqlAlchemyStore

    return SqlAlchemyStore(db_session)


@pytest.fixture()
def portal():
    from fakes import seed_portal

    return seed_portal()


@pytest.fixture()
def object_store():
    from fakes import FakeObjectStore

    return FakeObjectStore()


@pytest.fixture()
def client(portal, object_store):
    """
    TestClient over the real routers with the store and object store swapped for fakes.
    Authenticate by sending the principal id in the X-Principal-Id header.
    """
    from fastapi import FastAPI
    from fastapi.testclient import TestClient

    from portal.api.router import router as api_router
    from portal.core.deps import get_object_store, get_store
    from portal.core.errors import register_exception_handlers

    app = FastAPI()
    app.include_router(api_router)
    register_exception_handlers(app)
    app.dependency_overrides[get_store] = lambda: portal.store
    app.dependency_overrides[get_object_store] = lambda: object_store
    return TestClient(app)
