"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import functools
import os
from unittest.mock import Mock

import pytest
from sqlalchemy.orm import sessionmaker

from database.database import build_engine
from database.models import Base
from database.uow import evaluation_uow


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring PostgreSQL (deselect with '-m \"not db\"')"
    )


@pytest.fixture
def sqlite_engine(tmp_path):
    """File-backed SQLite engine with all tables created; one database per test."""
    engine = build_engine(f"sqlite:///{tmp_path / 'foodeval.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine):
    return sessionmaker(bind=sqlite_engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def notifier():
    """Stand-in NotificationService recording every published batch."""
    return Mock()


@pytest.fixture
def uow_factory(session_factory, notifier):
    return functools.partial(evaluation_uow, notifier=notifier, session_factory=session_factory)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(scope="session")
def test_database():
    """
    Session-scoped PostgreSQL URL.

    Uses TEST_DATABASE_URL when set, otherwise starts a throwaway container
    through testcontainers. Skips when neither is available.
    """
    from tests import is_database_available, SKIP_DB_TESTS

    if SKIP_DB_TESTS:
        pytest.skip("SKIP_DB_TESTS is set")

    external_url = os.environ.get("TEST_DATABASE_URL")
    if external_url:
        if is_database_available(external_url):
            yield external_url
            return
        pytest.skip("External database not available")

    try:
        from testcontainers.postgres import PostgresContainer

        postgres = PostgresContainer(
            image="postgres:16-alpine",
            username="testuser",
            password="testpass",
            dbname="foodeval_test",
            driver="psycopg2",
        )
        postgres.start()
    except Exception as e:
        pytest.skip(f"Could not start test database container: {e}")

    try:
        yield postgres.get_connection_url()
    finally:
        postgres.stop()


@pytest.fixture
def pg_engine(test_database):
    engine = build_engine(test_database)
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def pg_uow_factory(pg_engine, notifier):
    factory = sessionmaker(bind=pg_engine, autocommit=False, autoflush=False, expire_on_commit=False)
    return functools.partial(evaluation_uow, notifier=notifier, session_factory=factory)


@pytest.fixture
def scenario(uow_factory):
    from tests.fixtures.evaluation_fixtures import EvaluationScenario
    return EvaluationScenario(uow_factory)
