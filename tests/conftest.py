"""Shared fixtures: in-memory database, services and API client."""

from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from training_tracker import models  # noqa: F401  registers the tables
from training_tracker.config import Settings
from training_tracker.database import Base, get_db, enable_sqlite_foreign_keys
from training_tracker.main import app
from training_tracker.services.edition_service import EditionService
from training_tracker.services.task_service import TaskService

START = date(2024, 5, 20)
FIXED_NOW = datetime(2024, 6, 3, 9, 30)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def settings():
    return Settings(template_seeding_mode="atomic")


@pytest.fixture
def editions(db, settings):
    return EditionService(db, settings=settings)


@pytest.fixture
def tasks(db):
    return TaskService(db, clock=lambda: FIXED_NOW)


@pytest.fixture
def edition_data():
    return {
        "code": "2405-A",
        "training_type": "GLR",
        "start_date": START,
        "tasks_start_date": date(2024, 4, 15),
    }


@pytest.fixture
def seeded_edition(editions, edition_data):
    """GLR edition starting 2024-05-20 with the glr template"""
    return editions.create_edition_with_template(edition_data, "glr", today=START)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
