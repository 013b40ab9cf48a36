"""SQLite-backed fixtures for the SQLAlchemy backend tests."""

from __future__ import annotations

import pytest
from sqla_models import Base, make_people
from sqlalchemy import create_engine
from sqlalchemy.orm import Session


@pytest.fixture
def engine():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        session.add_all(make_people())
        session.commit()
        yield session
