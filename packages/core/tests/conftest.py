"""Shared fixtures for core tests."""

from __future__ import annotations

import pytest
from sample_entities import Person, make_people

from propfilter_core.bounds import build_default_bound_registry
from propfilter_core.memory import MemoryQuery


@pytest.fixture
def registry():
    """Fresh bound-type registry, safe to mutate in a test."""
    return build_default_bound_registry()


@pytest.fixture
def people():
    return make_people()


@pytest.fixture
def people_query(people):
    return MemoryQuery(people, entity=Person)
