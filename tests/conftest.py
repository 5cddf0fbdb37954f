"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from dag import DagManager, DagNode
from flow.onboarding import UserFlags, create_onboarding_resolver
from storage.flag_store import FlagStore

CONFIG_DIR = Path(__file__).parent.parent / "config"


@pytest.fixture
def store():
    """In-memory flag store."""
    return FlagStore()


@pytest.fixture
def user(store):
    return UserFlags(store)


@pytest.fixture
def resolver(store):
    """Onboarding flow resolver over the in-memory store."""
    return create_onboarding_resolver(store)


@pytest.fixture
def onboarding_config():
    return str(CONFIG_DIR / "onboarding_flow.json")


@pytest.fixture
def diamond():
    """a <- b, a <- c, (b, c) <- d."""
    a = DagNode("a", "A")
    b = DagNode("b", "B").depends_on(a)
    c = DagNode("c", "C").depends_on(a)
    d = DagNode("d", "D").depends_on(b, c)
    dag = DagManager()
    dag.add_nodes(a, b, c, d)
    return dag
