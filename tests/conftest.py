"""
Shared pytest fixtures for tracker linking tests.

Provides pre-built registries and linkers.
"""

import pytest

from tracker_link.services.registry import TrackerRegistry
from tracker_link.services.tracker_linker import TrackerLinker

BUG_URL = 'http://bugs.example.org/show_bug.cgi?id=%n'
CLIENT_URL = 'http://crm.example.org/request?id=%n'


@pytest.fixture
def empty_registry():
    """Registry without keyword or default searches."""
    return TrackerRegistry()


@pytest.fixture
def bug_registry():
    """Registry with a single 'bug' keyword search and no default."""
    registry = TrackerRegistry()
    registry.add_keyword('bug', BUG_URL)
    return registry


@pytest.fixture
def bug_and_client_linker():
    """Linker with a 'bug' keyword search and an explicit client default search."""
    linker = TrackerLinker('bug', BUG_URL)
    linker.set_default(CLIENT_URL)
    return linker
