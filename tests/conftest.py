"""Central test fixtures - imports from the user test app."""

import pytest

from foldkit.config import KernelSettings
from foldkit.kernel import CommandMap, DefinitionCache, build_command_dispatcher
from foldkit.stores import InMemoryEventStore, InMemorySnapshotStore
from tests.fixtures.user_app import UserDefinition, user_command_map


@pytest.fixture
def settings() -> KernelSettings:
    """Settings independent of FOLDKIT_ environment variables."""
    return KernelSettings(log_level="INFO", stream_name_separator="-", enrich_with_causation=False)


@pytest.fixture
def event_store() -> InMemoryEventStore:
    """Create an in-memory event store."""
    return InMemoryEventStore()


@pytest.fixture
def snapshot_store() -> InMemorySnapshotStore:
    """Create an in-memory snapshot store."""
    return InMemorySnapshotStore()


@pytest.fixture
def user_definition(settings: KernelSettings) -> UserDefinition:
    return UserDefinition(settings)


@pytest.fixture
def command_map() -> CommandMap:
    """Command map routing the user commands to the user definition."""
    return user_command_map()


@pytest.fixture
def definition_cache() -> DefinitionCache:
    return DefinitionCache()


@pytest.fixture
def dispatch(command_map, event_store, snapshot_store, definition_cache, settings):
    """Dispatcher over in-memory event and snapshot stores."""
    return build_command_dispatcher(
        command_map,
        lambda: event_store,
        lambda: snapshot_store,
        definition_cache=definition_cache,
        settings=settings,
    )
