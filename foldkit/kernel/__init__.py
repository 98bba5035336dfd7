"""The command dispatch pipeline.

- pipeline: error-short-circuiting function composition
- CommandMap, CommandRoute: command name to handler and definition
- DefinitionCache: one aggregate definition per command name
- load_state, load_events, reconstitute: state loading and event replay
- get_handler, invoke_handler: command handler lookup and invocation
- persist_events: event enrichment and persistence
- build_command_dispatcher, CommandDispatcher: the assembled pipeline
"""

from .cache import DefinitionCache
from .collaborators import (
    EventStoreFactory,
    SnapshotStoreFactory,
    event_store_from,
    snapshot_store_from,
)
from .command_map import CommandHandler, CommandMap, CommandRoute, DefinitionFactory
from .dispatcher import CommandDispatcher, build_command_dispatcher
from .handling import get_handler, invoke_handler
from .loading import (
    load_events,
    load_state,
    next_version,
    reconstitute,
    replay_after_snapshot,
    replay_from_start,
)
from .persistence import persist_events
from .pipeline import pipeline

__all__ = [
    "pipeline",
    # Routing
    "CommandMap",
    "CommandRoute",
    "CommandHandler",
    "DefinitionFactory",
    "DefinitionCache",
    "get_handler",
    "invoke_handler",
    # Collaborators
    "EventStoreFactory",
    "SnapshotStoreFactory",
    "event_store_from",
    "snapshot_store_from",
    # Loading and persistence
    "load_state",
    "load_events",
    "next_version",
    "reconstitute",
    "replay_from_start",
    "replay_after_snapshot",
    "persist_events",
    # Dispatch
    "CommandDispatcher",
    "build_command_dispatcher",
]
