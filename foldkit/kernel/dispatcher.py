import logging
from collections.abc import Mapping
from typing import Any

from ..config import KernelSettings
from ..domain.definition import AggregateDefinition, State
from ..domain.message import Message
from ..domain.result import AggregateResult, Result
from .cache import DefinitionCache
from .collaborators import EventStoreFactory, SnapshotStoreFactory, snapshot_store_from
from .command_map import CommandMap, as_command_map
from .handling import get_handler, invoke_handler
from .loading import load_state, reconstitute
from .persistence import persist_events
from .pipeline import pipeline

LOGGER = logging.getLogger(__name__)


class CommandDispatcher:
    """Runs commands through the event-sourcing pipeline.

    Each dispatch resolves the aggregate definition for the command, loads
    the aggregate's snapshotted state (when a snapshot store is configured),
    replays the events recorded since, hands the state to the command
    handler and persists the events the handler raised. Persistence is the
    last stage, so a failing dispatch never leaves a partial write behind.

    Dispatching never raises. The return value is `Ok(AggregateResult)` on
    success and `Err(error)` carrying the first error raised by any stage
    otherwise; callers tell them apart with `is_ok()` or `isinstance`.

    Dispatches are independent of each other apart from the shared
    definition cache, so one dispatcher can serve many threads.

    Examples:
        >>> dispatch = build_command_dispatcher(
        ...     command_map,
        ...     lambda: event_store,
        ...     lambda: snapshot_store,
        ... )
        >>> result = dispatch(RegisterUser(payload={"id": "1", "name": "Alex"}))
        >>> result.is_ok()
        True
        >>> result.unwrap().raised_events[0].metadata["_aggregate_version"]
        1
    """

    __slots__ = (
        "command_map",
        "event_store_factory",
        "snapshot_store_factory",
        "definition_cache",
        "settings",
    )

    def __init__(
        self,
        command_map: CommandMap,
        event_store_factory: EventStoreFactory,
        snapshot_store_factory: SnapshotStoreFactory | None = None,
        definition_cache: DefinitionCache | None = None,
        settings: KernelSettings | None = None,
    ):
        self.command_map = command_map
        self.event_store_factory = event_store_factory
        self.snapshot_store_factory = snapshot_store_factory
        self.definition_cache = definition_cache if definition_cache is not None else DefinitionCache()
        self.settings = settings or KernelSettings()

    def __call__(self, message: Message) -> Result[AggregateResult, Exception]:
        return self.dispatch(message)

    def dispatch(self, message: Message) -> Result[AggregateResult, Exception]:
        extra = {"command_name": getattr(message, "name", type(message).__name__)}
        LOGGER.log(self.settings.level, "Received Command", extra=extra)

        result = pipeline(
            self._resolve_definition,
            lambda definition: self._load_state(definition, message),
            lambda state: self._reconstitute_state(state, message),
            lambda state: self._handle_command(state, message),
            lambda aggregate_result: self._persist_events(aggregate_result, message),
        )(message)

        if result.is_err():
            LOGGER.warning(
                "Command failed",
                extra={**extra, "error_type": type(result.error).__name__},
            )
        else:
            LOGGER.log(
                self.settings.level,
                "Command handled",
                extra={**extra, "event_count": len(result.value.raised_events)},
            )
        return result

    def _resolve_definition(self, message: Message) -> AggregateDefinition:
        if not isinstance(message, Message):
            raise TypeError(f"Expected a Message, got {type(message).__name__}")
        return self.definition_cache.get(message.name, self.command_map)

    def _load_state(self, definition: AggregateDefinition, message: Message) -> State:
        if self.snapshot_store_factory is None:
            return {}
        return load_state(snapshot_store_from(self.snapshot_store_factory), message, definition)

    def _reconstitute_state(self, state: State, message: Message) -> State:
        definition = self._resolve_definition(message)
        return reconstitute(state, message, definition, self.event_store_factory)

    def _handle_command(self, state: State, message: Message) -> AggregateResult:
        handler = get_handler(message, self.command_map)
        return invoke_handler(handler, state, message)

    def _persist_events(self, aggregate_result: AggregateResult, message: Message) -> AggregateResult:
        definition = self._resolve_definition(message)
        causation = message if self.settings.enrich_with_causation else None
        return persist_events(
            aggregate_result,
            self.event_store_factory,
            definition,
            definition.extract_aggregate_id(message),
            causation,
        )


def build_command_dispatcher(
    command_map: CommandMap | Mapping[str, Any],
    event_store_factory: EventStoreFactory,
    snapshot_store_factory: SnapshotStoreFactory | None = None,
    *,
    definition_cache: DefinitionCache | None = None,
    settings: KernelSettings | None = None,
) -> CommandDispatcher:
    """Build a dispatcher for a command map and its store collaborators.

    Args:
        command_map: Routes from command name to handler and definition
            factory. A plain `{name: {"handler": ..., "definition": ...}}`
            dictionary is converted to a CommandMap.
        event_store_factory: Zero-argument factory returning the event store.
            Called on every stage that touches events.
        snapshot_store_factory: Optional zero-argument factory returning the
            snapshot store. Without one, state is always rebuilt by
            replaying the aggregate's whole history.
        definition_cache: Cache to share between dispatchers. Each dispatcher
            gets its own cache when omitted.
        settings: Kernel settings; read from the environment when omitted.

    Returns:
        A callable dispatcher returning `Ok(AggregateResult)` or `Err(error)`.

    Raises:
        ValueError: If a dictionary route lacks a handler or definition.
        TypeError: If a route's handler or definition factory is not callable.
    """
    return CommandDispatcher(
        as_command_map(command_map),
        event_store_factory,
        snapshot_store_factory,
        definition_cache,
        settings,
    )
