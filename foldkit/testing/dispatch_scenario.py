from collections.abc import Callable, Mapping
from types import TracebackType
from typing import Any

from typing_extensions import Self

from foldkit.config import KernelSettings
from foldkit.domain import Message, State, StreamName
from foldkit.kernel import CommandMap, build_command_dispatcher
from foldkit.stores import InMemoryEventStore, InMemorySnapshotStore, Snapshot, Stream

from .core import (
    ContainsErrorOfExactType,
    ContainsEventNamed,
    ContainsEventWithPayload,
    DoesNotHaveErrors,
    DoesNotHaveEvents,
    Expectation,
    FinalStateMatches,
    Outcome,
)


class DispatchScenario:
    """A scenario for testing command handlers through the full dispatch pipeline.

    This scenario allows you to test handlers and definitions by:
    - Given the events already in some streams and the snapshots already taken
    - When a list of commands are dispatched
    - Then a list of expectations are met

    Commands are dispatched against in-memory stores, so what is verified is
    exactly what a real dispatch would persist. The expectations are checked
    when the `with` block exits; an unmet one raises AssertionError.

    Examples:
        >>> with DispatchScenario(command_map) as scenario:
        ...     scenario.given_stream("user-1", user_registered)
        ...     scenario.when(ChangeUserName(payload={"id": "1", "name": "Sascha"}))
        ...     scenario.should_emit("UserNameChanged")
        ...     scenario.should_have_state(lambda state: state["name"] == "Sascha")
    """

    def __init__(
        self,
        command_map: CommandMap | Mapping[str, Any],
        use_snapshots: bool = True,
        settings: KernelSettings | None = None,
    ):
        self.event_store = InMemoryEventStore()
        self.snapshot_store = InMemorySnapshotStore()
        self.dispatch = build_command_dispatcher(
            command_map,
            lambda: self.event_store,
            (lambda: self.snapshot_store) if use_snapshots else None,
            settings=settings,
        )
        self.commands: list[Message] = []
        self.expectations: list[Expectation] = []

    def given_stream(self, stream_name: StreamName | str, *events: Message) -> Self:
        if isinstance(stream_name, str):
            stream_name = StreamName(stream_name)
        if self.event_store.has_stream(stream_name):
            self.event_store.append_to(stream_name, events)
        else:
            self.event_store.create(Stream.of(stream_name, events))
        return self

    def given_snapshot(self, *snapshots: Snapshot) -> Self:
        self.snapshot_store.save(*snapshots)
        return self

    def when(self, *commands: Message) -> Self:
        self.commands.extend(commands)
        return self

    def should_emit(self, *names_or_payloads: str | Mapping[str, Any]) -> Self:
        for expected in names_or_payloads:
            if isinstance(expected, str):
                self.expectations.append(ContainsEventNamed(expected))
            else:
                self.expectations.append(ContainsEventWithPayload(expected))
        return self

    def should_emit_nothing(self) -> Self:
        self.expectations.append(DoesNotHaveEvents())
        return self

    def should_succeed(self) -> Self:
        self.expectations.append(DoesNotHaveErrors())
        return self

    def should_fail_with(self, error_type: type[Exception]) -> Self:
        self.expectations.append(ContainsErrorOfExactType(error_type))
        return self

    def should_have_state(self, predicate: Callable[[State], bool]) -> Self:
        self.expectations.append(FinalStateMatches(predicate))
        return self

    def perform_actions(self) -> Outcome:
        outcome = Outcome(events=[], errors=[])
        for command in self.commands:
            result = self.dispatch(command)
            if result.is_ok():
                outcome.events.extend(result.value.raised_events)
                outcome.states.append(result.value.state)
            else:
                outcome.errors.append(result.error)
        return outcome

    def execute_scenario(self) -> Outcome:
        outcome = self.perform_actions()
        for expectation in self.expectations:
            expectation.assert_met(outcome)
        return outcome

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.execute_scenario()
