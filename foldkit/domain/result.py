"""Result values produced by command handlers and by the dispatch pipeline.

`AggregateResult` is what a command handler returns. `Ok` and `Err` are the
two variants of the discriminated result the pipeline threads between its
stages and returns to the caller of a dispatcher.
"""

from collections.abc import Callable, Mapping
from typing import Any, Generic, NoReturn, TypeVar, Union

from .message import Message

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound=Exception)


class AggregateResult:
    """New aggregate state paired with the events raised to reach it.

    Instances are immutable: the raised events are held as a tuple in the
    order the handler raised them, and the state is exposed read-only.

    Examples:
        >>> result = AggregateResult({"id": "1", "version": 1}, user_registered)
        >>> result.state["version"]
        1
        >>> len(result.raised_events)
        1
    """

    __slots__ = ("_state", "_raised_events")

    def __init__(self, state: Mapping[str, Any], *raised_events: Message):
        self._state = dict(state)
        self._raised_events = tuple(raised_events)

    @property
    def state(self) -> dict[str, Any]:
        return dict(self._state)

    @property
    def raised_events(self) -> tuple[Message, ...]:
        return self._raised_events

    def with_events(self, *raised_events: Message) -> "AggregateResult":
        return AggregateResult(self._state, *raised_events)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AggregateResult):
            return NotImplemented
        return self._state == other._state and self._raised_events == other._raised_events

    def __repr__(self) -> str:
        return f"AggregateResult(state={self._state!r}, raised_events={len(self._raised_events)})"


class Ok(Generic[T]):
    """Successful result variant."""

    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        self._value = value

    @property
    def value(self) -> T:
        return self._value

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self._value

    def unwrap_or(self, default: T) -> T:
        return self._value

    def map(self, func: Callable[[T], U]) -> "Ok[U]":
        return Ok(func(self._value))

    def flat_map(self, func: "Callable[[T], Result[U, E]]") -> "Result[U, E]":
        return func(self._value)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Ok) and self._value == other._value

    def __repr__(self) -> str:
        return f"Ok({self._value!r})"


class Err(Generic[E]):
    """Error result variant.

    Carries the first error raised by a pipeline stage. `unwrap` re-raises it
    for callers that would rather work with exceptions.
    """

    __slots__ = ("_error",)

    def __init__(self, error: E) -> None:
        self._error = error

    @property
    def error(self) -> E:
        return self._error

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        raise self._error

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, func: Callable[[Any], Any]) -> "Err[E]":
        return self

    def flat_map(self, func: Callable[[Any], Any]) -> "Err[E]":
        return self

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Err) and self._error is other._error

    def __repr__(self) -> str:
        return f"Err({self._error!r})"


Result = Union[Ok[T], Err[E]]
