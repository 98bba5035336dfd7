"""Event store interfaces and implementations for durable event persistence."""

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from ..domain.definition import AGGREGATE_ID, AGGREGATE_TYPE, AGGREGATE_VERSION
from ..domain.exceptions import ConcurrencyError, StreamExistsAlready, StreamNotFound
from ..domain.message import Message
from ..domain.metadata import MetadataMatcher, StreamName


@dataclass(frozen=True)
class Stream:
    """A named stream together with the events it should be created with."""

    name: StreamName
    events: tuple[Message, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def of(cls, name: StreamName, events: Iterable[Message]) -> "Stream":
        return cls(name, tuple(events))


class EventStore(ABC):
    """Abstract interface for durable event persistence.

    An event store keeps named, append-only streams of events. The kernel
    only ever checks whether a stream exists, reads a stream forward and
    writes to it, so this is the whole contract a storage engine has to meet.

    Key responsibilities:
    - **Ordering**: Events are stored and read back in append order
    - **Concurrency Control**: Appends that would overwrite an aggregate
      version already in the stream are rejected with ConcurrencyError
    - **Immutability**: Events cannot be modified after storage
    """

    @abstractmethod
    def has_stream(self, stream_name: StreamName) -> bool: ...

    @abstractmethod
    def load(
        self,
        stream_name: StreamName,
        from_number: int = 1,
        count: int | None = None,
        metadata_matcher: MetadataMatcher | None = None,
    ) -> Iterator[Message]:
        """Read a stream forward.

        Args:
            stream_name: The stream to read.
            from_number: 1-based stream position of the first event to read.
            count: Maximum number of events to return, None for no limit.
            metadata_matcher: Only events matching this filter are returned.

        Returns:
            A lazy, finite, forward-only iterator over the events.

        Raises:
            StreamNotFound: If the stream does not exist.
        """
        ...

    @abstractmethod
    def append_to(self, stream_name: StreamName, events: Iterable[Message]) -> None:
        """Append events to an existing stream.

        Raises:
            StreamNotFound: If the stream does not exist.
            ConcurrencyError: If an event's aggregate version has already
                been written for its aggregate.
        """
        ...

    @abstractmethod
    def create(self, stream: Stream) -> None:
        """Create a stream with its initial events.

        Raises:
            StreamExistsAlready: If a stream with the same name exists.
        """
        ...


class InMemoryEventStore(EventStore):
    """Dictionary-based in-memory event store for testing.

    Stores each stream as a list of events keyed by stream name. Optimistic
    concurrency is checked against the `_aggregate_version` metadata the
    kernel stamps on every event it persists: an append is rejected when it
    carries a version not above the highest one already stored for the same
    aggregate.

    This implementation is suitable for:
    - Unit tests (fast, no external dependencies)
    - Development and experimentation
    - Examples and documentation

    **NOT suitable for production** due to:
    - No durability (data lost on restart)
    - Memory usage grows unbounded
    - No distributed coordination
    """

    def __init__(self) -> None:
        self.streams: dict[StreamName, list[Message]] = {}
        self._lock = threading.Lock()

    def has_stream(self, stream_name: StreamName) -> bool:
        return stream_name in self.streams

    def load(
        self,
        stream_name: StreamName,
        from_number: int = 1,
        count: int | None = None,
        metadata_matcher: MetadataMatcher | None = None,
    ) -> Iterator[Message]:
        if stream_name not in self.streams:
            raise StreamNotFound(str(stream_name))
        if from_number < 1:
            raise ValueError("from_number must be 1 or greater")
        # Snapshot the list so concurrent appends don't leak into this read
        events = list(self.streams[stream_name])
        return self._iterate(events[from_number - 1 :], count, metadata_matcher)

    @staticmethod
    def _iterate(
        events: list[Message],
        count: int | None,
        metadata_matcher: MetadataMatcher | None,
    ) -> Iterator[Message]:
        returned = 0
        for event in events:
            if count is not None and returned >= count:
                return
            if metadata_matcher is None or metadata_matcher.matches(event):
                returned += 1
                yield event

    def append_to(self, stream_name: StreamName, events: Iterable[Message]) -> None:
        events = list(events)
        with self._lock:
            if stream_name not in self.streams:
                raise StreamNotFound(str(stream_name))
            stream = self.streams[stream_name]
            self._check_versions(stream, events)
            stream.extend(events)

    def create(self, stream: Stream) -> None:
        with self._lock:
            if stream.name in self.streams:
                raise StreamExistsAlready(str(stream.name))
            self.streams[stream.name] = list(stream.events)

    @staticmethod
    def _check_versions(stream: list[Message], events: list[Message]) -> None:
        current: dict[tuple[Any, Any], int] = {}
        for event in stream:
            key = _aggregate_key(event)
            version = event.metadata.get(AGGREGATE_VERSION)
            if key is not None and isinstance(version, int):
                current[key] = max(current.get(key, 0), version)

        for event in events:
            key = _aggregate_key(event)
            version = event.metadata.get(AGGREGATE_VERSION)
            if key is None or not isinstance(version, int):
                continue
            if version <= (stored := current.get(key, 0)):
                raise ConcurrencyError(
                    f"Aggregate {key[1]} is already at version {stored}, "
                    f"cannot append version {version}"
                )


def _aggregate_key(event: Message) -> tuple[Any, Any] | None:
    if AGGREGATE_ID not in event.metadata:
        return None
    return event.metadata.get(AGGREGATE_TYPE), event.metadata[AGGREGATE_ID]
