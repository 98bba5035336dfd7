from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)
from ulid import ULID

MetadataValue = str | int | float | bool | None


def utc_now() -> datetime:
    """Get the current UTC timestamp.

    Returns:
        Current datetime with UTC timezone information
    """
    return datetime.now(tz=timezone.utc)


class MessageType(str, Enum):
    COMMAND = "command"
    EVENT = "event"
    QUERY = "query"


class Message(BaseModel):
    """Immutable envelope for commands and events.

    A message carries a type name, a payload and scalar metadata. Messages
    are never mutated: payload and metadata are held as read-only mappings
    and enrichment via `with_added_metadata` returns a new message that
    shares the id, name and payload of the original.

    The `name` defaults to the class name, so subclasses can be used as
    named message types without repeating themselves:

    Examples:
        >>> class RegisterUser(Command):
        ...     pass
        >>>
        >>> command = RegisterUser(payload={"id": "1", "name": "Alex"})
        >>> command.name
        'RegisterUser'
        >>> enriched = command.with_added_metadata("_aggregate_id", "1")
        >>> dict(enriched.metadata)
        {'_aggregate_id': '1'}
        >>> dict(command.metadata)
        {}

    Attributes:
        id: Unique identifier for this message instance.
        name: Message type name used to route the message.
        payload: Application data carried by the message.
        metadata: Scalar values describing the message (aggregate id,
            aggregate version, causation and so on).
        message_type: Discriminator between commands, events and queries.
        created_at: When the message was created (UTC timezone).
    """

    model_config = ConfigDict(frozen=True)

    id: ULID = Field(default_factory=ULID)
    name: str
    payload: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)
    metadata: Mapping[str, MetadataValue] = Field(default_factory=dict, validate_default=True)
    message_type: MessageType = MessageType.COMMAND
    created_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="before")
    @classmethod
    def _default_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("name"):
            return {**data, "name": cls.__name__}
        return data

    @field_validator("payload", "metadata")
    @classmethod
    def _read_only(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(value))

    @field_serializer("payload", "metadata")
    def _plain_dict(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return dict(value)

    def with_added_metadata(self, key: str, value: MetadataValue) -> "Message":
        """Return a copy of this message with one more metadata entry.

        Args:
            key: Metadata key to add (or overwrite).
            value: Scalar value to store under the key.

        Returns:
            A new message of the same type; this message is left untouched.
        """
        metadata = MappingProxyType({**self.metadata, key: value})
        return self.model_copy(update={"metadata": metadata})

    def is_event(self) -> bool:
        return self.message_type is MessageType.EVENT


class Command(Message):
    """Base class for command messages (intents to change state)."""

    message_type: MessageType = MessageType.COMMAND


class DomainEvent(Message):
    """Base class for event messages (facts raised by command handlers)."""

    message_type: MessageType = MessageType.EVENT
