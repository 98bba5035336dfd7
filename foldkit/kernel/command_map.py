from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from ..domain.definition import AggregateDefinition, State
from ..domain.message import Message
from ..domain.result import AggregateResult

CommandHandler = Callable[[State, Message], AggregateResult]
DefinitionFactory = Callable[[], AggregateDefinition]


@dataclass(frozen=True)
class CommandRoute:
    """Where a command goes: the handler to run and the aggregate it runs against.

    Attributes:
        handler: Pure function receiving (state, command) and returning an
            AggregateResult.
        definition: Zero-argument factory for the aggregate definition. A
            definition class works as its own factory.
    """

    handler: CommandHandler
    definition: DefinitionFactory


class CommandMap(Mapping[str, CommandRoute]):
    """Read-only registry mapping command names to their routes.

    Routes are registered while building the map, either with `add` or with
    the `handles` decorator, and the map is treated as read-only once handed
    to a dispatcher.

    Examples:
        Registering routes explicitly:

        >>> command_map = CommandMap()
        >>> command_map.add("RegisterUser", register_user, UserDefinition)
        >>> command_map.add("ChangeUserName", change_user_name, UserDefinition)

        Registering a handler with the decorator:

        >>> @command_map.handles("ChangeUserName", UserDefinition)
        ... def change_user_name(state, command):
        ...     ...

        Converting the dictionary form:

        >>> CommandMap.from_dict({
        ...     "RegisterUser": {"handler": register_user, "definition": UserDefinition},
        ... })
    """

    def __init__(self, routes: Mapping[str, CommandRoute] | None = None):
        self._routes: dict[str, CommandRoute] = dict(routes or {})

    @staticmethod
    def from_dict(routes: Mapping[str, Mapping[str, Any]]) -> "CommandMap":
        command_map = CommandMap()
        for command_name, route in routes.items():
            if "handler" not in route or "definition" not in route:
                raise ValueError(
                    f'Route for "{command_name}" needs both a "handler" and a "definition"'
                )
            command_map.add(command_name, route["handler"], route["definition"])
        return command_map

    def add(
        self,
        command_name: str,
        handler: CommandHandler,
        definition: DefinitionFactory,
    ) -> None:
        if not callable(handler):
            raise TypeError(f'Handler for "{command_name}" is not callable')
        if not callable(definition):
            raise TypeError(f'Definition factory for "{command_name}" is not callable')
        self._routes[command_name] = CommandRoute(handler, definition)

    def handles(
        self, command_name: str, definition: DefinitionFactory
    ) -> Callable[[CommandHandler], CommandHandler]:
        def register(handler: CommandHandler) -> CommandHandler:
            self.add(command_name, handler, definition)
            return handler

        return register

    def __getitem__(self, command_name: str) -> CommandRoute:
        return self._routes[command_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)


def as_command_map(routes: CommandMap | Mapping[str, Any]) -> CommandMap:
    if isinstance(routes, CommandMap):
        return routes
    return CommandMap.from_dict(routes)
