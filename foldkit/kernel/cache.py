import threading

from ..domain.definition import AggregateDefinition
from ..domain.exceptions import BadCollaboratorFactory, UnknownCommand
from .command_map import CommandMap


class DefinitionCache:
    """Memoizes one aggregate definition per command name.

    The first lookup of a command name builds the definition from the
    command map and keeps it; every later lookup returns that same instance.
    Entries are never evicted.

    Lookups are safe from multiple threads. Construction happens outside the
    lock, so two threads racing on a first lookup may both build a
    definition, but only the first one stored is kept and returned to both.
    Definitions are stateless, so the discarded one is harmless.

    Examples:
        >>> cache = DefinitionCache()
        >>> first = cache.get("RegisterUser", command_map)
        >>> first is cache.get("RegisterUser", command_map)
        True
    """

    __slots__ = ("_definitions", "_lock")

    def __init__(self) -> None:
        self._definitions: dict[str, AggregateDefinition] = {}
        self._lock = threading.Lock()

    def get(self, command_name: str, command_map: CommandMap) -> AggregateDefinition:
        """Get the definition for a command name, building it on first use.

        Raises:
            UnknownCommand: If the command name is not in the command map.
            BadCollaboratorFactory: If the route's factory does not build an
                AggregateDefinition.
        """
        if (definition := self._definitions.get(command_name)) is not None:
            return definition

        if command_name not in command_map:
            raise UnknownCommand(command_name)

        candidate = command_map[command_name].definition()
        if not isinstance(candidate, AggregateDefinition):
            raise BadCollaboratorFactory(
                f'Definition factory for "{command_name}"', AggregateDefinition, candidate
            )
        with self._lock:
            return self._definitions.setdefault(command_name, candidate)

    def __contains__(self, command_name: object) -> bool:
        return command_name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)
