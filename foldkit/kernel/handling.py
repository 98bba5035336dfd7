from ..domain.definition import State
from ..domain.exceptions import InvalidHandlerResult, UnknownCommand
from ..domain.message import Message
from ..domain.result import AggregateResult
from .command_map import CommandHandler, CommandMap


def get_handler(message: Message, command_map: CommandMap) -> CommandHandler:
    """Look up the handler registered for a message's name.

    Raises:
        UnknownCommand: If no route is registered under the message name.
    """
    if message.name not in command_map:
        raise UnknownCommand(message.name)
    return command_map[message.name].handler


def invoke_handler(handler: CommandHandler, state: State, message: Message) -> AggregateResult:
    """Run a handler and check that it returned an AggregateResult.

    The handler gets its own copy of the state so a misbehaving handler
    cannot change the state the caller holds.

    Raises:
        InvalidHandlerResult: If the handler returned anything else.
    """
    result = handler(dict(state), message)
    if not isinstance(result, AggregateResult):
        raise InvalidHandlerResult(result)
    return result
