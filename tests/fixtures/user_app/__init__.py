"""Test application package."""

from foldkit.kernel import CommandMap

from .user import (
    ChangeUserName,
    RegisterUser,
    SharedStreamUserDefinition,
    UserDefinition,
    UserNameChanged,
    UserRegistered,
    change_user_name,
    register_user,
)


def user_command_map(definition: type[UserDefinition] = UserDefinition) -> CommandMap:
    command_map = CommandMap()
    command_map.add("RegisterUser", register_user, definition)
    command_map.add("ChangeUserName", change_user_name, definition)
    return command_map


__all__ = [
    "RegisterUser",
    "ChangeUserName",
    "UserRegistered",
    "UserNameChanged",
    "UserDefinition",
    "SharedStreamUserDefinition",
    "register_user",
    "change_user_name",
    "user_command_map",
]
