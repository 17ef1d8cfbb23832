"""Script commands: signatures, the argument binder and the registry."""

from script_bridge.commands.base import AbstractCommand, CommandRegistry
from script_bridge.commands.binder import BoundArguments, bind_arguments
from script_bridge.commands.player import ChatCommand
from script_bridge.commands.signature import (
    DEFAULT_NULL,
    REQUIRED,
    CommandSignature,
    FromContext,
    ParameterSpec,
    ParamRole,
    SignatureBuilder,
)


def core_commands() -> list[AbstractCommand]:
    """Return one instance of every bundled command."""
    return [ChatCommand()]


def create_registry() -> CommandRegistry:
    """Return a registry with every bundled command registered."""
    registry = CommandRegistry()
    for command in core_commands():
        registry.register(command)
    return registry


__all__ = [
    "DEFAULT_NULL",
    "REQUIRED",
    "AbstractCommand",
    "BoundArguments",
    "ChatCommand",
    "CommandRegistry",
    "CommandSignature",
    "FromContext",
    "ParamRole",
    "ParameterSpec",
    "SignatureBuilder",
    "bind_arguments",
    "core_commands",
    "create_registry",
]
