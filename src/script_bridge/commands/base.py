"""Script commands and the registry that runs them.

A command is a subclass of :class:`AbstractCommand` with a class-level
:class:`CommandSignature` and a :meth:`~AbstractCommand.run` body.  The body
receives already-bound arguments; it never sees raw tokens.

    registry = CommandRegistry()
    registry.register(ChatCommand())

    ok, message = registry.execute(entry)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import ClassVar

from script_bridge.commands.binder import BoundArguments, bind_arguments
from script_bridge.commands.signature import CommandSignature
from script_bridge.entry import ScriptEntry
from script_bridge.errors import ArgumentError, InvalidArgumentsRuntimeError

logger = logging.getLogger(__name__)


class AbstractCommand(ABC):
    """Base class for script commands."""

    signature: ClassVar[CommandSignature]

    @property
    def name(self) -> str:
        return self.signature.name

    def bind(self, entry: ScriptEntry) -> BoundArguments:
        return bind_arguments(self.signature, entry.arguments, entry)

    @abstractmethod
    def run(self, entry: ScriptEntry, args: BoundArguments) -> None:
        """Execute the command with bound arguments.

        Raises:
            InvalidArgumentsRuntimeError: If the invocation context cannot
                satisfy the command.
        """


class CommandRegistry:
    """Commands by name; binds and executes script entries."""

    def __init__(self) -> None:
        self._commands: dict[str, AbstractCommand] = {}

    def register(self, command: AbstractCommand) -> None:
        name = command.name
        if name in self._commands:
            raise ValueError(f"Command '{name}' is already registered")
        self._commands[name] = command
        logger.debug("Registered command %s", name)

    def get(self, name: str) -> AbstractCommand | None:
        return self._commands.get(name.lower())

    @property
    def names(self) -> list[str]:
        return sorted(self._commands)

    def __iter__(self) -> Iterator[AbstractCommand]:
        return iter([self._commands[name] for name in self.names])

    def __len__(self) -> int:
        return len(self._commands)

    def execute(self, entry: ScriptEntry) -> tuple[bool, str]:
        """Bind and run *entry*.

        Binding completes before the command body starts, so a bad
        invocation never runs partially.  Failures are logged against the
        script line and reported, never raised.

        Returns:
            ``(True, "")`` on success, else ``(False, reason)``.
        """
        command = self.get(entry.command)
        if command is None:
            message = f"Unknown command '{entry.command}'"
            logger.error("[%s] %s", entry.location, message)
            return False, message

        try:
            args = command.bind(entry)
        except ArgumentError as exc:
            logger.error(
                "[%s] %s: %s (usage: %s)",
                entry.location,
                command.name,
                exc,
                command.signature.syntax,
            )
            return False, str(exc)

        entry.echo_debug(f"bound {dict(args)!r}")
        try:
            command.run(entry, args)
        except InvalidArgumentsRuntimeError as exc:
            logger.error("[%s] %s: %s", entry.location, command.name, exc)
            return False, str(exc)
        return True, ""
