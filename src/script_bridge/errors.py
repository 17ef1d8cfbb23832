"""Typed exceptions for the script bridge.

This module defines a small, explicit exception hierarchy shared by the value
model, the event engine and the command binder.

Design intent:
    - Outcomes that are not errors stay as plain return values: a trigger
      that does not apply returns ``False``, an unknown context key returns
      ``None``.
    - Failures that must reach a script author raise typed exceptions that
      carry the identifiers needed to point at the offending parameter or
      script line.
    - Nothing raised here is meant to stop the host process.  Callers scope
      every failure to one event dispatch or one command invocation.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class ScriptLocation:
    """Where in a script an error originated.

    Attributes:
        script_name: Name of the script container (for example
            ``"loot_tweaks"``).
        line: 1-based source line of the trigger or command, ``0`` when
            unknown.
    """

    script_name: str
    line: int = 0

    def __str__(self) -> str:
        if self.line:
            return f"{self.script_name}:{self.line}"
        return self.script_name


class BridgeError(RuntimeError):
    """Base exception for bridge-layer failures."""


class ValueParseError(BridgeError):
    """A text form could not be coerced into the requested value type.

    Args:
        type_name: Name of the value type that was requested.
        text: The offending input text.
        details: Optional human-readable reason.
    """

    def __init__(self, type_name: str, text: str, details: str | None = None) -> None:
        message = f"Invalid {type_name} value '{text}'"
        if details:
            message = f"{message}: {details}"
        super().__init__(message)
        self.type_name = type_name
        self.text = text
        self.details = details


class ScriptRuntimeError(BridgeError):
    """A script-visible runtime failure tied to its source location.

    Raised when a script returns a determination whose payload cannot be
    applied.  The dispatcher aborts that trigger only; sibling triggers for
    the same event still run.
    """

    def __init__(
        self,
        message: str,
        *,
        location: ScriptLocation,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(f"[{location}] {message}")
        self.location = location
        self.cause = cause


class ArgumentError(BridgeError):
    """A command invocation could not be bound to its declared parameters.

    Attributes:
        reason: Human-readable explanation.
        parameter_name: Canonical name of the offending parameter, or
            ``None`` for aggregate failures (too many arguments, unexpected
            extra tokens).
    """

    def __init__(self, reason: str, parameter_name: str | None = None) -> None:
        if parameter_name:
            message = f"Invalid argument '{parameter_name}': {reason}"
        else:
            message = f"Invalid arguments: {reason}"
        super().__init__(message)
        self.reason = reason
        self.parameter_name = parameter_name


class InvalidArgumentsRuntimeError(BridgeError):
    """A command's invocation-time precondition failed hard.

    Bound arguments were valid, but the surrounding context cannot satisfy
    the command (for example no linked player to default the targets to).
    """


class SignatureError(ValueError):
    """A command declared an inconsistent parameter signature."""


class ScriptLoadError(ValueError):
    """A world-script file could not be turned into trigger declarations."""
