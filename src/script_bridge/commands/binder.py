"""Argument binder: raw command tokens to typed, validated parameters.

Binding runs in a fixed order, and the command body only ever sees a
complete result:

1. Argument count against the signature's min/max, one aggregate error.
2. Partition tokens into flags, ``name:value`` prefixed tokens and plain
   tokens.  A token whose prefix is not a declared parameter is a plain
   token when the command tolerates extras or a positional parameter is
   still unfilled (``minecraft:diamond`` as an item); otherwise it is an
   error.
3. Plain tokens bind left to right to positional parameters; the linear
   parameter takes everything left, joined with spaces.
4. Conversion: list parameters split on ``|`` and convert element by
   element; one bad element fails the whole parameter.
5. Defaults for absent parameters.

Every failure is an :class:`ArgumentError` carrying the canonical name of
the one parameter at fault.  Tokens no parameter can take are blamed on the
last sequential parameter, whose cardinality they exceed.  Only aggregate
count errors, and stray tokens for a command without parameters, carry
``None``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from script_bridge.commands.signature import (
    DEFAULT_NULL,
    CommandSignature,
    FromContext,
    ParameterSpec,
    ParamRole,
)
from script_bridge.entry import ScriptEntry
from script_bridge.errors import ArgumentError, ValueParseError
from script_bridge.values import ElementValue, ListValue, ParseContext, Value

logger = logging.getLogger(__name__)

_PREFIX_RE = re.compile(r"^(?P<prefix>[A-Za-z_][A-Za-z0-9_]*):(?P<value>.*)$", re.DOTALL)


class BoundArguments(Mapping[str, Any]):
    """Read-only mapping of canonical parameter name to bound value.

    Total over the signature: every declared parameter has an entry, with
    ``None`` for absent ``DEFAULT_NULL`` parameters.
    """

    def __init__(self, values: dict[str, Any], extras: Sequence[str] = ()) -> None:
        self._values = dict(values)
        self._extras = tuple(extras)

    @property
    def extras(self) -> tuple[str, ...]:
        """Leftover tokens passed through by commands that tolerate extras."""
        return self._extras

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"BoundArguments({self._values!r})"


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


def _convert_one(param: ParameterSpec, text: str, context: ParseContext) -> Any:
    kind = param.kind
    if kind is str:
        return text
    element = ElementValue(text)
    if kind is int:
        return element.as_int()
    if kind is float:
        return element.as_double()
    if kind is bool:
        return element.as_boolean()
    if issubclass(kind, Value):
        return kind.value_of(text, context)
    raise TypeError(f"Unsupported parameter kind {kind!r}")


def _convert(param: ParameterSpec, text: str, context: ParseContext) -> Any:
    try:
        if param.many:
            return [
                _convert_one(param, item.identify(), context)
                for item in ListValue.value_of(text)
            ]
        return _convert_one(param, text, context)
    except ValueParseError as exc:
        raise ArgumentError(
            f"'{text}' is not a valid {param.kind_name}: {exc}", param.name
        ) from exc


def _default(param: ParameterSpec, entry: ScriptEntry, context: ParseContext) -> Any:
    if param.required:
        raise ArgumentError("missing required argument", param.name)
    if param.role is ParamRole.FLAG:
        return False
    if param.default is DEFAULT_NULL:
        return None
    if isinstance(param.default, FromContext):
        return param.default.compute(entry)
    return _convert(param, str(param.default), context)


# ---------------------------------------------------------------------------
# Binding
# ---------------------------------------------------------------------------


def _overflow_parameter(signature: CommandSignature) -> str | None:
    """Name of the parameter blamed for tokens nothing else can take."""
    if signature.sequential:
        return signature.sequential[-1].name
    if signature.params:
        return signature.params[-1].name
    return None


def bind_arguments(
    signature: CommandSignature, tokens: Sequence[str], entry: ScriptEntry
) -> BoundArguments:
    """Bind *tokens* to *signature* for the invocation *entry*.

    Raises:
        ArgumentError: Before any command logic runs, on a bad argument
            count, an unknown or repeated prefix, a missing required
            parameter or an element that does not convert.
    """
    count = len(tokens)
    if count < signature.min_args:
        first = signature.first_required()
        raise ArgumentError(
            f"expected at least {signature.min_args} argument(s), got {count}",
            first.name if first is not None else None,
        )
    if 0 <= signature.max_args < count:
        raise ArgumentError(f"expected at most {signature.max_args} argument(s), got {count}")

    sequential = signature.sequential
    open_ended = any(spec.role is ParamRole.LINEAR for spec in sequential)
    overflow = _overflow_parameter(signature)

    raw: dict[str, str] = {}
    flags: set[str] = set()
    plain: list[str] = []

    for token in tokens:
        spec = signature.lookup(token)
        if spec is not None and spec.role is ParamRole.FLAG:
            if spec.name in flags:
                raise ArgumentError("flag given more than once", spec.name)
            flags.add(spec.name)
            continue
        match = _PREFIX_RE.match(token)
        if match is None:
            plain.append(token)
            continue
        spec = signature.lookup(match.group("prefix"))
        if spec is None or spec.role is not ParamRole.PREFIXED:
            unfilled = open_ended or len(plain) < len(sequential)
            if not (signature.tolerates_extras or unfilled):
                raise ArgumentError(f"unknown prefix '{match.group('prefix')}'", overflow)
            plain.append(token)
            continue
        if spec.name in raw:
            raise ArgumentError("given more than once", spec.name)
        raw[spec.name] = match.group("value")

    remaining = list(plain)
    for spec in sequential:
        if not remaining:
            break
        if spec.role is ParamRole.LINEAR:
            raw[spec.name] = " ".join(remaining)
            remaining = []
        else:
            raw[spec.name] = remaining.pop(0)

    if remaining and not signature.tolerates_extras:
        raise ArgumentError(f"unexpected argument '{remaining[0]}'", overflow)

    context = entry.parse_context()
    values: dict[str, Any] = {}
    for spec in signature.params:
        if spec.role is ParamRole.FLAG:
            values[spec.name] = spec.name in flags
        elif spec.name in raw:
            values[spec.name] = _convert(spec, raw[spec.name], context)
        else:
            values[spec.name] = _default(spec, entry, context)

    if remaining:
        logger.debug(
            "[%s] %s: passing through extras %s", entry.location, signature.name, remaining
        )
    return BoundArguments(values, remaining)
