"""Command signatures: declared parameters, built once at registration.

A command describes what it accepts as data instead of parsing its own
tokens::

    SIGNATURE = (
        SignatureBuilder("chat")
        .syntax("chat [<text>] (no_target/targets:<entity>|...) (range:<#.#>)")
        .arguments(required=1, maximum=4)
        .linear("message")
        .prefixed("targets", EntityRef, many=True, default=DEFAULT_NULL, synonyms=("target", "t"))
        .flag("no_target")
        .prefixed("range", float, default="-1", synonyms=("r",))
        .build()
    )

Parameter roles:

POSITIONAL
    Takes the next unconsumed plain token.
PREFIXED
    Takes the value of a ``name:value`` token.  Synonyms fold onto the
    canonical name, case-insensitively.
LINEAR
    Takes *all* remaining plain tokens, joined with single spaces.  At most
    one per command, declared after every positional parameter.
FLAG
    A bare word (``no_target``); True when present.

Defaults:

``REQUIRED``
    Absence is an :class:`ArgumentError` naming the parameter.
``DEFAULT_NULL``
    Absent parameters bind to ``None``.
:class:`FromContext`
    Computed from the invocation's :class:`ScriptEntry` when absent.
any ``str``
    Literal text, converted exactly like a token would be.

Signatures are frozen and shared by every invocation.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from script_bridge.errors import SignatureError
from script_bridge.values import Value

if TYPE_CHECKING:
    from script_bridge.entry import ScriptEntry

#: Scalar kinds the binder converts natively; any Value subclass is also valid.
SCALAR_KINDS: tuple[type, ...] = (str, int, float, bool)


class ParamRole(enum.Enum):
    POSITIONAL = "positional"
    PREFIXED = "prefixed"
    LINEAR = "linear"
    FLAG = "flag"


class _Sentinel:
    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return self._name


REQUIRED = _Sentinel("REQUIRED")
DEFAULT_NULL = _Sentinel("DEFAULT_NULL")


@dataclass(frozen=True)
class FromContext:
    """Default computed lazily from the invocation's entry."""

    compute: Callable[[ScriptEntry], Any]
    description: str = ""


@dataclass(frozen=True)
class ParameterSpec:
    """One declared parameter.

    Attributes:
        name: Canonical, lower-case parameter name
        role: How the parameter takes its tokens
        kind: ``str``/``int``/``float``/``bool`` or a :class:`Value` subclass
        many: True for ``|``-delimited list parameters
        default: ``REQUIRED``, ``DEFAULT_NULL``, a :class:`FromContext` or
                 literal default text
        synonyms: Alternative prefixes for PREFIXED/FLAG parameters
    """

    name: str
    role: ParamRole
    kind: type = str
    many: bool = False
    default: Any = REQUIRED
    synonyms: tuple[str, ...] = ()

    @property
    def required(self) -> bool:
        return self.default is REQUIRED

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name, *self.synonyms)

    @property
    def kind_name(self) -> str:
        if isinstance(self.kind, type) and issubclass(self.kind, Value):
            return self.kind.type_name
        return self.kind.__name__


@dataclass(frozen=True)
class CommandSignature:
    """Everything the binder needs to know about a command.

    Attributes:
        name: Command name, lower-case
        syntax: Human-readable usage line
        min_args: Fewest raw tokens accepted
        max_args: Most raw tokens accepted; ``-1`` for no limit
        params: Declared parameters, in declaration order
        tolerates_extras: Whether unknown prefixes and leftover tokens are
                          passed through rather than rejected
    """

    name: str
    syntax: str
    min_args: int
    max_args: int
    params: tuple[ParameterSpec, ...]
    tolerates_extras: bool = False
    _by_word: Mapping[str, ParameterSpec] = field(
        default_factory=dict, repr=False, compare=False
    )

    def lookup(self, word: str) -> ParameterSpec | None:
        """Find the PREFIXED or FLAG parameter called *word* (or a synonym)."""
        return self._by_word.get(word.lower())

    @property
    def sequential(self) -> tuple[ParameterSpec, ...]:
        """POSITIONAL and LINEAR parameters, in binding order."""
        return tuple(
            p for p in self.params if p.role in (ParamRole.POSITIONAL, ParamRole.LINEAR)
        )

    def first_required(self) -> ParameterSpec | None:
        for param in self.params:
            if param.required:
                return param
        return None


class SignatureBuilder:
    """Fluent builder for :class:`CommandSignature`.

    Validation happens in :meth:`build`; every method returns the builder.
    """

    def __init__(self, name: str) -> None:
        self._name = name.lower()
        self._syntax = name.lower()
        self._min_args = 0
        self._max_args = -1
        self._tolerates_extras = False
        self._params: list[ParameterSpec] = []

    def syntax(self, text: str) -> SignatureBuilder:
        self._syntax = text
        return self

    def arguments(self, required: int = 0, maximum: int = -1) -> SignatureBuilder:
        self._min_args = required
        self._max_args = maximum
        return self

    def tolerate_extras(self, tolerate: bool = True) -> SignatureBuilder:
        self._tolerates_extras = tolerate
        return self

    def positional(
        self, name: str, kind: type = str, *, many: bool = False, default: Any = REQUIRED
    ) -> SignatureBuilder:
        return self._add(ParamRole.POSITIONAL, name, kind, many, default, ())

    def prefixed(
        self,
        name: str,
        kind: type = str,
        *,
        many: bool = False,
        default: Any = REQUIRED,
        synonyms: tuple[str, ...] = (),
    ) -> SignatureBuilder:
        return self._add(ParamRole.PREFIXED, name, kind, many, default, synonyms)

    def linear(self, name: str, *, default: Any = REQUIRED) -> SignatureBuilder:
        return self._add(ParamRole.LINEAR, name, str, False, default, ())

    def flag(self, name: str, *, synonyms: tuple[str, ...] = ()) -> SignatureBuilder:
        return self._add(ParamRole.FLAG, name, bool, False, False, synonyms)

    def _add(
        self,
        role: ParamRole,
        name: str,
        kind: type,
        many: bool,
        default: Any,
        synonyms: tuple[str, ...],
    ) -> SignatureBuilder:
        self._params.append(
            ParameterSpec(
                name=name.lower(),
                role=role,
                kind=kind,
                many=many,
                default=default,
                synonyms=tuple(s.lower() for s in synonyms),
            )
        )
        return self

    def build(self) -> CommandSignature:
        """Validate and freeze the signature.

        Raises:
            SignatureError: On duplicate names or synonyms, more than one
                linear parameter, a positional parameter after the linear
                one, an unsupported kind or inconsistent argument counts.
        """
        where = f"command '{self._name}'"
        if self._min_args < 0 or (0 <= self._max_args < self._min_args):
            raise SignatureError(
                f"{where}: invalid argument counts {self._min_args}..{self._max_args}"
            )

        seen: set[str] = set()
        by_word: dict[str, ParameterSpec] = {}
        linear_seen = False
        for param in self._params:
            for word in param.names:
                if word in seen:
                    raise SignatureError(f"{where}: name '{word}' declared more than once")
                seen.add(word)
            if not _valid_kind(param.kind):
                raise SignatureError(f"{where}: unsupported kind {param.kind!r} for '{param.name}'")
            if param.role is ParamRole.LINEAR:
                if linear_seen:
                    raise SignatureError(f"{where}: only one linear parameter is allowed")
                linear_seen = True
            elif param.role is ParamRole.POSITIONAL and linear_seen:
                raise SignatureError(
                    f"{where}: positional '{param.name}' declared after the linear parameter"
                )
            if param.role in (ParamRole.PREFIXED, ParamRole.FLAG):
                for word in param.names:
                    by_word[word] = param

        return CommandSignature(
            name=self._name,
            syntax=self._syntax,
            min_args=self._min_args,
            max_args=self._max_args,
            params=tuple(self._params),
            tolerates_extras=self._tolerates_extras,
            _by_word=MappingProxyType(by_word),
        )


def _valid_kind(kind: Any) -> bool:
    if kind in SCALAR_KINDS:
        return True
    return isinstance(kind, type) and issubclass(kind, Value)
