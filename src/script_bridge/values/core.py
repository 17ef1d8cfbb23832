"""Core value types: the base class, scalar elements and lists.

Every value a script can see is a :class:`Value`.  Values are immutable
snapshots: they are created per access, have one canonical text form
(:meth:`Value.identify`) and a parser (:meth:`Value.value_of`) that reads
that form back.  For any value this module produces::

    type(v).value_of(v.identify(), context) == v

Object types announce themselves with a short ``prefix@`` (``e@`` for
entities, ``i@`` for items).  :func:`parse_value` uses the prefix registry to
pick the right type; anything unprefixed is an :class:`ElementValue`.

Lists are ``|``-delimited.  An item containing ``|`` or ``&`` is escaped as
``&pipe`` / ``&amp`` so that it survives the join, and an empty item is
written ``&empty``; the empty text is the empty list.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar, overload

from script_bridge.errors import ValueParseError

if TYPE_CHECKING:
    from script_bridge.world.model import WorldHost

V = TypeVar("V", bound="Value")

#: Text that means "no override" when returned as a determination.
DEFAULT_DETERMINATION = "none"

LIST_DELIMITER = "|"

#: Escaped form of an empty item, so ``[""]`` and ``[]`` serialize apart.
EMPTY_ITEM = "&empty"


@dataclass(frozen=True)
class ParseContext:
    """Everything a parser may consult while reading text.

    Attributes:
        host: Host lookup surface for object references.  Without a host,
              ``e@``/``in@`` forms cannot be resolved and item materials are
              checked against the default material set.
    """

    host: WorldHost | None = None


# ---------------------------------------------------------------------------
# Base type and registries
# ---------------------------------------------------------------------------

_PREFIXED_TYPES: dict[str, type[Value]] = {}
_NATIVE_ADAPTERS: list[tuple[type, Callable[[Any], Value]]] = []


class Value(ABC):
    """Base class for every script-visible value."""

    #: Name used in diagnostics ("Element", "EntityRef")
    type_name: ClassVar[str] = "Value"

    #: Object prefix without the ``@`` (``"e"``), or None for unprefixed types
    prefix: ClassVar[str | None] = None

    @abstractmethod
    def identify(self) -> str:
        """Return the canonical text form."""

    @classmethod
    @abstractmethod
    def value_of(cls: type[V], text: str, context: ParseContext | None = None) -> V:
        """Parse *text* into this type.

        Raises:
            ValueParseError: If *text* is not a valid form of this type.
        """

    def to_native(self) -> Any:
        """Return the host-side object this value stands for."""
        return self.identify()

    def __str__(self) -> str:
        return self.identify()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.identify()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return type(self) is type(other) and self.identify() == other.identify()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.identify()))

    @classmethod
    def strip_prefix(cls, text: str) -> str:
        """Remove this type's ``prefix@`` from *text* if present."""
        if cls.prefix is not None:
            marker = f"{cls.prefix}@"
            if text[: len(marker)].lower() == marker:
                return text[len(marker) :]
        return text


def register_value_type(*, native: type | None = None) -> Callable[[type[V]], type[V]]:
    """Class decorator adding a value type to the registries.

    Args:
        native: Host class whose instances this value type wraps.  The type
                must then provide a ``from_native`` classmethod.
    """

    def decorator(cls: type[V]) -> type[V]:
        if cls.prefix is not None:
            existing = _PREFIXED_TYPES.get(cls.prefix)
            if existing is not None and existing is not cls:
                raise ValueError(
                    f"Prefix '{cls.prefix}@' already registered by {existing.__name__}"
                )
            _PREFIXED_TYPES[cls.prefix] = cls
        if native is not None:
            _NATIVE_ADAPTERS.append((native, cls.from_native))  # type: ignore[attr-defined]
        return cls

    return decorator


def parse_value(text: str, context: ParseContext | None = None) -> Value:
    """Parse *text* into the most specific registered value type.

    Text with a registered ``prefix@`` is handed to that type; everything
    else becomes an :class:`ElementValue`.
    """
    head, sep, _ = text.partition("@")
    if sep:
        value_type = _PREFIXED_TYPES.get(head.lower())
        if value_type is not None:
            return value_type.value_of(text, context)
    return ElementValue(text)


def to_value(obj: Any) -> Value:
    """Wrap a Python or host object as a value.

    Raises:
        TypeError: If *obj* has no value representation.
    """
    if isinstance(obj, Value):
        return obj
    if isinstance(obj, (str, bool, int, float)):
        return ElementValue(obj)
    for native_type, adapter in _NATIVE_ADAPTERS:
        if isinstance(obj, native_type):
            return adapter(obj)
    if isinstance(obj, (list, tuple)):
        return ListValue(to_value(item) for item in obj)
    raise TypeError(f"No value representation for {type(obj).__name__}")


# ---------------------------------------------------------------------------
# Element
# ---------------------------------------------------------------------------

_TRUE_WORDS = frozenset({"true", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "no", "off"})


class ElementValue(Value):
    """A scalar: text with numeric and boolean readings."""

    type_name = "Element"

    __slots__ = ("_text",)

    def __init__(self, value: str | int | float | bool) -> None:
        if isinstance(value, bool):
            self._text = "true" if value else "false"
        else:
            self._text = str(value)

    def identify(self) -> str:
        return self._text

    @classmethod
    def value_of(cls, text: str, context: ParseContext | None = None) -> ElementValue:
        return cls(text)

    def to_native(self) -> str:
        return self._text

    def is_default(self) -> bool:
        """True if this element is the "no override" sentinel."""
        return self._text.strip().lower() == DEFAULT_DETERMINATION

    # -- numeric ----------------------------------------------------------------

    def is_int(self) -> bool:
        try:
            int(self._text)
        except ValueError:
            return False
        return True

    def as_int(self) -> int:
        try:
            return int(self._text)
        except ValueError as exc:
            raise ValueParseError("Integer", self._text) from exc

    def is_double(self) -> bool:
        try:
            float(self._text)
        except ValueError:
            return False
        return True

    def as_double(self) -> float:
        try:
            return float(self._text)
        except ValueError as exc:
            raise ValueParseError("Decimal", self._text) from exc

    # -- boolean ----------------------------------------------------------------

    def is_boolean(self) -> bool:
        return self._text.lower() in _TRUE_WORDS | _FALSE_WORDS

    def as_boolean(self) -> bool:
        lowered = self._text.lower()
        if lowered in _TRUE_WORDS:
            return True
        if lowered in _FALSE_WORDS:
            return False
        raise ValueParseError("Boolean", self._text)


# ---------------------------------------------------------------------------
# List
# ---------------------------------------------------------------------------


def escape_item(text: str) -> str:
    if text == "":
        return EMPTY_ITEM
    return text.replace("&", "&amp").replace(LIST_DELIMITER, "&pipe")


def unescape_item(text: str) -> str:
    if text == EMPTY_ITEM:
        return ""
    return text.replace("&pipe", LIST_DELIMITER).replace("&amp", "&")


class ListValue(Value, Sequence[Value]):
    """An ordered sequence of values.

    Parsed lists keep their items as raw elements; :meth:`filter` converts
    them to a concrete type on demand, failing atomically.
    """

    type_name = "List"

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[Value] = ()) -> None:
        self._items: tuple[Value, ...] = tuple(items)

    def identify(self) -> str:
        return LIST_DELIMITER.join(escape_item(item.identify()) for item in self._items)

    @classmethod
    def value_of(cls, text: str, context: ParseContext | None = None) -> ListValue:
        if text == "":
            return cls()
        return cls(ElementValue(unescape_item(part)) for part in text.split(LIST_DELIMITER))

    def to_native(self) -> list[Any]:
        return [item.to_native() for item in self._items]

    def filter(self, value_type: type[V], context: ParseContext | None = None) -> list[V]:
        """Convert every item to *value_type*.

        Raises:
            ValueParseError: On the first item that does not convert; no
                partial list is returned.
        """
        converted: list[V] = []
        for item in self._items:
            if isinstance(item, value_type):
                converted.append(item)
            else:
                converted.append(value_type.value_of(item.identify(), context))
        return converted

    def __iter__(self) -> Iterator[Value]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    @overload
    def __getitem__(self, index: int) -> Value: ...

    @overload
    def __getitem__(self, index: slice) -> ListValue: ...

    def __getitem__(self, index: int | slice) -> Value | ListValue:
        if isinstance(index, slice):
            return ListValue(self._items[index])
        return self._items[index]
