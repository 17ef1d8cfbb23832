"""The capability interface every event kind implements.

An event kind (``loot generates``, ``entity dies``, ...) is a subclass of
:class:`ScriptEvent`.  The dispatcher only ever talks to that interface:

    could_match(declaration)            cheap name test at load time
    matches(dispatch)                   authoritative per-event check
    get_context(dispatch, name)         typed read access for scripts
    apply_determination(dispatch, raw)  script override of the outcome

Nothing on a ScriptEvent instance refers to a live runtime event.  Every
call receives a :class:`DispatchContext` built for one (declaration, event)
pair and dropped when the dispatch returns, so one ScriptEvent instance can
serve concurrent dispatches from different host threads.

Subclasses extend behaviour by overriding and calling ``super()``: unknown
context keys and unrecognised determinations fall through to the shared
handling here.
"""

from __future__ import annotations

import logging
import re
from abc import ABC
from dataclasses import dataclass
from typing import Any, ClassVar, TypeVar

from script_bridge.entry import ScriptEntryData
from script_bridge.errors import ScriptRuntimeError, ValueParseError
from script_bridge.events.declaration import BASE_SWITCHES, TriggerDeclaration
from script_bridge.events.matching import advanced_matches
from script_bridge.values import ElementValue, ListValue, ParseContext, Value, to_value
from script_bridge.world.model import Location, WorldHost

logger = logging.getLogger(__name__)

V = TypeVar("V", bound=Value)

_KIND_RE = re.compile(r"^(?P<kind>[a-z_]+):(?P<payload>.*)$", re.IGNORECASE | re.DOTALL)


# ---------------------------------------------------------------------------
# Documentation metadata
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EventDocs:
    """Registration metadata describing an event kind to script authors.

    Attributes:
        events:      Event line forms (``"loot generates"``)
        group:       Documentation group (``"World"``)
        triggers:    When the event fires
        switches:    ``(switch, description)`` pairs
        cancellable: Whether scripts may cancel the event
        context:     ``(key, description)`` pairs
        determine:   Accepted determination forms
        player:      When a player is linked, if ever
    """

    events: tuple[str, ...]
    group: str
    triggers: str
    switches: tuple[tuple[str, str], ...] = ()
    cancellable: bool = False
    context: tuple[tuple[str, str], ...] = ()
    determine: tuple[str, ...] = ()
    player: str | None = None


# ---------------------------------------------------------------------------
# Determinations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Determination:
    """A script's returned value, parsed into a tagged form.

    Attributes:
        value:   The returned value; None for the "no override" sentinel
        kind:    Lower-cased ``KIND`` of a ``KIND:payload`` text, else None
        payload: Text after ``KIND:``, or the whole text form when untagged
    """

    value: Value | None
    kind: str | None = None
    payload: str = ""

    @property
    def is_default(self) -> bool:
        return self.value is None

    @property
    def text(self) -> str:
        return self.value.identify() if self.value is not None else ""


DEFAULT = Determination(value=None)


def parse_determination(raw: Any) -> Determination:
    """Parse a script's returned value into a :class:`Determination`.

    ``None`` and the text ``none`` (any case) are the default sentinel.
    Element text shaped ``KIND:payload`` is tagged with its kind.
    """
    if raw is None:
        return DEFAULT
    value = to_value(raw)
    if isinstance(value, ElementValue):
        if value.is_default():
            return DEFAULT
        match = _KIND_RE.match(value.identify())
        if match:
            return Determination(
                value=value, kind=match.group("kind").lower(), payload=match.group("payload")
            )
    return Determination(value=value, payload=value.identify())


# ---------------------------------------------------------------------------
# Per-dispatch context
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DispatchContext:
    """Everything one (declaration, event) evaluation needs.

    Attributes:
        event:       The live runtime event; valid for this dispatch only
        declaration: The trigger being evaluated
        host:        Host lookup surface, for area checks and value parsing
    """

    event: Any
    declaration: TriggerDeclaration
    host: WorldHost | None = None

    def parse_context(self) -> ParseContext:
        return ParseContext(host=self.host)


# ---------------------------------------------------------------------------
# ScriptEvent
# ---------------------------------------------------------------------------


class ScriptEvent(ABC):
    """Base class for event kinds.

    Class attributes a subclass sets:
        name:          Registry name (``"LootGenerates"``)
        docs:          :class:`EventDocs` for the kind
        switches:      Switch names the kind understands beyond the base set
        has_location:  True if events of this kind happen somewhere; kinds
                       without a location ignore ``in:`` silently
        event_regex:   Optional pattern for :meth:`could_match`, matched
                       against the declaration's event name words
    """

    name: ClassVar[str] = ""
    docs: ClassVar[EventDocs]
    switches: ClassVar[frozenset[str]] = frozenset()
    has_location: ClassVar[bool] = False
    event_regex: ClassVar[re.Pattern[str] | None] = None

    @property
    def cancellable(self) -> bool:
        return self.docs.cancellable

    def known_switches(self) -> frozenset[str]:
        return BASE_SWITCHES | self.switches

    # -- matching ---------------------------------------------------------------

    def could_match(self, declaration: TriggerDeclaration) -> bool:
        """Cheap pre-filter on the event line; must never reject a match."""
        if self.event_regex is None:
            return False
        return self.event_regex.fullmatch(declaration.event_name) is not None

    def matches(self, dispatch: DispatchContext) -> bool:
        """Authoritative check of one declaration against one event.

        Switches are checked in the order they were declared, stopping at
        the first that fails; the structural cancellation checks run last.
        Kinds customise the switch checks through :meth:`switch_matches`.
        """
        declaration = dispatch.declaration
        for name in declaration.switch_names:
            if name not in BASE_SWITCHES and not self.switch_matches(dispatch, name):
                return False
        cancelled = self.is_cancelled(dispatch)
        wanted = declaration.switch("cancelled")
        if wanted is not None:
            if wanted.lower() != "any" and not advanced_matches(str(cancelled).lower(), wanted):
                return False
        elif cancelled and (declaration.switch("ignorecancelled") or "").lower() == "true":
            return False
        return True

    def switch_matches(self, dispatch: DispatchContext, name: str) -> bool:
        """Check one declared kind-specific switch; unknown switches pass.

        The base handles ``in:`` for kinds with a location concept.
        """
        if name == "in":
            return self.run_in_check(dispatch, self.event_location(dispatch))
        return True

    def event_location(self, dispatch: DispatchContext) -> Location | None:
        """Where the event happened; only meaningful when ``has_location``."""
        return None

    def run_in_check(self, dispatch: DispatchContext, location: Location | None) -> bool:
        """Evaluate the ``in:`` switch against *location*.

        Passes when no ``in:`` switch is declared or the kind has no
        location concept.  A kind that has one but an event instance without
        a location is a non-match.  Otherwise *location* must lie in a world
        or noted area whose name matches the switch value.
        """
        pattern = dispatch.declaration.switch("in")
        if pattern is None or not self.has_location:
            return True
        if location is None:
            return False
        if advanced_matches(location.world, pattern):
            return True
        if dispatch.host is None:
            return False
        return any(
            area.contains(location) and advanced_matches(area.name, pattern)
            for area in dispatch.host.noted_areas()
        )

    def run_generic_switch_check(self, dispatch: DispatchContext, name: str, value: str) -> bool:
        """Compare switch *name* against *value*; passes if undeclared."""
        pattern = dispatch.declaration.switch(name)
        if pattern is None:
            return True
        return advanced_matches(value, pattern)

    # -- context ----------------------------------------------------------------

    def get_context(self, dispatch: DispatchContext, name: str) -> Value | None:
        """Return context key *name* for the event, or None if undefined.

        Must not mutate the event.
        """
        if name == "cancelled":
            return ElementValue(self.is_cancelled(dispatch))
        if name == "event_name":
            return ElementValue(self.name)
        return None

    def script_entry_data(self, dispatch: DispatchContext) -> ScriptEntryData:
        """Player/NPC to link to the triggered script."""
        return ScriptEntryData()

    # -- determinations ---------------------------------------------------------

    def apply_determination(self, dispatch: DispatchContext, raw: Any) -> bool:
        """Parse a returned value and apply it to the event.

        Returns:
            True if the determination was recognised.

        Raises:
            ScriptRuntimeError: If a recognised determination carries a
                payload that cannot be applied.
        """
        return self.handle_determination(dispatch, parse_determination(raw))

    def handle_determination(self, dispatch: DispatchContext, determination: Determination) -> bool:
        """Apply a parsed determination; subclasses extend via ``super()``.

        The base handler accepts the default sentinel without touching the
        event, and ``cancelled`` / ``cancelled:<bool>`` on cancellable
        declarations.
        """
        if determination.is_default:
            return True
        if not dispatch.declaration.cancellable:
            return False
        if determination.kind is None and determination.payload.lower() == "cancelled":
            self.set_cancelled(dispatch, True)
            return True
        if determination.kind == "cancelled":
            flag = ElementValue(determination.payload)
            if flag.is_boolean():
                self.set_cancelled(dispatch, flag.as_boolean())
                return True
            raise ScriptRuntimeError(
                f"'cancelled:' expects true or false, got '{determination.payload}'",
                location=dispatch.declaration.location,
            )
        return False

    def payload_list(
        self, dispatch: DispatchContext, determination: Determination, value_type: type[V]
    ) -> list[V]:
        """Read a determination payload as a list of *value_type*.

        Raises:
            ScriptRuntimeError: If any element fails to convert.
        """
        try:
            return ListValue.value_of(determination.payload).filter(
                value_type, dispatch.parse_context()
            )
        except ValueParseError as exc:
            raise ScriptRuntimeError(
                f"Invalid '{determination.kind}:' determination for {self.name}: {exc}",
                location=dispatch.declaration.location,
                cause=exc,
            ) from exc

    # -- cancellation -------------------------------------------------------------

    def is_cancelled(self, dispatch: DispatchContext) -> bool:
        return bool(getattr(dispatch.event, "cancelled", False))

    def set_cancelled(self, dispatch: DispatchContext, cancelled: bool) -> None:
        dispatch.event.cancelled = cancelled
