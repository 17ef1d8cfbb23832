"""Trigger declarations: the structured form of a script's event line.

A world script says which events it wants with a line like::

    on loot generates for:chest in:spawn_area priority:5

:func:`parse_declaration` turns that line into a frozen
:class:`TriggerDeclaration` once, at script-load time.  Matching then works
on the structured form only; event lines are never re-parsed per event.

Line grammar:
- an optional leading ``on`` or ``after``
- event name words (anything without a ``name:`` shape)
- switches, ``name:value`` tokens, kept in declared order; every word
  after the first switch must be a switch too

``after`` triggers observe the final outcome and cannot change it; the
dispatcher refuses their determinations.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace

from script_bridge.errors import ScriptLoadError, ScriptLocation
from script_bridge.events.matching import validate_pattern

#: Switches understood by every event kind.
BASE_SWITCHES: frozenset[str] = frozenset({"cancelled", "ignorecancelled", "priority"})

_SWITCH_RE = re.compile(r"^(?P<name>[a-z_]+):(?P<value>.*)$", re.IGNORECASE)


@dataclass(frozen=True)
class TriggerDeclaration:
    """One script trigger, parsed and immutable.

    Attributes:
        event_lower:  Normalized, lower-cased line without the ``on``/``after``
                      word, switches included (``"loot generates for:chest"``).
                      Prefix tests in ``could_match`` run against this.
        event_name:   Lower-cased event words only (``"loot generates"``).
        switches:     ``(name, value)`` pairs in declared order; names are
                      lower-cased, values keep their case.
        script_name:  Owning script container.
        line:         1-based source line of the event key, ``0`` if unknown.
        priority:     Lower runs first; from the ``priority:`` switch.
        after:        True for ``after ...`` lines.
        cancellable:  True once bound to an event kind that can be cancelled.
        entries:      Raw script lines for the execution engine.
    """

    event_lower: str
    event_name: str
    switches: tuple[tuple[str, str], ...] = ()
    script_name: str = "<direct>"
    line: int = 0
    priority: int = 0
    after: bool = False
    cancellable: bool = False
    entries: tuple[str, ...] = field(default=(), compare=False)

    def switch(self, name: str) -> str | None:
        """Return the value of switch *name*, or None if not declared."""
        for key, value in self.switches:
            if key == name:
                return value
        return None

    def has_switch(self, name: str) -> bool:
        return any(key == name for key, _ in self.switches)

    @property
    def switch_names(self) -> tuple[str, ...]:
        return tuple(key for key, _ in self.switches)

    @property
    def location(self) -> ScriptLocation:
        return ScriptLocation(self.script_name, self.line)

    def bind(self, *, cancellable: bool) -> TriggerDeclaration:
        """Return a copy specialised for one event kind."""
        return replace(self, cancellable=cancellable)

    def __str__(self) -> str:
        prefix = "after" if self.after else "on"
        return f"{prefix} {self.event_lower} ({self.location})"


def parse_declaration(
    text: str,
    *,
    script_name: str = "<direct>",
    line: int = 0,
    entries: tuple[str, ...] = (),
) -> TriggerDeclaration:
    """Parse an event line into a :class:`TriggerDeclaration`.

    Raises:
        ScriptLoadError: On an empty line, an event word after a switch, a
            repeated switch, a non-integer priority or an invalid ``regex:``
            switch value.
    """
    where = ScriptLocation(script_name, line)
    tokens = text.split()
    after = False
    if tokens and tokens[0].lower() in ("on", "after"):
        after = tokens[0].lower() == "after"
        tokens = tokens[1:]
    if not tokens:
        raise ScriptLoadError(f"[{where}] empty event line: {text!r}")

    name_words: list[str] = []
    switches: list[tuple[str, str]] = []
    for token in tokens:
        match = _SWITCH_RE.match(token)
        if match is None or not name_words:
            if switches:
                raise ScriptLoadError(
                    f"[{where}] unexpected word '{token}' after switches in {text!r}"
                )
            name_words.append(token.lower())
            continue
        name = match.group("name").lower()
        value = match.group("value")
        if any(key == name for key, _ in switches):
            raise ScriptLoadError(f"[{where}] switch '{name}' declared more than once")
        try:
            validate_pattern(value)
        except re.error as exc:
            raise ScriptLoadError(f"[{where}] invalid regex in switch '{name}': {exc}") from exc
        switches.append((name, value))

    priority = 0
    for key, value in switches:
        if key == "priority":
            try:
                priority = int(value)
            except ValueError as exc:
                raise ScriptLoadError(
                    f"[{where}] priority must be an integer, got {value!r}"
                ) from exc

    event_lower = " ".join(
        [*name_words, *(f"{key}:{value.lower()}" for key, value in switches)]
    )
    return TriggerDeclaration(
        event_lower=event_lower,
        event_name=" ".join(name_words),
        switches=tuple(switches),
        script_name=script_name,
        line=line,
        priority=priority,
        after=after,
        entries=tuple(entries),
    )
