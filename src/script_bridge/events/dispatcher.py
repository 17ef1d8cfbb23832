"""
Event dispatcher: binds trigger declarations to event kinds and fires them.

=============================================================================
LIFECYCLE
=============================================================================

1. REGISTER event kinds once at startup (``register_event``).
2. LOAD triggers when scripts load.  Each declaration is offered to every
   registered kind's ``could_match``; each kind that accepts it gets its own
   bound copy, stored in priority order.
3. FIRE per host event.  For each bound trigger, in order:
       matches?  ->  run the script handler  ->  apply its determination
   A non-match is silent.  A script error aborts that trigger only.
4. UNLOAD triggers per script (``remove_script``) on reload.

=============================================================================
THREADING
=============================================================================

The host may fire different events from different threads.  The binding
table is copy-on-write: loads build a new mapping under a lock and swap it
in, so ``fire`` always reads one consistent snapshot without locking.
Nothing about a fired event is stored on the dispatcher; the per-trigger
``DispatchContext`` is dropped when ``fire`` returns.

=============================================================================
USAGE
=============================================================================

    dispatcher = EventDispatcher(host=host)
    dispatcher.register_event(LootGeneratesScriptEvent())

    dispatcher.add_trigger(
        parse_declaration("on loot generates for:chest"),
        lambda script: "LOOT:diamond|diamond",
    )

    result = dispatcher.fire("LootGenerates", loot_event)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from functools import partial
from typing import Any

from script_bridge.entry import ScriptEntryData
from script_bridge.errors import ScriptRuntimeError
from script_bridge.events.base import DispatchContext, ScriptEvent
from script_bridge.events.declaration import TriggerDeclaration
from script_bridge.values import Value
from script_bridge.world.model import WorldHost

logger = logging.getLogger(__name__)


# =============================================================================
# SCRIPT-FACING TYPES
# =============================================================================


class ScriptContext:
    """The read-only view a triggered script gets of its event."""

    def __init__(self, script_event: ScriptEvent, dispatch: DispatchContext) -> None:
        self._script_event = script_event
        self._dispatch = dispatch

    @property
    def declaration(self) -> TriggerDeclaration:
        return self._dispatch.declaration

    @property
    def event_name(self) -> str:
        return self._script_event.name

    @property
    def entry_data(self) -> ScriptEntryData:
        return self._script_event.script_entry_data(self._dispatch)

    def context(self, name: str) -> Value | None:
        """Look up ``<context.NAME>``; None when undefined."""
        return self._script_event.get_context(self._dispatch, name)


#: A script handler receives its context and returns a determination (or None).
ScriptHandler = Callable[[ScriptContext], Any]

#: Runs a loaded declaration's script entries; supplied by the execution engine.
ScriptExecutor = Callable[[TriggerDeclaration, ScriptContext], Any]


@dataclass(frozen=True)
class BoundTrigger:
    """A declaration bound to one event kind, with its handler."""

    declaration: TriggerDeclaration
    script_event: ScriptEvent
    handler: ScriptHandler
    order: int


@dataclass
class DispatchResult:
    """What happened during one ``fire`` call.

    Attributes:
        event_name: Kind that was fired
        fired: Declarations that matched and ran
        determined: Declarations whose determination was applied
        errors: Failures raised by scripts or determinations
    """

    event_name: str
    fired: list[TriggerDeclaration] = field(default_factory=list)
    determined: list[TriggerDeclaration] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)


def _sort_key(trigger: BoundTrigger) -> tuple[bool, int, int]:
    return (trigger.declaration.after, trigger.declaration.priority, trigger.order)


# =============================================================================
# DISPATCHER
# =============================================================================


class EventDispatcher:
    """Registry of event kinds and the triggers bound to them."""

    def __init__(self, host: WorldHost | None = None) -> None:
        self._host = host
        self._events: dict[str, ScriptEvent] = {}
        self._triggers: dict[str, tuple[BoundTrigger, ...]] = {}
        self._order = 0
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register_event(self, script_event: ScriptEvent) -> None:
        """Register an event kind under its ``name``.

        Raises:
            ValueError: If the name is empty or already registered.
        """
        if not script_event.name:
            raise ValueError(f"{type(script_event).__name__} has no name")
        with self._lock:
            if script_event.name in self._events:
                raise ValueError(f"Event '{script_event.name}' is already registered")
            self._events = {**self._events, script_event.name: script_event}
        logger.debug("Registered event kind %s", script_event.name)

    def event(self, name: str) -> ScriptEvent:
        """Return the registered kind called *name* (KeyError if unknown)."""
        return self._events[name]

    @property
    def event_names(self) -> list[str]:
        return sorted(self._events)

    # -------------------------------------------------------------------------
    # Loading triggers
    # -------------------------------------------------------------------------

    def add_trigger(self, declaration: TriggerDeclaration, handler: ScriptHandler) -> list[str]:
        """Bind *declaration* to every kind whose ``could_match`` accepts it.

        Unknown switches are reported as warnings, not rejected.

        Returns:
            Names of the event kinds the declaration was bound to.
        """
        bound_to: list[str] = []
        with self._lock:
            triggers = dict(self._triggers)
            for script_event in self._events.values():
                if not script_event.could_match(declaration):
                    continue
                unknown = [
                    name
                    for name in declaration.switch_names
                    if name not in script_event.known_switches()
                ]
                if unknown:
                    logger.warning(
                        "[%s] unknown switch(es) %s for event %s",
                        declaration.location,
                        ", ".join(unknown),
                        script_event.name,
                    )
                self._order += 1
                trigger = BoundTrigger(
                    declaration=declaration.bind(cancellable=script_event.cancellable),
                    script_event=script_event,
                    handler=handler,
                    order=self._order,
                )
                existing = triggers.get(script_event.name, ())
                triggers[script_event.name] = tuple(sorted((*existing, trigger), key=_sort_key))
                bound_to.append(script_event.name)
            self._triggers = triggers

        if not bound_to:
            logger.warning(
                "[%s] no event matches '%s'", declaration.location, declaration.event_lower
            )
        return bound_to

    def load(self, declarations: Iterable[TriggerDeclaration], executor: ScriptExecutor) -> int:
        """Bind loaded declarations, running each through *executor*.

        Returns:
            Number of (declaration, event kind) bindings made.
        """
        count = 0
        for declaration in declarations:
            count += len(self.add_trigger(declaration, partial(executor, declaration)))
        logger.info("Loaded %d trigger binding(s)", count)
        return count

    def remove_script(self, script_name: str) -> int:
        """Drop every trigger declared by *script_name*.

        Returns:
            Number of bindings removed.
        """
        removed = 0
        with self._lock:
            triggers: dict[str, tuple[BoundTrigger, ...]] = {}
            for name, bound in self._triggers.items():
                kept = tuple(t for t in bound if t.declaration.script_name != script_name)
                removed += len(bound) - len(kept)
                triggers[name] = kept
            self._triggers = triggers
        return removed

    def triggers_for(self, name: str) -> tuple[BoundTrigger, ...]:
        return self._triggers.get(name, ())

    # -------------------------------------------------------------------------
    # Firing
    # -------------------------------------------------------------------------

    def fire(self, name: str, event: Any) -> DispatchResult:
        """Run every trigger bound to kind *name* against *event*.

        Must be called synchronously from the host's event thread; *event*
        is not retained after return.
        """
        result = DispatchResult(event_name=name)
        for trigger in self._triggers.get(name, ()):
            dispatch = DispatchContext(
                event=event, declaration=trigger.declaration, host=self._host
            )
            if not trigger.script_event.matches(dispatch):
                continue
            result.fired.append(trigger.declaration)
            try:
                self._run(trigger, dispatch, result)
            except ScriptRuntimeError as exc:
                logger.error("%s", exc)
                result.errors.append(exc)
            except Exception as exc:
                # Scoped to this trigger: sibling triggers still run
                logger.error(
                    "[%s] script failed during %s: %s",
                    trigger.declaration.location,
                    name,
                    exc,
                    exc_info=True,
                )
                result.errors.append(exc)
        return result

    def listener(self, name: str) -> Callable[[Any], DispatchResult]:
        """Return a callable the host can invoke with raw events of kind *name*."""
        self.event(name)
        return partial(self.fire, name)

    def _run(
        self, trigger: BoundTrigger, dispatch: DispatchContext, result: DispatchResult
    ) -> None:
        declaration = trigger.declaration
        determination = trigger.handler(ScriptContext(trigger.script_event, dispatch))
        if determination is None:
            return
        if declaration.after:
            logger.warning(
                "[%s] 'after' triggers cannot determine; ignoring '%s'",
                declaration.location,
                determination,
            )
            return
        if trigger.script_event.apply_determination(dispatch, determination):
            result.determined.append(declaration)
        else:
            logger.warning(
                "[%s] unknown determination '%s' for event %s",
                declaration.location,
                determination,
                trigger.script_event.name,
            )
