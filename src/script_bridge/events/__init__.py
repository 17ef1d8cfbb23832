"""Event engine: declarations, matching, event kinds and dispatch."""

from script_bridge.events.base import (
    DEFAULT,
    Determination,
    DispatchContext,
    EventDocs,
    ScriptEvent,
    parse_determination,
)
from script_bridge.events.declaration import BASE_SWITCHES, TriggerDeclaration, parse_declaration
from script_bridge.events.dispatcher import (
    BoundTrigger,
    DispatchResult,
    EventDispatcher,
    ScriptContext,
)
from script_bridge.events.loader import (
    WorldScript,
    determine_executor,
    iter_declarations,
    load_scripts_dir,
    load_world_scripts,
)
from script_bridge.events.matching import advanced_matches, validate_pattern
from script_bridge.events.world import LootGeneratesScriptEvent
from script_bridge.world.model import WorldHost


def core_events() -> list[ScriptEvent]:
    """Return one instance of every bundled event kind."""
    return [LootGeneratesScriptEvent()]


def create_dispatcher(host: WorldHost | None = None) -> EventDispatcher:
    """Return a dispatcher with every bundled event kind registered."""
    dispatcher = EventDispatcher(host=host)
    for script_event in core_events():
        dispatcher.register_event(script_event)
    return dispatcher


__all__ = [
    "BASE_SWITCHES",
    "DEFAULT",
    "BoundTrigger",
    "Determination",
    "DispatchContext",
    "DispatchResult",
    "EventDispatcher",
    "EventDocs",
    "LootGeneratesScriptEvent",
    "ScriptContext",
    "ScriptEvent",
    "TriggerDeclaration",
    "WorldScript",
    "advanced_matches",
    "core_events",
    "create_dispatcher",
    "determine_executor",
    "iter_declarations",
    "load_scripts_dir",
    "load_world_scripts",
    "parse_declaration",
    "parse_determination",
    "validate_pattern",
]
