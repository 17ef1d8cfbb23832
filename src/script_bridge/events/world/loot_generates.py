"""``loot generates``: loot is rolled into a container.

Script surface::

    on loot generates for:chest in:spawn_area:
    - determine LOOT:diamond|i@emerald[quantity=3]

Switches:
    in:<area>    only where the loot location lies in a matching world or
                 noted area
    for:<type>   only when the receiving inventory type matches
                 (``for:chest``, ``for:barrel|chest``)

Context:
    entity       EntityRef that caused the generation, if any
    inventory    InventoryRef the loot generates into, if any
    items        ListValue of ItemRef, the current working loot
    location     LocationRef of the generation, if known

Determinations:
    LOOT:<list of items>   replace the generated loot
"""

from __future__ import annotations

from script_bridge.entry import ScriptEntryData
from script_bridge.events.base import DispatchContext, Determination, EventDocs, ScriptEvent
from script_bridge.events.declaration import TriggerDeclaration
from script_bridge.values import EntityRef, InventoryRef, ItemRef, ListValue, LocationRef, Value
from script_bridge.world.events import LootGenerateEvent
from script_bridge.world.model import Inventory, Location


class LootGeneratesScriptEvent(ScriptEvent):
    """Fires when loot is generated somewhere in the world."""

    name = "LootGenerates"
    docs = EventDocs(
        events=("loot generates",),
        group="World",
        triggers=(
            "when loot is generated somewhere in the world "
            "(like a structure chest being opened for the first time)."
        ),
        switches=(
            ("in:<area>", "to only process the event if it occurred within a specified area."),
            (
                "for:<type>",
                "to only process the event if a certain inventory type is receiving loot "
                "(like 'for:chest').",
            ),
        ),
        cancellable=True,
        context=(
            ("<context.entity>", "returns an entity that caused loot generation, if any."),
            ("<context.inventory>", "returns the InventoryRef that loot is generating into."),
            ("<context.items>", "returns a ListValue of the items being generated."),
            ("<context.location>", "returns the LocationRef the loot generates at, if known."),
        ),
        determine=('"LOOT:" + ListValue(ItemRef) to change the list of items that will generate.',),
        player="when the linked entity is a player.",
    )
    switches = frozenset({"in", "for"})
    has_location = True

    def could_match(self, declaration: TriggerDeclaration) -> bool:
        return declaration.event_lower.startswith("loot generates")

    def switch_matches(self, dispatch: DispatchContext, name: str) -> bool:
        if name == "for":
            inventory = self._inventory(dispatch.event)
            return inventory is not None and self.run_generic_switch_check(
                dispatch, "for", inventory.type_name
            )
        return super().switch_matches(dispatch, name)

    def event_location(self, dispatch: DispatchContext) -> Location | None:
        event: LootGenerateEvent = dispatch.event
        return event.loot_context.location

    def script_entry_data(self, dispatch: DispatchContext) -> ScriptEntryData:
        event: LootGenerateEvent = dispatch.event
        return ScriptEntryData.from_entity(event.entity)

    def get_context(self, dispatch: DispatchContext, name: str) -> Value | None:
        event: LootGenerateEvent = dispatch.event
        if name == "inventory":
            inventory = self._inventory(event)
            if inventory is not None:
                return InventoryRef(inventory)
        elif name == "entity":
            if event.entity is not None:
                return EntityRef(event.entity)
        elif name == "items":
            return ListValue(ItemRef.from_native(stack) for stack in event.loot)
        elif name == "location":
            location = event.loot_context.location
            if location is not None:
                return LocationRef(location)
        return super().get_context(dispatch, name)

    def handle_determination(self, dispatch: DispatchContext, determination: Determination) -> bool:
        if determination.kind == "loot":
            items = self.payload_list(dispatch, determination, ItemRef)
            event: LootGenerateEvent = dispatch.event
            event.set_loot(item.to_native() for item in items)
            return True
        return super().handle_determination(dispatch, determination)

    @staticmethod
    def _inventory(event: LootGenerateEvent) -> Inventory | None:
        holder = event.inventory_holder
        if holder is None:
            return None
        return getattr(holder, "inventory", None)
