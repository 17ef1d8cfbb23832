"""Runtime events raised by the reference host.

A runtime event is a live occurrence.  It is handed to the bridge for the
duration of one synchronous dispatch call and must not be kept afterwards.
Its fields are mutable only through the setters the host exposes.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from script_bridge.world.model import Entity, ItemStack, Location


@dataclass(frozen=True)
class LootContext:
    """Where and why loot is being generated.

    Attributes:
        location: Where the loot appears, if the host knows
        loot_table: Key of the loot table being rolled (e.g. ``"chests/village"``)
    """

    location: Location | None
    loot_table: str = ""


@dataclass(eq=False)
class LootGenerateEvent:
    """Loot is being generated somewhere in the world.

    Fired, for example, the first time a structure chest is opened.  The
    ``loot`` list is the working collection: the host generates it into the
    holder's inventory after dispatch completes.

    Attributes:
        loot_context: Location and table for this roll
        loot: Item stacks about to be generated
        inventory_holder: Container or entity receiving the loot, if any
        entity: Entity that caused the generation, if any
        cancelled: True when a script cancelled the generation
    """

    loot_context: LootContext
    loot: list[ItemStack] = field(default_factory=list)
    inventory_holder: object | None = None
    entity: Entity | None = None
    cancelled: bool = False

    def set_loot(self, items: Iterable[ItemStack]) -> None:
        """Replace the working loot list."""
        self.loot = list(items)
