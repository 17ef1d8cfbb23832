"""
Reference host object model.

The bridge never owns world state.  It talks to the simulated-world runtime
through a handful of native handles (entities, item stacks, inventories,
locations) and a lookup surface on the host.  This module provides a small
in-memory implementation of that surface, used by the bundled event and
command variants, the CLI and the test-suite.

Host Structure:
- Locations: immutable points in a named world (``overworld``, ``nether``)
- Areas: named cuboids noted by server operators (``spawn_area``)
- Entities: players, NPCs and mobs, each with a stable string id
- Item stacks: a material name plus a quantity
- Inventories: typed containers (``CHEST``, ``FURNACE``) with optional holders

Design Notes:
- Entities and inventories compare by identity; the host owns them
- ``WorldHost`` keeps the only strong references.  Value wrappers handed to
  scripts hold weak references, so dropping an entity from the host lets it
  be collected even while old values still float around in a script
- Item stacks are plain data and compare by material and quantity
"""

from __future__ import annotations

import math
import uuid
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

# ============================================================================
# MATERIALS
# ============================================================================

#: Materials every host knows about.  Hosts can register more at runtime.
DEFAULT_MATERIALS: frozenset[str] = frozenset(
    {
        "air",
        "apple",
        "bread",
        "coal",
        "diamond",
        "dirt",
        "emerald",
        "gold_ingot",
        "iron_ingot",
        "iron_sword",
        "rotten_flesh",
        "stick",
        "stone",
        "string",
    }
)


# ============================================================================
# SPATIAL TYPES
# ============================================================================


@dataclass(frozen=True)
class Location:
    """
    A point in one of the host's worlds.

    Attributes:
        x: East-west coordinate
        y: Height
        z: North-south coordinate
        world: Name of the world the point lives in (e.g. ``"overworld"``)
    """

    x: float
    y: float
    z: float
    world: str

    def distance(self, other: Location) -> float:
        """Euclidean distance, infinite across worlds."""
        if self.world != other.world:
            return math.inf
        return math.dist((self.x, self.y, self.z), (other.x, other.y, other.z))


@dataclass(frozen=True)
class Area:
    """
    A named, axis-aligned cuboid noted by an operator.

    Attributes:
        name: Unique note name (e.g. ``"spawn_area"``)
        world: World the cuboid lives in
        low: Minimum corner ``(x, y, z)``
        high: Maximum corner ``(x, y, z)``
    """

    name: str
    world: str
    low: tuple[float, float, float]
    high: tuple[float, float, float]

    def contains(self, location: Location) -> bool:
        """Return True if *location* lies inside the cuboid (inclusive)."""
        if location.world != self.world:
            return False
        point = (location.x, location.y, location.z)
        return all(lo <= p <= hi for lo, p, hi in zip(self.low, point, self.high))


# ============================================================================
# OBJECT HANDLES
# ============================================================================


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(eq=False)
class Entity:
    """
    A living or non-living entity in the world.

    Attributes:
        entity_type: Lower-case type name (``"player"``, ``"zombie"``)
        name: Display name
        location: Current location, ``None`` when not placed in a world
        npc: True when the entity is a scripted NPC
        spawned: False for NPCs that are registered but not in the world
        online: False for players that have logged off
        entity_id: Stable identifier, generated when omitted
        received: Messages delivered to this entity (newest last)
    """

    entity_type: str
    name: str
    location: Location | None = None
    npc: bool = False
    spawned: bool = True
    online: bool = True
    entity_id: str = field(default_factory=_new_id)
    received: list[str] = field(default_factory=list)

    @property
    def is_player(self) -> bool:
        return self.entity_type == "player" and not self.npc

    @property
    def is_npc(self) -> bool:
        return self.npc

    def send_message(self, message: str) -> None:
        """Deliver a chat line to this entity."""
        self.received.append(message)


@dataclass
class ItemStack:
    """
    A stack of one material.

    Attributes:
        material: Lower-case material name (e.g. ``"diamond"``)
        quantity: Stack size, at least 1
    """

    material: str
    quantity: int = 1


@dataclass(eq=False)
class Inventory:
    """
    A typed container of item stacks.

    Attributes:
        type_name: Upper-case container type (``"CHEST"``, ``"FURNACE"``)
        contents: Item stacks currently held
        holder: Object owning the inventory (block or entity), if any
        inventory_id: Stable identifier, generated when omitted
    """

    type_name: str
    contents: list[ItemStack] = field(default_factory=list)
    holder: object | None = None
    inventory_id: str = field(default_factory=_new_id)


@dataclass(eq=False)
class Container:
    """
    A placed block that holds an inventory (chest, barrel, furnace).

    Attributes:
        location: Where the block is placed
        inventory: The block's inventory
    """

    location: Location
    inventory: Inventory

    def __post_init__(self) -> None:
        self.inventory.holder = self


# ============================================================================
# HOST
# ============================================================================


class WorldHost:
    """
    In-memory host runtime: the lookup surface the bridge consumes.

    This class holds strong references to every entity and inventory the
    host knows about, the operator's noted areas, and the material
    registry.  Value parsing resolves ``e@<id>`` and ``in@<id>`` forms
    through it.

    Attributes:
        worlds: Names of the loaded worlds
        materials: Known material names
    """

    def __init__(self, worlds: Iterable[str] = ("overworld",)) -> None:
        self.worlds: set[str] = set(worlds)
        self.materials: set[str] = set(DEFAULT_MATERIALS)
        self._entities: dict[str, Entity] = {}
        self._inventories: dict[str, Inventory] = {}
        self._areas: dict[str, Area] = {}

    # -- worlds -----------------------------------------------------------------

    def world_by_name(self, name: str) -> str | None:
        """Return the loaded world called *name* (any case), or None."""
        for world in self.worlds:
            if world.lower() == name.lower():
                return world
        return None

    # -- entities -------------------------------------------------------------

    def add_entity(self, entity: Entity) -> Entity:
        """Register an entity and return it."""
        self._entities[entity.entity_id] = entity
        return entity

    def remove_entity(self, entity_id: str) -> None:
        """Forget an entity; existing value wrappers go stale."""
        self._entities.pop(entity_id, None)

    def entity_by_id(self, entity_id: str) -> Entity | None:
        return self._entities.get(entity_id)

    def entities(self) -> Iterator[Entity]:
        return iter(self._entities.values())

    def entities_near(self, location: Location, radius: float) -> list[Entity]:
        """Return spawned entities within *radius* of *location*."""
        return [
            entity
            for entity in self._entities.values()
            if entity.spawned
            and entity.location is not None
            and entity.location.distance(location) <= radius
        ]

    # -- inventories ------------------------------------------------------------

    def add_inventory(self, inventory: Inventory) -> Inventory:
        """Register an inventory and return it."""
        self._inventories[inventory.inventory_id] = inventory
        return inventory

    def place_container(self, location: Location, type_name: str) -> Container:
        """Create a container block with a fresh, registered inventory."""
        container = Container(location=location, inventory=Inventory(type_name=type_name.upper()))
        self.add_inventory(container.inventory)
        return container

    def inventory_by_id(self, inventory_id: str) -> Inventory | None:
        return self._inventories.get(inventory_id)

    # -- areas ------------------------------------------------------------------

    def note_area(self, area: Area) -> Area:
        """Note (or replace) a named area."""
        self._areas[area.name.lower()] = area
        return area

    def noted_areas(self) -> list[Area]:
        return list(self._areas.values())

    def area_by_name(self, name: str) -> Area | None:
        return self._areas.get(name.lower())

    # -- materials -------------------------------------------------------------

    def register_material(self, name: str) -> None:
        self.materials.add(name.lower())

    def is_material(self, name: str) -> bool:
        return name.lower() in self.materials
