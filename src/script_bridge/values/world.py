"""Value types wrapping host objects.

These wrap native handles from :mod:`script_bridge.world`:

=============  ========  ==========================================
Type           Prefix    Canonical form
=============  ========  ==========================================
EntityRef      ``e@``    ``e@<entity_id>``
ItemRef        ``i@``    ``i@<material>`` or ``i@<material>[quantity=<n>]``
InventoryRef   ``in@``   ``in@<inventory_id>``
LocationRef    ``l@``    ``l@<x>,<y>,<z>,<world>``
=============  ========  ==========================================

Entity and inventory references are weak: they never keep the host object
alive.  Once the host drops the object, :attr:`EntityRef.entity` returns
``None`` but the reference still identifies by its id.

Item references are snapshots of material and quantity.  When built from a
host stack they also keep a weak back-reference to it, but converting back
to native always produces a fresh stack.
"""

from __future__ import annotations

import re
import weakref

from script_bridge.errors import ValueParseError
from script_bridge.values.core import ParseContext, Value, register_value_type
from script_bridge.world.model import (
    DEFAULT_MATERIALS,
    Entity,
    Inventory,
    ItemStack,
    Location,
)


def _require_host(type_name: str, text: str, context: ParseContext | None):
    if context is None or context.host is None:
        raise ValueParseError(type_name, text, "no host available to resolve the reference")
    return context.host


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


@register_value_type(native=Entity)
class EntityRef(Value):
    """Weak reference to a host entity."""

    type_name = "EntityRef"
    prefix = "e"

    def __init__(self, entity: Entity) -> None:
        self._ref = weakref.ref(entity)
        self.entity_id = entity.entity_id

    @classmethod
    def from_native(cls, entity: Entity) -> EntityRef:
        return cls(entity)

    @classmethod
    def value_of(cls, text: str, context: ParseContext | None = None) -> EntityRef:
        entity_id = cls.strip_prefix(text).strip()
        host = _require_host(cls.type_name, text, context)
        entity = host.entity_by_id(entity_id)
        if entity is None:
            raise ValueParseError(cls.type_name, text, "no such entity")
        return cls(entity)

    @property
    def entity(self) -> Entity | None:
        """The live entity, or None once the host has dropped it."""
        return self._ref()

    def is_spawned(self) -> bool:
        entity = self.entity
        return entity is not None and entity.spawned

    def identify(self) -> str:
        return f"e@{self.entity_id}"

    def to_native(self) -> Entity | None:
        return self.entity


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------

_ITEM_RE = re.compile(r"^(?P<material>[a-z0-9_:]+)(?:\[quantity=(?P<quantity>-?\d+)\])?$")


@register_value_type(native=ItemStack)
class ItemRef(Value):
    """Snapshot of an item stack."""

    type_name = "ItemRef"
    prefix = "i"

    def __init__(self, material: str, quantity: int = 1, source: ItemStack | None = None) -> None:
        self.material = material.lower()
        self.quantity = quantity
        self._source = weakref.ref(source) if source is not None else None

    @classmethod
    def from_native(cls, stack: ItemStack) -> ItemRef:
        return cls(stack.material, stack.quantity, source=stack)

    @classmethod
    def value_of(cls, text: str, context: ParseContext | None = None) -> ItemRef:
        body = cls.strip_prefix(text.strip()).lower()
        match = _ITEM_RE.match(body)
        if not match:
            raise ValueParseError(cls.type_name, text)
        material = match.group("material")
        known = (
            context.host.is_material(material)
            if context is not None and context.host is not None
            else material in DEFAULT_MATERIALS
        )
        if not known:
            raise ValueParseError(cls.type_name, text, f"unknown material '{material}'")
        quantity = int(match.group("quantity") or 1)
        if quantity < 1:
            raise ValueParseError(cls.type_name, text, "quantity must be at least 1")
        return cls(material, quantity)

    @property
    def source(self) -> ItemStack | None:
        """The host stack this snapshot was taken from, if still alive."""
        return self._source() if self._source is not None else None

    def identify(self) -> str:
        if self.quantity == 1:
            return f"i@{self.material}"
        return f"i@{self.material}[quantity={self.quantity}]"

    def to_native(self) -> ItemStack:
        return ItemStack(material=self.material, quantity=self.quantity)


# ---------------------------------------------------------------------------
# Inventories
# ---------------------------------------------------------------------------


@register_value_type(native=Inventory)
class InventoryRef(Value):
    """Weak reference to a host inventory."""

    type_name = "InventoryRef"
    prefix = "in"

    def __init__(self, inventory: Inventory) -> None:
        self._ref = weakref.ref(inventory)
        self.inventory_id = inventory.inventory_id
        self.container_type = inventory.type_name

    @classmethod
    def from_native(cls, inventory: Inventory) -> InventoryRef:
        return cls(inventory)

    @classmethod
    def value_of(cls, text: str, context: ParseContext | None = None) -> InventoryRef:
        inventory_id = cls.strip_prefix(text).strip()
        host = _require_host(cls.type_name, text, context)
        inventory = host.inventory_by_id(inventory_id)
        if inventory is None:
            raise ValueParseError(cls.type_name, text, "no such inventory")
        return cls(inventory)

    @property
    def inventory(self) -> Inventory | None:
        return self._ref()

    def identify(self) -> str:
        return f"in@{self.inventory_id}"

    def to_native(self) -> Inventory | None:
        return self.inventory


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------


@register_value_type(native=Location)
class LocationRef(Value):
    """A point in a named world.  Locations are plain data, held strongly."""

    type_name = "LocationRef"
    prefix = "l"

    def __init__(self, location: Location) -> None:
        self.location = location

    @classmethod
    def from_native(cls, location: Location) -> LocationRef:
        return cls(location)

    @classmethod
    def value_of(cls, text: str, context: ParseContext | None = None) -> LocationRef:
        parts = cls.strip_prefix(text.strip()).split(",")
        if len(parts) != 4:
            raise ValueParseError(cls.type_name, text, "expected x,y,z,world")
        try:
            x, y, z = (float(part) for part in parts[:3])
        except ValueError as exc:
            raise ValueParseError(cls.type_name, text, "coordinates must be numbers") from exc
        world = parts[3].strip()
        if context is not None and context.host is not None:
            known = context.host.world_by_name(world)
            if known is None:
                raise ValueParseError(cls.type_name, text, f"unknown world '{world}'")
            world = known
        return cls(Location(x, y, z, world))

    def identify(self) -> str:
        loc = self.location
        return f"l@{float(loc.x)!r},{float(loc.y)!r},{float(loc.z)!r},{loc.world}"

    def to_native(self) -> Location:
        return self.location
