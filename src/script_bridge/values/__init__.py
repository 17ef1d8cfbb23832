"""The value model: typed, text-serializable wrappers seen by scripts.

Importing this package registers every bundled value type, so
:func:`parse_value` and :func:`to_value` know about entity, item, inventory
and location references.
"""

from script_bridge.values.core import (
    DEFAULT_DETERMINATION,
    LIST_DELIMITER,
    ElementValue,
    ListValue,
    ParseContext,
    Value,
    parse_value,
    register_value_type,
    to_value,
)
from script_bridge.values.world import EntityRef, InventoryRef, ItemRef, LocationRef

__all__ = [
    "DEFAULT_DETERMINATION",
    "LIST_DELIMITER",
    "ElementValue",
    "EntityRef",
    "InventoryRef",
    "ItemRef",
    "ListValue",
    "LocationRef",
    "ParseContext",
    "Value",
    "parse_value",
    "register_value_type",
    "to_value",
]
