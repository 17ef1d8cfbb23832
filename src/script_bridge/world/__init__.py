"""Reference host runtime: object model, runtime events and speech."""

from script_bridge.world.events import LootContext, LootGenerateEvent
from script_bridge.world.model import (
    DEFAULT_MATERIALS,
    Area,
    Container,
    Entity,
    Inventory,
    ItemStack,
    Location,
    WorldHost,
)
from script_bridge.world.speech import SpeechContext, SpeechController

__all__ = [
    "DEFAULT_MATERIALS",
    "Area",
    "Container",
    "Entity",
    "Inventory",
    "ItemStack",
    "Location",
    "LootContext",
    "LootGenerateEvent",
    "SpeechContext",
    "SpeechController",
    "WorldHost",
]
