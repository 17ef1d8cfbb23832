"""
Shared pytest fixtures for the script bridge test suite.

This module provides fixtures that are automatically available to all test files:
- A populated WorldHost with a noted spawn area and a chest
- Player and NPC entities standing in the world
- Loot events ready to fire
- Dispatchers and command registries with the bundled kinds registered

Every fixture is function-scoped: the host runtime objects are mutable and
tests must not see each other's changes.
"""

from collections.abc import Generator

import pytest

from script_bridge import config as config_module
from script_bridge.commands import CommandRegistry, create_registry
from script_bridge.entry import ScriptEntry, ScriptEntryData
from script_bridge.errors import ScriptLocation
from script_bridge.events import EventDispatcher, create_dispatcher
from script_bridge.world import (
    Area,
    Container,
    Entity,
    ItemStack,
    Location,
    LootContext,
    LootGenerateEvent,
    WorldHost,
)

# ============================================================================
# WORLD FIXTURES
# ============================================================================


@pytest.fixture
def host() -> WorldHost:
    """
    Create a host with two worlds and a noted ``spawn_area``.

    The spawn area covers x/y/z 0..100 in the overworld.
    """
    world = WorldHost(worlds=("overworld", "nether"))
    world.note_area(
        Area(
            name="spawn_area",
            world="overworld",
            low=(0, 0, 0),
            high=(100, 100, 100),
        )
    )
    return world


@pytest.fixture
def player(host: WorldHost) -> Entity:
    """An online player standing inside the spawn area."""
    return host.add_entity(
        Entity(entity_type="player", name="Alice", location=Location(10, 64, 10, "overworld"))
    )


@pytest.fixture
def npc(host: WorldHost) -> Entity:
    """A spawned NPC next to the player."""
    return host.add_entity(
        Entity(
            entity_type="player",
            name="Guard",
            location=Location(12, 64, 10, "overworld"),
            npc=True,
        )
    )


@pytest.fixture
def chest(host: WorldHost) -> Container:
    """A chest inside the spawn area."""
    return host.place_container(Location(20, 64, 20, "overworld"), "chest")


@pytest.fixture
def loot_event(chest: Container, player: Entity) -> LootGenerateEvent:
    """A loot event filling the chest, caused by the player."""
    return LootGenerateEvent(
        loot_context=LootContext(location=chest.location, loot_table="chests/village"),
        loot=[ItemStack("bread", 2), ItemStack("stick")],
        inventory_holder=chest,
        entity=player,
    )


# ============================================================================
# ENGINE FIXTURES
# ============================================================================


@pytest.fixture
def dispatcher(host: WorldHost) -> EventDispatcher:
    """A dispatcher with every bundled event kind registered."""
    return create_dispatcher(host)


@pytest.fixture
def registry() -> CommandRegistry:
    """A registry with every bundled command registered."""
    return create_registry()


@pytest.fixture
def make_entry(host: WorldHost, player: Entity, npc: Entity):
    """
    Factory for ScriptEntry objects linked to the player and NPC.

    Usage:
        entry = make_entry("chat", "hello", "world")
        entry = make_entry("chat", "hi", player=None)
    """

    def _make(command: str, *arguments: str, player=player, npc=npc) -> ScriptEntry:
        return ScriptEntry(
            command=command,
            arguments=tuple(arguments),
            entry_data=ScriptEntryData(player=player, npc=npc),
            host=host,
            location=ScriptLocation("test_script", 3),
        )

    return _make


# ============================================================================
# CONFIG FIXTURES
# ============================================================================


@pytest.fixture
def chat_settings() -> Generator[config_module.ChatSettings, None, None]:
    """
    Yield the live chat settings and restore them afterwards.

    Tests may mutate the yielded object freely.
    """
    original = config_module.config.chat
    config_module.config.chat = config_module.ChatSettings()
    yield config_module.config.chat
    config_module.config.chat = original
