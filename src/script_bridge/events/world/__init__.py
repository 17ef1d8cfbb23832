"""World-group event kinds."""

from script_bridge.events.world.loot_generates import LootGeneratesScriptEvent

__all__ = ["LootGeneratesScriptEvent"]
