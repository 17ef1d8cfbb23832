"""Player-group commands."""

from script_bridge.commands.player.chat import ChatCommand

__all__ = ["ChatCommand"]
