"""Unit tests for the chat command and the command registry.

Tests cover:
- Default targets and talkers from the linked player and NPC
- Hard failures and debug skips for missing or absent entities
- Bystanders and the configured range
- Registry binding and error reporting
"""

from __future__ import annotations

import logging

import pytest

from script_bridge.commands import ChatCommand, CommandRegistry
from script_bridge.errors import InvalidArgumentsRuntimeError
from script_bridge.world import Entity, Location

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

CHAT = ChatCommand()


def _run(entry):
    CHAT.run(entry, CHAT.bind(entry))


@pytest.fixture
def bystander(host):
    """An online player three blocks from the NPC."""
    return host.add_entity(
        Entity(entity_type="player", name="Bob", location=Location(15, 64, 10, "overworld"))
    )


# ---------------------------------------------------------------------------
# Defaults from linked entities
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestChatDefaults:
    """Targets and talkers fall back to the linked player and NPC."""

    def test_npc_talks_to_linked_player(self, make_entry, player, chat_settings):
        _run(make_entry("chat", "Hello", "there!"))
        assert player.received == ["Guard says to you, Hello there!"]

    def test_missing_player_is_a_hard_error(self, make_entry):
        with pytest.raises(InvalidArgumentsRuntimeError, match="Missing targets!"):
            _run(make_entry("chat", "hi", player=None))

    def test_missing_npc_is_a_hard_error(self, make_entry):
        with pytest.raises(InvalidArgumentsRuntimeError, match="Missing talker!"):
            _run(make_entry("chat", "hi", npc=None))

    def test_offline_player_is_skipped(self, make_entry, player, npc, caplog):
        player.online = False
        with caplog.at_level(logging.DEBUG, logger="script_bridge.entry"):
            _run(make_entry("chat", "hi"))
        assert player.received == []
        assert "Player is not online" in caplog.text

    def test_unspawned_npc_is_skipped(self, make_entry, player, npc, caplog):
        npc.spawned = False
        with caplog.at_level(logging.DEBUG, logger="script_bridge.entry"):
            _run(make_entry("chat", "hi"))
        assert player.received == []
        assert "Chat Talker is not spawned" in caplog.text

    def test_no_target(self, make_entry, player, chat_settings):
        _run(make_entry("chat", "no_target", "Halt!", player=None))
        assert player.received == ["Guard says, Halt!"]


# ---------------------------------------------------------------------------
# Explicit arguments
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestChatArguments:
    """Explicit targets, talkers and range."""

    def test_explicit_targets_and_bystanders(
        self, make_entry, player, npc, bystander, chat_settings
    ):
        _run(make_entry("chat", f"t:e@{player.entity_id}", "Psst"))
        assert player.received == ["Guard says to you, Psst"]
        assert bystander.received == ["Guard says to Alice, Psst"]
        assert npc.received == []

    def test_explicit_talkers(self, make_entry, host, player, chat_settings):
        mayor = host.add_entity(
            Entity(entity_type="villager", name="Mayor", location=Location(0, 64, 0, "overworld"))
        )
        _run(make_entry("chat", f"talker:e@{mayor.entity_id}", "Welcome"))
        assert player.received == ["Mayor says to you, Welcome"]

    def test_range_zero_has_no_bystanders(self, make_entry, player, bystander, chat_settings):
        _run(make_entry("chat", "range:0", "Quiet"))
        assert player.received == ["Guard says to you, Quiet"]
        assert bystander.received == []

    def test_configured_range_applies(self, make_entry, bystander, chat_settings):
        chat_settings.bystanders_range = 1.0
        _run(make_entry("chat", "Hello"))
        assert bystander.received == []

    def test_explicit_range_overrides_config(self, make_entry, bystander, chat_settings):
        chat_settings.bystanders_range = 1.0
        _run(make_entry("chat", "r:10", "Hello"))
        assert bystander.received == ["Guard says to Alice, Hello"]

    def test_unspawned_explicit_talker_is_skipped(
        self, make_entry, host, player, npc, chat_settings
    ):
        ghost = host.add_entity(Entity(entity_type="villager", name="Ghost", spawned=False))
        _run(make_entry("chat", f"talkers:e@{ghost.entity_id}|e@{npc.entity_id}", "Boo"))
        assert player.received == ["Guard says to you, Boo"]

    def test_custom_formats(self, make_entry, player, chat_settings):
        chat_settings.to_target_format = "<{talker}> {message}"
        _run(make_entry("chat", "Hi"))
        assert player.received == ["<Guard> Hi"]


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestCommandRegistry:
    """The registry binds first and reports failures without raising."""

    def test_bundled_commands(self, registry):
        assert registry.names == ["chat"]
        assert len(registry) == 1

    def test_duplicate_registration(self, registry):
        with pytest.raises(ValueError, match="already registered"):
            registry.register(ChatCommand())

    def test_execute_success(self, registry, make_entry, player, chat_settings):
        ok, message = registry.execute(make_entry("CHAT", "Hello"))
        assert ok is True
        assert message == ""
        assert player.received == ["Guard says to you, Hello"]

    def test_execute_unknown_command(self, registry, make_entry):
        ok, message = registry.execute(make_entry("teleport", "x"))
        assert ok is False
        assert "Unknown command" in message

    def test_binding_failure_runs_nothing(self, registry, make_entry, player, caplog):
        with caplog.at_level(logging.ERROR):
            ok, message = registry.execute(make_entry("chat"))
        assert ok is False
        assert "message" in message
        assert "test_script:3" in caplog.text
        assert player.received == []

    def test_runtime_failure_is_reported(self, registry, make_entry):
        ok, message = registry.execute(make_entry("chat", "hi", npc=None))
        assert ok is False
        assert message == "Missing talker!"

    def test_empty_registry(self):
        assert CommandRegistry().names == []
