"""Unit tests for script entries and their linked entry data."""

import logging

import pytest

from script_bridge.entry import ScriptEntry, ScriptEntryData
from script_bridge.errors import ScriptLocation
from script_bridge.world import Entity


@pytest.mark.unit
class TestScriptEntryData:
    """from_entity links players and NPCs to the right slot."""

    def test_player(self, player):
        assert ScriptEntryData.from_entity(player) == ScriptEntryData(player=player)

    def test_npc(self, npc):
        assert ScriptEntryData.from_entity(npc) == ScriptEntryData(npc=npc)

    def test_mob_links_nothing(self):
        zombie = Entity(entity_type="zombie", name="Zombie")
        assert ScriptEntryData.from_entity(zombie) == ScriptEntryData()

    def test_none(self):
        assert ScriptEntryData.from_entity(None) == ScriptEntryData()


@pytest.mark.unit
class TestEchoDebug:
    """Debug lines honour both the script flag and the config switch."""

    def _entry(self, debug: bool) -> ScriptEntry:
        return ScriptEntry(command="chat", location=ScriptLocation("greeter", 7), debug=debug)

    def test_echo(self, caplog, monkeypatch):
        from script_bridge.config import config

        monkeypatch.setattr(config.debug, "echo", True)
        with caplog.at_level(logging.DEBUG, logger="script_bridge.entry"):
            self._entry(debug=True).echo_debug("hello")
        assert "[greeter:7] chat: hello" in caplog.text

    def test_script_debug_off(self, caplog, monkeypatch):
        from script_bridge.config import config

        monkeypatch.setattr(config.debug, "echo", True)
        with caplog.at_level(logging.DEBUG, logger="script_bridge.entry"):
            self._entry(debug=False).echo_debug("hello")
        assert caplog.text == ""

    def test_config_echo_off(self, caplog, monkeypatch):
        from script_bridge.config import config

        monkeypatch.setattr(config.debug, "echo", False)
        with caplog.at_level(logging.DEBUG, logger="script_bridge.entry"):
            self._entry(debug=True).echo_debug("hello")
        assert caplog.text == ""
