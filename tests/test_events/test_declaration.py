"""Unit tests for trigger declaration parsing."""

from __future__ import annotations

import pytest

from script_bridge.errors import ScriptLoadError
from script_bridge.events.declaration import parse_declaration


@pytest.mark.unit
class TestParseDeclaration:
    """Event lines become structured, immutable declarations."""

    def test_name_and_switches(self):
        declaration = parse_declaration("on loot generates for:chest in:Spawn_Area")
        assert declaration.event_name == "loot generates"
        assert declaration.switches == (("for", "chest"), ("in", "Spawn_Area"))
        assert declaration.event_lower == "loot generates for:chest in:spawn_area"

    def test_on_is_optional(self):
        assert parse_declaration("loot generates").event_name == "loot generates"

    def test_after_prefix(self):
        declaration = parse_declaration("after loot generates")
        assert declaration.after is True
        assert str(declaration).startswith("after loot generates")

    def test_switch_names_are_lower_cased(self):
        declaration = parse_declaration("on loot generates FOR:Chest")
        assert declaration.switch("for") == "Chest"
        assert declaration.has_switch("for")
        assert declaration.switch("in") is None

    def test_priority(self):
        assert parse_declaration("on loot generates priority:-5").priority == -5

    def test_first_word_is_always_a_name(self):
        declaration = parse_declaration("on custom:thing happens")
        assert declaration.event_name == "custom:thing happens"
        assert declaration.switches == ()

    def test_location_carries_script_and_line(self):
        declaration = parse_declaration("on loot generates", script_name="tweaks", line=7)
        assert str(declaration.location) == "tweaks:7"

    def test_bind_sets_cancellable_on_a_copy(self):
        declaration = parse_declaration("on loot generates")
        bound = declaration.bind(cancellable=True)
        assert bound.cancellable is True
        assert declaration.cancellable is False

    def test_declarations_are_frozen(self):
        declaration = parse_declaration("on loot generates")
        with pytest.raises(AttributeError):
            declaration.priority = 3  # type: ignore[misc]


@pytest.mark.unit
class TestParseDeclarationErrors:
    """Malformed lines fail at load time."""

    def test_empty_line(self):
        with pytest.raises(ScriptLoadError, match="empty event line"):
            parse_declaration("on")

    def test_repeated_switch(self):
        with pytest.raises(ScriptLoadError, match="more than once"):
            parse_declaration("on loot generates for:chest for:barrel")

    def test_bad_priority(self):
        with pytest.raises(ScriptLoadError, match="priority"):
            parse_declaration("on loot generates priority:high")

    def test_bad_regex(self):
        with pytest.raises(ScriptLoadError, match="invalid regex"):
            parse_declaration("on loot generates for:regex:(chest", script_name="s", line=2)

    def test_word_after_switches(self):
        with pytest.raises(ScriptLoadError, match="unexpected word 'extra'"):
            parse_declaration("on loot generates for:chest extra words")
