"""Unit tests for the argument binder.

Tests cover:
- Argument count checks
- Prefixed, flag, positional and linear binding
- List conversion and its atomicity
- Defaults, including computed defaults
- Pass-through of unknown prefixes
"""

from __future__ import annotations

import pytest

from script_bridge.commands import (
    DEFAULT_NULL,
    ChatCommand,
    FromContext,
    SignatureBuilder,
    bind_arguments,
)
from script_bridge.errors import ArgumentError
from script_bridge.values import EntityRef, ItemRef

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

GREEDY = SignatureBuilder("greedy").prefixed("x").linear("b").build()

GIVE = (
    SignatureBuilder("give")
    .arguments(required=1, maximum=4)
    .positional("items", ItemRef, many=True)
    .prefixed("quantity", int, default="1", synonyms=("qty",))
    .prefixed("slot", int, default=DEFAULT_NULL)
    .flag("silent")
    .build()
)


def _bind(signature, *tokens, entry):
    return bind_arguments(signature, tokens, entry)


# ---------------------------------------------------------------------------
# Counts
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestCounts:
    """Argument counts are checked before anything else."""

    def test_missing_message_names_message(self, make_entry):
        with pytest.raises(ArgumentError) as info:
            _bind(ChatCommand.signature, entry=make_entry("chat"))
        assert info.value.parameter_name == "message"

    def test_too_many_is_aggregate(self, make_entry):
        with pytest.raises(ArgumentError) as info:
            _bind(ChatCommand.signature, "a", "b", "c", "d", "e", entry=make_entry("chat"))
        assert info.value.parameter_name is None
        assert "at most 4" in info.value.reason

    @pytest.mark.parametrize(
        "tokens",
        [
            ("diamond", "stick"),
            ("diamond", "stick", "coal"),
            ("diamond", "silent", "stick"),
            ("diamond", "colour:red"),
        ],
    )
    def test_count_valid_failures_name_a_parameter(self, make_entry, tokens):
        with pytest.raises(ArgumentError) as info:
            _bind(GIVE, *tokens, entry=make_entry("give"))
        assert info.value.parameter_name is not None


# ---------------------------------------------------------------------------
# Binding
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestBinding:
    """Tokens land on the right parameters."""

    def test_linear_is_greedy(self, make_entry):
        args = _bind(GREEDY, "x:1", "hello", "world", entry=make_entry("greedy"))
        assert args["x"] == "1"
        assert args["b"] == "hello world"

    def test_prefix_position_does_not_matter(self, make_entry):
        args = _bind(GREEDY, "hello", "x:1", "world", entry=make_entry("greedy"))
        assert args == {"x": "1", "b": "hello world"}

    def test_synonyms_are_case_insensitive(self, make_entry):
        args = _bind(GIVE, "diamond", "QTY:3", entry=make_entry("give"))
        assert args["quantity"] == 3

    def test_flag(self, make_entry):
        args = _bind(GIVE, "diamond", "silent", entry=make_entry("give"))
        assert args["silent"] is True

    def test_absent_flag_is_false(self, make_entry):
        assert _bind(GIVE, "diamond", entry=make_entry("give"))["silent"] is False

    def test_repeated_prefix(self, make_entry):
        with pytest.raises(ArgumentError) as info:
            _bind(GIVE, "diamond", "qty:1", "quantity:2", entry=make_entry("give"))
        assert info.value.parameter_name == "quantity"

    def test_unknown_prefix_rejected(self, make_entry):
        with pytest.raises(ArgumentError, match="unknown prefix 'colour'") as info:
            _bind(GIVE, "diamond", "colour:red", entry=make_entry("give"))
        assert info.value.parameter_name == "items"

    def test_leftover_tokens_name_the_last_positional(self, make_entry):
        with pytest.raises(ArgumentError, match="unexpected argument 'stick'") as info:
            _bind(GIVE, "diamond", "stick", entry=make_entry("give"))
        assert info.value.parameter_name == "items"

    def test_namespaced_value_fills_an_open_positional(self, make_entry, host):
        host.register_material("modpack:ruby")
        args = _bind(GIVE, "modpack:ruby", "qty:2", entry=make_entry("give"))
        assert args["items"] == [ItemRef("modpack:ruby")]
        assert args["quantity"] == 2

    def test_unknown_prefix_without_parameters(self, make_entry):
        signature = SignatureBuilder("ping").arguments(maximum=1).build()
        with pytest.raises(ArgumentError, match="unknown prefix 'x'") as info:
            _bind(signature, "x:1", entry=make_entry("ping"))
        assert info.value.parameter_name is None

    def test_extras_are_kept_when_tolerated(self, make_entry):
        signature = SignatureBuilder("wave").tolerate_extras().positional("who").build()
        args = _bind(signature, "bob", "wildly", "mood:happy", entry=make_entry("wave"))
        assert args["who"] == "bob"
        assert args.extras == ("wildly", "mood:happy")

    def test_unknown_prefix_passes_through_when_tolerated(self, make_entry):
        args = _bind(ChatCommand.signature, "see", "https://example.org", entry=make_entry("chat"))
        assert args["message"] == "see https://example.org"

    def test_result_is_read_only(self, make_entry):
        args = _bind(GREEDY, "hi", entry=make_entry("greedy"))
        with pytest.raises(TypeError):
            args["b"] = "x"  # type: ignore[index]


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestConversion:
    """Typed conversion, with failures naming the parameter."""

    def test_list_conversion(self, make_entry):
        args = _bind(GIVE, "diamond|i@coal[quantity=2]", entry=make_entry("give"))
        assert args["items"] == [ItemRef("diamond"), ItemRef("coal", 2)]

    def test_one_bad_element_fails_the_parameter(self, make_entry):
        with pytest.raises(ArgumentError) as info:
            _bind(GIVE, "diamond|unobtainium|stick", entry=make_entry("give"))
        assert info.value.parameter_name == "items"

    def test_bad_int(self, make_entry):
        with pytest.raises(ArgumentError) as info:
            _bind(GIVE, "diamond", "qty:lots", entry=make_entry("give"))
        assert info.value.parameter_name == "quantity"

    def test_entity_list(self, make_entry, player, npc):
        args = _bind(
            ChatCommand.signature,
            "hi",
            f"targets:e@{player.entity_id}|e@{npc.entity_id}",
            entry=make_entry("chat"),
        )
        assert [ref.entity for ref in args["targets"]] == [player, npc]
        assert all(isinstance(ref, EntityRef) for ref in args["targets"])

    def test_unknown_entity(self, make_entry):
        with pytest.raises(ArgumentError) as info:
            _bind(ChatCommand.signature, "hi", "t:e@ghost", entry=make_entry("chat"))
        assert info.value.parameter_name == "targets"


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestDefaults:
    """Absent parameters get their declared defaults."""

    def test_literal_default_is_converted(self, make_entry):
        args = _bind(GIVE, "diamond", entry=make_entry("give"))
        assert args["quantity"] == 1
        assert args["slot"] is None

    def test_chat_range_default(self, make_entry):
        args = _bind(ChatCommand.signature, "hi", entry=make_entry("chat"))
        assert args["range"] == -1.0
        assert args["targets"] is None
        assert args["talkers"] is None
        assert args["no_target"] is False

    def test_default_from_context(self, make_entry, player):
        signature = (
            SignatureBuilder("heal")
            .prefixed(
                "target",
                EntityRef,
                default=FromContext(lambda entry: EntityRef(entry.player), "linked player"),
            )
            .build()
        )
        args = _bind(signature, entry=make_entry("heal"))
        assert args["target"].entity is player

    def test_missing_required_positional(self, make_entry):
        signature = (
            SignatureBuilder("x").prefixed("a", default=DEFAULT_NULL).positional("b").build()
        )
        with pytest.raises(ArgumentError) as info:
            _bind(signature, "a:1", entry=make_entry("x"))
        assert info.value.parameter_name == "b"
        assert info.value.reason == "missing required argument"
