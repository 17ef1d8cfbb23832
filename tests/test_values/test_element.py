"""Unit tests for ElementValue, parse_value and to_value."""

from __future__ import annotations

import pytest

from script_bridge.errors import ValueParseError
from script_bridge.values import (
    ElementValue,
    EntityRef,
    ItemRef,
    ListValue,
    parse_value,
    to_value,
)
from script_bridge.values.core import ParseContext
from script_bridge.world import ItemStack


@pytest.mark.unit
class TestElementCoercions:
    """Numeric and boolean readings of scalar text."""

    def test_int_reading(self):
        element = ElementValue("42")
        assert element.is_int()
        assert element.as_int() == 42

    def test_non_int_raises_value_parse_error(self):
        element = ElementValue("4.5")
        assert not element.is_int()
        with pytest.raises(ValueParseError, match="Integer"):
            element.as_int()

    def test_double_reading(self):
        assert ElementValue("-1").as_double() == pytest.approx(-1.0)
        assert ElementValue("2.5").is_double()
        assert not ElementValue("two").is_double()

    @pytest.mark.parametrize("text", ["true", "TRUE", "yes", "on"])
    def test_true_words(self, text):
        assert ElementValue(text).as_boolean() is True

    @pytest.mark.parametrize("text", ["false", "No", "off"])
    def test_false_words(self, text):
        assert ElementValue(text).as_boolean() is False

    def test_non_boolean_raises(self):
        element = ElementValue("maybe")
        assert not element.is_boolean()
        with pytest.raises(ValueParseError):
            element.as_boolean()

    def test_python_bool_is_lower_case_text(self):
        assert ElementValue(True).identify() == "true"
        assert ElementValue(False).identify() == "false"


@pytest.mark.unit
class TestDefaultSentinel:
    """The text ``none`` means "no override"."""

    @pytest.mark.parametrize("text", ["none", "NONE", " None "])
    def test_none_is_default(self, text):
        assert ElementValue(text).is_default()

    def test_other_text_is_not_default(self):
        assert not ElementValue("nothing").is_default()


@pytest.mark.unit
class TestElementRoundTrip:
    """value_of(identify(v)) == v."""

    @pytest.mark.parametrize("text", ["", "hello world", "12", "a|b", "LOOT:diamond"])
    def test_round_trip(self, text):
        element = ElementValue(text)
        assert ElementValue.value_of(element.identify()) == element

    def test_equality_is_by_type_and_text(self):
        assert ElementValue("1") == ElementValue(1)
        assert ElementValue("1") != ListValue([ElementValue("1")])
        assert hash(ElementValue("x")) == hash(ElementValue("x"))


@pytest.mark.unit
class TestParseValue:
    """Prefix dispatch for text forms."""

    def test_unprefixed_text_is_element(self):
        assert isinstance(parse_value("diamond"), ElementValue)

    def test_unknown_prefix_is_element(self):
        value = parse_value("user@example.org")
        assert isinstance(value, ElementValue)
        assert value.identify() == "user@example.org"

    def test_item_prefix(self):
        value = parse_value("i@diamond[quantity=2]")
        assert isinstance(value, ItemRef)
        assert value.quantity == 2

    def test_entity_prefix_resolves_through_host(self, host, player):
        value = parse_value(f"e@{player.entity_id}", ParseContext(host=host))
        assert isinstance(value, EntityRef)
        assert value.entity is player


@pytest.mark.unit
class TestToValue:
    """Wrapping Python and host objects."""

    def test_scalars(self):
        assert to_value("x") == ElementValue("x")
        assert to_value(3) == ElementValue("3")
        assert to_value(True) == ElementValue("true")

    def test_value_passes_through(self):
        element = ElementValue("x")
        assert to_value(element) is element

    def test_native_item_stack(self):
        value = to_value(ItemStack("coal", 4))
        assert value == ItemRef("coal", 4)

    def test_list_of_mixed(self, player):
        value = to_value(["a", player])
        assert isinstance(value, ListValue)
        assert isinstance(value[1], EntityRef)

    def test_unknown_object_raises_type_error(self):
        with pytest.raises(TypeError):
            to_value(object())
