"""Tests for the slot arena and rule-list helpers."""

import pytest

from conlang_editor import IndexOutOfRangeError, InvalidElementError, SlotList
from conlang_editor.slots import rule_alter, rule_append, rule_insert, rule_remove


class TestSlotList:

    def test_append_returns_index(self):
        slots = SlotList()
        assert slots.append("a") == 0
        assert slots.append("b") == 1
        assert len(slots) == 2

    def test_get_out_of_range(self):
        slots = SlotList(["a"])
        with pytest.raises(IndexOutOfRangeError) as excinfo:
            slots.get(3)
        assert excinfo.value.index == 3
        assert excinfo.value.length == 1
        with pytest.raises(IndexOutOfRangeError):
            slots.get(-1)

    def test_remove_keeps_indices(self):
        slots = SlotList(["a", "b", "c"])
        assert slots.remove(1) == "b"
        assert len(slots) == 3
        assert slots.get(2) == "c"
        with pytest.raises(InvalidElementError) as excinfo:
            slots.get(1)
        assert excinfo.value.index == 1

    def test_items_skip_removed(self):
        slots = SlotList(["a", "b", "c"])
        slots.remove(0)
        assert list(slots.items()) == [(1, "b"), (2, "c")]
        assert slots.raw() == [None, "b", "c"]

    def test_set_revives(self):
        slots = SlotList(["a"])
        slots.remove(0)
        slots.set(0, "z")
        assert slots.get(0) == "z"
        assert slots.is_live(0)

    def test_set_out_of_range(self):
        with pytest.raises(IndexOutOfRangeError):
            SlotList().set(0, "a")

    def test_append_after_remove_does_not_reuse(self):
        slots = SlotList(["a"])
        slots.remove(0)
        assert slots.append("b") == 1

    def test_is_live(self):
        slots = SlotList(["a", None])
        assert slots.is_live(0)
        assert not slots.is_live(1)
        assert not slots.is_live(5)


class TestRuleList:

    def test_append(self):
        rules = []
        assert rule_append(rules, "x") == 0

    def test_alter(self):
        rules = ["x"]
        assert rule_alter(rules, 0, "y") == "x"
        assert rules == ["y"]
        with pytest.raises(IndexOutOfRangeError):
            rule_alter(rules, 1, "z")

    def test_insert_bounds(self):
        rules = ["a", "c"]
        rule_insert(rules, 1, "b")
        rule_insert(rules, 3, "d")
        assert rules == ["a", "b", "c", "d"]
        with pytest.raises(IndexOutOfRangeError):
            rule_insert(rules, 5, "e")
        with pytest.raises(IndexOutOfRangeError):
            rule_insert(rules, -1, "e")

    def test_remove_compacts(self):
        rules = ["a", "b", "c"]
        assert rule_remove(rules, 1) == "b"
        assert rules == ["a", "c"]
        with pytest.raises(IndexOutOfRangeError):
            rule_remove(rules, 2)
