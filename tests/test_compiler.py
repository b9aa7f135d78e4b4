"""Tests for the category table and the sound-change compiler."""

import pytest

from conlang_editor import (
    CategoryTable,
    InvalidEnvironmentError,
    InvalidTargetError,
    PatternError,
    SoundChange,
    SoundChangeSet,
    ValidationError,
    apply_pipeline,
    compile_sound_change,
)


@pytest.fixture
def table():
    return CategoryTable({"A": "aeiou", "C": "ptk", "D": "bdg"})


class TestCategoryTable:

    def test_string_content_splits_per_character(self, table):
        assert table["C"] == ("p", "t", "k")

    def test_add_overwrites(self, table):
        table.add("C", "pk")
        assert table["C"] == ("p", "k")

    def test_key_must_be_one_character(self, table):
        with pytest.raises(ValidationError):
            table.add("CC", "ptk")

    def test_empty_content_rejected(self, table):
        with pytest.raises(ValidationError):
            table.add("E", "")
        with pytest.raises(ValidationError):
            table.add("E", ["a", ""])

    def test_remove_unknown(self, table):
        with pytest.raises(ValidationError):
            table.remove("Z")

    def test_char_class_single_graphemes(self, table):
        assert table.char_class("C") == "[ptk]"

    def test_char_class_multi_graphemes_longest_first(self):
        table = CategoryTable({"S": ["t", "ts", "tʃ"]})
        assert table.char_class("S") == "(?:ts|tʃ|t)"

    def test_expand_leaves_plain_characters(self, table):
        assert table.expand("xCy") == "x[ptk]y"

    def test_referenced_in_order(self, table):
        assert table.referenced("DaCD") == ["D", "C"]


class TestCompileSingle:

    def test_literal_replacement_gives_one_substitution(self, table):
        subs = compile_sound_change(table, SoundChange("C", "h", "A_A"))
        assert len(subs) == 1
        assert apply_pipeline(subs, "apata") == "ahaha"

    def test_matching_side_categories_act_as_classes(self, table):
        subs = compile_sound_change(table, SoundChange("h", "", "A_A"))
        assert len(subs) == 1
        assert apply_pipeline(subs, "aha") == "aa"
        assert apply_pipeline(subs, "hah") == "hah"

    def test_empty_environment_sides(self, table):
        subs = compile_sound_change(table, SoundChange("k", "x", "_"))
        assert apply_pipeline(subs, "kak") == "xax"

    def test_environment_anchors(self, table):
        subs = compile_sound_change(table, SoundChange("k", "g", "^_"))
        assert apply_pipeline(subs, "kak") == "gak"

    def test_user_groups_do_not_shift_context(self, table):
        subs = compile_sound_change(table, SoundChange("(p)h", "f", "A_"))
        assert apply_pipeline(subs, "apha") == "afa"

    def test_backslash_in_replacement_is_literal(self, table):
        subs = compile_sound_change(table, SoundChange("x", "\\", "_"))
        assert apply_pipeline(subs, "axa") == "a\\a"

    def test_group_reference_in_replacement_is_not_expanded(self, table):
        subs = compile_sound_change(table, SoundChange("(p)h", r"\1", "A_"))
        assert apply_pipeline(subs, "apha") == r"a\1a"


class TestCorrelatedExpansion:

    def test_voicing_between_vowels(self, table):
        subs = compile_sound_change(table, SoundChange("C", "D", "A_A"))
        assert len(subs) == 3
        assert apply_pipeline(subs, "apa") == "aba"
        assert apply_pipeline(subs, "ata") == "ada"
        assert apply_pipeline(subs, "aka") == "aga"

    def test_only_the_matching_position_changes(self, table):
        subs = compile_sound_change(table, SoundChange("C", "D", "A_A"))
        assert apply_pipeline(subs, "tapak") == "tabak"

    def test_fixpoint_reaches_overlapping_contexts(self, table):
        subs = compile_sound_change(table, SoundChange("C", "D", "A_A"))
        assert apply_pipeline(subs, "apata") == "abada"

    def test_count_is_minimum_of_both_sides(self, table):
        table.add("D", "bd")
        subs = compile_sound_change(table, SoundChange("C", "D", "_"))
        assert len(subs) == 2
        assert apply_pipeline(subs, "pk") == "bk"

    def test_minimum_over_several_target_categories(self, table):
        table.add("N", "mn")
        subs = compile_sound_change(table, SoundChange("NC", "D", "_"))
        assert len(subs) == 2
        assert apply_pipeline(subs, "amp") == "ab"
        assert apply_pipeline(subs, "ant") == "ad"

    def test_substitutions_are_concrete(self, table):
        subs = compile_sound_change(table, SoundChange("C", "D", "_"))
        for sub in subs:
            assert "[ptk]" not in sub.pattern
            assert "D" not in sub.replacement

    def test_multi_character_graphemes(self):
        table = CategoryTable({"S": ["ts", "t"], "Z": ["dz", "d"]})
        subs = compile_sound_change(table, SoundChange("S", "Z", "_"))
        assert len(subs) == 2
        assert apply_pipeline(subs, "tsat") == "dzad"

    def test_target_without_category(self, table):
        with pytest.raises(InvalidTargetError) as excinfo:
            compile_sound_change(table, SoundChange("p", "D", "_"))
        assert excinfo.value.target == "p"


class TestCompileErrors:

    @pytest.mark.parametrize("environment", ["", "a", "a_b_c", "__"])
    def test_environment_needs_exactly_one_marker(self, table, environment):
        with pytest.raises(InvalidEnvironmentError) as excinfo:
            compile_sound_change(table, SoundChange("p", "b", environment))
        assert excinfo.value.environment == environment

    def test_bad_regex_names_rule(self, table):
        with pytest.raises(PatternError) as excinfo:
            compile_sound_change(table, SoundChange("(", "x", "_"))
        assert excinfo.value.rule == "( > x / _"


class TestSoundChangeSet:

    def test_compile_all_keeps_rule_order(self, table):
        sca = SoundChangeSet(table)
        sca.add_rule(SoundChange("C", "D", "A_A"))
        sca.add_rule(SoundChange("b", "v", "_"))
        subs = sca.compile_all()
        assert len(subs) == 4
        assert subs[3].pattern == "(?P<ctx_before>)b(?P<ctx_after>)"
        assert apply_pipeline(subs, "apa") == "ava"

    def test_malformed_rule_not_stored(self, table):
        sca = SoundChangeSet(table)
        with pytest.raises(InvalidEnvironmentError):
            sca.add_rule(SoundChange("p", "b", "a"))
        assert sca.rules == []

    def test_insert_and_remove(self, table):
        sca = SoundChangeSet(table)
        first = SoundChange("p", "b", "_")
        second = SoundChange("b", "v", "_")
        sca.add_rule(second)
        sca.insert_rule(0, first)
        assert sca.rules == [first, second]
        assert sca.remove_rule(0) == first
        assert sca.rules == [second]

    def test_alter_returns_previous(self, table):
        sca = SoundChangeSet(table)
        old = SoundChange("p", "b", "_")
        sca.add_rule(old)
        assert sca.alter_rule(0, SoundChange("t", "d", "_")) == old
