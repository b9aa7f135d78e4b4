"""Tests for the ConlangEditor command surface."""

import pytest

from conlang_editor import (
    ConlangEditor,
    Coordinate,
    DeriveFromSelfError,
    EngineConfig,
    InvalidElementError,
    NonTerminatingRuleError,
    PartOfSpeech,
    PatternError,
    Replace,
    RuleKind,
    SoundChange,
    ValidationError,
    parse_coordinate,
)


class TestInit:

    def test_empty_project(self, editor):
        assert editor.list_languages() == []
        assert editor.list_pos() == []
        assert editor.config == EngineConfig()

    def test_custom_config(self):
        editor = ConlangEditor(EngineConfig(max_iterations=3))
        assert editor.config.max_iterations == 3


class TestLanguages:

    def test_add_and_find(self, editor):
        idx = editor.add_language("Proto")
        assert idx == 0
        assert editor.find_language("Proto") == 0
        assert editor.find_language("Missing") is None

    def test_rename(self, editor):
        idx = editor.add_language("Proto")
        editor.rename_language(idx, "Old Proto")
        assert editor.get_language(idx).name == "Old Proto"

    def test_remove_keeps_indices(self, editor):
        editor.add_language("A")
        editor.add_language("B")
        editor.remove_language(0)
        assert [i for i, _ in editor.list_languages()] == [1]
        with pytest.raises(InvalidElementError):
            editor.get_language(0)

    def test_set_ancestor(self, editor):
        a = editor.add_language("A")
        b = editor.add_language("B")
        editor.set_ancestor(b, a)
        assert editor.ancestry(b) == [a]
        editor.set_ancestor(b, None)
        assert editor.ancestry(b) == []

    def test_set_ancestor_to_self(self, editor):
        a = editor.add_language("A")
        with pytest.raises(DeriveFromSelfError):
            editor.set_ancestor(a, a)

    def test_ancestry_chain(self, editor):
        a = editor.add_language("A")
        b = editor.add_language("B")
        c = editor.add_language("C")
        editor.set_ancestor(b, a)
        editor.set_ancestor(c, b)
        assert editor.ancestry(c) == [b, a]
        assert not editor.has_ancestry_cycle(c)

    def test_ancestry_stops_at_missing_language(self, editor):
        a = editor.add_language("A")
        b = editor.add_language("B")
        editor.set_ancestor(b, a)
        editor.remove_language(a)
        assert editor.ancestry(b) == [a]
        assert not editor.has_ancestry_cycle(b)


class TestPartsOfSpeech:

    def test_crud(self, editor_with_pos):
        ed = editor_with_pos
        assert ed.pos_index("v") == 1
        ed.alter_pos(1, "adjective", "adj")
        assert ed.get_pos(1) == PartOfSpeech("adjective", "adj")
        ed.remove_pos(0)
        assert ed.list_pos() == [(1, PartOfSpeech("adjective", "adj"))]
        assert ed.pos_index("n") is None


class TestWords:

    def test_add_word_morphs(self, editor_with_pos):
        ed = editor_with_pos
        lang = ed.add_language("L")
        ed.add_surface_rule(lang, "sh", "ʃ")
        idx = ed.add_word(lang, "shala", "sun", 0, note="sky")
        word = ed.get_word(lang, idx)
        assert word.surface == "ʃala"
        assert word.phonetic == "shala"
        assert word.note == "sky"

    def test_alter_word_keeps_unset_fields(self, editor_with_pos):
        ed = editor_with_pos
        lang = ed.add_language("L")
        ed.add_surface_rule(lang, "a", "á")
        idx = ed.add_word(lang, "pata", "foot", 0, ancestors=[Coordinate(5, 1)])
        word = ed.alter_word(lang, idx, mnemonic="pota")
        assert word.surface == "potá"
        assert word.gloss == "foot"
        assert word.ancestors == [Coordinate(5, 1)]
        word = ed.alter_word(lang, idx, ancestors=[])
        assert word.ancestors == []
        assert ed.get_word(lang, idx) == word

    def test_remove_word(self, editor_with_pos):
        ed = editor_with_pos
        lang = ed.add_language("L")
        ed.add_word(lang, "a", "a", 0)
        ed.add_word(lang, "b", "b", 0)
        ed.remove_word(lang, 0)
        assert [i for i, _ in ed.list_words(lang)] == [1]

    def test_resolve_revalidates(self, editor_with_lineage):
        ed, proto, _ = editor_with_lineage
        coord = Coordinate(proto, 1)
        assert ed.resolve(coord).mnemonic == "miru"
        ed.remove_word(proto, 1)
        with pytest.raises(InvalidElementError):
            ed.resolve(coord)

    def test_morph_all(self, editor_with_lineage):
        ed, proto, _ = editor_with_lineage
        ed.add_surface_rule(proto, "k", "c")
        assert ed.get_word(proto, 2).surface == "kato"
        assert ed.morph_all() == 3
        assert ed.get_word(proto, 2).surface == "cato"

    def test_preview(self, editor_with_lineage):
        ed, _, daughter = editor_with_lineage
        ed.add_surface_rule(daughter, "t", "θ")
        preview = ed.preview(daughter, "atak")
        assert preview.surface == "aθak"
        assert preview.phonetic == "atak"
        assert preview.evolved == "adak"
        assert ed.list_words(daughter) == []

    def test_non_terminating_rule_reported(self, editor_with_pos):
        ed = editor_with_pos
        ed.config = EngineConfig(max_iterations=10)
        lang = ed.add_language("L")
        ed.add_surface_rule(lang, "a", "aa")
        with pytest.raises(NonTerminatingRuleError):
            ed.add_word(lang, "a", "a", 0)

    def test_growing_rule_stopped_with_default_config(self, editor_with_pos):
        ed = editor_with_pos
        lang = ed.add_language("L")
        ed.add_surface_rule(lang, "a", "aa")
        with pytest.raises(NonTerminatingRuleError) as excinfo:
            ed.add_word(lang, "a", "x", 0)
        assert excinfo.value.length == 257
        assert excinfo.value.iterations < ed.config.max_iterations

    def test_epenthesis_everywhere_stopped(self, editor_with_pos):
        ed = editor_with_pos
        lang = ed.add_language("L")
        ed.add_sound_change(lang, "", "e", "_")
        with pytest.raises(NonTerminatingRuleError, match="grew"):
            ed.preview(lang, "ka")

    def test_growth_bound_from_config(self, editor_with_pos):
        ed = editor_with_pos
        ed.config = EngineConfig(growth_factor=2, growth_margin=0)
        lang = ed.add_language("L")
        ed.add_surface_rule(lang, "a", "aa")
        with pytest.raises(NonTerminatingRuleError) as excinfo:
            ed.add_word(lang, "aa", "x", 0)
        assert excinfo.value.length == 4
        assert excinfo.value.iterations == 2


class TestRules:

    def test_surface_rule_wrappers(self, editor):
        lang = editor.add_language("L")
        editor.add_surface_rule(lang, "b", "c")
        editor.insert_surface_rule(lang, 0, "a", "b")
        assert editor.list_surface_rules(lang) == [
            (0, Replace("a", "b")),
            (1, Replace("b", "c")),
        ]
        editor.alter_surface_rule(lang, 1, "b", "d")
        editor.remove_surface_rule(lang, 0)
        assert editor.list_rules(lang, RuleKind.SURFACE) == [(0, Replace("b", "d"))]

    def test_phonetic_rule_wrappers(self, editor):
        lang = editor.add_language("L")
        editor.add_phonetic_rule(lang, "c", "k")
        editor.insert_phonetic_rule(lang, 1, "k", "q")
        editor.alter_phonetic_rule(lang, 0, "c", "g")
        assert editor.list_phonetic_rules(lang) == [
            (0, Replace("c", "g")),
            (1, Replace("k", "q")),
        ]
        editor.remove_phonetic_rule(lang, 1)
        assert len(editor.list_phonetic_rules(lang)) == 1

    def test_bad_pattern_rejected(self, editor):
        lang = editor.add_language("L")
        with pytest.raises(PatternError):
            editor.add_surface_rule(lang, "[a", "b")
        assert editor.list_surface_rules(lang) == []

    def test_categories(self, editor):
        lang = editor.add_language("L")
        editor.add_category(lang, "V", "aeiou")
        editor.add_category(lang, "S", ["ts", "dz"])
        assert editor.list_categories(lang) == [
            ("V", ("a", "e", "i", "o", "u")),
            ("S", ("ts", "dz")),
        ]
        editor.remove_category(lang, "S")
        assert [k for k, _ in editor.list_categories(lang)] == ["V"]
        with pytest.raises(ValidationError):
            editor.add_category(lang, "VV", "ae")

    def test_sound_changes(self, editor):
        lang = editor.add_language("L")
        editor.add_sound_change(lang, "t", "d", "_")
        editor.insert_sound_change(lang, 0, "p", "b", "_")
        editor.alter_sound_change(lang, 1, "k", "g", "_")
        assert editor.list_sound_changes(lang) == [
            (0, SoundChange("p", "b", "_")),
            (1, SoundChange("k", "g", "_")),
        ]
        editor.remove_sound_change(lang, 0)
        assert editor.list_sound_changes(lang) == [(0, SoundChange("k", "g", "_"))]


class TestBatch:

    def test_rollback_on_exception(self, editor_with_pos):
        ed = editor_with_pos
        lang = ed.add_language("L")
        with pytest.raises(PatternError):
            with ed.batch():
                ed.add_word(lang, "a", "a", 0)
                ed.add_language("M")
                ed.add_surface_rule(lang, "(", "x")
        assert ed.list_words(lang) == []
        assert ed.find_language("M") is None

    def test_commit(self, editor_with_pos):
        ed = editor_with_pos
        with ed.batch():
            ed.add_language("L")
        assert ed.find_language("L") == 0

    def test_nested_rolls_back_to_outermost(self, editor):
        with pytest.raises(ValueError):
            with editor.batch():
                editor.add_language("A")
                with editor.batch():
                    editor.add_language("B")
                raise ValueError("boom")
        assert editor.list_languages() == []


class TestParseCoordinate:

    def test_parse(self):
        assert parse_coordinate("1:4") == Coordinate(1, 4)
        assert str(Coordinate(1, 4)) == "1:4"

    @pytest.mark.parametrize("text", ["1", "a:b", "1:", ":2"])
    def test_invalid(self, text):
        with pytest.raises(ValidationError):
            parse_coordinate(text)
