"""Shared test fixtures for conlang-editor."""

import pytest

from conlang_editor import ConlangEditor


@pytest.fixture
def editor():
    """Create an empty project for testing."""
    return ConlangEditor()


@pytest.fixture
def editor_with_pos(editor):
    """Project with parts of speech 0 'noun' and 1 'verb'."""
    editor.add_pos("noun", "n")
    editor.add_pos("verb", "v")
    return editor


@pytest.fixture
def editor_with_lineage(editor_with_pos):
    """Proto (0) with three words and Daughter (1) that voices stops between vowels.

    Proto vocabulary: 0 pata 'foot', 1 miru 'see', 2 kato 'cat'.
    """
    ed = editor_with_pos
    proto = ed.add_language("Proto")
    daughter = ed.add_language("Daughter")
    ed.add_word(proto, "pata", "foot", 0)
    ed.add_word(proto, "miru", "see", 1)
    ed.add_word(proto, "kato", "cat", 0, note="domestic")
    ed.add_category(daughter, "A", "aeiou")
    ed.add_category(daughter, "C", "ptk")
    ed.add_category(daughter, "D", "bdg")
    ed.add_sound_change(daughter, "C", "D", "A_A")
    return ed, proto, daughter
