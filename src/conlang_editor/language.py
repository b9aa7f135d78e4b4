"""Languages, their rule collections and transformation pipelines."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from conlang_editor.compiler import SoundChangeSet
from conlang_editor.models import Replace, RuleKind, Word
from conlang_editor.slots import (
    SlotList,
    rule_alter,
    rule_append,
    rule_insert,
    rule_remove,
)
from conlang_editor.substitution import (
    DEFAULT_LIMITS,
    Limits,
    Substitution,
    apply_pipeline,
)


@dataclass(frozen=True, slots=True)
class Pipelines:
    """The three compiled pipelines of a language, built fresh per use."""

    to_surface: tuple[Substitution, ...]
    to_phonetic: tuple[Substitution, ...]
    sound_change: tuple[Substitution, ...]

    def evolve(self, mnemonic: str) -> str:
        """Push an ancestor mnemonic through the sound-change chain."""
        return apply_pipeline(self.sound_change, mnemonic)

    def morph(self, word: Word) -> None:
        word.morph(self.to_surface, self.to_phonetic)


def compile_replace(
    rule: Replace, *, limits: Limits = DEFAULT_LIMITS
) -> Substitution:
    return Substitution(
        rule.pattern, rule.replacement,
        rule=str(rule), limits=limits,
    )


class Language:
    """A named language with a vocabulary and three rule collections."""

    def __init__(
        self,
        name: str,
        *,
        ancestor: int | None = None,
        vocab: SlotList[Word] | None = None,
        surface_rules: list[Replace] | None = None,
        phonetic_rules: list[Replace] | None = None,
        sound_changes: SoundChangeSet | None = None,
    ) -> None:
        self.name = name
        self.ancestor = ancestor
        self.vocab: SlotList[Word] = vocab if vocab is not None else SlotList()
        self.surface_rules: list[Replace] = list(surface_rules or [])
        self.phonetic_rules: list[Replace] = list(phonetic_rules or [])
        self.sound_changes = (
            sound_changes if sound_changes is not None else SoundChangeSet()
        )

    def __repr__(self) -> str:
        return f"Language({self.name!r}, ancestor={self.ancestor!r})"

    # ------------------------------------------------------------------
    # Pipelines
    # ------------------------------------------------------------------

    def build_pipelines(
        self, *, limits: Limits = DEFAULT_LIMITS
    ) -> Pipelines:
        return Pipelines(
            to_surface=tuple(
                compile_replace(r, limits=limits)
                for r in self.surface_rules
            ),
            to_phonetic=tuple(
                compile_replace(r, limits=limits)
                for r in self.phonetic_rules
            ),
            sound_change=tuple(
                self.sound_changes.compile_all(limits=limits)
            ),
        )

    # ------------------------------------------------------------------
    # Vocabulary
    # ------------------------------------------------------------------

    def add_word(self, word: Word, pipelines: Pipelines) -> int:
        pipelines.morph(word)
        return self.vocab.append(word)

    def alter_word(self, index: int, word: Word, pipelines: Pipelines) -> None:
        pipelines.morph(word)
        self.vocab.set(index, word)

    def get_word(self, index: int) -> Word:
        return self.vocab.get(index)

    def remove_word(self, index: int) -> Word | None:
        return self.vocab.remove(index)

    def words(self) -> Iterator[tuple[int, Word]]:
        return self.vocab.items()

    def morph_all(self, pipelines: Pipelines) -> int:
        count = 0
        for _, word in self.vocab.items():
            pipelines.morph(word)
            count += 1
        return count

    # ------------------------------------------------------------------
    # Plain rule lists (mnemonic to surface / phonetic)
    # ------------------------------------------------------------------

    def rules(self, kind: RuleKind) -> list[Replace]:
        if kind is RuleKind.SURFACE:
            return self.surface_rules
        if kind is RuleKind.PHONETIC:
            return self.phonetic_rules
        raise ValueError(f"Not a plain rule list: {kind.value}")

    def add_rule(self, kind: RuleKind, rule: Replace) -> int:
        compile_replace(rule)
        return rule_append(self.rules(kind), rule)

    def alter_rule(self, kind: RuleKind, index: int, rule: Replace) -> Replace:
        compile_replace(rule)
        return rule_alter(self.rules(kind), index, rule)

    def insert_rule(self, kind: RuleKind, index: int, rule: Replace) -> None:
        compile_replace(rule)
        rule_insert(self.rules(kind), index, rule)

    def remove_rule(self, kind: RuleKind, index: int) -> Replace:
        return rule_remove(self.rules(kind), index)
