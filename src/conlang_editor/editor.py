"""ConlangEditor: main entry point for the conlang-editor library."""

from __future__ import annotations

import copy
import logging
from collections.abc import Generator, Iterable, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from conlang_editor.config import EngineConfig
from conlang_editor.exceptions import (
    DeriveFromSelfError,
    IndexOutOfRangeError,
    ValidationError,
)
from conlang_editor.language import Language, Pipelines
from conlang_editor.lineage import DerivationReport, derive_vocabulary
from conlang_editor.models import (
    Coordinate,
    PartOfSpeech,
    Replace,
    RuleKind,
    SoundChange,
    ValidationResult,
    Word,
)
from conlang_editor.slots import SlotList

logger = logging.getLogger(__name__)

# Sentinel for "no change" in alter methods
_UNSET: Any = type("_UNSET", (), {"__repr__": lambda self: "..."})()


@dataclass(frozen=True, slots=True)
class Preview:
    """What a mnemonic would become in a language, without storing it."""

    surface: str
    phonetic: str
    evolved: str


class ConlangEditor:
    """A programmatic API for editing a constructed-language project."""

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config if config is not None else EngineConfig()
        self.languages: SlotList[Language] = SlotList()
        self.parts_of_speech: SlotList[PartOfSpeech] = SlotList()
        self._batch_depth = 0
        self._snapshot: tuple[SlotList[Language], SlotList[PartOfSpeech]] | None = None

    # ------------------------------------------------------------------
    # Batch context manager
    # ------------------------------------------------------------------

    @contextmanager
    def batch(self) -> Generator[None, None, None]:
        """Group several edits; any exception restores the prior state."""
        self._batch_depth += 1
        if self._batch_depth == 1:
            self._snapshot = copy.deepcopy((self.languages, self.parts_of_speech))
        try:
            yield
        except BaseException:
            if self._batch_depth == 1 and self._snapshot is not None:
                self.languages, self.parts_of_speech = self._snapshot
                self._snapshot = None
            self._batch_depth -= 1
            raise
        else:
            self._batch_depth -= 1
            if self._batch_depth == 0:
                self._snapshot = None

    # ------------------------------------------------------------------
    # Language Operations
    # ------------------------------------------------------------------

    def add_language(self, name: str) -> int:
        idx = self.languages.append(Language(name))
        logger.debug(f"Added language {idx}: {name}")
        return idx

    def rename_language(self, lang: int, name: str) -> None:
        self.get_language(lang).name = name

    def set_ancestor(self, lang: int, ancestor: int | None) -> None:
        """Point a language at its ancestor without deriving."""
        language = self.get_language(lang)
        if ancestor is not None:
            if ancestor == lang:
                raise DeriveFromSelfError(lang)
            self.get_language(ancestor)
        language.ancestor = ancestor

    def remove_language(self, lang: int) -> None:
        self.languages.remove(lang)

    def get_language(self, lang: int) -> Language:
        return self.languages.get(lang)

    def list_languages(self) -> list[tuple[int, Language]]:
        return list(self.languages.items())

    def find_language(self, name: str) -> int | None:
        for idx, language in self.languages.items():
            if language.name == name:
                return idx
        return None

    def ancestry(self, lang: int) -> list[int]:
        """Ancestor indices from parent upwards.

        Stops at a root, at a missing language, or just before an index
        would repeat.
        """
        chain: list[int] = []
        seen = {lang}
        current = self.get_language(lang).ancestor
        while current is not None and current not in seen:
            chain.append(current)
            seen.add(current)
            if not self.languages.is_live(current):
                break
            current = self.languages.get(current).ancestor
        return chain

    def has_ancestry_cycle(self, lang: int) -> bool:
        """True when walking up from *lang* revisits an index."""
        seen = {lang}
        current = self.get_language(lang).ancestor
        while current is not None:
            if current in seen:
                return True
            if not self.languages.is_live(current):
                return False
            seen.add(current)
            current = self.languages.get(current).ancestor
        return False

    # ------------------------------------------------------------------
    # Part-of-Speech Operations
    # ------------------------------------------------------------------

    def add_pos(self, name: str, abbr: str) -> int:
        return self.parts_of_speech.append(PartOfSpeech(name, abbr))

    def alter_pos(self, idx: int, name: str, abbr: str) -> None:
        self.parts_of_speech.set(idx, PartOfSpeech(name, abbr))

    def remove_pos(self, idx: int) -> None:
        self.parts_of_speech.remove(idx)

    def get_pos(self, idx: int) -> PartOfSpeech:
        return self.parts_of_speech.get(idx)

    def list_pos(self) -> list[tuple[int, PartOfSpeech]]:
        return list(self.parts_of_speech.items())

    def pos_index(self, abbr: str) -> int | None:
        for idx, pos in self.parts_of_speech.items():
            if pos.abbr == abbr:
                return idx
        return None

    # ------------------------------------------------------------------
    # Word Operations
    # ------------------------------------------------------------------

    def pipelines(self, lang: int) -> Pipelines:
        return self.get_language(lang).build_pipelines(
            limits=self.config.limits()
        )

    def add_word(
        self,
        lang: int,
        mnemonic: str,
        gloss: str,
        pos: int,
        *,
        note: str = "",
        ancestors: Iterable[Coordinate] = (),
    ) -> int:
        language = self.get_language(lang)
        word = Word(
            mnemonic=mnemonic, gloss=gloss, pos=pos, note=note,
            ancestors=list(ancestors),
        )
        return language.add_word(word, self.pipelines(lang))

    def alter_word(
        self,
        lang: int,
        idx: int,
        *,
        mnemonic: str | None = None,
        gloss: str | None = None,
        pos: int | None = None,
        note: str | None = None,
        ancestors: Any = _UNSET,
    ) -> Word:
        """Update authored fields of a word and recompute the others."""
        language = self.get_language(lang)
        old = language.get_word(idx)
        word = Word(
            mnemonic=old.mnemonic if mnemonic is None else mnemonic,
            gloss=old.gloss if gloss is None else gloss,
            pos=old.pos if pos is None else pos,
            note=old.note if note is None else note,
            ancestors=list(old.ancestors if ancestors is _UNSET else ancestors),
        )
        language.alter_word(idx, word, self.pipelines(lang))
        return word

    def remove_word(self, lang: int, idx: int) -> None:
        self.get_language(lang).remove_word(idx)

    def get_word(self, lang: int, idx: int) -> Word:
        return self.get_language(lang).get_word(idx)

    def resolve(self, coordinate: Coordinate) -> Word:
        """Dereference a lineage coordinate, re-validated every time."""
        return self.get_language(coordinate.lang).get_word(coordinate.word)

    def list_words(self, lang: int) -> list[tuple[int, Word]]:
        return list(self.get_language(lang).words())

    def morph_all(self, lang: int | None = None) -> int:
        """Recompute surface and phonetic forms; returns words touched."""
        targets = [lang] if lang is not None else [i for i, _ in self.languages.items()]
        count = 0
        for idx in targets:
            count += self.get_language(idx).morph_all(self.pipelines(idx))
        return count

    def preview(self, lang: int, mnemonic: str) -> Preview:
        pipelines = self.pipelines(lang)
        sample = Word(mnemonic=mnemonic, gloss="", pos=0)
        pipelines.morph(sample)
        return Preview(
            surface=sample.surface,
            phonetic=sample.phonetic,
            evolved=pipelines.evolve(mnemonic),
        )

    # ------------------------------------------------------------------
    # Surface / Phonetic Rule Operations
    # ------------------------------------------------------------------

    def add_rule(self, lang: int, kind: RuleKind, pattern: str, replacement: str) -> int:
        return self.get_language(lang).add_rule(kind, Replace(pattern, replacement))

    def alter_rule(
        self, lang: int, kind: RuleKind, idx: int, pattern: str, replacement: str
    ) -> None:
        self.get_language(lang).alter_rule(kind, idx, Replace(pattern, replacement))

    def insert_rule(
        self, lang: int, kind: RuleKind, idx: int, pattern: str, replacement: str
    ) -> None:
        self.get_language(lang).insert_rule(kind, idx, Replace(pattern, replacement))

    def remove_rule(self, lang: int, kind: RuleKind, idx: int) -> None:
        self.get_language(lang).remove_rule(kind, idx)

    def list_rules(self, lang: int, kind: RuleKind) -> list[tuple[int, Replace]]:
        return list(enumerate(self.get_language(lang).rules(kind)))

    def add_surface_rule(self, lang: int, pattern: str, replacement: str) -> int:
        return self.add_rule(lang, RuleKind.SURFACE, pattern, replacement)

    def alter_surface_rule(self, lang: int, idx: int, pattern: str, replacement: str) -> None:
        self.alter_rule(lang, RuleKind.SURFACE, idx, pattern, replacement)

    def insert_surface_rule(self, lang: int, idx: int, pattern: str, replacement: str) -> None:
        self.insert_rule(lang, RuleKind.SURFACE, idx, pattern, replacement)

    def remove_surface_rule(self, lang: int, idx: int) -> None:
        self.remove_rule(lang, RuleKind.SURFACE, idx)

    def list_surface_rules(self, lang: int) -> list[tuple[int, Replace]]:
        return self.list_rules(lang, RuleKind.SURFACE)

    def add_phonetic_rule(self, lang: int, pattern: str, replacement: str) -> int:
        return self.add_rule(lang, RuleKind.PHONETIC, pattern, replacement)

    def alter_phonetic_rule(self, lang: int, idx: int, pattern: str, replacement: str) -> None:
        self.alter_rule(lang, RuleKind.PHONETIC, idx, pattern, replacement)

    def insert_phonetic_rule(self, lang: int, idx: int, pattern: str, replacement: str) -> None:
        self.insert_rule(lang, RuleKind.PHONETIC, idx, pattern, replacement)

    def remove_phonetic_rule(self, lang: int, idx: int) -> None:
        self.remove_rule(lang, RuleKind.PHONETIC, idx)

    def list_phonetic_rules(self, lang: int) -> list[tuple[int, Replace]]:
        return self.list_rules(lang, RuleKind.PHONETIC)

    # ------------------------------------------------------------------
    # Category and Sound-Change Operations
    # ------------------------------------------------------------------

    def add_category(self, lang: int, key: str, content: Sequence[str] | str) -> None:
        self.get_language(lang).sound_changes.add_category(key, content)

    def remove_category(self, lang: int, key: str) -> None:
        self.get_language(lang).sound_changes.remove_category(key)

    def list_categories(self, lang: int) -> list[tuple[str, tuple[str, ...]]]:
        return list(self.get_language(lang).sound_changes.categories.items())

    def add_sound_change(
        self, lang: int, target: str, replacement: str, environment: str
    ) -> int:
        sca = self.get_language(lang).sound_changes
        return sca.add_rule(SoundChange(target, replacement, environment))

    def alter_sound_change(
        self, lang: int, idx: int, target: str, replacement: str, environment: str
    ) -> None:
        sca = self.get_language(lang).sound_changes
        sca.alter_rule(idx, SoundChange(target, replacement, environment))

    def insert_sound_change(
        self, lang: int, idx: int, target: str, replacement: str, environment: str
    ) -> None:
        sca = self.get_language(lang).sound_changes
        sca.insert_rule(idx, SoundChange(target, replacement, environment))

    def remove_sound_change(self, lang: int, idx: int) -> None:
        self.get_language(lang).sound_changes.remove_rule(idx)

    def list_sound_changes(self, lang: int) -> list[tuple[int, SoundChange]]:
        return list(enumerate(self.get_language(lang).sound_changes.rules))

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def derive(self, lang: int, ancestor: int) -> DerivationReport:
        """Propagate *ancestor*'s vocabulary into *lang*."""
        if lang == ancestor:
            raise DeriveFromSelfError(lang)
        count = len(self.languages)
        for idx in (lang, ancestor):
            if not 0 <= idx < count:
                raise IndexOutOfRangeError(idx, count)
        language = self.get_language(lang)
        source = self.get_language(ancestor)

        report = derive_vocabulary(
            language, lang, source, ancestor,
            self.pipelines(lang),
            transactional=self.config.transactional_derive,
        )
        if self.has_ancestry_cycle(lang):
            logger.warning(f"Ancestor chain of language {lang} now loops")
        return report

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> list[ValidationResult]:
        from conlang_editor.validator import validate_project
        return validate_project(self)

    # ------------------------------------------------------------------
    # Import/Export
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, source: str | Path, *, config: EngineConfig | None = None) -> ConlangEditor:
        from conlang_editor.serialization import load_project
        return load_project(source, config=config)

    def save(self, destination: str | Path) -> None:
        from conlang_editor.serialization import save_project
        save_project(self, destination)

    def to_dict(self) -> dict[str, Any]:
        from conlang_editor.serialization import project_to_dict
        return project_to_dict(self)


def parse_coordinate(text: str) -> Coordinate:
    """Parse ``"lang:word"`` into a :class:`Coordinate`."""
    lang, sep, word = text.partition(":")
    if not sep:
        raise ValidationError(f"Coordinate must look like 'lang:word': {text!r}")
    try:
        return Coordinate(int(lang), int(word))
    except ValueError:
        raise ValidationError(f"Coordinate must look like 'lang:word': {text!r}") from None
