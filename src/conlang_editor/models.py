"""Domain model dataclasses for conlang-editor."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from conlang_editor.substitution import Substitution, apply_pipeline

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ValidationSeverity(str, Enum):
    """Severity level for validation results."""

    ERROR = "ERROR"
    WARNING = "WARNING"


class RuleKind(str, Enum):
    """The three rule collections every language carries."""

    SURFACE = "surface"
    PHONETIC = "phonetic"
    SOUND_CHANGE = "sound_change"


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Coordinate:
    """A weak (language index, word index) reference to an ancestor word."""

    lang: int
    word: int

    def __str__(self) -> str:
        return f"{self.lang}:{self.word}"


@dataclass(frozen=True, slots=True)
class PartOfSpeech:
    """A part of speech shared by every language of a project."""

    name: str
    abbr: str


@dataclass(frozen=True, slots=True)
class Replace:
    """A plain pattern/replacement pair (mnemonic to surface or phonetic)."""

    pattern: str
    replacement: str

    def __str__(self) -> str:
        return f"{self.pattern} > {self.replacement}"


@dataclass(frozen=True, slots=True)
class SoundChange:
    """A declarative sound change: target > replacement / environment."""

    target: str
    replacement: str
    environment: str

    def __str__(self) -> str:
        return f"{self.target} > {self.replacement} / {self.environment}"


@dataclass(slots=True)
class Word:
    """A vocabulary item of one language.

    ``mnemonic``, ``gloss``, ``pos`` and ``note`` are authored;
    ``surface`` and ``phonetic`` are computed from the mnemonic by
    :meth:`morph`. ``ancestors`` lists the words this one descends from:
    none for a coinage, one for plain inheritance, several for a blend.
    """

    mnemonic: str
    gloss: str
    pos: int
    note: str = ""
    ancestors: list[Coordinate] = field(default_factory=list)
    surface: str = ""
    phonetic: str = ""

    @property
    def is_inherited(self) -> bool:
        return len(self.ancestors) == 1

    def morph(
        self,
        to_surface: Sequence[Substitution],
        to_phonetic: Sequence[Substitution],
    ) -> None:
        """Recompute surface and phonetic fields from the mnemonic."""
        self.surface = apply_pipeline(to_surface, self.mnemonic)
        self.phonetic = apply_pipeline(to_phonetic, self.mnemonic)

    def fuse(self, derived: Word) -> None:
        """Take the computed fields of *derived*, keep authored ones."""
        self.surface = derived.surface
        self.phonetic = derived.phonetic
        self.mnemonic = derived.mnemonic

    def copy(self) -> Word:
        return replace(self, ancestors=list(self.ancestors))


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """A single validation finding (error or warning)."""

    rule_id: str
    severity: str
    entity_type: str
    entity_id: str
    message: str
    details: dict[str, Any] | None
