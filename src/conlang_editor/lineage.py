"""Word lineage and the derivation engine.

Derivation replays an ancestor's vocabulary through a descendant's sound
changes. Descendant words with exactly one coordinate into the ancestor are
refreshed in place (authored fields survive); ancestor words nobody inherits
yet are appended as new words. Coinages, loans and blends are left alone.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from conlang_editor.exceptions import GhostWordError
from conlang_editor.language import Language, Pipelines
from conlang_editor.models import Coordinate, Word
from conlang_editor.substitution import Substitution, apply_pipeline

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DerivationReport:
    """Indices touched by one derivation run."""

    language: int
    ancestor: int
    fused: tuple[int, ...] = field(default_factory=tuple)
    inherited: tuple[int, ...] = field(default_factory=tuple)


def labor(
    ancestor: Word,
    coordinate: Coordinate,
    sound_change: Sequence[Substitution],
    to_surface: Sequence[Substitution],
    to_phonetic: Sequence[Substitution],
) -> Word:
    """Produce the descendant of *ancestor* under the given pipelines."""
    word = Word(
        mnemonic=apply_pipeline(sound_change, ancestor.mnemonic),
        gloss=ancestor.gloss,
        pos=ancestor.pos,
        note=ancestor.note,
        ancestors=[coordinate],
    )
    word.morph(to_surface, to_phonetic)
    return word


def _labor(ancestor: Word, coordinate: Coordinate, pipelines: Pipelines) -> Word:
    return labor(
        ancestor, coordinate,
        pipelines.sound_change, pipelines.to_surface, pipelines.to_phonetic,
    )


def derive_vocabulary(
    language: Language,
    language_idx: int,
    ancestor: Language,
    ancestor_idx: int,
    pipelines: Pipelines,
    *,
    transactional: bool = True,
) -> DerivationReport:
    """Merge *ancestor*'s vocabulary into *language*.

    With ``transactional`` every derived word is computed before anything
    is written, so a :class:`GhostWordError` leaves *language* untouched.
    Without it, fuses made before the failing word stay applied.
    """
    if not transactional:
        language.ancestor = ancestor_idx

    queue: list[Word | None] = ancestor.vocab.raw()
    fuses: list[tuple[Word, Word]] = []
    fused: list[int] = []

    for idx, word in language.words():
        if len(word.ancestors) != 1 or word.ancestors[0].lang != ancestor_idx:
            continue
        coord = word.ancestors[0]
        if not 0 <= coord.word < len(queue) or queue[coord.word] is None:
            raise GhostWordError(idx)
        derived = _labor(queue[coord.word], coord, pipelines)  # type: ignore[arg-type]
        queue[coord.word] = None
        if transactional:
            fuses.append((word, derived))
        else:
            word.fuse(derived)
        fused.append(idx)

    fresh = [
        _labor(item, Coordinate(ancestor_idx, widx), pipelines)
        for widx, item in enumerate(queue)
        if item is not None
    ]

    if transactional:
        language.ancestor = ancestor_idx
        for word, derived in fuses:
            word.fuse(derived)
    inherited = [language.vocab.append(word) for word in fresh]

    logger.info(
        f"Derived language {language_idx} from {ancestor_idx}: "
        f"{len(fused)} refreshed, {len(inherited)} inherited"
    )
    return DerivationReport(
        language=language_idx,
        ancestor=ancestor_idx,
        fused=tuple(fused),
        inherited=tuple(inherited),
    )
