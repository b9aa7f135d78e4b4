"""Validation engine for conlang-editor."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from conlang_editor.exceptions import ConlangEditorError
from conlang_editor.models import ValidationResult

if TYPE_CHECKING:
    from conlang_editor.editor import ConlangEditor

logger = logging.getLogger(__name__)


def validate_project(editor: ConlangEditor) -> list[ValidationResult]:
    """Run all validation rules."""
    results: list[ValidationResult] = []
    results.extend(_val_lin_001(editor))
    results.extend(_val_lin_002(editor))
    results.extend(_val_lin_003(editor))
    results.extend(_val_wrd_001(editor))
    results.extend(_val_rul_001(editor))
    return results


def validate_language(editor: ConlangEditor, lang: int) -> list[ValidationResult]:
    """Validate a single language."""
    entity_id = str(lang)
    return [r for r in validate_project(editor) if r.entity_id.split(":")[0] == entity_id]


def _val_lin_001(editor: ConlangEditor) -> list[ValidationResult]:
    """VAL-LIN-001: ancestor chain loops."""
    results = []
    for idx, language in editor.languages.items():
        if editor.has_ancestry_cycle(idx):
            results.append(ValidationResult(
                rule_id="VAL-LIN-001",
                severity="ERROR",
                entity_type="language",
                entity_id=str(idx),
                message=f"Ancestor chain of {language.name!r} loops",
                details={"chain": editor.ancestry(idx)},
            ))
    return results


def _val_lin_002(editor: ConlangEditor) -> list[ValidationResult]:
    """VAL-LIN-002: ghost coordinates."""
    results = []
    for lidx, language in editor.languages.items():
        for widx, word in language.words():
            for coord in word.ancestors:
                try:
                    editor.resolve(coord)
                except ConlangEditorError as e:
                    logger.warning(f"Ghost coordinate {coord} on word {lidx}:{widx}")
                    results.append(ValidationResult(
                        rule_id="VAL-LIN-002",
                        severity="WARNING",
                        entity_type="word",
                        entity_id=f"{lidx}:{widx}",
                        message=f"Ancestor {coord} does not resolve: {e}",
                        details={"lang": coord.lang, "word": coord.word},
                    ))
    return results


def _val_lin_003(editor: ConlangEditor) -> list[ValidationResult]:
    """VAL-LIN-003: ancestor index points at a missing language."""
    results = []
    for idx, language in editor.languages.items():
        ancestor = language.ancestor
        if ancestor is not None and not editor.languages.is_live(ancestor):
            results.append(ValidationResult(
                rule_id="VAL-LIN-003",
                severity="WARNING",
                entity_type="language",
                entity_id=str(idx),
                message=f"Ancestor language {ancestor} does not exist",
                details={"ancestor": ancestor},
            ))
    return results


def _val_wrd_001(editor: ConlangEditor) -> list[ValidationResult]:
    """VAL-WRD-001: word references a missing part of speech."""
    results = []
    for lidx, language in editor.languages.items():
        for widx, word in language.words():
            if not editor.parts_of_speech.is_live(word.pos):
                results.append(ValidationResult(
                    rule_id="VAL-WRD-001",
                    severity="WARNING",
                    entity_type="word",
                    entity_id=f"{lidx}:{widx}",
                    message=f"Part of speech {word.pos} does not exist",
                    details={"pos": word.pos},
                ))
    return results


def _val_rul_001(editor: ConlangEditor) -> list[ValidationResult]:
    """VAL-RUL-001: sound change no longer compiles."""
    results = []
    for lidx, language in editor.languages.items():
        sca = language.sound_changes
        for ridx, change in enumerate(sca.rules):
            try:
                sca.compile(change)
            except ConlangEditorError as e:
                results.append(ValidationResult(
                    rule_id="VAL-RUL-001",
                    severity="ERROR",
                    entity_type="sound_change",
                    entity_id=f"{lidx}:{ridx}",
                    message=str(e),
                    details={"rule": str(change)},
                ))
    return results
