"""
Executor for batch change requests.

Applies changes to a project using the ConlangEditor API.
"""
from __future__ import annotations

import copy
import logging
import time
from typing import TYPE_CHECKING, Any, Callable, Dict, List

from ..editor import parse_coordinate
from ..models import Coordinate, RuleKind
from .schema import (
    BatchResult,
    Change,
    ChangeRequest,
    ChangeResult,
    OperationType,
)

if TYPE_CHECKING:
    from ..editor import ConlangEditor

logger = logging.getLogger(__name__)


class _AbortBatch(Exception):
    """Raised inside an atomic batch to trigger the rollback."""


def execute_change_request(
    request: ChangeRequest,
    editor: "ConlangEditor",
    dry_run: bool = False,
    atomic: bool = False,
) -> BatchResult:
    """Execute a batch change request.

    Args:
        request: The change request to execute
        editor: The project to modify
        dry_run: If True, run against a copy so *editor* is left untouched
        atomic: If True, stop at the first failure and undo every change

    Returns:
        BatchResult with details of each change
    """
    start_time = time.time()
    results: List[ChangeResult] = []
    rolled_back = False

    if dry_run:
        editor = copy.deepcopy(editor)

    if atomic:
        try:
            with editor.batch():
                for i, change in enumerate(request.changes):
                    result = _execute_change(change, i, editor)
                    results.append(result)
                    if not result.success:
                        raise _AbortBatch()
        except _AbortBatch:
            rolled_back = True
            logger.info(f"Rolled back batch after change #{len(results)} failed")
    else:
        for i, change in enumerate(request.changes):
            results.append(_execute_change(change, i, editor))

    # Calculate totals
    success_count = sum(1 for r in results if r.success)
    failure_count = sum(1 for r in results if not r.success)
    duration = time.time() - start_time

    return BatchResult(
        total_count=len(request.changes),
        success_count=success_count,
        failure_count=failure_count,
        changes=results,
        duration_seconds=duration,
        rolled_back=rolled_back,
    )


def _execute_change(
    change: Change,
    index: int,
    editor: "ConlangEditor",
) -> ChangeResult:
    """Execute a single change operation.

    Returns:
        ChangeResult with success/failure status
    """
    op = change.operation
    handler = _HANDLERS.get(op)
    if handler is None:
        return ChangeResult(
            index=index,
            operation=op,
            success=False,
            message=f"Unknown operation: {op}",
            error=f"Unknown operation: {op}",
            line_number=change.line_number,
        )

    try:
        return handler(change, index, editor)
    except Exception as e:
        logger.exception(f"Error executing change #{index + 1} ({op})")
        return ChangeResult(
            index=index,
            operation=op,
            success=False,
            message=f"Error: {e}",
            error=str(e),
            line_number=change.line_number,
        )


# =============================================================================
# Reference helpers
# =============================================================================

def _language(editor: "ConlangEditor", ref: Any) -> int:
    """Resolve a language index or name."""
    if isinstance(ref, str):
        idx = editor.find_language(ref)
        if idx is None:
            raise ValueError(f"Language not found: {ref!r}")
        return idx
    return int(ref)


def _pos(editor: "ConlangEditor", ref: Any) -> int:
    """Resolve a part-of-speech index or abbreviation."""
    if isinstance(ref, str):
        idx = editor.pos_index(ref)
        if idx is None:
            raise ValueError(f"Part of speech not found: {ref!r}")
        return idx
    return int(ref)


def _coordinates(editor: "ConlangEditor", value: List[Any]) -> List[Coordinate]:
    coords = []
    for item in value:
        if isinstance(item, str):
            coords.append(parse_coordinate(item))
        else:
            coords.append(Coordinate(_language(editor, item["lang"]), int(item["word"])))
    return coords


def _ok(change: Change, index: int, message: str, **kwargs: Any) -> ChangeResult:
    return ChangeResult(
        index=index,
        operation=change.operation,
        success=True,
        message=message,
        line_number=change.line_number,
        **kwargs,
    )


# =============================================================================
# Languages and parts of speech
# =============================================================================

def _exec_add_language(change: Change, index: int, editor: "ConlangEditor") -> ChangeResult:
    name = change.params["name"]
    idx = editor.add_language(name)
    return _ok(change, index, f"Added language '{name}' at {idx}", target=name, created_index=idx)


def _exec_rename_language(change: Change, index: int, editor: "ConlangEditor") -> ChangeResult:
    lang = _language(editor, change.params["language"])
    editor.rename_language(lang, change.params["name"])
    return _ok(change, index, f"Renamed language {lang} to '{change.params['name']}'", target=str(lang))


def _exec_remove_language(change: Change, index: int, editor: "ConlangEditor") -> ChangeResult:
    lang = _language(editor, change.params["language"])
    editor.remove_language(lang)
    return _ok(change, index, f"Removed language {lang}", target=str(lang))


def _exec_set_ancestor(change: Change, index: int, editor: "ConlangEditor") -> ChangeResult:
    lang = _language(editor, change.params["language"])
    ref = change.params.get("ancestor")
    ancestor = _language(editor, ref) if ref is not None else None
    editor.set_ancestor(lang, ancestor)
    return _ok(change, index, f"Set ancestor of {lang} to {ancestor}", target=str(lang))


def _exec_add_pos(change: Change, index: int, editor: "ConlangEditor") -> ChangeResult:
    idx = editor.add_pos(change.params["name"], change.params["abbr"])
    return _ok(change, index, f"Added part of speech '{change.params['abbr']}' at {idx}", created_index=idx)


def _exec_alter_pos(change: Change, index: int, editor: "ConlangEditor") -> ChangeResult:
    idx = change.params["index"]
    editor.alter_pos(idx, change.params["name"], change.params["abbr"])
    return _ok(change, index, f"Altered part of speech {idx}", target=str(idx))


def _exec_remove_pos(change: Change, index: int, editor: "ConlangEditor") -> ChangeResult:
    idx = change.params["index"]
    editor.remove_pos(idx)
    return _ok(change, index, f"Removed part of speech {idx}", target=str(idx))


# =============================================================================
# Words
# =============================================================================

def _exec_add_word(change: Change, index: int, editor: "ConlangEditor") -> ChangeResult:
    p = change.params
    lang = _language(editor, p["language"])
    idx = editor.add_word(
        lang,
        p["mnemonic"],
        p["gloss"],
        _pos(editor, p["pos"]),
        note=p.get("note", ""),
        ancestors=_coordinates(editor, p.get("ancestors") or []),
    )
    word = editor.get_word(lang, idx)
    return _ok(
        change, index,
        f"Added '{word.surface}' [{word.phonetic}] to language {lang}",
        target=f"{lang}:{idx}", created_index=idx,
    )


def _exec_alter_word(change: Change, index: int, editor: "ConlangEditor") -> ChangeResult:
    p = change.params
    lang = _language(editor, p["language"])
    kwargs: Dict[str, Any] = {
        key: p[key] for key in ("mnemonic", "gloss", "note") if key in p
    }
    if "pos" in p:
        kwargs["pos"] = _pos(editor, p["pos"])
    if "ancestors" in p:
        kwargs["ancestors"] = _coordinates(editor, p["ancestors"] or [])
    word = editor.alter_word(lang, p["index"], **kwargs)
    return _ok(
        change, index,
        f"Altered word {lang}:{p['index']} -> '{word.surface}'",
        target=f"{lang}:{p['index']}",
    )


def _exec_remove_word(change: Change, index: int, editor: "ConlangEditor") -> ChangeResult:
    lang = _language(editor, change.params["language"])
    editor.remove_word(lang, change.params["index"])
    return _ok(change, index, f"Removed word {lang}:{change.params['index']}", target=f"{lang}:{change.params['index']}")


# =============================================================================
# Rules
# =============================================================================

def _rule_handler(kind: RuleKind, action: str) -> Callable[[Change, int, "ConlangEditor"], ChangeResult]:
    """Build the handler for one action on a surface or phonetic rule list."""

    def handler(change: Change, index: int, editor: "ConlangEditor") -> ChangeResult:
        p = change.params
        lang = _language(editor, p["language"])
        if action == "add":
            idx = editor.add_rule(lang, kind, p["pattern"], p["replacement"])
            return _ok(change, index, f"Added {kind.value} rule {idx}", target=str(lang), created_index=idx)
        if action == "alter":
            editor.alter_rule(lang, kind, p["index"], p["pattern"], p["replacement"])
        elif action == "insert":
            editor.insert_rule(lang, kind, p["index"], p["pattern"], p["replacement"])
        else:
            editor.remove_rule(lang, kind, p["index"])
        return _ok(change, index, f"{_PAST[action]} {kind.value} rule {p['index']}", target=str(lang))

    return handler


_PAST = {"alter": "Altered", "insert": "Inserted", "remove": "Removed"}


def _exec_add_category(change: Change, index: int, editor: "ConlangEditor") -> ChangeResult:
    lang = _language(editor, change.params["language"])
    editor.add_category(lang, change.params["key"], change.params["content"])
    return _ok(change, index, f"Set category '{change.params['key']}'", target=str(lang))


def _exec_remove_category(change: Change, index: int, editor: "ConlangEditor") -> ChangeResult:
    lang = _language(editor, change.params["language"])
    editor.remove_category(lang, change.params["key"])
    return _ok(change, index, f"Removed category '{change.params['key']}'", target=str(lang))


def _exec_add_sound_change(change: Change, index: int, editor: "ConlangEditor") -> ChangeResult:
    p = change.params
    lang = _language(editor, p["language"])
    idx = editor.add_sound_change(lang, p["target"], p["replacement"], p["environment"])
    return _ok(change, index, f"Added sound change {idx}", target=str(lang), created_index=idx)


def _exec_alter_sound_change(change: Change, index: int, editor: "ConlangEditor") -> ChangeResult:
    p = change.params
    lang = _language(editor, p["language"])
    editor.alter_sound_change(lang, p["index"], p["target"], p["replacement"], p["environment"])
    return _ok(change, index, f"Altered sound change {p['index']}", target=str(lang))


def _exec_insert_sound_change(change: Change, index: int, editor: "ConlangEditor") -> ChangeResult:
    p = change.params
    lang = _language(editor, p["language"])
    editor.insert_sound_change(lang, p["index"], p["target"], p["replacement"], p["environment"])
    return _ok(change, index, f"Inserted sound change {p['index']}", target=str(lang))


def _exec_remove_sound_change(change: Change, index: int, editor: "ConlangEditor") -> ChangeResult:
    lang = _language(editor, change.params["language"])
    editor.remove_sound_change(lang, change.params["index"])
    return _ok(change, index, f"Removed sound change {change.params['index']}", target=str(lang))


# =============================================================================
# Derivation
# =============================================================================

def _exec_derive(change: Change, index: int, editor: "ConlangEditor") -> ChangeResult:
    lang = _language(editor, change.params["language"])
    ancestor = _language(editor, change.params["ancestor"])
    report = editor.derive(lang, ancestor)
    return _ok(
        change, index,
        f"Derived {lang} from {ancestor}: {len(report.fused)} refreshed, "
        f"{len(report.inherited)} inherited",
        target=str(lang),
    )


def _exec_morph(change: Change, index: int, editor: "ConlangEditor") -> ChangeResult:
    ref = change.params.get("language")
    lang = _language(editor, ref) if ref is not None else None
    count = editor.morph_all(lang)
    return _ok(change, index, f"Recomputed {count} word(s)", target=str(lang) if lang is not None else None)


_HANDLERS: Dict[str, Callable[[Change, int, "ConlangEditor"], ChangeResult]] = {
    OperationType.ADD_LANGUAGE.value: _exec_add_language,
    OperationType.RENAME_LANGUAGE.value: _exec_rename_language,
    OperationType.REMOVE_LANGUAGE.value: _exec_remove_language,
    OperationType.SET_ANCESTOR.value: _exec_set_ancestor,
    OperationType.ADD_POS.value: _exec_add_pos,
    OperationType.ALTER_POS.value: _exec_alter_pos,
    OperationType.REMOVE_POS.value: _exec_remove_pos,
    OperationType.ADD_WORD.value: _exec_add_word,
    OperationType.ALTER_WORD.value: _exec_alter_word,
    OperationType.REMOVE_WORD.value: _exec_remove_word,
    OperationType.ADD_SURFACE_RULE.value: _rule_handler(RuleKind.SURFACE, "add"),
    OperationType.ALTER_SURFACE_RULE.value: _rule_handler(RuleKind.SURFACE, "alter"),
    OperationType.INSERT_SURFACE_RULE.value: _rule_handler(RuleKind.SURFACE, "insert"),
    OperationType.REMOVE_SURFACE_RULE.value: _rule_handler(RuleKind.SURFACE, "remove"),
    OperationType.ADD_PHONETIC_RULE.value: _rule_handler(RuleKind.PHONETIC, "add"),
    OperationType.ALTER_PHONETIC_RULE.value: _rule_handler(RuleKind.PHONETIC, "alter"),
    OperationType.INSERT_PHONETIC_RULE.value: _rule_handler(RuleKind.PHONETIC, "insert"),
    OperationType.REMOVE_PHONETIC_RULE.value: _rule_handler(RuleKind.PHONETIC, "remove"),
    OperationType.ADD_CATEGORY.value: _exec_add_category,
    OperationType.REMOVE_CATEGORY.value: _exec_remove_category,
    OperationType.ADD_SOUND_CHANGE.value: _exec_add_sound_change,
    OperationType.ALTER_SOUND_CHANGE.value: _exec_alter_sound_change,
    OperationType.INSERT_SOUND_CHANGE.value: _exec_insert_sound_change,
    OperationType.REMOVE_SOUND_CHANGE.value: _exec_remove_sound_change,
    OperationType.DERIVE.value: _exec_derive,
    OperationType.MORPH.value: _exec_morph,
}
