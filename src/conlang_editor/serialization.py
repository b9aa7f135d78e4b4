"""Project persistence: lossless JSON / YAML round trip.

Removed slots are written as ``null`` so indices survive a reload.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from conlang_editor.compiler import CategoryTable, SoundChangeSet
from conlang_editor.config import EngineConfig
from conlang_editor.exceptions import (
    ConlangEditorError,
    DataImportError,
    ExportError,
)
from conlang_editor.language import Language, compile_replace
from conlang_editor.models import Coordinate, PartOfSpeech, Replace, SoundChange, Word
from conlang_editor.slots import SlotList

if TYPE_CHECKING:
    from conlang_editor.editor import ConlangEditor

logger = logging.getLogger(__name__)

FORMAT_VERSION = "1"
_YAML_SUFFIXES = (".yaml", ".yml")


# ---------------------------------------------------------------------------
# To plain data
# ---------------------------------------------------------------------------

def _word_to_dict(word: Word) -> dict[str, Any]:
    return {
        "surface": word.surface,
        "gloss": word.gloss,
        "pos": word.pos,
        "phonetic": word.phonetic,
        "mnemonic": word.mnemonic,
        "note": word.note,
        "ancestors": [{"lang": c.lang, "word": c.word} for c in word.ancestors],
    }


def _language_to_dict(language: Language) -> dict[str, Any]:
    sca = language.sound_changes
    return {
        "name": language.name,
        "ancestor": language.ancestor,
        "vocab": [
            _word_to_dict(w) if w is not None else None
            for w in language.vocab.raw()
        ],
        "surface_rules": [
            {"pattern": r.pattern, "replacement": r.replacement}
            for r in language.surface_rules
        ],
        "phonetic_rules": [
            {"pattern": r.pattern, "replacement": r.replacement}
            for r in language.phonetic_rules
        ],
        "sound_changes": {
            "categories": {k: list(v) for k, v in sca.categories.items()},
            "rules": [
                {
                    "target": sc.target,
                    "replacement": sc.replacement,
                    "environment": sc.environment,
                }
                for sc in sca.rules
            ],
        },
    }


def project_to_dict(editor: ConlangEditor) -> dict[str, Any]:
    """Serialize a ConlangEditor to plain data."""
    return {
        "version": FORMAT_VERSION,
        "languages": [
            _language_to_dict(lang) if lang is not None else None
            for lang in editor.languages.raw()
        ],
        "pos": [
            {"name": p.name, "abbr": p.abbr} if p is not None else None
            for p in editor.parts_of_speech.raw()
        ],
    }


# ---------------------------------------------------------------------------
# From plain data
# ---------------------------------------------------------------------------

def _word_from_dict(data: dict[str, Any]) -> Word:
    return Word(
        mnemonic=str(data["mnemonic"]),
        gloss=str(data.get("gloss", "")),
        pos=int(data.get("pos", 0)),
        note=str(data.get("note", "")),
        ancestors=[
            Coordinate(int(c["lang"]), int(c["word"]))
            for c in data.get("ancestors") or []
        ],
        surface=str(data.get("surface", "")),
        phonetic=str(data.get("phonetic", "")),
    )


def _replace_from_dict(data: dict[str, Any]) -> Replace:
    rule = Replace(str(data["pattern"]), str(data["replacement"]))
    compile_replace(rule)
    return rule


def _language_from_dict(data: dict[str, Any]) -> Language:
    sca_data = data.get("sound_changes") or {}
    categories = CategoryTable(sca_data.get("categories") or {})
    # Sound changes are stored as-is; one that no longer compiles is a
    # validation finding, not a load failure.
    rules = [
        SoundChange(
            str(r["target"]), str(r["replacement"]), str(r["environment"])
        )
        for r in sca_data.get("rules") or []
    ]
    ancestor = data.get("ancestor")
    return Language(
        str(data["name"]),
        ancestor=int(ancestor) if ancestor is not None else None,
        vocab=SlotList(
            _word_from_dict(w) if w is not None else None
            for w in data.get("vocab") or []
        ),
        surface_rules=[_replace_from_dict(r) for r in data.get("surface_rules") or []],
        phonetic_rules=[_replace_from_dict(r) for r in data.get("phonetic_rules") or []],
        sound_changes=SoundChangeSet(categories, rules),
    )


def project_from_dict(
    data: dict[str, Any], *, config: EngineConfig | None = None
) -> ConlangEditor:
    """Build a ConlangEditor from plain data.

    Raises:
        DataImportError: If the data does not describe a valid project
    """
    from conlang_editor.editor import ConlangEditor

    if not isinstance(data, dict):
        raise DataImportError("Project root must be a mapping (dictionary)")
    version = str(data.get("version", FORMAT_VERSION))
    if version != FORMAT_VERSION:
        raise DataImportError(f"Unsupported project format version: {version}")

    editor = ConlangEditor(config)
    try:
        editor.languages = SlotList(
            _language_from_dict(lang) if lang is not None else None
            for lang in data.get("languages") or []
        )
        editor.parts_of_speech = SlotList(
            PartOfSpeech(str(p["name"]), str(p["abbr"])) if p is not None else None
            for p in data.get("pos") or []
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise DataImportError(f"Malformed project data: {e!r}") from e
    except ConlangEditorError as e:
        raise DataImportError(f"Invalid rule in project data: {e}") from e
    return editor


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

def _is_yaml(path: Path) -> bool:
    return path.suffix.lower() in _YAML_SUFFIXES


def save_project(editor: ConlangEditor, destination: str | Path) -> None:
    """Write a project as JSON, or YAML for ``.yaml``/``.yml`` paths."""
    path = Path(destination)
    data = project_to_dict(editor)
    try:
        with open(path, "w", encoding="utf-8") as f:
            if _is_yaml(path):
                yaml.safe_dump(data, f, allow_unicode=True, sort_keys=False)
            else:
                json.dump(data, f, ensure_ascii=False, indent=editor.config.indent)
                f.write("\n")
    except OSError as e:
        raise ExportError(f"Cannot write project to {path}: {e}") from e
    logger.info(f"Saved project to {path}")


def load_project(source: str | Path, *, config: EngineConfig | None = None) -> ConlangEditor:
    """Read a project file written by :func:`save_project`."""
    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) if _is_yaml(path) else json.load(f)
    except yaml.YAMLError as e:
        raise DataImportError(f"Invalid YAML in {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise DataImportError(f"Invalid JSON in {path}: {e}") from e
    editor = project_from_dict(data, config=config)
    logger.info(f"Loaded project from {path}")
    return editor
