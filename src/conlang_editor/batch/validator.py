"""
Validation for batch change requests.

Provides both schema validation (required fields, types, rule syntax) and
referential validation (languages and parts of speech exist in a project).
"""
from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set, Tuple

from ..compiler import ENVIRONMENT_MARKER
from ..editor import parse_coordinate
from ..exceptions import ValidationError as CoordinateError
from .schema import (
    INDEX_FIELDS,
    LANGUAGE_FIELDS,
    PLAIN_RULE_OPERATIONS,
    REQUIRED_FIELDS,
    SOUND_CHANGE_OPERATIONS,
    Change,
    ChangeRequest,
    OperationType,
    ValidationError,
    ValidationResult,
    ValidationWarning,
)

if TYPE_CHECKING:
    from ..editor import ConlangEditor

logger = logging.getLogger(__name__)


class _KnownLanguages:
    """Languages of the project plus those the request itself adds."""

    def __init__(self, editor: "ConlangEditor"):
        self.indices: Set[int] = {idx for idx, _ in editor.languages.items()}
        self.names: Dict[str, int] = {
            lang.name: idx for idx, lang in editor.languages.items()
        }
        self.next_index = len(editor.languages)

    def add(self, name: str) -> None:
        self.indices.add(self.next_index)
        self.names[name] = self.next_index
        self.next_index += 1

    def resolve(self, ref: Any) -> Optional[int]:
        if isinstance(ref, str):
            return self.names.get(ref)
        if ref in self.indices:
            return ref
        return None


def validate_change_request(
    request: ChangeRequest,
    editor: Optional["ConlangEditor"] = None,
) -> ValidationResult:
    """Validate a change request.

    Args:
        request: The change request to validate
        editor: If given, verify language and part-of-speech references
            against this project

    Returns:
        ValidationResult with errors and warnings
    """
    errors: List[ValidationError] = []
    warnings: List[ValidationWarning] = []
    known = _KnownLanguages(editor) if editor is not None else None

    for i, change in enumerate(request.changes):
        change_errors, change_warnings = _validate_change(
            change,
            index=i,
            editor=editor,
            known=known,
        )
        errors.extend(change_errors)
        warnings.extend(change_warnings)

        if (
            known is not None
            and change.operation == OperationType.ADD_LANGUAGE.value
            and isinstance(change.params.get("name"), str)
        ):
            known.add(change.params["name"])

    logger.debug(
        f"Validated {len(request.changes)} change(s): "
        f"{len(errors)} error(s), {len(warnings)} warning(s)"
    )
    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_change(
    change: Change,
    index: int,
    editor: Optional["ConlangEditor"],
    known: Optional[_KnownLanguages],
) -> Tuple[List[ValidationError], List[ValidationWarning]]:
    """Validate a single change operation.

    Returns:
        Tuple of (errors, warnings)
    """
    errors: List[ValidationError] = []
    warnings: List[ValidationWarning] = []
    op = change.operation
    params = change.params

    def error(field: str, message: str) -> None:
        errors.append(
            ValidationError(
                index=index,
                operation=op,
                field=field,
                message=message,
                line_number=change.line_number,
            )
        )

    def warn(message: str) -> None:
        warnings.append(
            ValidationWarning(
                index=index,
                operation=op,
                message=message,
                line_number=change.line_number,
            )
        )

    # Validate operation type
    valid_operations = {o.value for o in OperationType}
    if op not in valid_operations:
        error(
            "operation",
            f"Unknown operation '{op}'. Valid: {', '.join(sorted(valid_operations))}",
        )
        return errors, warnings

    # Required fields
    for field_name in REQUIRED_FIELDS[op]:
        if field_name not in params or params[field_name] is None:
            error(field_name, f"Missing required field '{field_name}'")
    if errors:
        return errors, warnings

    # Field types
    for field_name in LANGUAGE_FIELDS:
        value = params.get(field_name)
        if value is not None and not _is_language_ref(value):
            error(field_name, f"Field '{field_name}' must be an index or a name")
    for field_name in INDEX_FIELDS:
        value = params.get(field_name)
        if value is not None and not _is_index(value):
            error(field_name, f"Field '{field_name}' must be a non-negative integer")
    if "pos" in params and not _is_pos_ref(params["pos"]):
        error("pos", "Field 'pos' must be an index or an abbreviation")
    for field_name in ("name", "abbr", "mnemonic", "gloss", "note", "pattern"):
        if field_name in params and not isinstance(params[field_name], str):
            error(field_name, f"Field '{field_name}' must be a string")

    if op == OperationType.ADD_CATEGORY.value or op == OperationType.REMOVE_CATEGORY.value:
        key = params.get("key")
        if not isinstance(key, str) or len(key) != 1:
            error("key", "Category key must be a single character")
    if op == OperationType.ADD_CATEGORY.value:
        content = params.get("content")
        if isinstance(content, list):
            if not content or not all(isinstance(g, str) and g for g in content):
                error("content", "Category content must list non-empty graphemes")
        elif not isinstance(content, str) or not content:
            error("content", "Category content must be a string or a list")

    if "ancestors" in params:
        _validate_ancestors(params["ancestors"], error)

    if op in PLAIN_RULE_OPERATIONS and isinstance(params.get("pattern"), str):
        try:
            re.compile(params["pattern"])
        except re.error as e:
            error("pattern", f"Invalid regular expression: {e}")

    if op in SOUND_CHANGE_OPERATIONS:
        environment = params.get("environment")
        if not isinstance(environment, str):
            error("environment", "Field 'environment' must be a string")
        elif environment.count(ENVIRONMENT_MARKER) != 1:
            error(
                "environment",
                f"Environment must contain exactly one '{ENVIRONMENT_MARKER}'",
            )

    if op == OperationType.DERIVE.value and params.get("language") == params.get("ancestor"):
        error("ancestor", "A language cannot derive from itself")

    if errors or known is None or editor is None:
        return errors, warnings

    # Referential checks
    for field_name in LANGUAGE_FIELDS:
        ref = params.get(field_name)
        if ref is not None and known.resolve(ref) is None:
            error(field_name, f"Language {ref!r} not found")

    pos = params.get("pos")
    if isinstance(pos, str) and editor.pos_index(pos) is None:
        warn(f"Part of speech {pos!r} not found; it must be added first")
    elif isinstance(pos, int) and not editor.parts_of_speech.is_live(pos):
        warn(f"Part of speech {pos} does not exist")

    return errors, warnings


def _validate_ancestors(value: Any, error: Any) -> None:
    if not isinstance(value, list):
        error("ancestors", "Field 'ancestors' must be a list")
        return
    for item in value:
        if isinstance(item, str):
            try:
                parse_coordinate(item)
            except CoordinateError as e:
                error("ancestors", str(e))
        elif isinstance(item, dict):
            if not (_is_index(item.get("lang")) and _is_index(item.get("word"))):
                error("ancestors", f"Coordinate needs integer 'lang' and 'word': {item!r}")
        else:
            error("ancestors", f"Invalid coordinate: {item!r}")


def _is_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _is_language_ref(value: Any) -> bool:
    return _is_index(value) or isinstance(value, str)


def _is_pos_ref(value: Any) -> bool:
    return _is_index(value) or isinstance(value, str)
