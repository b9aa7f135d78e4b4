"""
Reading batch change requests.

A request arrives as a ``Path`` to a YAML file, as YAML text, or as an
already parsed mapping. Requests read from YAML remember the line each
change starts on, so validation and execution messages can point back
into the file.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from .schema import REQUIRED_FIELDS, Change, ChangeRequest, LanguageRef


class ParseError(Exception):
    """A change request could not be read."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        super().__init__(message)


def load_change_request(
    source: Union[Path, str, Dict[str, Any]],
) -> ChangeRequest:
    """Read a change request.

    Args:
        source: A ``Path`` to a YAML file, YAML text, or a parsed mapping.
            A ``str`` is always read as YAML text, never as a file name.

    Raises:
        ParseError: If the YAML is malformed or the request is not shaped
            like ``{language?, session?, changes: [...]}``
        FileNotFoundError: If *source* is a path that does not exist
    """
    if isinstance(source, dict):
        return _build_request(source, lines=[])
    if isinstance(source, Path):
        if not source.exists():
            raise FileNotFoundError(f"File not found: {source}")
        data, lines = _compose(source.read_text(encoding="utf-8"))
        return _build_request(data, lines, source_file=source)
    data, lines = _compose(source)
    return _build_request(data, lines)


def _compose(text: str) -> Tuple[Any, List[int]]:
    """Parse YAML text and note the first line of every change."""
    loader = yaml.SafeLoader(text)
    try:
        node = loader.get_single_node()
        data = loader.construct_document(node) if node is not None else None
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        raise ParseError(
            f"Invalid YAML: {e}", line=mark.line + 1 if mark else None
        ) from e
    finally:
        loader.dispose()
    return data, _change_lines(node)


def _change_lines(node: Optional[yaml.Node]) -> List[int]:
    if not isinstance(node, yaml.MappingNode):
        return []
    for key, value in node.value:
        if key.value == "changes" and isinstance(value, yaml.SequenceNode):
            return [item.start_mark.line + 1 for item in value.value]
    return []


def _build_request(
    data: Any,
    lines: List[int],
    source_file: Optional[Path] = None,
) -> ChangeRequest:
    if data is None:
        raise ParseError("Empty change request")
    if not isinstance(data, dict):
        raise ParseError("YAML root must be a mapping (dictionary)")

    language = data.get("language")
    if language is not None and (
        isinstance(language, bool) or not isinstance(language, (int, str))
    ):
        raise ParseError("Field 'language' must be an index or a name")

    session = data.get("session", {})
    if not isinstance(session, dict):
        raise ParseError("Field 'session' must be a mapping")

    raw_changes = data.get("changes")
    if raw_changes is None:
        raise ParseError("Missing required field: 'changes'")
    if not isinstance(raw_changes, list):
        raise ParseError("Field 'changes' must be a list")
    if not raw_changes:
        raise ParseError("Field 'changes' cannot be empty")

    changes = [
        _parse_change(raw, i, lines[i] if i < len(lines) else None, language)
        for i, raw in enumerate(raw_changes)
    ]
    return ChangeRequest(
        changes=changes,
        language=language,
        session_name=session.get("name"),
        session_description=session.get("description"),
        source_file=source_file,
    )


def _parse_change(
    raw: Any,
    index: int,
    line: Optional[int],
    default_language: Optional[LanguageRef],
) -> Change:
    where = f"Change #{index + 1}" + (f" (line {line})" if line else "")
    if not isinstance(raw, dict):
        raise ParseError(f"{where} must be a mapping (dictionary)", line=line)

    operation = raw.get("operation")
    if not operation:
        raise ParseError(f"{where}: Missing required field 'operation'", line=line)
    if not isinstance(operation, str):
        raise ParseError(f"{where}: Field 'operation' must be a string", line=line)

    params = {k: v for k, v in raw.items() if k != "operation"}
    # The request-level language fills in only where an operation needs one
    if (
        default_language is not None
        and "language" not in params
        and "language" in REQUIRED_FIELDS.get(operation, [])
    ):
        params["language"] = default_language

    return Change(operation=operation, params=params, line_number=line)
