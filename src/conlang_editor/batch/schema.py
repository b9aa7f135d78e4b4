"""
Data classes and constants for the batch change request system.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


# =============================================================================
# Operation Types
# =============================================================================

class OperationType(str, Enum):
    """Supported batch operations."""
    ADD_LANGUAGE = "add_language"
    RENAME_LANGUAGE = "rename_language"
    REMOVE_LANGUAGE = "remove_language"
    SET_ANCESTOR = "set_ancestor"
    ADD_POS = "add_pos"
    ALTER_POS = "alter_pos"
    REMOVE_POS = "remove_pos"
    ADD_WORD = "add_word"
    ALTER_WORD = "alter_word"
    REMOVE_WORD = "remove_word"
    ADD_SURFACE_RULE = "add_surface_rule"
    ALTER_SURFACE_RULE = "alter_surface_rule"
    INSERT_SURFACE_RULE = "insert_surface_rule"
    REMOVE_SURFACE_RULE = "remove_surface_rule"
    ADD_PHONETIC_RULE = "add_phonetic_rule"
    ALTER_PHONETIC_RULE = "alter_phonetic_rule"
    INSERT_PHONETIC_RULE = "insert_phonetic_rule"
    REMOVE_PHONETIC_RULE = "remove_phonetic_rule"
    ADD_CATEGORY = "add_category"
    REMOVE_CATEGORY = "remove_category"
    ADD_SOUND_CHANGE = "add_sound_change"
    ALTER_SOUND_CHANGE = "alter_sound_change"
    INSERT_SOUND_CHANGE = "insert_sound_change"
    REMOVE_SOUND_CHANGE = "remove_sound_change"
    DERIVE = "derive"
    MORPH = "morph"


# =============================================================================
# Operation Groups
# =============================================================================

PLAIN_RULE_OPERATIONS = {
    OperationType.ADD_SURFACE_RULE.value,
    OperationType.ALTER_SURFACE_RULE.value,
    OperationType.INSERT_SURFACE_RULE.value,
    OperationType.ADD_PHONETIC_RULE.value,
    OperationType.ALTER_PHONETIC_RULE.value,
    OperationType.INSERT_PHONETIC_RULE.value,
}

SOUND_CHANGE_OPERATIONS = {
    OperationType.ADD_SOUND_CHANGE.value,
    OperationType.ALTER_SOUND_CHANGE.value,
    OperationType.INSERT_SOUND_CHANGE.value,
}


# =============================================================================
# Field Requirements
# =============================================================================

# Required fields for each operation
REQUIRED_FIELDS: Dict[str, List[str]] = {
    OperationType.ADD_LANGUAGE.value: ["name"],
    OperationType.RENAME_LANGUAGE.value: ["language", "name"],
    OperationType.REMOVE_LANGUAGE.value: ["language"],
    OperationType.SET_ANCESTOR.value: ["language"],
    OperationType.ADD_POS.value: ["name", "abbr"],
    OperationType.ALTER_POS.value: ["index", "name", "abbr"],
    OperationType.REMOVE_POS.value: ["index"],
    OperationType.ADD_WORD.value: ["language", "mnemonic", "gloss", "pos"],
    OperationType.ALTER_WORD.value: ["language", "index"],
    OperationType.REMOVE_WORD.value: ["language", "index"],
    OperationType.ADD_SURFACE_RULE.value: ["language", "pattern", "replacement"],
    OperationType.ALTER_SURFACE_RULE.value: ["language", "index", "pattern", "replacement"],
    OperationType.INSERT_SURFACE_RULE.value: ["language", "index", "pattern", "replacement"],
    OperationType.REMOVE_SURFACE_RULE.value: ["language", "index"],
    OperationType.ADD_PHONETIC_RULE.value: ["language", "pattern", "replacement"],
    OperationType.ALTER_PHONETIC_RULE.value: ["language", "index", "pattern", "replacement"],
    OperationType.INSERT_PHONETIC_RULE.value: ["language", "index", "pattern", "replacement"],
    OperationType.REMOVE_PHONETIC_RULE.value: ["language", "index"],
    OperationType.ADD_CATEGORY.value: ["language", "key", "content"],
    OperationType.REMOVE_CATEGORY.value: ["language", "key"],
    OperationType.ADD_SOUND_CHANGE.value: ["language", "target", "replacement", "environment"],
    OperationType.ALTER_SOUND_CHANGE.value: ["language", "index", "target", "replacement", "environment"],
    OperationType.INSERT_SOUND_CHANGE.value: ["language", "index", "target", "replacement", "environment"],
    OperationType.REMOVE_SOUND_CHANGE.value: ["language", "index"],
    OperationType.DERIVE.value: ["language", "ancestor"],
    OperationType.MORPH.value: [],
}

# Optional fields for each operation
OPTIONAL_FIELDS: Dict[str, List[str]] = {
    op: [] for op in REQUIRED_FIELDS
}
OPTIONAL_FIELDS[OperationType.SET_ANCESTOR.value] = ["ancestor"]
OPTIONAL_FIELDS[OperationType.ADD_WORD.value] = ["note", "ancestors"]
OPTIONAL_FIELDS[OperationType.ALTER_WORD.value] = [
    "mnemonic", "gloss", "pos", "note", "ancestors",
]
OPTIONAL_FIELDS[OperationType.MORPH.value] = ["language"]

# Fields holding a language reference (index or name)
LANGUAGE_FIELDS = ("language", "ancestor")

# Fields holding a list index
INDEX_FIELDS = ("index",)


# =============================================================================
# Data Classes
# =============================================================================

LanguageRef = Union[int, str]


@dataclass
class Change:
    """Single change operation."""
    operation: str
    params: Dict[str, Any]
    line_number: Optional[int] = None

    @property
    def language(self) -> Optional[LanguageRef]:
        """Get the language reference if present in params."""
        return self.params.get("language")

    @property
    def index(self) -> Optional[int]:
        """Get the list index if present in params."""
        return self.params.get("index")


@dataclass
class ChangeRequest:
    """Parsed change request from YAML."""
    changes: List[Change]
    language: Optional[LanguageRef] = None
    session_name: Optional[str] = None
    session_description: Optional[str] = None
    source_file: Optional[Path] = None


@dataclass
class ValidationError:
    """Validation error for a specific change."""
    index: int
    operation: str
    field: str
    message: str
    line_number: Optional[int] = None


@dataclass
class ValidationWarning:
    """Validation warning for a specific change."""
    index: int
    operation: str
    message: str
    line_number: Optional[int] = None


@dataclass
class ValidationResult:
    """Result of validating a change request."""
    is_valid: bool
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)


@dataclass
class ChangeResult:
    """Result of executing a single change."""
    index: int
    operation: str
    success: bool
    message: str
    target: Optional[str] = None
    created_index: Optional[int] = None
    error: Optional[str] = None
    line_number: Optional[int] = None


@dataclass
class BatchResult:
    """Result of executing a batch change request."""
    total_count: int
    success_count: int
    failure_count: int
    changes: List[ChangeResult]
    duration_seconds: float
    rolled_back: bool = False

    @property
    def skipped_count(self) -> int:
        return self.total_count - self.success_count - self.failure_count
