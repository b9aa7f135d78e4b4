"""Custom exception hierarchy for conlang-editor."""

from __future__ import annotations


class ConlangEditorError(Exception):
    """Base exception for all conlang-editor errors."""


class ValidationError(ConlangEditorError):
    """Invalid authored data (multi-character category key, bad field)."""


class IndexOutOfRangeError(ConlangEditorError):
    """Index does not address any slot of the list."""

    def __init__(self, index: int, length: int) -> None:
        self.index = index
        self.length = length
        super().__init__(f"Index out of range: {index} (length {length})")


class InvalidElementError(ConlangEditorError):
    """Index resolves to a removed (tombstoned) slot."""

    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(f"Invalid element at index {index}")


class InvalidEnvironmentError(ConlangEditorError):
    """Sound-change environment does not split into exactly two parts."""

    def __init__(self, environment: str) -> None:
        self.environment = environment
        super().__init__(f"Invalid sound-change environment: {environment!r}")


class InvalidTargetError(ConlangEditorError):
    """Correlated sound change whose target references no category."""

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(f"Invalid sound-change target: {target!r}")


class PatternError(ConlangEditorError):
    """A compiled text pattern is not a valid regular expression."""

    def __init__(self, rule: str, reason: str) -> None:
        self.rule = rule
        super().__init__(f"Invalid pattern in rule {rule}: {reason}")


class NonTerminatingRuleError(ConlangEditorError):
    """A substitution kept changing its input past the iteration or length cap."""

    def __init__(
        self, pattern: str, iterations: int, *, length: int | None = None
    ) -> None:
        self.pattern = pattern
        self.iterations = iterations
        self.length = length
        if length is None:
            message = (
                f"Rule {pattern!r} did not converge after {iterations} iterations"
            )
        else:
            message = (
                f"Rule {pattern!r} grew its input past {length} characters "
                f"after {iterations} iterations"
            )
        super().__init__(message)


class GhostWordError(ConlangEditorError):
    """Derivation could not find the ancestor of a descendant word."""

    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(f"Ghost word: {index}")


class DeriveFromSelfError(ConlangEditorError):
    """A language was asked to derive from itself."""

    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(f"Language {index} cannot derive from itself")


class DataImportError(ConlangEditorError):
    """Failed to load a project file (malformed JSON/YAML, bad shape)."""


class ExportError(ConlangEditorError):
    """Failed to write a project file."""


class ConfigError(ConlangEditorError):
    """Invalid engine configuration value."""
