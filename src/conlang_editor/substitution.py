"""Pattern substitutions and fixpoint pipeline application."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from conlang_editor.exceptions import NonTerminatingRuleError, PatternError

DEFAULT_MAX_ITERATIONS = 1000
DEFAULT_GROWTH_FACTOR = 16
DEFAULT_GROWTH_MARGIN = 256


@dataclass(frozen=True, slots=True)
class Limits:
    """Bounds on one fixpoint run.

    A run stops after ``max_iterations`` changing passes, or as soon as the
    text is longer than ``max(len(start) * growth_factor,
    len(start) + growth_margin)``.
    """
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    growth_factor: int = DEFAULT_GROWTH_FACTOR
    growth_margin: int = DEFAULT_GROWTH_MARGIN

    def max_length(self, text: str) -> int:
        return max(len(text) * self.growth_factor, len(text) + self.growth_margin)


DEFAULT_LIMITS = Limits()


class Substitution:
    """A compiled pattern plus replacement template.

    The template uses Python ``re`` syntax (``\\1``, ``\\g<name>``).
    """

    __slots__ = ("pattern", "replacement", "limits", "_regex")

    def __init__(
        self,
        pattern: str,
        replacement: str,
        *,
        rule: str | None = None,
        limits: Limits = DEFAULT_LIMITS,
    ) -> None:
        self.pattern = pattern
        self.replacement = replacement
        self.limits = limits
        label = rule if rule is not None else f"{pattern} > {replacement}"
        try:
            self._regex = re.compile(pattern)
            # re parses the template eagerly, even when nothing matches
            self._regex.sub(replacement, "")
        except re.error as e:
            raise PatternError(label, str(e)) from e

    def __repr__(self) -> str:
        return f"Substitution({self.pattern!r}, {self.replacement!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Substitution):
            return NotImplemented
        return (self.pattern, self.replacement) == (
            other.pattern, other.replacement
        )

    def __hash__(self) -> int:
        return hash((self.pattern, self.replacement))

    def apply_once(self, text: str) -> str:
        """Replace every non-overlapping match once."""
        return self._regex.sub(self.replacement, text)

    def apply(self, text: str) -> str:
        """Apply repeatedly until the text stops changing.

        Raises:
            NonTerminatingRuleError: If the iteration cap is reached or the
                text outgrows its length bound
        """
        max_length = self.limits.max_length(text)
        for iteration in range(1, self.limits.max_iterations + 1):
            result = self._regex.sub(self.replacement, text)
            if result == text:
                return result
            if len(result) > max_length:
                raise NonTerminatingRuleError(
                    self.pattern, iteration, length=max_length
                )
            text = result
        raise NonTerminatingRuleError(self.pattern, self.limits.max_iterations)


def apply_pipeline(substitutions: Iterable[Substitution], text: str) -> str:
    """Run *text* through each substitution in order, each to its fixpoint."""
    for sub in substitutions:
        text = sub.apply(text)
    return text
