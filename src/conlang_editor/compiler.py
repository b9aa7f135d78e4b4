"""Category table and sound-change rule compiler."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Sequence

from conlang_editor.exceptions import (
    InvalidEnvironmentError,
    InvalidTargetError,
    ValidationError,
)
from conlang_editor.models import SoundChange
from conlang_editor.slots import rule_alter, rule_append, rule_insert, rule_remove
from conlang_editor.substitution import DEFAULT_LIMITS, Limits, Substitution

logger = logging.getLogger(__name__)

ENVIRONMENT_MARKER = "_"

# Named groups keep before/after addressable whatever groups the user writes
_BEFORE = "ctx_before"
_AFTER = "ctx_after"


class CategoryTable:
    """Maps single-character variables to ordered grapheme sequences."""

    __slots__ = ("_entries",)

    def __init__(self, entries: dict[str, Sequence[str] | str] | None = None) -> None:
        self._entries: dict[str, tuple[str, ...]] = {}
        for key, content in (entries or {}).items():
            self.add(key, content)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __getitem__(self, key: str) -> tuple[str, ...]:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CategoryTable):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"CategoryTable({self._entries!r})"

    def items(self) -> Iterator[tuple[str, tuple[str, ...]]]:
        return iter(self._entries.items())

    def add(self, key: str, content: Sequence[str] | str) -> None:
        """Store or overwrite a category.

        A string is split into one grapheme per character; pass a list to
        declare multi-character graphemes such as ``["ts", "tʃ"]``.
        """
        if len(key) != 1:
            raise ValidationError(f"Category key must be one character: {key!r}")
        graphemes = tuple(content)
        if not graphemes or any(not g for g in graphemes):
            raise ValidationError(f"Category {key!r} needs non-empty graphemes")
        self._entries[key] = graphemes

    def remove(self, key: str) -> tuple[str, ...]:
        try:
            return self._entries.pop(key)
        except KeyError:
            raise ValidationError(f"Unknown category: {key!r}") from None

    def referenced(self, text: str) -> list[str]:
        """Category keys used in *text*, in order of first appearance."""
        keys: list[str] = []
        for char in text:
            if char in self._entries and char not in keys:
                keys.append(char)
        return keys

    def char_class(self, key: str) -> str:
        graphemes = self._entries[key]
        if all(len(g) == 1 for g in graphemes):
            return "[" + "".join(re.escape(g) for g in graphemes) + "]"
        # longest first so "ts" wins over "t"
        ordered = sorted(graphemes, key=len, reverse=True)
        return "(?:" + "|".join(re.escape(g) for g in ordered) + ")"

    def expand(self, text: str) -> str:
        """Replace every category variable in a pattern by its class."""
        return "".join(
            self.char_class(char) if char in self._entries else char
            for char in text
        )

    def resolve(self, text: str, index: int, *, escape: bool = False) -> str:
        """Replace every category variable by its grapheme at *index*."""
        out = []
        for char in text:
            if char in self._entries:
                grapheme = self._entries[char][index]
                out.append(re.escape(grapheme) if escape else grapheme)
            else:
                out.append(char)
        return "".join(out)


def split_environment(environment: str) -> tuple[str, str]:
    parts = environment.split(ENVIRONMENT_MARKER)
    if len(parts) != 2:
        raise InvalidEnvironmentError(environment)
    return parts[0], parts[1]


def _literal_template(text: str) -> str:
    return text.replace("\\", "\\\\")


def _compile_unit(
    table: CategoryTable,
    target_pattern: str,
    replacement: str,
    environment: str,
    *,
    rule: str,
    limits: Limits,
) -> Substitution:
    before, after = split_environment(environment)
    pattern = (
        f"(?P<{_BEFORE}>{table.expand(before)})"
        f"{target_pattern}"
        f"(?P<{_AFTER}>{table.expand(after)})"
    )
    template = rf"\g<{_BEFORE}>{_literal_template(replacement)}\g<{_AFTER}>"
    return Substitution(pattern, template, rule=rule, limits=limits)


def compile_sound_change(
    table: CategoryTable,
    change: SoundChange,
    *,
    limits: Limits = DEFAULT_LIMITS,
) -> list[Substitution]:
    """Compile one sound change into one or more substitutions.

    When the replacement mentions a category the rule is expanded
    positionally: one concrete substitution per index up to the shortest
    category referenced on either side.

    Replacements are literal text. Groups written in a target may be used
    for alternation but cannot be referenced from the replacement.
    """
    rule = str(change)
    split_environment(change.environment)

    repl_keys = table.referenced(change.replacement)
    if not repl_keys:
        return [
            _compile_unit(
                table,
                table.expand(change.target),
                change.replacement,
                change.environment,
                rule=rule,
                limits=limits,
            )
        ]

    target_keys = table.referenced(change.target)
    if not target_keys:
        raise InvalidTargetError(change.target)
    width = min(
        min(len(table[k]) for k in target_keys),
        min(len(table[k]) for k in repl_keys),
    )
    subs = [
        _compile_unit(
            table,
            table.resolve(change.target, idx, escape=True),
            table.resolve(change.replacement, idx),
            change.environment,
            rule=rule,
            limits=limits,
        )
        for idx in range(width)
    ]
    logger.debug(f"Expanded {rule} into {len(subs)} correlated substitutions")
    return subs


class SoundChangeSet:
    """A category table plus the ordered sound changes that use it."""

    __slots__ = ("categories", "rules")

    def __init__(
        self,
        categories: CategoryTable | None = None,
        rules: list[SoundChange] | None = None,
    ) -> None:
        self.categories = categories if categories is not None else CategoryTable()
        self.rules: list[SoundChange] = list(rules or [])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SoundChangeSet):
            return NotImplemented
        return self.categories == other.categories and self.rules == other.rules

    def __repr__(self) -> str:
        return f"SoundChangeSet({self.categories!r}, {self.rules!r})"

    def add_category(self, key: str, content: Sequence[str] | str) -> None:
        self.categories.add(key, content)

    def remove_category(self, key: str) -> tuple[str, ...]:
        return self.categories.remove(key)

    def compile(
        self,
        change: SoundChange,
        *,
        limits: Limits = DEFAULT_LIMITS,
    ) -> list[Substitution]:
        return compile_sound_change(
            self.categories, change, limits=limits
        )

    def compile_all(
        self, *, limits: Limits = DEFAULT_LIMITS
    ) -> list[Substitution]:
        """Compile every rule in order; sub-rules of one rule stay adjacent."""
        subs: list[Substitution] = []
        for change in self.rules:
            subs.extend(self.compile(change, limits=limits))
        return subs

    # Every mutation compiles first so a malformed rule is never stored.

    def add_rule(self, change: SoundChange) -> int:
        self.compile(change)
        return rule_append(self.rules, change)

    def alter_rule(self, index: int, change: SoundChange) -> SoundChange:
        self.compile(change)
        return rule_alter(self.rules, index, change)

    def insert_rule(self, index: int, change: SoundChange) -> None:
        self.compile(change)
        rule_insert(self.rules, index, change)

    def remove_rule(self, index: int) -> SoundChange:
        return rule_remove(self.rules, index)
