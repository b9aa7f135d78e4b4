"""Index-stable slot arena and strict rule-list helpers.

Registries (languages, parts of speech, vocabularies) never compact: removing
an item leaves an empty slot so every other index stays valid. Rule lists do
compact on removal and only check bounds.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Generic, TypeVar

from conlang_editor.exceptions import IndexOutOfRangeError, InvalidElementError

T = TypeVar("T")


class SlotList(Generic[T]):
    """A list of optional slots addressed by stable integer handles."""

    __slots__ = ("_slots",)

    def __init__(self, slots: Iterable[T | None] = ()) -> None:
        self._slots: list[T | None] = list(slots)

    def __len__(self) -> int:
        return len(self._slots)

    def __repr__(self) -> str:
        return f"SlotList({self._slots!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SlotList):
            return NotImplemented
        return self._slots == other._slots

    def _check(self, index: int) -> None:
        if not 0 <= index < len(self._slots):
            raise IndexOutOfRangeError(index, len(self._slots))

    def append(self, item: T) -> int:
        self._slots.append(item)
        return len(self._slots) - 1

    def get(self, index: int) -> T:
        self._check(index)
        item = self._slots[index]
        if item is None:
            raise InvalidElementError(index)
        return item

    def set(self, index: int, item: T) -> None:
        """Overwrite a slot, reviving it if it was removed."""
        self._check(index)
        self._slots[index] = item

    def remove(self, index: int) -> T | None:
        """Tombstone a slot and return what it held."""
        self._check(index)
        old = self._slots[index]
        self._slots[index] = None
        return old

    def is_live(self, index: int) -> bool:
        return 0 <= index < len(self._slots) and self._slots[index] is not None

    def items(self) -> Iterator[tuple[int, T]]:
        """Yield ``(index, item)`` for live slots only."""
        for idx, item in enumerate(self._slots):
            if item is not None:
                yield idx, item

    def raw(self) -> list[T | None]:
        """A shallow copy of every slot, empty ones included."""
        return list(self._slots)


# ---------------------------------------------------------------------------
# Rule-list helpers
# ---------------------------------------------------------------------------

def rule_append(seq: list[T], item: T) -> int:
    seq.append(item)
    return len(seq) - 1


def rule_alter(seq: list[T], index: int, item: T) -> T:
    if not 0 <= index < len(seq):
        raise IndexOutOfRangeError(index, len(seq))
    old = seq[index]
    seq[index] = item
    return old


def rule_insert(seq: list[T], index: int, item: T) -> None:
    # inserting at len(seq) is an append
    if not 0 <= index <= len(seq):
        raise IndexOutOfRangeError(index, len(seq))
    seq.insert(index, item)


def rule_remove(seq: list[T], index: int) -> T:
    if not 0 <= index < len(seq):
        raise IndexOutOfRangeError(index, len(seq))
    return seq.pop(index)
