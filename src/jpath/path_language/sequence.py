"""Ordered result sequence for path evaluation."""

from __future__ import annotations

from collections.abc import Iterable, Iterator


_EMPTY = object()


class ResultSequence:
    """Ordered, duplicate-preserving collection of path results.

    Most sequences hold zero or one item, so the first item lives in its own
    slot and a list is only allocated once a second item is appended.
    """

    __slots__ = ("_head", "_items")

    def __init__(self, values: Iterable[object] = ()) -> None:
        self._head: object = _EMPTY
        self._items: list[object] | None = None
        self.extend(values)

    def append(self, value: object) -> None:
        """Append one item."""
        if self._items is not None:
            self._items.append(value)
        elif self._head is _EMPTY:
            self._head = value
        else:
            self._items = [self._head, value]

    def extend(self, values: Iterable[object]) -> None:
        """Append all items, keeping their order."""
        for value in values:
            self.append(value)

    def __len__(self) -> int:
        if self._items is not None:
            return len(self._items)
        return 0 if self._head is _EMPTY else 1

    def is_empty(self) -> bool:
        """Return whether the sequence holds no items."""
        return self._head is _EMPTY

    def head(self) -> object:
        """Return the first item, or None for an empty sequence."""
        return None if self._head is _EMPTY else self._head

    def __iter__(self) -> Iterator[object]:
        return iter(self.to_list())

    def to_list(self) -> list[object]:
        """Return the items as a new list."""
        if self._items is not None:
            return list(self._items)
        return [] if self._head is _EMPTY else [self._head]

    def __repr__(self) -> str:
        return f"ResultSequence({self.to_list()!r})"
