"""An ordered collection with match-callback search, removal and selection sort."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator

Match = Callable[[Any, Any], Any]

__all__ = ["LinkedList"]


class LinkedList:
    """A sequence of items that supports adding at both ends.

    Searching and removal take a ``match(item, data)`` callable that returns
    true when ``item`` is the one looked for.
    """

    def __init__(self, items: Iterable[Any] = ()) -> None:
        self._items: list[Any] = list(items)

    def add_back(self, data: Any) -> None:
        """Append ``data`` at the end."""
        self._items.append(data)

    def add_front(self, data: Any) -> None:
        """Insert ``data`` at the start."""
        self._items.insert(0, data)

    def delete_node(self, data: Any, match: Match) -> bool:
        """Remove the first item for which ``match(item, data)`` holds.

        Returns True if an item was removed, False if none matched.
        """
        for position, item in enumerate(self._items):
            if match(item, data):
                del self._items[position]
                return True
        return False

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._items):
            raise IndexError(f"index {index} out of range for list of {len(self._items)} items")

    def delete_at(self, index: int) -> None:
        """Remove the item at ``index`` (0 to len - 1); raise IndexError otherwise."""
        self._check_index(index)
        del self._items[index]

    def modify_at(self, index: int, data: Any) -> None:
        """Replace the item at ``index`` (0 to len - 1); raise IndexError otherwise."""
        self._check_index(index)
        self._items[index] = data

    def have_same(self, data: Any, match: Match) -> bool:
        """Return True if ``match(item, data)`` holds for some item."""
        return any(match(item, data) for item in self._items)

    def have_same_cmp(self, data: Any) -> bool:
        """Return True if some item differs from ``data``.

        This mirrors a byte comparison that reports a hit on any difference.
        """
        return any(item != data for item in self._items)

    def foreach(self, func: Callable[[Any], Any]) -> None:
        """Call ``func`` on every item in order."""
        for item in self._items:
            func(item)

    def sort(self, greater: Match) -> None:
        """Sort in place by selection sort.

        ``greater(a, b)`` returns true when ``a`` should come after ``b``.
        Like any selection sort, equal items may change their relative order.
        """
        items = self._items
        count = len(items)
        for start in range(count):
            smallest = start
            for candidate in range(start + 1, count):
                if greater(items[smallest], items[candidate]):
                    smallest = candidate
            if smallest != start:
                items[start], items[smallest] = items[smallest], items[start]

    def clear(self) -> None:
        """Remove every item."""
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"LinkedList({self._items!r})"