"""Forward iterator over the key/value pairs stored in a chain of leaf pages."""

from __future__ import annotations

from typing import Any

from minibtree.table_page import INVALID_PAGE_ID
from minibtree.tree_page import LeafPage, PageStore


class IndexIterator:
    """Yields ``(key, value)`` pairs from ``leaf`` at ``index`` onwards.

    The iterator owns one pin on the leaf it is positioned on and releases it
    when it moves to the next leaf or runs out.  ``leaf=None`` gives an
    exhausted iterator.
    """

    def __init__(self, leaf: LeafPage | None = None, index: int = 0,
                 store: PageStore | None = None) -> None:
        if leaf is not None and store is None:
            raise ValueError("an iterator over a leaf needs its page store")
        if index < 0:
            raise IndexError(f"negative leaf index {index}")
        self._leaf = leaf
        self._index = index
        self._store = store
        self._settle()

    def _settle(self) -> None:
        while self._leaf is not None and self._index >= self._leaf.size():
            self._store.unpin(self._leaf.page_id)
            next_id = self._leaf.next_page_id
            if next_id == INVALID_PAGE_ID:
                self._leaf = None
                self._store = None
                self._index = -1
            else:
                self._leaf = self._store.fetch(next_id)
                self._index = 0

    def __iter__(self) -> IndexIterator:
        return self

    def __next__(self) -> tuple[Any, Any]:
        if self._leaf is None:
            raise StopIteration
        item = (self._leaf.key_at(self._index), self._leaf.value_at(self._index))
        self._index += 1
        self._settle()
        return item