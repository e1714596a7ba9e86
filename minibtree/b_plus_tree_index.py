"""Index over table rows: maps keys to row ids through a B+ tree."""

from __future__ import annotations

from typing import Any

from minibtree.b_plus_tree import BPlusTree
from minibtree.index_iterator import IndexIterator
from minibtree.index_roots import IndexRootsPage
from minibtree.table_page import INVALID_PAGE_ID, RowId
from minibtree.tree_page import PageStore


class DuplicateKeyError(KeyError):
    """Raised when an index entry with the same key already exists."""


class BPlusTreeIndex:
    """Unique index whose entries map a key to the :class:`RowId` of a row."""

    def __init__(self, index_id: int, store: PageStore, roots: IndexRootsPage) -> None:
        self.index_id = index_id
        self.tree = BPlusTree(index_id, store, roots)

    def insert_entry(self, key: Any, row_id: RowId) -> None:
        """Add ``key`` pointing at ``row_id``; raise DuplicateKeyError if it exists."""
        if row_id.page_id == INVALID_PAGE_ID:
            raise ValueError("invalid row id for index insert")
        if not self.tree.insert(key, row_id):
            raise DuplicateKeyError(key)

    def remove_entry(self, key: Any, row_id: RowId) -> None:
        """Remove the entry for ``key``; absent keys are ignored."""
        self.tree.remove(key)

    def scan_key(self, key: Any) -> RowId:
        """Return the row id stored under ``key``; raise KeyError if absent."""
        return self.tree.get_value(key)

    def destroy(self) -> None:
        """Delete every page of the index."""
        self.tree.destroy()

    def begin(self) -> IndexIterator:
        return self.tree.begin()

    def begin_at(self, key: Any) -> IndexIterator:
        return self.tree.begin_at(key)

    def __iter__(self) -> IndexIterator:
        return self.tree.begin()