"""B+ tree with unique keys, built on pages held in a :class:`PageStore`."""

from __future__ import annotations

from typing import Any

from minibtree.index_iterator import IndexIterator
from minibtree.index_roots import IndexRootsPage
from minibtree.internal_page import InternalPage
from minibtree.table_page import INVALID_PAGE_ID
from minibtree.tree_page import BPlusTreePage, LeafPage, PageStore


def _remove_separator(parent: InternalPage, key_index: int) -> tuple[Any, int]:
    """Drop key ``key_index`` and the child to its right from ``parent``.

    Returns the removed key and the removed child's page id.
    """
    removed_key = parent._keys.pop(key_index)
    removed_child = parent._values.pop(key_index + 1)
    return removed_key, removed_child


class BPlusTree:
    """Unique-key B+ tree whose root page id is recorded in an index roots page.

    A leaf splits when it reaches ``leaf_max_size`` entries, an internal page
    when it reaches ``internal_max_size`` keys.
    """

    def __init__(self, index_id: int, store: PageStore, roots: IndexRootsPage,
                 leaf_max_size: int = 4, internal_max_size: int = 4) -> None:
        if leaf_max_size < 2:
            raise ValueError(f"leaf max size must be at least 2, got {leaf_max_size}")
        if internal_max_size < 3:
            raise ValueError(f"internal max size must be at least 3, got {internal_max_size}")
        self.index_id = index_id
        self.store = store
        self.roots = roots
        self.leaf_max_size = leaf_max_size
        self.internal_max_size = internal_max_size
        try:
            self._root_page_id = roots.get_root_id(index_id)
        except KeyError:
            self._root_page_id = INVALID_PAGE_ID

    @property
    def root_page_id(self) -> int:
        """Page id of the root, or ``INVALID_PAGE_ID`` for an empty tree."""
        return self._root_page_id

    def is_empty(self) -> bool:
        return self._root_page_id == INVALID_PAGE_ID

    def _update_root_page_id(self) -> None:
        if not self.roots.update(self.index_id, self._root_page_id):
            self.roots.insert(self.index_id, self._root_page_id)

    def _find_leaf(self, key: Any) -> LeafPage:
        """Return the pinned leaf whose range covers ``key``."""
        page = self.store.fetch(self._root_page_id)
        while not page.is_leaf():
            child_id = page.value_at(page.key_index(key))
            self.store.unpin(page.page_id)
            page = self.store.fetch(child_id)
        return page

    def _leftmost_leaf(self) -> LeafPage:
        page = self.store.fetch(self._root_page_id)
        while not page.is_leaf():
            child_id = page.value_at(0)
            self.store.unpin(page.page_id)
            page = self.store.fetch(child_id)
        return page

    # ------------------------------------------------------------------ search

    def get_value(self, key: Any) -> Any:
        """Return the value stored under ``key``; raise KeyError if absent."""
        if self.is_empty():
            raise KeyError(key)
        leaf = self._find_leaf(key)
        try:
            return leaf.lookup(key)
        finally:
            self.store.unpin(leaf.page_id)

    # --------------------------------------------------------------- insertion

    def insert(self, key: Any, value: Any) -> bool:
        """Insert a pair; return False if ``key`` is already present."""
        if self.is_empty():
            leaf = self.store.new_page(
                lambda pid: LeafPage(pid, INVALID_PAGE_ID, self.leaf_max_size))
            self._root_page_id = leaf.page_id
            leaf.insert(key, value)
            self.store.unpin(leaf.page_id)
            self._update_root_page_id()
            return True
        leaf = self._find_leaf(key)
        if leaf.key_index(key) != leaf.size():
            self.store.unpin(leaf.page_id)
            return False
        if leaf.insert(key, value) >= leaf.max_size:
            parent_id = leaf.parent_page_id
            new_leaf = self.store.new_page(
                lambda pid: LeafPage(pid, parent_id, self.leaf_max_size))
            leaf.move_half_to(new_leaf)
            self._insert_into_parent(leaf, new_leaf.key_at(0), new_leaf)
            self.store.unpin(new_leaf.page_id)
        self.store.unpin(leaf.page_id)
        return True

    def _insert_into_parent(self, old_node: BPlusTreePage, key: Any,
                            new_node: BPlusTreePage) -> None:
        if old_node.is_root():
            root = self.store.new_page(
                lambda pid: InternalPage(pid, INVALID_PAGE_ID, self.internal_max_size))
            root.set_value_at(0, old_node.page_id)
            root.insert_node_after(old_node.page_id, key, new_node.page_id)
            old_node.parent_page_id = root.page_id
            new_node.parent_page_id = root.page_id
            self._root_page_id = root.page_id
            self.store.unpin(root.page_id)
            self._update_root_page_id()
            return
        parent = self.store.fetch(old_node.parent_page_id)
        new_node.parent_page_id = parent.page_id
        if parent.insert_node_after(old_node.page_id, key, new_node.page_id) >= parent.max_size:
            grand_id = parent.parent_page_id
            sibling = self.store.new_page(
                lambda pid: InternalPage(pid, grand_id, self.internal_max_size))
            middle_key = parent.move_half_to(sibling, self.store)
            self._insert_into_parent(parent, middle_key, sibling)
            self.store.unpin(sibling.page_id)
        self.store.unpin(parent.page_id)

    # ----------------------------------------------------------------- removal

    def remove(self, key: Any) -> None:
        """Delete ``key`` if present, merging or refilling pages as needed."""
        if self.is_empty():
            return
        leaf = self._find_leaf(key)
        size = leaf.remove_and_delete_record(key)
        if leaf.is_root() and size == 0:
            self.store.unpin(leaf.page_id)
            self.store.delete(leaf.page_id)
            self._root_page_id = INVALID_PAGE_ID
            self._update_root_page_id()
            return
        if leaf.is_root() or size >= leaf.min_size():
            self.store.unpin(leaf.page_id)
            return
        self._coalesce_or_redistribute(leaf)

    def _coalesce_or_redistribute(self, node: BPlusTreePage) -> None:
        """Fix an underfull ``node``; consumes the caller's single pin on it."""
        if node.is_root():
            self._adjust_root(node)
            return
        store = self.store
        parent = store.fetch(node.parent_page_id)
        index = parent.value_index(node.page_id)
        sibling = store.fetch(parent.value_at(1 if index == 0 else index - 1))
        if sibling.size() > sibling.min_size():
            if index == 0:
                new_key = node.move_first_to_end_of(sibling, parent.key_at(0), store)
                parent.set_key_at(0, new_key)
            else:
                new_key = node.move_last_to_front_of(sibling, parent.key_at(index - 1), store)
                parent.set_key_at(index - 1, new_key)
            store.unpin(sibling.page_id)
            store.unpin(node.page_id)
            store.unpin(parent.page_id)
            return
        if index == 0:
            left, right, separator = node, sibling, 0
        else:
            left, right, separator = sibling, node, index - 1
        right.move_all_to(left, parent.key_at(separator), store)
        _remove_separator(parent, separator)
        store.unpin(left.page_id)
        if parent.size() < parent.min_size():
            self._coalesce_or_redistribute(parent)
        else:
            store.unpin(parent.page_id)

    def _adjust_root(self, root: InternalPage) -> None:
        """Replace a key-less internal root by its only child."""
        child_id = root.remove_and_return_only_child()
        child = self.store.fetch(child_id)
        child.parent_page_id = INVALID_PAGE_ID
        self.store.unpin(child_id)
        self.store.unpin(root.page_id)
        self.store.delete(root.page_id)
        self._root_page_id = child_id
        self._update_root_page_id()

    def destroy(self) -> None:
        """Delete every page of the tree and forget its root."""
        self.roots.delete(self.index_id)
        if self.is_empty():
            return
        root = self.store.fetch(self._root_page_id)
        if root.is_leaf():
            self.store.unpin(root.page_id)
            self.store.delete(root.page_id)
        else:
            root.destroy(self.store)
        self._root_page_id = INVALID_PAGE_ID

    # --------------------------------------------------------------- iterating

    def begin(self) -> IndexIterator:
        """Iterator over every pair in key order."""
        if self.is_empty():
            return IndexIterator()
        return IndexIterator(self._leftmost_leaf(), 0, self.store)

    def begin_at(self, key: Any) -> IndexIterator:
        """Iterator starting at ``key``; exhausted if ``key`` is not stored."""
        if self.is_empty():
            return IndexIterator()
        leaf = self._find_leaf(key)
        index = leaf.key_index(key)
        if index == leaf.size():
            self.store.unpin(leaf.page_id)
            return IndexIterator()
        return IndexIterator(leaf, index, self.store)

    def __iter__(self) -> IndexIterator:
        return self.begin()

    def check(self) -> bool:
        """True when no page of the store is left pinned."""
        return self.store.all_unpinned()