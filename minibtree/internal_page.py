"""Internal B+ tree page: separator keys and the page ids of child pages."""

from __future__ import annotations

import bisect
from typing import Any

from minibtree.table_page import INVALID_PAGE_ID
from minibtree.tree_page import BPlusTreePage, IndexPageType, PageStore


class InternalPage(BPlusTreePage):
    """Internal page holding ``size`` keys and ``size + 1`` child page ids.

    Key ``i`` separates child ``i`` (keys below it) from child ``i + 1``
    (keys at or above it).
    """

    def __init__(self, page_id: int, parent_page_id: int = INVALID_PAGE_ID,
                 max_size: int = 4) -> None:
        super().__init__(page_id, parent_page_id, max_size, IndexPageType.INTERNAL)
        self._values: list[int] = []

    def key_at(self, index: int) -> Any:
        return self._keys[index]

    def set_key_at(self, index: int, key: Any) -> None:
        self._keys[index] = key

    def value_at(self, index: int) -> int:
        return self._values[index]

    def set_value_at(self, index: int, value: int) -> None:
        """Set child ``index``; an index one past the last child appends."""
        if index == len(self._values):
            self._values.append(value)
        else:
            self._values[index] = value

    def value_index(self, value: int) -> int:
        """Position of child ``value``, or the number of children if absent."""
        try:
            return self._values.index(value)
        except ValueError:
            return len(self._values)

    def key_index(self, key: Any) -> int:
        """Index of the child whose subtree may contain ``key``."""
        return bisect.bisect_right(self._keys, key)

    def insert_node_after(self, old_value: int, new_key: Any, new_value: int) -> int:
        """Insert ``new_key`` and child ``new_value`` right after child ``old_value``.

        Returns the number of keys afterwards.
        """
        if new_value == INVALID_PAGE_ID:
            raise ValueError("cannot insert an invalid child page id")
        index = self.value_index(old_value)
        if index == len(self._values):
            raise ValueError(f"page {old_value} is not a child of page {self.page_id}")
        self._keys.insert(index, new_key)
        self._values.insert(index + 1, new_value)
        return len(self._keys)

    @staticmethod
    def _adopt(children: list[int], parent_id: int, store: PageStore) -> None:
        for child_id in children:
            child = store.fetch(child_id)
            child.parent_page_id = parent_id
            store.unpin(child_id)

    def move_half_to(self, recipient: InternalPage, store: PageStore) -> Any:
        """Move the upper half into an empty ``recipient``; return the key pushed up.

        The middle key leaves both pages: it becomes the parent's separator.
        """
        half = len(self._keys) // 2
        middle_key = self._keys[half]
        recipient._keys = self._keys[half + 1:]
        recipient._values = self._values[half + 1:]
        del self._keys[half:]
        del self._values[half + 1:]
        self._adopt(recipient._values, recipient.page_id, store)
        return middle_key

    def remove_and_return_only_child(self) -> int:
        """Return the first child, the one left when a root has no keys."""
        return self._values[0]

    def move_all_to(self, recipient: InternalPage, middle_key: Any, store: PageStore) -> None:
        """Append ``middle_key`` and every entry to ``recipient``, then delete this page."""
        moved = list(self._values)
        self._adopt(moved, recipient.page_id, store)
        recipient._keys.append(middle_key)
        recipient._keys.extend(self._keys)
        recipient._values.extend(moved)
        self._keys = []
        self._values = []
        store.unpin(self.page_id)
        store.delete(self.page_id)

    def move_first_to_end_of(self, recipient: InternalPage, middle_key: Any,
                             store: PageStore) -> Any:
        """Take the first child of ``recipient`` onto this page's end.

        ``middle_key`` is the parent's separator between the two pages; the
        new separator, the first key of ``recipient``, is returned.
        """
        self._keys.append(middle_key)
        new_middle = recipient._keys.pop(0)
        child_id = recipient._values.pop(0)
        self._values.append(child_id)
        self._adopt([child_id], self.page_id, store)
        return new_middle

    def move_last_to_front_of(self, recipient: InternalPage, middle_key: Any,
                              store: PageStore) -> Any:
        """Take the last child of ``recipient`` onto this page's front.

        ``middle_key`` is the parent's separator between the two pages; the
        new separator, the last key of ``recipient``, is returned.
        """
        self._keys.insert(0, middle_key)
        child_id = recipient._values.pop()
        new_middle = recipient._keys.pop()
        self._values.insert(0, child_id)
        self._adopt([child_id], self.page_id, store)
        return new_middle

    def destroy(self, store: PageStore) -> None:
        """Delete this page and its whole subtree; the caller holds one pin on it."""
        children = list(self._values)
        store.unpin(self.page_id)
        store.delete(self.page_id)
        for child_id in children:
            child = store.fetch(child_id)
            if child.is_leaf():
                store.unpin(child_id)
                store.delete(child_id)
            else:
                child.destroy(store)