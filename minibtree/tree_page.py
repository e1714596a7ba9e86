"""Common B+ tree page header, an in-memory page store and the leaf page."""

from __future__ import annotations

import bisect
from collections.abc import Callable
from enum import Enum
from typing import Any, TypeVar

from minibtree.table_page import INVALID_PAGE_ID

P = TypeVar("P")


class IndexPageType(Enum):
    """Kind of a B+ tree page."""

    INVALID = 0
    LEAF = 1
    INTERNAL = 2


class PageStore:
    """Holds pages by id and counts how many users have each one pinned.

    A page is pinned once when it is created and once more on every fetch;
    every pin should be matched by an unpin.  Pinned pages cannot be deleted.
    """

    def __init__(self) -> None:
        self._pages: dict[int, Any] = {}
        self._pins: dict[int, int] = {}
        self._next_id = 0

    def new_page(self, factory: Callable[[int], P]) -> P:
        """Create a page with a fresh id by calling ``factory(page_id)``; it starts pinned."""
        page_id = self._next_id
        self._next_id += 1
        page = factory(page_id)
        self._pages[page_id] = page
        self._pins[page_id] = 1
        return page

    def fetch(self, page_id: int) -> Any:
        """Return the page with ``page_id`` and pin it; raise KeyError if absent."""
        try:
            page = self._pages[page_id]
        except KeyError:
            raise KeyError(page_id) from None
        self._pins[page_id] += 1
        return page

    def unpin(self, page_id: int) -> bool:
        """Drop one pin; return False if the page is absent or not pinned."""
        count = self._pins.get(page_id, 0)
        if count <= 0:
            return False
        self._pins[page_id] = count - 1
        return True

    def delete(self, page_id: int) -> bool:
        """Remove a page; return False if it is still pinned."""
        if page_id not in self._pages:
            return True
        if self._pins[page_id] > 0:
            return False
        del self._pages[page_id]
        del self._pins[page_id]
        return True

    def all_unpinned(self) -> bool:
        """True when no page is pinned."""
        return all(count == 0 for count in self._pins.values())

    def __contains__(self, page_id: object) -> bool:
        return page_id in self._pages

    def __len__(self) -> int:
        return len(self._pages)


class BPlusTreePage:
    """Header shared by leaf and internal pages: ids, type, size and capacity."""

    def __init__(self, page_id: int, parent_page_id: int, max_size: int,
                 page_type: IndexPageType) -> None:
        if page_id == INVALID_PAGE_ID:
            raise ValueError("a tree page needs a valid page id")
        if page_id == parent_page_id:
            raise ValueError(f"page {page_id} cannot be its own parent")
        if max_size <= 0:
            raise ValueError(f"max size must be positive, got {max_size}")
        self.page_id = page_id
        self._parent_page_id = parent_page_id
        self.max_size = max_size
        self.page_type = page_type
        self.lsn = 0
        self._keys: list[Any] = []

    @property
    def parent_page_id(self) -> int:
        return self._parent_page_id

    @parent_page_id.setter
    def parent_page_id(self, value: int) -> None:
        if value == self.page_id:
            raise ValueError(f"page {self.page_id} cannot be its own parent")
        self._parent_page_id = value

    def is_leaf(self) -> bool:
        return self.page_type is IndexPageType.LEAF

    def is_root(self) -> bool:
        return self._parent_page_id == INVALID_PAGE_ID

    def size(self) -> int:
        """Number of keys stored in the page."""
        return len(self._keys)

    def min_size(self) -> int:
        """Fewest keys the page may hold before it must be merged or refilled."""
        if self.is_root():
            return 1
        if self.is_leaf():
            return self.max_size >> 1
        return (self.max_size >> 1) - 1


class LeafPage(BPlusTreePage):
    """Leaf page holding sorted unique keys with their values and a link to the next leaf."""

    def __init__(self, page_id: int, parent_page_id: int = INVALID_PAGE_ID,
                 max_size: int = 4) -> None:
        super().__init__(page_id, parent_page_id, max_size, IndexPageType.LEAF)
        self._values: list[Any] = []
        self.next_page_id = INVALID_PAGE_ID

    def key_at(self, index: int) -> Any:
        return self._keys[index]

    def value_at(self, index: int) -> Any:
        return self._values[index]

    def key_index(self, key: Any) -> int:
        """Index of ``key`` in the page, or the page size if it is absent."""
        index = bisect.bisect_left(self._keys, key)
        if index < len(self._keys) and self._keys[index] == key:
            return index
        return len(self._keys)

    def insert(self, key: Any, value: Any) -> int:
        """Insert in key order, ignoring a duplicate key; return the size afterwards."""
        index = bisect.bisect_left(self._keys, key)
        if index < len(self._keys) and self._keys[index] == key:
            return len(self._keys)
        self._keys.insert(index, key)
        self._values.insert(index, value)
        return len(self._keys)

    def lookup(self, key: Any) -> Any:
        """Return the value stored under ``key``; raise KeyError if absent."""
        index = self.key_index(key)
        if index == len(self._keys):
            raise KeyError(key)
        return self._values[index]

    def remove_and_delete_record(self, key: Any) -> int:
        """Remove ``key`` if present; return the size afterwards."""
        index = self.key_index(key)
        if index < len(self._keys):
            del self._keys[index]
            del self._values[index]
        return len(self._keys)

    def move_half_to(self, recipient: LeafPage) -> None:
        """Move the upper half of the entries into an empty ``recipient`` and link it in."""
        half = len(self._keys) // 2
        recipient._keys = self._keys[half:]
        recipient._values = self._values[half:]
        del self._keys[half:]
        del self._values[half:]
        recipient.next_page_id = self.next_page_id
        self.next_page_id = recipient.page_id

    def move_all_to(self, recipient: LeafPage, middle_key: Any, store: PageStore) -> None:
        """Append every entry to ``recipient`` and delete this page from ``store``."""
        recipient._keys.extend(self._keys)
        recipient._values.extend(self._values)
        recipient.next_page_id = self.next_page_id
        self._keys = []
        self._values = []
        store.unpin(self.page_id)
        store.delete(self.page_id)

    def move_first_to_end_of(self, recipient: LeafPage, middle_key: Any,
                             store: PageStore) -> Any:
        """Take the first entry of ``recipient`` onto this page's end.

        Returns the new separator key: the first key left in ``recipient``.
        """
        self._keys.append(recipient._keys.pop(0))
        self._values.append(recipient._values.pop(0))
        return recipient._keys[0]

    def move_last_to_front_of(self, recipient: LeafPage, middle_key: Any,
                              store: PageStore) -> Any:
        """Take the last entry of ``recipient`` onto this page's front.

        Returns the new separator key: this page's first key.
        """
        self._keys.insert(0, recipient._keys.pop())
        self._values.insert(0, recipient._values.pop())
        return self._keys[0]