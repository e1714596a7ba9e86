"""Slotted page storing variable-length tuples of a table heap."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

PAGE_SIZE = 4096
INVALID_PAGE_ID = -1
HEADER_SIZE = 24
SLOT_SIZE = 8


class TupleNotFoundError(LookupError):
    """Raised when a row id names no live tuple on the page."""


class PageFullError(Exception):
    """Raised when a tuple does not fit in the page's free space."""


@dataclass(frozen=True, order=True)
class RowId:
    """Location of a tuple: page id and slot number."""

    page_id: int = INVALID_PAGE_ID
    slot_num: int = 0


@dataclass
class _Slot:
    offset: int
    size: int
    deleted: bool = False

    @property
    def live(self) -> bool:
        return self.size > 0 and not self.deleted


class TablePage:
    """A page whose tuples grow down from the end while slots grow up from the header.

    Every slot costs ``SLOT_SIZE`` bytes and the header ``HEADER_SIZE`` bytes of
    the page's capacity.
    """

    def __init__(self, page_id: int, prev_page_id: int = INVALID_PAGE_ID,
                 page_size: int = PAGE_SIZE) -> None:
        if page_size <= HEADER_SIZE:
            raise ValueError(f"page size must exceed {HEADER_SIZE} bytes, got {page_size}")
        self.page_id = page_id
        self.prev_page_id = prev_page_id
        self.next_page_id = INVALID_PAGE_ID
        self.page_size = page_size
        self._data = bytearray(page_size)
        self._free_pointer = page_size
        self._slots: list[_Slot] = []

    def free_space_remaining(self) -> int:
        """Bytes still available for tuple data and new slots."""
        return self._free_pointer - HEADER_SIZE - SLOT_SIZE * len(self._slots)

    def tuple_count(self) -> int:
        """Number of slots ever handed out, including empty and deleted ones."""
        return len(self._slots)

    def _slot(self, rid: RowId) -> _Slot:
        if not 0 <= rid.slot_num < len(self._slots):
            raise TupleNotFoundError(f"no slot {rid.slot_num} on page {self.page_id}")
        return self._slots[rid.slot_num]

    def _live_slot(self, rid: RowId) -> _Slot:
        slot = self._slot(rid)
        if not slot.live:
            raise TupleNotFoundError(f"tuple {rid} is deleted")
        return slot

    def insert_tuple(self, data: bytes) -> RowId:
        """Store ``data`` and return the row id it was given."""
        size = len(data)
        if size == 0:
            raise ValueError("cannot store an empty tuple")
        if self.free_space_remaining() < size + SLOT_SIZE:
            raise PageFullError(f"{size} bytes do not fit on page {self.page_id}")
        slot_num = next((i for i, s in enumerate(self._slots) if s.size == 0), len(self._slots))
        self._free_pointer -= size
        self._data[self._free_pointer:self._free_pointer + size] = data
        slot = _Slot(self._free_pointer, size)
        if slot_num == len(self._slots):
            self._slots.append(slot)
        else:
            self._slots[slot_num] = slot
        return RowId(self.page_id, slot_num)

    def mark_delete(self, rid: RowId) -> None:
        """Flag a tuple as deleted without reclaiming its space."""
        self._live_slot(rid).deleted = True

    def update_tuple(self, rid: RowId, data: bytes) -> bytes:
        """Replace a tuple in place and return its previous contents."""
        slot = self._live_slot(rid)
        new_size = len(data)
        if new_size == 0:
            raise ValueError("cannot store an empty tuple")
        if self.free_space_remaining() + slot.size < new_size:
            raise PageFullError(f"{new_size} bytes do not fit on page {self.page_id}")
        tuple_offset = slot.offset
        tuple_end = tuple_offset + slot.size
        old = bytes(self._data[tuple_offset:tuple_end])
        shift = slot.size - new_size
        free_pointer = self._free_pointer
        self._data[free_pointer + shift:tuple_offset + shift] = self._data[free_pointer:tuple_offset]
        self._free_pointer = free_pointer + shift
        self._data[tuple_offset + shift:tuple_end] = data
        slot.size = new_size
        for other in self._slots:
            if other.size > 0 and other.offset < tuple_end:
                other.offset += shift
        return old

    def apply_delete(self, rid: RowId) -> None:
        """Remove a tuple for good and compact the page."""
        slot = self._slot(rid)
        if slot.size == 0:
            raise TupleNotFoundError(f"slot {rid.slot_num} is already empty")
        size, offset = slot.size, slot.offset
        free_pointer = self._free_pointer
        self._data[free_pointer + size:offset + size] = self._data[free_pointer:offset]
        self._data[free_pointer:free_pointer + size] = bytes(size)
        self._free_pointer = free_pointer + size
        self._slots[rid.slot_num] = _Slot(0, 0)
        for other in self._slots:
            if other.size > 0 and other.offset < offset:
                other.offset += size

    def rollback_delete(self, rid: RowId) -> None:
        """Clear the deleted flag set by :meth:`mark_delete`."""
        self._slot(rid).deleted = False

    def get_tuple(self, rid: RowId) -> bytes:
        """Return the contents of a live tuple."""
        slot = self._live_slot(rid)
        return bytes(self._data[slot.offset:slot.offset + slot.size])

    def first_tuple_rid(self) -> RowId | None:
        """Row id of the first live tuple, or None if there is none."""
        return next(iter(self), None)

    def next_tuple_rid(self, rid: RowId) -> RowId | None:
        """Row id of the first live tuple after ``rid``, or None."""
        if rid.page_id != self.page_id:
            raise ValueError(f"row id {rid} does not belong to page {self.page_id}")
        for slot_num in range(rid.slot_num + 1, len(self._slots)):
            if self._slots[slot_num].live:
                return RowId(self.page_id, slot_num)
        return None

    def __iter__(self) -> Iterator[RowId]:
        for slot_num, slot in enumerate(self._slots):
            if slot.live:
                yield RowId(self.page_id, slot_num)