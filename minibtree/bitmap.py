"""Bitmap page that tracks which pages of an extent are allocated."""

from __future__ import annotations

import struct

_HEADER = struct.Struct("<II")


class BitmapFullError(Exception):
    """Raised when every page tracked by a bitmap is already allocated."""


class BitmapPage:
    """A fixed-size page holding an allocation counter, a next-free hint and a bitmap.

    Bit ``n`` of the bitmap (most significant bit first within each byte) is set
    when page ``n`` is allocated.
    """

    def __init__(self, page_size: int = 4096) -> None:
        if page_size <= _HEADER.size:
            raise ValueError(f"page size must exceed {_HEADER.size} bytes, got {page_size}")
        self.page_size = page_size
        self.allocated = 0
        self._next_free = 0
        self._bits = bytearray(page_size - _HEADER.size)

    def max_supported_size(self) -> int:
        """Number of pages this bitmap can track."""
        return len(self._bits) * 8

    def _check_offset(self, page_offset: int) -> None:
        if not 0 <= page_offset < self.max_supported_size():
            raise IndexError(f"page offset {page_offset} out of range")

    def is_page_free(self, page_offset: int) -> bool:
        """Return True if the page at ``page_offset`` is not allocated."""
        self._check_offset(page_offset)
        return not self._bits[page_offset >> 3] & (0x80 >> (page_offset & 0x7))

    def allocate_page(self) -> int:
        """Allocate a free page and return its offset."""
        capacity = self.max_supported_size()
        if self.allocated == capacity:
            raise BitmapFullError("no free page left in bitmap")
        self.allocated += 1
        page_offset = self._next_free
        self._bits[page_offset >> 3] |= 0x80 >> (page_offset & 0x7)
        if self.allocated < capacity:
            while True:
                self._next_free = (self._next_free + 1) % capacity
                if self.is_page_free(self._next_free):
                    break
        return page_offset

    def deallocate_page(self, page_offset: int) -> bool:
        """Free the page at ``page_offset``; return False if it was already free."""
        if self.is_page_free(page_offset):
            return False
        self._next_free = page_offset
        self.allocated -= 1
        self._bits[page_offset >> 3] &= ~(0x80 >> (page_offset & 0x7)) & 0xFF
        return True

    def to_bytes(self) -> bytes:
        """Serialize the page to exactly ``page_size`` bytes."""
        return _HEADER.pack(self.allocated, self._next_free) + bytes(self._bits)

    @classmethod
    def from_bytes(cls, data: bytes) -> BitmapPage:
        """Rebuild a page from the bytes produced by :meth:`to_bytes`."""
        page = cls(len(data))
        allocated, next_free = _HEADER.unpack_from(data)
        capacity = page.max_supported_size()
        if allocated > capacity or next_free >= capacity:
            raise ValueError("corrupt bitmap page header")
        page.allocated = allocated
        page._next_free = next_free
        page._bits[:] = data[_HEADER.size:]
        return page