"""Directory mapping index ids to the page ids of their B+ tree roots."""

from __future__ import annotations


class IndexRootsPage:
    """Keeps one root page id per index id, in insertion order."""

    def __init__(self) -> None:
        self._roots: dict[int, int] = {}

    def insert(self, index_id: int, root_id: int) -> bool:
        """Record a new index; return False if the index id is already present."""
        if index_id in self._roots:
            return False
        self._roots[index_id] = root_id
        return True

    def delete(self, index_id: int) -> bool:
        """Forget an index; return False if it was not present."""
        if index_id not in self._roots:
            return False
        del self._roots[index_id]
        return True

    def update(self, index_id: int, root_id: int) -> bool:
        """Change the root of an existing index; return False if it is absent."""
        if index_id not in self._roots:
            return False
        self._roots[index_id] = root_id
        return True

    def get_root_id(self, index_id: int) -> int:
        """Return the root page id of an index, raising KeyError if absent."""
        try:
            return self._roots[index_id]
        except KeyError:
            raise KeyError(index_id) from None

    def __len__(self) -> int:
        return len(self._roots)

    def __contains__(self, index_id: object) -> bool:
        return index_id in self._roots