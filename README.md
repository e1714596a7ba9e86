# minibtree

Storage pages and a unique-key B+ tree index for a small relational database
engine. Everything lives in memory; pages are ordinary Python objects.

## What is in it

- `minibtree.bitmap.BitmapPage` tracks which pages of an extent are in use.
  `allocate_page()` claims the next free page and returns its offset, raising
  `BitmapFullError` when none is left. `deallocate_page(offset)` frees a page
  and returns `False` if it was already free; `is_page_free(offset)` asks
  about one page and `max_supported_size()` gives the capacity. `to_bytes()`
  and `BitmapPage.from_bytes(data)` convert the page to and from a byte string
  of exactly `page_size` bytes.
- `minibtree.index_roots.IndexRootsPage` maps index ids to the page id of each
  index's root. `insert`, `delete` and `update` return `False` when the id is
  already present (insert) or absent (delete, update); `get_root_id` raises
  `KeyError` for an unknown id. It supports `len()` and `in`.
- `minibtree.table_page.TablePage` is a slotted page holding tuples as
  `bytes`, addressed by `RowId(page_id, slot_num)`. `insert_tuple(data)`
  returns the new `RowId` and raises `PageFullError` when the tuple does not
  fit; emptied slots are reused. It also has `get_tuple`, `update_tuple`
  (returns the old contents), `mark_delete`, `rollback_delete`,
  `apply_delete` (removes the tuple and compacts the page),
  `first_tuple_rid`, `next_tuple_rid` and iteration over the row ids of live
  tuples. Reading or changing a missing or deleted tuple raises
  `TupleNotFoundError`.
- `minibtree.tree_page.PageStore` is the pool tree pages are created in and
  fetched from. It counts pins per page: a new page starts pinned, every
  `fetch` adds a pin, `unpin` drops one, pinned pages cannot be deleted, and
  `all_unpinned()` tells whether every pin has been released.
- `minibtree.tree_page.LeafPage` and `minibtree.internal_page.InternalPage`
  are the two kinds of B+ tree node, both built on
  `minibtree.tree_page.BPlusTreePage`.
- `minibtree.b_plus_tree.BPlusTree` is a unique-key B+ tree whose root is
  recorded in an `IndexRootsPage`. `insert` returns `False` for a duplicate
  key, `get_value` raises `KeyError` for a missing one, and `remove` merges or
  redistributes pages as they underflow. Iterating over the tree (or
  `begin()`) yields `(key, value)` pairs in key order through
  `minibtree.index_iterator.IndexIterator`; `begin_at(key)` starts at a stored
  key. `destroy()` deletes every page, and `check()` reports whether all pins
  were released.
- `minibtree.b_plus_tree_index.BPlusTreeIndex` maps keys to `RowId` values
  on top of a `BPlusTree`. `insert_entry` raises `DuplicateKeyError` when a
  key is inserted a second time; `scan_key` returns the stored `RowId`.
- `minibtree.graph.to_graph(tree)` renders a tree as a Graphviz `digraph`
  document, and `minibtree.graph.tree_to_string(tree)` returns a plain-text
  dump of every page.

## Example

```python
from minibtree.b_plus_tree import BPlusTree
from minibtree.index_roots import IndexRootsPage
from minibtree.tree_page import PageStore

store = PageStore()
roots = IndexRootsPage()
tree = BPlusTree(0, store, roots, 4, 4)

for k in range(1, 51):
    tree.insert(k, k * 100)
for k in range(2, 51, 2):
    tree.remove(k)

print(tree.get_value(7))              # 700
print([k for k, _ in tree][:5])       # [1, 3, 5, 7, 9]
assert tree.check()                   # every page pin was released
```

## What it does not do

- Nothing is written to disk: there is no disk manager, database file or
  buffer pool with eviction. `PageStore` keeps every page in memory until it
  is deleted, and only `BitmapPage` has a byte form.
- Rows are not serialized for you: `TablePage` stores and returns raw
  `bytes`, and there is no schema, field or row type.
- There is no table heap spanning several pages, no catalog, no SQL parser or
  executor, and no command-line program.
- Keys only need to be mutually comparable Python values; there is no
  fixed-width key encoding.

## Running the tests

```
pip install -e ".[test]"
pytest
```