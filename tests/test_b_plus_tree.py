import random

import pytest

from minibtree.b_plus_tree import BPlusTree
from minibtree.index_roots import IndexRootsPage
from minibtree.table_page import INVALID_PAGE_ID
from minibtree.tree_page import PageStore


def make_tree(leaf_max=4, internal_max=4, index_id=0):
    store = PageStore()
    roots = IndexRootsPage()
    return BPlusTree(index_id, store, roots, leaf_max, internal_max), store, roots


def test_sample_insert_search_remove():
    tree, _, _ = make_tree()
    rng = random.Random(1234)
    n = 30
    keys = list(range(n))
    values = list(range(n))
    delete_seq = list(range(n))
    rng.shuffle(keys)
    rng.shuffle(values)
    rng.shuffle(delete_seq)
    kv_map = dict(zip(keys, values))
    for k, v in zip(keys, values):
        assert tree.insert(k, v) is True
    assert tree.check()
    for i in range(n):
        assert tree.get_value(i) == kv_map[i]
    assert tree.check()
    for k in delete_seq[: n // 2]:
        tree.remove(k)
    for k in delete_seq[: n // 2]:
        with pytest.raises(KeyError):
            tree.get_value(k)
    for k in delete_seq[n // 2:]:
        assert tree.get_value(k) == kv_map[k]
    assert tree.check()


def test_index_iterator_after_removing_evens():
    tree, _, _ = make_tree()
    for i in range(1, 51):
        tree.insert(i, i * 100)
    for i in range(2, 51, 2):
        tree.remove(i)
    for i in range(2, 51, 2):
        with pytest.raises(KeyError):
            tree.get_value(i)
    for i in range(1, 50, 2):
        assert tree.get_value(i) == i * 100
    pairs = list(tree.begin())
    assert pairs == [(i, i * 100) for i in range(1, 50, 2)]
    assert tree.check()


def test_duplicate_insert_rejected():
    tree, _, _ = make_tree()
    for i in range(10):
        assert tree.insert(i, i)
    assert tree.insert(5, 999) is False
    assert tree.insert(0, 999) is False
    assert tree.get_value(5) == 5
    assert tree.check()


def test_empty_tree():
    tree, _, _ = make_tree()
    assert tree.is_empty()
    with pytest.raises(KeyError):
        tree.get_value(1)
    assert list(tree) == []
    tree.remove(1)
    assert tree.is_empty()


def test_remove_everything_empties_store():
    tree, store, roots = make_tree()
    for i in range(40):
        tree.insert(i, -i)
    for i in range(40):
        tree.remove(i)
    assert tree.is_empty()
    assert len(store) == 0
    assert roots.get_root_id(0) == INVALID_PAGE_ID
    assert tree.check()


def test_root_becomes_internal_after_split():
    tree, store, _ = make_tree()
    for i in range(4):
        tree.insert(i, i)
    root = store.fetch(tree.root_page_id)
    store.unpin(tree.root_page_id)
    assert root.is_leaf() is False
    assert root.size() == 1
    assert root.key_at(0) == 2


def test_root_recorded_in_roots_page_and_reloaded():
    tree, store, roots = make_tree(index_id=7)
    for i in range(20):
        tree.insert(i, str(i))
    assert roots.get_root_id(7) == tree.root_page_id
    reopened = BPlusTree(7, store, roots, 4, 4)
    assert reopened.get_value(13) == "13"
    assert [k for k, _ in reopened] == list(range(20))


def test_destroy_removes_all_pages():
    tree, store, roots = make_tree(index_id=3)
    for i in range(25):
        tree.insert(i, i)
    tree.destroy()
    assert len(store) == 0
    assert 3 not in roots
    assert tree.is_empty()


def test_begin_at_existing_and_missing_key():
    tree, _, _ = make_tree()
    for i in range(0, 40, 2):
        tree.insert(i, i)
    assert [k for k, _ in tree.begin_at(30)] == [30, 32, 34, 36, 38]
    assert list(tree.begin_at(31)) == []
    assert tree.check()


def test_invalid_sizes_rejected():
    store = PageStore()
    roots = IndexRootsPage()
    with pytest.raises(ValueError):
        BPlusTree(0, store, roots, 1, 4)
    with pytest.raises(ValueError):
        BPlusTree(0, store, roots, 4, 2)