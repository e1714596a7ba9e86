import random

import pytest

from minibtree.table_page import (
    HEADER_SIZE,
    INVALID_PAGE_ID,
    SLOT_SIZE,
    PageFullError,
    RowId,
    TablePage,
    TupleNotFoundError,
)


def test_row_insert_get_delete():
    page = TablePage(0, INVALID_PAGE_ID)
    data = b"\xbc\x00\x00\x00minisql\x3d\x0a\xa0\x41"
    rid = page.insert_tuple(data)
    assert page.first_tuple_rid() == rid
    assert rid == RowId(0, 0)
    assert page.get_tuple(rid) == data
    page.mark_delete(rid)
    with pytest.raises(TupleNotFoundError):
        page.get_tuple(rid)
    page.apply_delete(rid)
    assert page.first_tuple_rid() is None
    assert page.free_space_remaining() == page.page_size - HEADER_SIZE - SLOT_SIZE


def test_free_space_accounting():
    page = TablePage(3)
    before = page.free_space_remaining()
    assert before == 4096 - HEADER_SIZE
    page.insert_tuple(b"x" * 10)
    assert page.free_space_remaining() == before - 10 - SLOT_SIZE


def test_empty_tuple_rejected():
    with pytest.raises(ValueError):
        TablePage(0).insert_tuple(b"")


def test_page_full():
    page = TablePage(0, page_size=64)
    page.insert_tuple(b"a" * 32)
    assert page.free_space_remaining() == 0
    with pytest.raises(PageFullError):
        page.insert_tuple(b"b")


def test_slot_reused_after_apply_delete():
    page = TablePage(1)
    a = page.insert_tuple(b"aaaa")
    b = page.insert_tuple(b"bbbbbb")
    page.apply_delete(a)
    c = page.insert_tuple(b"cc")
    assert c == RowId(1, 0)
    assert page.tuple_count() == 2
    assert page.get_tuple(b) == b"bbbbbb"
    assert page.get_tuple(c) == b"cc"


def test_marked_slot_not_reused():
    page = TablePage(1)
    a = page.insert_tuple(b"aaaa")
    page.insert_tuple(b"bbbb")
    page.mark_delete(a)
    c = page.insert_tuple(b"cccc")
    assert c.slot_num == 2


def test_mark_delete_errors():
    page = TablePage(0)
    rid = page.insert_tuple(b"abc")
    page.mark_delete(rid)
    with pytest.raises(TupleNotFoundError):
        page.mark_delete(rid)
    with pytest.raises(TupleNotFoundError):
        page.mark_delete(RowId(0, 5))


def test_rollback_delete():
    page = TablePage(0)
    rid = page.insert_tuple(b"abc")
    page.mark_delete(rid)
    page.rollback_delete(rid)
    assert page.get_tuple(rid) == b"abc"


def test_update_shrink_and_grow_keeps_neighbours():
    page = TablePage(2)
    a = page.insert_tuple(b"first")
    b = page.insert_tuple(b"second-tuple")
    c = page.insert_tuple(b"third")
    space = page.free_space_remaining()
    assert page.update_tuple(b, b"2") == b"second-tuple"
    assert page.free_space_remaining() == space + len(b"second-tuple") - 1
    assert [page.get_tuple(r) for r in (a, b, c)] == [b"first", b"2", b"third"]
    assert page.update_tuple(a, b"a much longer first tuple") == b"first"
    assert [page.get_tuple(r) for r in (a, b, c)] == [b"a much longer first tuple", b"2", b"third"]


def test_update_too_large():
    page = TablePage(0, page_size=64)
    rid = page.insert_tuple(b"x" * 10)
    with pytest.raises(PageFullError):
        page.update_tuple(rid, b"y" * 33)
    page.update_tuple(rid, b"y" * 32)
    assert page.get_tuple(rid) == b"y" * 32
    assert page.free_space_remaining() == 0


def test_update_deleted_tuple():
    page = TablePage(0)
    rid = page.insert_tuple(b"abc")
    page.mark_delete(rid)
    with pytest.raises(TupleNotFoundError):
        page.update_tuple(rid, b"def")


def test_apply_delete_empty_slot():
    page = TablePage(0)
    rid = page.insert_tuple(b"abc")
    page.apply_delete(rid)
    with pytest.raises(TupleNotFoundError):
        page.apply_delete(rid)


def test_iteration_and_next_rid():
    page = TablePage(7)
    rids = [page.insert_tuple(bytes([i + 1]) * 3) for i in range(5)]
    page.mark_delete(rids[1])
    page.apply_delete(rids[3])
    assert list(page) == [rids[0], rids[2], rids[4]]
    assert page.next_tuple_rid(rids[0]) == rids[2]
    assert page.next_tuple_rid(rids[4]) is None
    with pytest.raises(ValueError):
        page.next_tuple_rid(RowId(8, 0))


def test_random_deletes_preserve_survivors():
    rng = random.Random(1)
    page = TablePage(0)
    stored = {}
    for i in range(60):
        data = bytes(rng.randrange(256) for _ in range(rng.randint(1, 40)))
        stored[page.insert_tuple(data)] = data
    victims = rng.sample(sorted(stored), 30)
    for rid in victims:
        page.mark_delete(rid)
        page.apply_delete(rid)
        del stored[rid]
    assert set(page) == set(stored)
    for rid, data in stored.items():
        assert page.get_tuple(rid) == data
    used = sum(len(d) for d in stored.values())
    assert page.free_space_remaining() == 4096 - HEADER_SIZE - 60 * SLOT_SIZE - used