import pytest

from minibtree.index_roots import IndexRootsPage


def test_index_roots_page():
    page = IndexRootsPage()
    for i in range(25):
        assert page.delete(i) is False
        assert page.insert(i, i * 100) is True
    for i in range(25):
        assert page.insert(i, 0) is False
        assert page.get_root_id(i) == i * 100
    for i in range(25):
        assert page.update(i, i + 100) is True
        assert page.get_root_id(i) == i + 100

    removed = {0, 4, 5, 13, 12, 7, 22, 24}
    for v in removed:
        assert page.delete(v) is True
    for i in range(25):
        if i in removed:
            with pytest.raises(KeyError):
                page.get_root_id(i)
        else:
            assert page.get_root_id(i) == i + 100
    assert len(page) == 25 - len(removed)


def test_update_missing_returns_false():
    page = IndexRootsPage()
    assert page.update(3, 10) is False
    assert 3 not in page


def test_contains_and_len():
    page = IndexRootsPage()
    page.insert(1, 5)
    page.insert(2, 6)
    assert 1 in page
    assert len(page) == 2
    page.delete(1)
    assert 1 not in page
    assert len(page) == 1