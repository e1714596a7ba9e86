"""Text renderings of a B+ tree: a Graphviz document and an indented dump."""

from __future__ import annotations

from minibtree.b_plus_tree import BPlusTree
from minibtree.table_page import INVALID_PAGE_ID
from minibtree.tree_page import BPlusTreePage, PageStore

_LEAF_PREFIX = "LEAF_"
_INTERNAL_PREFIX = "INT_"
_TABLE_OPEN = 'label=<<TABLE BORDER="0" CELLBORDER="1" CELLSPACING="0" CELLPADDING="4">\n'


def _header_rows(page: BPlusTreePage) -> list[str]:
    size = page.size()
    return [
        f'<TR><TD COLSPAN="{size}">P={page.page_id},Parent={page.parent_page_id}</TD></TR>\n',
        f'<TR><TD COLSPAN="{size}">max_size={page.max_size},'
        f'min_size={page.min_size()},size={size}</TD></TR>\n',
    ]


def _graph_page(page: BPlusTreePage, store: PageStore, out: list[str]) -> None:
    """Append the description of ``page`` and its subtree; releases one pin on it."""
    if page.is_leaf():
        out.append(f"{_LEAF_PREFIX}{page.page_id}")
        out.append("[shape=plain color=green ")
        out.append(_TABLE_OPEN)
        out.extend(_header_rows(page))
        out.append("<TR>")
        out.extend(f"<TD>{page.key_at(i)}</TD>\n" for i in range(page.size()))
        out.append("</TR>")
        out.append("</TABLE>>];\n")
        if page.next_page_id != INVALID_PAGE_ID:
            out.append(f"{_LEAF_PREFIX}{page.page_id} -> {_LEAF_PREFIX}{page.next_page_id};\n")
            out.append(f"{{rank=same {_LEAF_PREFIX}{page.page_id} "
                       f"{_LEAF_PREFIX}{page.next_page_id}}};\n")
        if page.parent_page_id != INVALID_PAGE_ID:
            out.append(f"{_INTERNAL_PREFIX}{page.parent_page_id}:p{page.page_id} -> "
                       f"{_LEAF_PREFIX}{page.page_id};\n")
    else:
        out.append(f"{_INTERNAL_PREFIX}{page.page_id}")
        out.append("[shape=plain color=pink ")
        out.append(_TABLE_OPEN)
        out.extend(_header_rows(page))
        out.append("<TR>")
        children = page.size() + 1
        for i in range(children):
            out.append(f'<TD PORT="p{page.value_at(i)}">')
            if i < page.size():
                out.append(str(page.key_at(i)))
            out.append("</TD>\n")
        out.append("</TR>")
        out.append("</TABLE>>];\n")
        if page.parent_page_id != INVALID_PAGE_ID:
            out.append(f"{_INTERNAL_PREFIX}{page.parent_page_id}:p{page.page_id} -> "
                       f"{_INTERNAL_PREFIX}{page.page_id};\n")
        for i in range(children):
            child = store.fetch(page.value_at(i))
            _graph_page(child, store, out)
            if i > 0:
                sibling = store.fetch(page.value_at(i - 1))
                if not sibling.is_leaf() and not child.is_leaf():
                    out.append(f"{{rank=same {_INTERNAL_PREFIX}{sibling.page_id} "
                               f"{_INTERNAL_PREFIX}{child.page_id}}};\n")
                store.unpin(sibling.page_id)
    store.unpin(page.page_id)


def to_graph(tree: BPlusTree) -> str:
    """Render ``tree`` as a Graphviz ``digraph`` document."""
    out = ["digraph G {\n"]
    if not tree.is_empty():
        _graph_page(tree.store.fetch(tree.root_page_id), tree.store, out)
    out.append("}\n")
    return "".join(out)


def _dump_page(page: BPlusTreePage, store: PageStore, out: list[str]) -> None:
    if page.is_leaf():
        out.append(f"Leaf Page: {page.page_id} parent: {page.parent_page_id} "
                   f"next: {page.next_page_id}\n")
        out.append("".join(f"{page.key_at(i)}," for i in range(page.size())))
        out.append("\n\n")
    else:
        out.append(f"Internal Page: {page.page_id} parent: {page.parent_page_id}\n")
        out.append("".join(f"{page.key_at(i)}: {page.value_at(i)},"
                           for i in range(page.size())))
        out.append("\n\n")
        for i in range(page.size() + 1):
            child = store.fetch(page.value_at(i))
            _dump_page(child, store, out)
    store.unpin(page.page_id)


def tree_to_string(tree: BPlusTree) -> str:
    """Dump every page of ``tree`` in depth-first order; empty string for an empty tree."""
    if tree.is_empty():
        return ""
    out: list[str] = []
    _dump_page(tree.store.fetch(tree.root_page_id), tree.store, out)
    return "".join(out)