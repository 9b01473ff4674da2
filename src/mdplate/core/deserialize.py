"""Markdown to editor document tree.

A deliberately quick, best-effort walk of the markdown-it syntax tree. It knows
the editor vocabulary but not everything Markdown can say: task checkboxes are
stripped without recording their state, table column alignment is not kept,
reference-style links are dropped, and raw HTML, front matter and link
definitions produce nothing. ``mdplate.core.align`` restores what it can from
the reference AST.
"""

import logging
from typing import Any

from markdown_it.tree import SyntaxTreeNode

from mdplate.core.parse import is_task_checkbox, parse_markdown


logger = logging.getLogger(__name__)

Node = dict[str, Any]

MARKS: dict[str, str] = {
    'strong': 'bold',
    'em':     'italic',
    's':      'strikethrough',
}


def _empty() -> list[Node]:
    return [{"text": ""}]


def _leaf(text: str, marks: dict[str, bool]) -> Node:
    return {"text": text, **marks}


def _inline(nodes: list[SyntaxTreeNode], marks: dict[str, bool] | None = None) -> list[Node]:
    """Flatten nested inline nodes into leaves carrying mark flags."""
    marks = marks or {}
    out: list[Node] = []
    strip_next = False

    for node in nodes:
        if node.type == 'text':
            text = node.content.lstrip() if strip_next else node.content
            if text:
                out.append(_leaf(text, marks))
        elif node.type in ('softbreak', 'hardbreak'):
            out.append(_leaf("\n", marks))
        elif node.type == 'code_inline':
            out.append(_leaf(node.content, {**marks, "code": True}))
        elif node.type in MARKS:
            out.extend(_inline(node.children, {**marks, MARKS[node.type]: True}))
        elif node.type == 'link':
            if node.meta.get("reference"):
                logger.debug("Dropping reference link [%s]", node.meta["reference"]["label"])
            else:
                out.append({
                    "type": "a",
                    "url": node.attrs.get("href", ""),
                    "children": _inline(node.children, marks) or _empty(),
                })
        elif node.type == 'image':
            out.append(_image(node))
        # html_inline (including task checkboxes) is not represented
        strip_next = is_task_checkbox(node)

    return out


def _plain_text(nodes: list[SyntaxTreeNode]) -> str:
    parts = []
    for node in nodes:
        if node.type in ('text', 'code_inline'):
            parts.append(node.content)
        elif node.type in ('softbreak', 'hardbreak'):
            parts.append("\n")
        else:
            parts.append(_plain_text(node.children))
    return "".join(parts)


def _image(node: SyntaxTreeNode) -> Node:
    element: Node = {"type": "img", "url": node.attrs.get("src", ""), "children": _empty()}
    alt = _plain_text(node.children)
    if alt:
        element["caption"] = [{"text": alt}]
    return element


def _inline_of(node: SyntaxTreeNode) -> list[Node]:
    """Leaves of a block whose single child is an inline container (heading, paragraph)."""
    inline = node.children[0] if node.children else None
    if inline is None or inline.type != 'inline':
        return _empty()
    return _inline(inline.children) or _empty()


def _heading(node: SyntaxTreeNode) -> Node:
    return {"type": node.tag, "children": _inline_of(node)}


def _paragraph(node: SyntaxTreeNode) -> Node:
    return {"type": "p", "children": _inline_of(node)}


def _list(node: SyntaxTreeNode) -> Node:
    kind = "ol" if node.type == 'ordered_list' else "ul"
    items = [_list_item(child) for child in node.children if child.type == 'list_item']
    return {"type": kind, "children": items}


def _list_item(node: SyntaxTreeNode) -> Node:
    children = []
    for child in node.children:
        if child.type == 'paragraph':
            children.append({"type": "lic", "children": _inline_of(child)})
        else:
            children.extend(_block(child))
    return {"type": "li", "children": children or [{"type": "lic", "children": _empty()}]}


def _blockquote(node: SyntaxTreeNode) -> Node:
    return {"type": "blockquote", "children": _blocks(node.children) or _empty()}


def _code(node: SyntaxTreeNode) -> Node:
    info = (node.info or "").strip()
    lines = node.content.rstrip("\n").split("\n")
    element: Node = {
        "type": "code_block",
        "children": [{"type": "code_line", "children": [{"text": line}]} for line in lines],
    }
    if info:
        element["lang"] = info.split()[0]
    return element


def _hr(node: SyntaxTreeNode) -> Node:
    return {"type": "hr", "children": _empty()}


def _table(node: SyntaxTreeNode) -> Node:
    rows = []
    for section in node.children:            # thead, tbody
        for row in section.children:
            cells = [
                {"type": cell.type, "children": [{"type": "p", "children": _inline_of(cell)}]}
                for cell in row.children
            ]
            rows.append({"type": "tr", "children": cells or [{"type": "td", "children": _empty()}]})
    return {"type": "table", "children": rows or [{"type": "tr", "children": [{"type": "td", "children": _empty()}]}]}


BLOCK_HANDLERS = {
    'heading':      _heading,
    'paragraph':    _paragraph,
    'bullet_list':  _list,
    'ordered_list': _list,
    'blockquote':   _blockquote,
    'fence':        _code,
    'code_block':   _code,
    'hr':           _hr,
    'table':        _table,
}


def _block(node: SyntaxTreeNode) -> list[Node]:
    handler = BLOCK_HANDLERS.get(node.type)
    if handler is None:
        # html_block, front_matter and anything a plugin adds
        return []
    return [handler(node)]


def _blocks(nodes: list[SyntaxTreeNode]) -> list[Node]:
    return [element for node in nodes for element in _block(node)]


def deserialize(text: str, parser_config: str = 'gfm-like') -> list[Node]:
    """Convert Markdown text into the editor document tree (best-effort)."""
    parsed = parse_markdown(text, parser_config)
    return _blocks(SyntaxTreeNode(parsed.tokens).children)
