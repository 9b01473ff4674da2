"""Markdown to reference AST (mdast-shaped) and the definitions scan"""

import math
import re
from typing import Iterator

from markdown_it.tree import SyntaxTreeNode

from mdplate.core.models import MdNode
from mdplate.core.parse import checkbox_state, is_task_checkbox, normalize_identifier, parse_markdown


_ALIGN_RE = re.compile(r'text-align:\s*(left|center|right)')

WRAPPERS = {
    'strong': 'strong',
    'em':     'emphasis',
    's':      'delete',
}


def _text_of(nodes: list[SyntaxTreeNode]) -> str:
    return "".join(
        n.content if n.type in ('text', 'code_inline') else _text_of(n.children)
        for n in nodes
    )


def _link(node: SyntaxTreeNode) -> MdNode:
    children = _inline(node.children)
    ref = node.meta.get("reference")
    if ref:
        return MdNode(type="linkReference", identifier=ref["identifier"], label=ref["label"], children=children)
    return MdNode(type="link", url=node.attrs.get("href", ""), title=node.attrs.get("title"), children=children)


def _image(node: SyntaxTreeNode) -> MdNode:
    alt = _text_of(node.children)
    ref = node.meta.get("reference")
    if ref:
        return MdNode(type="imageReference", identifier=ref["identifier"], label=ref["label"], alt=alt)
    return MdNode(type="image", url=node.attrs.get("src", ""), title=node.attrs.get("title"), alt=alt)


def _inline_node(node: SyntaxTreeNode) -> MdNode | None:
    if node.type == 'text':
        # empty runs left behind by delimiter processing have no leaf in the editor tree
        return MdNode(type="text", value=node.content) if node.content else None
    if node.type == 'softbreak':
        return MdNode(type="text", value="\n")
    if node.type == 'hardbreak':
        return MdNode(type="break")
    if node.type == 'code_inline':
        return MdNode(type="inlineCode", value=node.content)
    if node.type in WRAPPERS:
        return MdNode(type=WRAPPERS[node.type], children=_inline(node.children))
    if node.type == 'link':
        return _link(node)
    if node.type == 'image':
        return _image(node)
    if node.type == 'html_inline':
        return MdNode(type="html", value=node.content)
    return None


def _inline(nodes: list[SyntaxTreeNode]) -> list[MdNode]:
    return [n for n in (_inline_node(node) for node in nodes) if n is not None]


def _inline_of(node: SyntaxTreeNode) -> list[MdNode]:
    inline = node.children[0] if node.children else None
    if inline is None or inline.type != 'inline':
        return []
    return _inline(inline.children)


def _pop_checkbox(item: MdNode, source: SyntaxTreeNode) -> None:
    """Move a leading task checkbox from the item's first paragraph onto item.checked."""
    first = source.children[0] if source.children else None
    if first is None or first.type != 'paragraph' or not first.children:
        return
    inline = first.children[0].children
    if not inline or not is_task_checkbox(inline[0]):
        return

    item.checked = checkbox_state(inline[0])
    paragraph = item.children[0]
    paragraph.children = paragraph.children[1:]
    if paragraph.children and paragraph.children[0].type == "text":
        value = paragraph.children[0].value.lstrip()
        if value:
            paragraph.children[0].value = value
        else:
            paragraph.children = paragraph.children[1:]


def _table(node: SyntaxTreeNode) -> MdNode:
    rows = [row for section in node.children for row in section.children]
    align = []
    if rows:
        for cell in rows[0].children:
            match = _ALIGN_RE.search(cell.attrs.get("style", "") or "")
            align.append(match.group(1) if match else None)
    return MdNode(
        type="table",
        align=align,
        children=[
            MdNode(type="tableRow", children=[MdNode(type="tableCell", children=_inline_of(c)) for c in row.children])
            for row in rows
        ],
    )


def _block(node: SyntaxTreeNode) -> MdNode | None:
    kind = node.type
    if kind == 'heading':
        return MdNode(type="heading", depth=int(node.tag[1:]), children=_inline_of(node))
    if kind == 'paragraph':
        return MdNode(type="paragraph", children=_inline_of(node))
    if kind in ('bullet_list', 'ordered_list'):
        ordered = kind == 'ordered_list'
        start = node.attrs.get("start", 1) if ordered else None
        items = []
        for child in node.children:
            item = MdNode(type="listItem", children=_blocks(child.children))
            _pop_checkbox(item, child)
            items.append(item)
        return MdNode(type="list", ordered=ordered, start=start, children=items)
    if kind == 'blockquote':
        return MdNode(type="blockquote", children=_blocks(node.children))
    if kind in ('fence', 'code_block'):
        info = (node.info or "").strip()
        return MdNode(type="code", lang=info.split()[0] if info else None, value=node.content.rstrip("\n"))
    if kind == 'hr':
        return MdNode(type="thematicBreak")
    if kind == 'table':
        return _table(node)
    if kind == 'html_block':
        return MdNode(type="html", value=node.content.rstrip("\n"))
    if kind == 'front_matter':
        return MdNode(type="yaml", value=node.content)
    return None


def _blocks(nodes: list[SyntaxTreeNode]) -> list[MdNode]:
    return [n for n in (_block(node) for node in nodes) if n is not None]


def _definitions(references: dict) -> list[tuple[float, MdNode]]:
    """Definition nodes keyed by their source line; markdown-it keeps them out of the token stream."""
    out = []
    for key, ref in references.items():
        line = ref["map"][0] if ref.get("map") else math.inf
        out.append((line, MdNode(
            type="definition",
            identifier=normalize_identifier(key),
            label=key,
            url=ref.get("href", ""),
            title=ref.get("title") or None,
        )))
    return out


def build_reference_ast(text: str, parser_config: str = 'gfm-like') -> list[MdNode]:
    """Parse text into top-level reference AST nodes, definitions placed by source position."""
    parsed = parse_markdown(text, parser_config)
    entries: list[tuple[float, MdNode]] = []
    for node in SyntaxTreeNode(parsed.tokens).children:
        block = _block(node)
        if block is not None:
            entries.append((node.map[0] if node.map else 0, block))
    entries.extend(_definitions(parsed.references))
    entries.sort(key=lambda entry: entry[0])
    return [node for _, node in entries]


def walk(nodes: list[MdNode]) -> Iterator[MdNode]:
    """Pre-order traversal."""
    for node in nodes:
        yield node
        yield from walk(node.children)


def collect_definitions(ast: list[MdNode]) -> dict[str, str]:
    """Map definition identifier -> url over the whole AST; the first definition wins."""
    definitions: dict[str, str] = {}
    for node in walk(ast):
        if node.type == "definition" and node.identifier is not None:
            definitions.setdefault(node.identifier, node.url or "")
    return definitions
