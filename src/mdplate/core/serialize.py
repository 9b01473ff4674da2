"""Editor document tree to Markdown text.

Pure functions over the tree: no state is kept between calls and unknown
element types fall back to rendering their children without a wrapper.
"""

import re
from typing import Any, Callable

Node = dict[str, Any]

HEADING_LEVELS: dict[str, int] = {f"h{n}": n for n in range(1, 7)}
LIST_TYPES = {"ul", "ol"}
LIST_ITEM_BLOCKS = {"code_block", "blockquote"}
BLOCK_TYPES = {
    *HEADING_LEVELS, "p", "blockquote", "ul", "ol", "code_block", "hr", "table",
}

_ESCAPE_RE = re.compile(r'([*_\[\]])')


def _unmarked(leaf: Node) -> bool:
    return not (leaf.get("bold") or leaf.get("italic") or leaf.get("code"))


def _escape(text: str) -> str:
    return _ESCAPE_RE.sub(r'\\\1', text)


# Applied top to bottom; later wrappers enclose earlier ones.
# Underline has no Markdown syntax and is approximated with `_x_`, which reads
# back as italic: a lossy mapping.
TEXT_RULES: tuple[tuple[Callable[[Node], bool], Callable[[str], str]], ...] = (
    (_unmarked,                                   _escape),
    (lambda leaf: bool(leaf.get("code")),          lambda t: f"`{t}`"),
    (lambda leaf: bool(leaf.get("bold")),          lambda t: f"**{t}**"),
    (lambda leaf: bool(leaf.get("italic")),        lambda t: f"*{t}*"),
    (lambda leaf: bool(leaf.get("strikethrough")), lambda t: f"~~{t}~~"),
    (lambda leaf: bool(leaf.get("underline")),     lambda t: f"_{t}_"),
)


def is_leaf(node: Node) -> bool:
    return "text" in node and "type" not in node


def serialize_text(leaf: Node) -> str:
    text = leaf.get("text", "")
    for applies, transform in TEXT_RULES:
        if applies(leaf):
            text = transform(text)
    return text


def serialize_children(children: list[Node]) -> str:
    return "".join(serialize_node(child) for child in children)


def _raw_text(children: list[Node]) -> str:
    """Children of a code line: leaf text verbatim, never escaped or marked."""
    return "".join(
        child.get("text", "") if is_leaf(child) else _raw_text(child.get("children") or [])
        for child in children
    )


def _serialize_content(children: list[Node], list_depth: int = 0) -> str:
    """Blocks are separated by a blank line, inline runs are concatenated."""
    if children and all(child.get("type") in BLOCK_TYPES for child in children):
        return "\n\n".join(serialize_node(child, list_depth) for child in children)
    return serialize_children(children)


def _caption_text(caption: Any) -> str:
    if isinstance(caption, str):
        return caption
    if isinstance(caption, list):
        return "".join(part.get("text", "") for part in caption if isinstance(part, dict))
    return ""


def serialize_list_item(node: Node, ordered: bool, depth: int, index: int | None = None) -> str:
    indent = "  " * depth
    marker = f"{index}." if ordered else "-"

    prefix = ""
    checked = node.get("checked")
    if isinstance(checked, bool):
        prefix = "[x] " if checked else "[ ] "

    content = ""
    nested: list[str] = []
    for child in node.get("children") or []:
        child_type = child.get("type")
        if child_type in LIST_TYPES:
            nested.append(serialize_node(child, depth + 1))
            continue

        rendered = serialize_node(child, depth)
        if child_type in LIST_ITEM_BLOCKS:
            # block content starts on its own line, aligned under the item text
            offset = " " * (len(indent) + len(marker) + 1)
            rendered = "\n" + "\n".join(offset + line for line in rendered.split("\n"))
        content += rendered

    result = f"{indent}{marker} {prefix}{content}"
    if nested:
        result += "\n" + "\n".join(nested)
    return result


def serialize_table(node: Node) -> str:
    rows = node.get("children") or []
    if not rows:
        return ""

    alignments = node.get("align") or []
    lines = []
    for i, row in enumerate(rows):
        cells = row.get("children") or []
        lines.append("| " + " | ".join(serialize_children(cell.get("children") or []) for cell in cells) + " |")

        if i == 0:
            separator = []
            for col in range(len(cells)):
                align = alignments[col] if col < len(alignments) else None
                if align == "center":
                    separator.append(":---:")
                elif align == "right":
                    separator.append("---:")
                else:
                    separator.append("---")
            lines.append("| " + " | ".join(separator) + " |")

    return "\n".join(lines)


def _code_block(node: Node, list_depth: int) -> str:
    lang = node.get("lang") or ""
    code = "\n".join(serialize_node(line) for line in node.get("children") or [])
    return f"```{lang}\n{code}\n```"


def _blockquote(node: Node, list_depth: int) -> str:
    # block children are joined by a blank line, never concatenated
    content = _serialize_content(node.get("children") or [])
    return "\n".join(f"> {line}" for line in content.split("\n"))


def _link(node: Node, list_depth: int) -> str:
    return f"[{serialize_children(node.get('children') or [])}]({node.get('url') or ''})"


def _image(node: Node, list_depth: int) -> str:
    alt = _caption_text(node.get("caption")) or serialize_children(node.get("children") or [])
    return f"![{alt}]({node.get('url') or ''})"


def _list(node: Node, list_depth: int) -> str:
    ordered = node.get("type") == "ol"
    return "\n".join(
        serialize_list_item(child, ordered, list_depth, i + 1 if ordered else None)
        for i, child in enumerate(node.get("children") or [])
    )


RENDERERS: dict[str, Callable[[Node, int], str]] = {
    "p":          lambda node, depth: serialize_children(node.get("children") or []),
    "blockquote": _blockquote,
    "ul":         _list,
    "ol":         _list,
    "code_block": _code_block,
    "code_line":  lambda node, depth: _raw_text(node.get("children") or []),
    "hr":         lambda node, depth: "---",
    "a":          _link,
    "img":        _image,
    "table":      lambda node, depth: serialize_table(node),
}


def serialize_node(node: Node, list_depth: int = 0) -> str:
    if is_leaf(node):
        return serialize_text(node)

    node_type = node.get("type")
    if node_type in HEADING_LEVELS:
        return "#" * HEADING_LEVELS[node_type] + " " + serialize_children(node.get("children") or [])

    renderer = RENDERERS.get(node_type)
    if renderer is None:
        # li, lic and unknown types
        return serialize_children(node.get("children") or [])
    return renderer(node, list_depth)


def serialize(document: list[Node]) -> str:
    """Render top-level blocks as Markdown, separated by blank lines."""
    return "\n\n".join(serialize_node(node) for node in document)
