"""Enrich an editor tree with metadata from the reference AST of the same document.

Both sequences describe the same document in the same order, so the walk is a
two-pointer alignment rather than a diff. The editor tree may be missing nodes
(reference-style links the deserializer dropped) and metadata (task checkbox
state, table alignment) that the reference AST carries explicitly.

Recovery is best-effort: an AST node that matches nothing is skipped, so a
drifting pair of sequences leaves the tree under-enriched but never loses or
reorders its existing nodes.
"""

import logging
from typing import Any, Callable, Optional

from mdplate.core.models import MdNode
from mdplate.core.reference import collect_definitions
from mdplate.core.serialize import HEADING_LEVELS, is_leaf


logger = logging.getLogger(__name__)

Node = dict[str, Any]

# Nested inline styles in the AST; the tree flattens them into leaf mark flags.
INLINE_WRAPPERS = {"strong", "emphasis", "delete"}
# AST nodes with no tree counterpart.
METADATA_TYPES = {"definition", "html", "yaml", "toml"}
LEAF_TYPES = {"text", "inlineCode", "break"}

CORRESPONDENCE: dict[str, set[str]] = {
    "li":         {"listItem"},
    "ul":         {"list"},
    "ol":         {"list"},
    "table":      {"table"},
    "lic":        {"paragraph"},
    "p":          {"paragraph"},
    "blockquote": {"blockquote"},
    "code_block": {"code"},
    "hr":         {"thematicBreak"},
    "img":        {"image", "imageReference"},
    "a":          {"link", "linkReference"},
    **{heading: {"heading"} for heading in HEADING_LEVELS},
}


def resolve_url(ref: MdNode, definitions: dict[str, str]) -> Optional[str]:
    if ref.type in ("linkReference", "imageReference"):
        return definitions.get(ref.identifier or "")
    return ref.url


def matches(node: Node, ref: MdNode, definitions: dict[str, str]) -> bool:
    """Type-compatibility between a tree node and an AST node (plus URL equality for links)."""
    if is_leaf(node):
        return ref.type in LEAF_TYPES

    node_type = node.get("type")
    if ref.type not in CORRESPONDENCE.get(node_type, ()):
        return False
    if node_type in HEADING_LEVELS:
        return ref.depth == HEADING_LEVELS[node_type]
    if node_type == "ul":
        return not ref.ordered
    if node_type == "ol":
        return bool(ref.ordered)
    if node_type == "a":
        return (node.get("url") or "") == (resolve_url(ref, definitions) or "")
    return True


def reconstruct_link(ref: MdNode, definitions: dict[str, str]) -> Node:
    """Rebuild a dropped linkReference as an `a` element; non-text children become empty leaves."""
    children = [{"text": child.value or ""} if child.type == "text" else {"text": ""} for child in ref.children]
    return {
        "type": "a",
        "url": definitions.get(ref.identifier or "", ""),
        "children": children or [{"text": ""}],
    }


def _copy_checked(node: Node, ref: MdNode) -> None:
    if ref.checked is not None:
        node["checked"] = ref.checked


def _copy_align(node: Node, ref: MdNode) -> None:
    if ref.align is not None:
        node["align"] = list(ref.align)


METADATA: dict[str, Callable[[Node, MdNode], None]] = {
    "listItem": _copy_checked,
    "table":    _copy_align,
}


def _recoverable(ref: MdNode) -> bool:
    return ref.type == "linkReference"


def _merge(node: Node, ref: MdNode, definitions: dict[str, str]) -> Node:
    merged = dict(node)
    copy = METADATA.get(ref.type)
    if copy is not None:
        copy(merged, ref)
    if merged.get("children") and ref.children:
        merged["children"] = align(merged["children"], ref.children, definitions)
    return merged


def align(tree_seq: list[Node], ast_seq: list[MdNode], definitions: dict[str, str]) -> list[Node]:
    """Align one sibling level of the tree against the AST and return the enriched sequence.

    Inputs are left untouched: matched nodes come back as shallow copies, and
    reconstructed links are new nodes.
    """
    tree = list(tree_seq)
    ast = list(ast_seq)
    p = m = 0

    while m < len(ast):
        ref = ast[m]

        if p >= len(tree):
            if _recoverable(ref):
                tree.append(reconstruct_link(ref, definitions))
                p += 1
            m += 1
            continue

        if ref.type in INLINE_WRAPPERS:
            ast[m:m + 1] = ref.children
            continue

        if ref.type in METADATA_TYPES:
            m += 1
            continue

        node = tree[p]
        if matches(node, ref, definitions):
            tree[p] = _merge(node, ref, definitions)
            p += 1
        elif _recoverable(ref):
            logger.debug("Reinserting reference link [%s]", ref.label or ref.identifier)
            tree.insert(p, reconstruct_link(ref, definitions))
            p += 1
        m += 1

    return tree


def enrich(tree: list[Node], ast: list[MdNode], definitions: dict[str, str] | None = None) -> None:
    """Enrich tree in place from ast; definitions are collected from ast when not given."""
    if definitions is None:
        definitions = collect_definitions(ast)
    tree[:] = align(tree, ast, definitions)
