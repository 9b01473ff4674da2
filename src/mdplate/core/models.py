"""Data models for the editor document tree and the reference Markdown AST"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class TextLeaf(BaseModel):
    """A run of text; marks are independent flags, any combination is legal."""
    model_config = ConfigDict(extra="allow")

    text: str
    bold:          Optional[bool] = None
    italic:        Optional[bool] = None
    code:          Optional[bool] = None
    strikethrough: Optional[bool] = None
    underline:     Optional[bool] = None


class ElementNode(BaseModel):
    """A typed element; type-specific fields (url, lang, align, checked, ...) ride along as extras."""
    model_config = ConfigDict(extra="allow")

    type: str
    children: list[Union[ElementNode, TextLeaf]] = Field(..., min_length=1)


class MdNode(BaseModel):
    """Reference AST node, mdast-shaped. Read-only input to enrichment."""
    type: str
    children: list[MdNode] = Field(default_factory=list)
    value:      Optional[str] = None
    depth:      Optional[int] = None        # heading level
    ordered:    Optional[bool] = None       # list
    start:      Optional[int] = None        # ordered list start number
    checked:    Optional[bool] = None       # listItem; None when not a task item
    align:      Optional[list[Optional[str]]] = None   # table
    lang:       Optional[str] = None        # code
    url:        Optional[str] = None
    title:      Optional[str] = None
    alt:        Optional[str] = None
    identifier: Optional[str] = None        # linkReference, imageReference, definition
    label:      Optional[str] = None


DocumentAdapter = TypeAdapter(list[ElementNode])


@dataclass
class ParsedMarkdown:
    """Internal parse result carrying markdown-it tokens; not persisted."""
    markdown:   str
    tokens:     list                  # markdown-it Token objects
    references: dict[str, Any]        # markdown-it env["references"], keyed by normalized label
