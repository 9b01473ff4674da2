"""Unit tests for core/serialize.py"""

import copy

import pytest

from mdplate.core.serialize import serialize, serialize_node, serialize_text


def _p(*children):
    return {"type": "p", "children": list(children)}


def _li(*children, **fields):
    return {"type": "li", **fields, "children": list(children)}


def _lic(value: str):
    return {"type": "lic", "children": [{"text": value}]}


@pytest.mark.parametrize("level", range(1, 7))
def test_heading_levels(level):
    """hN renders as N hashes, a space, then the inline content."""
    node = {"type": f"h{level}", "children": [{"text": "X"}]}
    assert serialize([node]) == "#" * level + " X"


def test_plain_text_is_escaped():
    """Unmarked leaves escape *, _, [ and ]."""
    assert serialize_text({"text": "a*b_c[d]e"}) == r"a\*b\_c\[d\]e"


def test_bold_text_is_not_escaped():
    """Marked leaves are wrapped without escaping their content."""
    assert serialize_text({"text": "a*b_c[d]e", "bold": True}) == "**a*b_c[d]e**"


@pytest.mark.parametrize("leaf,expected", [
    ({"text": "x", "code": True},          "`x`"),
    ({"text": "x", "italic": True},        "*x*"),
    ({"text": "x", "strikethrough": True}, "~~x~~"),
    ({"text": "x", "underline": True},     "_x_"),
])
def test_single_marks(leaf, expected):
    """Each mark has its own delimiter; underline is approximated with underscores."""
    assert serialize_text(leaf) == expected


def test_strikethrough_alone_still_escapes():
    """Only bold, italic and code exempt a leaf from escaping."""
    assert serialize_text({"text": "a_b", "strikethrough": True}) == r"~~a\_b~~"


def test_marks_nest_in_fixed_order():
    """code is innermost, then bold, italic, strikethrough, underline."""
    leaf = {"text": "x", "code": True, "bold": True, "italic": True, "strikethrough": True, "underline": True}
    assert serialize_text(leaf) == "_~~***`x`***~~_"


def test_paragraph_concatenates_leaves():
    """Inline children are joined with no separator."""
    node = _p({"text": "Hello "}, {"text": "world", "bold": True}, {"text": "!"})
    assert serialize([node]) == "Hello **world**!"


def test_top_level_blocks_joined_by_blank_line():
    """Sibling top-level blocks are separated by a blank line."""
    doc = [{"type": "h1", "children": [{"text": "T"}]}, _p({"text": "body"})]
    assert serialize(doc) == "# T\n\nbody"


def test_hr():
    assert serialize([{"type": "hr", "children": [{"text": ""}]}]) == "---"


def test_link():
    """Links render as [text](url)."""
    node = {"type": "a", "url": "https://x", "children": [{"text": "go"}]}
    assert serialize_node(node) == "[go](https://x)"


def test_link_without_url():
    """A missing url renders as empty parentheses."""
    assert serialize_node({"type": "a", "children": [{"text": "go"}]}) == "[go]()"


def test_image_prefers_caption():
    """img alt text comes from caption before children."""
    node = {"type": "img", "url": "a.png", "caption": [{"text": "Cap"}], "children": [{"text": "kids"}]}
    assert serialize_node(node) == "![Cap](a.png)"


def test_image_falls_back_to_children():
    """Without a caption the inline children become the alt text."""
    node = {"type": "img", "url": "a.png", "children": [{"text": "kids"}]}
    assert serialize_node(node) == "![kids](a.png)"


def test_image_empty_alt():
    node = {"type": "img", "url": "a.png", "children": [{"text": ""}]}
    assert serialize_node(node) == "![](a.png)"


def test_code_block_with_lang():
    """Fenced code keeps lines verbatim, including characters that are escaped elsewhere."""
    node = {
        "type": "code_block",
        "lang": "python",
        "children": [
            {"type": "code_line", "children": [{"text": "x = a*b"}]},
            {"type": "code_line", "children": [{"text": "y = [1]"}]},
        ],
    }
    assert serialize([node]) == "```python\nx = a*b\ny = [1]\n```"


def test_code_block_without_lang():
    node = {"type": "code_block", "children": [{"type": "code_line", "children": [{"text": "plain"}]}]}
    assert serialize([node]) == "```\nplain\n```"


def test_blockquote_prefixes_every_line():
    """Every line of the quoted content, blank lines included, gets the '> ' prefix."""
    node = {"type": "blockquote", "children": [_p({"text": "one"}), _p({"text": "two"})]}
    assert serialize([node]) == "> one\n> \n> two"


def test_blockquote_with_inline_children():
    node = {"type": "blockquote", "children": [{"text": "line1\nline2"}]}
    assert serialize([node]) == "> line1\n> line2"


def test_nested_blockquote():
    """Quoting composes with nested quotes."""
    inner = {"type": "blockquote", "children": [_p({"text": "deep"})]}
    outer = {"type": "blockquote", "children": [inner]}
    assert serialize([outer]) == "> > deep"


def test_unordered_list():
    node = {"type": "ul", "children": [_li(_lic("a")), _li(_lic("b"))]}
    assert serialize([node]) == "- a\n- b"


def test_ordered_list_numbers_items():
    """ol passes a 1-based running index to each item."""
    node = {"type": "ol", "children": [_li(_lic("a")), _li(_lic("b")), _li(_lic("c"))]}
    assert serialize([node]) == "1. a\n2. b\n3. c"


def test_nested_list_follows_item_text():
    """A nested list renders after the item's own text, two spaces deeper."""
    nested = {"type": "ul", "children": [_li(_lic("child one")), _li(_lic("child two"))]}
    node = {"type": "ul", "children": [_li(_lic("parent"), nested)]}
    assert serialize([node]) == "- parent\n  - child one\n  - child two"


def test_nested_list_never_interleaves():
    """Content after a nested list still renders on the item line, before the nested list."""
    nested = {"type": "ul", "children": [_li(_lic("child"))]}
    node = {"type": "ul", "children": [_li(_lic("head"), nested, _lic(" tail"))]}
    assert serialize([node]) == "- head tail\n  - child"


def test_deeply_nested_ordered_in_unordered():
    inner = {"type": "ol", "children": [_li(_lic("x"))]}
    middle = {"type": "ul", "children": [_li(_lic("b"), inner)]}
    outer = {"type": "ul", "children": [_li(_lic("a"), middle)]}
    assert serialize([outer]) == "- a\n  - b\n    1. x"


@pytest.mark.parametrize("checked,expected", [
    (True,  "- [x] done"),
    (False, "- [ ] done"),
])
def test_task_items(checked, expected):
    """A checked flag renders a checkbox before the item content."""
    node = {"type": "ul", "children": [_li(_lic("done"), checked=checked)]}
    assert serialize([node]) == expected


def test_item_without_checked_has_no_checkbox():
    node = {"type": "ul", "children": [_li(_lic("plain"))]}
    assert serialize([node]) == "- plain"


def test_code_block_inside_list_item():
    """Block children start on a new line, indented under the item text."""
    code = {"type": "code_block", "lang": "sh", "children": [{"type": "code_line", "children": [{"text": "ls"}]}]}
    node = {"type": "ul", "children": [_li(_lic("run:"), code)]}
    assert serialize([node]) == "- run:\n  ```sh\n  ls\n  ```"


def test_blockquote_inside_ordered_item():
    """Ordered items indent block content by the wider marker."""
    quote = {"type": "blockquote", "children": [_p({"text": "note"})]}
    node = {"type": "ol", "children": [_li(_lic("see"), quote)]}
    assert serialize([node]) == "1. see\n   > note"


def test_table_alignment_row():
    """The separator row encodes per-column alignment."""
    header = {"type": "tr", "children": [
        {"type": "th", "children": [_p({"text": "a"})]},
        {"type": "th", "children": [_p({"text": "b"})]},
        {"type": "th", "children": [_p({"text": "c"})]},
    ]}
    body = {"type": "tr", "children": [
        {"type": "td", "children": [_p({"text": "1"})]},
        {"type": "td", "children": [_p({"text": "2"})]},
        {"type": "td", "children": [_p({"text": "3"})]},
    ]}
    node = {"type": "table", "align": ["left", "center", "right"], "children": [header, body]}
    assert serialize([node]) == "| a | b | c |\n| --- | :---: | ---: |\n| 1 | 2 | 3 |"


def test_table_missing_alignments_default():
    """Columns beyond the align list, or with null alignment, use plain dashes."""
    header = {"type": "tr", "children": [
        {"type": "th", "children": [{"text": "a"}]},
        {"type": "th", "children": [{"text": "b"}]},
    ]}
    node = {"type": "table", "align": [None], "children": [header]}
    assert serialize([node]) == "| a | b |\n| --- | --- |"


def test_unknown_type_renders_children():
    """Unrecognized element types degrade to their inline content."""
    node = {"type": "callout", "children": [{"text": "hi "}, {"text": "there", "italic": True}]}
    assert serialize([node]) == "hi *there*"


def test_serialize_is_pure():
    """Two calls on the same tree give identical output and leave the tree untouched."""
    nested = {"type": "ol", "children": [_li(_lic("x")), _li(_lic("y"))]}
    doc = [
        {"type": "h2", "children": [{"text": "T"}]},
        {"type": "ul", "children": [_li(_lic("a"), nested, checked=True)]},
    ]
    before = copy.deepcopy(doc)
    assert serialize(doc) == serialize(doc)
    assert doc == before


def test_empty_document():
    assert serialize([]) == ""


def test_block_offset_grows_with_nesting():
    """Blocks inside a nested item are indented past that item's own marker."""
    code = {"type": "code_block", "children": [{"type": "code_line", "children": [{"text": "x"}]}]}
    nested = {"type": "ul", "children": [_li(_lic("b"), code)]}
    node = {"type": "ul", "children": [_li(_lic("a"), nested)]}
    assert serialize([node]) == "- a\n  - b\n    ```\n    x\n    ```"


def test_block_offset_nested_ordered():
    quote = {"type": "blockquote", "children": [_p({"text": "q"})]}
    nested = {"type": "ol", "children": [_li(_lic("b"), quote)]}
    node = {"type": "ul", "children": [_li(_lic("a"), nested)]}
    assert serialize([node]) == "- a\n  1. b\n     > q"
