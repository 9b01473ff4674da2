"""File discovery and markdown-it tokenization with reference-link tagging"""

from pathlib import Path
from typing import Callable, Iterable

from markdown_it import MarkdownIt
from markdown_it.common.utils import normalizeReference
from markdown_it.helpers import parseLinkLabel
from markdown_it.rules_inline import StateInline
from markdown_it.rules_inline.image import image as image_rule
from markdown_it.rules_inline.link import link as link_rule
from mdit_py_plugins.front_matter import front_matter_plugin
from mdit_py_plugins.tasklists import tasklists_plugin

from mdplate.core.models import ParsedMarkdown


MD_EXTENSIONS = {'.md', '.mdx'}
JSON_EXTENSIONS = {'.json'}

TASK_CHECKBOX_CLASS = "task-list-item-checkbox"
CHECKED_MARKUP = 'checked="checked"'


def normalize_identifier(label: str) -> str:
    """Case-fold and collapse whitespace the way mdast identifiers are normalized."""
    return normalizeReference(label).lower()


def _reference_label(state: StateInline, bracket: int, disable_nested: bool) -> str | None:
    """Return the reference label of the link whose text opens at bracket, or None for inline links."""
    label_end = parseLinkLabel(state, bracket, disable_nested)
    if label_end < 0:
        return None
    pos = label_end + 1
    src = state.src
    if pos < len(src) and src[pos] == '(':
        return None
    if pos < len(src) and src[pos] == '[':
        end = parseLinkLabel(state, pos)
        if end > pos + 1:
            return src[pos + 1:end]
    # collapsed ([text][]) and shortcut ([text]) forms reuse the link text
    return src[bracket + 1:label_end]


def _tag_references(rule: Callable, token_type: str, offset: int, disable_nested: bool) -> Callable:
    """Wrap a link/image rule so reference-style matches carry meta["reference"]."""

    def wrapped(state: StateInline, silent: bool) -> bool:
        start = state.pos
        first = len(state.tokens)
        if not rule(state, silent):
            return False
        if silent:
            return True

        label = _reference_label(state, start + offset, disable_nested)
        if label is not None:
            for token in state.tokens[first:]:
                if token.type == token_type:
                    token.meta["reference"] = {
                        "identifier": normalize_identifier(label),
                        "label": label,
                    }
                    break
        return True

    return wrapped


def make_parser(preset: str = 'gfm-like') -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    md = MarkdownIt(preset, options_update={"linkify": False})
    md.use(front_matter_plugin)
    md.use(tasklists_plugin)
    md.inline.ruler.at("link", _tag_references(link_rule, "link_open", 0, True))
    md.inline.ruler.at("image", _tag_references(image_rule, "image", 1, False))
    return md


def parse_markdown(text: str, parser_config: str = 'gfm-like') -> ParsedMarkdown:
    """Tokenize markdown text, keeping the reference definitions markdown-it collected."""
    env: dict = {}
    tokens = make_parser(parser_config).parse(text, env)
    return ParsedMarkdown(
        markdown=text,
        tokens=tokens,
        references=env.get("references", {}),
    )


def is_task_checkbox(node) -> bool:
    """True for the html_inline checkbox the tasklists plugin injects into task items."""
    return node.type == "html_inline" and TASK_CHECKBOX_CLASS in (node.content or "")


def checkbox_state(node) -> bool:
    return CHECKED_MARKUP in (node.content or "")


def discover_files(path: Path, extensions: Iterable[str] = MD_EXTENSIONS | JSON_EXTENSIONS) -> list[Path]:
    """Return sorted files with a matching suffix under path, or [path] if a single file."""
    extensions = set(extensions)
    if path.is_file():
        return [path] if path.suffix.lower() in extensions else []
    return sorted(p for p in path.rglob('*') if p.is_file() and p.suffix.lower() in extensions)
