"""Conversion step functions: Markdown <-> editor tree, for text and files"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from mdplate.core.align import enrich as enrich_tree
from mdplate.core.deserialize import deserialize
from mdplate.core.models import DocumentAdapter
from mdplate.core.parse import JSON_EXTENSIONS, MD_EXTENSIONS, discover_files
from mdplate.core.reference import build_reference_ast, collect_definitions
from mdplate.core.serialize import serialize


logger = logging.getLogger(__name__)


def load_document(data: Any) -> list[dict[str, Any]]:
    """Validate decoded JSON as an editor document and return it as plain dicts."""
    try:
        nodes = DocumentAdapter.validate_python(data)
    except ValidationError as e:
        raise ValueError(f"Invalid document: {e}") from e
    return [node.model_dump(exclude_none=True) for node in nodes]


def markdown_to_tree(text: str, parser_config: str = 'gfm-like', enrich: bool = True) -> list[dict[str, Any]]:
    """Deserialize text, then repair it from the reference AST.

    Enrichment is an enhancement: if it fails the deserialized tree is still
    returned, with a warning.
    """
    tree = deserialize(text, parser_config)
    if not enrich:
        return tree
    try:
        ast = build_reference_ast(text, parser_config)
        enrich_tree(tree, ast, collect_definitions(ast))
    except Exception as e:
        logger.warning("Enrichment skipped: %s", e)
    return tree


def tree_to_markdown(nodes: Any) -> str:
    """Validate an editor document and serialize it to Markdown."""
    return serialize(load_document(nodes))


def output_path_for(source: Path, output: Optional[Path] = None) -> Path:
    """Pick the destination: .json sources become .md, everything else becomes .json."""
    suffix = '.md' if source.suffix.lower() in JSON_EXTENSIONS else '.json'
    target = output or source
    return target if target.suffix.lower() == suffix else target.with_suffix(suffix)


def convert_markdown_file(
    source: Path,
    dest: Path,
    parser_config: str = 'gfm-like',
    enrich: bool = True,
    indent: int = 2,
    ) -> list[dict[str, Any]]:
    """Read a Markdown file and write its editor tree as JSON."""
    logger.info("Reading markdown file: %s", source)
    text = source.read_text(encoding='utf-8')

    logger.info("Converting markdown to editor JSON")
    tree = markdown_to_tree(text, parser_config, enrich)

    logger.info("Saving editor JSON to: %s", dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text(json.dumps(tree, indent=indent or None, ensure_ascii=False), encoding='utf-8')
    logger.info("Generated %d nodes", len(tree))
    return tree


def convert_json_file(source: Path, dest: Path) -> str:
    """Read an editor JSON file and write it as Markdown."""
    logger.info("Reading JSON file: %s", source)
    try:
        data = json.loads(source.read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e

    logger.info("Converting editor JSON to markdown")
    markdown = tree_to_markdown(data)

    logger.info("Saving markdown to: %s", dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text(markdown, encoding='utf-8')
    logger.info("Markdown generated (%d characters)", len(markdown))
    return markdown


def run_convert(
    path: str,
    output: Optional[str] = None,
    parser_config: str = 'gfm-like',
    enrich: bool = True,
    indent: int = 2,
    ) -> list[tuple[Path, Path]]:
    """Convert a file in the direction its extension implies, or every .md/.mdx file under a directory to JSON.

    For a directory, output (when given) is a directory mirroring the source
    layout. Returns (source, destination) pairs.
    """
    root = Path(path)
    files = discover_files(root) if root.is_file() else discover_files(root, MD_EXTENSIONS)
    results = []
    for p in files:
        if root.is_dir():
            dest = output_path_for(Path(output) / p.relative_to(root) if output else p)
        else:
            dest = output_path_for(p, Path(output) if output else None)
        try:
            if p.suffix.lower() in JSON_EXTENSIONS:
                convert_json_file(p, dest)
            else:
                convert_markdown_file(p, dest, parser_config, enrich, indent)
        except Exception as e:
            raise RuntimeError(f"Failed to convert {p}: {e}") from e
        results.append((p, dest))
    return results
