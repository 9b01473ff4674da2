"""CLI command implementations"""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer

from mdplate.config import Settings, load_config
from mdplate.core.pipeline import markdown_to_tree, run_convert
from mdplate.core.reference import build_reference_ast, collect_definitions
from mdplate.core.utils.log import configure_logging


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling, then configure logging from it."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    configure_logging(settings.log_level, settings.log_file)
    return settings


def _read_markdown(path: str) -> str:
    src = Path(path)
    if not src.is_file():
        _fail(f"Not a file: {path}")
    return src.read_text(encoding='utf-8')


def convert_cmd(
    path: Annotated[str, typer.Argument(help="Markdown or JSON file, or a directory of Markdown files")],
    output: Annotated[Optional[str], typer.Argument(help="Output file (or directory for directory input)")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    no_enrich: Annotated[bool, typer.Option("--no-enrich", help="Skip the reference AST repair pass")] = False,
    indent: Annotated[Optional[int], typer.Option("--indent", help="JSON indentation; 0 for compact")] = None,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR")] = None,
    ):
    """Convert Markdown to editor JSON, or editor JSON (.json) back to Markdown."""
    settings = _settings(overrides={
        "parser_config": parser, "enrich": False if no_enrich else None, "json_indent": indent,
        "log_level": log_level.upper() if log_level else None,
    })
    try:
        results = run_convert(path, output, settings.parser_config, settings.enrich, settings.json_indent)
    except RuntimeError as e:
        _fail(str(e))
    if not results:
        typer.echo(f"No .md/.mdx/.json files found at {path}.")
        raise typer.Exit(1)

    for src, dest in results:
        typer.echo(f"  {src} -> {dest}")
    typer.echo(f"Converted {len(results)} document(s)")


def ast_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file to inspect")],
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Print the reference AST and its link definitions as JSON."""
    settings = _settings(overrides={"parser_config": parser})
    ast = build_reference_ast(_read_markdown(path), settings.parser_config)
    payload = {
        "definitions": collect_definitions(ast),
        "children": [node.model_dump(exclude_none=True) for node in ast],
    }
    typer.echo(json.dumps(payload, indent=settings.json_indent or None, ensure_ascii=False))


def tree_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file to convert")],
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    no_enrich: Annotated[bool, typer.Option("--no-enrich", help="Skip the reference AST repair pass")] = False,
    ):
    """Print the editor tree for a Markdown file as JSON."""
    settings = _settings(overrides={"parser_config": parser, "enrich": False if no_enrich else None})
    tree = markdown_to_tree(_read_markdown(path), settings.parser_config, settings.enrich)
    typer.echo(json.dumps(tree, indent=settings.json_indent or None, ensure_ascii=False))
