"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdplate.cli.commands import ast_cmd, convert_cmd, tree_cmd


app = typer.Typer(name="mdplate", no_args_is_help=True, help="Markdown <-> editor document tree converter")

app.command(name="convert")(convert_cmd)
app.command(name="ast")(ast_cmd)
app.command(name="tree")(tree_cmd)
