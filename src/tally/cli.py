"""Tally command-line interface."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from tally import __version__
from tally.ast_nodes import File
from tally.config import TallyConfig, find_config, load_config
from tally.errors import CompileError, DiagnosticRenderer
from tally.evaluator import Evaluator
from tally.lexer import Lexer
from tally.parser import parse
from tally.printer import format_tokens, format_tree
from tally.project import scaffold
from tally.source import SourceFile

logger = logging.getLogger(__name__)


def _resolve_source(path: Path) -> tuple[Path, TallyConfig | None]:
    """Map a file or project directory to the script to load.

    A directory must contain (or sit below) a tally.toml whose ``run.entry``
    names the script.
    """
    if path.is_file():
        try:
            config: TallyConfig | None = load_config(find_config(path))
        except FileNotFoundError:
            config = None
        return path, config
    config_path = find_config(path)
    config = load_config(config_path)
    return config_path.parent / config.run.entry, config


def _load_script(path: str, no_color: bool) -> tuple[SourceFile, bool]:
    """Load the script named by PATH and decide whether diagnostics are colored."""
    try:
        script, config = _resolve_source(Path(path))
    except FileNotFoundError:
        click.echo("error: no tally.toml found", err=True)
        raise SystemExit(1)
    if not script.is_file():
        click.echo(f"error: entry script {script} not found", err=True)
        raise SystemExit(1)
    color = not no_color and (config.output.color if config else True)
    return SourceFile.from_path(script), color


def _parse_or_report(source: SourceFile, color: bool) -> File:
    """Parse ``source``; on syntax errors render them all and exit with status 1."""
    try:
        file = parse(source.content, source.name)
    except CompileError as e:
        renderer = DiagnosticRenderer(color=color)
        renderer.add_source(source)
        for diag in e.diagnostics:
            click.echo(renderer.render(diag), err=True)
        click.echo(f"{len(e.diagnostics)} error(s) in {source.name}", err=True)
        raise SystemExit(1)
    logger.debug("parsed %s: %d statement(s)", source.name, len(file.stmts))
    return file


@click.group()
@click.version_option(__version__, prog_name="tally")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
def main(verbose: bool) -> None:
    """The Tally scripting language."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s",
        )


@main.command()
@click.argument("path", default=".", type=click.Path(exists=True))
@click.option("--no-color", is_flag=True, help="Disable colored diagnostics.")
def run(path: str, no_color: bool) -> None:
    """Run a Tally script or project."""
    source, color = _load_script(path, no_color)
    file = _parse_or_report(source, color)
    result = Evaluator().evaluate(file)
    logger.debug("evaluated %s -> %r", source.name, result)


@main.command()
@click.argument("path", default=".", type=click.Path(exists=True))
@click.option("--no-color", is_flag=True, help="Disable colored diagnostics.")
def check(path: str, no_color: bool) -> None:
    """Report syntax errors without running."""
    source, color = _load_script(path, no_color)
    _parse_or_report(source, color)
    click.echo(f"checked {source.name}: no errors")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def tokens(file: str) -> None:
    """Print the token stream of a Tally source file."""
    source = Path(file).read_text()
    click.echo(format_tokens(Lexer(source)), nl=False)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--no-color", is_flag=True, help="Disable colored diagnostics.")
def tree(file: str, no_color: bool) -> None:
    """Print the syntax tree of a Tally source file."""
    source = SourceFile.from_path(Path(file))
    parsed = _parse_or_report(source, not no_color)
    click.echo(format_tree(parsed), nl=False)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--no-color", is_flag=True, help="Print plain text.")
def highlight(file: str, no_color: bool) -> None:
    """Print a Tally source file with syntax highlighting."""
    from tally.highlight import highlight_source

    click.echo(highlight_source(Path(file).read_text(), color=not no_color), nl=False)


@main.command()
@click.argument("name")
def new(name: str) -> None:
    """Create a new Tally project."""
    try:
        project_dir = scaffold(name)
        click.echo(f"created project '{name}' at {project_dir}")
    except FileExistsError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)


@main.command()
def lsp() -> None:
    """Start the Tally language server."""
    from tally.lsp import main as lsp_main

    lsp_main()
