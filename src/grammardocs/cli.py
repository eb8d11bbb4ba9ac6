"""
grammardocs CLI.

Commands:
  generate  Write documentation (and the rule graph) for grammar files
  graph     Print or write the DOT rule graph of a grammar
  rule      Print the documentation of a single rule
  formats   List the available formatters
"""

from __future__ import annotations

import logging
import os
import platform
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from grammardocs._version import get_version
from grammardocs.core.config import DocsConfig, load_config
from grammardocs.core.errors import GrammarDocsError, GrammarSyntaxError
from grammardocs.driver import generate_docs, render_graph, render_rule
from grammardocs.formatters import get_registry

LOG_LEVEL_ENV = "GRAMMARDOCS_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

console = Console()


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"grammardocs version {get_version()}")
        typer.echo("")
        typer.echo("Environment:")
        typer.echo(
            f"  Python:        {platform.python_implementation()} {platform.python_version()}"
        )
        typer.echo(f"  Platform:      {platform.system()} {platform.release()}")
        typer.echo("")
        typer.echo(f"Formatters:      {', '.join(get_registry().list_formatters())}")
        raise typer.Exit()


def configure_logging(verbose: bool = False) -> None:
    """Log to stderr; ``--verbose`` wins over GRAMMARDOCS_LOG_LEVEL."""
    level_name = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("grammardocs").setLevel(level)


# =============================================================================
# Main Application
# =============================================================================

app = typer.Typer(
    help="""grammardocs - documentation generator for Xtext grammars

Reads grammar files, collects the /** ... */ comment written before each
rule and renders Markdown, plain text or a Graphviz rule graph.
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and environment information",
        ),
    ] = None,
) -> None:
    """grammardocs CLI main callback for global options."""
    pass


ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Configuration file (default: nearest grammardocs.toml)"),
]
FormatOption = Annotated[
    str | None, typer.Option("--format", "-f", help="Formatter name (see 'formats')")
]
SearchPathOption = Annotated[
    list[Path] | None,
    typer.Option("--include", "-I", help="Directory to search for used grammars"),
]
DedupeOption = Annotated[
    bool, typer.Option("--dedupe-edges", help="Collapse repeated edges between two rules")
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output")]


def _load_config(
    config_path: Path | None,
    formatter: str | None = None,
    output_dir: Path | None = None,
    search_paths: list[Path] | None = None,
    graph: bool | None = None,
    dedupe_edges: bool = False,
) -> DocsConfig:
    """Configuration file values with command-line overrides applied."""
    config = load_config(config_path)

    updates: dict[str, object] = {}
    if formatter is not None:
        updates["formatter"] = formatter
    if output_dir is not None:
        updates["output_dir"] = output_dir
    if search_paths:
        updates["search_paths"] = [*search_paths, *config.search_paths]

    graph_updates: dict[str, object] = {}
    if graph is not None:
        graph_updates["enabled"] = graph
    if dedupe_edges:
        graph_updates["deduplicate_edges"] = True
    if graph_updates:
        updates["graph"] = config.graph.model_copy(update=graph_updates)

    return config.model_copy(update=updates) if updates else config


def _fail(prefix: str, error: Exception) -> NoReturn:
    typer.secho(f"{prefix}: {error}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.command()
def generate(
    grammars: Annotated[list[Path], typer.Argument(help="Grammar files (*.xtext)")],
    format: FormatOption = None,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Output directory")
    ] = None,
    config: ConfigOption = None,
    include: SearchPathOption = None,
    graph: Annotated[
        bool | None, typer.Option("--graph/--no-graph", help="Also write the rule graph")
    ] = None,
    dedupe_edges: DedupeOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Write documentation for one or more grammar files."""
    configure_logging(verbose)
    try:
        docs_config = _load_config(config, format, output, include, graph, dedupe_edges)
    except GrammarDocsError as e:
        _fail("Error", e)

    for grammar_path in grammars:
        if not grammar_path.is_file():
            _fail("Error", FileNotFoundError(f"Grammar file not found: {grammar_path}"))
        try:
            result = generate_docs(grammar_path, docs_config)
        except GrammarSyntaxError as e:
            _fail("Syntax error", e)
        except (GrammarDocsError, OSError) as e:
            _fail("Error", e)

        typer.secho(
            f"✓ {result.grammar_name}: {result.rule_count} rules", fg=typer.colors.GREEN
        )
        for path in result.written:
            typer.echo(f"  {path}")


@app.command("graph")
def graph_command(
    grammar: Annotated[Path, typer.Argument(help="Grammar file (*.xtext)")],
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write to this file instead of stdout")
    ] = None,
    config: ConfigOption = None,
    include: SearchPathOption = None,
    dedupe_edges: DedupeOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Print or write the DOT rule graph of a grammar."""
    configure_logging(verbose)
    try:
        docs_config = _load_config(config, search_paths=include, dedupe_edges=dedupe_edges)
        dot = render_graph(grammar, docs_config)
    except GrammarSyntaxError as e:
        _fail("Syntax error", e)
    except (GrammarDocsError, OSError) as e:
        _fail("Error", e)

    if output is None:
        typer.echo(dot, nl=False)
        return
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(dot, encoding="utf-8")
    except OSError as e:
        _fail("Error", e)
    typer.secho(f"✓ Wrote {output}", fg=typer.colors.GREEN)


@app.command()
def rule(
    grammar: Annotated[Path, typer.Argument(help="Grammar file (*.xtext)")],
    name: Annotated[str, typer.Argument(help="Rule name")],
    format: FormatOption = None,
    config: ConfigOption = None,
    include: SearchPathOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Print the documentation of a single rule."""
    configure_logging(verbose)
    try:
        docs_config = _load_config(config, format, search_paths=include)
        text = render_rule(grammar, name, docs_config)
    except GrammarSyntaxError as e:
        _fail("Syntax error", e)
    except (GrammarDocsError, OSError) as e:
        _fail("Error", e)

    typer.echo(text, nl=False)


@app.command()
def formats() -> None:
    """List the available formatters."""
    table = Table(title="Formatters")
    table.add_column("Name", style="bold")
    table.add_column("Extension")
    table.add_column("Description")

    for info in get_registry().describe():
        table.add_row(info.name, f".{info.extension}", info.description)

    console.print(table)


def main(argv: list[str] | None = None) -> None:
    app(args=argv)


if __name__ == "__main__":
    main()
