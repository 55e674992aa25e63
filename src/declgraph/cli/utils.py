"""CLI utilities shared by the analysis commands."""

from pathlib import Path

import click

from declgraph.config import DeclGraphConfig, load_config
from declgraph.core.errors import AnalysisPathError, ConfigError
from declgraph.core.logging import configure_logging
from declgraph.core.progress import get_console, pluralize, spinner, status
from declgraph.index import AnalysisCoordinator, AnalysisResult, DiagnosticKind

_DIAGNOSTIC_LABELS: dict[DiagnosticKind, tuple[str, str]] = {
    DiagnosticKind.PARSE_ERROR: ("parse error", "parse errors"),
    DiagnosticKind.SKIPPED_NODE: ("skipped node", "skipped nodes"),
    DiagnosticKind.DUPLICATE_DECLARATION: ("duplicate declaration", "duplicate declarations"),
    DiagnosticKind.UNRESOLVED_REFERENCE: ("unresolved reference", "unresolved references"),
}


def load_cli_config(ctx: click.Context, path: Path) -> DeclGraphConfig:
    """Load config for an analysis root and apply its logging section.

    Raises:
        click.ClickException: On invalid configuration.
    """
    root = path if path.is_dir() else path.parent
    try:
        config = load_config(root, config_path=ctx.obj.get("config_path"))
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    if ctx.obj.get("verbose"):
        config.logging.level = "DEBUG"
    configure_logging(config=config.logging)
    return config


def run_analysis(ctx: click.Context, path: Path, *, keep_trees: bool = False) -> AnalysisResult:
    """Run the full pipeline over ``path`` behind a spinner."""
    config = load_cli_config(ctx, path)
    coordinator = AnalysisCoordinator(config)
    try:
        with spinner(f"Analyzing {path}"):
            return coordinator.analyze_path(path, keep_trees=keep_trees)
    except AnalysisPathError as e:
        raise click.ClickException(e.message) from e


def report_diagnostics(result: AnalysisResult, *, show_all: bool = False) -> None:
    """One-line diagnostics summary on stderr, optionally every diagnostic."""
    counts = result.diagnostic_counts()
    if not counts:
        return

    parts = [pluralize(n, *_DIAGNOSTIC_LABELS[kind]) for kind, n in counts.items()]
    status(", ".join(parts), style="warning")

    if show_all:
        console = get_console()
        for diagnostic in result.diagnostics:
            console.print(f"    {diagnostic}", highlight=False, markup=False)
