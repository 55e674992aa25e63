"""declgraph print command - dump declarations and references per file."""

from collections.abc import Sequence
from pathlib import Path

import click

from declgraph.cli.utils import report_diagnostics, run_analysis
from declgraph.core.progress import pluralize, status
from declgraph.index import AnalysisResult, FileExtraction, Resolution


def format_file(
    result: AnalysisResult,
    extraction: FileExtraction,
    resolutions: Sequence[Resolution],
    *,
    declarations: bool,
    references: bool,
    full: bool,
) -> str:
    table = result.table
    lines = [f"# File {extraction.path}"]

    if extraction.error is not None:
        lines += ["", f"! {extraction.error}"]
        return "\n".join(lines) + "\n"

    if declarations:
        lines += ["", "## Declarations", ""]
        for decl in extraction.declarations:
            lines.append(f"{decl.kind.value} {decl.qualified_name} at {decl.span.location}")

    if references:
        lines += ["", "## References", ""]
        for resolution in resolutions:
            ref = resolution.reference
            line = f"{ref.name} at {ref.span.location}"
            if resolution.candidates:
                targets = ", ".join(
                    f"{table[c].kind.value} {table[c].qualified_name}"
                    for c in resolution.candidates
                )
                line += f" -> {targets}"
            lines.append(line)

    if full and extraction.tree_dump is not None:
        lines += ["", "## Parse tree", "", extraction.tree_dump]

    return "\n".join(lines) + "\n"


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, path_type=Path))
@click.option("-d", "--decl", "declarations", is_flag=True, help="Print declarations")
@click.option("-r", "--refs", "references", is_flag=True, help="Print references")
@click.option("--full", is_flag=True, help="Print the parse tree of each file")
@click.option("--show-diagnostics", is_flag=True, help="List every diagnostic on stderr")
@click.pass_context
def print_command(
    ctx: click.Context,
    path: Path,
    declarations: bool,
    references: bool,
    full: bool,
    show_diagnostics: bool,
) -> None:
    """Print declarations and references found in each file.

    PATH is a directory or a single file (default: current directory).
    Without -d or -r both sections are printed.
    """
    if not declarations and not references:
        declarations = references = True

    result = run_analysis(ctx, path, keep_trees=full)
    by_file = result.resolutions_by_file()

    for extraction in result.extractions:
        click.echo(
            format_file(
                result,
                extraction,
                by_file.get((extraction.package, extraction.path), ()),
                declarations=declarations,
                references=references,
                full=full,
            )
        )

    report_diagnostics(result, show_all=show_diagnostics)
    status(f"Done. Processed {pluralize(len(result.extractions), 'file')}.", style="success")
