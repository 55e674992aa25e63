"""declgraph deps command - list everything a type depends on."""

import json
from pathlib import Path
from typing import Any

import click

from declgraph.cli.utils import report_diagnostics, run_analysis
from declgraph.core.errors import UnknownTypeError
from declgraph.index import AnalysisResult, Edge, EdgeKind


def _usage(result: AnalysisResult, edge: Edge) -> dict[str, Any]:
    source = result.table[edge.source]
    usage: dict[str, Any] = {
        "kind": edge.kind.value,
        "from": f"{source.kind.value} {source.qualified_name}",
    }
    if edge.reference is not None:
        usage["file"] = edge.reference.file
        usage["location"] = edge.reference.span.location
    return usage


def _format_usage(usage: dict[str, Any]) -> str:
    if usage["kind"] == EdgeKind.EXTENDS.value:
        return f"    extends {usage['from']}"
    return f"    used at {usage['file']}:{usage['location']} in {usage['from']}"


@click.command()
@click.argument("path_or_type", metavar="[PATH] TYPE_NAME")
@click.argument("type_name", required=False, metavar="")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("-l", "--locations", is_flag=True, help="Show where each dependency is used")
@click.option("--show-diagnostics", is_flag=True, help="List every diagnostic on stderr")
@click.pass_context
def deps_command(
    ctx: click.Context,
    path_or_type: str,
    type_name: str | None,
    as_json: bool,
    locations: bool,
    show_diagnostics: bool,
) -> None:
    """Recursively list all types TYPE_NAME depends on.

    PATH is the directory to analyze (default: current directory).
    Output is breadth-first: direct dependencies before indirect ones.
    """
    if type_name is None:
        raw_path, type_name = ".", path_or_type
    else:
        raw_path = path_or_type
    path = click.Path(exists=True, path_type=Path).convert(raw_path, None, ctx)

    result = run_analysis(ctx, path)
    report_diagnostics(result, show_all=show_diagnostics)

    try:
        usages = result.query.usages(type_name)
    except UnknownTypeError as e:
        raise click.ClickException(e.message) from e

    entries = []
    for decl_id, edges in usages.items():
        entry = result.table[decl_id].to_dict()
        if locations:
            entry["used_by"] = [_usage(result, edge) for edge in edges]
        entries.append(entry)

    if as_json:
        click.echo(json.dumps(entries, indent=2))
        return

    for entry in entries:
        click.echo(
            f"{entry['kind']} {entry['qualified_name']}  "
            f"{entry['file']}:{entry['line']}:{entry['column']}"
        )
        for usage in entry.get("used_by", ()):
            click.echo(_format_usage(usage))
