import typer
from pathlib import Path
import logging
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from pydantic import ValidationError
from codemap.config import get_settings
from codemap.core.errors import GraphCodecError
from codemap.core.exporter import (
    check_structure,
    graph_to_json,
    json_to_graph,
    load_graph,
    save_graph,
)
from codemap.core.graph import FunctionGraph, NodeStatus

logger = logging.getLogger(__name__)

APP_HELP = """
codemap: inspect call graph JSON documents.

The analyzer writes the call graph as a JSON document with a "nodes" array
(name, file, line, isStub, isMissing, isExternal) and an "edges" array
(from, to: positions in "nodes"). These commands check, browse and
rewrite such documents.
"""

app = typer.Typer(name="codemap", help=APP_HELP, no_args_is_help=True)
console = Console()

STATUS_STYLES = {
    NodeStatus.IMPLEMENTED: "green",
    NodeStatus.STUB: "yellow",
    NodeStatus.MISSING: "red",
    NodeStatus.EXTERNAL: "blue",
}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    """
    codemap: Call graph tooling.
    """
    try:
        settings = get_settings()
    except ValidationError as e:
        console.print(f"[red]Error: invalid CODEMAP_* setting: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    level = "DEBUG" if verbose else settings.log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _load_or_exit(file: Path) -> FunctionGraph:
    logger.debug(f"Loading graph from {file}")
    try:
        return load_graph(file)
    except GraphCodecError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)


@app.command("validate")
def validate(
    file: Path = typer.Argument(..., help="Graph JSON document"),
    strict: bool = typer.Option(False, "--strict", help="Also decode the document and check every field"),
):
    """
    Check that a document looks like a call graph.

    Without --strict only the cheap structural check runs: "nodes" and "edges"
    must appear and brackets must balance. With --strict the document is fully
    decoded and every node and edge is checked.
    """
    try:
        text = file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error: cannot read {file}: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    report = check_structure(text)
    if not report.ok:
        where = f" at offset {report.offset}" if report.offset is not None else ""
        console.print(f"[red]Invalid: {report.reason}{where}[/red]")
        raise typer.Exit(code=1)

    if strict:
        try:
            graph = json_to_graph(text)
        except GraphCodecError as e:
            console.print(f"[red]Invalid: {escape(str(e))}[/red]")
            raise typer.Exit(code=1)
        console.print(f"[green]OK[/green] ({len(graph.nodes)} functions, {len(graph.edges)} calls)")
    else:
        console.print("[green]OK[/green]")


@app.command("show")
def show(
    file: Path = typer.Argument(..., help="Graph JSON document"),
    query: str = typer.Option(None, "--filter", "-f", help="Only show functions whose name or file contains this text (plus their neighbours)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    List the functions in a call graph.
    """
    graph = _load_or_exit(file)
    if query:
        graph = graph.filter(query)

    if json_output:
        print(graph_to_json(graph))
        return

    table = Table(title=str(file))
    table.add_column("#", style="dim", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("File")
    table.add_column("Line", justify="right")
    table.add_column("Status")

    for i, node in enumerate(graph.nodes):
        style = STATUS_STYLES[node.status]
        table.add_row(
            str(i),
            escape(node.name),
            escape(node.file),
            str(node.line),
            f"[{style}]{node.status.value}[/{style}]",
        )

    console.print(table)
    console.print(f"{len(graph.nodes)} functions, {len(graph.edges)} calls")


@app.command("node")
def node_details(
    file: Path = typer.Argument(..., help="Graph JSON document"),
    index: int = typer.Argument(..., help="Position of the function in \"nodes\""),
):
    """
    Show one function with its callers and callees.
    """
    graph = _load_or_exit(file)
    if not 0 <= index < len(graph.nodes):
        console.print(f"[red]Error: no node at index {index} (graph has {len(graph.nodes)})[/red]")
        raise typer.Exit(code=1)

    node = graph.nodes[index]
    callers = [escape(graph.nodes[i].name) for i in graph.callers_of(index)]
    callees = [escape(graph.nodes[i].name) for i in graph.callees_of(index)]

    console.print(f"[bold]{escape(node.name)}[/bold]")
    console.print(f"  File:    {escape(node.file)}")
    console.print(f"  Line:    {node.line}")
    console.print(f"  Status:  {node.status.value}")
    console.print(f"  Callers: {', '.join(callers) if callers else '-'}")
    console.print(f"  Callees: {', '.join(callees) if callees else '-'}")


@app.command("stats")
def stats(
    file: Path = typer.Argument(..., help="Graph JSON document"),
):
    """
    Count functions by status and report edges that point nowhere.
    """
    graph = _load_or_exit(file)

    table = Table(title="Graph Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("Functions", str(len(graph.nodes)))
    table.add_row("Calls", str(len(graph.edges)))
    for status, count in graph.status_counts().items():
        table.add_row(status.value.capitalize(), str(count))
    table.add_row("Dangling edges", str(len(graph.dangling_edges())))

    console.print(table)


@app.command("normalize")
def normalize(
    file: Path = typer.Argument(..., help="Graph JSON document"),
    output: Path = typer.Option(None, "--output", "-o", help="Where to write the result (default: CODEMAP_OUTPUT_FILE)"),
):
    """
    Decode a document and write it back in canonical layout.
    """
    graph = _load_or_exit(file)
    target = output or Path(get_settings().output_file)

    try:
        save_graph(graph, target)
    except GraphCodecError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]Wrote {len(graph.nodes)} functions, {len(graph.edges)} calls to {target}[/green]")


if __name__ == "__main__":
    app()
