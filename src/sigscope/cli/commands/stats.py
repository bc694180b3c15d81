"""
Stats Command - Summarize a recorded feed.
"""

import json
import sys

import click
from rich.console import Console
from rich.table import Table

from ..utils import echo_success, load_engine

console = Console()


@click.command()
@click.argument("feed_file")
@click.option("-c", "--config", "config_file", default=None, help="Path to config YAML")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def stats(feed_file: str, config_file: str | None, as_json: bool) -> None:
    """
    Show graph and log statistics for a recorded event feed.
    """
    engine = load_engine(feed_file, config_file)
    if engine is None:
        sys.exit(1)

    data = engine.stats()
    data["by_origin"] = [o.model_dump() for o in engine.origins()]

    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    echo_success(f"Replayed {feed_file}")

    table = Table(title="Graph")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Nodes", str(data["total_nodes"]))
    table.add_row("Edges", str(data["total_edges"]))
    for node_type, count in sorted(data["nodes_by_type"].items()):
        table.add_row(f"  {node_type}", str(count))
    table.add_row("Orphans", str(data["orphans"]))
    table.add_row("Log entries", str(data["log_entries"]))
    table.add_row("Dropped events", str(sum(data["dropped_events"].values())))
    console.print(table)

    if data["by_origin"]:
        origins = Table(title="Origins")
        origins.add_column("Origin")
        origins.add_column("Nodes", justify="right")
        origins.add_column("Edges", justify="right")
        origins.add_column("Log", justify="right")
        for origin in data["by_origin"]:
            origins.add_row(
                origin["id"],
                str(sum(origin["node_counts"].values())),
                str(origin["edge_count"]),
                str(origin["log_entry_count"]),
            )
        console.print(origins)
