"""
Graph Commands - Orphan report and focused neighbourhood view.
"""

import sys
from typing import List

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...core.exceptions import NodeNotFoundError
from ...core.graph import GraphStore
from ...core.traversal import TraversalIndex
from ...core.types import Node
from ..utils import echo_error, echo_info, load_engine

console = Console()

TYPE_COLORS = {
    "signal": "cyan",
    "derived": "magenta",
    "effect": "green",
    "subscribe": "yellow",
}


def _styled(node: Node) -> str:
    color = TYPE_COLORS.get(node.type.value, "white")
    return f"[{color}]{escape(node.label)}[/{color}] [dim]({node.type.value})[/dim]"


@click.command()
@click.argument("feed_file")
@click.option("-c", "--config", "config_file", default=None, help="Path to config YAML")
def orphans(feed_file: str, config_file: str | None) -> None:
    """
    List non-terminal nodes that nothing consumes.
    """
    engine = load_engine(feed_file, config_file)
    if engine is None:
        sys.exit(1)

    metrics = engine.get_metrics()
    state = engine.store.state
    orphaned = sorted(
        (state.nodes[node_id] for node_id, m in metrics.items() if m.is_orphaned),
        key=lambda n: n.id,
    )

    if not orphaned:
        click.echo("No orphaned nodes.")
        return

    table = Table(title=f"Orphaned nodes ({len(orphaned)})")
    table.add_column("Node")
    table.add_column("Type")
    table.add_column("Origin")
    table.add_column("Connections", justify="right")
    table.add_column("Declared at")
    for node in orphaned:
        table.add_row(
            escape(node.label),
            node.type.value,
            node.origin_id,
            str(metrics[node.id].connection_count),
            node.source_location.display if node.source_location else "-",
        )
    console.print(table)


@click.command()
@click.argument("feed_file")
@click.argument("node")
@click.option("-c", "--config", "config_file", default=None, help="Path to config YAML")
def focus(feed_file: str, node: str, config_file: str | None) -> None:
    """
    Show a node with its direct dependencies and dependents.
    """
    engine = load_engine(feed_file, config_file)
    if engine is None:
        sys.exit(1)

    try:
        node_id = _resolve_node(engine.store, node)
    except NodeNotFoundError as e:
        echo_error(str(e))
        sys.exit(1)

    view = engine.get_focused_view(node_id)
    index = TraversalIndex(engine.store.state)

    console.print()
    console.print(f"[bold]{_styled(view.center)}[/bold]")
    if view.center.source_location:
        echo_info(view.center.source_location.display)
    _print_group("Depends on", view.dependencies)
    _print_group("Used by", view.dependents)
    console.print()
    echo_info(
        f"Reaches {len(index.descendants(node_id))} node(s) downstream, "
        f"reached from {len(index.ancestors(node_id))} upstream"
    )


def _print_group(title: str, nodes: List[Node]) -> None:
    console.print(f"{title} ({len(nodes)}):")
    for i, node in enumerate(nodes):
        connector = "└─" if i == len(nodes) - 1 else "├─"
        console.print(f"  {connector} {_styled(node)}")


def _resolve_node(store: GraphStore, name: str) -> str:
    """Resolve an id or partial name to a node id."""
    if store.has_node(name):
        return name

    matches = store.find_nodes(name)
    if not matches:
        raise NodeNotFoundError(name)

    for match in matches:
        candidate = store.get_node(match)
        if candidate and candidate.name == name:
            return match
    return sorted(matches)[0]
