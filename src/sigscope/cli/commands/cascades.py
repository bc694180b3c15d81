"""
Cascades Command - Reconstruct update cascades from a recorded feed.
"""

import sys

import click
from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...core.types import Cascade, TimelineState
from ..utils import echo_info, load_engine

console = Console()


class CascadesResponse(BaseModel):
    origin: str | None
    show_internal: bool
    timeline: TimelineState


@click.command()
@click.argument("feed_file")
@click.option("-c", "--config", "config_file", default=None, help="Path to config YAML")
@click.option("--origin", default=None, help="Only use events from this origin")
@click.option("--show-internal", is_flag=True, help="Include events from framework-internal nodes")
@click.option("--expand", is_flag=True, help="List the effects of every cascade")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def cascades(
    feed_file: str,
    config_file: str | None,
    origin: str | None,
    show_internal: bool,
    expand: bool,
    as_json: bool,
) -> None:
    """
    List the cascades triggered by signal writes.
    """
    engine = load_engine(feed_file, config_file)
    if engine is None:
        sys.exit(1)

    if origin is not None:
        engine.set_active_origin(origin)
    if show_internal:
        engine.set_hide_internal(False)

    timeline = engine.get_timeline_state()

    if as_json:
        response = CascadesResponse(
            origin=engine.active_origin,
            show_internal=not engine.hide_internal,
            timeline=timeline,
        )
        click.echo(response.model_dump_json(indent=2))
        return

    if not timeline.cascades:
        click.echo("No cascades found.")
        if engine.hide_internal:
            echo_info("Internal nodes are hidden; try --show-internal")
        return

    table = Table(title=f"Cascades ({len(timeline.cascades)})")
    table.add_column("#", justify="right")
    table.add_column("Root")
    table.add_column("Start", justify="right")
    table.add_column("Duration (ms)", justify="right")
    table.add_column("Effects", justify="right")
    table.add_column("Nodes", justify="right")
    for i, cascade in enumerate(timeline.cascades):
        table.add_row(
            str(i),
            escape(_root_label(cascade)),
            f"{cascade.start_time:.1f}",
            f"{cascade.duration_ms:g}",
            str(len(cascade.effects)),
            str(len(cascade.affected_node_ids)),
        )
    console.print(table)

    if timeline.time_range:
        echo_info(f"Time range: {timeline.time_range.start:.1f} .. {timeline.time_range.end:.1f}")

    if expand:
        for i, cascade in enumerate(timeline.cascades):
            _print_effects(i, cascade)


def _root_label(cascade: Cascade) -> str:
    if cascade.root_node is not None:
        return cascade.root_node.label
    return cascade.root_event.node_name or cascade.root_event.node_id or cascade.root_event.id


def _print_effects(index: int, cascade: Cascade) -> None:
    console.print()
    console.print(f"[bold]#{index}[/bold] {escape(cascade.root_event.summary or _root_label(cascade))}")
    for j, effect in enumerate(cascade.effects):
        connector = "└─" if j == len(cascade.effects) - 1 else "├─"
        indent = "  " * max(effect.depth, 1)
        label = effect.event.summary or effect.event.event_type
        console.print(f"{indent}{connector} +{effect.delta_ms:g}ms {escape(label)} [dim](depth {effect.depth})[/dim]")
