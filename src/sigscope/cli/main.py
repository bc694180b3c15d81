"""
sigscope CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

import logging

import click

from .commands import cascades, graph, stats


@click.group()
@click.version_option(package_name="sigscope")
@click.option("-v", "--verbose", is_flag=True, help="Log engine activity to stderr")
def main(verbose: bool):
    """sigscope: Reactive dependency graph and cascade inspector.

    Replays a recorded instrumentation feed and reports on the
    dependency graph and the update cascades it contains.

    \b
    Quick Start:
      sigscope stats events.jsonl
      sigscope orphans events.jsonl
      sigscope focus events.jsonl counter
      sigscope cascades events.jsonl --show-internal
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(message)s",
            datefmt="[%X]",
        )


# Register commands
main.add_command(stats.stats)
main.add_command(graph.orphans)
main.add_command(graph.focus)
main.add_command(cascades.cascades)

if __name__ == "__main__":
    main()
