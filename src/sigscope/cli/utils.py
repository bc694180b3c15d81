"""
CLI Utilities - Shared helper functions for command line operations.

This module provides formatted printing and the feed loading logic
shared by every command.
"""

import json
from pathlib import Path
from typing import Any, List, Optional

import click

from ..config import load_config
from ..core.exceptions import EventFeedFormatError, EventFeedNotFoundError
from ..engine import InspectorEngine


def echo_success(message: str) -> None:
    """
    Print a success message with a green checkmark.

    Args:
        message (str): The message to display.
    """
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_warning(message: str) -> None:
    """
    Print a warning message with a yellow alert symbol.

    Args:
        message (str): The warning message to display.
    """
    click.echo(click.style(f"⚠️  {message}", fg="yellow"))


def echo_info(message: str) -> None:
    """
    Print an informational message, dimmed.

    Args:
        message (str): The info message to display.
    """
    click.echo(click.style(f"   {message}", dim=True))


def read_feed(feed_file: str) -> List[Any]:
    """
    Read a recorded event feed.

    Accepts either a JSON array of event records or JSON Lines (one record
    per line, blank lines ignored).

    Raises:
        EventFeedNotFoundError: The file does not exist.
        EventFeedFormatError: The file is neither a JSON array nor JSON Lines.
    """
    path = Path(feed_file)
    if not path.is_file():
        raise EventFeedNotFoundError(feed_file)

    text = path.read_text()
    stripped = text.lstrip()
    if stripped.startswith("["):
        try:
            records = json.loads(stripped)
        except json.JSONDecodeError as e:
            raise EventFeedFormatError(feed_file, str(e)) from e
        return records

    records = []
    for line_no, line in enumerate(text.splitlines(), 1):
        if not line.strip():
            continue
        try:
            records.append(json.loads(line))
        except json.JSONDecodeError as e:
            raise EventFeedFormatError(feed_file, f"line {line_no}: {e.msg}") from e
    return records


def load_engine(feed_file: str, config_file: Optional[str] = None) -> Optional[InspectorEngine]:
    """
    Replay a recorded feed into a fresh engine.

    Args:
        feed_file (str): Path to the recorded event feed.
        config_file (Optional[str]): Path to a config YAML; defaults to .sigscope/config.yaml.

    Returns:
        Optional[InspectorEngine]: The populated engine, or None if the feed could not be read.
    """
    try:
        records = read_feed(feed_file)
    except (EventFeedNotFoundError, EventFeedFormatError) as e:
        echo_error(str(e))
        return None

    config = load_config(Path(config_file) if config_file else None)
    engine = InspectorEngine(config=config)
    applied = engine.ingest_many(records)
    skipped = len(records) - applied
    if skipped:
        echo_warning(f"Skipped {skipped} malformed or unknown event(s)")
    return engine
