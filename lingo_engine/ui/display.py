"""
Console display utilities for the Lingo command line.

Provides formatted output using Rich console.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table
from rich.tree import Tree

from lingo_engine.models import ChatMessage

logger = logging.getLogger(__name__)

# Global console instance
console = Console(stderr=True)


def print_success(message: str, title: Optional[str] = None) -> None:
    """Print a success message."""
    if title:
        console.print(f"[bold green]{title}[/bold green]")
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str, title: Optional[str] = None) -> None:
    """Print an error message."""
    if title:
        console.print(f"[bold red]{title}[/bold red]")
    console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]ℹ[/blue] {message}")


def display_config_summary(config_dict: Dict[str, Any]) -> None:
    """
    Display configuration summary.

    Args:
        config_dict: Configuration as dictionary (secrets already redacted)
    """
    tree = Tree("[bold]Configuration[/bold]")

    def add_dict_to_tree(d: Dict[str, Any], branch: Tree) -> None:
        for key, value in d.items():
            if isinstance(value, dict):
                sub_branch = branch.add(f"[cyan]{key}[/cyan]")
                add_dict_to_tree(value, sub_branch)
            else:
                branch.add(f"[dim]{key}:[/dim] {value}")

    add_dict_to_tree(config_dict, tree)
    console.print(tree)


def display_translations(locales: Sequence[str], texts: Sequence[str]) -> None:
    """Display one localized text per target locale."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Locale", style="dim")
    table.add_column("Text")
    for locale, text in zip(locales, texts):
        table.add_row(locale, text)
    console.print(table)


def display_chat(messages: List[ChatMessage]) -> None:
    """Display a localized chat transcript."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Speaker", style="bold")
    table.add_column("Message")
    for message in messages:
        table.add_row(message.name, message.text)
    console.print(table)


class ChunkProgress:
    """
    Progress bar fed by the engine's progress callback.

    Example:
        with ChunkProgress("Localizing") as progress:
            engine.localize_object(obj, params, progress_callback=progress)
    """

    def __init__(self, title: str = "Localizing") -> None:
        self._title = title
        self._progress = Progress(
            TextColumn("[bold]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
            transient=True,
        )
        self._task_id = None

    def __enter__(self) -> "ChunkProgress":
        self._progress.start()
        self._task_id = self._progress.add_task(self._title, total=100)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._progress.stop()

    def __call__(self, percent: int, source_chunk: Dict[str, Any], translated_chunk: Dict[str, Any]) -> None:
        self._progress.update(self._task_id, completed=percent)
        logger.debug(f"Chunk of {len(source_chunk)} entries done ({percent}%)")

