"""Rich-based logging and terminal output for appmigrate."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

__all__ = [
    "console",
    "configure_logging",
    "print_success",
    "print_warning",
    "print_error",
    "print_info",
    "print_stage",
    "print_file_action",
    "create_table",
    "create_summary_panel",
]

_THEME = Theme(
    {
        "success": "bold green",
        "warning": "bold yellow",
        "error": "bold red",
        "info": "bold cyan",
        "muted": "dim",
        "accent": "bold magenta",
        "stage": "bold blue",
    }
)

console = Console(theme=_THEME)


def configure_logging(verbose: bool = False) -> None:
    """Route library log records through the shared console.

    Without ``--verbose`` only warnings (deprecated targets, files that could
    not be restored) reach the terminal.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=verbose, markup=False)],
        force=True,
    )


def _emit(style: str, icon: str, message: str) -> None:
    console.print(f"[{style}]{icon}[/{style}] {message}")


def print_success(message: str) -> None:
    _emit("success", "✔", message)


def print_warning(message: str) -> None:
    _emit("warning", "⚠", message)


def print_error(message: str) -> None:
    _emit("error", "✖", escape(message))


def print_info(message: str) -> None:
    _emit("info", "ℹ", message)


def print_stage(stage: str, hint: str | None = None) -> None:
    """Report the migration stage a failed command reached."""
    console.print(f"  [muted]Stage reached:[/muted] [stage]{stage}[/stage]")
    if hint:
        console.print(f"  [muted]{hint}[/muted]")


def print_file_action(action: str, path: Path) -> None:
    console.print(f"  [muted]{action}[/muted] {escape(path.name)}")


def create_table(
    title: str,
    columns: list[tuple[str, str]],
    rows: list[list[str]],
) -> Table:
    """Create a Rich table with the given columns and rows."""
    table = Table(title=title, show_lines=True, expand=True)
    for header, style in columns:
        table.add_column(header, style=style)
    for row in rows:
        table.add_row(*row)
    return table


def create_summary_panel(title: str, fields: list[tuple[str, str]]) -> Panel:
    """Render ``label: value`` pairs with aligned labels."""
    width = max((len(label) for label, _ in fields), default=0) + 1
    body = "\n".join(f"[bold]{f'{label}:':<{width}}[/bold] {escape(value)}" for label, value in fields)
    return Panel(body, title=title, border_style="cyan", expand=True)
