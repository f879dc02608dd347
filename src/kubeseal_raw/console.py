"""Rich console helpers for status output.

Everything here prints to stderr, so a sealed value echoed on stdout can be
piped or redirected without any status noise mixed in.
"""

from collections.abc import Generator, Mapping
from contextlib import contextmanager

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

console = Console(
    theme=Theme(
        {
            "info": "cyan",
            "success": "green",
            "warning": "yellow",
            "error": "red bold",
            "highlight": "cyan bold",
            "muted": "dim",
        }
    ),
    stderr=True,
)


def _emit(style: str, marker: str, message: str) -> None:
    console.print(f"[{style}]{marker}[/{style}] {message}")


def info(message: str) -> None:
    """Print an informational message."""
    _emit("info", "ℹ", message)


def success(message: str) -> None:
    _emit("success", "✓", message)


def warning(message: str) -> None:
    _emit("warning", "⚠", message)


def error(message: str) -> None:
    """Print an error message. The caller decides the exit status."""
    _emit("error", "✗", message)


def action(message: str) -> None:
    """Print a top-level progress line, e.g. the cluster being used."""
    _emit("info", "→", message)


def step(message: str) -> None:
    """Print a sub-step of the current action."""
    _emit("muted", "•", message)


def highlight(text: str) -> str:
    """Wrap text in highlight markup for embedding in other messages."""
    return f"[highlight]{text}[/highlight]"


@contextmanager
def spinner(message: str) -> Generator[None, None, None]:
    """Show a transient spinner for the duration of the block."""
    with console.status(f"[info]{message}[/info]", spinner="dots"):
        yield


def summary_panel(title: str, rows: Mapping[str, str]) -> None:
    """Print a bordered two-column panel of label/value rows.

    Args:
        title: Panel title.
        rows: Labels to values, printed in insertion order.

    """
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="bold")
    grid.add_column(style="cyan")
    for label, value in rows.items():
        grid.add_row(f"{label}:", value)
    console.print(Panel(grid, title=f"[bold]{title}[/bold]", border_style="green"))


def newline() -> None:
    console.print()
