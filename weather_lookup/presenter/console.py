"""Shared consoles for rendered output and user-facing messages."""

from rich.console import Console
from rich.markup import escape

# Rendered results go to stdout; messages and errors to stderr.
console = Console()
err_console = Console(stderr=True)


def error(msg: str) -> None:
    """Print an error message in red."""
    err_console.print(f"[red]{escape(msg)}[/red]")


def dim(msg: str) -> None:
    """Print a dimmed message."""
    err_console.print(f"[dim]{escape(msg)}[/dim]")
