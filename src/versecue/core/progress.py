"""User-facing progress feedback for CLI operations.

Usage::

    from versecue.core.progress import progress_bar, status

    status("Loading corpus...")

    with progress_bar("Embedding", total=len(units), unit="verses") as advance:
        await store.ensure_embeddings(on_progress=advance)

    status("Ready", style="success")  # ✓ Ready
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

_console = Console(stderr=True)

_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}

_suppress_console_logs = threading.local()


def is_console_suppressed() -> bool:
    """Check if console logging is currently suppressed."""
    return getattr(_suppress_console_logs, "active", False)


@contextmanager
def suppress_console_logs() -> Iterator[None]:
    """Suppress structlog console output while a live display is active.

    Logs are still written to file handlers.
    """
    _suppress_console_logs.active = True
    try:
        yield
    finally:
        _suppress_console_logs.active = False


def _get_logger() -> BoundLogger:
    """Get logger lazily to respect runtime config."""
    from versecue.core.logging import get_logger

    return get_logger("progress")


def _is_tty() -> bool:
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


def get_console() -> Console:
    """Get the shared Rich console instance."""
    return _console


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print a styled status message to stderr."""
    prefix = _STYLES.get(style, "")
    padding = " " * indent
    _console.print(f"{padding}{prefix}{message}", highlight=False)

    _get_logger().debug("status", message=message, style=style)


@contextmanager
def progress_bar(
    desc: str,
    *,
    total: int,
    unit: str = "items",
) -> Iterator[Callable[[int, int], None]]:
    """Yield an ``on_progress(done, total)`` callback driving a progress bar.

    Falls back to debug logging when stderr is not a TTY.
    """
    if not _is_tty():
        log = _get_logger()
        log.debug("progress_start", desc=desc, total=total)

        def _log_progress(done: int, of: int) -> None:
            log.debug("progress", desc=desc, done=done, total=of)

        yield _log_progress
        log.debug("progress_done", desc=desc, total=total)
        return

    with (
        suppress_console_logs(),
        Progress(
            TextColumn("    {task.description}:"),
            BarColumn(bar_width=25, style="cyan", complete_style="cyan"),
            TaskProgressColumn(),
            TextColumn("{task.completed}/{task.total} {task.fields[unit]}"),
            console=_console,
            transient=True,
        ) as pbar,
    ):
        task_id = pbar.add_task(desc, total=total, unit=unit)

        def _advance(done: int, of: int) -> None:
            pbar.update(task_id, completed=done, total=of)

        yield _advance
