"""
Console output for the sizesort command line.

Built on Rich:
  - log_info / log_warning / log_error / log_success status lines.
  - scan_progress(): transient spinner fed by the scanner's progress callback.
  - log_handler(): logging handler that cooperates with the spinner.

Library modules never import this; they log through `logging` and report
progress through plain callbacks.
"""

from __future__ import annotations

import logging
import sys
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.theme import Theme

from .scanner import ProgressCallback

_THEME = Theme(
    {
        "ui.info": "cyan",
        "ui.success": "green bold",
        "ui.warn": "yellow bold",
        "ui.error": "red bold",
    }
)

console = Console(theme=_THEME, highlight=False, soft_wrap=True)
# Resolves sys.stderr on every write, so a running spinner can redirect it.
err_console = Console(stderr=True, theme=_THEME, highlight=False, soft_wrap=True)

VERBOSE = False


def set_verbose(verbose: bool) -> None:
    """If False, log_info is suppressed."""
    global VERBOSE
    VERBOSE = bool(verbose)


def log_handler() -> logging.Handler:
    """
    Handler for the `logging` records of the library modules.

    Records go to stderr through Rich, so while scan_progress() is running
    they are printed above the spinner instead of over it.
    """
    return RichHandler(
        console=err_console,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )


def log_info(message: str) -> None:
    if VERBOSE:
        console.print(f"[ui.info]ℹ  {escape(message)}[/]")


def log_warning(message: str) -> None:
    console.print(f"[ui.warn]⚠️  {escape(message)}[/]")


def log_error(message: str) -> None:
    console.print(f"[ui.error]❌ {escape(message)}[/]")


def log_success(message: str) -> None:
    console.print(f"[ui.success]✅ {escape(message)}[/]")


@contextmanager
def scan_progress(enabled: bool = True, min_interval: float = 0.05) -> Iterator[Optional[ProgressCallback]]:
    """
    Transient spinner showing "Calculating... N files, M directories".

    Yields a progress callback for the scanner, or None when disabled or when
    stdout is not a terminal. Redraws are throttled to `min_interval` seconds.
    """
    if not enabled or not sys.stdout.isatty():
        yield None
        return

    prog = Progress(
        SpinnerColumn(),
        TextColumn("[ui.info]{task.description}"),
        TimeElapsedColumn(),
        transient=True,
        console=console,
    )
    prog.start()
    task = prog.add_task("Calculating...", total=None)
    last = 0.0

    def observe(files: int, dirs: int) -> None:
        nonlocal last
        now = time.monotonic()
        if now - last < min_interval:
            return
        last = now
        prog.update(task, description=f"Calculating... {files} files, {dirs} directories")

    try:
        yield observe
    finally:
        prog.stop()
