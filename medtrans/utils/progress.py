# -*- coding: utf-8 -*-
"""
Progress reporting for the CLI.

Shows a rich progress bar on a terminal and falls back to single-line text
output when stdout is not a TTY. ``as_callback()`` adapts a reporter to the
pipeline's ``(percent, stage)`` progress sink.
"""

import sys
import time
import logging
from typing import Callable, Optional
from dataclasses import dataclass, field

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

logger = logging.getLogger(__name__)


@dataclass
class ProgressStats:
    """Statistics for progress tracking."""
    total: float = 100.0
    completed: float = 0.0
    stage: str = ""
    start_time: float = field(default_factory=time.time)

    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return (self.completed / self.total) * 100

    @property
    def elapsed(self) -> float:
        return time.time() - self.start_time

    @property
    def eta(self) -> float:
        """Estimated time remaining."""
        if self.completed <= 0:
            return float('inf')
        rate = self.completed / max(self.elapsed, 1e-9)
        return (self.total - self.completed) / rate


class ProgressReporter:
    """
    Progress reporter for percentage-driven work.

    Usage:
        with ProgressReporter(description="Translating") as progress:
            translate_pdf(src, out, progress_callback=progress.as_callback())
    """

    def __init__(
        self,
        total: float = 100.0,
        description: str = "Processing",
        callback: Optional[Callable[[ProgressStats], None]] = None,
        use_rich: bool = True,
        show_eta: bool = True,
        console: Optional[Console] = None
    ):
        self.stats = ProgressStats(total=total)
        self.description = description
        self.callback = callback
        self.use_rich = use_rich and sys.stdout.isatty()
        self.show_eta = show_eta

        self._progress: Optional[Progress] = None
        self._task_id = None
        self._console = console

    def start(self):
        """Start progress tracking."""
        self.stats.start_time = time.time()

        if self.use_rich:
            columns = [
                SpinnerColumn(),
                TextColumn("[bold blue]{task.description}"),
                BarColumn(bar_width=40),
                TaskProgressColumn(),
            ]
            if self.show_eta:
                columns.extend([
                    TimeElapsedColumn(),
                    TextColumn("•"),
                    TimeRemainingColumn()
                ])

            self._console = self._console or Console()
            self._progress = Progress(*columns, console=self._console)
            self._progress.start()
            self._task_id = self._progress.add_task(self.description, total=self.stats.total)
        else:
            self._print_simple(f"{self.description}: 0%")

    def update(self, completed: float, stage: Optional[str] = None):
        """Set absolute progress; values never move backwards."""
        self.stats.completed = min(self.stats.total, max(self.stats.completed, completed))
        if stage:
            self.stats.stage = stage

        if self.use_rich and self._progress:
            description = f"{self.description}: {stage}" if stage else self.description
            self._progress.update(self._task_id, completed=self.stats.completed, description=description)
        elif not self.use_rich:
            self._print_simple_progress()

        if self.callback:
            self.callback(self.stats)

    def as_callback(self) -> Callable[[float, str], None]:
        """A ``(percent, stage)`` sink for TranslationPipeline and translate_pdf."""
        def callback(percent: float, stage: str) -> None:
            self.update(percent * self.stats.total / 100.0, stage)
        return callback

    def finish(self, final_message: Optional[str] = None):
        """Finish progress tracking."""
        if self.use_rich and self._progress:
            self._progress.stop()
            self._progress = None
            if final_message:
                self._console.print(f"[green]✓[/green] {final_message}")
        else:
            msg = final_message or f"{self.description}: Done ({self.stats.percentage:.0f}%)"
            self._print_simple(msg, newline=True)

    def _print_simple(self, message: str, newline: bool = False):
        """Print simple progress for non-rich environments."""
        end = "\n" if newline else "\r"
        print(f"\r{message}".ljust(80), end=end, flush=True)

    def _print_simple_progress(self):
        pct = self.stats.percentage
        filled = int(pct / 5)
        bar = "█" * filled + "░" * (20 - filled)
        eta_str = ""
        if self.show_eta and self.stats.eta < float('inf'):
            eta_str = f" ETA: {self.stats.eta:.0f}s"
        self._print_simple(f"{self.description}: [{bar}] {pct:.0f}% {self.stats.stage}{eta_str}")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.finish()
        return False
