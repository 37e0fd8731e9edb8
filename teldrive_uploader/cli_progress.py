"""Console rendering and progress helpers for the uploader CLI."""
from __future__ import annotations

import time
from typing import Any, Dict, Optional

from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)
from rich.table import Table


LARGE_FILE_THRESHOLD = 50 * 1024 * 1024
PERCENT_STEP = 5

console = Console()


def human_size(value: int) -> str:
    size = float(max(value, 0))
    units = ["B", "KB", "MB", "GB", "TB"]
    unit_idx = 0
    while size >= 1024.0 and unit_idx < len(units) - 1:
        size /= 1024.0
        unit_idx += 1
    if unit_idx == 0:
        return f"{int(size)} {units[unit_idx]}"
    return f"{size:.2f} {units[unit_idx]}"


def render_configuration_summary(config: Dict[str, Any]) -> None:
    """Render startup configuration summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, rendered)

    panel = Panel(
        table,
        title="[bold green]teldrive-up[/bold green]",
        subtitle="[dim]resumable chunked upload[/dim]",
        border_style="blue",
    )
    console.print(panel)


class SingleFileUploadProgress:
    """
    Single-file upload progress renderer.

    Large files get a live progress bar; small ones print a percentage line
    every ``PERCENT_STEP`` percent.
    """

    def __init__(self, filename: str, file_size: int):
        self.filename = filename
        self.file_size = max(int(file_size or 0), 0)
        self._started = False
        self._last_printed_percent = -1
        self._last_print_time = 0.0
        self._live: Optional[Live] = None
        self._task_id = None
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold cyan]{task.fields[filename]}", justify="left"),
            BarColumn(bar_width=42),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            expand=False,
            console=console,
        )

    def start(self) -> None:
        if self._started:
            return

        if self.file_size > LARGE_FILE_THRESHOLD:
            self._live = Live(
                self._progress,
                console=console,
                refresh_per_second=5,
                vertical_overflow="visible",
            )
            self._live.start()
            self._task_id = self._progress.add_task(
                "upload",
                filename=self.filename[:60],
                total=self.file_size,
            )
        else:
            console.print(f"[cyan]Uploading:[/cyan] {self.filename}")

        self._started = True

    def update(self, ratio: float) -> None:
        if not self._started:
            self.start()

        uploaded = int(self.file_size * ratio)
        if self._task_id is not None:
            self._progress.update(self._task_id, completed=uploaded)
            return

        percent = int(ratio * 100)
        now = time.monotonic()
        should_print = (
            percent >= 100
            or percent - self._last_printed_percent >= PERCENT_STEP
            or now - self._last_print_time >= 2.0
        )
        if should_print and percent != self._last_printed_percent:
            console.print(f"  {percent:3d}% ({human_size(uploaded)}/{human_size(self.file_size)})")
            self._last_printed_percent = percent
            self._last_print_time = now

    def complete(self, success: bool = True, error: Optional[str] = None) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None

        if success:
            console.print(f"[green]Uploaded:[/green] {self.filename}")
            return

        suffix = f" - {error}" if error else ""
        console.print(f"[red]Failed:[/red] {self.filename}{suffix}")

    def get_callback(self):
        def callback(ratio: float) -> None:
            self.update(ratio)

        return callback
