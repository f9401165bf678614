"""Terminal progress helpers with Rich-based rendering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from rich.console import Console
from rich.errors import LiveError
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.status import Status

from ..engine.models import BatchOutcome
from ..services import ServiceChoice


@dataclass
class ProgressState:
    total: int
    success: int = 0
    failed: int = 0


class BatchProgress:
    """One progress row per fingerprint service, advanced as batches resolve."""

    def __init__(self, enabled: bool = True, console: Console | None = None) -> None:
        self.enabled = enabled
        self.console = console or Console(stderr=True)
        if enabled and not self.console.is_terminal:
            # Non-TTY output stays quiet instead of printing every refresh
            self.enabled = False
        self.states: dict[ServiceChoice, ProgressState] = {}
        self._task_ids: dict[ServiceChoice, TaskID] = {}
        self._progress: Progress | None = None

    def start(self, services: Iterable[ServiceChoice], total: int) -> None:
        services = list(services)
        self.states = {service: ProgressState(total=total) for service in services}
        if not self.enabled:
            return
        self._progress = Progress(
            SpinnerColumn(style="cyan"),
            TextColumn("[bold blue]{task.fields[service]:<10}", justify="left"),
            BarColumn(bar_width=None, complete_style="green", finished_style="green"),
            TaskProgressColumn(show_speed=False),
            TimeElapsedColumn(),
            TextColumn("[green]✓{task.fields[success]:>3}", justify="right"),
            TextColumn("[red]✗{task.fields[failed]:>3}", justify="right"),
            console=self.console,
            transient=True,
            refresh_per_second=12,
            expand=True,
        )
        try:
            self._progress.__enter__()
        except LiveError:
            # Another live display owns the console
            self.enabled = False
            self._progress = None
            return
        for service in services:
            self._task_ids[service] = self._progress.add_task(
                service.label,
                total=total,
                service=service.display_name,
                success=0,
                failed=0,
            )

    def advance(self, outcome: BatchOutcome) -> None:
        state = self.states.get(outcome.service)
        if state is None:
            raise RuntimeError("BatchProgress.start must be called before advance")
        if outcome.ok:
            state.success += 1
        else:
            state.failed += 1
        task_id = self._task_ids.get(outcome.service)
        if self._progress is not None and task_id is not None:
            self._progress.update(task_id, advance=1, success=state.success, failed=state.failed)

    def close(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress.__exit__(None, None, None)
            self._progress = None
        self._task_ids.clear()

    def summary(self) -> dict[str, dict[str, int]]:
        return {
            service.value: {"total": state.total, "success": state.success, "failed": state.failed}
            for service, state in self.states.items()
        }


class ProgressActivity:
    """Indeterminate activity indicator using Rich Status spinner."""

    def __init__(self, enabled: bool = True, console: Console | None = None) -> None:
        self.enabled = enabled
        self.console = console or Console(stderr=True)
        self._status: Status | None = None

    def start(self, message: str) -> None:
        if not self.enabled or self._status is not None:
            return
        self._status = self.console.status(message)
        self._status.start()

    def update(self, message: str) -> None:
        if self._status is not None:
            self._status.update(message)

    def close(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None


__all__ = ["BatchProgress", "ProgressActivity", "ProgressState"]
