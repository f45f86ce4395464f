"""Timed scan simulation.

Stands in for the QR check-in scan: it does not look at the camera, it
simply completes after a fixed amount of tick time unless cancelled.
"""

from typing import Callable, Optional
import logging

from mallnav.core.tasks import CooperativeTask, TaskPriority, TaskScheduler, TaskState
from mallnav.scanning.base import ScanHandle, ScanState, Scanner

logger = logging.getLogger(__name__)

_STATE_BY_TASK = {
    TaskState.PENDING: ScanState.RUNNING,
    TaskState.RUNNING: ScanState.RUNNING,
    TaskState.FINISHED: ScanState.COMPLETED,
    TaskState.CANCELLED: ScanState.CANCELLED,
}


class ScanRun(CooperativeTask, ScanHandle):
    """One scan run, stepped by the scheduler."""

    priority = TaskPriority.TIMER

    def __init__(self, name: str, duration_ms: float, on_complete: Callable[[], None]):
        super().__init__(name)
        self.duration_ms = duration_ms
        self._on_complete = on_complete
        self._elapsed_ms = 0.0

    @property
    def state(self) -> ScanState:
        return _STATE_BY_TASK[self._state]

    @property
    def elapsed_ms(self) -> float:
        return self._elapsed_ms

    @property
    def progress(self) -> float:
        """Normalized progress (0.0 to 1.0)."""
        return min(1.0, self._elapsed_ms / self.duration_ms)

    def advance(self, delta_ms: float) -> bool:
        self._elapsed_ms += delta_ms
        return self._elapsed_ms >= self.duration_ms

    def on_finish(self) -> None:
        logger.info(f"Scan {self.name} complete after {self._elapsed_ms:.0f}ms")
        self._on_complete()

    def on_cancel(self) -> None:
        logger.info(f"Scan {self.name} cancelled at {self.progress:.0%}")


class ScanProcess(Scanner):
    """Simulated scanner running on the cooperative scheduler."""

    def __init__(self, scheduler: TaskScheduler, group: str = "scan"):
        self._scheduler = scheduler
        self._group = group
        self._run: Optional[ScanRun] = None
        self._runs_started = 0

    @property
    def state(self) -> ScanState:
        if self._run is None:
            return ScanState.IDLE
        return self._run.state

    @property
    def current(self) -> Optional[ScanRun]:
        return self._run

    @property
    def progress(self) -> float:
        return self._run.progress if self._run else 0.0

    def start(self, duration_s: float, on_complete: Callable[[], None]) -> ScanRun:
        if duration_s <= 0:
            raise ValueError("duration_s must be positive")
        if self.is_running:
            logger.debug("Scan restarted while running; cancelling previous run")
            self.cancel()

        self._runs_started += 1
        run = ScanRun(
            # Unique per scanner so two scanners can share a scheduler
            name=f"{self._group}_{id(self):x}_{self._runs_started}",
            duration_ms=duration_s * 1000.0,
            on_complete=on_complete,
        )
        self._run = run
        self._scheduler.schedule(run, group=self._group)
        logger.info(f"Scan {run.name} started ({duration_s:g}s)")
        return run

    def cancel(self) -> bool:
        if self._run is None or not self._run.is_active:
            return False
        self._run.cancel()
        self._scheduler.cancel(self._run.name)
        return True
