"""
Abstract scanner interface.

The flow controller only relies on this contract, so the timed simulation
can be replaced by a real QR/sensor scanner without touching the flow.
"""

from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Callable


class ScanState(Enum):
    """State of the current (or last) scan."""
    IDLE = auto()
    RUNNING = auto()
    COMPLETED = auto()
    CANCELLED = auto()


class ScanHandle(ABC):
    """Handle to a single scan run."""

    @property
    @abstractmethod
    def state(self) -> ScanState:
        ...

    @abstractmethod
    def cancel(self) -> bool:
        """Cancel the run. Idempotent; a no-op after completion."""
        ...


class Scanner(ABC):
    """
    Single-shot, cancellable scan operation.

    Contract:
        - start() returns a handle; exactly one of on_complete (called once)
          or nothing (cancelled first) happens for that run.
        - cancel() is idempotent and safe after completion.
        - start() while running cancels the previous run first.
    """

    @property
    @abstractmethod
    def state(self) -> ScanState:
        """State of the most recent run (IDLE before the first)."""
        ...

    @property
    def is_running(self) -> bool:
        return self.state == ScanState.RUNNING

    @abstractmethod
    def start(self, duration_s: float, on_complete: Callable[[], None]) -> ScanHandle:
        """Begin a scan that reports completion after duration_s."""
        ...

    @abstractmethod
    def cancel(self) -> bool:
        """Cancel the running scan, if any."""
        ...
