"""Scanning indicator animation: a sweep line with glow and afterimages.

The indicator sweeps down, pauses, sweeps up, pauses, and repeats for as
long as the scan it belongs to is running. Trails replay the same sweep a
little behind the line; the glow band follows on a slightly wider range.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Optional, Tuple
import logging

import numpy as np

from mallnav.animation.easing import Easing, get_easing, interpolate, lerp
from mallnav.core.tasks import CooperativeTask, TaskPriority

logger = logging.getLogger(__name__)


class SweepPhase(Enum):
    """Phases of one indicator cycle."""

    SWEEP_DOWN = auto()
    PAUSE_BOTTOM = auto()
    SWEEP_UP = auto()
    PAUSE_TOP = auto()


_NEXT_PHASE = {
    SweepPhase.SWEEP_DOWN: SweepPhase.PAUSE_BOTTOM,
    SweepPhase.PAUSE_BOTTOM: SweepPhase.SWEEP_UP,
    SweepPhase.SWEEP_UP: SweepPhase.PAUSE_TOP,
    SweepPhase.PAUSE_TOP: SweepPhase.SWEEP_DOWN,
}


@dataclass
class ScanIndicatorConfig:
    """Geometry and timing of the indicator.

    Attributes:
        top: Line position at the top edge
        bottom: Line position at the bottom edge
        glow_margin: How far the glow band reaches past each edge
        sweep_duration_ms: Duration of one sweep (down or up)
        edge_pause_ms: Pause at each edge between sweeps
        trail_delays: Phase lag of each afterimage, as a fraction of a sweep
        glow_delay: Phase lag of the glow band
        edge_window: Fraction of a sweep at each end with edge correction
        edge_overshoot: How far the line settles past the edge at the end
        easing: Easing curve for every sweep
    """

    top: float = -10.0
    bottom: float = 610.0
    glow_margin: float = 5.0
    sweep_duration_ms: float = 500.0
    edge_pause_ms: float = 100.0
    trail_delays: Tuple[float, ...] = (0.05, 0.10, 0.15)
    glow_delay: float = 0.02
    edge_window: float = 0.05
    edge_overshoot: float = 5.0
    easing: Easing | str = Easing.LINEAR

    def __post_init__(self):
        if self.sweep_duration_ms <= 0:
            raise ValueError("sweep_duration_ms must be positive")
        if self.edge_pause_ms < 0:
            raise ValueError("edge_pause_ms must be non-negative")
        if not 0 < self.edge_window < 0.5:
            raise ValueError("edge_window must be between 0 and 0.5")
        get_easing(self.easing)


@dataclass(frozen=True)
class ScanIndicatorFrame:
    """Positions to draw for one frame."""

    phase: SweepPhase
    progress: float
    line: float
    glow: float
    trails: Tuple[float, ...] = field(default_factory=tuple)

    @property
    def direction(self) -> int:
        """+1 while sweeping down, -1 while sweeping up."""
        return -1 if self.phase == SweepPhase.SWEEP_UP else 1


FrameListener = Callable[[Optional[ScanIndicatorFrame]], None]


def apply_edge_stick(
    position: float,
    t: float,
    origin: float,
    direction: float,
    window: float = 0.05,
    overshoot: float = 5.0,
) -> float:
    """Soften the line at both ends of a sweep.

    Near t=0 the line eases out of the sweep origin instead of jumping to
    the interpolated position; near t=1 it settles up to ``overshoot`` units
    past the target in the direction of travel.
    """
    if t < window:
        return lerp(origin, position, t / window)
    if t > 1.0 - window:
        settle = min(1.0, (t - (1.0 - window)) / window)
        return lerp(position, position + overshoot * direction, settle)
    return position


def sweep_frame(
    config: ScanIndicatorConfig,
    phase: SweepPhase,
    t: float,
) -> ScanIndicatorFrame:
    """Compute indicator positions for a sweep phase at progress t."""
    t = max(0.0, min(1.0, t))
    if phase == SweepPhase.SWEEP_UP:
        start, end = config.bottom, config.top
        glow_start, glow_end = config.bottom + config.glow_margin, config.top - config.glow_margin
    else:
        start, end = config.top, config.bottom
        glow_start, glow_end = config.top - config.glow_margin, config.bottom + config.glow_margin
    direction = 1.0 if end >= start else -1.0

    line = apply_edge_stick(
        interpolate(start, end, t, config.easing),
        t,
        origin=start,
        direction=direction,
        window=config.edge_window,
        overshoot=config.edge_overshoot,
    )

    lagged = np.clip(t - np.asarray(config.trail_delays, dtype=float), 0.0, 1.0)
    trails = tuple(interpolate(start, end, float(lag), config.easing) for lag in lagged)
    glow = interpolate(glow_start, glow_end, max(0.0, t - config.glow_delay), config.easing)

    return ScanIndicatorFrame(phase=phase, progress=t, line=line, glow=glow, trails=trails)


class ScanIndicatorAnimator(CooperativeTask):
    """Endless sweep loop bound to a running scan.

    The loop never finishes by itself; the owner stops it when the scan it
    mirrors completes or is cancelled. After ``stop()`` the listener gets a
    ``None`` frame so the view can drop any positioned elements.
    """

    priority = TaskPriority.ANIMATION

    def __init__(
        self,
        config: Optional[ScanIndicatorConfig] = None,
        listener: Optional[FrameListener] = None,
        name: str = "scan_indicator",
    ):
        super().__init__(name)
        self.config = config or ScanIndicatorConfig()
        self._listener = listener
        self._phase = SweepPhase.SWEEP_DOWN
        self._phase_elapsed = 0.0
        self._frame: Optional[ScanIndicatorFrame] = None
        self._frames_drawn = 0
        self._cycles = 0

    @property
    def phase(self) -> SweepPhase:
        return self._phase

    @property
    def frame(self) -> Optional[ScanIndicatorFrame]:
        """Last drawn frame, or None when stopped."""
        return self._frame

    @property
    def frames_drawn(self) -> int:
        return self._frames_drawn

    @property
    def cycles(self) -> int:
        """Completed down-and-up cycles."""
        return self._cycles

    def stop(self) -> bool:
        """Halt the loop; safe to call repeatedly."""
        return self.cancel()

    def advance(self, delta_ms: float) -> bool:
        self._phase_elapsed += delta_ms

        # Large deltas may skip through several phases
        while self._phase_elapsed >= self._phase_length(self._phase):
            if self._phase in (SweepPhase.SWEEP_DOWN, SweepPhase.SWEEP_UP):
                # Land on the edge before leaving the sweep
                self._draw(sweep_frame(self.config, self._phase, 1.0))
            self._phase_elapsed -= self._phase_length(self._phase)
            if self._phase == SweepPhase.PAUSE_TOP:
                self._cycles += 1
            self._phase = _NEXT_PHASE[self._phase]

        if self._phase in (SweepPhase.SWEEP_DOWN, SweepPhase.SWEEP_UP):
            t = self._phase_elapsed / self.config.sweep_duration_ms
            self._draw(sweep_frame(self.config, self._phase, t))
        return False

    def on_cancel(self) -> None:
        self._frame = None
        logger.debug(f"Scan indicator stopped after {self._frames_drawn} frames")
        if self._listener:
            self._listener(None)

    def _phase_length(self, phase: SweepPhase) -> float:
        if phase in (SweepPhase.SWEEP_DOWN, SweepPhase.SWEEP_UP):
            return self.config.sweep_duration_ms
        return self.config.edge_pause_ms

    def _draw(self, frame: ScanIndicatorFrame) -> None:
        self._frame = frame
        self._frames_drawn += 1
        if self._listener:
            self._listener(frame)
