"""
Headless runner.

Plays a scripted tour through the page flow without a window: pick a
destination, press GO, let the scan finish and walk until navigation ends.
Ticks use a fixed step so a run is deterministic.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from mallnav.app import MallNavApp
from mallnav.core.events import (
    Event,
    EventType,
    confirm_event,
    select_destination_event,
    tick_event,
)
from mallnav.core.state import Page

logger = logging.getLogger(__name__)


@dataclass
class HeadlessConfig:
    """Headless tour configuration."""
    destination_id: int = 3
    step_ms: float = 50.0
    max_seconds: float = 120.0


@dataclass
class TourResult:
    """What happened during one tour."""
    destination_id: int
    pages: List[str] = field(default_factory=list)
    notifications: List[str] = field(default_factory=list)
    arrived: bool = False
    end_reason: Optional[str] = None
    frames: int = 0
    elapsed_s: float = 0.0

    @property
    def completed(self) -> bool:
        return self.end_reason is not None


class HeadlessRunner:
    """Drives a MallNavApp through the event bus with a fixed tick."""

    def __init__(self, app: MallNavApp, config: Optional[HeadlessConfig] = None) -> None:
        self.app = app
        self.config = config or HeadlessConfig()
        self._running = False
        self._result: Optional[TourResult] = None

    @property
    def result(self) -> Optional[TourResult]:
        return self._result

    def stop(self) -> None:
        self._running = False

    async def run(self) -> TourResult:
        """Run the tour and return what happened."""
        result = TourResult(destination_id=self.config.destination_id)
        self._result = result
        bus = self.app.event_bus

        def on_page(event: Event) -> None:
            result.pages.append(event.data["to"])

        def on_ended(event: Event) -> None:
            result.end_reason = event.data.get("reason")
            result.arrived = result.end_reason == "arrived"

        toasts_before = self.app.notifier.shown_count

        unsubscribers = [
            bus.subscribe(EventType.PAGE_CHANGED, on_page),
            bus.subscribe(EventType.NAVIGATION_ENDED, on_ended),
        ]

        self.app.start()
        logger.info(f"Headless tour to destination {self.config.destination_id}")

        bus.queue_event(select_destination_event(self.config.destination_id, source="headless"))
        await bus.process_queue()
        if self.app.controller.page == Page.READY_TO_GO:
            bus.queue_event(confirm_event(source="headless"))
            await bus.process_queue()
        else:
            logger.warning("Destination was not accepted; ending tour")

        max_frames = int(self.config.max_seconds * 1000.0 / self.config.step_ms)
        self._running = self.app.controller.page == Page.SCANNING
        try:
            while self._running and result.frames < max_frames:
                bus.emit(tick_event(self.config.step_ms / 1000.0, result.frames))
                await bus.process_queue()
                result.frames += 1

                if result.completed:
                    break

                # Yield to other tasks
                await asyncio.sleep(0)
        finally:
            for unsubscribe in unsubscribers:
                unsubscribe()

        new_toasts = self.app.notifier.shown_count - toasts_before
        history = self.app.notifier.history
        result.notifications = [n.message for n in history[max(0, len(history) - new_toasts):]]

        result.elapsed_s = result.frames * self.config.step_ms / 1000.0
        if not result.completed and self._running:
            logger.warning(f"Tour gave up after {result.elapsed_s:.1f}s")
        logger.info(
            f"Tour finished: arrived={result.arrived} "
            f"after {result.elapsed_s:.1f}s ({result.frames} frames)"
        )
        self._running = False
        return result
