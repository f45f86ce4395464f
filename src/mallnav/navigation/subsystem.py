"""
AR navigation subsystem boundary.

The real subsystem (localization, path rendering) lives outside this
package. ``NavigationSubsystem`` is the contract the page flow talks to;
``SimulatedNavigationSubsystem`` walks a virtual user toward the target so
the whole flow can run on a desktop or headless.
"""

from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Callable, Iterable, List, Optional, Sequence
import logging

from mallnav.navigation.handoff import NavigationHandoff
from mallnav.navigation.poi import PointOfInterest, Position
from mallnav.notifications import NotificationChannel

logger = logging.getLogger(__name__)

ARRIVED_MESSAGE = "You arrived at the destination!"


class NavigationEndReason(str, Enum):
    ARRIVED = "arrived"
    STOPPED = "stopped"


class NavigationStatus(Enum):
    INACTIVE = auto()
    IDLE = auto()
    NAVIGATING = auto()


class NavigationSubsystem(ABC):
    """What the page flow needs from the navigation side."""

    @property
    @abstractmethod
    def is_active(self) -> bool:
        ...

    @property
    @abstractmethod
    def points_of_interest(self) -> Sequence[PointOfInterest]:
        """Live POIs; empty until the map is localized."""
        ...

    @abstractmethod
    def activate(self) -> None:
        """Bring the subsystem up. Must consume the handoff first."""
        ...

    @abstractmethod
    def deactivate(self) -> None:
        ...

    def update(self, delta_ms: float) -> None:
        """Per-frame update. Optional."""


class SimulatedNavigationSubsystem(NavigationSubsystem):
    """
    Desktop stand-in for AR navigation.

    Localization loads the configured map; activation consumes the handoff
    and starts walking toward the target at a fixed speed. Arrival or a
    user stop ends navigation and is reported through the ended callback.
    """

    def __init__(
        self,
        handoff: NavigationHandoff,
        notifier: NotificationChannel,
        *,
        map_code: str = "",
        map_points: Iterable[PointOfInterest] = (),
        start_position: Position = (0.0, 0.0, 0.0),
        walking_speed_mps: float = 1.2,
        arrival_threshold_m: float = 1.0,
        arrival_message_s: float = 3.0,
    ) -> None:
        if walking_speed_mps <= 0:
            raise ValueError("walking_speed_mps must be positive")
        if arrival_threshold_m < 0:
            raise ValueError("arrival_threshold_m must be non-negative")
        self._handoff = handoff
        self._notifier = notifier
        self.map_code = map_code
        self._map_points = list(map_points)
        self.start_position = start_position
        self.walking_speed_mps = walking_speed_mps
        self.arrival_threshold_m = arrival_threshold_m
        self.arrival_message_s = arrival_message_s

        self._live_points: List[PointOfInterest] = []
        self._status = NavigationStatus.INACTIVE
        self._destination: Optional[PointOfInterest] = None
        self._remaining_m = 0.0
        self._activations = 0
        self._on_navigation_ended: Optional[Callable[[NavigationEndReason], None]] = None
        self._on_navigation_started: Optional[Callable[[PointOfInterest], None]] = None

    # Boundary
    @property
    def is_active(self) -> bool:
        return self._status != NavigationStatus.INACTIVE

    @property
    def points_of_interest(self) -> Sequence[PointOfInterest]:
        return tuple(self._live_points)

    @property
    def is_localized(self) -> bool:
        return bool(self._live_points)

    @property
    def status(self) -> NavigationStatus:
        return self._status

    @property
    def is_navigating(self) -> bool:
        return self._status == NavigationStatus.NAVIGATING

    @property
    def destination(self) -> Optional[PointOfInterest]:
        return self._destination

    @property
    def destination_name(self) -> str:
        return self._destination.name if self.is_navigating and self._destination else ""

    @property
    def remaining_distance_m(self) -> float:
        return self._remaining_m if self.is_navigating else 0.0

    @property
    def remaining_distance_text(self) -> str:
        if not self.is_navigating:
            return ""
        return f"{int(self._remaining_m)} m remaining"

    @property
    def activations(self) -> int:
        return self._activations

    def set_on_navigation_ended(self, callback: Callable[[NavigationEndReason], None]) -> None:
        """Set callback for arrival / user stop."""
        self._on_navigation_ended = callback

    def set_on_navigation_started(self, callback: Callable[[PointOfInterest], None]) -> None:
        self._on_navigation_started = callback

    def localize(self) -> bool:
        """Localize against the configured map and expose its POIs."""
        if not self.map_code:
            logger.error("Map code is not set. Cannot start AR localization.")
            return False
        self._live_points = list(self._map_points)
        logger.info(
            f"Localized on map {self.map_code}: {len(self._live_points)} points of interest"
        )
        return True

    def unload(self) -> None:
        """Drop the live map (e.g. tracking lost)."""
        self._live_points = []
        logger.info("Map unloaded")

    def activate(self) -> None:
        # Read the handoff before anything else so a stale request can't survive
        target = self._handoff.consume()
        self._activations += 1
        self._status = NavigationStatus.IDLE

        if target is None:
            logger.info("Navigation activated without a destination; idling")
            return

        self._destination = target
        self._remaining_m = target.distance_to(self.start_position)
        self._status = NavigationStatus.NAVIGATING
        logger.info(f"Navigating to {target.name} ({self._remaining_m:.1f} m)")
        if self._on_navigation_started:
            self._on_navigation_started(target)

    def deactivate(self) -> None:
        if self._status == NavigationStatus.INACTIVE:
            return
        self._status = NavigationStatus.INACTIVE
        self._destination = None
        self._remaining_m = 0.0
        logger.info("Navigation deactivated")

    def update(self, delta_ms: float) -> None:
        if delta_ms < 0:
            raise ValueError("delta_ms must be non-negative")
        if not self.is_navigating:
            return

        self._remaining_m = max(0.0, self._remaining_m - self.walking_speed_mps * delta_ms / 1000.0)
        if self._remaining_m <= self.arrival_threshold_m:
            logger.info(f"Arrived at {self._destination.name if self._destination else '?'}")
            self._notifier.show(ARRIVED_MESSAGE, self.arrival_message_s)
            self._end(NavigationEndReason.ARRIVED)

    def stop_navigation(self) -> None:
        """User pressed stop."""
        if not self.is_navigating:
            return
        logger.info("Navigation stopped by user")
        self._end(NavigationEndReason.STOPPED)

    def _end(self, reason: NavigationEndReason) -> None:
        self._status = NavigationStatus.IDLE
        self._destination = None
        self._remaining_m = 0.0
        if self._on_navigation_ended:
            self._on_navigation_ended(reason)
