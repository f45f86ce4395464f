"""Handoff slot between the page flow and the navigation subsystem."""

from dataclasses import dataclass
from typing import Optional
import logging

from mallnav.navigation.poi import PointOfInterest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HandoffState:
    requested: bool = False
    target: Optional[PointOfInterest] = None


class NavigationHandoff:
    """Consume-once exchange of the destination to navigate to.

    The page flow is the only writer and the navigation subsystem the only
    reader. ``consume`` reads and resets in one step, so a destination is
    never replayed on a later activation.
    """

    def __init__(self) -> None:
        self._state = HandoffState()
        self._publish_count = 0

    @property
    def requested(self) -> bool:
        return self._state.requested

    @property
    def target(self) -> Optional[PointOfInterest]:
        return self._state.target

    @property
    def publish_count(self) -> int:
        return self._publish_count

    def snapshot(self) -> HandoffState:
        return self._state

    def publish(self, target: PointOfInterest) -> None:
        """Request navigation to target. Last write wins."""
        if self._state.requested:
            logger.warning(
                f"Handoff overwritten before it was read: "
                f"{self._state.target.name if self._state.target else None} -> {target.name}"
            )
        self._state = HandoffState(requested=True, target=target)
        self._publish_count += 1
        logger.info(f"Handoff published: {target.name}")

    def consume(self) -> Optional[PointOfInterest]:
        """Take the pending target and reset the slot."""
        state, self._state = self._state, HandoffState()
        if not state.requested:
            return None
        logger.info(f"Handoff consumed: {state.target.name if state.target else None}")
        return state.target
