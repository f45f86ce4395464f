"""Navigation boundary: POIs, the handoff slot and the subsystem contract."""

from .poi import PointOfInterest, PointOfInterestRegistry
from .handoff import HandoffState, NavigationHandoff
from .subsystem import (
    ARRIVED_MESSAGE,
    NavigationEndReason,
    NavigationStatus,
    NavigationSubsystem,
    SimulatedNavigationSubsystem,
)

__all__ = [
    "PointOfInterest",
    "PointOfInterestRegistry",
    "HandoffState",
    "NavigationHandoff",
    "ARRIVED_MESSAGE",
    "NavigationEndReason",
    "NavigationStatus",
    "NavigationSubsystem",
    "SimulatedNavigationSubsystem",
]
