"""Animation module for MALLNAV."""

from mallnav.animation.easing import Easing, get_easing, interpolate, lerp
from mallnav.animation.scan_indicator import (
    ScanIndicatorAnimator,
    ScanIndicatorConfig,
    ScanIndicatorFrame,
    SweepPhase,
    apply_edge_stick,
    sweep_frame,
)

__all__ = [
    # Easing
    "Easing",
    "get_easing",
    "interpolate",
    "lerp",
    # Scanner indicator
    "ScanIndicatorAnimator",
    "ScanIndicatorConfig",
    "ScanIndicatorFrame",
    "SweepPhase",
    "apply_edge_stick",
    "sweep_frame",
]
