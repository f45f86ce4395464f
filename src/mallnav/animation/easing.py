"""Easing curves for the scanner indicator sweep.

All functions map normalized time t (0.0 to 1.0) to a normalized value.
"""

from enum import Enum, auto
from typing import Callable
import math


class Easing(Enum):
    """Available easing curves."""

    LINEAR = auto()
    EASE_IN_QUAD = auto()
    EASE_OUT_QUAD = auto()
    EASE_IN_OUT_QUAD = auto()
    EASE_OUT_CUBIC = auto()
    EASE_IN_OUT_CUBIC = auto()
    EASE_IN_OUT_SINE = auto()


EasingFunc = Callable[[float], float]


def linear(t: float) -> float:
    return t


def ease_in_quad(t: float) -> float:
    return t * t


def ease_out_quad(t: float) -> float:
    return 1 - (1 - t) * (1 - t)


def ease_in_out_quad(t: float) -> float:
    if t < 0.5:
        return 2 * t * t
    return 1 - pow(-2 * t + 2, 2) / 2


def ease_out_cubic(t: float) -> float:
    return 1 - pow(1 - t, 3)


def ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4 * t * t * t
    return 1 - pow(-2 * t + 2, 3) / 2


def ease_in_out_sine(t: float) -> float:
    return -(math.cos(math.pi * t) - 1) / 2


_EASING_FUNCTIONS: dict[Easing, EasingFunc] = {
    Easing.LINEAR: linear,
    Easing.EASE_IN_QUAD: ease_in_quad,
    Easing.EASE_OUT_QUAD: ease_out_quad,
    Easing.EASE_IN_OUT_QUAD: ease_in_out_quad,
    Easing.EASE_OUT_CUBIC: ease_out_cubic,
    Easing.EASE_IN_OUT_CUBIC: ease_in_out_cubic,
    Easing.EASE_IN_OUT_SINE: ease_in_out_sine,
}


def get_easing(easing: Easing | str) -> EasingFunc:
    """Look up an easing function by enum or name (e.g. "ease_out_cubic").

    Raises:
        ValueError: If the name is not recognized
    """
    if isinstance(easing, str):
        try:
            easing = Easing[easing.upper()]
        except KeyError:
            raise ValueError(f"Unknown easing function: {easing}") from None
    return _EASING_FUNCTIONS[easing]


def lerp(start: float, end: float, t: float) -> float:
    """Unclamped linear interpolation."""
    return start + (end - start) * t


def interpolate(start: float, end: float, t: float, easing: Easing | str = Easing.LINEAR) -> float:
    """Interpolate between two values with t clamped to [0, 1]."""
    eased_t = get_easing(easing)(max(0.0, min(1.0, t)))
    return lerp(start, end, eased_t)
