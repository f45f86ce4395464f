"""Configuration for MALLNAV."""

from .settings import (
    DisplaySettings,
    FlowSettings,
    NavigationSettings,
    PoiSettings,
    ScanIndicatorSettings,
    Settings,
    get_settings,
)

__all__ = [
    "DisplaySettings",
    "FlowSettings",
    "NavigationSettings",
    "PoiSettings",
    "ScanIndicatorSettings",
    "Settings",
    "get_settings",
]
