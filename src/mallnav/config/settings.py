"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
Nested values use a double underscore, e.g. MALLNAV_FLOW__SCAN_DURATION_S=3.
"""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mallnav.flow.destinations import DEFAULT_DESTINATIONS


class PoiSettings(BaseModel):
    """One point of interest on the simulated venue map."""

    poi_id: str
    name: str
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


# Emergency exit is deliberately not on the map: selecting it exercises
# the "destination unavailable" path.
DEFAULT_MAP: list[PoiSettings] = [
    PoiSettings(poi_id="poi-entrance", name="Main entrance", x=2.0, z=3.0),
    PoiSettings(poi_id="poi-meeting-1", name="Meeting room 1", x=14.0, z=22.0),
    PoiSettings(poi_id="poi-meeting-2", name="Meeting room 2", x=18.0, z=24.0),
    PoiSettings(poi_id="poi-food-court", name="Food court", x=-30.0, z=40.0),
    PoiSettings(poi_id="poi-restrooms", name="Restrooms", x=6.0, z=-12.0),
    PoiSettings(poi_id="poi-info", name="Information desk", x=4.0, z=8.0),
    PoiSettings(poi_id="poi-cinema", name="Cinema", x=-55.0, y=6.0, z=70.0),
    PoiSettings(poi_id="poi-pharmacy", name="Pharmacy", x=25.0, z=-18.0),
    PoiSettings(poi_id="poi-supermarket", name="Supermarket", x=60.0, z=10.0),
    PoiSettings(poi_id="poi-electronics", name="Electronics store", x=40.0, y=6.0, z=35.0),
    PoiSettings(poi_id="poi-elevators", name="Elevators", x=0.0, z=15.0),
    PoiSettings(poi_id="poi-parking", name="Parking lot", x=-20.0, y=-4.0, z=-45.0),
]


class FlowSettings(BaseModel):
    """Page flow timing and the destination table."""

    scan_duration_s: float = Field(default=5.0, gt=0.0)
    notification_duration_s: float = Field(default=3.0, gt=0.0)
    destinations: dict[int, str] = Field(default_factory=lambda: dict(DEFAULT_DESTINATIONS))


class ScanIndicatorSettings(BaseModel):
    """Scanner line geometry (in view units) and timing."""

    top: float = -10.0
    bottom: float = 610.0
    glow_margin: float = 5.0
    sweep_duration_s: float = Field(default=0.5, gt=0.0)
    edge_pause_s: float = Field(default=0.1, ge=0.0)
    trail_delays: list[float] = Field(default=[0.05, 0.10, 0.15])
    glow_delay: float = Field(default=0.02, ge=0.0, le=1.0)
    edge_window: float = Field(default=0.05, gt=0.0, lt=0.5)
    edge_overshoot: float = 5.0
    easing: str = "linear"


class NavigationSettings(BaseModel):
    """Simulated navigation subsystem."""

    map_code: str = "mall-level-1"
    auto_localize: bool = True
    walking_speed_mps: float = Field(default=1.2, gt=0.0)
    arrival_threshold_m: float = Field(default=1.0, ge=0.0)
    arrival_message_s: float = Field(default=3.0, gt=0.0)
    start_position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    points_of_interest: list[PoiSettings] = Field(default_factory=lambda: list(DEFAULT_MAP))


class DisplaySettings(BaseModel):
    """Simulator window."""

    window_width: int = 960
    window_height: int = 720
    fullscreen: bool = False
    fps: int = 60

    # Scanner view raster (rows map to the indicator's top..bottom range)
    scanner_width: int = 320
    scanner_height: int = 320


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="MALLNAV_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Environment
    env: Literal["simulator", "headless"] = "simulator"
    debug: bool = False

    # Headless demo tour
    demo_destination: int = 3
    headless_max_seconds: float = Field(default=120.0, gt=0.0)

    # Nested settings
    flow: FlowSettings = Field(default_factory=FlowSettings)
    scan_indicator: ScanIndicatorSettings = Field(default_factory=ScanIndicatorSettings)
    navigation: NavigationSettings = Field(default_factory=NavigationSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)

    @property
    def is_simulator(self) -> bool:
        return self.env == "simulator"

    @property
    def is_headless(self) -> bool:
        return self.env == "headless"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
