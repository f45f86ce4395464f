from __future__ import annotations

from typing import List

import pytest

from mallnav.app import MallNavApp
from mallnav.config.settings import Settings
from mallnav.core.events import Event, EventType


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def app(settings: Settings) -> MallNavApp:
    app = MallNavApp(settings)
    app.start()
    yield app
    app.stop()


@pytest.fixture
def notifications(app: MallNavApp) -> List[Event]:
    """NOTIFICATION events emitted by the flow."""
    events: List[Event] = []
    app.event_bus.subscribe(EventType.NOTIFICATION, events.append)
    return events


@pytest.fixture
def advance(app: MallNavApp):
    """Advance the app by total_ms in fixed steps."""

    def _advance(total_ms: float, step_ms: float = 100.0) -> None:
        elapsed = 0.0
        while elapsed < total_ms:
            step = min(step_ms, total_ms - elapsed)
            app.tick(step)
            elapsed += step

    return _advance
