from __future__ import annotations

import pytest
from pydantic import ValidationError

from mallnav.app import indicator_config_from
from mallnav.config.settings import Settings, get_settings
from mallnav.flow.destinations import DEFAULT_DESTINATIONS


def test_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.is_simulator
    assert settings.flow.scan_duration_s == pytest.approx(5.0)
    assert settings.flow.notification_duration_s == pytest.approx(3.0)
    assert settings.flow.destinations == DEFAULT_DESTINATIONS
    assert settings.flow.destinations[3] == "Meeting room 2"
    assert settings.navigation.map_code


def test_env_overrides_nested_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MALLNAV_ENV", "headless")
    monkeypatch.setenv("MALLNAV_FLOW__SCAN_DURATION_S", "2.5")
    monkeypatch.setenv("MALLNAV_NAVIGATION__MAP_CODE", "level-2")
    monkeypatch.setenv("MALLNAV_SCAN_INDICATOR__EASING", "ease_in_out_sine")

    settings = Settings(_env_file=None)

    assert settings.is_headless
    assert settings.flow.scan_duration_s == pytest.approx(2.5)
    assert settings.navigation.map_code == "level-2"
    assert settings.scan_indicator.easing == "ease_in_out_sine"


def test_destination_table_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MALLNAV_FLOW__DESTINATIONS", '{"1": "Cinema", "2": "Pharmacy"}')

    settings = Settings(_env_file=None)

    assert settings.flow.destinations == {1: "Cinema", 2: "Pharmacy"}


def test_rejects_non_positive_scan_duration(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MALLNAV_FLOW__SCAN_DURATION_S", "0")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_get_settings_is_cached() -> None:
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()


def test_indicator_times_are_converted_to_ms() -> None:
    settings = Settings(_env_file=None)

    config = indicator_config_from(settings)

    assert config.sweep_duration_ms == pytest.approx(500.0)
    assert config.edge_pause_ms == pytest.approx(100.0)
    assert config.trail_delays == pytest.approx((0.05, 0.10, 0.15))
    assert config.top == pytest.approx(-10.0)
    assert config.bottom == pytest.approx(610.0)
