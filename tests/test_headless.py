from __future__ import annotations

import asyncio

import numpy as np
import pytest

from mallnav.animation.scan_indicator import ScanIndicatorConfig, SweepPhase, sweep_frame
from mallnav.app import MallNavApp
from mallnav.config.settings import Settings
from mallnav.core.events import EventType, tick_event
from mallnav.core.state import Page
from mallnav.navigation.subsystem import ARRIVED_MESSAGE
from mallnav.scanning.base import ScanState
from mallnav.simulator.headless import HeadlessConfig, HeadlessRunner
from mallnav.simulator.scanner_view import ScannerView


def run_tour(destination_id: int, **overrides) -> tuple:
    settings = Settings(_env_file=None)
    for key, value in overrides.items():
        setattr(settings.flow, key, value)
    app = MallNavApp(settings)
    runner = HeadlessRunner(app, HeadlessConfig(destination_id=destination_id, max_seconds=60.0))
    result = asyncio.run(runner.run())
    return app, result


class TestHeadlessTour:
    def test_tour_arrives(self) -> None:
        app, result = run_tour(3)

        assert result.arrived is True
        assert result.end_reason == "arrived"
        assert result.pages == ["READY_TO_GO", "SCANNING", "NAVIGATING", "DESTINATION_LIST"]
        assert result.notifications == [ARRIVED_MESSAGE]
        # 5s scan plus roughly 25s of walking
        assert 25.0 < result.elapsed_s < 35.0
        assert app.controller.page == Page.DESTINATION_LIST
        assert app.handoff.publish_count == 1

    def test_short_scan(self) -> None:
        _, slow = run_tour(3)
        _, fast = run_tour(3, scan_duration_s=1.0)

        assert fast.arrived
        assert slow.elapsed_s - fast.elapsed_s == pytest.approx(4.0, abs=0.1)

    def test_unavailable_destination_ends_early(self) -> None:
        app, result = run_tour(13)

        assert result.arrived is False
        assert result.completed is False
        assert result.frames == 0
        assert result.pages == []
        assert len(result.notifications) == 1
        assert "not available" in result.notifications[0]
        assert app.controller.page == Page.DESTINATION_LIST


class TestMallNavApp:
    def test_ticks_from_the_bus_drive_the_flow(self) -> None:
        app = MallNavApp(Settings(_env_file=None))
        app.start()
        app.controller.select_destination(1)
        app.controller.confirm_ready()

        for frame in range(60):
            app.event_bus.emit(tick_event(0.1, frame))

        assert app.frame_count == 60
        assert app.controller.page == Page.NAVIGATING
        started = app.event_bus.get_history(EventType.NAVIGATION_STARTED)
        assert started[0].data["name"] == "Main entrance"

    def test_start_localizes(self) -> None:
        app = MallNavApp(Settings(_env_file=None))
        app.start()

        assert app.navigation.is_localized
        assert len(app.event_bus.get_history(EventType.LOCALIZED)) == 1

    def test_stop_cancels_running_scan(self) -> None:
        app = MallNavApp(Settings(_env_file=None))
        app.start()
        app.controller.select_destination(3)
        app.controller.confirm_ready()

        app.stop()
        app.tick(10000)

        assert app.controller.scan_completions == 0
        assert app.scheduler.task_count == 0
        assert app.controller.page == Page.DESTINATION_LIST
        assert app.controller.scan_indicator is None
        assert app.controller.scan_state == ScanState.CANCELLED


class TestScannerView:
    def test_line_row_is_brightest(self) -> None:
        view = ScannerView(width=8, height=63, top=-10.0, bottom=610.0)
        frame = sweep_frame(ScanIndicatorConfig(), SweepPhase.SWEEP_DOWN, 0.5)

        view.draw(frame)
        buffer = view.get_buffer()

        assert buffer.shape == (63, 8, 3)
        assert buffer.dtype == np.uint8
        line_row = view.row_for(frame.line)
        assert line_row == 31
        assert tuple(buffer[line_row, 0]) == ScannerView.LINE_COLOR
        assert buffer[line_row].sum() == buffer.sum(axis=(1, 2)).max()

    def test_positions_outside_range_are_clamped(self) -> None:
        view = ScannerView(width=4, height=10, top=0.0, bottom=100.0)
        assert view.row_for(-50.0) == 0
        assert view.row_for(500.0) == 9

    def test_none_frame_blanks_the_view(self) -> None:
        view = ScannerView(width=4, height=10)
        view.draw(sweep_frame(ScanIndicatorConfig(), SweepPhase.SWEEP_UP, 0.3))

        view.draw(None)

        assert view.frame is None
        assert not view.get_buffer().any()

    def test_follows_a_running_indicator(self) -> None:
        view = ScannerView(width=4, height=32)
        app = MallNavApp(Settings(_env_file=None), indicator_listener=view.draw)
        app.start()
        app.controller.select_destination(3)
        app.controller.confirm_ready()

        app.tick(250)
        assert view.frame is not None
        assert view.get_buffer().any()

        app.controller.cancel_to_list()
        assert view.frame is None
