from __future__ import annotations

from typing import List

import pytest

from mallnav.core.tasks import TaskScheduler
from mallnav.notifications import Notification, ToastNotifier
from mallnav.scanning.base import ScanState
from mallnav.scanning.process import ScanProcess


class TestScanProcess:
    def test_completes_once_after_duration(self) -> None:
        scheduler = TaskScheduler()
        scanner = ScanProcess(scheduler)
        completions: List[int] = []

        assert scanner.state == ScanState.IDLE
        scanner.start(2.0, lambda: completions.append(1))
        assert scanner.is_running

        for _ in range(19):
            scheduler.update(100)
        assert completions == []
        assert scanner.progress == pytest.approx(0.95)

        scheduler.update(100)
        scheduler.update(100)

        assert completions == [1]
        assert scanner.state == ScanState.COMPLETED
        assert scanner.cancel() is False

    def test_cancel_prevents_completion(self) -> None:
        scheduler = TaskScheduler()
        scanner = ScanProcess(scheduler)
        completions: List[int] = []
        run = scanner.start(1.0, lambda: completions.append(1))
        scheduler.update(500)

        assert scanner.cancel() is True
        assert scanner.cancel() is False
        scheduler.update(5000)

        assert completions == []
        assert run.state == ScanState.CANCELLED
        assert scheduler.task_count == 0

    def test_restart_cancels_previous_run(self) -> None:
        scheduler = TaskScheduler()
        scanner = ScanProcess(scheduler)
        done: List[str] = []
        first = scanner.start(1.0, lambda: done.append("first"))
        second = scanner.start(1.0, lambda: done.append("second"))

        scheduler.update(1000)

        assert first.state == ScanState.CANCELLED
        assert second.state == ScanState.COMPLETED
        assert done == ["second"]

    def test_scanners_sharing_a_scheduler_do_not_collide(self) -> None:
        scheduler = TaskScheduler()
        done: List[str] = []
        first = ScanProcess(scheduler)
        second = ScanProcess(scheduler)

        run_a = first.start(1.0, lambda: done.append("a"))
        run_b = second.start(1.0, lambda: done.append("b"))
        assert run_a.name != run_b.name

        scheduler.update(1000)

        assert sorted(done) == ["a", "b"]
        assert first.state == ScanState.COMPLETED
        assert second.state == ScanState.COMPLETED

    def test_duration_must_be_positive(self) -> None:
        scanner = ScanProcess(TaskScheduler())
        with pytest.raises(ValueError):
            scanner.start(0, lambda: None)


class TestToastNotifier:
    def test_toast_expires_after_duration(self) -> None:
        scheduler = TaskScheduler()
        notifier = ToastNotifier(scheduler)
        cleared: List[bool] = []
        notifier.on_clear(lambda: cleared.append(True))

        notifier.show("Hello", 1.0)
        assert notifier.current == Notification("Hello", 1.0)

        scheduler.update(900)
        assert notifier.is_visible
        scheduler.update(100)

        assert notifier.current is None
        assert cleared == [True]

    def test_new_toast_replaces_and_restarts(self) -> None:
        scheduler = TaskScheduler()
        notifier = ToastNotifier(scheduler)
        notifier.show("first", 1.0)
        scheduler.update(800)

        notifier.show("second", 1.0)
        scheduler.update(800)

        assert notifier.current.message == "second"
        assert [n.message for n in notifier.history] == ["first", "second"]

    def test_history_is_bounded(self) -> None:
        notifier = ToastNotifier(TaskScheduler(), history_limit=3)
        for i in range(1000):
            notifier.show(f"message {i}", 1.0)

        assert [n.message for n in notifier.history] == ["message 997", "message 998", "message 999"]
        assert notifier.shown_count == 1000

    def test_show_does_not_block(self) -> None:
        notifier = ToastNotifier(TaskScheduler())
        shown: List[Notification] = []
        notifier.on_show(shown.append)

        notifier.show("Hi", 30.0)

        assert shown == [Notification("Hi", 30.0)]

    def test_clear_early(self) -> None:
        scheduler = TaskScheduler()
        notifier = ToastNotifier(scheduler)
        notifier.show("Hi", 3.0)

        notifier.clear()

        assert notifier.current is None
        assert scheduler.task_count == 0

    def test_duration_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            ToastNotifier(TaskScheduler()).show("x", 0)
