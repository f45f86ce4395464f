from __future__ import annotations

from typing import List

import pytest

from mallnav.core.tasks import TaskScheduler
from mallnav.navigation.handoff import HandoffState, NavigationHandoff
from mallnav.navigation.poi import PointOfInterest, PointOfInterestRegistry
from mallnav.navigation.subsystem import (
    ARRIVED_MESSAGE,
    NavigationEndReason,
    NavigationStatus,
    SimulatedNavigationSubsystem,
)
from mallnav.notifications import ToastNotifier

CINEMA = PointOfInterest("poi-cinema", "Cinema", (0.0, 0.0, 10.0))
FOOD = PointOfInterest("poi-food", "Food Court", (3.0, 0.0, 4.0))


class TestRegistry:
    def test_case_insensitive_exact_match(self) -> None:
        registry = PointOfInterestRegistry(lambda: [CINEMA, FOOD])

        assert registry.find_by_name("food court") is FOOD
        assert registry.find_by_name("CINEMA") is CINEMA
        assert registry.find_by_name("Food") is None

    def test_source_is_queried_every_time(self) -> None:
        live: List[PointOfInterest] = []
        registry = PointOfInterestRegistry(lambda: live)

        assert registry.find_by_name("Cinema") is None
        live.append(CINEMA)
        assert registry.find_by_name("Cinema") is CINEMA
        assert len(registry) == 1
        assert registry.names() == ["Cinema"]

    def test_distance(self) -> None:
        assert FOOD.distance_to((0.0, 0.0, 0.0)) == pytest.approx(5.0)


class TestHandoff:
    def test_initial_state(self) -> None:
        handoff = NavigationHandoff()
        assert handoff.snapshot() == HandoffState(requested=False, target=None)

    def test_consume_resets(self) -> None:
        handoff = NavigationHandoff()
        handoff.publish(CINEMA)

        assert handoff.snapshot() == HandoffState(True, CINEMA)
        assert handoff.consume() is CINEMA
        assert handoff.consume() is None
        assert handoff.requested is False

    def test_last_write_wins(self) -> None:
        handoff = NavigationHandoff()
        handoff.publish(CINEMA)
        handoff.publish(FOOD)

        assert handoff.consume() is FOOD
        assert handoff.publish_count == 2


def make_navigation(map_code: str = "mall-level-1"):
    scheduler = TaskScheduler()
    handoff = NavigationHandoff()
    notifier = ToastNotifier(scheduler)
    navigation = SimulatedNavigationSubsystem(
        handoff,
        notifier,
        map_code=map_code,
        map_points=[CINEMA, FOOD],
        walking_speed_mps=2.0,
        arrival_threshold_m=1.0,
    )
    return navigation, handoff, notifier


class TestSimulatedNavigation:
    def test_localize_exposes_points(self) -> None:
        navigation, _, _ = make_navigation()
        assert navigation.points_of_interest == ()

        assert navigation.localize() is True
        assert navigation.points_of_interest == (CINEMA, FOOD)

        navigation.unload()
        assert not navigation.is_localized

    def test_localize_without_map_code_logs_error(self, caplog) -> None:
        navigation, _, _ = make_navigation(map_code="")

        assert navigation.localize() is False
        assert navigation.points_of_interest == ()
        assert "Map code is not set" in caplog.text

    def test_activate_without_handoff_idles(self) -> None:
        navigation, _, _ = make_navigation()

        navigation.activate()

        assert navigation.status == NavigationStatus.IDLE
        assert navigation.destination_name == ""
        assert navigation.remaining_distance_text == ""

    def test_activate_consumes_handoff(self) -> None:
        navigation, handoff, _ = make_navigation()
        started: List[PointOfInterest] = []
        navigation.set_on_navigation_started(started.append)
        handoff.publish(CINEMA)

        navigation.activate()

        assert handoff.requested is False
        assert navigation.is_navigating
        assert navigation.destination_name == "Cinema"
        assert navigation.remaining_distance_text == "10 m remaining"
        assert started == [CINEMA]

        navigation.deactivate()
        navigation.activate()
        assert navigation.status == NavigationStatus.IDLE

    def test_arrival(self) -> None:
        navigation, handoff, notifier = make_navigation()
        ended: List[NavigationEndReason] = []
        navigation.set_on_navigation_ended(ended.append)
        handoff.publish(CINEMA)
        navigation.activate()

        navigation.update(4000)
        assert navigation.remaining_distance_m == pytest.approx(2.0)
        assert ended == []

        navigation.update(500)

        assert ended == [NavigationEndReason.ARRIVED]
        assert notifier.current.message == ARRIVED_MESSAGE
        assert notifier.current.duration_s == pytest.approx(3.0)
        assert not navigation.is_navigating

    def test_user_stop(self) -> None:
        navigation, handoff, notifier = make_navigation()
        ended: List[NavigationEndReason] = []
        navigation.set_on_navigation_ended(ended.append)
        handoff.publish(FOOD)
        navigation.activate()

        navigation.stop_navigation()
        navigation.stop_navigation()

        assert ended == [NavigationEndReason.STOPPED]
        assert notifier.current is None

    def test_invalid_arguments(self) -> None:
        navigation, handoff, notifier = make_navigation()
        with pytest.raises(ValueError):
            navigation.update(-1)
        with pytest.raises(ValueError):
            SimulatedNavigationSubsystem(handoff, notifier, walking_speed_mps=0)
