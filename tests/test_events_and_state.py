from __future__ import annotations

import asyncio
from typing import List

from mallnav.core.events import (
    Event,
    EventBus,
    EventType,
    navigation_ended_event,
    select_destination_event,
    tick_event,
)
from mallnav.core.state import Page, PageContext, PageStateMachine


class TestEventBus:
    def test_subscribe_and_unsubscribe(self) -> None:
        bus = EventBus()
        seen: List[Event] = []
        unsubscribe = bus.subscribe(EventType.CONFIRM, seen.append)

        bus.emit(Event(EventType.CONFIRM))
        unsubscribe()
        bus.emit(Event(EventType.CONFIRM))

        assert len(seen) == 1

    def test_handler_errors_do_not_stop_dispatch(self) -> None:
        bus = EventBus()
        seen: List[Event] = []

        def broken(event: Event) -> None:
            raise RuntimeError("boom")

        bus.subscribe(EventType.CANCEL, broken)
        bus.subscribe(EventType.CANCEL, seen.append)
        bus.emit(Event(EventType.CANCEL))

        assert len(seen) == 1

    def test_ticks_stay_out_of_history(self) -> None:
        bus = EventBus()
        bus.emit(tick_event(0.016, 1))
        bus.emit(select_destination_event(3))

        history = bus.get_history()
        assert [e.type for e in history] == [EventType.SELECT_DESTINATION]
        assert history[0].data == {"destination_id": 3}

    def test_history_is_bounded(self) -> None:
        bus = EventBus(history_limit=3)
        for _ in range(5):
            bus.emit(navigation_ended_event("stopped"))

        assert len(bus.get_history(limit=10)) == 3

    def test_queued_events_run_on_process_queue(self) -> None:
        bus = EventBus()
        seen: List[str] = []

        async def async_handler(event: Event) -> None:
            seen.append("async")

        bus.subscribe(EventType.CONFIRM, lambda event: seen.append("sync"))
        bus.subscribe(EventType.CONFIRM, async_handler)
        bus.queue_event(Event(EventType.CONFIRM))

        assert bus.pending == 1
        assert seen == []

        asyncio.run(bus.process_queue())

        assert sorted(seen) == ["async", "sync"]
        assert bus.pending == 0

    def test_subscribe_all(self) -> None:
        bus = EventBus()
        seen: List[Event] = []
        unsubscribe = bus.subscribe_all(seen.append)

        bus.emit(Event(EventType.CONFIRM))
        bus.emit(Event(EventType.CANCEL))
        unsubscribe()
        bus.emit(Event(EventType.CANCEL))

        assert [e.type for e in seen] == [EventType.CONFIRM, EventType.CANCEL]


class TestPageStateMachine:
    def test_valid_path(self) -> None:
        machine = PageStateMachine()
        for page in (Page.READY_TO_GO, Page.SCANNING, Page.NAVIGATING, Page.DESTINATION_LIST):
            assert machine.transition(page) is True
        assert machine.page == Page.DESTINATION_LIST

    def test_scanning_only_from_ready(self) -> None:
        machine = PageStateMachine()
        assert machine.can_transition(Page.SCANNING) is False
        assert machine.transition(Page.SCANNING) is False
        assert machine.transition(Page.NAVIGATING) is False
        assert machine.is_on(Page.DESTINATION_LIST)

    def test_navigating_cannot_skip_to_ready(self) -> None:
        machine = PageStateMachine(initial_page=Page.NAVIGATING)
        assert machine.transition(Page.READY_TO_GO) is False
        assert machine.page == Page.NAVIGATING

    def test_listeners_receive_old_and_new_page(self) -> None:
        machine = PageStateMachine()
        changes = []

        def broken(old: Page, new: Page, context: PageContext) -> None:
            raise RuntimeError("boom")

        machine.add_listener(broken)
        machine.add_listener(lambda old, new, ctx: changes.append((old, new, ctx.destination_id)))
        machine.transition(Page.READY_TO_GO, destination_id=3, unknown_key="ignored")

        assert changes == [(Page.DESTINATION_LIST, Page.READY_TO_GO, 3)]

    def test_reset_clears_context(self) -> None:
        machine = PageStateMachine()
        machine.transition(Page.READY_TO_GO, destination_id=3, destination_name="Meeting room 2")

        machine.reset()

        assert machine.page == Page.DESTINATION_LIST
        assert machine.context == PageContext()
