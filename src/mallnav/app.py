"""
Composition root: builds every MALLNAV component and wires them together.

Both the pygame simulator and the headless runner drive an ``MallNavApp``
through TICK events on its event bus.
"""

import logging
from typing import Optional

from mallnav.animation.scan_indicator import FrameListener, ScanIndicatorConfig
from mallnav.config.settings import Settings, get_settings
from mallnav.core.events import Event, EventBus, EventType, navigation_ended_event
from mallnav.core.state import PageStateMachine
from mallnav.core.tasks import TaskScheduler
from mallnav.flow.controller import FlowContext, PageFlowController
from mallnav.flow.destinations import DestinationCatalog
from mallnav.navigation.handoff import NavigationHandoff
from mallnav.navigation.poi import PointOfInterest, PointOfInterestRegistry
from mallnav.navigation.subsystem import NavigationEndReason, SimulatedNavigationSubsystem
from mallnav.notifications import ToastNotifier
from mallnav.scanning.process import ScanProcess

logger = logging.getLogger(__name__)


def indicator_config_from(settings: Settings) -> ScanIndicatorConfig:
    """Translate scanner indicator settings (seconds) into the animator config (ms)."""
    s = settings.scan_indicator
    return ScanIndicatorConfig(
        top=s.top,
        bottom=s.bottom,
        glow_margin=s.glow_margin,
        sweep_duration_ms=s.sweep_duration_s * 1000.0,
        edge_pause_ms=s.edge_pause_s * 1000.0,
        trail_delays=tuple(s.trail_delays),
        glow_delay=s.glow_delay,
        edge_window=s.edge_window,
        edge_overshoot=s.edge_overshoot,
        easing=s.easing,
    )


class MallNavApp:
    """All components of one running experience.

    Every collaborator is created here and passed by reference; nothing
    looks anything up through globals.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        event_bus: Optional[EventBus] = None,
        indicator_listener: Optional[FrameListener] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.event_bus = event_bus or EventBus()
        self.state_machine = PageStateMachine()
        self.scheduler = TaskScheduler()
        self.notifier = ToastNotifier(self.scheduler)
        self.handoff = NavigationHandoff()

        nav = self.settings.navigation
        self.navigation = SimulatedNavigationSubsystem(
            self.handoff,
            self.notifier,
            map_code=nav.map_code,
            map_points=[
                PointOfInterest(poi_id=p.poi_id, name=p.name, position=(p.x, p.y, p.z))
                for p in nav.points_of_interest
            ],
            start_position=nav.start_position,
            walking_speed_mps=nav.walking_speed_mps,
            arrival_threshold_m=nav.arrival_threshold_m,
            arrival_message_s=nav.arrival_message_s,
        )
        self.registry = PointOfInterestRegistry(lambda: self.navigation.points_of_interest)
        self.catalog = DestinationCatalog(self.settings.flow.destinations)
        self.scanner = ScanProcess(self.scheduler)

        self.controller = PageFlowController(
            FlowContext(
                state_machine=self.state_machine,
                event_bus=self.event_bus,
                scheduler=self.scheduler,
                catalog=self.catalog,
                registry=self.registry,
                scanner=self.scanner,
                notifier=self.notifier,
                handoff=self.handoff,
                navigation=self.navigation,
            ),
            scan_duration_s=self.settings.flow.scan_duration_s,
            notification_duration_s=self.settings.flow.notification_duration_s,
            indicator_config=indicator_config_from(self.settings),
            indicator_listener=indicator_listener,
        )

        self.navigation.set_on_navigation_started(self._on_navigation_started)
        self.navigation.set_on_navigation_ended(self._on_navigation_ended)
        self._detach_controller = None
        self._unsubscribe_tick = None
        self._frame_count = 0

        logger.info(
            f"MallNavApp created: {len(self.catalog)} destinations, "
            f"scan {self.settings.flow.scan_duration_s:g}s"
        )

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def start(self) -> None:
        """Subscribe to the bus and show the destination list."""
        if self._detach_controller is None:
            self._detach_controller = self.controller.attach(self.event_bus)
            self._unsubscribe_tick = self.event_bus.subscribe(EventType.TICK, self._on_tick)
        self.controller.start()
        if self.settings.navigation.auto_localize:
            if self.navigation.localize():
                self.event_bus.emit(Event(
                    EventType.LOCALIZED,
                    data={"map_code": self.navigation.map_code},
                    source="navigation",
                ))

    def stop(self) -> None:
        """Cancel everything in flight and unsubscribe."""
        # Bring the flow back to the list first so its state matches the scheduler
        self.controller.start()
        self.scheduler.stop_all()
        self.navigation.deactivate()
        if self._detach_controller:
            self._detach_controller()
            self._detach_controller = None
        if self._unsubscribe_tick:
            self._unsubscribe_tick()
            self._unsubscribe_tick = None
        logger.info("MallNavApp stopped")

    def tick(self, delta_ms: float) -> None:
        """Advance one frame: scheduled tasks first, then navigation."""
        self._frame_count += 1
        self.scheduler.update(delta_ms)
        self.navigation.update(delta_ms)

    def _on_tick(self, event: Event) -> None:
        delta = event.data.get("delta", 0.016)
        self.tick(delta * 1000.0)

    def _on_navigation_started(self, target: PointOfInterest) -> None:
        self.event_bus.emit(Event(
            EventType.NAVIGATION_STARTED,
            data={"poi_id": target.poi_id, "name": target.name},
            source="navigation",
        ))

    def _on_navigation_ended(self, reason: NavigationEndReason) -> None:
        if reason == NavigationEndReason.ARRIVED:
            self.event_bus.emit(Event(EventType.ARRIVED, source="navigation"))
        self.event_bus.emit(navigation_ended_event(reason.value))
