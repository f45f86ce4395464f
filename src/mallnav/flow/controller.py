"""Page flow controller: destination menu -> get ready -> scan -> navigate."""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
import logging

from mallnav.animation.scan_indicator import (
    FrameListener,
    ScanIndicatorAnimator,
    ScanIndicatorConfig,
)
from mallnav.core.events import Event, EventBus, EventType
from mallnav.core.state import Page, PageContext, PageStateMachine
from mallnav.core.tasks import TaskScheduler
from mallnav.flow.destinations import Destination, DestinationCatalog
from mallnav.flow.errors import (
    DestinationUnavailable,
    FlowError,
    InvalidDestinationId,
    NoDestinationSelected,
)
from mallnav.navigation.handoff import NavigationHandoff
from mallnav.navigation.poi import PointOfInterest, PointOfInterestRegistry
from mallnav.navigation.subsystem import NavigationSubsystem
from mallnav.notifications import NotificationChannel
from mallnav.scanning.base import ScanState, Scanner

logger = logging.getLogger(__name__)

DEFAULT_SCAN_DURATION_S = 5.0
DEFAULT_NOTIFICATION_DURATION_S = 3.0


@dataclass
class FlowContext:
    """Collaborators handed to the controller at construction."""

    state_machine: PageStateMachine
    event_bus: EventBus
    scheduler: TaskScheduler
    catalog: DestinationCatalog
    registry: PointOfInterestRegistry
    scanner: Scanner
    notifier: NotificationChannel
    handoff: NavigationHandoff
    navigation: NavigationSubsystem


class PageFlowController:
    """Sequences the menu pages and hands off to navigation.

    One entry point per user action:
        select_destination(id) - a destination list item was tapped
        confirm_ready()        - GO / get started on the ready page
        cancel_to_list()       - go back
        return_from_navigation() - the navigation subsystem finished

    Lookup problems never escape; they end up as a toast and the flow stays
    on a valid page. The Scanning page can only be entered from ReadyToGo,
    and everything started for a page is cancelled when that page is left.
    """

    SELECTABLE_PAGES = frozenset({Page.DESTINATION_LIST, Page.READY_TO_GO})

    def __init__(
        self,
        context: FlowContext,
        *,
        scan_duration_s: float = DEFAULT_SCAN_DURATION_S,
        notification_duration_s: float = DEFAULT_NOTIFICATION_DURATION_S,
        indicator_config: Optional[ScanIndicatorConfig] = None,
        indicator_listener: Optional[FrameListener] = None,
    ):
        if scan_duration_s <= 0:
            raise ValueError("scan_duration_s must be positive")
        if notification_duration_s <= 0:
            raise ValueError("notification_duration_s must be positive")
        self.context = context
        self.scan_duration_s = scan_duration_s
        self.notification_duration_s = notification_duration_s
        self.indicator_config = indicator_config or ScanIndicatorConfig()
        self._indicator_listener = indicator_listener

        self._selected: Optional[PointOfInterest] = None
        self._animator: Optional[ScanIndicatorAnimator] = None
        self._scan_completions = 0

        context.state_machine.add_listener(self._on_page_changed)

    # State
    @property
    def page(self) -> Page:
        return self.context.state_machine.page

    @property
    def selected_destination(self) -> Optional[PointOfInterest]:
        return self._selected

    @property
    def scan_indicator(self) -> Optional[ScanIndicatorAnimator]:
        """The running indicator loop, if any."""
        if self._animator is not None and self._animator.is_active:
            return self._animator
        return None

    @property
    def scan_state(self) -> ScanState:
        return self.context.scanner.state

    @property
    def scan_completions(self) -> int:
        return self._scan_completions

    # Wiring
    def start(self) -> None:
        """Show the destination list with navigation switched off."""
        self._selected = None
        self._stop_scan()
        self.context.navigation.deactivate()
        if self.page != Page.DESTINATION_LIST:
            self.context.state_machine.reset()
        logger.info("Page flow started on DESTINATION_LIST")

    def attach(self, event_bus: Optional[EventBus] = None) -> Callable[[], None]:
        """Subscribe the user action events. Returns a detach function."""
        bus = event_bus or self.context.event_bus
        unsubscribers = [
            bus.subscribe(EventType.SELECT_DESTINATION, self._handle_select),
            bus.subscribe(EventType.CONFIRM, lambda event: self.confirm_ready()),
            bus.subscribe(EventType.CANCEL, lambda event: self.cancel_to_list()),
            bus.subscribe(EventType.NAVIGATION_ENDED, lambda event: self.return_from_navigation()),
        ]

        def detach() -> None:
            for unsubscribe in unsubscribers:
                unsubscribe()

        return detach

    # Actions
    def select_destination(self, destination_id: int) -> bool:
        """Resolve a menu entry and move to the ready page.

        Returns:
            True if the destination was resolved and selected
        """
        try:
            destination = self._lookup(destination_id)
            if self.page not in self.SELECTABLE_PAGES:
                logger.debug(f"Ignoring destination {destination_id} on {self.page.name}")
                return False
            poi = self._resolve(destination)
        except FlowError as error:
            self._report(error)
            return False

        self._selected = poi
        self.context.state_machine.transition(
            Page.READY_TO_GO,
            destination_id=destination.id,
            destination_name=poi.name,
            last_error=None,
        )
        logger.info(f"Destination selected: {destination.id} -> {poi.name}")
        return True

    def confirm_ready(self) -> bool:
        """Start the check-in scan from the ready page."""
        if self.page != Page.READY_TO_GO:
            logger.debug(f"Confirm ignored on {self.page.name}")
            return False

        self.context.state_machine.transition(Page.SCANNING)
        self._start_scan()
        return True

    def cancel_to_list(self) -> bool:
        """Abandon the current selection and go back to the list."""
        if self.page == Page.NAVIGATING:
            logger.debug("Cancel ignored while navigating")
            return False

        self._stop_scan()
        self._selected = None
        if self.page != Page.DESTINATION_LIST:
            self.context.state_machine.transition(
                Page.DESTINATION_LIST, destination_id=None, destination_name=None
            )
        return True

    def on_scan_complete(self) -> None:
        """Scan finished on its own; hand the selection to navigation."""
        if self.page != Page.SCANNING:
            logger.warning(f"Stale scan completion on {self.page.name}; ignoring")
            return

        self._scan_completions += 1
        self._stop_indicator()
        self._emit(EventType.SCAN_COMPLETED)

        target = self._selected
        if target is None:
            self._report(NoDestinationSelected())
            self.context.state_machine.transition(Page.DESTINATION_LIST)
            return

        self.context.handoff.publish(target)
        self._selected = None
        self._emit(EventType.HANDOFF_PUBLISHED, {"poi_id": target.poi_id, "name": target.name})
        self.context.state_machine.transition(Page.NAVIGATING)
        self.context.navigation.activate()

    def return_from_navigation(self) -> bool:
        """Navigation ended (arrival or user stop)."""
        if self.page != Page.NAVIGATING:
            logger.debug(f"Navigation end ignored on {self.page.name}")
            return False

        self.context.navigation.deactivate()
        self.context.state_machine.transition(
            Page.DESTINATION_LIST, destination_id=None, destination_name=None
        )
        return True

    # Internals
    def _lookup(self, destination_id: int) -> Destination:
        destination = self.context.catalog.get(destination_id)
        if destination is None:
            raise InvalidDestinationId(destination_id)
        return destination

    def _resolve(self, destination: Destination) -> PointOfInterest:
        poi = self.context.registry.find_by_name(destination.name)
        if poi is None:
            raise DestinationUnavailable(destination.name)
        return poi

    def _start_scan(self) -> None:
        self._animator = ScanIndicatorAnimator(
            config=self.indicator_config,
            listener=self._indicator_listener,
        )
        self.context.scheduler.schedule(self._animator, group=self._page_group(Page.SCANNING))
        run = self.context.scanner.start(self.scan_duration_s, self.on_scan_complete)
        self._emit(EventType.SCAN_STARTED, {"duration_s": self.scan_duration_s})
        logger.debug(f"Scan started: {run!r}")

    def _stop_scan(self) -> None:
        if self.context.scanner.cancel():
            self._emit(EventType.SCAN_CANCELLED)
        self._stop_indicator()

    def _stop_indicator(self) -> None:
        if self._animator is not None:
            self._animator.stop()
            self._animator = None

    def _on_page_changed(self, old_page: Page, new_page: Page, context: PageContext) -> None:
        if old_page != new_page:
            if old_page == Page.SCANNING:
                self._stop_scan()
            self.context.scheduler.stop_group(self._page_group(old_page))
        self._emit(
            EventType.PAGE_CHANGED,
            {"from": old_page.name, "to": new_page.name},
        )

    def _report(self, error: FlowError) -> None:
        logger.warning(f"{type(error).__name__}: {error.message}")
        self.context.state_machine.context.last_error = error.message
        self.context.notifier.show(error.message, self.notification_duration_s)
        self._emit(
            EventType.NOTIFICATION,
            {"kind": type(error).__name__, "message": error.message},
        )

    def _handle_select(self, event: Event) -> None:
        raw = event.data.get("destination_id")
        try:
            destination_id = int(raw)
        except (TypeError, ValueError, OverflowError):
            destination_id = None
        # Only exact integers; 3.9, "3" and True are not ids
        if destination_id is None or isinstance(raw, bool) or destination_id != raw:
            self._report(InvalidDestinationId(raw))
            return
        self.select_destination(destination_id)

    def _emit(self, event_type: EventType, data: Optional[Dict[str, Any]] = None) -> None:
        self.context.event_bus.emit(Event(event_type, data=data or {}, source="page_flow"))

    @staticmethod
    def _page_group(page: Page) -> str:
        return f"page_{page.name.lower()}"
