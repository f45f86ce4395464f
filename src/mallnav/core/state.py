"""
Page state machine for the MALLNAV flow.

Pages:
    DESTINATION_LIST: Destination menu (start page)
    READY_TO_GO: A destination is chosen, waiting for GO
    SCANNING: Simulated QR scan in progress
    NAVIGATING: Control handed to the AR navigation subsystem
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Callable, Any
import logging

logger = logging.getLogger(__name__)


class Page(Enum):
    """Mutually exclusive UI pages."""
    DESTINATION_LIST = auto()
    READY_TO_GO = auto()
    SCANNING = auto()
    NAVIGATING = auto()


@dataclass
class PageContext:
    """Context data carried alongside the current page."""
    destination_id: int | None = None
    destination_name: str | None = None
    last_error: str | None = None

    def clear(self) -> None:
        self.destination_id = None
        self.destination_name = None
        self.last_error = None


PageListener = Callable[[Page, Page, PageContext], None]


class PageStateMachine:
    """
    Holds the active page and validates page transitions.

    Exactly one page is active at a time. The flow controller is the only
    component that drives transitions; everything else observes them
    through listeners.
    """

    # Valid page transitions
    VALID_TRANSITIONS: list[tuple[Page, Page]] = [
        # From DESTINATION_LIST
        (Page.DESTINATION_LIST, Page.READY_TO_GO),

        # From READY_TO_GO
        (Page.READY_TO_GO, Page.READY_TO_GO),  # Re-pick destination
        (Page.READY_TO_GO, Page.SCANNING),
        (Page.READY_TO_GO, Page.DESTINATION_LIST),

        # From SCANNING
        (Page.SCANNING, Page.NAVIGATING),
        (Page.SCANNING, Page.DESTINATION_LIST),  # Cancel / nothing selected

        # From NAVIGATING
        (Page.NAVIGATING, Page.DESTINATION_LIST),
    ]

    def __init__(self, initial_page: Page = Page.DESTINATION_LIST) -> None:
        self._page = initial_page
        self._context = PageContext()
        self._listeners: list[PageListener] = []
        self._valid_transitions = set(self.VALID_TRANSITIONS)
        logger.info(f"PageStateMachine initialized with page: {initial_page.name}")

    @property
    def page(self) -> Page:
        """Get the active page."""
        return self._page

    @property
    def context(self) -> PageContext:
        """Get current context."""
        return self._context

    def is_on(self, page: Page) -> bool:
        return self._page == page

    def can_transition(self, to_page: Page) -> bool:
        """Check if transition to given page is valid."""
        return (self._page, to_page) in self._valid_transitions

    def transition(self, to_page: Page, **context_updates: Any) -> bool:
        """
        Attempt to switch to a new page.

        Args:
            to_page: Target page
            **context_updates: Updates to apply to context

        Returns:
            True if transition successful, False otherwise
        """
        if not self.can_transition(to_page):
            logger.warning(
                f"Invalid page transition: {self._page.name} -> {to_page.name}"
            )
            return False

        old_page = self._page
        self._page = to_page

        for key, value in context_updates.items():
            if hasattr(self._context, key):
                setattr(self._context, key, value)

        logger.info(f"Page transition: {old_page.name} -> {to_page.name}")
        self._notify(old_page, to_page)
        return True

    def add_listener(self, callback: PageListener) -> None:
        """Add a page change listener."""
        self._listeners.append(callback)

    def remove_listener(self, callback: PageListener) -> None:
        """Remove a page change listener."""
        if callback in self._listeners:
            self._listeners.remove(callback)

    def reset(self) -> None:
        """Force the machine back to the destination list."""
        old_page = self._page
        self._page = Page.DESTINATION_LIST
        self._context = PageContext()
        self._notify(old_page, Page.DESTINATION_LIST)
        logger.info("PageStateMachine reset to DESTINATION_LIST")

    def _notify(self, old_page: Page, new_page: Page) -> None:
        for listener in list(self._listeners):
            try:
                listener(old_page, new_page, self._context)
            except Exception as e:
                logger.error(f"Error in page listener: {e}")
