"""
Main simulator window using pygame.

Provides a desktop stand-in for the phone screen: the four flow pages,
the scanner indicator, toasts and a debug overlay, driven by the keyboard.
"""

import pygame
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from mallnav.app import MallNavApp
from mallnav.config.settings import DisplaySettings
from mallnav.core.events import (
    Event,
    EventType,
    cancel_event,
    confirm_event,
    select_destination_event,
    tick_event,
)
from mallnav.core.state import Page
from mallnav.simulator.scanner_view import ScannerView

logger = logging.getLogger(__name__)


@dataclass
class WindowConfig:
    """Simulator window configuration."""
    width: int = 960
    height: int = 720
    title: str = "MALLNAV Simulator"
    fullscreen: bool = False
    fps: int = 60

    # Colors
    bg_color: tuple[int, int, int] = (20, 20, 30)
    panel_color: tuple[int, int, int] = (40, 40, 50)
    text_color: tuple[int, int, int] = (200, 200, 220)
    accent_color: tuple[int, int, int] = (100, 150, 255)
    muted_color: tuple[int, int, int] = (110, 110, 130)
    toast_color: tuple[int, int, int] = (240, 240, 240)

    @classmethod
    def from_settings(cls, display: DisplaySettings) -> "WindowConfig":
        return cls(
            width=display.window_width,
            height=display.window_height,
            fullscreen=display.fullscreen,
            fps=display.fps,
        )


class SimulatorWindow:
    """
    Simulator window for the page flow.

    Keyboard Mapping:
        1-9, 0: Select destination 1-9, 10
        + / -: Move the cursor through the list and select
        ENTER / SPACE: GO (start scanning)
        BACKSPACE: Back to the destination list
        X: Stop navigation
        M: Re-localize on the map
        D: Toggle debug panel
        L: Toggle log viewer
        Q / ESC: Exit simulator
    """

    def __init__(
        self,
        app: MallNavApp,
        scanner_view: Optional[ScannerView] = None,
        config: WindowConfig | None = None,
    ) -> None:
        self.app = app
        self.event_bus = app.event_bus
        self.config = config or WindowConfig()
        self.scanner_view = scanner_view or ScannerView()

        # Pygame setup
        self._screen: pygame.Surface | None = None
        self._clock: pygame.time.Clock | None = None
        self._running = False
        self._frame_count = 0
        self._show_debug = True

        # List cursor (index into the catalog)
        self._cursor = 0

        # UI elements positions (calculated on init)
        self._layout: dict[str, pygame.Rect] = {}

        # Fonts
        self._font: pygame.font.Font | None = None
        self._small_font: pygame.font.Font | None = None
        self._big_font: pygame.font.Font | None = None

        # Log viewer
        self._show_log = False
        self._log_buffer: list[str] = []
        self._max_log_lines = 20
        self._log_handler: logging.Handler | None = None

        # Setup log handler to capture logs
        self._setup_log_capture()

        logger.info("SimulatorWindow created")

    def _setup_log_capture(self) -> None:
        """Setup log capturing for the log viewer."""
        class SimulatorLogHandler(logging.Handler):
            def __init__(self, window: 'SimulatorWindow'):
                super().__init__()
                self.window = window

            def emit(self, record):
                msg = self.format(record)
                self.window._log_buffer.append(msg)
                # Keep buffer size limited
                if len(self.window._log_buffer) > self.window._max_log_lines * 2:
                    self.window._log_buffer = self.window._log_buffer[-self.window._max_log_lines:]

        handler = SimulatorLogHandler(self)
        handler.setFormatter(logging.Formatter('%(levelname).1s %(name)s: %(message)s'))
        logging.getLogger().addHandler(handler)
        self._log_handler = handler

    def _init_pygame(self) -> None:
        """Initialize pygame and create window."""
        pygame.init()
        pygame.display.set_caption(self.config.title)

        flags = pygame.DOUBLEBUF
        if self.config.fullscreen:
            flags |= pygame.FULLSCREEN

        self._screen = pygame.display.set_mode(
            (self.config.width, self.config.height),
            flags
        )
        self._clock = pygame.time.Clock()

        pygame.font.init()
        for font_name in ("DejaVu Sans", "Noto Sans", "Helvetica", "Arial"):
            if pygame.font.match_font(font_name):
                self._font = pygame.font.SysFont(font_name, 18)
                self._small_font = pygame.font.SysFont(font_name, 13)
                self._big_font = pygame.font.SysFont(font_name, 26)
                logger.info(f"Using system font: {font_name}")
                break

        if not self._font:
            self._font = pygame.font.SysFont(None, 22)
            self._small_font = pygame.font.SysFont(None, 16)
            self._big_font = pygame.font.SysFont(None, 32)
            logger.warning("No preferred font found, using default")

        # Calculate layout
        self._calculate_layout()

        logger.info(f"Pygame initialized: {self.config.width}x{self.config.height}")

    def _calculate_layout(self) -> None:
        """Calculate positions for all UI elements."""
        w, h = self.config.width, self.config.height

        # Phone-shaped page area in the middle
        page_w = min(420, w - 320)
        page_h = h - 120
        page_x = (w - page_w) // 2 - 100 if w > 900 else 20
        page_y = 50

        # Debug panel on the right
        debug_w = 260
        debug_x = w - debug_w - 20

        self._layout = {
            "page": pygame.Rect(page_x, page_y, page_w, page_h),
            "toast": pygame.Rect(page_x + 20, page_y + page_h - 70, page_w - 40, 50),
            "debug": pygame.Rect(debug_x, 50, debug_w, h - 100),
        }

    # Input
    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                self._handle_keydown(event)

    def _handle_keydown(self, event: pygame.event.Event) -> None:
        """Handle key press."""
        key = event.key

        # System keys
        if key == pygame.K_ESCAPE or key == pygame.K_q:
            self._running = False
        elif key == pygame.K_d:
            self._show_debug = not self._show_debug
        elif key == pygame.K_l:
            self._show_log = not self._show_log

        # Flow actions
        elif key in (pygame.K_SPACE, pygame.K_RETURN, pygame.K_KP_ENTER):
            self.event_bus.queue_event(confirm_event(source="keyboard"))
        elif key == pygame.K_BACKSPACE:
            self.event_bus.queue_event(cancel_event(source="keyboard"))
        elif key == pygame.K_x:
            self.app.navigation.stop_navigation()
        elif key == pygame.K_m:
            if self.app.navigation.localize():
                self.event_bus.emit(Event(
                    EventType.LOCALIZED,
                    data={"map_code": self.app.navigation.map_code},
                    source="keyboard",
                ))

        # Destination selection
        elif key in range(pygame.K_1, pygame.K_9 + 1):
            self._select(key - pygame.K_0)
        elif key == pygame.K_0:
            self._select(10)
        elif key in range(pygame.K_KP1, pygame.K_KP9 + 1):
            self._select(key - pygame.K_KP1 + 1)
        elif key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS, pygame.K_DOWN):
            self._move_cursor(1)
        elif key in (pygame.K_MINUS, pygame.K_KP_MINUS, pygame.K_UP):
            self._move_cursor(-1)

    def _select(self, destination_id: int) -> None:
        ids = self.app.catalog.ids
        if destination_id in ids:
            self._cursor = ids.index(destination_id)
        self.event_bus.queue_event(select_destination_event(destination_id, source="keyboard"))

    def _move_cursor(self, step: int) -> None:
        ids = self.app.catalog.ids
        if not ids:
            return
        self._cursor = (self._cursor + step) % len(ids)
        self._select(ids[self._cursor])

    # Rendering
    def _render(self) -> None:
        """Render all UI elements."""
        if not self._screen:
            return

        self._screen.fill(self.config.bg_color)

        page = self.app.controller.page
        rect = self._layout["page"]
        pygame.draw.rect(self._screen, self.config.panel_color, rect, border_radius=12)

        if page == Page.DESTINATION_LIST:
            self._render_destination_list(rect)
        elif page == Page.READY_TO_GO:
            self._render_ready(rect)
        elif page == Page.SCANNING:
            self._render_scanning(rect)
        elif page == Page.NAVIGATING:
            self._render_navigating(rect)

        self._render_toast()
        if self._show_debug:
            self._render_debug_panel()
        if self._show_log:
            self._render_log_panel()

        self._render_title_bar()

        pygame.display.flip()

    def _text(self, font: pygame.font.Font | None, text: str, pos: tuple[int, int],
              color: tuple[int, int, int] | None = None, center: bool = False) -> None:
        if not font or not self._screen:
            return
        surface = font.render(text, True, color or self.config.text_color)
        if center:
            self._screen.blit(surface, surface.get_rect(center=pos))
        else:
            self._screen.blit(surface, pos)

    def _render_destination_list(self, rect: pygame.Rect) -> None:
        self._text(self._big_font, "Where to?", (rect.x + 20, rect.y + 16), self.config.accent_color)

        live = {name.casefold() for name in self.app.registry.names()}
        y = rect.y + 60
        for index, destination in enumerate(self.app.catalog):
            selected = index == self._cursor
            available = destination.name.casefold() in live
            color = self.config.text_color if available else self.config.muted_color
            if selected:
                pygame.draw.rect(
                    self._screen, (60, 70, 100),
                    pygame.Rect(rect.x + 12, y - 3, rect.width - 24, 24), border_radius=4,
                )
            self._text(self._font, f"{destination.id:>2}  {destination.name}", (rect.x + 20, y), color)
            y += 28
            if y > rect.bottom - 90:
                break

        if not self.app.navigation.is_localized:
            self._text(
                self._small_font, "Not localized. Press M.",
                (rect.x + 20, rect.bottom - 100), (255, 200, 100),
            )

    def _render_ready(self, rect: pygame.Rect) -> None:
        selected = self.app.controller.selected_destination
        name = selected.name if selected else "?"
        self._text(self._big_font, "Ready to go", (rect.centerx, rect.y + 80), self.config.accent_color, center=True)
        self._text(self._font, name, (rect.centerx, rect.y + 140), center=True)
        self._text(
            self._small_font, "ENTER: scan the check-in code   BACKSPACE: back",
            (rect.centerx, rect.bottom - 110), self.config.muted_color, center=True,
        )

    def _render_scanning(self, rect: pygame.Rect) -> None:
        view = self.scanner_view
        surface = pygame.surfarray.make_surface(view.get_buffer().swapaxes(0, 1))
        target = pygame.Rect(0, 0, view.width, view.height)
        target.center = (rect.centerx, rect.y + 40 + view.height // 2)
        pygame.draw.rect(self._screen, (10, 10, 15), target.inflate(8, 8))
        self._screen.blit(surface, target.topleft)

        # Scan progress
        progress = self.app.scanner.progress
        bar = pygame.Rect(target.x, target.bottom + 20, target.width, 8)
        pygame.draw.rect(self._screen, (60, 60, 80), bar, border_radius=4)
        pygame.draw.rect(
            self._screen, self.config.accent_color,
            pygame.Rect(bar.x, bar.y, int(bar.width * progress), bar.height), border_radius=4,
        )
        self._text(self._small_font, "Scanning...", (rect.centerx, bar.bottom + 20), center=True)

    def _render_navigating(self, rect: pygame.Rect) -> None:
        nav = self.app.navigation
        self._text(self._big_font, nav.destination_name or "Navigation", (rect.centerx, rect.y + 80),
                   self.config.accent_color, center=True)
        self._text(self._font, nav.remaining_distance_text, (rect.centerx, rect.y + 140), center=True)
        self._text(self._small_font, "X: stop navigation", (rect.centerx, rect.bottom - 110),
                   self.config.muted_color, center=True)

    def _render_toast(self) -> None:
        notification = self.app.notifier.current
        if notification is None or not self._small_font:
            return
        rect = self._layout["toast"]
        surf = pygame.Surface((rect.width, rect.height), pygame.SRCALPHA)
        surf.fill((0, 0, 0, 200))
        self._screen.blit(surf, rect.topleft)
        message = notification.message
        if len(message) > 60:
            message = message[:57] + "..."
        self._text(self._small_font, message, rect.center, self.config.toast_color, center=True)

    def _render_debug_panel(self) -> None:
        """Render the debug information panel."""
        rect = self._layout["debug"]

        pygame.draw.rect(self._screen, self.config.panel_color, rect, border_radius=5)

        if not self._small_font:
            return

        app = self.app
        selected = app.controller.selected_destination
        lines = [
            f"FPS: {self._clock.get_fps():.1f}" if self._clock else "FPS: --",
            f"Frame: {self._frame_count}",
            f"Page: {app.controller.page.name}",
            f"Selected: {selected.name if selected else 'None'}",
            f"Scan: {app.controller.scan_state.name} {app.scanner.progress:.0%}",
            f"Tasks: {app.scheduler.task_count}",
            f"Handoff: {app.handoff.requested}",
            f"Nav: {app.navigation.status.name}",
            f"Map: {app.navigation.map_code or '-'} ({len(app.registry)} POIs)",
            "",
            "---- CONTROLS ----",
            "1-9,0   Select 1-10",
            "+/-     Cycle list",
            "ENTER   GO",
            "BKSP    Back",
            "X       Stop navigation",
            "M       Re-localize",
            "",
            "---- SYSTEM ----",
            "D  Debug panel",
            "L  Log viewer",
            "Q  Quit",
        ]

        y = rect.y + 10
        for line in lines:
            self._text(self._small_font, line, (rect.x + 10, y))
            y += 18

    def _render_log_panel(self) -> None:
        """Render the log viewer panel."""
        if not self._show_log or not self._small_font:
            return

        rect = pygame.Rect(10, 50, 360, self.config.height - 150)

        # Semi-transparent background
        surf = pygame.Surface((rect.width, rect.height), pygame.SRCALPHA)
        surf.fill((20, 25, 35, 230))
        self._screen.blit(surf, rect.topleft)
        pygame.draw.rect(self._screen, (60, 80, 100), rect, 1, border_radius=5)

        self._text(self._font, "LOG VIEWER", (rect.x + 10, rect.y + 5), (100, 200, 255))

        y = rect.y + 30
        for line in self._log_buffer[-self._max_log_lines:]:
            # Color code by level
            if line.startswith('E'):
                color = (255, 100, 100)
            elif line.startswith('W'):
                color = (255, 200, 100)
            elif line.startswith('I'):
                color = (150, 200, 150)
            else:
                color = (150, 150, 170)

            display_line = line[:52] + "..." if len(line) > 55 else line
            self._text(self._small_font, display_line, (rect.x + 8, y), color)
            y += 15

            if y > rect.bottom - 10:
                break

    def _render_title_bar(self) -> None:
        if not self._font:
            return

        title = f"MALLNAV Simulator | {self.app.controller.page.name}"
        self._text(self._font, title, (20, 15), self.config.accent_color)

        indicators = []
        if self._show_debug:
            indicators.append("DBG")
        if self._show_log:
            indicators.append("LOG")
        if indicators:
            self._text(self._small_font, " | ".join(indicators), (self.config.width - 120, 18), (100, 150, 200))

    async def run(self) -> None:
        """Main simulator loop."""
        self._init_pygame()
        self.app.start()
        self._running = True

        logger.info("Simulator started")

        while self._running:
            # Handle events
            self._handle_events()

            # Process queued input before the tick
            await self.event_bus.process_queue()

            # Emit tick event
            if self._clock:
                delta = self._clock.get_time() / 1000.0
                self.event_bus.emit(tick_event(delta, self._frame_count))

            # Render
            self._render()

            # Frame timing
            if self._clock:
                self._clock.tick(self.config.fps)

            self._frame_count += 1

            # Yield to other tasks
            await asyncio.sleep(0)

        self._cleanup()

    def _cleanup(self) -> None:
        """Clean up pygame resources."""
        self.app.stop()
        if self._log_handler:
            logging.getLogger().removeHandler(self._log_handler)
        pygame.quit()
        logger.info("Simulator stopped")

    def stop(self) -> None:
        """Stop the simulator."""
        self._running = False
