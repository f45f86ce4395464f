"""
Main entry point for MALLNAV.

Reads settings and launches either the pygame simulator or the headless
demo tour.
"""

import asyncio
import logging
import sys

from mallnav.config.settings import Settings, get_settings


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


async def run_simulator(settings: Settings) -> None:
    """Run the desktop simulator."""
    from mallnav.app import MallNavApp
    from mallnav.simulator.scanner_view import ScannerView
    from mallnav.simulator.window import SimulatorWindow, WindowConfig

    display = settings.display
    view = ScannerView(
        width=display.scanner_width,
        height=display.scanner_height,
        top=settings.scan_indicator.top - settings.scan_indicator.glow_margin,
        bottom=settings.scan_indicator.bottom + settings.scan_indicator.glow_margin,
    )
    app = MallNavApp(settings, indicator_listener=view.draw)

    window = SimulatorWindow(
        app=app,
        scanner_view=view,
        config=WindowConfig.from_settings(display),
    )

    await window.run()


async def run_headless(settings: Settings) -> bool:
    """Run the scripted tour. Returns True if the user arrived."""
    from mallnav.app import MallNavApp
    from mallnav.simulator.headless import HeadlessConfig, HeadlessRunner

    logger = logging.getLogger(__name__)

    app = MallNavApp(settings)
    runner = HeadlessRunner(
        app,
        HeadlessConfig(
            destination_id=settings.demo_destination,
            max_seconds=settings.headless_max_seconds,
        ),
    )
    result = await runner.run()
    app.stop()

    logger.info(f"Pages visited: {' -> '.join(result.pages) or 'none'}")
    for message in result.notifications:
        logger.info(f"Notification: {message}")
    return result.arrived


def main() -> None:
    """Main entry point."""
    from dotenv import load_dotenv

    # Load environment variables
    load_dotenv()

    settings = get_settings()

    # Setup logging
    setup_logging(settings.debug)

    logger = logging.getLogger(__name__)
    logger.info("MALLNAV starting...")

    try:
        if settings.is_simulator:
            logger.info("Running in simulator mode")
            asyncio.run(run_simulator(settings))
        elif settings.is_headless:
            logger.info("Running in headless mode")
            if not asyncio.run(run_headless(settings)):
                sys.exit(2)
        else:
            logger.error(f"Unknown environment: {settings.env}")
            sys.exit(1)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)

    logger.info("MALLNAV stopped")


if __name__ == "__main__":
    main()
