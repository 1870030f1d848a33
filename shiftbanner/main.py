"""
Main entry point for Shift Banner
"""
import sys
import signal
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from shiftbanner.core.config_service import config
from shiftbanner.core.logging_service import get_logger
from shiftbanner.core.omega_poller import OmegaPoller, get_poll_state
from shiftbanner.core.preferences import Preferences
from shiftbanner.core.shift_clock import ShiftClock
from shiftbanner.hardware.display_info import DisplayInfo
from shiftbanner.ui.banners import BannerStore
from shiftbanner.ui.main_window import MainWindow
from shiftbanner.ui.painter import BannerPainter


class Application:
    """
    Main application orchestrator.
    """

    def __init__(self):
        """Initialize application"""
        config.reload()

        log_level = config.get('logging.level', 'INFO')
        self._logger = get_logger('shiftbanner', log_level)

        version = config.get('app.version', '1.0.0')
        self._logger.log_startup(version, self._get_config_summary())

        self._preferences = Preferences(config)
        self._clock = None
        self._painter = None
        self._main_window = None

    def _get_config_summary(self) -> dict:
        """Get configuration summary for logging"""
        return {
            'timezone': {
                'use_reference': config.get('timezone.use_reference', True),
                'reference': config.get('timezone.reference', 'America/Los_Angeles'),
            },
            'omega': {
                'enabled': config.get('omega.enabled', False),
            },
            'banners': {
                'bee_shed': config.get('banners.bee_shed', False),
            }
        }

    def _initialize_services(self) -> None:
        """Initialize all services"""
        self._logger.info("Initializing services")

        self._clock = ShiftClock.from_preferences(self._preferences)
        self._logger.info(f"Shift clock initialized: timezone={self._clock.policy.name}")

        banner_dir = config.get('banners.directory', '')
        self._painter = BannerPainter(BannerStore(banner_dir, self._logger), self._preferences, self._logger)
        if banner_dir:
            self._logger.info(f"Loading banners from {banner_dir}")
        else:
            self._logger.info("Using built-in banners")

    def _create_poller(self, dispatcher) -> OmegaPoller:
        """Build the Omega Shift poller on the window's dispatcher"""
        return OmegaPoller.from_config(
            dispatcher,
            self._clock,
            self._preferences,
            config,
            state=get_poll_state(),
            logger=self._logger
        )

    def _initialize_ui(self) -> None:
        """Initialize UI window"""
        self._logger.info("Initializing UI")

        configured = (config.get('display.width', 0), config.get('display.height', 0))
        width, height = DisplayInfo().resolve(*configured)
        if configured != (width, height):
            self._logger.info(f"Auto-detected display: {width}x{height}")
        else:
            self._logger.info(f"Using configured display: {width}x{height}")

        self._main_window = MainWindow(
            clock=self._clock,
            painter=self._painter,
            poller_factory=self._create_poller,
            logger=self._logger,
            width=width,
            height=height,
            fullscreen=config.get('display.fullscreen', True)
        )

        self._main_window.initialize()
        self._logger.info("UI initialized successfully")

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown"""
        def signal_handler(signum, frame):
            self._logger.info(f"Received signal {signum}, shutting down")
            self.shutdown()
            sys.exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def run(self) -> None:
        """Run the application"""
        try:
            self._setup_signal_handlers()
            self._initialize_services()
            self._initialize_ui()

            self._logger.info("Application started successfully")

            # Start UI event loop (blocking)
            self._main_window.start()

        except KeyboardInterrupt:
            self._logger.info("Keyboard interrupt received")
        except Exception as e:
            self._logger.critical(f"Fatal error: {e}", exc_info=True)
            raise
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        """Cleanup and shutdown"""
        if self._main_window is None:
            return
        self._logger.info("Shutting down application")

        if self._main_window.is_running():
            self._main_window.stop()
        self._main_window = None

        self._logger.log_shutdown()


def main():
    """Main entry point"""
    app = Application()
    app.run()


if __name__ == '__main__':
    main()
