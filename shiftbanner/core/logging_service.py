"""
Logging Service - Console logging shared by the scheduler, poller and UI
"""
import sys
import logging
from typing import Optional


LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL
}

# Probes log from worker and timer threads, so the thread name is included.
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s (%(threadName)s): %(message)s'


class LoggingService:
    """
    Thin wrapper over a stdlib logger with one stdout handler.
    """

    def __init__(self, name: str = 'shiftbanner', level: str = 'INFO'):
        """
        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        self._logger = logging.getLogger(name)
        self._handler = logging.StreamHandler(sys.stdout)
        self._handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))

        # Replace handlers left over from an earlier instance
        self._logger.handlers.clear()
        self._logger.addHandler(self._handler)
        self.set_level(level)

    def set_level(self, level: str) -> None:
        """Change the level of the logger and its handler"""
        log_level = LEVELS.get(level.upper(), logging.INFO)
        self._logger.setLevel(log_level)
        self._handler.setLevel(log_level)

    def debug(self, message: str) -> None:
        self._logger.debug(message)

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warning(self, message: str, exc_info: bool = False) -> None:
        self._logger.warning(message, exc_info=exc_info)

    def error(self, message: str, exc_info: bool = False) -> None:
        """
        Log error message.

        Args:
            message: Error message
            exc_info: Include exception traceback
        """
        self._logger.error(message, exc_info=exc_info)

    def critical(self, message: str, exc_info: bool = False) -> None:
        self._logger.critical(message, exc_info=exc_info)

    def log_startup(self, version: str, summary: dict) -> None:
        """
        Log the effective settings at startup.

        Args:
            version: Application version
            summary: Nested dict with timezone, omega and banners sections
        """
        timezone = summary.get('timezone', {})
        omega = summary.get('omega', {})
        banners = summary.get('banners', {})

        if timezone.get('use_reference', True):
            zone = f"{timezone.get('reference', 'America/Los_Angeles')} (reference)"
        else:
            zone = "system local"

        self.info("=" * 60)
        self.info(f"Shift Banner v{version} starting (Python {sys.version.split()[0]})")
        self.info(f"Timezone: {zone}")
        self.info(f"Omega Shift checks: {'enabled' if omega.get('enabled') else 'disabled'}")
        self.info(f"Banner set: {'Rustproof Bee Shed' if banners.get('bee_shed') else 'standard'}")
        self.info("=" * 60)

    def log_shutdown(self) -> None:
        self.info("Shift Banner stopped")

    @property
    def name(self) -> str:
        return self._logger.name


_logging_service: Optional[LoggingService] = None


def get_logger(name: str = 'shiftbanner', level: Optional[str] = None) -> LoggingService:
    """
    Get or create the logging service singleton.

    Args:
        name: Logger name, only used on first call
        level: Log level; applied to the existing service when given

    Returns:
        LoggingService instance
    """
    global _logging_service
    if _logging_service is None:
        _logging_service = LoggingService(name, level or 'INFO')
    elif level:
        _logging_service.set_level(level)
    return _logging_service
