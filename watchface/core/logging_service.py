"""
Logging Service - Console (and optional rotating file) logging for the watch face
"""
import sys
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class LoggingService:
    """
    Owns the 'watchface' logger and its handlers.

    Engine modules log through logging.getLogger(__name__); those loggers
    are children of this one, so level and handlers set here apply to all
    of them.
    """

    def __init__(self, name: str = 'watchface', level: str = 'INFO', log_file: str = ''):
        """
        Args:
            name: Logger name
            level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL
            log_file: Also write to this file (rotated at 1 MB), empty for console only
        """
        self._logger = logging.getLogger(name)
        self._logger.propagate = False
        self._log_file = log_file
        self._logger.setLevel(self._parse_level(level))
        self._install_handlers()

    @staticmethod
    def _parse_level(level: str) -> int:
        name = str(level).upper()
        if name not in LEVELS:
            return logging.INFO
        return getattr(logging, name)

    def _install_handlers(self) -> None:
        self._logger.handlers.clear()
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

        handlers = [logging.StreamHandler(sys.stdout)]
        if self._log_file:
            try:
                Path(self._log_file).parent.mkdir(parents=True, exist_ok=True)
                handlers.append(RotatingFileHandler(self._log_file, maxBytes=1_000_000, backupCount=3))
            except OSError as e:
                print(f"Cannot open log file {self._log_file}: {e}", file=sys.stderr)

        for handler in handlers:
            handler.setLevel(self._logger.level)
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    def debug(self, message: str, **kwargs) -> None:
        self._logger.debug(message, extra=kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._logger.info(message, extra=kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._logger.warning(message, extra=kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs) -> None:
        """
        Log error message.

        Args:
            message: Error message
            exc_info: Include exception traceback
            **kwargs: Additional context
        """
        self._logger.error(message, exc_info=exc_info, extra=kwargs)

    def critical(self, message: str, exc_info: bool = False, **kwargs) -> None:
        self._logger.critical(message, exc_info=exc_info, extra=kwargs)

    def set_level(self, level: str) -> None:
        """Change the level of the logger and every handler"""
        self._logger.setLevel(self._parse_level(level))
        for handler in self._logger.handlers:
            handler.setLevel(self._logger.level)

    def log_startup(self, version: str, config: dict) -> None:
        """
        Log a startup banner.

        Args:
            version: Application version
            config: Summary with 'timezone', 'display' and 'hand_style'
        """
        display = config.get('display', {})
        self.info("=" * 60)
        self.info(f"Watch face v{version} starting up")
        self.info(f"Python: {sys.version.split()[0]}")
        self.info(f"Timezone: {config.get('timezone') or 'system'}")
        self.info(f"Display: {display.get('width', 0)}x{display.get('height', 0)}"
                  f"{' fullscreen' if display.get('fullscreen') else ''}")
        self.info(f"Hands: {config.get('hand_style', 'bitmap')}")
        self.info("=" * 60)

    def log_frame_stats(self, drawn: int, skipped: int) -> None:
        """Summarize rendering at shutdown"""
        if skipped:
            self.warning(f"Frames drawn: {drawn}, skipped: {skipped}")
        else:
            self.info(f"Frames drawn: {drawn}")

    def log_shutdown(self) -> None:
        self.info("=" * 60)
        self.info("Watch face shutting down")
        self.info("=" * 60)

    @property
    def logger(self) -> logging.Logger:
        return self._logger


_logging_service: Optional[LoggingService] = None


def get_logger(name: str = 'watchface', level: str = 'INFO', log_file: str = '') -> LoggingService:
    """
    Get or create the logging service singleton.

    Arguments are only used on the first call.
    """
    global _logging_service
    if _logging_service is None:
        _logging_service = LoggingService(name, level, log_file)
    return _logging_service
