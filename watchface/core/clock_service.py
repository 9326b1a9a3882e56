"""
Clock Service - Wall clock, timezone tracking and calendar lookups
"""
import logging
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

import pytz
from zoneinfo import ZoneInfo


logger = logging.getLogger(__name__)

LOCALTIME_PATH = Path('/etc/localtime')
TIMEZONE_FILE = Path('/etc/timezone')


def is_valid_timezone(timezone: Optional[str]) -> bool:
    """Check an IANA timezone name against the pytz database"""
    if not timezone:
        return False
    try:
        pytz.timezone(timezone)
        return True
    except pytz.UnknownTimeZoneError:
        return False


def detect_system_timezone() -> str:
    """
    Best-effort system timezone lookup.

    Checks the TZ environment variable, /etc/timezone, then the
    /etc/localtime symlink target.

    Returns:
        IANA timezone string, 'UTC' if nothing usable was found
    """
    env_tz = os.environ.get('TZ', '').lstrip(':')
    if is_valid_timezone(env_tz):
        return env_tz

    try:
        if TIMEZONE_FILE.exists():
            name = TIMEZONE_FILE.read_text().strip()
            if is_valid_timezone(name):
                return name
    except OSError as e:
        logger.debug(f"Could not read {TIMEZONE_FILE}: {e}")

    try:
        if LOCALTIME_PATH.is_symlink():
            target = str(LOCALTIME_PATH.resolve())
            if 'zoneinfo/' in target:
                name = target.split('zoneinfo/', 1)[1]
                if is_valid_timezone(name):
                    return name
    except OSError as e:
        logger.debug(f"Could not resolve {LOCALTIME_PATH}: {e}")

    return 'UTC'


class ClockService:
    """
    Clock source with timezone support.

    An empty configured timezone follows the system timezone.
    """

    def __init__(self, timezone: str = ''):
        """
        Initialize clock service with timezone.

        Args:
            timezone: IANA timezone string (e.g., 'America/Los_Angeles'),
                empty to follow the system
        """
        self._follow_system = not timezone
        self._timezone = 'UTC'
        self._tz_obj: ZoneInfo = ZoneInfo('UTC')
        self.set_timezone(timezone or detect_system_timezone())

    def set_timezone(self, timezone: str) -> bool:
        """
        Change timezone dynamically.

        Args:
            timezone: IANA timezone string

        Returns:
            True if successful, False if the name is unknown (old one kept)
        """
        if not is_valid_timezone(timezone):
            logger.warning(f"Invalid timezone '{timezone}', keeping {self._timezone}")
            return False

        self._timezone = timezone
        self._tz_obj = ZoneInfo(timezone)
        return True

    def refresh(self) -> str:
        """
        Re-read the system timezone when following it.

        Returns:
            Current timezone string
        """
        if self._follow_system:
            detected = detect_system_timezone()
            if detected != self._timezone:
                logger.info(f"System timezone changed: {self._timezone} -> {detected}")
                self.set_timezone(detected)
        return self._timezone

    def now_millis(self) -> int:
        """Current time in epoch milliseconds"""
        return time.time_ns() // 1_000_000

    def current_timezone(self) -> str:
        """Current timezone, re-read from the system when following it"""
        return self.refresh()

    def day_of_month(self, now_millis: int, timezone: Optional[str] = None) -> int:
        """
        Day of month for a timestamp.

        Args:
            now_millis: Epoch milliseconds
            timezone: IANA name, defaults to the current timezone

        Returns:
            Day of month (1-31)
        """
        tz = ZoneInfo(timezone) if timezone else self._tz_obj
        return datetime.fromtimestamp(now_millis // 1000, tz=tz).day

    @property
    def timezone(self) -> str:
        """Get current timezone string"""
        return self._timezone

    @property
    def follows_system(self) -> bool:
        return self._follow_system
