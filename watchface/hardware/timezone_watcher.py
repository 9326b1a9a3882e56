"""
Timezone Watcher - Notifies when the system timezone changes
"""
import logging
from threading import Event, Thread
from typing import Callable, Optional

from ..core.clock_service import detect_system_timezone


logger = logging.getLogger(__name__)


class TimezoneWatcher:
    """
    Polls the system timezone on a background thread.

    subscribe/unsubscribe are guarded by a registration flag, so repeated
    calls are no-ops and the callback is never registered twice. The
    callback runs on the watcher thread; callers hand it off to their own
    event queue.
    """
    
    def __init__(self, detect: Callable[[], str] = detect_system_timezone, poll_seconds: float = 5):
        """
        Initialize watcher.
        
        Args:
            detect: Returns the current system timezone
            poll_seconds: Interval between checks
        """
        self._detect = detect
        self._poll_seconds = poll_seconds
        
        self._registered = False
        self._callback: Optional[Callable[[str], None]] = None
        self._last_timezone: Optional[str] = None
        self._monitor_thread: Optional[Thread] = None
        self._stop_event: Event = Event()
    
    def subscribe(self, callback: Callable[[str], None]) -> None:
        """Start watching; ignored if already subscribed"""
        if self._registered:
            return
        
        self._registered = True
        self._callback = callback
        self._last_timezone = self._detect()
        self._stop_event.clear()
        self._monitor_thread = Thread(target=self._monitor_loop, name='timezone-watcher', daemon=True)
        self._monitor_thread.start()
        logger.debug(f"Timezone watcher subscribed (current: {self._last_timezone})")
    
    def unsubscribe(self) -> None:
        """Stop watching; ignored if not subscribed"""
        if not self._registered:
            return
        
        self._registered = False
        self._callback = None
        self._stop_event.set()
        
        if self._monitor_thread:
            self._monitor_thread.join(timeout=2)
            self._monitor_thread = None
        logger.debug("Timezone watcher unsubscribed")
    
    def check_now(self) -> bool:
        """
        Compare the system timezone with the last seen one.
        
        Returns:
            True if a change was detected and delivered
        """
        callback = self._callback
        if not self._registered or callback is None:
            return False
        
        current = self._detect()
        if current == self._last_timezone:
            return False
        
        logger.info(f"Timezone change detected: {self._last_timezone} -> {current}")
        self._last_timezone = current
        try:
            callback(current)
        except Exception as e:
            logger.error(f"Timezone callback error: {e}", exc_info=True)
        return True
    
    def _monitor_loop(self) -> None:
        """Background polling loop"""
        while not self._stop_event.wait(self._poll_seconds):
            self.check_now()
    
    @property
    def active_subscriptions(self) -> int:
        return 1 if self._registered else 0
