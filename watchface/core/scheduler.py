"""
Refresh Scheduler - Per-second redraw timer aligned to wall-clock seconds
"""
import logging
from enum import Enum
from typing import Any, Callable, Optional

from .errors import SchedulingInconsistency
from .interfaces import TimerHost
from .state import TimerState


logger = logging.getLogger(__name__)

INTERACTIVE_UPDATE_RATE_MS = 1000


class SchedulerState(Enum):
    IDLE = 'idle'
    SCHEDULED = 'scheduled'


class RefreshScheduler:
    """
    Two-state machine (IDLE, SCHEDULED) driving interactive-mode redraws.

    At most one fire is pending at any time. Every arm bumps a generation
    counter, and a host callback carrying an older generation is dropped,
    so cancellation holds even when the host already queued the callback.
    """

    def __init__(
        self,
        timer_host: TimerHost,
        now_millis: Callable[[], int],
        redraw: Callable[[], None],
        should_run: Callable[[], bool],
        interval_ms: int = INTERACTIVE_UPDATE_RATE_MS
    ):
        """
        Initialize scheduler.

        Args:
            timer_host: Host one-shot timer capability
            now_millis: Wall clock in epoch milliseconds
            redraw: Called on each fire
            should_run: Liveness check (visible and interactive)
            interval_ms: Tick period; fires align to multiples of it
        """
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")

        self._host = timer_host
        self._now_millis = now_millis
        self._redraw = redraw
        self._should_run = should_run
        self._interval_ms = interval_ms

        self._state = SchedulerState.IDLE
        self._timer = TimerState()
        self._handle: Optional[Any] = None
        self._generation = 0
        self._shut_down = False

    def delay_to_next_tick(self, now_ms: int) -> int:
        """
        Milliseconds until the next interval boundary.

        A call exactly on a boundary waits a full interval.
        """
        return self._interval_ms - (now_ms % self._interval_ms)

    def start(self) -> None:
        """Redraw now and arm the timer, if idle and allowed to run"""
        if self._shut_down:
            logger.debug("start() ignored after shutdown")
            return
        if self._state is SchedulerState.SCHEDULED:
            return
        if not self._should_run():
            return

        try:
            self._redraw()
        finally:
            self._arm()

    def stop(self) -> None:
        """Cancel any pending fire and go idle"""
        self._generation += 1
        if self._handle is not None:
            try:
                self._host.cancel(self._handle)
            except Exception as e:
                logger.debug(f"Timer cancel failed (already fired?): {e}")
            self._handle = None

        if self._state is not SchedulerState.IDLE:
            logger.debug("Refresh timer stopped")
        self._state = SchedulerState.IDLE
        self._timer = TimerState()

    def update(self) -> None:
        """Start or stop depending on the current liveness check"""
        if self._should_run():
            self.start()
        else:
            self.stop()

    def shutdown(self) -> None:
        """Stop for good; later start() calls are ignored"""
        self.stop()
        self._shut_down = True
        logger.debug("Refresh scheduler shut down")

    def on_fire(self) -> None:
        """
        Handle a timer fire.

        Idle fires are logged and ignored. If the face stopped being
        visible and interactive since arming, go idle without drawing;
        the engine already drew that edge when it called update().
        A redraw that raises still leaves the next fire armed.
        """
        if self._state is SchedulerState.IDLE or self._shut_down:
            inconsistency = SchedulingInconsistency("fire delivered while idle")
            logger.debug(f"Ignoring timer fire: {inconsistency}")
            return

        self._handle = None
        if not self._should_run():
            self.stop()
            return

        try:
            self._redraw()
        finally:
            self._arm()

    def _arm(self) -> None:
        """Schedule the next fire at the next interval boundary"""
        if self._handle is not None:
            self._host.cancel(self._handle)
            self._handle = None

        now_ms = self._now_millis()
        delay = self.delay_to_next_tick(now_ms)

        self._generation += 1
        generation = self._generation

        self._handle = self._host.call_later(delay, lambda: self._deliver(generation))
        self._state = SchedulerState.SCHEDULED
        self._timer = TimerState(scheduled=True, next_fire_at_millis=now_ms + delay)

    def _deliver(self, generation: int) -> None:
        """Host callback entry; drops fires from superseded arms"""
        if generation != self._generation:
            logger.debug(f"Dropping stale timer fire (generation {generation})")
            return
        self.on_fire()

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def timer_state(self) -> TimerState:
        """Snapshot of the pending fire"""
        return TimerState(self._timer.scheduled, self._timer.next_fire_at_millis)

    @property
    def interval_ms(self) -> int:
        return self._interval_ms
