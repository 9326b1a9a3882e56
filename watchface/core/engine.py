"""
Watch Face Engine - Lifecycle coordination between host events, scheduler and renderer
"""
import logging
from typing import Optional

from .angles import compute_angles
from .clock_service import is_valid_timezone
from .errors import RenderError
from .events import (
    AmbientModeChanged, EngineEvent, EventQueue, SurfaceChanged, TapEvent,
    TapType, TimeTick, TimezoneChanged, VisibilityChanged,
)
from .scheduler import INTERACTIVE_UPDATE_RATE_MS, RefreshScheduler
from .state import DisplayGeometry, EngineState, Lifecycle, PowerMode, Visibility
from ..ui.assets import AssetScaler, load_asset_set
from ..ui.compositor import Frame, FrameCompositor, OverlayData


logger = logging.getLogger(__name__)

DEFAULT_TAP_MESSAGE = 'Analog watch face'


class WatchFaceEngine:
    """
    Owns the engine state and reacts to host notifications.

    All handlers must run on one thread. Other threads post to the
    EventQueue and the host calls process_pending() on its own thread.
    """

    def __init__(
        self,
        clock,
        asset_source,
        sink,
        timer_host,
        scaler: Optional[AssetScaler] = None,
        compositor: Optional[FrameCompositor] = None,
        battery=None,
        calendar=None,
        timezone_notifier=None,
        tap_notifier=None,
        tap_message: str = DEFAULT_TAP_MESSAGE,
        event_queue: Optional[EventQueue] = None,
        interval_ms: int = INTERACTIVE_UPDATE_RATE_MS
    ):
        """
        Initialize engine.

        Args:
            clock: ClockSource (now_millis, current_timezone)
            asset_source: AssetSource for the four face bitmaps
            sink: DisplaySink receiving frames
            timer_host: TimerHost for the refresh scheduler
            scaler: AssetScaler (default: scaled_background mode)
            compositor: FrameCompositor (default: bitmap hands)
            battery: BatteryLevelSource, optional
            calendar: CalendarDayInfo, defaults to `clock` if it has day_of_month
            timezone_notifier: TimezoneChangeNotifier, optional
            tap_notifier: TapNotifier for tap acknowledgments, optional
            tap_message: Text shown on a completed tap
            event_queue: Queue used to hand off cross-thread notifications
            interval_ms: Interactive refresh period
        """
        self._clock = clock
        self._asset_source = asset_source
        self._sink = sink
        self._scaler = scaler or AssetScaler()
        self._compositor = compositor or FrameCompositor()
        self._battery = battery
        self._calendar = calendar if calendar is not None else (
            clock if hasattr(clock, 'day_of_month') else None
        )
        self._tz_notifier = timezone_notifier
        self._tap_notifier = tap_notifier
        self._tap_message = tap_message
        self._queue = event_queue

        self.state = EngineState()
        self._scheduler = RefreshScheduler(
            timer_host, clock.now_millis, self.redraw, self.should_run, interval_ms
        )

        self._handlers = {
            SurfaceChanged: lambda e: self.on_surface_changed(e.width, e.height),
            VisibilityChanged: lambda e: self.on_visibility_changed(e.visible),
            AmbientModeChanged: lambda e: self.on_ambient_mode_changed(e.ambient),
            TimeTick: lambda e: self.on_time_tick(),
            TimezoneChanged: lambda e: self.on_timezone_changed(e.timezone),
            TapEvent: lambda e: self.on_tap(e.tap_type, e.x, e.y),
        }

        self.frames_drawn = 0
        self.frames_skipped = 0

    # ------------------------
    # Lifecycle
    # ------------------------
    def on_create(self) -> None:
        """
        Load assets and read the initial timezone.

        Raises:
            AssetError: If any face asset is missing or invalid
        """
        if self.state.lifecycle is not Lifecycle.NEW:
            logger.warning(f"on_create() called in state {self.state.lifecycle.value}; ignoring")
            return

        self.state.raw_assets = load_asset_set(self._asset_source)
        self.state.timezone = self._clock.current_timezone()
        self.state.lifecycle = Lifecycle.CREATED

        bg = self.state.raw_assets.background
        logger.info(
            f"Engine created: background {bg.width}x{bg.height}, timezone={self.state.timezone}"
        )

    def on_destroy(self) -> None:
        """Cancel the timer and release subscriptions"""
        if self.state.lifecycle is not Lifecycle.CREATED:
            logger.warning(f"on_destroy() called in state {self.state.lifecycle.value}; ignoring")
            return

        self._scheduler.shutdown()
        if self._tz_notifier:
            self._tz_notifier.unsubscribe()
        self.state.lifecycle = Lifecycle.DESTROYED
        logger.info("Engine destroyed")

    def _active(self, what: str) -> bool:
        if self.state.lifecycle is Lifecycle.CREATED:
            return True
        logger.debug(f"Ignoring {what} in state {self.state.lifecycle.value}")
        return False

    # ------------------------
    # Event dispatch
    # ------------------------
    def handle(self, event: EngineEvent) -> None:
        """Dispatch one inbound event to its handler"""
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.warning(f"Unhandled event: {event!r}")
            return
        handler(event)

    def process_pending(self) -> int:
        """
        Handle everything waiting in the event queue.

        Returns:
            Number of events handled
        """
        if self._queue is None:
            return 0
        events = self._queue.drain()
        for event in events:
            self.handle(event)
        return len(events)

    # ------------------------
    # Handlers
    # ------------------------
    def on_surface_changed(self, width: int, height: int) -> None:
        """Rebuild geometry and scaled assets for a new surface size"""
        if not self._active('surface change'):
            return

        try:
            geometry = DisplayGeometry.from_surface(
                width, height, self.state.raw_assets.background.width
            )
        except ValueError as e:
            logger.warning(f"Ignoring surface change: {e}")
            return

        if geometry == self.state.geometry and self.state.assets is not None:
            return

        assets = self._scaler.scale_set(self.state.raw_assets, geometry)
        self.state.geometry = geometry
        self.state.assets = assets
        logger.info(f"Surface changed: {width}x{height}")
        self.redraw()

    def on_visibility_changed(self, visible: bool) -> None:
        if not self._active('visibility change'):
            return

        visibility = Visibility.VISIBLE if visible else Visibility.HIDDEN
        if visibility is self.state.visibility:
            return
        self.state.visibility = visibility
        logger.debug(f"Visibility: {visibility.value}")

        if visible:
            if self._tz_notifier:
                self._tz_notifier.subscribe(self._on_timezone_notification)
            # Timezone may have changed while hidden
            self.state.timezone = self._clock.current_timezone()
        elif self._tz_notifier:
            self._tz_notifier.unsubscribe()

        self._after_transition()

    def on_ambient_mode_changed(self, ambient: bool) -> None:
        if not self._active('ambient mode change'):
            return

        mode = PowerMode.AMBIENT if ambient else PowerMode.INTERACTIVE
        if mode is self.state.power_mode:
            return
        self.state.power_mode = mode
        logger.info(f"Power mode: {mode.value}")

        self._after_transition()

    def on_time_tick(self) -> None:
        """Coarse tick that keeps the ambient face current"""
        if not self._active('time tick'):
            return
        self.redraw()

    def on_timezone_changed(self, timezone: Optional[str] = None) -> None:
        """
        Apply a timezone change.

        Args:
            timezone: New IANA name, or None to re-read it from the clock
        """
        if not self._active('timezone change'):
            return

        if timezone is None:
            timezone = self._clock.current_timezone()
        if timezone == self.state.timezone:
            return
        if not is_valid_timezone(timezone):
            logger.warning(f"Invalid timezone '{timezone}', keeping {self.state.timezone}")
            return

        logger.info(f"Timezone: {self.state.timezone} -> {timezone}")
        self.state.timezone = timezone
        self.redraw()

    def on_tap(self, tap_type: TapType, x: int = 0, y: int = 0) -> None:
        """Acknowledge completed taps; every tap classification redraws once"""
        if not self._active('tap'):
            return

        if tap_type is TapType.TAP:
            logger.debug(f"Tap at ({x}, {y})")
            if self._tap_notifier:
                self._tap_notifier.show(self._tap_message)

        self.redraw()

    def _after_transition(self) -> None:
        """Exactly one redraw per visibility/mode edge, then fix up the timer"""
        if self.should_run():
            # start() draws immediately when it arms the timer
            self._scheduler.start()
        else:
            self._scheduler.stop()
            self.redraw()

    def _on_timezone_notification(self, timezone: str) -> None:
        """Notifier callback; may run on a foreign thread"""
        if self._queue is not None:
            self._queue.post(TimezoneChanged(timezone))
        else:
            self.on_timezone_changed(timezone)

    # ------------------------
    # Rendering
    # ------------------------
    def should_run(self) -> bool:
        """Per-second timer runs only while visible and interactive"""
        return self.state.is_visible and not self.state.is_ambient

    def redraw(self) -> Optional[Frame]:
        """
        Draw one frame now.

        Returns:
            The presented Frame, or None if nothing was drawn
        """
        state = self.state
        if not state.is_visible or state.geometry is None or state.assets is None:
            return None

        now = self._clock.now_millis()
        angles = compute_angles(now, state.timezone)
        overlay = OverlayData(
            battery_percent=self._read_battery(),
            day_of_month=self._read_day(now, state.timezone),
        )

        try:
            frame = self._compositor.render(
                self._sink, state.geometry, state.assets, angles, state.power_mode, overlay
            )
        except RenderError as e:
            self.frames_skipped += 1
            logger.warning(f"Skipping frame: {e}")
            return None

        self.frames_drawn += 1
        return frame

    def _read_battery(self) -> Optional[int]:
        if self._battery is None:
            return None
        try:
            return self._battery.level()
        except Exception as e:
            logger.debug(f"Battery level unavailable: {e}")
            return None

    def _read_day(self, now: int, timezone: str) -> Optional[int]:
        if self._calendar is None:
            return None
        try:
            return self._calendar.day_of_month(now, timezone)
        except Exception as e:
            logger.debug(f"Day of month unavailable: {e}")
            return None

    @property
    def scheduler(self) -> RefreshScheduler:
        return self._scheduler
