"""
Main Window - Tkinter host for the watch face engine
"""
import time
import tkinter as tk
from typing import Any, Callable, Optional

from PIL import Image, ImageTk

from ..core.engine import WatchFaceEngine
from ..core.events import (
    AmbientModeChanged, SurfaceChanged, TapEvent, TapType,
    TimeTick, VisibilityChanged,
)
from ..core.logging_service import LoggingService
from .raster import PilRasterizer
from .theme import Theme


TAP_SLOP_PX = 10
QUEUE_POLL_MS = 50
IDLE_CHECK_MS = 1000
TOAST_DURATION_MS = 2000


class TkTimerHost:
    """TimerHost backed by Tk's after()/after_cancel()."""

    def __init__(self, root: tk.Tk):
        self._root = root

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> Any:
        return self._root.after(int(delay_ms), callback)

    def cancel(self, handle: Any) -> None:
        self._root.after_cancel(handle)


class CanvasToast:
    """TapNotifier that shows a short-lived label on the canvas."""

    def __init__(self, root: tk.Tk, canvas: tk.Canvas):
        self._root = root
        self._canvas = canvas
        self._items = []
        self._after_id = None

    def show(self, message: str) -> None:
        self.clear()
        width = int(self._canvas.winfo_width())
        height = int(self._canvas.winfo_height())
        x, y = width / 2, height * 0.8

        text_id = self._canvas.create_text(
            x, y, text=message, fill=Theme.TOAST_FG, font=('Helvetica', 14)
        )
        x0, y0, x1, y1 = self._canvas.bbox(text_id)
        rect_id = self._canvas.create_rectangle(
            x0 - 10, y0 - 6, x1 + 10, y1 + 6, fill=Theme.TOAST_BG, outline=''
        )
        self._canvas.tag_raise(text_id, rect_id)
        self._items = [rect_id, text_id]
        self._after_id = self._root.after(TOAST_DURATION_MS, self.clear)

    def clear(self) -> None:
        if self._after_id is not None:
            self._root.after_cancel(self._after_id)
            self._after_id = None
        for item in self._items:
            self._canvas.delete(item)
        self._items = []


class MainWindow:
    """
    Tk window that feeds host events into a WatchFaceEngine and shows its frames.
    """

    def __init__(
        self,
        engine_factory: Callable[..., WatchFaceEngine],
        logger: LoggingService,
        width: int = 454,
        height: int = 454,
        fullscreen: bool = False,
        ambient_timeout: float = 30,
        time_tick_seconds: int = 60
    ):
        """
        Initialize main window.

        Args:
            engine_factory: Builds the engine from (timer_host, sink, tap_notifier)
            logger: Logging service
            width: Window width
            height: Window height
            fullscreen: Whether to run fullscreen
            ambient_timeout: Seconds without input before entering ambient, 0 disables
            time_tick_seconds: Period of the coarse time tick
        """
        self._engine_factory = engine_factory
        self._logger = logger

        self._width = width
        self._height = height
        self._fullscreen = fullscreen
        self._ambient_timeout = ambient_timeout
        self._time_tick_ms = max(1, int(time_tick_seconds)) * 1000

        self._root: Optional[tk.Tk] = None
        self._canvas: Optional[tk.Canvas] = None
        self._image_id: Optional[int] = None
        self._photo: Optional[ImageTk.PhotoImage] = None
        self._engine: Optional[WatchFaceEngine] = None

        self._running = False
        self._ambient = False
        self._surface = (0, 0)
        self._press_pos = None
        self._last_activity = time.monotonic()

    def initialize(self) -> None:
        """
        Create the Tk window and the engine.

        Raises:
            AssetError: If the engine cannot load its assets
        """
        self._logger.info("Initializing UI window")

        self._root = tk.Tk()
        self._root.title("Watch Face")
        self._root.configure(bg=Theme.BG_PRIMARY)

        if self._fullscreen:
            self._root.attributes('-fullscreen', True)
            self._root.config(cursor='none')
        else:
            self._root.geometry(f"{self._width}x{self._height}")

        self._canvas = tk.Canvas(
            self._root,
            width=self._width,
            height=self._height,
            bg=Theme.BG_PRIMARY,
            highlightthickness=0
        )
        self._canvas.pack(fill=tk.BOTH, expand=True)
        self._image_id = self._canvas.create_image(0, 0, anchor=tk.NW)

        sink = PilRasterizer(on_frame=self._show_image)
        self._engine = self._engine_factory(
            timer_host=TkTimerHost(self._root),
            sink=sink,
            tap_notifier=CanvasToast(self._root, self._canvas),
        )
        self._engine.on_create()

        self._canvas.bind('<Configure>', self._on_configure)
        self._canvas.bind('<ButtonPress-1>', self._on_press)
        self._canvas.bind('<ButtonRelease-1>', self._on_release)
        self._canvas.bind('<Motion>', self._on_activity)
        self._root.bind('<Map>', lambda e: self._on_visibility(e, True))
        self._root.bind('<Unmap>', lambda e: self._on_visibility(e, False))
        self._root.bind('<Key>', self._on_key)
        self._root.bind('<Escape>', self._exit_fullscreen)
        self._root.protocol("WM_DELETE_WINDOW", self.stop)

        self._logger.info(f"UI initialized: {self._width}x{self._height}")

    def _show_image(self, image: Image.Image) -> None:
        """DisplaySink callback: put the rendered frame on the canvas"""
        if not self._canvas:
            return
        self._photo = ImageTk.PhotoImage(image)
        self._canvas.itemconfig(self._image_id, image=self._photo)

    # ------------------------
    # Host events
    # ------------------------
    def _on_configure(self, event) -> None:
        size = (event.width, event.height)
        if size != self._surface and event.width > 1 and event.height > 1:
            self._surface = size
            self._engine.handle(SurfaceChanged(event.width, event.height))

    def _on_visibility(self, event, visible: bool) -> None:
        if event.widget is not self._root:
            return
        self._engine.handle(VisibilityChanged(visible))

    def _on_press(self, event) -> None:
        self._on_activity(event)
        self._press_pos = (event.x, event.y)
        self._engine.handle(TapEvent(TapType.TOUCH, event.x, event.y))

    def _on_release(self, event) -> None:
        if self._press_pos is None:
            return
        px, py = self._press_pos
        self._press_pos = None
        moved = abs(event.x - px) > TAP_SLOP_PX or abs(event.y - py) > TAP_SLOP_PX
        tap_type = TapType.TOUCH_CANCEL if moved else TapType.TAP
        self._engine.handle(TapEvent(tap_type, event.x, event.y))

    def _on_key(self, event) -> None:
        if event.keysym.lower() == 'a':
            self._set_ambient(not self._ambient)
            self._last_activity = time.monotonic()
            return
        self._on_activity(event)

    def _on_activity(self, event=None) -> None:
        self._last_activity = time.monotonic()
        if self._ambient:
            self._set_ambient(False)

    def _set_ambient(self, ambient: bool) -> None:
        self._ambient = ambient
        self._engine.handle(AmbientModeChanged(ambient))

    # ------------------------
    # Periodic host work
    # ------------------------
    def _pump_queue(self) -> None:
        if not self._running:
            return
        try:
            self._engine.process_pending()
        except Exception as e:
            self._logger.error(f"Event handling error: {e}", exc_info=True)
        self._root.after(QUEUE_POLL_MS, self._pump_queue)

    def _check_idle(self) -> None:
        if not self._running:
            return
        if self._ambient_timeout > 0 and not self._ambient:
            if time.monotonic() - self._last_activity >= self._ambient_timeout:
                self._logger.info("Idle timeout, entering ambient mode")
                self._set_ambient(True)
        self._root.after(IDLE_CHECK_MS, self._check_idle)

    def _schedule_time_tick(self) -> None:
        """Deliver TimeTick on each tick boundary (the minute by default)"""
        now_ms = int(time.time() * 1000)
        delay = self._time_tick_ms - (now_ms % self._time_tick_ms)
        self._root.after(delay, self._time_tick)

    def _time_tick(self) -> None:
        if not self._running:
            return
        self._engine.handle(TimeTick())
        self._schedule_time_tick()

    def _exit_fullscreen(self, event=None) -> None:
        """Exit fullscreen mode"""
        if self._root and self._fullscreen:
            self._root.attributes('-fullscreen', False)
            self._root.config(cursor='')
            self._fullscreen = False
            self._logger.info("Exited fullscreen mode")

    def start(self) -> None:
        """Start UI event loop"""
        if not self._root:
            self.initialize()

        self._logger.info("Starting UI event loop")
        self._running = True
        self._last_activity = time.monotonic()

        self._root.update_idletasks()
        width = self._canvas.winfo_width()
        height = self._canvas.winfo_height()
        # Unmapped canvases report 1x1
        self._surface = (width if width > 1 else self._width,
                         height if height > 1 else self._height)
        self._engine.handle(SurfaceChanged(*self._surface))
        self._engine.handle(VisibilityChanged(True))

        self._root.after(QUEUE_POLL_MS, self._pump_queue)
        self._root.after(IDLE_CHECK_MS, self._check_idle)
        self._schedule_time_tick()

        self._root.mainloop()

    def stop(self) -> None:
        """Stop UI and cleanup"""
        self._logger.info("Stopping UI")
        self._running = False

        if self._engine:
            self._engine.on_destroy()

        if self._root:
            try:
                self._root.quit()
                self._root.destroy()
            except tk.TclError as e:
                self._logger.error(f"Error during UI cleanup: {e}")

        self._root = None
        self._canvas = None

    def is_running(self) -> bool:
        """Check if UI is running"""
        return self._running

    @property
    def engine(self) -> Optional[WatchFaceEngine]:
        return self._engine
