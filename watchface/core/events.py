"""
Events - Inbound host notifications and the queue that serializes them
"""
import queue
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class TapType(Enum):
    """Tap classification delivered by the host input layer."""
    TOUCH = 'touch-start'
    TOUCH_CANCEL = 'touch-cancel'
    TAP = 'tap-complete'


class EngineEvent:
    """Marker base for everything WatchFaceEngine.handle accepts."""


@dataclass(frozen=True)
class SurfaceChanged(EngineEvent):
    width: int
    height: int


@dataclass(frozen=True)
class VisibilityChanged(EngineEvent):
    visible: bool


@dataclass(frozen=True)
class AmbientModeChanged(EngineEvent):
    ambient: bool


@dataclass(frozen=True)
class TimeTick(EngineEvent):
    """Coarse platform tick, roughly once per minute."""


@dataclass(frozen=True)
class TimezoneChanged(EngineEvent):
    timezone: Optional[str] = None


@dataclass(frozen=True)
class TapEvent(EngineEvent):
    tap_type: TapType
    x: int = 0
    y: int = 0


class EventQueue:
    """
    Thread-safe inbox for engine events.

    Any thread may post; only the host thread drains, so every handler
    runs on one logical timeline.
    """

    def __init__(self):
        self._queue: 'queue.Queue[EngineEvent]' = queue.Queue()

    def post(self, event: EngineEvent) -> None:
        """Enqueue an event from any thread"""
        self._queue.put(event)

    def drain(self, limit: int = 100) -> List[EngineEvent]:
        """
        Pop pending events without blocking.

        Args:
            limit: Maximum number of events returned per call

        Returns:
            Events in arrival order
        """
        events = []
        while len(events) < limit:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                break
        return events

    def __len__(self) -> int:
        return self._queue.qsize()
