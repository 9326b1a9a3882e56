"""
Interfaces - Narrow protocols for the engine's external collaborators
"""
from typing import Any, Callable, Optional, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from ..ui.assets import RawAsset
    from ..ui.compositor import Frame


class AssetSource(Protocol):
    def load(self, asset_id: str) -> 'RawAsset':
        """Load a raw asset. Raises AssetNotFound."""
        ...


class DisplaySink(Protocol):
    def present(self, frame: 'Frame') -> None:
        """Accept one composed frame. Must not block on I/O."""
        ...


class ClockSource(Protocol):
    def now_millis(self) -> int: ...

    def current_timezone(self) -> str: ...


class CalendarDayInfo(Protocol):
    def day_of_month(self, now_millis: int, timezone: str) -> int: ...


class BatteryLevelSource(Protocol):
    def level(self) -> Optional[int]:
        """Charge percentage, or None if unknown."""
        ...


class TimezoneChangeNotifier(Protocol):
    def subscribe(self, callback: Callable[[str], None]) -> None: ...

    def unsubscribe(self) -> None: ...


class TapNotifier(Protocol):
    def show(self, message: str) -> None: ...


class TimerHost(Protocol):
    """
    Host-provided one-shot timer.
    call_later returns an opaque handle accepted by cancel.
    """

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> Any: ...

    def cancel(self, handle: Any) -> None: ...
