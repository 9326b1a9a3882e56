"""
Shared fakes for the watch face tests
"""
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from PIL import Image

from watchface.core.engine import WatchFaceEngine
from watchface.core.errors import AssetNotFound
from watchface.core.events import EventQueue
from watchface.ui.assets import RawAsset


def epoch_millis(year, month, day, hour=0, minute=0, second=0, millis=0, tz='UTC'):
    """Epoch milliseconds for a wall-clock time in a timezone"""
    stamp = datetime(year, month, day, hour, minute, second, tzinfo=ZoneInfo(tz)).timestamp()
    return int(stamp) * 1000 + millis


class ManualTimerHost:
    """TimerHost whose callbacks run only when a test fires them."""

    def __init__(self):
        self.pending = {}
        self.delays = []
        self.cancelled = []
        self._next_handle = 0

    def call_later(self, delay_ms, callback):
        self._next_handle += 1
        self.pending[self._next_handle] = (delay_ms, callback)
        self.delays.append(delay_ms)
        return self._next_handle

    def cancel(self, handle):
        self.cancelled.append(handle)
        self.pending.pop(handle, None)

    def fire_next(self):
        handle = min(self.pending)
        _, callback = self.pending.pop(handle)
        callback()
        return handle


class FakeClock:
    """ClockSource and CalendarDayInfo with a settable time."""

    def __init__(self, now=0, timezone='UTC'):
        self.now = now
        self.timezone = timezone

    def now_millis(self):
        return self.now

    def advance(self, millis):
        self.now += millis

    def current_timezone(self):
        return self.timezone

    def day_of_month(self, now_millis, timezone):
        return datetime.fromtimestamp(now_millis // 1000, tz=ZoneInfo(timezone)).day


class RecordingSink:
    def __init__(self):
        self.frames = []

    def present(self, frame):
        self.frames.append(frame)


class NotifierSpy:
    def __init__(self):
        self.messages = []

    def show(self, message):
        self.messages.append(message)


class FakeTimezoneNotifier:
    """Guarded-flag notifier that records subscribe/unsubscribe calls."""

    def __init__(self):
        self.registered = False
        self.callback = None
        self.subscribe_calls = 0

    def subscribe(self, callback):
        self.subscribe_calls += 1
        if self.registered:
            return
        self.registered = True
        self.callback = callback

    def unsubscribe(self):
        if not self.registered:
            return
        self.registered = False
        self.callback = None


class DictAssetSource:
    def __init__(self, assets):
        self._assets = assets

    def load(self, asset_id):
        if asset_id not in self._assets:
            raise AssetNotFound(asset_id)
        return self._assets[asset_id]


def solid_asset(asset_id, size, color):
    return RawAsset(asset_id, Image.new('RGBA', size, color))


def make_raw_assets(background_size=(400, 400), hand_size=(20, 160)):
    return {
        'background': solid_asset('background', background_size, (200, 0, 0, 255)),
        'hour_hand': solid_asset('hour_hand', hand_size, (0, 0, 255, 255)),
        'minute_hand': solid_asset('minute_hand', hand_size, (0, 255, 0, 255)),
        'second_hand': solid_asset('second_hand', hand_size, (255, 255, 0, 255)),
    }


@pytest.fixture
def timer_host():
    return ManualTimerHost()


@pytest.fixture
def clock():
    return FakeClock(now=epoch_millis(2024, 5, 17, 10, 8, 30, 750))


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def tap_notifier():
    return NotifierSpy()


@pytest.fixture
def tz_notifier():
    return FakeTimezoneNotifier()


@pytest.fixture
def event_queue():
    return EventQueue()


@pytest.fixture
def engine(clock, sink, timer_host, tap_notifier, tz_notifier, event_queue):
    engine = WatchFaceEngine(
        clock=clock,
        asset_source=DictAssetSource(make_raw_assets()),
        sink=sink,
        timer_host=timer_host,
        timezone_notifier=tz_notifier,
        tap_notifier=tap_notifier,
        tap_message='hello',
        event_queue=event_queue,
    )
    engine.on_create()
    return engine
