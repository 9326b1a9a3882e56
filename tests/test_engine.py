"""
Tests for WatchFaceEngine lifecycle coordination
"""
import pytest

from watchface.core.engine import WatchFaceEngine
from watchface.core.errors import AssetNotFound
from watchface.core.events import (
    AmbientModeChanged, EngineEvent, SurfaceChanged, TapEvent, TapType,
    TimeTick, TimezoneChanged, VisibilityChanged,
)
from watchface.core.scheduler import SchedulerState
from watchface.core.state import DisplayGeometry, Lifecycle, PowerMode
from watchface.ui.compositor import TextPrimitive

from conftest import DictAssetSource, make_raw_assets


def _show(engine, width=300, height=300):
    engine.handle(SurfaceChanged(width, height))
    engine.handle(VisibilityChanged(True))


def test_create_loads_assets_and_timezone(engine):
    assert engine.state.lifecycle is Lifecycle.CREATED
    assert engine.state.raw_assets.background.width == 400
    assert engine.state.timezone == 'UTC'
    assert engine.state.geometry is None


def test_create_fails_on_missing_asset(clock, sink, timer_host):
    assets = make_raw_assets()
    del assets['minute_hand']
    engine = WatchFaceEngine(clock, DictAssetSource(assets), sink, timer_host)

    with pytest.raises(AssetNotFound):
        engine.on_create()

    assert engine.state.lifecycle is Lifecycle.NEW


def test_create_twice_is_ignored(engine, clock):
    clock.timezone = 'Asia/Tokyo'

    engine.on_create()

    assert engine.state.timezone == 'UTC'


def test_surface_change_builds_geometry_and_assets(engine, sink):
    engine.handle(SurfaceChanged(300, 300))

    assert engine.state.geometry == DisplayGeometry.from_surface(300, 300, 400)
    assert engine.state.assets.background.width == 300
    assert engine.state.assets.scale_factor == engine.state.geometry.scale_factor
    # Hidden faces are not drawn
    assert sink.frames == []


def test_invalid_surface_size_is_ignored(engine):
    engine.handle(SurfaceChanged(0, 300))

    assert engine.state.geometry is None
    assert engine.state.assets is None


def test_resize_replaces_assets(engine):
    _show(engine)
    first = engine.state.assets

    engine.handle(SurfaceChanged(200, 200))

    assert engine.state.assets is not first
    assert engine.state.assets.background.width == 200
    assert engine.state.geometry.center_x == 100.0


def test_same_surface_size_keeps_assets(engine, sink):
    _show(engine)
    assets = engine.state.assets
    drawn = len(sink.frames)

    engine.handle(SurfaceChanged(300, 300))

    assert engine.state.assets is assets
    assert len(sink.frames) == drawn


def test_becoming_visible_draws_once_and_arms_timer(engine, sink, timer_host):
    engine.handle(SurfaceChanged(300, 300))

    engine.handle(VisibilityChanged(True))

    assert len(sink.frames) == 1
    assert engine.scheduler.state is SchedulerState.SCHEDULED
    assert timer_host.delays == [250]


def test_interactive_frame_contents(engine, sink):
    _show(engine)
    frame = sink.frames[-1]

    assert frame.names() == ['background', 'day', 'hour', 'minute', 'second']
    day = [p for p in frame.primitives if isinstance(p, TextPrimitive)][0]
    assert day.text == '17'


def test_tick_redraws_and_rearms(engine, sink, timer_host, clock):
    _show(engine)
    clock.now += 250

    timer_host.fire_next()

    assert len(sink.frames) == 2
    assert len(timer_host.pending) == 1
    assert timer_host.delays[-1] == 1000


def test_ambient_and_back(engine, sink, timer_host):
    _show(engine)

    engine.handle(AmbientModeChanged(True))
    assert len(sink.frames) == 2
    assert engine.scheduler.state is SchedulerState.IDLE
    assert timer_host.pending == {}
    assert sink.frames[-1].names()[-1] == 'minute'

    engine.handle(TimeTick())
    assert len(sink.frames) == 3

    engine.handle(AmbientModeChanged(False))
    assert len(sink.frames) == 4
    assert engine.scheduler.state is SchedulerState.SCHEDULED
    assert sink.frames[-1].names()[-1] == 'second'


def test_repeated_mode_and_visibility_events_are_idempotent(engine, sink, timer_host):
    _show(engine)

    engine.handle(VisibilityChanged(True))
    engine.handle(AmbientModeChanged(False))

    assert len(sink.frames) == 1
    assert len(timer_host.pending) == 1


def test_hidden_stops_timer_without_drawing(engine, sink, timer_host):
    _show(engine)

    engine.handle(VisibilityChanged(False))

    assert len(sink.frames) == 1
    assert engine.scheduler.state is SchedulerState.IDLE
    assert timer_host.pending == {}


def test_time_tick_while_hidden_draws_nothing(engine, sink):
    engine.handle(SurfaceChanged(300, 300))

    engine.handle(TimeTick())

    assert sink.frames == []


def test_ambient_while_hidden_keeps_timer_idle(engine, timer_host):
    engine.handle(SurfaceChanged(300, 300))

    engine.handle(AmbientModeChanged(True))
    engine.handle(AmbientModeChanged(False))

    assert timer_host.delays == []
    assert engine.state.power_mode is PowerMode.INTERACTIVE


def test_timezone_notifier_follows_visibility(engine, tz_notifier):
    _show(engine)
    assert tz_notifier.registered

    engine.handle(VisibilityChanged(False))
    assert not tz_notifier.registered

    engine.handle(VisibilityChanged(True))
    assert tz_notifier.registered
    assert tz_notifier.subscribe_calls == 2


def test_visible_edge_rereads_timezone(engine, clock):
    clock.timezone = 'Europe/Paris'

    _show(engine)

    assert engine.state.timezone == 'Europe/Paris'


def test_timezone_notification_is_queued_then_applied(engine, tz_notifier, event_queue, sink):
    _show(engine)

    tz_notifier.callback('Asia/Kolkata')

    assert engine.state.timezone == 'UTC'
    assert len(event_queue) == 1
    assert engine.process_pending() == 1
    assert engine.state.timezone == 'Asia/Kolkata'
    assert len(sink.frames) == 2


def test_same_timezone_does_not_redraw(engine, sink):
    _show(engine)

    engine.handle(TimezoneChanged('UTC'))

    assert len(sink.frames) == 1


def test_timezone_change_without_name_reads_clock(engine, clock):
    _show(engine)
    clock.timezone = 'America/New_York'

    engine.handle(TimezoneChanged())

    assert engine.state.timezone == 'America/New_York'


def test_notification_without_queue_applies_directly(clock, sink, timer_host, tz_notifier):
    engine = WatchFaceEngine(
        clock, DictAssetSource(make_raw_assets()), sink, timer_host,
        timezone_notifier=tz_notifier,
    )
    engine.on_create()
    _show(engine)

    tz_notifier.callback('Australia/Sydney')

    assert engine.state.timezone == 'Australia/Sydney'


def test_completed_tap_shows_message(engine, tap_notifier, sink):
    _show(engine)

    engine.handle(TapEvent(TapType.TAP, 10, 20))

    assert tap_notifier.messages == ['hello']
    assert len(sink.frames) == 2


@pytest.mark.parametrize('tap_type', [TapType.TOUCH, TapType.TOUCH_CANCEL])
def test_other_taps_only_redraw(engine, tap_notifier, sink, tap_type):
    _show(engine)

    engine.handle(TapEvent(tap_type))

    assert tap_notifier.messages == []
    assert len(sink.frames) == 2


class FailingBattery:
    def level(self):
        raise OSError("no battery")


class FixedBattery:
    def level(self):
        return 64


def test_battery_overlay(clock, sink, timer_host):
    engine = WatchFaceEngine(
        clock, DictAssetSource(make_raw_assets()), sink, timer_host, battery=FixedBattery()
    )
    engine.on_create()
    _show(engine)

    texts = {p.name: p.text for p in sink.frames[-1].primitives if isinstance(p, TextPrimitive)}
    assert texts == {'battery': '64%', 'day': '17'}


def test_battery_failure_still_draws(clock, sink, timer_host):
    engine = WatchFaceEngine(
        clock, DictAssetSource(make_raw_assets()), sink, timer_host, battery=FailingBattery()
    )
    engine.on_create()
    _show(engine)

    assert len(sink.frames) == 1
    assert 'battery' not in sink.frames[-1].names()


def test_render_error_skips_frame(engine, sink):
    _show(engine)
    # Geometry no longer matches the scaled assets
    engine.state.geometry = DisplayGeometry.from_surface(360, 360, 400)

    assert engine.redraw() is None
    assert engine.frames_skipped == 1
    assert len(sink.frames) == 1


def test_unknown_event_is_ignored(engine, sink):
    _show(engine)

    engine.handle(EngineEvent())

    assert len(sink.frames) == 1


def test_destroy_cancels_timer_and_unsubscribes(engine, timer_host, tz_notifier, sink):
    _show(engine)

    engine.on_destroy()

    assert engine.state.lifecycle is Lifecycle.DESTROYED
    assert timer_host.pending == {}
    assert not tz_notifier.registered

    engine.handle(TimeTick())
    engine.handle(VisibilityChanged(False))
    engine.handle(VisibilityChanged(True))
    assert len(sink.frames) == 1
    assert timer_host.pending == {}


def test_process_pending_handles_events_in_order(engine, event_queue, sink):
    event_queue.post(SurfaceChanged(300, 300))
    event_queue.post(VisibilityChanged(True))
    event_queue.post(AmbientModeChanged(True))

    assert engine.process_pending() == 3
    assert engine.state.power_mode is PowerMode.AMBIENT
    assert len(sink.frames) == 2
    assert len(event_queue) == 0


def test_unknown_timezone_is_rejected(engine, sink, timer_host):
    _show(engine)

    engine.handle(TimezoneChanged('Not/AZone'))

    assert engine.state.timezone == 'UTC'
    assert len(sink.frames) == 1
    timer_host.fire_next()
    assert len(sink.frames) == 2
