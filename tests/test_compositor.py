"""
Tests for frame composition: draw order, hand transforms and ambient rules
"""
import numpy as np
import pytest

from watchface.core.angles import ClockAngles
from watchface.core.errors import RenderError
from watchface.core.state import DisplayGeometry, PowerMode
from watchface.ui.assets import AssetScaler, RawAssetSet
from watchface.ui.compositor import (
    BitmapPrimitive, FrameCompositor, OverlayData, RoundRectPrimitive, TextPrimitive,
    apply_transform, rotation_about, translation,
)

from conftest import RecordingSink, make_raw_assets


@pytest.fixture
def geometry():
    return DisplayGeometry.from_surface(300, 300, 400)


@pytest.fixture
def assets(geometry):
    raw = RawAssetSet(**make_raw_assets(hand_size=(20, 160)))
    return AssetScaler('background_factor').scale_set(raw, geometry)


OVERLAY = OverlayData(battery_percent=87, day_of_month=17)


def test_interactive_draw_order(geometry, assets):
    frame = FrameCompositor().compose(
        geometry, assets, ClockAngles(10.0, 20.0, 30.0), PowerMode.INTERACTIVE, OVERLAY
    )

    assert frame.names() == ['background', 'battery', 'day', 'hour', 'minute', 'second']
    assert len(frame.hand_primitives()) == 3
    assert frame.size == (300, 300)


def test_ambient_omits_second_hand(geometry, assets):
    frame = FrameCompositor().compose(
        geometry, assets, ClockAngles(10.0, 20.0, 30.0), PowerMode.AMBIENT, OVERLAY
    )

    assert frame.names() == ['background', 'battery', 'day', 'hour', 'minute']
    assert len(frame.hand_primitives()) == 2


def test_missing_overlay_values_are_not_drawn(geometry, assets):
    frame = FrameCompositor().compose(
        geometry, assets, ClockAngles(0.0, 0.0, 0.0), PowerMode.INTERACTIVE,
        OverlayData(battery_percent=None, day_of_month=5),
    )

    texts = [p for p in frame.primitives if isinstance(p, TextPrimitive)]
    assert [t.name for t in texts] == ['day']
    assert texts[0].text == '5'


def test_overlay_positions_and_text(geometry, assets):
    frame = FrameCompositor(overlay_font_size=18).compose(
        geometry, assets, ClockAngles(0.0, 0.0, 0.0), PowerMode.INTERACTIVE, OVERLAY
    )
    texts = {p.name: p for p in frame.primitives if isinstance(p, TextPrimitive)}

    assert texts['battery'].text == '87%'
    assert texts['battery'].position == pytest.approx((150 - 300 / 12.0, 150 + 300 / 8.0))
    assert texts['day'].position == pytest.approx((150 + 300 / 3.2, 150 + 300 / 42.0))
    assert texts['day'].font_size == 18


def test_background_drawn_at_origin(geometry, assets):
    frame = FrameCompositor().compose(
        geometry, assets, ClockAngles(0.0, 0.0, 0.0), PowerMode.INTERACTIVE
    )
    background = frame.primitives[0]

    assert isinstance(background, BitmapPrimitive)
    assert background.image is assets.background.image
    assert np.allclose(background.transform, np.identity(3))


@pytest.mark.parametrize('angles', [
    ClockAngles(195.0, 180.0, 0.0),
    ClockAngles(332.5, 30.0, 240.6),
    ClockAngles(0.0, 354.0, 359.994),
    ClockAngles(90.0, 90.0, 90.0),
])
def test_delta_composition_matches_absolute_angles(geometry, assets, angles):
    frame = FrameCompositor().compose(geometry, assets, angles, PowerMode.INTERACTIVE)
    hands = {p.name: p for p in frame.hand_primitives()}
    cx, cy = geometry.pivot

    for name, absolute in (('hour', angles.hour_deg), ('minute', angles.minute_deg),
                           ('second', angles.second_deg)):
        asset = getattr(assets, f"{name}_hand")
        expected = rotation_about(absolute, cx, cy) @ translation(
            cx - asset.width / 2.0, cy - asset.height / 2.0
        )
        assert np.allclose(hands[name].transform, expected)


def test_hand_center_sits_on_pivot(geometry, assets):
    frame = FrameCompositor().compose(
        geometry, assets, ClockAngles(47.0, 123.0, 301.0), PowerMode.INTERACTIVE
    )

    for hand in frame.hand_primitives():
        w, h = hand.image.size
        assert apply_transform(hand.transform, w / 2.0, h / 2.0) == pytest.approx(geometry.pivot)


def test_rotation_is_clockwise_and_not_doubled(geometry, assets):
    # Hour at one o'clock, minute at two, second at three
    frame = FrameCompositor().compose(
        geometry, assets, ClockAngles(30.0, 60.0, 90.0), PowerMode.INTERACTIVE
    )
    second = frame.hand_primitives()[2]
    w, h = second.image.size
    cx, cy = geometry.pivot

    tip = apply_transform(second.transform, w / 2.0, 0.0)

    # Local top-center of the hand ends up at three o'clock
    assert tip == pytest.approx((cx + h / 2.0, cy))


def test_low_bit_ambient_disables_antialiasing(geometry, assets):
    compositor = FrameCompositor(low_bit_ambient=True)
    angles = ClockAngles(10.0, 20.0, 30.0)

    interactive = compositor.compose(geometry, assets, angles, PowerMode.INTERACTIVE)
    ambient = compositor.compose(geometry, assets, angles, PowerMode.AMBIENT)

    assert all(p.antialias for p in interactive.hand_primitives())
    assert not any(p.antialias for p in ambient.hand_primitives())


def test_ambient_keeps_antialiasing_without_low_bit(geometry, assets):
    frame = FrameCompositor(low_bit_ambient=False).compose(
        geometry, assets, ClockAngles(10.0, 20.0, 30.0), PowerMode.AMBIENT
    )

    assert all(p.antialias for p in frame.hand_primitives())


def test_vector_hands(geometry, assets):
    angles = ClockAngles(60.0, 120.0, 180.0)
    frame = FrameCompositor(hand_style='vector').compose(
        geometry, assets, angles, PowerMode.INTERACTIVE
    )
    hands = frame.hand_primitives()
    cx, cy = geometry.pivot

    assert all(isinstance(p, RoundRectPrimitive) for p in hands)
    hour = hands[0]
    assert hour.rect == pytest.approx((cx - 4.0, cy - 0.5 * 150, cx + 4.0, cy + 4.0))
    assert hour.radius == 4.0
    assert np.allclose(hands[2].transform, rotation_about(180.0, cx, cy))


def test_vector_hands_in_ambient(geometry, assets):
    frame = FrameCompositor(hand_style='vector').compose(
        geometry, assets, ClockAngles(60.0, 120.0, 180.0), PowerMode.AMBIENT
    )

    assert [p.name for p in frame.hand_primitives()] == ['hour', 'minute']


def test_unknown_hand_style():
    with pytest.raises(ValueError):
        FrameCompositor(hand_style='sundial')


def test_stale_assets_are_refused(assets):
    resized = DisplayGeometry.from_surface(360, 360, 400)

    with pytest.raises(RenderError):
        FrameCompositor().compose(
            resized, assets, ClockAngles(0.0, 0.0, 0.0), PowerMode.INTERACTIVE
        )


def test_render_presents_frame_to_sink(geometry, assets):
    sink = RecordingSink()

    frame = FrameCompositor().render(
        sink, geometry, assets, ClockAngles(1.0, 2.0, 3.0), PowerMode.INTERACTIVE, OVERLAY
    )

    assert sink.frames == [frame]


def test_render_error_presents_nothing(assets):
    sink = RecordingSink()

    with pytest.raises(RenderError):
        FrameCompositor().render(
            sink, DisplayGeometry.from_surface(100, 100, 400), assets,
            ClockAngles(1.0, 2.0, 3.0), PowerMode.INTERACTIVE,
        )

    assert sink.frames == []
