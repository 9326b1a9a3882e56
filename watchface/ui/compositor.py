"""
Frame Compositor - Turns angles and scaled assets into an ordered list of draw primitives

Draw order is fixed: background, text overlays, hour, minute, second hand.
Hands are placed with 3x3 affine matrices. Each hand rotates by the delta
from the previous hand on top of that hand's frame, the same way a canvas
rotate() stacks, and every primitive carries its final screen transform.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np
from PIL import Image

from ..core.angles import ClockAngles
from ..core.errors import RenderError
from ..core.state import DisplayGeometry, PowerMode
from .assets import ScaledAssetSet
from .layout import Layout
from .theme import Theme


logger = logging.getLogger(__name__)

HAND_STYLE_BITMAP = 'bitmap'
HAND_STYLE_VECTOR = 'vector'
HAND_STYLES = (HAND_STYLE_BITMAP, HAND_STYLE_VECTOR)

HAND_NAMES = ('hour', 'minute', 'second')


def translation(dx: float, dy: float) -> np.ndarray:
    return np.array([
        [1.0, 0.0, dx],
        [0.0, 1.0, dy],
        [0.0, 0.0, 1.0],
    ])


def rotation_about(degrees: float, px: float, py: float) -> np.ndarray:
    """
    Rotation by `degrees` about (px, py).
    Positive angles turn clockwise on a y-down screen.
    """
    theta = math.radians(degrees)
    c = math.cos(theta)
    s = math.sin(theta)
    return np.array([
        [c, -s, px - c * px + s * py],
        [s, c, py - s * px - c * py],
        [0.0, 0.0, 1.0],
    ])


def apply_transform(matrix: np.ndarray, x: float, y: float) -> Tuple[float, float]:
    """Map a point through an affine matrix"""
    out = matrix @ np.array([x, y, 1.0])
    return (float(out[0]), float(out[1]))


@dataclass(frozen=True)
class OverlayData:
    """Values for the text overlays; None hides that overlay."""
    battery_percent: Optional[int] = None
    day_of_month: Optional[int] = None


@dataclass(frozen=True, eq=False)
class BitmapPrimitive:
    """Blit `image` through `transform` (local image coords -> screen)."""
    name: str
    image: Image.Image
    transform: np.ndarray
    antialias: bool = True


@dataclass(frozen=True, eq=False)
class RoundRectPrimitive:
    """Filled rounded rectangle in local coords, mapped through `transform`."""
    name: str
    rect: Tuple[float, float, float, float]
    radius: float
    transform: np.ndarray
    color: str
    antialias: bool = True


@dataclass(frozen=True)
class TextPrimitive:
    name: str
    text: str
    position: Tuple[float, float]
    font_size: int
    color: str


@dataclass
class Frame:
    """One composed frame, in draw order."""
    size: Tuple[int, int]
    mode: PowerMode
    primitives: List[object] = field(default_factory=list)

    def hand_primitives(self) -> List[object]:
        return [p for p in self.primitives if p.name in HAND_NAMES]

    def names(self) -> List[str]:
        return [p.name for p in self.primitives]


class FrameCompositor:
    """
    Builds frames for a DisplaySink.
    """

    def __init__(
        self,
        hand_style: str = HAND_STYLE_BITMAP,
        low_bit_ambient: bool = True,
        overlay_font_size: int = Theme.OVERLAY_FONT_SIZE,
        overlay_color: str = Theme.FG_PRIMARY
    ):
        """
        Initialize compositor.

        Args:
            hand_style: 'bitmap' (rotated hand images) or 'vector' (rounded rects)
            low_bit_ambient: Disable hand anti-aliasing in ambient mode
            overlay_font_size: Text overlay size in pixels
            overlay_color: Text overlay color
        """
        if hand_style not in HAND_STYLES:
            raise ValueError(f"Unknown hand style: {hand_style}")
        self._hand_style = hand_style
        self._low_bit_ambient = low_bit_ambient
        self._overlay_font_size = overlay_font_size
        self._overlay_color = overlay_color

    def compose(
        self,
        geometry: DisplayGeometry,
        assets: ScaledAssetSet,
        angles: ClockAngles,
        mode: PowerMode,
        overlay: Optional[OverlayData] = None
    ) -> Frame:
        """
        Build the primitive list for one frame.

        Raises:
            RenderError: If assets were scaled for a different geometry
        """
        self._check_consistency(geometry, assets)

        frame = Frame(size=(geometry.width, geometry.height), mode=mode)
        ambient = mode is PowerMode.AMBIENT
        antialias = not (ambient and self._low_bit_ambient)
        layout = Layout(geometry)

        frame.primitives.append(
            BitmapPrimitive('background', assets.background.image, translation(0.0, 0.0))
        )
        frame.primitives.extend(self._overlay_primitives(layout, overlay or OverlayData()))

        deltas = [
            ('hour', angles.hour_deg),
            ('minute', angles.minute_deg - angles.hour_deg),
            ('second', angles.second_deg - angles.minute_deg),
        ]
        if ambient:
            deltas = deltas[:2]

        px, py = geometry.pivot
        hand_frame = np.identity(3)
        for name, delta in deltas:
            hand_frame = hand_frame @ rotation_about(delta, px, py)
            if self._hand_style == HAND_STYLE_VECTOR:
                frame.primitives.append(self._vector_hand(name, layout, hand_frame, ambient, antialias))
            else:
                frame.primitives.append(self._bitmap_hand(name, assets, geometry, hand_frame, antialias))

        return frame

    def render(
        self,
        sink,
        geometry: DisplayGeometry,
        assets: ScaledAssetSet,
        angles: ClockAngles,
        mode: PowerMode,
        overlay: Optional[OverlayData] = None
    ) -> Frame:
        """
        Compose a frame and hand it to the sink.

        Returns:
            The frame that was presented
        """
        frame = self.compose(geometry, assets, angles, mode, overlay)
        sink.present(frame)
        return frame

    def _check_consistency(self, geometry: DisplayGeometry, assets: ScaledAssetSet) -> None:
        if geometry is None or assets is None:
            raise RenderError("Geometry or assets not initialized")
        if assets.target_width != geometry.width or not math.isclose(
                assets.scale_factor, geometry.scale_factor, rel_tol=1e-9):
            raise RenderError(
                f"Assets scaled for width {assets.target_width} "
                f"(scale {assets.scale_factor:.4f}) but geometry is width {geometry.width} "
                f"(scale {geometry.scale_factor:.4f})"
            )

    def _overlay_primitives(self, layout: Layout, overlay: OverlayData) -> List[TextPrimitive]:
        texts = []
        if overlay.battery_percent is not None:
            texts.append(TextPrimitive(
                'battery', f"{overlay.battery_percent}%", layout.battery_position(),
                self._overlay_font_size, self._overlay_color,
            ))
        if overlay.day_of_month is not None:
            texts.append(TextPrimitive(
                'day', str(overlay.day_of_month), layout.day_position(),
                self._overlay_font_size, self._overlay_color,
            ))
        return texts

    def _bitmap_hand(self, name, assets, geometry, hand_frame, antialias) -> BitmapPrimitive:
        asset = getattr(assets, f"{name}_hand")
        # Center the hand image on the pivot before rotation
        offset = translation(geometry.center_x - asset.width / 2.0, geometry.center_y - asset.height / 2.0)
        return BitmapPrimitive(name, asset.image, hand_frame @ offset, antialias)

    def _vector_hand(self, name, layout, hand_frame, ambient, antialias) -> RoundRectPrimitive:
        length = layout.hand_lengths()[name]
        if ambient:
            color = Theme.FG_SECONDARY
        else:
            color = Theme.HAND_ACCENT if name == 'second' else Theme.HAND_PRIMARY
        return RoundRectPrimitive(
            name, layout.hand_rect(length), Theme.HAND_END_CAP_RADIUS,
            hand_frame.copy(), color, antialias,
        )
