"""
Assets - Loading and rescaling the face bitmaps to the display size
"""
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from PIL import Image, ImageDraw

from ..core.errors import AssetError, AssetNotFound
from ..core.state import DisplayGeometry
from .theme import Theme


logger = logging.getLogger(__name__)

BACKGROUND = 'background'
HOUR_HAND = 'hour_hand'
MINUTE_HAND = 'minute_hand'
SECOND_HAND = 'second_hand'
ASSET_IDS = (BACKGROUND, HOUR_HAND, MINUTE_HAND, SECOND_HAND)

HAND_SCALE_SCALED_BACKGROUND = 'scaled_background'
HAND_SCALE_BACKGROUND_FACTOR = 'background_factor'
HAND_SCALE_MODES = (HAND_SCALE_SCALED_BACKGROUND, HAND_SCALE_BACKGROUND_FACTOR)


@dataclass(frozen=True)
class RawAsset:
    """Bitmap as loaded, at its native size. Shared, never modified."""
    asset_id: str
    image: Image.Image

    @property
    def width(self) -> int:
        return self.image.size[0]

    @property
    def height(self) -> int:
        return self.image.size[1]


@dataclass(frozen=True)
class ScaledAsset:
    """Bitmap resized for the current display."""
    asset_id: str
    image: Image.Image
    width: int
    height: int
    scale: float


@dataclass(frozen=True)
class RawAssetSet:
    background: RawAsset
    hour_hand: RawAsset
    minute_hand: RawAsset
    second_hand: RawAsset


@dataclass(frozen=True)
class ScaledAssetSet:
    """
    All four face bitmaps at one display size.
    scale_factor is the geometry's; hand_scale is what was applied to hands.
    """
    background: ScaledAsset
    hour_hand: ScaledAsset
    minute_hand: ScaledAsset
    second_hand: ScaledAsset
    scale_factor: float
    hand_scale: float
    target_width: int


class AssetScaler:
    """
    Resizes raw assets to the display width, preserving aspect ratio.
    Only called on surface-size changes, never per frame.
    """

    def __init__(self, hand_scale_mode: str = HAND_SCALE_SCALED_BACKGROUND):
        """
        Initialize scaler.

        Args:
            hand_scale_mode: 'scaled_background' scales hands by
                target width / rescaled background width;
                'background_factor' reuses the background's scale factor
        """
        if hand_scale_mode not in HAND_SCALE_MODES:
            raise ValueError(f"Unknown hand scale mode: {hand_scale_mode}")
        self._hand_scale_mode = hand_scale_mode

    @property
    def hand_scale_mode(self) -> str:
        return self._hand_scale_mode

    def scale(self, asset: Optional[RawAsset], target_width: float) -> ScaledAsset:
        """
        Scale one asset to a target width.

        Args:
            asset: Source asset (left untouched)
            target_width: Desired width in pixels

        Returns:
            New ScaledAsset

        Raises:
            AssetError: If the asset is missing or has zero width
            ValueError: If target_width is not positive
        """
        if asset is None or asset.image is None:
            raise AssetError("Cannot scale a missing asset")
        if asset.width <= 0:
            raise AssetError(f"Asset '{asset.asset_id}' has zero native width")
        if target_width <= 0:
            raise ValueError(f"Target width must be positive, got {target_width}")

        ratio = target_width / float(asset.width)
        new_width = max(1, int(round(target_width)))
        new_height = max(1, int(round(asset.height * ratio)))

        if (new_width, new_height) == asset.image.size:
            image = asset.image.copy()
        else:
            image = asset.image.resize((new_width, new_height), Image.Resampling.BILINEAR)

        return ScaledAsset(
            asset_id=asset.asset_id,
            image=image,
            width=new_width,
            height=new_height,
            scale=ratio,
        )

    def scale_set(self, raw: RawAssetSet, geometry: DisplayGeometry) -> ScaledAssetSet:
        """
        Rebuild the full scaled set for a geometry.

        Args:
            raw: Native-size assets
            geometry: Current display geometry

        Returns:
            ScaledAssetSet tied to geometry.scale_factor
        """
        background = self.scale(raw.background, raw.background.width * geometry.scale_factor)

        if self._hand_scale_mode == HAND_SCALE_SCALED_BACKGROUND:
            hand_scale = geometry.width / float(background.width)
        else:
            hand_scale = geometry.scale_factor

        hands = {}
        for name in (HOUR_HAND, MINUTE_HAND, SECOND_HAND):
            hand = getattr(raw, name)
            if hand is None:
                raise AssetError(f"Missing asset: {name}")
            hands[name] = self.scale(hand, max(1.0, hand.width * hand_scale))

        logger.info(
            f"Assets scaled to {geometry.width}px: "
            f"scale={geometry.scale_factor:.3f}, hand_scale={hand_scale:.3f}"
        )

        return ScaledAssetSet(
            background=background,
            hour_hand=hands[HOUR_HAND],
            minute_hand=hands[MINUTE_HAND],
            second_hand=hands[SECOND_HAND],
            scale_factor=geometry.scale_factor,
            hand_scale=hand_scale,
            target_width=geometry.width,
        )


def load_asset_set(source) -> RawAssetSet:
    """
    Load all four face assets from a source.

    Raises:
        AssetError: If any asset is missing or unusable
    """
    loaded = {}
    for asset_id in ASSET_IDS:
        asset = source.load(asset_id)
        if asset is None or asset.width <= 0 or asset.height <= 0:
            raise AssetError(f"Asset '{asset_id}' is empty")
        loaded[asset_id] = asset
    return RawAssetSet(**loaded)


class FileAssetSource:
    """Loads face bitmaps from image files in a directory."""

    def __init__(self, directory: Path, filenames: Optional[Dict[str, str]] = None):
        """
        Args:
            directory: Folder containing the images
            filenames: asset id -> file name, defaults to '<id>.png'
        """
        self._directory = Path(directory)
        self._filenames = {asset_id: f"{asset_id}.png" for asset_id in ASSET_IDS}
        if filenames:
            self._filenames.update({k: v for k, v in filenames.items() if v})

    def load(self, asset_id: str) -> RawAsset:
        filename = self._filenames.get(asset_id)
        if filename is None:
            raise AssetNotFound(asset_id, "no file mapping")

        path = self._directory / filename
        if not path.exists():
            raise AssetNotFound(asset_id, str(path))

        try:
            with Image.open(path) as img:
                image = img.convert('RGBA')
        except OSError as e:
            raise AssetError(f"Failed to decode {path}: {e}") from e

        logger.debug(f"Loaded asset {asset_id} from {path} ({image.size[0]}x{image.size[1]})")
        return RawAsset(asset_id, image)


class GeneratedAssetSource:
    """
    Draws a plain default face and hands with PIL.
    Used when no asset directory is configured.
    """

    def __init__(self, size: int = 400):
        self._size = size
        self._cache: Dict[str, RawAsset] = {}

    def load(self, asset_id: str) -> RawAsset:
        if asset_id not in self._cache:
            painter = {
                BACKGROUND: self._draw_background,
                HOUR_HAND: lambda: self._draw_hand(0.50, 10, Theme.HAND_PRIMARY),
                MINUTE_HAND: lambda: self._draw_hand(0.72, 7, Theme.HAND_PRIMARY),
                SECOND_HAND: lambda: self._draw_hand(0.88, 3, Theme.HAND_ACCENT),
            }.get(asset_id)
            if painter is None:
                raise AssetNotFound(asset_id, "not a generated asset")
            self._cache[asset_id] = RawAsset(asset_id, painter())
        return self._cache[asset_id]

    def _draw_background(self) -> Image.Image:
        size = self._size
        img = Image.new('RGBA', (size, size), Theme.BG_PRIMARY)
        draw = ImageDraw.Draw(img)
        c = size / 2.0
        radius = c - 2

        draw.ellipse((c - radius, c - radius, c + radius, c + radius), fill=Theme.BG_SECONDARY)

        # 60 ticks, longer and brighter on the hours
        for i in range(60):
            angle = math.radians(i * 6 - 90)
            is_hour = i % 5 == 0
            inner = radius * (0.86 if is_hour else 0.93)
            outer = radius * 0.98
            draw.line(
                (c + inner * math.cos(angle), c + inner * math.sin(angle),
                 c + outer * math.cos(angle), c + outer * math.sin(angle)),
                fill=Theme.FG_PRIMARY if is_hour else Theme.FG_DIM,
                width=4 if is_hour else 1,
            )
        return img

    def _draw_hand(self, length_ratio: float, thickness: int, color: str) -> Image.Image:
        """Hand pointing at twelve, centered on a full-face canvas so the pivot is the image center"""
        size = self._size
        img = Image.new('RGBA', (size, size), (0, 0, 0, 0))
        draw = ImageDraw.Draw(img)
        c = size / 2.0
        length = c * length_ratio
        half = thickness / 2.0
        draw.rounded_rectangle(
            (c - half, c - length, c + half, c + thickness * 2),
            radius=half,
            fill=color,
        )
        draw.ellipse((c - thickness, c - thickness, c + thickness, c + thickness), fill=color)
        return img
