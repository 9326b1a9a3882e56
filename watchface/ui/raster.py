"""
PIL Rasterizer - DisplaySink that paints frames into a PIL image
"""
import logging
from typing import Callable, Optional

import numpy as np
from PIL import Image, ImageDraw

from .compositor import BitmapPrimitive, Frame, RoundRectPrimitive, TextPrimitive
from .theme import Theme


logger = logging.getLogger(__name__)


class PilRasterizer:
    """
    Paints each presented frame onto a fresh RGBA canvas.
    """

    def __init__(self, on_frame: Optional[Callable[[Image.Image], None]] = None,
                 background: str = Theme.BG_PRIMARY):
        """
        Args:
            on_frame: Called with the finished image after every frame
            background: Fill color behind the background bitmap
        """
        self._on_frame = on_frame
        self._background = background
        self._last_image: Optional[Image.Image] = None
        self.frame_count = 0

    def present(self, frame: Frame) -> None:
        image = self.rasterize(frame)
        self._last_image = image
        self.frame_count += 1
        if self._on_frame:
            self._on_frame(image)

    def rasterize(self, frame: Frame) -> Image.Image:
        """
        Paint primitives in order.

        Args:
            frame: Composed frame

        Returns:
            RGBA image of frame.size
        """
        canvas = Image.new('RGBA', frame.size, self._background)

        for primitive in frame.primitives:
            if isinstance(primitive, BitmapPrimitive):
                self._blit(canvas, primitive.image, primitive.transform, primitive.antialias)
            elif isinstance(primitive, RoundRectPrimitive):
                layer = Image.new('RGBA', frame.size, (0, 0, 0, 0))
                ImageDraw.Draw(layer).rounded_rectangle(
                    primitive.rect, radius=primitive.radius, fill=primitive.color
                )
                self._blit(canvas, layer, primitive.transform, primitive.antialias)
            elif isinstance(primitive, TextPrimitive):
                draw = ImageDraw.Draw(canvas)
                draw.text(
                    primitive.position, primitive.text,
                    font=Theme.load_font(primitive.font_size), fill=primitive.color,
                )
            else:
                logger.warning(f"Skipping unknown primitive: {primitive!r}")

        return canvas

    def _blit(self, canvas: Image.Image, image: Image.Image, transform: np.ndarray, antialias: bool) -> None:
        """Composite `image` mapped through `transform` onto canvas"""
        if image.mode != 'RGBA':
            image = image.convert('RGBA')

        # PIL wants the output -> input mapping
        inverse = np.linalg.inv(transform)
        coeffs = (
            float(inverse[0, 0]), float(inverse[0, 1]), float(inverse[0, 2]),
            float(inverse[1, 0]), float(inverse[1, 1]), float(inverse[1, 2]),
        )
        resample = Image.Resampling.BICUBIC if antialias else Image.Resampling.NEAREST
        layer = image.transform(canvas.size, Image.Transform.AFFINE, coeffs, resample=resample)
        canvas.alpha_composite(layer)

    @property
    def last_image(self) -> Optional[Image.Image]:
        return self._last_image
