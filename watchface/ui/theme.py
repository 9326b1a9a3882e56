"""
Theme - Face colors, hand constants and overlay font loading
"""
import logging
import os
from typing import Dict

from PIL import ImageFont


class Theme:
    """
    Dark theme configuration for the watch face.
    """
    
    # Color Palette
    BG_PRIMARY = '#000000'        # Pure black surround
    BG_SECONDARY = '#101418'      # Dial
    
    FG_PRIMARY = '#ffffff'        # Overlay text, hour ticks
    FG_SECONDARY = '#cccccc'
    FG_DIM = '#555555'            # Minute ticks, ambient hands
    
    HAND_PRIMARY = '#f2f2f2'      # Hour and minute hands
    HAND_ACCENT = '#ff5a36'       # Second hand
    
    TOAST_BG = '#202020'
    TOAST_FG = '#ffffff'
    
    # Overlay text
    OVERLAY_FONT_SIZE = 20
    
    # Vector hands
    HAND_END_CAP_RADIUS = 4.0
    HOUR_HAND_RATIO = 0.5         # Fraction of half-width
    MINUTE_HAND_RATIO = 0.7
    SECOND_HAND_RATIO = 0.9
    
    FONT_PATHS = [
        '/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf',
        '/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf',
        '/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf',
    ]
    
    _font_cache: Dict[int, ImageFont.ImageFont] = {}
    
    @staticmethod
    def load_font(size: int = None):
        """
        Get a PIL font for overlay text, cached per size.
        
        Args:
            size: Font size in pixels (default: OVERLAY_FONT_SIZE)
        
        Returns:
            TrueType font if one is installed, PIL default font otherwise
        """
        if size is None:
            size = Theme.OVERLAY_FONT_SIZE
        
        if size in Theme._font_cache:
            return Theme._font_cache[size]
        
        font = None
        for path in Theme.FONT_PATHS:
            if os.path.exists(path):
                try:
                    font = ImageFont.truetype(path, size)
                    break
                except OSError as e:
                    logging.getLogger(__name__).warning(f"Failed to load font {path}: {e}")
        
        if font is None:
            font = ImageFont.load_default()
        
        Theme._font_cache[size] = font
        return font
