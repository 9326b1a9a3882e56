"""
Layout - Overlay positions and vector hand lengths relative to the pivot
"""
from typing import Dict, Tuple

from ..core.state import DisplayGeometry
from .theme import Theme


class Layout:
    """
    Positions for face elements, derived from the current geometry.
    """
    
    def __init__(self, geometry: DisplayGeometry):
        """
        Initialize layout for a geometry.
        
        Args:
            geometry: Current display geometry
        """
        self._geometry = geometry
    
    def battery_position(self) -> Tuple[float, float]:
        """Battery text origin: left of and below center"""
        g = self._geometry
        return (g.center_x - g.width / 12.0, g.center_y + g.height / 8.0)
    
    def day_position(self) -> Tuple[float, float]:
        """Day-of-month text origin: near the three o'clock mark"""
        g = self._geometry
        return (g.center_x + g.width / 3.2, g.center_y + g.height / 42.0)
    
    def hand_lengths(self) -> Dict[str, float]:
        """
        Vector hand lengths in pixels.
        
        Returns:
            Dictionary keyed by 'hour', 'minute', 'second'
        """
        half_width = self._geometry.width / 2.0
        return {
            'hour': Theme.HOUR_HAND_RATIO * half_width,
            'minute': Theme.MINUTE_HAND_RATIO * half_width,
            'second': Theme.SECOND_HAND_RATIO * half_width,
        }
    
    def hand_rect(self, length: float) -> Tuple[float, float, float, float]:
        """
        Unrotated hand rectangle pointing at twelve.
        
        Args:
            length: Hand length from the pivot
        
        Returns:
            (left, top, right, bottom)
        """
        g = self._geometry
        cap = Theme.HAND_END_CAP_RADIUS
        return (g.center_x - cap, g.center_y - length, g.center_x + cap, g.center_y + cap)
    