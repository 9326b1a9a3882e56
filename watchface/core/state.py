"""
Engine State - Display geometry, power/visibility modes and the owned engine state
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..ui.assets import RawAssetSet, ScaledAssetSet


class PowerMode(Enum):
    """Display power state."""
    INTERACTIVE = 'interactive'
    AMBIENT = 'ambient'


class Visibility(Enum):
    """Whether the face is currently on screen."""
    VISIBLE = 'visible'
    HIDDEN = 'hidden'


class Lifecycle(Enum):
    """Engine lifecycle phase. on_create and on_destroy each run once."""
    NEW = 'new'
    CREATED = 'created'
    DESTROYED = 'destroyed'


@dataclass(frozen=True)
class DisplayGeometry:
    """
    Surface dimensions and derived pivot/scale.
    Replaced as a whole on every surface-size change.
    """
    width: int
    height: int
    center_x: float
    center_y: float
    scale_factor: float

    @classmethod
    def from_surface(cls, width: int, height: int, background_native_width: int) -> 'DisplayGeometry':
        """
        Derive geometry for a new surface size.

        Args:
            width: Surface width in pixels
            height: Surface height in pixels
            background_native_width: Width of the unscaled background asset

        Returns:
            New DisplayGeometry

        Raises:
            ValueError: If any dimension is not positive
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface size must be positive, got {width}x{height}")
        if background_native_width <= 0:
            raise ValueError("Background native width must be positive")

        return cls(
            width=width,
            height=height,
            center_x=width / 2.0,
            center_y=height / 2.0,
            scale_factor=width / float(background_native_width),
        )

    @property
    def pivot(self):
        """Rotation pivot (center of the surface)"""
        return (self.center_x, self.center_y)


@dataclass
class TimerState:
    """Refresh timer bookkeeping, owned by RefreshScheduler."""
    scheduled: bool = False
    next_fire_at_millis: Optional[int] = None


@dataclass
class EngineState:
    """
    Everything the engine mutates, in one place.
    Passed through each event handler; no component keeps its own copy.
    """
    timezone: str = 'UTC'
    power_mode: PowerMode = PowerMode.INTERACTIVE
    visibility: Visibility = Visibility.HIDDEN
    lifecycle: Lifecycle = Lifecycle.NEW
    geometry: Optional[DisplayGeometry] = None
    raw_assets: Optional['RawAssetSet'] = None
    assets: Optional['ScaledAssetSet'] = None

    @property
    def is_visible(self) -> bool:
        return self.visibility is Visibility.VISIBLE

    @property
    def is_ambient(self) -> bool:
        return self.power_mode is PowerMode.AMBIENT
