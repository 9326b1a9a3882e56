"""
Angle Calculator - Wall-clock time to hand rotation angles
"""
from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo


# Degrees per unit of time: 360 / 60 = 6 and 360 / 12 = 30
DEGREES_PER_SECOND = 6.0
DEGREES_PER_MINUTE = 6.0
DEGREES_PER_HOUR = 30.0


@dataclass(frozen=True)
class ClockAngles:
    """Hand rotations in degrees, clockwise from twelve o'clock, in [0, 360)."""
    hour_deg: float
    minute_deg: float
    second_deg: float


def compute_angles(now_millis: int, timezone: str) -> ClockAngles:
    """
    Convert a timestamp into hand angles for the given timezone.

    The second hand is interpolated with millisecond precision and the hour
    hand creeps half a degree per minute. The minute hand steps once per
    minute.

    Args:
        now_millis: Milliseconds since the Unix epoch
        timezone: IANA timezone string (e.g., 'Europe/Berlin')

    Returns:
        ClockAngles for that instant
    """
    local = datetime.fromtimestamp(now_millis // 1000, tz=ZoneInfo(timezone))
    millis = now_millis % 1000

    seconds = local.second + millis / 1000.0
    second_deg = seconds * DEGREES_PER_SECOND

    minute_deg = local.minute * DEGREES_PER_MINUTE

    hour_offset = local.minute / 2.0
    hour_deg = (local.hour % 12) * DEGREES_PER_HOUR + hour_offset

    return ClockAngles(
        hour_deg=hour_deg % 360.0,
        minute_deg=minute_deg % 360.0,
        second_deg=second_deg % 360.0,
    )
