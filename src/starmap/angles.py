"""
Angle and time helpers shared by the positioning pipeline.

Based on the sidereal time expressions from Jean Meeus
"Astronomical Algorithms" (chapter 12).
"""

import math
from datetime import datetime, timezone

# Julian Day of the J2000.0 epoch
J2000 = 2451545.0

# Julian Day of the Unix epoch (1970-01-01T00:00:00Z)
UNIX_EPOCH_JD = 2440587.5

CARDINAL_DIRECTIONS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


def to_radians(degrees: float) -> float:
    """Convert an angle from degrees to radians."""
    return degrees * math.pi / 180.0


def to_degrees(radians: float) -> float:
    """Convert an angle from radians to degrees."""
    return radians * 180.0 / math.pi


def normalize_degrees(angle: float) -> float:
    """Normalize an angle in degrees to [0, 360)."""
    angle = math.fmod(angle, 360.0)
    if angle < 0:
        angle += 360.0
    # fmod of a tiny negative value can round back up to 360
    return 0.0 if angle >= 360.0 else angle


def normalize_radians(angle: float) -> float:
    """Normalize an angle in radians to [0, 2*pi)."""
    two_pi = 2.0 * math.pi
    angle = math.fmod(angle, two_pi)
    if angle < 0:
        angle += two_pi
    return 0.0 if angle >= two_pi else angle


def as_utc(dt: datetime) -> datetime:
    """Return ``dt`` in UTC; naive datetimes are taken to already be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def julian_day(dt: datetime) -> float:
    """
    Calculate the Julian Day for a datetime.

    Args:
        dt: Timestamp (naive values are interpreted as UTC)

    Returns:
        Julian Day (continuous day count)
    """
    return as_utc(dt).timestamp() / 86400.0 + UNIX_EPOCH_JD


def julian_centuries(jd: float) -> float:
    """Julian centuries elapsed since J2000.0."""
    return (jd - J2000) / 36525.0


def greenwich_mean_sidereal_time(jd: float) -> float:
    """
    Greenwich Mean Sidereal Time.

    Args:
        jd: Julian Day (UT)

    Returns:
        GMST in degrees, normalized to [0, 360)
    """
    T = julian_centuries(jd)

    gmst = 280.46061837 + 360.98564736629 * (jd - J2000) + \
        0.000387933 * T**2 - T**3 / 38710000.0

    return normalize_degrees(gmst)


def local_sidereal_time(jd: float, longitude: float) -> float:
    """
    Local Sidereal Time as GMST plus the observer's east longitude.

    The sum is left unnormalized; it only ever feeds periodic functions.
    Use ``normalize_degrees`` on the result for display.

    Args:
        jd: Julian Day (UT)
        longitude: Degrees East (positive) / West (negative)

    Returns:
        LST in degrees
    """
    return greenwich_mean_sidereal_time(jd) + longitude


def cardinal_direction_name(degrees: float) -> str:
    """Eight-point compass name (e.g. "N", "SW") for a heading in degrees."""
    index = int((normalize_degrees(degrees) + 22.5) / 45.0) % 8
    return CARDINAL_DIRECTIONS[index]
