"""
Coordinate transformations for the sky map.

Converts equatorial coordinates (RA/Dec) into the observer's horizontal
frame (azimuth/altitude) and from there into the fixed Cartesian frame
used for rendering:

- +Y points to the zenith
- the X/Z plane is the horizon
- -Z points to geographic North, +Z to South
- -X points to East, +X to West

``horizontal_to_cartesian`` is the single definition of that axis
convention. Every other direction in the package (cardinal markers, the
horizon line, generated stars) is built through it.
"""

import math
from dataclasses import dataclass, replace
from datetime import datetime
from typing import List, Tuple

import numpy as np

from .angles import (
    as_utc,
    julian_day,
    local_sidereal_time,
    normalize_degrees,
    normalize_radians,
    to_radians,
)

# Below this cosine the azimuth is numerically undefined (zenith/nadir or
# an observer standing on a pole); it is reported as 0 instead.
DEGENERATE_COSINE = 1e-12


@dataclass(frozen=True)
class Observer:
    """Observer's location on Earth at a given moment."""
    latitude: float     # Degrees North (positive) / South (negative)
    longitude: float    # Degrees East (positive) / West (negative)
    timestamp: datetime

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range: {self.latitude}")
        object.__setattr__(self, "timestamp", as_utc(self.timestamp))

    @property
    def julian_day(self) -> float:
        """Julian Day of the observation timestamp."""
        return julian_day(self.timestamp)

    def at(self, timestamp: datetime) -> "Observer":
        """Same location at a different moment."""
        return replace(self, timestamp=timestamp)


@dataclass(frozen=True)
class EquatorialPosition:
    """Position in equatorial coordinates."""
    ra: float           # Right Ascension in degrees (0-360)
    dec: float          # Declination in degrees (-90 to +90)

    def __post_init__(self):
        if not -90.0 <= self.dec <= 90.0:
            raise ValueError(f"Declination out of range: {self.dec}")
        object.__setattr__(self, "ra", normalize_degrees(self.ra))

    @property
    def ra_hours(self) -> float:
        """RA in hours."""
        return self.ra / 15.0


@dataclass(frozen=True)
class HorizontalPosition:
    """Position in horizontal coordinates (radians)."""
    azimuth: float      # From North towards East, [0, 2*pi)
    altitude: float     # Above the horizon, [-pi/2, pi/2]

    @property
    def azimuth_degrees(self) -> float:
        return math.degrees(self.azimuth)

    @property
    def altitude_degrees(self) -> float:
        return math.degrees(self.altitude)


@dataclass(frozen=True)
class Direction:
    """A direction on the unit sphere in the rendering frame."""
    x: float
    y: float
    z: float

    @property
    def is_visible(self) -> bool:
        """True when the direction lies in front of the camera (+Z)."""
        return self.z > 0

    @property
    def norm(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @classmethod
    def from_array(cls, v) -> "Direction":
        return cls(float(v[0]), float(v[1]), float(v[2]))


def to_horizontal(eq: EquatorialPosition, observer: Observer) -> HorizontalPosition:
    """
    Convert equatorial coordinates to horizontal (azimuth/altitude).

    Args:
        eq: Equatorial position (RA, Dec)
        observer: Location and moment of the observation

    Returns:
        Horizontal position in radians, azimuth in [0, 2*pi)
    """
    lst = to_radians(local_sidereal_time(observer.julian_day, observer.longitude))

    # Hour angle
    ha = lst - to_radians(eq.ra)
    dec = to_radians(eq.dec)
    lat = to_radians(observer.latitude)

    # Altitude
    sin_alt = math.sin(dec) * math.sin(lat) + \
        math.cos(dec) * math.cos(lat) * math.cos(ha)
    alt = math.asin(max(-1.0, min(1.0, sin_alt)))

    # Azimuth
    cos_alt = math.cos(alt)
    cos_lat = math.cos(lat)
    if abs(cos_alt) < DEGENERATE_COSINE or abs(cos_lat) < DEGENERATE_COSINE:
        return HorizontalPosition(azimuth=0.0, altitude=alt)

    sin_az = -math.cos(dec) * math.sin(ha) / cos_alt
    cos_az = (math.sin(dec) - math.sin(alt) * math.sin(lat)) / (cos_alt * cos_lat)
    az = math.atan2(sin_az, cos_az)
    if az < 0:
        az += 2 * math.pi

    return HorizontalPosition(azimuth=normalize_radians(az), altitude=alt)


def horizontal_to_cartesian(h: HorizontalPosition) -> Direction:
    """
    Convert horizontal coordinates to a rendering-frame direction.

    Azimuth 0 (North) maps to -Z and azimuth pi/2 (East) maps to -X.
    """
    y = math.sin(h.altitude)        # up/down
    r = math.cos(h.altitude)        # radius on the horizon plane
    x = -r * math.sin(h.azimuth)    # East (-) / West (+)
    z = -r * math.cos(h.azimuth)    # North (-) / South (+)
    return Direction(x, y, z)


def equatorial_to_cartesian(eq: EquatorialPosition) -> Direction:
    """Unit vector of an equatorial position in the celestial frame."""
    ra = to_radians(eq.ra)
    dec = to_radians(eq.dec)
    return Direction(
        math.cos(dec) * math.cos(ra),
        math.cos(dec) * math.sin(ra),
        math.sin(dec),
    )


def position_of(eq: EquatorialPosition, observer: Observer) -> Direction:
    """Rendering-frame direction of an equatorial position for an observer."""
    return horizontal_to_cartesian(to_horizontal(eq, observer))


def _horizon_direction(azimuth_deg: float) -> Direction:
    return horizontal_to_cartesian(
        HorizontalPosition(azimuth=math.radians(azimuth_deg), altitude=0.0)
    )


def _snap(d: Direction) -> Direction:
    # Cardinal markers are exact axes; drop the 1e-17 noise from sin/cos.
    return Direction(*(float(round(c)) for c in (d.x, d.y, d.z)))


CARDINAL_POINTS: Tuple[Tuple[str, Direction], ...] = tuple(
    (name, _snap(_horizon_direction(az)))
    for name, az in (("N", 0.0), ("E", 90.0), ("S", 180.0), ("W", 270.0))
)


def horizon_points(step_deg: float = 5.0) -> List[Direction]:
    """
    Sample the horizon circle.

    Args:
        step_deg: Azimuth spacing between samples

    Returns:
        Directions from azimuth 0 through 360 inclusive
    """
    if step_deg <= 0:
        raise ValueError("step_deg must be positive")
    count = int(round(360.0 / step_deg))
    return [_horizon_direction(i * step_deg) for i in range(count + 1)]
