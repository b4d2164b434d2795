"""
Star Map
========

Positions stars, planets and deep-sky objects for an observer on Earth,
rotates them with the viewing orientation and projects them onto a screen.

Main components:
- angles: Julian Day and sidereal time helpers
- celestial: Equatorial -> horizontal -> rendering-frame transforms
- orientation: Device attitude and manual (drag/pinch) view orientation
- projection: Perspective projection, culling and tap hit-testing
- objects: Star / Planet / Nebula model and display attributes
- catalog: Star and nebula catalog ingestion, B-V coloring
- ephemeris: Planetary position provider contract (Skyfield adapter)
- scheduler: Catalog and planet refresh cadence
- sky: Session tying the above together
"""

__version__ = "0.1.0"

from .config import Config
from .celestial import (
    Direction,
    EquatorialPosition,
    HorizontalPosition,
    Observer,
    equatorial_to_cartesian,
    horizontal_to_cartesian,
    position_of,
    to_horizontal,
)
from .orientation import DeviceAttitude, ManualOrientation, OrientationController, to_manual, view_matrix
from .projection import RenderItem, ScreenPoint, Viewport, nearest, project, render_frame
from .objects import FilterType, Nebula, Planet, PlanetBody, Star
from .catalog import CatalogError, CatalogResource, MalformedResourceError, MissingResourceError
from .ephemeris import EphemerisError, EphemerisProvider, SkyfieldEphemeris
from .scheduler import RefreshDecision, RefreshScheduler
from .sky import Frame, Selection, SkySession

__all__ = [
    "Config",
    "Direction",
    "EquatorialPosition",
    "HorizontalPosition",
    "Observer",
    "equatorial_to_cartesian",
    "horizontal_to_cartesian",
    "position_of",
    "to_horizontal",
    "DeviceAttitude",
    "ManualOrientation",
    "OrientationController",
    "to_manual",
    "view_matrix",
    "RenderItem",
    "ScreenPoint",
    "Viewport",
    "nearest",
    "project",
    "render_frame",
    "FilterType",
    "Nebula",
    "Planet",
    "PlanetBody",
    "Star",
    "CatalogError",
    "CatalogResource",
    "MalformedResourceError",
    "MissingResourceError",
    "EphemerisError",
    "EphemerisProvider",
    "SkyfieldEphemeris",
    "RefreshDecision",
    "RefreshScheduler",
    "Frame",
    "Selection",
    "SkySession",
    "__version__",
]
