"""
Celestial object model.

The variant set is closed: every object on the map is a ``Star``, a
``Planet`` or a ``Nebula``. They share a common surface (identifier, name,
direction, color, size, kind, details) so rendering and hit-testing can
treat them uniformly while still matching on the concrete type.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, List, NamedTuple, Optional, Union

from .celestial import Direction


class Color(NamedTuple):
    """RGB color with components in [0, 1]."""
    r: float
    g: float
    b: float


WHITE = Color(1.0, 1.0, 1.0)


class ObjectKind(Enum):
    STAR = "star"
    PLANET = "planet"
    NEBULA = "nebula"


class PlanetBody(Enum):
    """Solar system bodies shown on the map, with display attributes."""
    SUN = ("sun", "Sun", Color(1.0, 0.8, 0.0), 12.0)
    MOON = ("moon", "Moon", Color(0.56, 0.56, 0.58), 10.0)
    MERCURY = ("mercury", "Mercury", Color(0.7, 0.7, 0.7), 5.0)
    VENUS = ("venus", "Venus", Color(1.0, 0.85, 0.4), 7.0)
    MARS = ("mars", "Mars", Color(1.0, 0.23, 0.19), 6.0)
    JUPITER = ("jupiter", "Jupiter", Color(1.0, 0.58, 0.0), 10.0)
    SATURN = ("saturn", "Saturn", Color(0.95, 0.85, 0.55), 9.0)
    URANUS = ("uranus", "Uranus", Color(0.5, 0.9, 0.95), 8.0)
    NEPTUNE = ("neptune", "Neptune", Color(0.0, 0.48, 1.0), 8.0)

    def __init__(self, key: str, display_name: str, color: Color, size: float):
        self.key = key
        self.display_name = display_name
        self.color = color
        self.size = size


@dataclass(frozen=True)
class Star:
    """A catalog star positioned for an observer."""
    identifier: str
    name: str
    direction: Direction
    ra: float
    dec: float
    magnitude: float
    bv: Optional[float]
    brightness: float
    size: float
    color: Color
    spectral_class: str

    kind = ObjectKind.STAR
    type_name = "Star"

    @property
    def details(self) -> Dict[str, str]:
        return {
            "Spectral Class": self.spectral_class,
            "Brightness": f"{self.brightness * 100:.1f}%",
        }


@dataclass(frozen=True)
class Planet:
    """A solar system body; ``distance_au`` is filled in on selection."""
    body: PlanetBody
    direction: Direction
    ra: float
    dec: float
    distance_au: Optional[float] = None

    kind = ObjectKind.PLANET
    type_name = "Planet"

    @property
    def identifier(self) -> str:
        return self.body.key

    @property
    def name(self) -> str:
        return self.body.display_name

    @property
    def color(self) -> Color:
        return self.body.color

    @property
    def size(self) -> float:
        return self.body.size

    @property
    def details(self) -> Dict[str, str]:
        if self.distance_au is None:
            return {"Distance from Earth": "Unknown"}
        return {"Distance from Earth": f"{self.distance_au:.2f} AU"}

    def with_distance(self, distance_au: float) -> "Planet":
        return replace(self, distance_au=distance_au)


@dataclass(frozen=True)
class Nebula:
    """A nebula, galaxy or cluster from the deep-sky catalog."""
    identifier: str     # Catalog ID, e.g. "M42"
    name: str
    direction: Direction
    ra: float
    dec: float
    magnitude: float
    bv: Optional[float]
    size: float
    color: Color
    spectral_class: str

    kind = ObjectKind.NEBULA
    type_name = "Nebula"

    @property
    def details(self) -> Dict[str, str]:
        return {
            "Catalog ID": self.identifier,
            "Magnitude": f"{self.magnitude:.1f}",
            "Spectral Type": self.spectral_class,
        }


CelestialObject = Union[Star, Planet, Nebula]


class FilterType(Enum):
    """Which object classes are shown."""
    ALL = "all"
    STARS = "stars"
    PLANETS = "planets"
    NEBULAE = "nebulae"


def filter_objects(
    stars: Iterable[Star],
    planets: Iterable[Planet],
    nebulae: Iterable[Nebula],
    filter_type: FilterType = FilterType.ALL,
) -> List[CelestialObject]:
    """Objects for the active filter, ordered stars, planets, nebulae."""
    if filter_type is FilterType.STARS:
        return list(stars)
    if filter_type is FilterType.PLANETS:
        return list(planets)
    if filter_type is FilterType.NEBULAE:
        return list(nebulae)
    return [*stars, *planets, *nebulae]
