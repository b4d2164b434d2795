"""
Star and deep-sky catalog ingestion.

Reads JSON record sets, filters them, derives the visual attributes used
for drawing (brightness, size, color from the B-V index) and positions the
objects for an observer.

The star catalog is required: if it is missing or cannot be decoded a
``CatalogError`` is raised. The nebula catalog is optional: the same
problems are logged and an empty catalog is used instead.
"""

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Generic, List, Optional, Sequence, Tuple, TypeVar

import numpy as np

from .celestial import EquatorialPosition, Observer, position_of
from .objects import WHITE, Color, Nebula, Star


logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
DEFAULT_STAR_CATALOG = DATA_DIR / "stars_compact.json"
DEFAULT_NEBULA_CATALOG = DATA_DIR / "nebulae.json"

DEFAULT_MAX_MAGNITUDE = 6.5

NEBULA_DEFAULT_COLOR = Color(0.8, 0.8, 1.0)


class CatalogError(Exception):
    """Base class for catalog loading failures."""


class MissingResourceError(CatalogError):
    """The catalog file does not exist."""


class MalformedResourceError(CatalogError):
    """The catalog file exists but cannot be decoded."""


@dataclass(frozen=True)
class StarRecord:
    """Raw star catalog entry."""
    identifier: str
    ra: float
    dec: float
    mag: float
    name: Optional[str] = None
    bv: Optional[float] = None
    sp: Optional[str] = None


@dataclass(frozen=True)
class NebulaRecord:
    """Raw deep-sky catalog entry."""
    identifier: str
    ra: float
    dec: float
    mag: float
    name: str
    bv: Optional[float] = None
    sp: Optional[str] = None


def _optional_float(value) -> Optional[float]:
    return None if value is None else float(value)


def _declination(value) -> float:
    dec = float(value)
    if not -90.0 <= dec <= 90.0:
        raise ValueError(f"declination out of range: {dec}")
    return dec


def read_json_records(path: Path) -> list:
    """Read a JSON array of catalog records."""
    path = Path(path)
    if not path.is_file():
        raise MissingResourceError(f"Catalog not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise MalformedResourceError(f"Failed to decode catalog {path}: {e}") from e
    if not isinstance(data, list):
        raise MalformedResourceError(f"Catalog {path} must contain a JSON array")
    return data


def parse_star_records(
    data: Sequence[dict],
    max_magnitude: float = DEFAULT_MAX_MAGNITUDE,
) -> Tuple[StarRecord, ...]:
    """
    Decode star records.

    Entries fainter than ``max_magnitude`` or without RA/Dec are dropped.

    Raises:
        MalformedResourceError: If a record lacks ``id``/``mag`` or has
            values of the wrong type
    """
    records = []
    try:
        for entry in data:
            mag = float(entry["mag"])
            identifier = str(entry["id"])
            if entry.get("ra") is None or entry.get("dec") is None:
                continue
            if mag > max_magnitude:
                continue
            records.append(StarRecord(
                identifier=identifier,
                ra=float(entry["ra"]),
                dec=_declination(entry["dec"]),
                mag=mag,
                name=entry.get("name"),
                bv=_optional_float(entry.get("bv")),
                sp=entry.get("sp"),
            ))
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedResourceError(f"Invalid star record: {e!r}") from e
    return tuple(records)


def parse_nebula_records(data: Sequence[dict]) -> Tuple[NebulaRecord, ...]:
    """
    Decode deep-sky records. Entries without RA/Dec are dropped.

    Raises:
        MalformedResourceError: If a record lacks ``id``/``mag``/``name``
    """
    records = []
    try:
        for entry in data:
            if entry.get("ra") is None or entry.get("dec") is None:
                continue
            records.append(NebulaRecord(
                identifier=str(entry["id"]),
                ra=float(entry["ra"]),
                dec=_declination(entry["dec"]),
                mag=float(entry["mag"]),
                name=str(entry["name"]),
                bv=_optional_float(entry.get("bv")),
                sp=entry.get("sp"),
            ))
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedResourceError(f"Invalid nebula record: {e!r}") from e
    return tuple(records)


R = TypeVar("R")


class CatalogResource(Generic[R]):
    """
    Lazily loaded, immutable catalog handle.

    The loader runs at most once per handle; later calls return the
    cached records. Tests inject fixture loaders instead of files.
    """

    def __init__(
        self,
        loader: Callable[[], Tuple[R, ...]],
        name: str = "catalog",
        required: bool = True,
    ):
        self.name = name
        self.required = required
        self._loader = loader
        self._records: Optional[Tuple[R, ...]] = None
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._records is not None

    def records(self) -> Tuple[R, ...]:
        """
        Return the catalog records, loading them on first use.

        Raises:
            CatalogError: If a required catalog cannot be loaded
        """
        if self._records is not None:
            return self._records
        with self._lock:
            if self._records is None:
                try:
                    self._records = tuple(self._loader())
                except CatalogError as e:
                    if self.required:
                        raise
                    logger.warning(f"{self.name} unavailable, continuing without it: {e}")
                    self._records = ()
                else:
                    logger.info(f"Loaded {len(self._records)} {self.name} records")
        return self._records

    @classmethod
    def stars(
        cls,
        path: Path = DEFAULT_STAR_CATALOG,
        max_magnitude: float = DEFAULT_MAX_MAGNITUDE,
    ) -> "CatalogResource[StarRecord]":
        """Required star catalog backed by a JSON file."""
        return cls(
            lambda: parse_star_records(read_json_records(path), max_magnitude),
            name="star catalog",
            required=True,
        )

    @classmethod
    def nebulae(cls, path: Path = DEFAULT_NEBULA_CATALOG) -> "CatalogResource[NebulaRecord]":
        """Optional nebula catalog backed by a JSON file."""
        return cls(
            lambda: parse_nebula_records(read_json_records(path)),
            name="nebula catalog",
            required=False,
        )


# ---------------------------------------------------------------------------
# Visual attributes
# ---------------------------------------------------------------------------

def magnitude_to_brightness(magnitude: float) -> float:
    return max(0.1, 1.0 - magnitude / 6.5)


def star_size(magnitude: float) -> float:
    normalized = max(0.0, min(6.5, magnitude))
    return max(1.5, 8.0 - normalized)


def nebula_size(magnitude: float) -> float:
    # Brighter nebulae (lower magnitude) are drawn larger.
    normalized = max(1.0, min(10.0, magnitude))
    return max(8.0, 15.0 - normalized)


def _clamp_bv(bv: float) -> float:
    return max(-0.4, min(2.0, bv))


def star_color_from_bv(bv: Optional[float]) -> Color:
    """
    Star color from its B-V color index.

    Interpolates between blue-white (hot) and red (cool) across five
    temperature bands. Stars without B-V are white.
    """
    if bv is None:
        return WHITE
    bv = _clamp_bv(bv)

    if bv < 0.0:
        # Bluish
        t = (bv + 0.4) / 0.4
        return Color(0.6 + 0.4 * t, 0.7 + 0.3 * t, 1.0)
    if bv < 0.5:
        # White
        t = bv / 0.5
        return Color(0.9 + 0.1 * t, 0.9 + 0.1 * t, 1.0 - 0.2 * t)
    if bv < 1.0:
        # Yellowish
        t = (bv - 0.5) / 0.5
        return Color(1.0, 1.0 - 0.2 * t, 0.8 - 0.3 * t)
    if bv < 1.5:
        # Orange
        t = (bv - 1.0) / 0.5
        return Color(1.0, 0.8 - 0.3 * t, 0.5 - 0.3 * t)
    # Reddish
    t = min(1.0, (bv - 1.5) / 0.5)
    return Color(1.0, 0.5 - 0.3 * t, 0.2 - 0.2 * t)


def nebula_color_from_bv(bv: Optional[float]) -> Color:
    """Nebula tint from B-V over four bands; pale blue when unknown."""
    if bv is None:
        return NEBULA_DEFAULT_COLOR
    bv = _clamp_bv(bv)

    if bv < 0.0:
        t = (bv + 0.4) / 0.4
        return Color(t * 0.6, t * 0.7 + 0.3, 1.0)
    if bv < 0.5:
        t = bv / 0.5
        return Color(0.6 + t * 0.4, 0.7 + t * 0.3, 1.0 - t * 0.2)
    if bv < 1.0:
        t = (bv - 0.5) / 0.5
        return Color(1.0, 1.0 - t * 0.2, 0.8 - t * 0.4)
    t = min(1.0, (bv - 1.0) / 1.0)
    return Color(1.0, 0.8 - t * 0.4, 0.4 - t * 0.3)


# ---------------------------------------------------------------------------
# Positioning
# ---------------------------------------------------------------------------

def build_star(record: StarRecord, observer: Observer) -> Star:
    eq = EquatorialPosition(ra=record.ra, dec=record.dec)
    return Star(
        identifier=record.identifier,
        name=record.name or f"Star {record.identifier}",
        direction=position_of(eq, observer),
        ra=eq.ra,
        dec=eq.dec,
        magnitude=record.mag,
        bv=record.bv,
        brightness=magnitude_to_brightness(record.mag),
        size=star_size(record.mag),
        color=star_color_from_bv(record.bv),
        spectral_class=record.sp or "Unknown",
    )


def build_stars(records: Sequence[StarRecord], observer: Observer) -> List[Star]:
    """Position star records for an observer."""
    logger.info(
        f"Positioning {len(records)} stars for observer at "
        f"lat={observer.latitude:.2f} lon={observer.longitude:.2f}"
    )
    return [build_star(r, observer) for r in records]


def build_nebula(record: NebulaRecord, observer: Observer) -> Nebula:
    eq = EquatorialPosition(ra=record.ra, dec=record.dec)
    return Nebula(
        identifier=record.identifier,
        name=record.name,
        direction=position_of(eq, observer),
        ra=eq.ra,
        dec=eq.dec,
        magnitude=record.mag,
        bv=record.bv,
        size=nebula_size(record.mag),
        color=nebula_color_from_bv(record.bv),
        spectral_class=record.sp or "Unknown",
    )


def build_nebulae(records: Sequence[NebulaRecord], observer: Observer) -> List[Nebula]:
    """Position nebula records for an observer."""
    if not records:
        logger.warning("No nebula data loaded")
        return []
    logger.info(f"Positioning {len(records)} nebulae")
    return [build_nebula(r, observer) for r in records]


# Random star spectral bins: (upper temperature bound, color, class)
_RANDOM_SPECTRAL_BINS = (
    (0.1, Color(0.6, 0.7, 1.0), "O"),
    (0.3, Color(0.9, 0.95, 1.0), "A"),
    (0.6, Color(1.0, 1.0, 1.0), "F"),
    (0.85, Color(1.0, 0.95, 0.7), "G"),
    (1.01, Color(1.0, 0.7, 0.5), "M"),
)


def generate_random_stars(
    count: int,
    observer: Observer,
    rng: Optional[np.random.Generator] = None,
) -> List[Star]:
    """
    Generate stars uniformly distributed over the celestial sphere.

    Used as a placeholder sky when no catalog is available. Positions go
    through the same equatorial -> horizontal -> Cartesian path as real
    stars.
    """
    rng = rng or np.random.default_rng()

    ras = rng.uniform(0.0, 360.0, count)
    decs = np.degrees(np.arcsin(rng.uniform(-1.0, 1.0, count)))
    mags = rng.uniform(0.0, 1.0, count) ** 2 * 6.0
    temperatures = rng.uniform(0.0, 1.0, count)

    stars = []
    for i in range(count):
        eq = EquatorialPosition(ra=float(ras[i]), dec=float(decs[i]))
        magnitude = float(mags[i])
        brightness = 2.512 ** -magnitude
        color, spectral = next(
            (c, s) for bound, c, s in _RANDOM_SPECTRAL_BINS if temperatures[i] < bound
        )
        stars.append(Star(
            identifier=f"random-{i}",
            name="Random Star",
            direction=position_of(eq, observer),
            ra=eq.ra,
            dec=eq.dec,
            magnitude=magnitude,
            bv=None,
            brightness=brightness,
            size=2.0 + brightness * 8.0,
            color=color,
            spectral_class=spectral,
        ))
    return stars
