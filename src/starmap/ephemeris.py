"""
Planetary positions.

The sky map only depends on the ``EphemerisProvider`` contract: given a
body and a Julian Day (UT), return its J2000 equatorial position. Any
source satisfying it works; ``SkyfieldEphemeris`` adapts a JPL kernel
loaded through Skyfield.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional

from skyfield.api import Loader

from .celestial import EquatorialPosition, Observer, position_of
from .objects import Planet, PlanetBody


logger = logging.getLogger(__name__)

DEFAULT_KERNEL = "de421.bsp"

# Kernel segment names. de421 only carries barycenters for Mars and the
# outer planets, which are within arcseconds of the planet centers.
SKYFIELD_TARGETS = {
    PlanetBody.SUN: "sun",
    PlanetBody.MOON: "moon",
    PlanetBody.MERCURY: "mercury",
    PlanetBody.VENUS: "venus",
    PlanetBody.MARS: "mars barycenter",
    PlanetBody.JUPITER: "jupiter barycenter",
    PlanetBody.SATURN: "saturn barycenter",
    PlanetBody.URANUS: "uranus barycenter",
    PlanetBody.NEPTUNE: "neptune barycenter",
}


class EphemerisError(Exception):
    """A position query failed for one body."""


class EphemerisProvider(ABC):
    """Source of equatorial positions for solar system bodies."""

    @abstractmethod
    def position_at(self, body: PlanetBody, jd_ut: float) -> EquatorialPosition:
        """
        Equatorial position of a body.

        Args:
            body: Body to locate
            jd_ut: Julian Day (UT)

        Raises:
            EphemerisError: If the position cannot be computed
        """

    def distance_at(self, body: PlanetBody, jd_ut: float) -> float:
        """Distance from Earth in astronomical units."""
        raise EphemerisError(f"{type(self).__name__} does not provide distances")


class SkyfieldEphemeris(EphemerisProvider):
    """
    Ephemeris backed by a Skyfield-loaded JPL kernel.

    Positions are astrometric ICRS (J2000) as seen from the Earth's center,
    matching the epoch of the star catalog.
    """

    def __init__(self, ephemeris, timescale):
        self.eph = ephemeris
        self.ts = timescale
        self.earth = ephemeris["earth"]

    @classmethod
    def load(
        cls,
        kernel: str = DEFAULT_KERNEL,
        directory: Optional[Path] = None,
    ) -> "SkyfieldEphemeris":
        """
        Load a kernel, downloading it into ``directory`` if needed.

        Raises:
            EphemerisError: If the kernel cannot be opened
        """
        loader = Loader(str(directory) if directory is not None else ".")
        try:
            eph = loader(kernel)
        except Exception as e:
            raise EphemerisError(f"Could not load ephemeris kernel {kernel}: {e}") from e
        logger.info(f"Loaded ephemeris kernel {kernel}")
        return cls(eph, loader.timescale())

    def _observe(self, body: PlanetBody, jd_ut: float):
        try:
            target = self.eph[SKYFIELD_TARGETS[body]]
            t = self.ts.ut1_jd(jd_ut)
            return self.earth.at(t).observe(target).radec()
        except Exception as e:
            raise EphemerisError(f"Ephemeris query failed for {body.display_name}: {e}") from e

    def position_at(self, body: PlanetBody, jd_ut: float) -> EquatorialPosition:
        ra, dec, _ = self._observe(body, jd_ut)
        return EquatorialPosition(ra=ra.hours * 15.0, dec=dec.degrees)

    def distance_at(self, body: PlanetBody, jd_ut: float) -> float:
        _, _, distance = self._observe(body, jd_ut)
        return float(distance.au)


def position_planets(
    provider: EphemerisProvider,
    observer: Observer,
    bodies: Iterable[PlanetBody] = tuple(PlanetBody),
) -> List[Planet]:
    """
    Query and position solar system bodies for an observer.

    A failing body is logged and skipped; the others are still returned.
    """
    jd = observer.julian_day
    planets = []

    for body in bodies:
        try:
            eq = provider.position_at(body, jd)
        except EphemerisError as e:
            logger.error(f"Failed to calculate coordinates for {body.display_name}: {e}")
            continue
        logger.debug(
            f"{body.display_name}: JD={jd:.2f} RA={eq.ra:.4f} Dec={eq.dec:.4f}"
        )
        planets.append(Planet(
            body=body,
            direction=position_of(eq, observer),
            ra=eq.ra,
            dec=eq.dec,
        ))

    return planets
