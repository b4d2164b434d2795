"""Object builders shared by the unit tests."""

from starmap.celestial import Direction
from starmap.objects import WHITE, Color, Nebula, Planet, PlanetBody, Star


def make_star(direction, identifier="s1", name="Test Star", size=4.0, color=WHITE):
    """Star at an arbitrary direction (not necessarily unit length)."""
    return Star(
        identifier=identifier,
        name=name,
        direction=Direction(*direction),
        ra=0.0,
        dec=0.0,
        magnitude=1.0,
        bv=None,
        brightness=0.85,
        size=size,
        color=color,
        spectral_class="Unknown",
    )


def make_planet(direction, body=PlanetBody.MARS):
    return Planet(body=body, direction=Direction(*direction), ra=0.0, dec=0.0)


def make_nebula(direction, identifier="M1", size=10.0):
    return Nebula(
        identifier=identifier,
        name="Test Nebula",
        direction=Direction(*direction),
        ra=0.0,
        dec=0.0,
        magnitude=8.4,
        bv=None,
        size=size,
        color=Color(0.8, 0.8, 1.0),
        spectral_class="Unknown",
    )
