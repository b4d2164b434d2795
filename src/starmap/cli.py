"""
Command-line interface for the sky map.
"""

import math
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional
import logging

import click

from .angles import cardinal_direction_name, local_sidereal_time, normalize_degrees
from .catalog import CatalogError
from .celestial import EquatorialPosition, Observer, horizontal_to_cartesian, to_horizontal
from .config import Config
from .ephemeris import EphemerisError, SkyfieldEphemeris
from .objects import FilterType
from .sky import SkySession, utc_now


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

TIME_FORMATS = ["%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S", "%Y-%m-%dT%H:%M", "%Y-%m-%d"]


@click.group()
@click.version_option(version="0.1.0")
def main():
    """Star Map - Real-time sky positions for an observer on Earth."""
    pass


OBSERVER_OPTIONS = [
    click.option("--lat", type=click.FloatRange(-90, 90), required=True,
                 help="Observer latitude in degrees (North positive)"),
    click.option("--lon", type=float, required=True,
                 help="Observer longitude in degrees (East positive)"),
    click.option("--time", "when", type=click.DateTime(formats=TIME_FORMATS), default=None,
                 help="Observation time in UTC (default: now)"),
]

SKY_OPTIONS = [
    click.option(
        "-c", "--config",
        type=click.Path(exists=True, path_type=Path),
        help="Configuration YAML file"
    ),
    click.option("--fov", type=float, default=None,
                 help="Horizontal field of view in degrees"),
    click.option("--yaw", type=float, default=0.0,
                 help="Manual view yaw in degrees (90 faces East, 180 faces North)"),
    click.option("--pitch", type=float, default=0.0,
                 help="Manual view pitch in degrees (negative tilts towards the zenith)"),
    click.option("--width", type=click.IntRange(min=1), default=1170,
                 help="Screen width in pixels"),
    click.option("--height", type=click.IntRange(min=1), default=2532,
                 help="Screen height in pixels"),
    click.option(
        "--filter", "filter_name",
        type=click.Choice([f.value for f in FilterType]),
        default=FilterType.ALL.value,
        help="Object classes to show"
    ),
    click.option("--no-planets", is_flag=True, help="Skip the planetary ephemeris"),
    click.option("--random", "random_stars", type=click.IntRange(min=0), default=None,
                 help="Use N random stars instead of the star catalog"),
    click.option("-v", "--verbose", is_flag=True, help="Enable verbose output"),
]


def with_options(options):
    """Apply a shared list of click options to a command."""
    def decorator(f):
        for option in reversed(options):
            f = option(f)
        return f
    return decorator


def _observer(lat: float, lon: float, when: Optional[datetime]) -> Observer:
    return Observer(latitude=lat, longitude=lon, timestamp=when or utc_now())


def _open_session(
    lat: float,
    lon: float,
    when: Optional[datetime],
    config: Optional[Path],
    fov: Optional[float],
    yaw: float,
    pitch: float,
    no_planets: bool,
    random_stars: Optional[int],
    verbose: bool,
) -> SkySession:
    """Build a session, apply overrides and position everything once."""
    cfg = Config.from_yaml(config) if config else Config()

    # Apply command-line overrides
    if fov is not None:
        cfg.view.default_fov = fov
    if no_planets:
        cfg.ephemeris.enabled = False
    cfg.verbose = verbose or cfg.verbose

    if cfg.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    provider = None
    if cfg.ephemeris.enabled:
        try:
            provider = SkyfieldEphemeris.load(cfg.ephemeris.kernel, cfg.ephemeris.data_dir)
        except EphemerisError as e:
            click.echo(click.style(f"! {e}; continuing without planets", fg="yellow"), err=True)

    observer = _observer(lat, lon, when)
    session = SkySession(
        cfg,
        provider=provider,
        clock=lambda: observer.timestamp,
        random_stars=random_stars,
    )
    session.orientation.set_manual(pitch=math.radians(pitch), yaw=math.radians(yaw))

    try:
        session.update_observer(observer)
    except CatalogError as e:
        click.echo(click.style(f"✗ Error: {e}", fg="red"))
        sys.exit(1)

    session.wait_for_refresh()
    return session


@main.command()
@click.argument("ra", type=float)
@click.argument("dec", type=click.FloatRange(-90, 90))
@with_options(OBSERVER_OPTIONS)
def locate(ra: float, dec: float, lat: float, lon: float, when: Optional[datetime]):
    """
    Compute where an equatorial position appears for an observer.

    RA and DEC are J2000 coordinates in degrees.
    """
    observer = _observer(lat, lon, when)
    horizontal = to_horizontal(EquatorialPosition(ra=ra, dec=dec), observer)
    direction = horizontal_to_cartesian(horizontal)
    lst = normalize_degrees(local_sidereal_time(observer.julian_day, observer.longitude))

    click.echo(f"Observer: lat={lat:.4f} lon={lon:.4f} at {observer.timestamp.isoformat()}")
    click.echo(f"  Julian Day: {observer.julian_day:.5f}")
    click.echo(f"  Local sidereal time: {lst:.4f}°")
    click.echo()
    click.echo(f"Azimuth:   {horizontal.azimuth_degrees:8.3f}° ({cardinal_direction_name(horizontal.azimuth_degrees)})")
    click.echo(f"Altitude:  {horizontal.altitude_degrees:8.3f}°")
    click.echo(f"Direction: ({direction.x:.5f}, {direction.y:.5f}, {direction.z:.5f})")
    if horizontal.altitude < 0:
        click.echo("  Below the horizon")


@main.command()
@with_options(OBSERVER_OPTIONS)
@with_options(SKY_OPTIONS)
@click.option("--limit", type=click.IntRange(min=0), default=20,
              help="Maximum number of objects to list (0 = all)")
def sky(
    lat: float,
    lon: float,
    when: Optional[datetime],
    config: Optional[Path],
    fov: Optional[float],
    yaw: float,
    pitch: float,
    width: int,
    height: int,
    filter_name: str,
    no_planets: bool,
    random_stars: Optional[int],
    verbose: bool,
    limit: int,
):
    """
    List the objects visible in a view direction.

    Objects are ordered by on-screen size, largest first.
    """
    session = _open_session(
        lat, lon, when, config, fov, yaw, pitch, no_planets, random_stars, verbose
    )
    frame = session.frame(width, height, FilterType(filter_name))

    click.echo(f"View: yaw={yaw:.1f}° pitch={pitch:.1f}° fov={session.orientation.field_of_view:.1f}°")
    click.echo(f"  Objects in view: {len(frame.items)}")
    if frame.cardinal_points:
        markers = ", ".join(f"{name} ({p.x:.0f}, {p.y:.0f})" for name, p in frame.cardinal_points)
        click.echo(f"  Cardinal points: {markers}")
    visible_horizon = [p for p in frame.horizon if p is not None]
    click.echo(f"  Horizon samples in front: {len(visible_horizon)}/{len(frame.horizon)}")

    if not frame.items:
        return

    items = sorted(frame.items, key=lambda item: item.render_size, reverse=True)
    if limit:
        items = items[:limit]

    click.echo()
    for item in items:
        click.echo(
            f"  {item.obj.type_name:<7} {item.obj.name:<28} "
            f"x={item.point.x:7.1f} y={item.point.y:7.1f} size={item.render_size:5.2f}"
        )


@main.command()
@click.argument("x", type=float)
@click.argument("y", type=float)
@with_options(OBSERVER_OPTIONS)
@with_options(SKY_OPTIONS)
def select(
    x: float,
    y: float,
    lat: float,
    lon: float,
    when: Optional[datetime],
    config: Optional[Path],
    fov: Optional[float],
    yaw: float,
    pitch: float,
    width: int,
    height: int,
    filter_name: str,
    no_planets: bool,
    random_stars: Optional[int],
    verbose: bool,
):
    """
    Show details of the object nearest a screen tap.

    X and Y are screen coordinates in pixels.
    """
    session = _open_session(
        lat, lon, when, config, fov, yaw, pitch, no_planets, random_stars, verbose
    )
    selection = session.select((x, y), width, height, FilterType(filter_name))

    if selection is None:
        click.echo(f"Nothing within {session.config.control.selection_radius:.0f} px of ({x:.0f}, {y:.0f})")
        sys.exit(1)

    click.echo(click.style(f"{selection.name}", bold=True) + f" ({selection.type_name})")
    obj = selection.obj
    click.echo(f"  RA: {obj.ra:.4f}°  Dec: {obj.dec:.4f}°")
    for key, value in selection.details.items():
        click.echo(f"  {key}: {value}")


@main.command()
@click.argument("output_path", type=click.Path(path_type=Path))
def init_config(output_path: Path):
    """
    Create a default configuration file.
    """
    cfg = Config()
    cfg.to_yaml(output_path)
    click.echo(f"Created configuration file: {output_path}")


if __name__ == "__main__":
    main()
