"""
Sky session: ties catalogs, ephemeris, refresh scheduling and orientation
together.

Observer updates arrive from a location service and decide, through the
``RefreshScheduler``, which object classes get repositioned. Rendering and
selection read immutable snapshots of the published collections.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from .angles import julian_day
from .catalog import (
    CatalogResource,
    NebulaRecord,
    StarRecord,
    build_nebulae,
    build_stars,
    generate_random_stars,
)
from .celestial import Observer
from .config import Config
from .ephemeris import EphemerisError, EphemerisProvider, position_planets
from .objects import CelestialObject, FilterType, Nebula, Planet, Star, filter_objects
from .orientation import OrientationController, OrientationState
from .projection import (
    RenderItem,
    ScreenPoint,
    Viewport,
    nearest,
    project_cardinal_points,
    project_horizon,
    render_frame,
)
from .scheduler import RefreshDecision, RefreshScheduler


logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Selection:
    """The object picked by a tap and its display details."""
    obj: CelestialObject
    details: Dict[str, str]

    @property
    def name(self) -> str:
        return self.obj.name

    @property
    def type_name(self) -> str:
        return self.obj.type_name


@dataclass(frozen=True)
class Frame:
    """Everything needed to draw one frame."""
    items: List[RenderItem]
    horizon: List[Optional[ScreenPoint]]
    cardinal_points: List[Tuple[str, ScreenPoint]]
    orientation: OrientationState


class SkySession:
    """
    Positioned sky for one observer session.

    Stars and nebulae are positioned on the first observer update of a
    session; planets are refreshed on the scheduler's cadence. Collections
    are replaced wholesale, so readers never see a partial update.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        star_catalog: Optional[CatalogResource[StarRecord]] = None,
        nebula_catalog: Optional[CatalogResource[NebulaRecord]] = None,
        provider: Optional[EphemerisProvider] = None,
        clock: Callable[[], datetime] = utc_now,
        random_stars: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config or Config()
        cat = self.config.catalog

        self.star_catalog = star_catalog or CatalogResource.stars(cat.star_catalog, cat.max_magnitude)
        if nebula_catalog is None:
            if cat.nebula_catalog is not None:
                nebula_catalog = CatalogResource.nebulae(cat.nebula_catalog)
            else:
                nebula_catalog = CatalogResource(tuple, name="nebula catalog", required=False)
        self.nebula_catalog = nebula_catalog
        if provider is not None and not self.config.ephemeris.enabled:
            logger.info("Ephemeris disabled in config, planets will not be shown")
            provider = None
        self.provider = provider
        self.clock = clock
        self.random_stars = random_stars
        self.rng = rng

        self.scheduler = RefreshScheduler(self.config.scheduler.planet_interval_seconds)
        self.orientation = OrientationController(
            drag_sensitivity=self.config.control.drag_sensitivity,
            default_fov=self.config.view.default_fov,
            min_fov=self.config.view.min_fov,
            max_fov=self.config.view.max_fov,
        )

        self._lock = threading.Lock()
        self._stars: Tuple[Star, ...] = ()
        self._nebulae: Tuple[Nebula, ...] = ()
        self._planets: Tuple[Planet, ...] = ()
        self._observer: Optional[Observer] = None
        self._refresh_thread: Optional[threading.Thread] = None
        self._refresh_generation = -1
        # Bumped by reset(); a refresh only publishes if it is unchanged.
        self._generation = 0

    # -- state -----------------------------------------------------------

    @property
    def observer(self) -> Optional[Observer]:
        return self._observer

    @property
    def stars(self) -> Tuple[Star, ...]:
        return self._stars

    @property
    def nebulae(self) -> Tuple[Nebula, ...]:
        return self._nebulae

    @property
    def planets(self) -> Tuple[Planet, ...]:
        return self._planets

    def objects(self, filter_type: FilterType = FilterType.ALL) -> List[CelestialObject]:
        """Current objects for a filter."""
        with self._lock:
            stars, planets, nebulae = self._stars, self._planets, self._nebulae
        return filter_objects(stars, planets, nebulae, filter_type)

    # -- updates ---------------------------------------------------------

    def update_observer(self, observer: Observer) -> RefreshDecision:
        """
        Handle a new observer (location fix or time change).

        Returns the scheduler decision that was applied.
        """
        now = observer.timestamp
        with self._lock:
            self._observer = observer
            decision = self.scheduler.on_observer(now)
            generation = self._generation

        if decision.load_catalog:
            self._load_catalog_objects(observer, generation)

        if decision.refresh_planets:
            if self.config.ephemeris.background_refresh:
                self._start_background_refresh(observer, now, generation)
            else:
                self._refresh_planets(observer, now, generation)

        return decision

    def _load_catalog_objects(self, observer: Observer, generation: int) -> None:
        logger.info("Loading catalog objects for new session")
        if self.random_stars is not None:
            stars = tuple(generate_random_stars(self.random_stars, observer, self.rng))
        else:
            stars = tuple(build_stars(self.star_catalog.records(), observer))
        nebulae = tuple(build_nebulae(self.nebula_catalog.records(), observer))
        with self._lock:
            if generation != self._generation:
                logger.debug("Session was reset while positioning the catalog, discarding")
                return
            self._stars = stars
            self._nebulae = nebulae
            self.scheduler.mark_catalog_loaded()
        logger.info(f"{len(stars)} stars and {len(nebulae)} nebulae positioned")

    def _refresh_planets(self, observer: Observer, now: datetime, generation: int) -> None:
        if self.provider is None:
            return
        logger.info(f"Updating planets for time: {now.isoformat()}")
        planets = tuple(position_planets(self.provider, observer))
        with self._lock:
            if generation != self._generation:
                logger.debug(f"Session was reset during the planet refresh for {now.isoformat()}, discarding")
                return
            self._planets = planets
            self.scheduler.mark_planets_refreshed(now)
        logger.info(f"{len(planets)} planets updated")

    def _start_background_refresh(self, observer: Observer, now: datetime, generation: int) -> None:
        thread = self._refresh_thread
        if thread is not None and thread.is_alive() and self._refresh_generation == generation:
            logger.debug("Planet refresh already in flight, skipping")
            return
        self._refresh_generation = generation
        self._refresh_thread = threading.Thread(
            target=self._refresh_planets,
            args=(observer, now, generation),
            name="planet-refresh",
            daemon=True,
        )
        self._refresh_thread.start()

    def wait_for_refresh(self, timeout: Optional[float] = None) -> None:
        """Block until the latest background planet refresh completes."""
        thread = self._refresh_thread
        if thread is not None:
            thread.join(timeout)

    def reset(self) -> None:
        """
        Start a new session, e.g. when the app returns to the foreground.

        A refresh still in flight from the previous session is discarded
        when it finishes.
        """
        with self._lock:
            self._generation += 1
            self.scheduler.reset()
        logger.info("Session reset")

    # -- rendering and selection ----------------------------------------

    def viewport(self, width: float, height: float) -> Viewport:
        return Viewport(
            width=width,
            height=height,
            fov=self.orientation.field_of_view,
            default_fov=self.config.view.default_fov,
        )

    def frame(
        self,
        width: float,
        height: float,
        filter_type: FilterType = FilterType.ALL,
    ) -> Frame:
        """Project the current sky for a screen of the given size."""
        orientation = self.orientation.snapshot()
        viewport = self.viewport(width, height)
        return Frame(
            items=render_frame(
                self.objects(filter_type), orientation, viewport, self.config.view.render_buffer
            ),
            horizon=project_horizon(orientation, viewport, self.config.view.horizon_step_deg),
            cardinal_points=project_cardinal_points(orientation, viewport),
            orientation=orientation,
        )

    def select(
        self,
        tap: Tuple[float, float],
        width: float,
        height: float,
        filter_type: FilterType = FilterType.ALL,
    ) -> Optional[Selection]:
        """
        Pick the object nearest a tap.

        Planets get their distance from Earth looked up at selection time.
        """
        viewport = self.viewport(width, height)
        obj = nearest(
            tap,
            self.objects(filter_type),
            self.orientation.snapshot(),
            viewport.center,
            viewport.scale,
            self.config.control.selection_radius,
        )
        if obj is None:
            return None

        if isinstance(obj, Planet) and self.provider is not None:
            try:
                obj = obj.with_distance(
                    self.provider.distance_at(obj.body, julian_day(self.clock()))
                )
            except EphemerisError as e:
                logger.error(f"Distance lookup failed for {obj.name}: {e}")

        logger.debug(f"Selected {obj.type_name} {obj.name}")
        return Selection(obj=obj, details=obj.details)
