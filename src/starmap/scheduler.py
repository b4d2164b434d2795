"""
Refresh cadence for positioned objects.

Catalog objects (stars, nebulae) are positioned once per session; planets
are refreshed on the first observer update of a session and then at most
once per ``planet_interval`` seconds, measured from the last successful
refresh. ``reset()`` starts a new session.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


logger = logging.getLogger(__name__)

PLANET_REFRESH_INTERVAL = 60.0  # seconds


@dataclass(frozen=True)
class RefreshDecision:
    """What an observer update should recompute."""
    load_catalog: bool
    refresh_planets: bool

    @property
    def any(self) -> bool:
        return self.load_catalog or self.refresh_planets


class RefreshScheduler:
    """Decides when catalog and planet positions are recomputed."""

    def __init__(self, planet_interval: float = PLANET_REFRESH_INTERVAL):
        if planet_interval < 0:
            raise ValueError("planet_interval must be non-negative")
        self.planet_interval = planet_interval
        self._catalog_loaded = False
        self._last_planet_refresh: Optional[datetime] = None

    @property
    def catalog_loaded(self) -> bool:
        return self._catalog_loaded

    @property
    def last_planet_refresh(self) -> Optional[datetime]:
        return self._last_planet_refresh

    def on_observer(self, now: datetime) -> RefreshDecision:
        """Decide what to recompute for an observer update at ``now``."""
        if self._last_planet_refresh is None:
            refresh_planets = True
        else:
            elapsed = (now - self._last_planet_refresh).total_seconds()
            refresh_planets = elapsed >= self.planet_interval
        return RefreshDecision(
            load_catalog=not self._catalog_loaded,
            refresh_planets=refresh_planets,
        )

    def mark_catalog_loaded(self) -> None:
        self._catalog_loaded = True

    def mark_planets_refreshed(self, now: datetime) -> None:
        self._last_planet_refresh = now

    def reset(self) -> None:
        """Start a new session: reload the catalog and refresh planets next time."""
        logger.info("Session reset; forcing data refresh on next observer update")
        self._catalog_loaded = False
        self._last_planet_refresh = None
