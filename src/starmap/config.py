"""
Configuration management for the sky map.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import yaml

from .catalog import DEFAULT_MAX_MAGNITUDE, DEFAULT_NEBULA_CATALOG, DEFAULT_STAR_CATALOG
from .ephemeris import DEFAULT_KERNEL
from .scheduler import PLANET_REFRESH_INTERVAL


@dataclass
class ViewConfig:
    """Projection and display configuration."""

    default_fov: float = 60.0       # degrees
    min_fov: float = 10.0
    max_fov: float = 60.0
    render_buffer: float = 50.0     # pixels beyond the screen edge still drawn
    horizon_step_deg: float = 5.0


@dataclass
class ControlConfig:
    """Touch and sensor control configuration."""

    selection_radius: float = 50.0  # pixels
    drag_sensitivity: float = 0.01  # radians per pixel


@dataclass
class CatalogConfig:
    """Catalog sources."""

    star_catalog: Path = field(default_factory=lambda: DEFAULT_STAR_CATALOG)
    nebula_catalog: Optional[Path] = field(default_factory=lambda: DEFAULT_NEBULA_CATALOG)
    max_magnitude: float = DEFAULT_MAX_MAGNITUDE


@dataclass
class EphemerisConfig:
    """Planet ephemeris configuration."""

    enabled: bool = True
    kernel: str = DEFAULT_KERNEL
    data_dir: Optional[Path] = None     # Where Skyfield stores the kernel
    background_refresh: bool = False


@dataclass
class SchedulerConfig:
    """Refresh cadence."""

    planet_interval_seconds: float = PLANET_REFRESH_INTERVAL


@dataclass
class Config:
    """Main configuration container."""

    view: ViewConfig = field(default_factory=ViewConfig)
    control: ControlConfig = field(default_factory=ControlConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    ephemeris: EphemerisConfig = field(default_factory=EphemerisConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)

    verbose: bool = False

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load configuration from YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "Config":
        """Create Config from dictionary."""
        config = cls()

        if "view" in data:
            config.view = ViewConfig(**data["view"])
        if "control" in data:
            config.control = ControlConfig(**data["control"])
        if "catalog" in data:
            cat_data = dict(data["catalog"])
            if cat_data.get("star_catalog") is not None:
                cat_data["star_catalog"] = Path(cat_data["star_catalog"])
            if cat_data.get("nebula_catalog") is not None:
                cat_data["nebula_catalog"] = Path(cat_data["nebula_catalog"])
            config.catalog = CatalogConfig(**cat_data)
        if "ephemeris" in data:
            eph_data = dict(data["ephemeris"])
            if eph_data.get("data_dir") is not None:
                eph_data["data_dir"] = Path(eph_data["data_dir"])
            config.ephemeris = EphemerisConfig(**eph_data)
        if "scheduler" in data:
            config.scheduler = SchedulerConfig(**data["scheduler"])

        config.verbose = data.get("verbose", False)

        return config

    def to_yaml(self, path: Path) -> None:
        """Save configuration to YAML file."""
        import dataclasses

        def convert(obj):
            if dataclasses.is_dataclass(obj):
                return {k: convert(v) for k, v in dataclasses.asdict(obj).items()}
            elif isinstance(obj, dict):
                return {k: convert(v) for k, v in obj.items()}
            elif isinstance(obj, Path):
                return str(obj)
            return obj

        data = convert(self)
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
