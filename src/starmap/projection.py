"""
Perspective projection and hit-testing.

View-space directions are projected with a pinhole model whose focal
length comes from the horizontal field of view:

    scale = width / (2 * tan(fov / 2))
    screen_x = cx + (x / z) * scale
    screen_y = cy - (y / z) * scale

Only directions with z > 0 (in front of the camera) have a projection.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from .celestial import CARDINAL_POINTS, Direction, horizon_points
from .objects import CelestialObject, Color, ObjectKind
from .orientation import OrientationState, rotate, rotate_many

DEFAULT_FOV = 60.0

# Objects are kept while within this many pixels outside the screen edge.
RENDER_BUFFER = 50.0

# Display multipliers applied on top of the perspective size.
PLANET_SIZE_FACTOR = 7.0
NEBULA_SIZE_FACTOR = 10.0


class ScreenPoint(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True)
class Viewport:
    """Screen dimensions and field of view for projection."""
    width: float
    height: float
    fov: float = DEFAULT_FOV        # Horizontal FOV in degrees
    default_fov: float = DEFAULT_FOV

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Viewport must have positive size, got {self.width}x{self.height}")
        if not 0 < self.fov < 180:
            raise ValueError(f"Field of view must be in (0, 180), got {self.fov}")

    @property
    def center(self) -> ScreenPoint:
        """Principal point."""
        return ScreenPoint(self.width / 2, self.height / 2)

    @property
    def scale(self) -> float:
        """Focal length in pixels."""
        return projection_scale(self.width, self.fov)

    @property
    def zoom_factor(self) -> float:
        """Magnification relative to the default field of view."""
        return self.default_fov / self.fov


@dataclass(frozen=True)
class RenderItem:
    """One visible object ready for drawing."""
    point: ScreenPoint
    render_size: float
    color: Color
    kind: ObjectKind
    obj: CelestialObject


def projection_scale(width: float, fov_deg: float) -> float:
    """Focal length in pixels for a viewport width and horizontal FOV."""
    return width / (2 * math.tan(math.radians(fov_deg) / 2))


def project(d: Direction, center: Tuple[float, float], scale: float) -> Optional[ScreenPoint]:
    """
    Project a view-space direction to screen coordinates.

    Returns:
        Screen point, or None when the direction is behind the camera
    """
    if d.z <= 0:
        return None
    cx, cy = center
    return ScreenPoint(cx + (d.x / d.z) * scale, cy - (d.y / d.z) * scale)


def project_many(
    directions: np.ndarray,
    center: Tuple[float, float],
    scale: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Vectorized projection of view-space directions.

    Args:
        directions: Nx3 array of view-space directions
        center: Principal point
        scale: Focal length in pixels

    Returns:
        (Nx2 screen points, boolean visibility mask). Rows that are not
        visible contain NaN.
    """
    directions = np.asarray(directions, dtype=np.float64).reshape(-1, 3)
    visible = directions[:, 2] > 0
    points = np.full((directions.shape[0], 2), np.nan)

    z = directions[visible, 2]
    points[visible, 0] = center[0] + directions[visible, 0] / z * scale
    points[visible, 1] = center[1] - directions[visible, 1] / z * scale
    return points, visible


def is_on_screen(
    point: Tuple[float, float],
    width: float,
    height: float,
    buffer: float = RENDER_BUFFER,
) -> bool:
    """Check if a projected point is on screen, allowing a margin."""
    x, y = point
    return -buffer < x < width + buffer and -buffer < y < height + buffer


def nearest(
    tap: Tuple[float, float],
    objects: Iterable[CelestialObject],
    orientation: OrientationState,
    center: Tuple[float, float],
    scale: float,
    max_radius: float,
) -> Optional[CelestialObject]:
    """
    Find the object projected closest to a tap.

    The closest object is returned only when its distance is strictly less
    than ``max_radius``. On ties the first object in iteration order wins.
    """
    tx, ty = tap
    closest = None
    min_distance = max_radius

    for obj in objects:
        projected = project(rotate(obj.direction, orientation), center, scale)
        if projected is None:
            continue
        distance = math.hypot(projected.x - tx, projected.y - ty)
        if distance < min_distance:
            min_distance = distance
            closest = obj

    return closest


def render_size(obj: CelestialObject, z: float, zoom_factor: float) -> float:
    """On-screen size of an object at view-space depth ``z``."""
    size = obj.size * (1.0 / z) * 0.5 * zoom_factor
    if obj.kind is ObjectKind.PLANET:
        return size * PLANET_SIZE_FACTOR
    if obj.kind is ObjectKind.NEBULA:
        return size * NEBULA_SIZE_FACTOR
    return size


def render_frame(
    objects: Sequence[CelestialObject],
    orientation: OrientationState,
    viewport: Viewport,
    buffer: float = RENDER_BUFFER,
) -> List[RenderItem]:
    """
    Rotate, project and cull all objects for one frame.

    Returns:
        Render items in the same order as ``objects``
    """
    if not objects:
        return []

    directions = np.array([[o.direction.x, o.direction.y, o.direction.z] for o in objects])
    rotated = rotate_many(directions, orientation)
    points, visible = project_many(rotated, viewport.center, viewport.scale)

    items = []
    for i in np.flatnonzero(visible):
        point = ScreenPoint(float(points[i, 0]), float(points[i, 1]))
        if not is_on_screen(point, viewport.width, viewport.height, buffer):
            continue
        obj = objects[i]
        items.append(RenderItem(
            point=point,
            render_size=render_size(obj, float(rotated[i, 2]), viewport.zoom_factor),
            color=obj.color,
            kind=obj.kind,
            obj=obj,
        ))
    return items


def project_horizon(
    orientation: OrientationState,
    viewport: Viewport,
    step_deg: float = 5.0,
) -> List[Optional[ScreenPoint]]:
    """
    Project the horizon circle; samples behind the camera are None so a
    caller can break the polyline there.
    """
    rotated = rotate_many(
        np.array([[d.x, d.y, d.z] for d in horizon_points(step_deg)]), orientation
    )
    points, visible = project_many(rotated, viewport.center, viewport.scale)
    return [
        ScreenPoint(float(p[0]), float(p[1])) if v else None
        for p, v in zip(points, visible)
    ]


def project_cardinal_points(
    orientation: OrientationState,
    viewport: Viewport,
) -> List[Tuple[str, ScreenPoint]]:
    """Cardinal markers (N, E, S, W) strictly inside the viewport."""
    markers = []
    for name, direction in CARDINAL_POINTS:
        projected = project(rotate(direction, orientation), viewport.center, viewport.scale)
        if projected is None:
            continue
        if 0 < projected.x < viewport.width and 0 < projected.y < viewport.height:
            markers.append((name, projected))
    return markers
