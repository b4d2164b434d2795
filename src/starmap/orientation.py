"""
Viewing orientation for the sky map.

Two mutually exclusive sources drive the view:

- ``DeviceAttitude``: a 3x3 attitude matrix from the device motion sensors
  (reference frame: X = magnetic north, Z = vertical).
- ``ManualOrientation``: pitch/yaw angles accumulated from drag gestures.

Each state reduces to a single 3x3 view matrix, so a whole catalog can be
rotated with one matrix product.
"""

import logging
import math
import threading
import warnings
from dataclasses import dataclass, field
from typing import Optional, Union

import numpy as np
from scipy.spatial.transform import Rotation

from .celestial import Direction


logger = logging.getLogger(__name__)

# Sensor frame has X = magnetic north; the rendering frame has -Z = north.
SENSOR_YAW_CORRECTION = -math.pi / 2

# Landscape sensor axes -> portrait rendering axes: (x, y, z) -> (x, z, -y)
PORTRAIT_REMAP = np.array([
    [1.0, 0.0, 0.0],
    [0.0, 0.0, 1.0],
    [0.0, -1.0, 0.0],
])

# Moving the world opposite to the device negates x and y, keeps z.
WORLD_INVERSION = np.diag([-1.0, -1.0, 1.0])


def rotation_about_y(angle: float) -> np.ndarray:
    """Rotation about Y: x' = x cos - z sin, z' = x sin + z cos."""
    c, s = math.cos(angle), math.sin(angle)
    return np.array([
        [c, 0.0, -s],
        [0.0, 1.0, 0.0],
        [s, 0.0, c],
    ])


def rotation_about_x(angle: float) -> np.ndarray:
    """Rotation about X: y' = y cos - z sin, z' = y sin + z cos."""
    c, s = math.cos(angle), math.sin(angle)
    return np.array([
        [1.0, 0.0, 0.0],
        [0.0, c, -s],
        [0.0, s, c],
    ])


# Fixed part of the device path, applied before the attitude matrix.
_DEVICE_PRE_ROTATION = PORTRAIT_REMAP @ rotation_about_y(SENSOR_YAW_CORRECTION)


@dataclass(frozen=True, eq=False)
class DeviceAttitude:
    """Device attitude as reported by the motion sensors."""
    matrix: np.ndarray

    def __post_init__(self):
        m = np.array(self.matrix, dtype=np.float64)
        if m.shape != (3, 3):
            raise ValueError(f"Attitude matrix must be 3x3, got shape {m.shape}")
        m.flags.writeable = False
        object.__setattr__(self, "matrix", m)


@dataclass(frozen=True)
class ManualOrientation:
    """Manual camera angles in radians."""
    pitch: float = 0.0
    yaw: float = 0.0


OrientationState = Union[DeviceAttitude, ManualOrientation]


def view_matrix(state: OrientationState) -> np.ndarray:
    """
    Compose the 3x3 matrix that rotates rendering-frame directions into
    view space for the given orientation.
    """
    if isinstance(state, DeviceAttitude):
        return WORLD_INVERSION @ state.matrix @ _DEVICE_PRE_ROTATION
    if isinstance(state, ManualOrientation):
        # Yaw about the world Y axis first, then pitch about the new X axis.
        return rotation_about_x(-state.pitch) @ rotation_about_y(-state.yaw)
    raise TypeError(f"Unsupported orientation state: {type(state).__name__}")


def rotate(d: Direction, state: OrientationState) -> Direction:
    """Rotate a single direction into view space."""
    return Direction.from_array(view_matrix(state) @ d.as_array())


def rotate_many(directions: np.ndarray, state: OrientationState) -> np.ndarray:
    """
    Rotate a batch of directions into view space.

    Args:
        directions: Nx3 array of rendering-frame directions
        state: Current orientation

    Returns:
        Nx3 array of view-space directions
    """
    directions = np.asarray(directions, dtype=np.float64).reshape(-1, 3)
    return directions @ view_matrix(state).T


def to_manual(state: OrientationState) -> ManualOrientation:
    """
    Manual angles that keep the view centre of ``state`` where it is.

    The view matrix is split as Rz(roll) @ Rx(-pitch) @ Ry(yaw). Roll turns
    about the viewing axis, so dropping it leaves the centre in place and
    only the screen rotation is lost.
    """
    if isinstance(state, ManualOrientation):
        return state
    with warnings.catch_warnings():
        # Looking straight up or down leaves yaw and roll coupled.
        warnings.simplefilter("ignore", UserWarning)
        _, tilt, yaw = Rotation.from_matrix(view_matrix(state)).as_euler("ZXY")
    return ManualOrientation(pitch=-float(tilt), yaw=float(yaw))


@dataclass
class _ControllerState:
    tracking: bool = True
    manual: ManualOrientation = field(default_factory=ManualOrientation)
    attitude: Optional[DeviceAttitude] = None
    heading: float = 0.0            # Compass heading, degrees
    fov: float = 60.0               # Degrees


class OrientationController:
    """
    Holds the current orientation as a single replaceable cell.

    Sensor callbacks and gesture handlers write through this object; the
    renderer and hit-tester read immutable snapshots via ``snapshot()``.
    """

    def __init__(
        self,
        drag_sensitivity: float = 0.01,
        default_fov: float = 60.0,
        min_fov: float = 10.0,
        max_fov: float = 60.0,
    ):
        if not 0 < min_fov <= max_fov < 180:
            raise ValueError(f"Invalid FOV range: [{min_fov}, {max_fov}]")
        self.drag_sensitivity = drag_sensitivity
        self.min_fov = min_fov
        self.max_fov = max_fov

        self._lock = threading.Lock()
        self._state = _ControllerState(fov=self._clamp_fov(default_fov))
        self._last_drag = (0.0, 0.0)
        self._last_magnification = 1.0

    def _clamp_fov(self, fov: float) -> float:
        return max(self.min_fov, min(self.max_fov, fov))

    def _replace(self, **changes) -> None:
        with self._lock:
            current = self._state
            self._state = _ControllerState(
                tracking=changes.get("tracking", current.tracking),
                manual=changes.get("manual", current.manual),
                attitude=changes.get("attitude", current.attitude),
                heading=changes.get("heading", current.heading),
                fov=changes.get("fov", current.fov),
            )

    @property
    def is_tracking(self) -> bool:
        return self._state.tracking

    @property
    def field_of_view(self) -> float:
        return self._state.fov

    @property
    def heading(self) -> float:
        return self._state.heading

    def snapshot(self) -> OrientationState:
        """The orientation the next render or hit test should use."""
        state = self._state
        if state.tracking and state.attitude is not None:
            return state.attitude
        return state.manual

    def update_device(self, attitude: DeviceAttitude) -> None:
        """Store the latest device attitude sample."""
        self._replace(attitude=attitude)

    def update_heading(self, heading_deg: float) -> None:
        """Store the latest compass heading in degrees."""
        self._replace(heading=heading_deg)

    def drag(self, translation_x: float, translation_y: float) -> ManualOrientation:
        """
        Apply a drag gesture with cumulative translation in pixels.

        The first drag while tracking switches to manual mode, starting from
        the angles that keep the last device view centred so the view does
        not jump. Without any attitude the current manual angles are kept.
        """
        state = self._state
        manual = state.manual
        if state.tracking:
            if state.attitude is not None:
                manual = to_manual(state.attitude)
            logger.debug(
                f"Switching to manual orientation at pitch={manual.pitch:.3f} "
                f"yaw={manual.yaw:.3f}"
            )

        last_x, last_y = self._last_drag
        dx = translation_x - last_x
        dy = translation_y - last_y
        self._last_drag = (translation_x, translation_y)

        manual = ManualOrientation(
            pitch=manual.pitch + dy * self.drag_sensitivity,
            yaw=manual.yaw - dx * self.drag_sensitivity,
        )
        self._replace(tracking=False, manual=manual)
        return manual

    def set_manual(self, pitch: float = 0.0, yaw: float = 0.0) -> ManualOrientation:
        """Switch to manual mode at the given angles (radians)."""
        manual = ManualOrientation(pitch=pitch, yaw=yaw)
        self._replace(tracking=False, manual=manual)
        return manual

    def end_drag(self) -> None:
        self._last_drag = (0.0, 0.0)

    def zoom(self, magnification: float) -> float:
        """
        Apply a pinch gesture with cumulative magnification.

        Returns:
            The new field of view in degrees
        """
        if magnification <= 0:
            raise ValueError("magnification must be positive")
        delta = magnification / self._last_magnification
        self._last_magnification = magnification
        fov = self._clamp_fov(self._state.fov / delta)
        self._replace(fov=fov)
        return fov

    def end_zoom(self) -> None:
        self._last_magnification = 1.0

    def resume_tracking(self) -> None:
        """Return control to the device sensors."""
        self._replace(tracking=True)
        logger.debug("Resumed sensor tracking")
