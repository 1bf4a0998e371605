"""
Pointer Ray Calculator

Derives a far-field pointer ray from the palm and the observer's viewpoint,
plus the grip pose (the raw palm pose) and the index fingertip pose.

The ray itself comes from a replaceable stabilization strategy. The default,
``HandRayStabilizer``, casts from an estimated shoulder pivot through the
palm and smooths origin and direction with exponential half-life filters,
so only jitter is removed and intentional motion passes through.

Pointing-pose check:
    A hand is "pointing" unless its palm faces back towards the viewer
    (dot(palm_normal, -view_forward) > backward tolerance) or faces up
    (dot(palm_normal, world_up) > up tolerance). A negative tolerance
    disables that check.

Usage:
    from handtrack.gesture.pointer import PointerRayCalculator, Viewpoint

    calculator = PointerRayCalculator()
    result = calculator.update(joints, Viewpoint(), Handedness.RIGHT)
    if result is not None:
        pointer = result.pointer_pose
"""

import numpy as np
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Sequence

from ..hand.joints import Handedness, JointTable, JointType, Pose, Vector3
from ..utils.geometry import WORLD_FORWARD, WORLD_UP, look_rotation, normalize_vector, rotate_vector

DEFAULT_BACKWARD_TOLERANCE = 0.5
DEFAULT_UP_TOLERANCE = 0.8


@dataclass(frozen=True)
class Viewpoint:
    """Observer (camera / head) transform."""
    position: Vector3 = (0.0, 0.0, 0.0)
    forward: Vector3 = (0.0, 0.0, 1.0)
    up: Vector3 = (0.0, 1.0, 0.0)

    def __post_init__(self):
        for name in ('position', 'forward', 'up'):
            value = tuple(float(v) for v in getattr(self, name))
            if len(value) != 3:
                raise ValueError(f"Viewpoint.{name} needs 3 components, got {len(value)}")
            object.__setattr__(self, name, value)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Viewpoint':
        return cls(
            position=data.get('position', (0.0, 0.0, 0.0)),
            forward=data.get('forward', (0.0, 0.0, 1.0)),
            up=data.get('up', (0.0, 1.0, 0.0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'position': list(self.position),
            'forward': list(self.forward),
            'up': list(self.up),
        }


@dataclass(frozen=True)
class Ray:
    """Origin plus unit direction."""
    origin: Vector3
    direction: Vector3

    def __post_init__(self):
        object.__setattr__(self, 'origin', tuple(float(v) for v in self.origin))
        object.__setattr__(self, 'direction', tuple(float(v) for v in normalize_vector(self.direction)))


@dataclass(frozen=True)
class PointerResult:
    """Derived poses for one hand and one tick."""
    pointer_pose: Pose
    grip_pose: Pose
    index_pose: Optional[Pose]
    palm_normal: Vector3
    is_in_pointing_pose: bool


class RayStabilizer(Protocol):
    """Strategy turning a noisy palm measurement into a pointer ray."""

    def stabilize(
        self,
        origin: Sequence[float],
        reference_direction: Sequence[float],
        viewpoint: Viewpoint,
        handedness: Handedness
    ) -> Ray:
        ...

    def reset(self):
        ...


class HandRayStabilizer:
    """
    Shoulder-pivot hand ray with exponential smoothing.

    The pivot sits ``shoulder_drop`` below the viewpoint and
    ``shoulder_width`` to the side of the hand's own shoulder (centred for
    hands of unknown side). Each filter moves halfway to the new sample
    every ``half_life`` seconds of ``frame_interval`` steps.
    """

    def __init__(
        self,
        half_life_position: float = 0.01,
        half_life_direction: float = 0.01,
        frame_interval: float = 1.0 / 60.0,
        shoulder_drop: float = 0.15,
        shoulder_width: float = 0.15
    ):
        self.half_life_position = half_life_position
        self.half_life_direction = half_life_direction
        self.frame_interval = frame_interval
        self.shoulder_drop = shoulder_drop
        self.shoulder_width = shoulder_width

        self._origin: Optional[np.ndarray] = None
        self._direction: Optional[np.ndarray] = None

    def stabilize(
        self,
        origin: Sequence[float],
        reference_direction: Sequence[float],
        viewpoint: Viewpoint,
        handedness: Handedness
    ) -> Ray:
        """
        Add one palm sample and return the smoothed ray.

        Args:
            origin: Palm position
            reference_direction: Fallback direction (palm normal) when the
                palm coincides with the pivot
            viewpoint: Observer transform
            handedness: Hand side, selects the shoulder

        Returns:
            Smoothed ray with unit direction
        """
        origin = np.asarray(origin, dtype=np.float64)
        measured = normalize_vector(origin - self.pivot_position(viewpoint, handedness))
        if not np.any(measured):
            measured = normalize_vector(reference_direction)
        if not np.any(measured):
            measured = normalize_vector(viewpoint.forward)
        if not np.any(measured):
            measured = WORLD_FORWARD.copy()

        if self._origin is None:
            self._origin = origin
            self._direction = measured
        else:
            alpha = self._blend_factor(self.half_life_position)
            self._origin = self._origin + (origin - self._origin) * alpha

            alpha = self._blend_factor(self.half_life_direction)
            blended = normalize_vector(self._direction + (measured - self._direction) * alpha)
            # opposite directions cancel out
            self._direction = blended if np.any(blended) else measured

        return Ray(tuple(self._origin), tuple(self._direction))

    def pivot_position(self, viewpoint: Viewpoint, handedness: Handedness) -> np.ndarray:
        """Estimated shoulder position for ``handedness``."""
        forward = normalize_vector(viewpoint.forward)
        up = normalize_vector(viewpoint.up)
        right = normalize_vector(np.cross(up, forward))

        side = {Handedness.LEFT: -1.0, Handedness.RIGHT: 1.0}.get(handedness, 0.0)
        return (
            np.asarray(viewpoint.position, dtype=np.float64)
            - up * self.shoulder_drop
            + right * side * self.shoulder_width
        )

    def reset(self):
        self._origin = None
        self._direction = None

    def _blend_factor(self, half_life: float) -> float:
        if half_life <= 0:
            return 1.0
        return 1.0 - 0.5 ** (self.frame_interval / half_life)


def palm_normal_from_pose(palm: Pose) -> np.ndarray:
    """Palm normal of a palm pose: its negated local up axis."""
    return -rotate_vector(palm.rotation, WORLD_UP)


def is_in_pointing_pose(
    palm_normal: Sequence[float],
    view_forward: Sequence[float],
    backward_tolerance: float = DEFAULT_BACKWARD_TOLERANCE,
    up_tolerance: float = DEFAULT_UP_TOLERANCE
) -> bool:
    """
    Whether the palm is oriented for far pointing.

    Args:
        palm_normal: Palm normal (any length)
        view_forward: Observer forward direction (any length)
        backward_tolerance: Max cosine between palm normal and the
            direction back towards the viewer; negative disables
        up_tolerance: Max cosine between palm normal and world up;
            negative disables

    Returns:
        False if either enabled check is exceeded
    """
    normal = normalize_vector(palm_normal)

    if backward_tolerance >= 0:
        view_backward = -normalize_vector(view_forward)
        if float(np.dot(normal, view_backward)) > backward_tolerance:
            return False

    if up_tolerance >= 0:
        if float(np.dot(normal, WORLD_UP)) > up_tolerance:
            return False

    return True


class PointerRayCalculator:
    """
    Per-hand pointer, grip and index poses.

    Owns one stabilizer, so one calculator belongs to one hand session.
    """

    def __init__(
        self,
        stabilizer: Optional[RayStabilizer] = None,
        backward_tolerance: float = DEFAULT_BACKWARD_TOLERANCE,
        up_tolerance: float = DEFAULT_UP_TOLERANCE
    ):
        self.stabilizer = stabilizer or HandRayStabilizer()
        self.backward_tolerance = backward_tolerance
        self.up_tolerance = up_tolerance

    def update(
        self,
        joints: JointTable,
        viewpoint: Viewpoint,
        handedness: Handedness
    ) -> Optional[PointerResult]:
        """
        Refresh the derived poses for one tick.

        Returns:
            ``None`` when the palm is unavailable (absent, or at the origin
            which the sensor reports for "no position"); the stabilizer is
            not fed in that case.
        """
        palm = joints.get(JointType.PALM)
        if palm is None or not np.any(palm.position_array):
            return None

        palm_normal = palm_normal_from_pose(palm)
        ray = self.stabilizer.stabilize(palm.position, palm_normal, viewpoint, handedness)

        pointer_pose = Pose(ray.origin, tuple(look_rotation(ray.direction)))

        return PointerResult(
            pointer_pose=pointer_pose,
            grip_pose=palm,
            index_pose=joints.get(JointType.INDEX_TIP),
            palm_normal=tuple(float(v) for v in palm_normal),
            is_in_pointing_pose=is_in_pointing_pose(
                palm_normal,
                viewpoint.forward,
                self.backward_tolerance,
                self.up_tolerance
            ),
        )

    def reset(self):
        self.stabilizer.reset()
