"""
Joint Vocabulary & Pose Table

Canonical hand landmark names and the per-hand pose table they key.

Joint layout (per finger, base to tip):
    Thumb:  METACARPAL_JOINT, PROXIMAL_JOINT, DISTAL_JOINT, TIP
    Others: METACARPAL, KNUCKLE, MIDDLE_JOINT, DISTAL_JOINT, TIP
    Plus WRIST and PALM, and NONE for "no mapping".

Usage:
    from handtrack.hand.joints import JointTable, JointType, Pose

    table = JointTable()
    table.set(JointType.PALM, Pose((0.0, 0.1, 0.3), (0.0, 0.0, 0.0, 1.0)))
    palm = table.get(JointType.PALM)
"""

import numpy as np
from dataclasses import dataclass
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Sequence, Tuple

Vector3 = Tuple[float, float, float]
Quaternion = Tuple[float, float, float, float]


class JointType(IntEnum):
    """Canonical skeletal landmarks."""
    NONE = 0
    WRIST = 1
    PALM = 2
    THUMB_METACARPAL_JOINT = 3
    THUMB_PROXIMAL_JOINT = 4
    THUMB_DISTAL_JOINT = 5
    THUMB_TIP = 6
    INDEX_METACARPAL = 7
    INDEX_KNUCKLE = 8
    INDEX_MIDDLE_JOINT = 9
    INDEX_DISTAL_JOINT = 10
    INDEX_TIP = 11
    MIDDLE_METACARPAL = 12
    MIDDLE_KNUCKLE = 13
    MIDDLE_MIDDLE_JOINT = 14
    MIDDLE_DISTAL_JOINT = 15
    MIDDLE_TIP = 16
    RING_METACARPAL = 17
    RING_KNUCKLE = 18
    RING_MIDDLE_JOINT = 19
    RING_DISTAL_JOINT = 20
    RING_TIP = 21
    PINKY_METACARPAL = 22
    PINKY_KNUCKLE = 23
    PINKY_MIDDLE_JOINT = 24
    PINKY_DISTAL_JOINT = 25
    PINKY_TIP = 26


class FingerType(IntEnum):
    """Finger identifiers in sensor order."""
    THUMB = 0
    INDEX = 1
    MIDDLE = 2
    RING = 3
    PINKY = 4


class BoneType(IntEnum):
    """Bone identifiers, base of the hand outwards."""
    METACARPAL = 0
    PROXIMAL = 1
    INTERMEDIATE = 2
    DISTAL = 3


class Handedness(Enum):
    """Which hand a session represents."""
    LEFT = "left"
    RIGHT = "right"
    OTHER = "other"

    @classmethod
    def from_flags(cls, is_left: bool, is_right: bool) -> 'Handedness':
        """Classify from the sensor's left/right flags; neither set is OTHER."""
        if is_left:
            return cls.LEFT
        if is_right:
            return cls.RIGHT
        return cls.OTHER


@dataclass(frozen=True)
class Pose:
    """Position plus (x, y, z, w) rotation. Immutable value type."""
    position: Vector3 = (0.0, 0.0, 0.0)
    rotation: Quaternion = (0.0, 0.0, 0.0, 1.0)

    def __post_init__(self):
        position = tuple(float(p) for p in self.position)
        rotation = tuple(float(q) for q in self.rotation)
        if len(position) != 3:
            raise ValueError(f"Pose position needs 3 components, got {len(position)}")
        if len(rotation) != 4:
            raise ValueError(f"Pose rotation needs 4 components, got {len(rotation)}")
        object.__setattr__(self, 'position', position)
        object.__setattr__(self, 'rotation', rotation)

    @classmethod
    def identity(cls) -> 'Pose':
        """Pose at the origin with no rotation."""
        return cls()

    @classmethod
    def from_arrays(cls, position: Sequence[float], rotation: Sequence[float]) -> 'Pose':
        """Build a pose from numpy arrays or any float sequences."""
        return cls(tuple(position), tuple(rotation))

    @property
    def position_array(self) -> np.ndarray:
        """Position as a float64 array of shape (3,)."""
        return np.array(self.position, dtype=np.float64)

    @property
    def rotation_array(self) -> np.ndarray:
        """Rotation as a float64 array of shape (4,)."""
        return np.array(self.rotation, dtype=np.float64)

    def is_close(
        self,
        other: Optional['Pose'],
        position_tolerance: float = 1e-5,
        rotation_tolerance: float = 1e-6
    ) -> bool:
        """
        Approximate equality; q and -q count as the same rotation.

        Args:
            other: Pose to compare against (None is never close)
            position_tolerance: Max distance between positions
            rotation_tolerance: Max 1 - |dot| between the quaternions

        Returns:
            True if both position and rotation are within tolerance
        """
        if other is None:
            return False
        if np.linalg.norm(self.position_array - other.position_array) > position_tolerance:
            return False
        dot = abs(float(np.dot(self.rotation_array, other.rotation_array)))
        return 1.0 - dot <= rotation_tolerance


class JointTable:
    """
    Per-hand mapping from ``JointType`` to ``Pose``.

    Only joints that have been observed are present; ``get`` returns
    ``None`` for anything else so callers can tell "no data" from a pose
    at the origin.
    """

    def __init__(self, poses: Optional[Mapping[JointType, Pose]] = None):
        self._poses: Dict[JointType, Pose] = {}
        if poses:
            for joint, pose in poses.items():
                self.set(joint, pose)

    def set(self, joint: JointType, pose: Pose):
        """Insert or overwrite the pose of ``joint``."""
        if joint == JointType.NONE:
            return
        self._poses[JointType(joint)] = pose

    def get(self, joint: JointType) -> Optional[Pose]:
        """Pose of ``joint`` or ``None`` when it has not been observed."""
        return self._poses.get(joint)

    def items(self):
        return self._poses.items()

    def copy(self) -> 'JointTable':
        return JointTable(self._poses)

    def as_mapping(self) -> Mapping[JointType, Pose]:
        """Read-only snapshot of the current poses."""
        return MappingProxyType(dict(self._poses))

    def clear(self):
        self._poses.clear()

    def __contains__(self, joint) -> bool:
        return joint in self._poses

    def __len__(self) -> int:
        return len(self._poses)

    def __iter__(self) -> Iterator[JointType]:
        return iter(self._poses)

    def __eq__(self, other) -> bool:
        if not isinstance(other, JointTable):
            return NotImplemented
        return self._poses == other._poses

    def __repr__(self) -> str:
        names = ", ".join(joint.name for joint in sorted(self._poses))
        return f"JointTable([{names}])"
