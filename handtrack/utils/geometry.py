"""
Vector and Quaternion Helpers

Small numpy/scipy helpers shared by the joint mapper and pointer ray code.

Conventions:
    - Y is up, Z is forward (the sensor reports in this frame).
    - Quaternions are (x, y, z, w) unit quaternions, the same order
      scipy's ``Rotation.as_quat`` uses.

Usage:
    from handtrack.utils.geometry import look_rotation

    q = look_rotation(forward=[0, 0, 1], up=[0, 1, 0])  # identity
"""

import numpy as np
from scipy.spatial.transform import Rotation
from typing import Sequence

WORLD_UP = np.array([0.0, 1.0, 0.0])
WORLD_FORWARD = np.array([0.0, 0.0, 1.0])
IDENTITY_QUATERNION = (0.0, 0.0, 0.0, 1.0)

_EPS = 1e-9


def normalize_vector(vector: Sequence[float]) -> np.ndarray:
    """Return a unit-length copy of ``vector`` (zero vectors stay zero)."""
    v = np.asarray(vector, dtype=np.float64)
    norm = np.linalg.norm(v)
    if norm < _EPS:
        return np.zeros_like(v)
    return v / norm


def look_rotation(
    forward: Sequence[float],
    up: Sequence[float] = WORLD_UP
) -> np.ndarray:
    """
    Quaternion whose local +Z axis points along ``forward`` and whose local
    +Y axis is as close to ``up`` as possible.

    Args:
        forward: Desired forward direction (need not be normalized)
        up: Desired up direction

    Returns:
        (x, y, z, w) quaternion; identity when ``forward`` is zero
    """
    z_axis = normalize_vector(forward)
    if not np.any(z_axis):
        return np.array(IDENTITY_QUATERNION)

    # Gram-Schmidt: right = up x forward, then re-derive up
    x_axis = normalize_vector(np.cross(np.asarray(up, dtype=np.float64), z_axis))
    if not np.any(x_axis):
        # up is parallel to forward, pick any perpendicular reference
        reference = WORLD_FORWARD if abs(z_axis[1]) > 0.5 else WORLD_UP
        x_axis = normalize_vector(np.cross(reference, z_axis))
    y_axis = np.cross(z_axis, x_axis)

    matrix = np.column_stack([x_axis, y_axis, z_axis])
    return Rotation.from_matrix(matrix).as_quat()


def rotate_vector(quaternion: Sequence[float], vector: Sequence[float]) -> np.ndarray:
    """Rotate ``vector`` by an (x, y, z, w) quaternion."""
    return Rotation.from_quat(np.asarray(quaternion, dtype=np.float64)).apply(
        np.asarray(vector, dtype=np.float64)
    )
