"""Gestures and poses derived from the joint table."""

from .pinch import PinchDetector
from .pointer import (
    PointerRayCalculator,
    PointerResult,
    HandRayStabilizer,
    Ray,
    Viewpoint,
    is_in_pointing_pose,
    palm_normal_from_pose,
)

__all__ = [
    "PinchDetector",
    "PointerRayCalculator",
    "PointerResult",
    "HandRayStabilizer",
    "Ray",
    "Viewpoint",
    "is_in_pointing_pose",
    "palm_normal_from_pose",
]
