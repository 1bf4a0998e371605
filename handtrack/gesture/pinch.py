"""
Pinch Gesture Detector

Thumb-tip / index-tip distance with two thresholds. A pinch starts once the
tips come closer than ``start_distance`` and only ends once they separate by
more than ``stop_distance``; distances in between keep the previous state.

Usage:
    from handtrack.gesture.pinch import PinchDetector

    detector = PinchDetector()
    is_pinching = detector.update(joints)
"""

import numpy as np
from typing import Optional

from ..hand.joints import JointTable, JointType

DEFAULT_START_PINCH_DISTANCE = 0.04
DEFAULT_STOP_PINCH_DISTANCE = 0.05


class PinchDetector:
    """Per-hand hysteresis state machine for the pinch (select) gesture."""

    def __init__(
        self,
        start_distance: float = DEFAULT_START_PINCH_DISTANCE,
        stop_distance: float = DEFAULT_STOP_PINCH_DISTANCE
    ):
        """
        Args:
            start_distance: Tip distance below which a pinch starts
            stop_distance: Tip distance above which a pinch ends
        """
        if start_distance > stop_distance:
            raise ValueError(
                f"start_distance ({start_distance}) must not exceed "
                f"stop_distance ({stop_distance})"
            )
        self.start_distance = start_distance
        self.stop_distance = stop_distance
        self.is_pinching = False

    def update(self, joints: JointTable) -> bool:
        """
        Evaluate one tick against the hand's joint table.

        Without both THUMB_TIP and INDEX_TIP there is no gesture, so the
        state is forced to not-pinching.
        """
        thumb_tip = joints.get(JointType.THUMB_TIP)
        index_tip = joints.get(JointType.INDEX_TIP)

        if thumb_tip is None or index_tip is None:
            self.is_pinching = False
            return self.is_pinching

        distance = float(np.linalg.norm(thumb_tip.position_array - index_tip.position_array))
        return self.update_distance(distance)

    def update_distance(self, distance: Optional[float]) -> bool:
        """Advance the state machine with a raw tip distance (None = no data)."""
        if distance is None:
            self.is_pinching = False
        elif self.is_pinching and distance > self.stop_distance:
            self.is_pinching = False
        elif not self.is_pinching and distance < self.start_distance:
            self.is_pinching = True

        return self.is_pinching

    def reset(self):
        self.is_pinching = False
