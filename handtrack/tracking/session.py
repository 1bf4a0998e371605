"""
Hand Sessions

A ``HandSession`` is the registry's live, mutable slot for one physically
tracked hand. Outside the registry only ``HandSnapshot`` copies are handed
out.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional

from ..gesture.pinch import PinchDetector
from ..gesture.pointer import PointerRayCalculator
from ..hand.joints import Handedness, JointTable, JointType, Pose


@dataclass(frozen=True)
class HandSnapshot:
    """Immutable end-of-tick view of one session."""
    session_id: int
    sensor_id: int
    handedness: Handedness
    joints: Mapping[JointType, Pose]
    is_pinching: bool
    pointer_pose: Optional[Pose]
    grip_pose: Optional[Pose]
    index_pose: Optional[Pose]
    is_in_pointing_pose: bool
    last_seen_tick: int

    @property
    def select(self) -> bool:
        """Discrete select input (the pinch state)."""
        return self.is_pinching

    @property
    def trigger(self) -> bool:
        """Trigger input; mirrors select, there is no analog value."""
        return self.is_pinching


@dataclass
class HandSession:
    """Live per-hand state, mutated in place every tick it is seen."""
    session_id: int
    sensor_id: int
    handedness: Handedness
    pinch: PinchDetector
    pointer: PointerRayCalculator
    created_tick: int
    last_seen_tick: int
    joints: JointTable = field(default_factory=JointTable)
    pointer_pose: Optional[Pose] = None
    grip_pose: Optional[Pose] = None
    index_pose: Optional[Pose] = None
    is_in_pointing_pose: bool = False

    @property
    def is_pinching(self) -> bool:
        return self.pinch.is_pinching

    def snapshot(self) -> HandSnapshot:
        return HandSnapshot(
            session_id=self.session_id,
            sensor_id=self.sensor_id,
            handedness=self.handedness,
            joints=self.joints.as_mapping(),
            is_pinching=self.is_pinching,
            pointer_pose=self.pointer_pose,
            grip_pose=self.grip_pose,
            index_pose=self.index_pose,
            is_in_pointing_pose=self.is_in_pointing_pose,
            last_seen_tick=self.last_seen_tick,
        )
