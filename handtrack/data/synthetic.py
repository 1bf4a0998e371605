"""
Synthetic Hand Records

Builds plausible raw hand records without a sensor, for tests and demo
recordings. The hand lies palm-down with fingers pointing along +Z; the
thumb tip can be placed at a chosen distance from the index tip to script
pinch gestures.

Usage:
    from handtrack.data.synthetic import create_mock_hand_record

    record = create_mock_hand_record(sensor_id=3, pinch_distance=0.03)
"""

import numpy as np
from typing import Iterable, Optional, Sequence

from .recording import FrameRecord, FrameRecording
from ..gesture.pointer import Viewpoint
from ..hand.joints import BoneType, FingerType, Handedness
from ..hand.skeleton import BoneRecord, FingerRecord, RawHandRecord

# Lateral offset of each finger's base from the wrist (metres)
FINGER_OFFSETS = {
    FingerType.THUMB: -0.04,
    FingerType.INDEX: -0.02,
    FingerType.MIDDLE: 0.0,
    FingerType.RING: 0.02,
    FingerType.PINKY: 0.04,
}

BONE_LENGTHS = {
    BoneType.METACARPAL: 0.06,
    BoneType.PROXIMAL: 0.04,
    BoneType.INTERMEDIATE: 0.025,
    BoneType.DISTAL: 0.02,
}

IDENTITY = (0.0, 0.0, 0.0, 1.0)


def mock_tip_position(
    finger: FingerType,
    palm_position: Sequence[float] = (0.0, 0.0, 0.3)
) -> np.ndarray:
    """Where ``create_mock_hand_record`` puts the tip of an unbent finger."""
    wrist = np.asarray(palm_position, dtype=np.float64) - [0.0, 0.0, 0.05]
    return wrist + [FINGER_OFFSETS[finger], 0.0, sum(BONE_LENGTHS.values())]


def create_mock_hand_record(
    sensor_id: int = 1,
    handedness: Handedness = Handedness.RIGHT,
    palm_position: Sequence[float] = (0.0, 0.0, 0.3),
    pinch_distance: Optional[float] = None,
    fingers: Iterable[FingerType] = tuple(FingerType),
    bone_types: Iterable[BoneType] = tuple(BoneType)
) -> RawHandRecord:
    """
    Create a raw hand record.

    Args:
        sensor_id: Sensor hand ID
        handedness: Sets the left/right flags (OTHER sets neither)
        palm_position: Palm centre
        pinch_distance: If given, the thumb tip is placed this far from
            the index tip
        fingers: Fingers to include
        bone_types: Bones to include on every finger

    Returns:
        RawHandRecord
    """
    palm = np.asarray(palm_position, dtype=np.float64)
    wrist = palm - [0.0, 0.0, 0.05]
    bone_types = set(bone_types)

    finger_records = []
    for finger in fingers:
        start = wrist + [FINGER_OFFSETS[finger], 0.0, 0.0]
        bones = []
        for bone_type in BoneType:
            end = start + [0.0, 0.0, BONE_LENGTHS[bone_type]]
            if finger == FingerType.THUMB and bone_type == BoneType.DISTAL and pinch_distance is not None:
                end = mock_tip_position(FingerType.INDEX, palm) - [pinch_distance, 0.0, 0.0]
            if bone_type in bone_types:
                bones.append(BoneRecord(bone_type, IDENTITY, tuple(start), tuple(end)))
            start = end
        finger_records.append(FingerRecord(finger, tuple(bones)))

    return RawHandRecord(
        sensor_id=sensor_id,
        is_left=handedness == Handedness.LEFT,
        is_right=handedness == Handedness.RIGHT,
        palm_position=tuple(palm),
        palm_normal=(0.0, -1.0, 0.0),
        direction=(0.0, 0.0, 1.0),
        wrist_position=tuple(wrist),
        fingers=tuple(finger_records),
    )


def create_pinch_recording(
    distances: Sequence[float],
    sensor_id: int = 1,
    handedness: Handedness = Handedness.RIGHT,
    viewpoint: Optional[Viewpoint] = None
) -> FrameRecording:
    """One frame per thumb-index distance, with a single hand in view."""
    viewpoint = viewpoint or Viewpoint(position=(0.0, 0.3, 0.0))
    frames = [
        FrameRecord(
            hands=(create_mock_hand_record(sensor_id, handedness, pinch_distance=d),),
            viewpoint=viewpoint,
        )
        for d in distances
    ]
    return FrameRecording(frames=frames, metadata={'source': 'synthetic', 'distances': list(distances)})
