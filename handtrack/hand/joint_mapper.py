"""
Skeletal Joint Mapper

Converts one hand's bone chains into the canonical joint table.

Each bone contributes the pose of the joint at its *start* point. Distal
bones additionally contribute the fingertip, taken from their *end* point.
The thumb has no metacarpal-level joint of its own, so its table is shifted
one level: its proximal bone starts at THUMB_METACARPAL_JOINT.

Usage:
    from handtrack.hand.joint_mapper import SkeletalJointMapper

    mapper = SkeletalJointMapper()
    mapper.update(record, session_joints)
"""

from typing import Dict

from .joints import BoneType, FingerType, JointTable, JointType, Pose
from .skeleton import BoneRecord, RawHandRecord
from ..utils.geometry import look_rotation


def _finger_table(metacarpal, knuckle, middle, distal) -> Dict[BoneType, JointType]:
    return {
        BoneType.METACARPAL: metacarpal,
        BoneType.PROXIMAL: knuckle,
        BoneType.INTERMEDIATE: middle,
        BoneType.DISTAL: distal,
    }


BONE_TO_JOINT: Dict[FingerType, Dict[BoneType, JointType]] = {
    FingerType.THUMB: _finger_table(
        JointType.NONE,
        JointType.THUMB_METACARPAL_JOINT,
        JointType.THUMB_PROXIMAL_JOINT,
        JointType.THUMB_DISTAL_JOINT,
    ),
    FingerType.INDEX: _finger_table(
        JointType.INDEX_METACARPAL,
        JointType.INDEX_KNUCKLE,
        JointType.INDEX_MIDDLE_JOINT,
        JointType.INDEX_DISTAL_JOINT,
    ),
    FingerType.MIDDLE: _finger_table(
        JointType.MIDDLE_METACARPAL,
        JointType.MIDDLE_KNUCKLE,
        JointType.MIDDLE_MIDDLE_JOINT,
        JointType.MIDDLE_DISTAL_JOINT,
    ),
    FingerType.RING: _finger_table(
        JointType.RING_METACARPAL,
        JointType.RING_KNUCKLE,
        JointType.RING_MIDDLE_JOINT,
        JointType.RING_DISTAL_JOINT,
    ),
    FingerType.PINKY: _finger_table(
        JointType.PINKY_METACARPAL,
        JointType.PINKY_KNUCKLE,
        JointType.PINKY_MIDDLE_JOINT,
        JointType.PINKY_DISTAL_JOINT,
    ),
}

FINGER_TO_TIP: Dict[FingerType, JointType] = {
    FingerType.THUMB: JointType.THUMB_TIP,
    FingerType.INDEX: JointType.INDEX_TIP,
    FingerType.MIDDLE: JointType.MIDDLE_TIP,
    FingerType.RING: JointType.RING_TIP,
    FingerType.PINKY: JointType.PINKY_TIP,
}


class SkeletalJointMapper:
    """
    Maps raw bone chains onto a ``JointTable``.

    The mapper is stateless; the table it writes into belongs to the
    caller (one per hand session). Joints whose bones are missing from a
    record are left untouched, so a table may hold poses from an earlier
    frame for bones the sensor stopped reporting.
    """

    @staticmethod
    def map_bone(finger_type: FingerType, bone_type: BoneType) -> JointType:
        """Joint at the start of ``bone_type`` on ``finger_type`` (or NONE)."""
        return BONE_TO_JOINT.get(finger_type, {}).get(bone_type, JointType.NONE)

    @staticmethod
    def tip_joint(finger_type: FingerType) -> JointType:
        """Fingertip joint of ``finger_type`` (or NONE)."""
        return FINGER_TO_TIP.get(finger_type, JointType.NONE)

    def update(self, record: RawHandRecord, joints: JointTable) -> JointTable:
        """
        Write every joint observed in ``record`` into ``joints``.

        Args:
            record: Raw sensor hand record
            joints: Table to update in place

        Returns:
            The same ``joints`` table, for chaining
        """
        for finger in record.fingers:
            for bone in finger.bones:
                self._update_bone(finger.finger_type, bone, joints)

        palm_rotation = tuple(look_rotation(
            forward=record.direction,
            up=[-c for c in record.palm_normal]
        ))
        joints.set(JointType.PALM, Pose(record.palm_position, palm_rotation))
        joints.set(JointType.WRIST, Pose(record.wrist_position, palm_rotation))

        return joints

    def map_record(self, record: RawHandRecord) -> JointTable:
        """Map ``record`` into a fresh table."""
        return self.update(record, JointTable())

    def _update_bone(self, finger_type: FingerType, bone: BoneRecord, joints: JointTable):
        joint = self.map_bone(finger_type, bone.bone_type)
        if joint == JointType.NONE:
            return

        joints.set(joint, Pose(bone.start_point, bone.rotation))

        if bone.bone_type == BoneType.DISTAL:
            tip = self.tip_joint(finger_type)
            if tip != JointType.NONE:
                joints.set(tip, Pose(bone.end_point, bone.rotation))
