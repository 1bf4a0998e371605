"""Hand skeleton data model and joint mapping."""

from .joints import JointType, FingerType, BoneType, Handedness, Pose, JointTable
from .skeleton import RawHandRecord, FingerRecord, BoneRecord
from .joint_mapper import SkeletalJointMapper

__all__ = [
    "JointType",
    "FingerType",
    "BoneType",
    "Handedness",
    "Pose",
    "JointTable",
    "RawHandRecord",
    "FingerRecord",
    "BoneRecord",
    "SkeletalJointMapper",
]
