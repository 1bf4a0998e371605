"""
Raw Hand Skeleton Records

Per-tick hand data as delivered by the hand sensor: a palm frame plus five
fingers, each an ordered chain of bones.

JSON shape accepted by ``RawHandRecord.from_dict``:
    {
        "id": 7, "is_left": true, "is_right": false,
        "palm_position": [x, y, z], "palm_normal": [x, y, z],
        "direction": [x, y, z], "wrist_position": [x, y, z],
        "fingers": [
            {"type": "thumb", "bones": [
                {"type": "proximal", "rotation": [x, y, z, w],
                 "start": [x, y, z], "end": [x, y, z]}, ...]},
            ...
        ]
    }

Vectors may also be ``{"x": .., "y": .., "z": ..}`` dicts and finger/bone
types may be integers or names such as ``"TYPE_DISTAL"``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple, Type, TypeVar, Union

from .joints import BoneType, FingerType, Handedness, Quaternion, Vector3

E = TypeVar('E', FingerType, BoneType)


@dataclass(frozen=True)
class BoneRecord:
    """One bone of a finger chain."""
    bone_type: BoneType
    rotation: Quaternion
    start_point: Vector3  # joint nearer the wrist
    end_point: Vector3    # joint nearer the fingertip

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BoneRecord':
        return cls(
            bone_type=_parse_enum(BoneType, data.get('type', data.get('bone_type'))),
            rotation=_parse_quaternion(data.get('rotation', (0.0, 0.0, 0.0, 1.0))),
            start_point=_parse_vector(data.get('start', data.get('start_point'))),
            end_point=_parse_vector(data.get('end', data.get('end_point'))),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.bone_type.name.lower(),
            'rotation': list(self.rotation),
            'start': list(self.start_point),
            'end': list(self.end_point),
        }


@dataclass(frozen=True)
class FingerRecord:
    """One finger: its type and bones ordered base to tip."""
    finger_type: FingerType
    bones: Tuple[BoneRecord, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FingerRecord':
        return cls(
            finger_type=_parse_enum(FingerType, data.get('type', data.get('finger_type'))),
            bones=tuple(BoneRecord.from_dict(b) for b in data.get('bones', [])),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.finger_type.name.lower(),
            'bones': [b.to_dict() for b in self.bones],
        }


@dataclass(frozen=True)
class RawHandRecord:
    """One hand as reported by the sensor for a single tick."""
    sensor_id: int
    is_left: bool
    is_right: bool
    palm_position: Vector3
    palm_normal: Vector3
    direction: Vector3
    wrist_position: Vector3
    fingers: Tuple[FingerRecord, ...] = field(default_factory=tuple)

    @property
    def handedness(self) -> Handedness:
        return Handedness.from_flags(self.is_left, self.is_right)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RawHandRecord':
        """
        Parse a JSON-shaped dict.

        Raises:
            ValueError: on missing ids, malformed vectors or unknown types
        """
        sensor_id = data.get('id', data.get('sensor_id'))
        if sensor_id is None:
            raise ValueError("Hand record has no 'id'")

        return cls(
            sensor_id=int(sensor_id),
            is_left=bool(data.get('is_left', False)),
            is_right=bool(data.get('is_right', False)),
            palm_position=_parse_vector(data.get('palm_position')),
            palm_normal=_parse_vector(data.get('palm_normal')),
            direction=_parse_vector(data.get('direction')),
            wrist_position=_parse_vector(data.get('wrist_position')),
            fingers=tuple(FingerRecord.from_dict(f) for f in data.get('fingers', [])),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.sensor_id,
            'is_left': self.is_left,
            'is_right': self.is_right,
            'palm_position': list(self.palm_position),
            'palm_normal': list(self.palm_normal),
            'direction': list(self.direction),
            'wrist_position': list(self.wrist_position),
            'fingers': [f.to_dict() for f in self.fingers],
        }


def _parse_vector(value: Union[Dict, list, tuple, None]) -> Vector3:
    """Parse [x, y, z] or {'x', 'y', 'z'} into a float triple."""
    if value is None:
        return (0.0, 0.0, 0.0)
    if isinstance(value, dict):
        return (float(value.get('x', 0)), float(value.get('y', 0)), float(value.get('z', 0)))
    if len(value) != 3:
        raise ValueError(f"Expected 3 vector components, got {len(value)}")
    return tuple(float(v) for v in value)


def _parse_quaternion(value: Union[Dict, list, tuple, None]) -> Quaternion:
    """Parse [x, y, z, w] or {'x', 'y', 'z', 'w'} into a float 4-tuple."""
    if value is None:
        return (0.0, 0.0, 0.0, 1.0)
    if isinstance(value, dict):
        return (
            float(value.get('x', 0)), float(value.get('y', 0)),
            float(value.get('z', 0)), float(value.get('w', 1))
        )
    if len(value) != 4:
        raise ValueError(f"Expected 4 quaternion components, got {len(value)}")
    return tuple(float(v) for v in value)


def _parse_enum(enum_cls: Type[E], value: Union[str, int, None]) -> E:
    """Accept enum members, integers, or names like 'distal' / 'TYPE_DISTAL'."""
    if value is None:
        raise ValueError(f"Missing {enum_cls.__name__}")
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, int):
        return enum_cls(value)

    name = str(value).upper()
    if name.startswith('TYPE_'):
        name = name[len('TYPE_'):]
    try:
        return enum_cls[name]
    except KeyError:
        raise ValueError(f"Unknown {enum_cls.__name__}: {value!r}") from None
