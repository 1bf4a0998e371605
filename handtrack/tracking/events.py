"""
Hand Event Sinks

The registry reports session lifecycle and per-tick updates through a sink
object it always calls. Hosts implement ``HandEventSink``; ``NullEventSink``
ignores everything and ``LoggingEventSink`` logs and counts events.

Also holds ``HandMeshInfo``, the opaque mesh payload relayed from the
rendering side.
"""

import numpy as np
from collections import Counter
from dataclasses import dataclass
from typing import Mapping, Optional, Protocol, Sequence

from ..hand.joints import Handedness, JointType, Pose, Quaternion, Vector3
from ..utils.logging_utils import get_logger


@dataclass(frozen=True, eq=False)
class HandMeshInfo:
    """Baked hand mesh, forwarded without interpretation."""
    vertices: np.ndarray
    normals: np.ndarray
    triangles: np.ndarray
    uvs: np.ndarray
    position: Vector3 = (0.0, 0.0, 0.0)
    rotation: Quaternion = (0.0, 0.0, 0.0, 1.0)

    @classmethod
    def from_arrays(
        cls,
        vertices: Sequence,
        normals: Sequence = (),
        triangles: Sequence = (),
        uvs: Sequence = ()
    ) -> Optional['HandMeshInfo']:
        """Wrap raw mesh arrays; ``None`` when there are no vertices."""
        vertices = np.asarray(vertices, dtype=np.float32)
        if vertices.size == 0:
            return None
        return cls(
            vertices=vertices,
            normals=np.asarray(normals, dtype=np.float32),
            triangles=np.asarray(triangles, dtype=np.int32),
            uvs=np.asarray(uvs, dtype=np.float32),
        )


class HandEventSink(Protocol):
    """Receiver of hand session notifications."""

    def on_hand_detected(self, session_id: int, handedness: Handedness):
        ...

    def on_hand_lost(self, session_id: int, handedness: Handedness):
        ...

    def on_joints_updated(
        self,
        session_id: int,
        handedness: Handedness,
        joints: Mapping[JointType, Pose]
    ):
        ...

    def on_pose_changed(self, session_id: int, grip_pose: Pose):
        ...

    def on_pointer_changed(self, session_id: int, handedness: Handedness, pointer_pose: Pose):
        ...

    def on_index_pose_changed(self, session_id: int, handedness: Handedness, index_pose: Pose):
        ...

    def on_select_changed(self, session_id: int, is_pinching: bool):
        ...

    def on_hand_mesh_updated(self, session_id: int, handedness: Handedness, mesh: HandMeshInfo):
        ...


class NullEventSink:
    """Sink that drops every event."""

    def on_hand_detected(self, session_id, handedness):
        pass

    def on_hand_lost(self, session_id, handedness):
        pass

    def on_joints_updated(self, session_id, handedness, joints):
        pass

    def on_pose_changed(self, session_id, grip_pose):
        pass

    def on_pointer_changed(self, session_id, handedness, pointer_pose):
        pass

    def on_index_pose_changed(self, session_id, handedness, index_pose):
        pass

    def on_select_changed(self, session_id, is_pinching):
        pass

    def on_hand_mesh_updated(self, session_id, handedness, mesh):
        pass


class LoggingEventSink:
    """
    Logs every event and keeps per-kind counts.

    Lifecycle and select changes go to INFO, per-tick updates to DEBUG.
    """

    def __init__(self, name: str = __name__):
        self.logger = get_logger(name)
        self.counts: Counter = Counter()

    def on_hand_detected(self, session_id, handedness):
        self.counts['hand_detected'] += 1
        self.logger.info(f"Hand detected: session {session_id} ({handedness.value})")

    def on_hand_lost(self, session_id, handedness):
        self.counts['hand_lost'] += 1
        self.logger.info(f"Hand lost: session {session_id} ({handedness.value})")

    def on_joints_updated(self, session_id, handedness, joints):
        self.counts['joints_updated'] += 1
        self.logger.debug(f"Session {session_id}: {len(joints)} joints")

    def on_pose_changed(self, session_id, grip_pose):
        self.counts['pose_changed'] += 1
        self.logger.debug(f"Session {session_id}: grip at {grip_pose.position}")

    def on_pointer_changed(self, session_id, handedness, pointer_pose):
        self.counts['pointer_changed'] += 1
        self.logger.debug(f"Session {session_id}: pointer at {pointer_pose.position}")

    def on_index_pose_changed(self, session_id, handedness, index_pose):
        self.counts['index_pose_changed'] += 1
        self.logger.debug(f"Session {session_id}: index tip at {index_pose.position}")

    def on_select_changed(self, session_id, is_pinching):
        self.counts['select_changed'] += 1
        state = "down" if is_pinching else "up"
        self.logger.info(f"Session {session_id}: select {state}")

    def on_hand_mesh_updated(self, session_id, handedness, mesh):
        self.counts['hand_mesh_updated'] += 1
        self.logger.debug(f"Session {session_id}: mesh with {len(mesh.vertices)} vertices")
