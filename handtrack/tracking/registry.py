"""
Hand Session Registry

Reconciles the sensor's per-frame hand IDs with long-lived hand sessions.

Per tick:
    1. For every hand record: reuse the session with the same sensor ID and
       handedness, or replace it (lost + detected) when the handedness
       changed, or create a new one (detected).
    2. Map joints, update the pinch state and the pointer/grip poses.
    3. Remove sessions whose sensor ID is missing from the frame (lost).

The sensor may hand a freed ID to a different physical hand; a handedness
change on the same ID is therefore treated as a new hand, never as a
silent update.

Usage:
    from handtrack.tracking.registry import HandSessionRegistry

    registry = HandSessionRegistry(sink=my_sink)
    snapshots = registry.on_frame(records, viewpoint)
"""

import itertools
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .events import HandEventSink, HandMeshInfo, NullEventSink
from .session import HandSession, HandSnapshot
from ..gesture.pinch import PinchDetector
from ..gesture.pointer import HandRayStabilizer, PointerRayCalculator, RayStabilizer, Viewpoint
from ..hand.joint_mapper import SkeletalJointMapper
from ..hand.skeleton import RawHandRecord
from ..utils.config import Config
from ..utils.logging_utils import get_logger

logger = get_logger(__name__)


class HandSessionRegistry:
    """
    Owner of all live hand sessions.

    Every session object stays inside the registry; callers get
    ``HandSnapshot`` copies taken at the end of each tick.
    """

    def __init__(
        self,
        sink: Optional[HandEventSink] = None,
        config: Optional[Config] = None,
        stabilizer_factory: Optional[Callable[[], RayStabilizer]] = None
    ):
        """
        Args:
            sink: Event receiver; defaults to a no-op sink
            config: Thresholds and ray settings; defaults to ``Config()``
            stabilizer_factory: Builds one ray stabilizer per new session
        """
        self.sink = sink if sink is not None else NullEventSink()
        self.config = (config or Config()).validate()
        self.stabilizer_factory = stabilizer_factory or self._default_stabilizer
        self.mapper = SkeletalJointMapper()
        self.viewpoint = Viewpoint()

        self.tick = 0
        self._sessions: Dict[int, HandSession] = {}
        self._session_ids = itertools.count(1)
        self._snapshots: Tuple[HandSnapshot, ...] = ()

    @property
    def snapshots(self) -> Tuple[HandSnapshot, ...]:
        """Snapshots of all sessions as of the last completed tick."""
        return self._snapshots

    def active_sessions(self) -> List[HandSnapshot]:
        return list(self._snapshots)

    def get_snapshot(self, session_id: int) -> Optional[HandSnapshot]:
        for snapshot in self._snapshots:
            if snapshot.session_id == session_id:
                return snapshot
        return None

    def on_frame(
        self,
        hands: Iterable[RawHandRecord],
        viewpoint: Optional[Viewpoint] = None
    ) -> List[HandSnapshot]:
        """
        Process one sensor frame.

        Args:
            hands: Raw hand records of this tick
            viewpoint: Observer transform for this tick; the previous one
                is kept when omitted

        Returns:
            Snapshots of every session alive after this tick
        """
        self.tick += 1
        if viewpoint is not None:
            self.viewpoint = viewpoint

        seen = set()
        for record in hands:
            if record.sensor_id in seen:
                logger.warning(
                    f"Sensor hand {record.sensor_id} reported twice in tick {self.tick}, "
                    f"using the last record"
                )
            seen.add(record.sensor_id)

            session = self._get_or_add(record)
            self._update_session(session, record)

        for sensor_id in [sid for sid in self._sessions if sid not in seen]:
            self.remove(sensor_id)

        self._snapshots = tuple(s.snapshot() for s in self._sessions.values())
        logger.debug(f"Tick {self.tick}: {len(self._snapshots)} active hand(s)")

        return list(self._snapshots)

    def update_hand_mesh(self, sensor_id: int, mesh: Optional[HandMeshInfo]):
        """Relay a baked mesh for the session tracking ``sensor_id``."""
        session = self._sessions.get(sensor_id)
        if session is None or mesh is None:
            return
        self.sink.on_hand_mesh_updated(session.session_id, session.handedness, mesh)

    def remove(self, sensor_id: int) -> bool:
        """
        Remove the session for ``sensor_id`` and emit its lost event.

        Returns:
            False if there was no such session (nothing is emitted)
        """
        session = self._sessions.pop(sensor_id, None)
        if session is None:
            return False

        self._snapshots = tuple(s for s in self._snapshots if s.session_id != session.session_id)
        logger.info(
            f"Hand session {session.session_id} lost "
            f"(sensor id {sensor_id}, {session.handedness.value})"
        )
        self.sink.on_hand_lost(session.session_id, session.handedness)
        return True

    def flush(self):
        """Remove every session, emitting one lost event each."""
        for sensor_id in list(self._sessions):
            self.remove(sensor_id)

    def _get_or_add(self, record: RawHandRecord) -> HandSession:
        handedness = record.handedness
        existing = self._sessions.get(record.sensor_id)

        if existing is not None:
            if existing.handedness == handedness:
                return existing
            logger.info(
                f"Sensor hand {record.sensor_id} changed from {existing.handedness.value} "
                f"to {handedness.value}; replacing session {existing.session_id}"
            )
            self.remove(record.sensor_id)

        pointer_cfg = self.config.pointer
        session = HandSession(
            session_id=next(self._session_ids),
            sensor_id=record.sensor_id,
            handedness=handedness,
            pinch=PinchDetector(
                start_distance=self.config.gesture.start_pinch_distance,
                stop_distance=self.config.gesture.stop_pinch_distance
            ),
            pointer=PointerRayCalculator(
                stabilizer=self.stabilizer_factory(),
                backward_tolerance=pointer_cfg.backward_tolerance_cosine,
                up_tolerance=pointer_cfg.up_tolerance_cosine
            ),
            created_tick=self.tick,
            last_seen_tick=self.tick,
        )
        self._sessions[record.sensor_id] = session

        logger.info(
            f"Hand session {session.session_id} detected "
            f"(sensor id {record.sensor_id}, {handedness.value})"
        )
        self.sink.on_hand_detected(session.session_id, handedness)
        return session

    def _update_session(self, session: HandSession, record: RawHandRecord):
        session.last_seen_tick = self.tick

        self.mapper.update(record, session.joints)
        self.sink.on_joints_updated(session.session_id, session.handedness, session.joints.as_mapping())

        was_pinching = session.is_pinching
        is_pinching = session.pinch.update(session.joints)

        result = session.pointer.update(session.joints, self.viewpoint, session.handedness)
        if result is None:
            session.is_in_pointing_pose = False
        else:
            grip_changed = not result.grip_pose.is_close(session.grip_pose)
            pointer_changed = not result.pointer_pose.is_close(session.pointer_pose)
            index_changed = (
                result.index_pose is not None
                and not result.index_pose.is_close(session.index_pose)
            )

            # stored raw every tick, only the events are gated
            session.grip_pose = result.grip_pose
            session.pointer_pose = result.pointer_pose
            session.index_pose = result.index_pose

            if grip_changed:
                self.sink.on_pose_changed(session.session_id, result.grip_pose)
            if pointer_changed:
                self.sink.on_pointer_changed(session.session_id, session.handedness, result.pointer_pose)
            if index_changed:
                self.sink.on_index_pose_changed(session.session_id, session.handedness, result.index_pose)

            session.is_in_pointing_pose = result.is_in_pointing_pose

        if is_pinching != was_pinching:
            self.sink.on_select_changed(session.session_id, is_pinching)

    def _default_stabilizer(self) -> RayStabilizer:
        cfg = self.config.pointer
        return HandRayStabilizer(
            half_life_position=cfg.half_life_position,
            half_life_direction=cfg.half_life_direction,
            frame_interval=cfg.frame_interval,
            shoulder_drop=cfg.shoulder_drop,
            shoulder_width=cfg.shoulder_width
        )

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, sensor_id) -> bool:
        return sensor_id in self._sessions
