"""Tests for hand session tracking and the service lifecycle."""

import dataclasses
import pytest
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from handtrack.data.recording import FrameRecord, FrameRecording
from handtrack.data.synthetic import create_mock_hand_record, create_pinch_recording
from handtrack.gesture.pointer import Viewpoint
from handtrack.hand.joints import FingerType, Handedness, JointType
from handtrack.tracking.events import HandMeshInfo, LoggingEventSink
from handtrack.tracking.registry import HandSessionRegistry
from handtrack.tracking.service import (
    FrameSourceUnavailableError,
    HandTrackingService,
    RecordedFrameSource,
)
from handtrack.utils.config import Config


class RecordingSink:
    """Event sink that keeps every call as (name, args)."""

    def __init__(self):
        self.events = []

    def _record(self, name, *args):
        self.events.append((name,) + args)

    def on_hand_detected(self, session_id, handedness):
        self._record('detected', session_id, handedness)

    def on_hand_lost(self, session_id, handedness):
        self._record('lost', session_id, handedness)

    def on_joints_updated(self, session_id, handedness, joints):
        self._record('joints', session_id, len(joints))

    def on_pose_changed(self, session_id, grip_pose):
        self._record('pose', session_id, grip_pose)

    def on_pointer_changed(self, session_id, handedness, pointer_pose):
        self._record('pointer', session_id, pointer_pose)

    def on_index_pose_changed(self, session_id, handedness, index_pose):
        self._record('index', session_id, index_pose)

    def on_select_changed(self, session_id, is_pinching):
        self._record('select', session_id, is_pinching)

    def on_hand_mesh_updated(self, session_id, handedness, mesh):
        self._record('mesh', session_id, mesh)

    def named(self, *names):
        return [e for e in self.events if e[0] in names]

    def clear(self):
        self.events.clear()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def registry(sink):
    return HandSessionRegistry(sink=sink)


class TestSessionLifecycle:
    """Tests for detection, loss and identity of sessions."""

    def test_detect_once(self, registry, sink):
        for _ in range(3):
            registry.on_frame([create_mock_hand_record(sensor_id=5)])

        assert len(sink.named('detected')) == 1
        assert len(registry) == 1
        assert 5 in registry

    def test_lost_and_redetected(self, registry, sink):
        """Present on ticks 1-3, absent on 4, back on 5."""
        hand = create_mock_hand_record(sensor_id=5)

        for _ in range(3):
            registry.on_frame([hand])
        first_id = registry.snapshots[0].session_id

        registry.on_frame([])
        assert registry.snapshots == ()

        registry.on_frame([hand])
        second_id = registry.snapshots[0].session_id

        assert len(sink.named('detected')) == 2
        assert sink.named('lost') == [('lost', first_id, Handedness.RIGHT)]
        assert second_id != first_id

    def test_reclassification_replaces_session(self, registry, sink):
        """Same sensor ID with a new handedness is lost + detected."""
        registry.on_frame([create_mock_hand_record(sensor_id=5, handedness=Handedness.LEFT)])
        old_id = registry.snapshots[0].session_id
        sink.clear()

        registry.on_frame([create_mock_hand_record(sensor_id=5, handedness=Handedness.RIGHT)])
        new_id = registry.snapshots[0].session_id

        lifecycle = sink.named('detected', 'lost')
        assert lifecycle == [
            ('lost', old_id, Handedness.LEFT),
            ('detected', new_id, Handedness.RIGHT),
        ]
        assert len(registry) == 1

    def test_other_handedness(self, registry, sink):
        registry.on_frame([create_mock_hand_record(sensor_id=2, handedness=Handedness.OTHER)])

        snapshot = registry.snapshots[0]
        assert snapshot.handedness == Handedness.OTHER
        assert sink.named('detected')[0][2] == Handedness.OTHER

    def test_two_hands(self, registry):
        snapshots = registry.on_frame([
            create_mock_hand_record(sensor_id=1, handedness=Handedness.LEFT),
            create_mock_hand_record(sensor_id=2, handedness=Handedness.RIGHT),
        ])

        assert {s.handedness for s in snapshots} == {Handedness.LEFT, Handedness.RIGHT}
        assert len({s.session_id for s in snapshots}) == 2

    def test_get_snapshot(self, registry):
        registry.on_frame([create_mock_hand_record(sensor_id=4)])
        session_id = registry.snapshots[0].session_id

        assert registry.get_snapshot(session_id).sensor_id == 4
        assert registry.get_snapshot(session_id + 100) is None

    def test_duplicate_sensor_id_in_frame(self, registry, sink):
        """The last record for a repeated ID wins."""
        snapshots = registry.on_frame([
            create_mock_hand_record(sensor_id=3, palm_position=(0.0, 0.0, 0.3)),
            create_mock_hand_record(sensor_id=3, palm_position=(0.0, 0.0, 0.6)),
        ])

        assert len(snapshots) == 1
        assert snapshots[0].grip_pose.position == pytest.approx((0.0, 0.0, 0.6))
        assert len(sink.named('detected')) == 1

    def test_remove_is_idempotent(self, registry, sink):
        registry.on_frame([create_mock_hand_record(sensor_id=5)])

        assert registry.remove(5) is True
        assert registry.remove(5) is False
        assert registry.remove(99) is False
        assert len(sink.named('lost')) == 1
        assert registry.snapshots == ()

    def test_flush(self, registry, sink):
        registry.on_frame([
            create_mock_hand_record(sensor_id=1, handedness=Handedness.LEFT),
            create_mock_hand_record(sensor_id=2),
        ])

        registry.flush()

        assert len(registry) == 0
        assert len(sink.named('lost')) == 2

    def test_tick_counter(self, registry):
        registry.on_frame([create_mock_hand_record()])
        registry.on_frame([create_mock_hand_record()])

        assert registry.tick == 2
        assert registry.snapshots[0].last_seen_tick == 2


class TestSessionUpdates:
    """Tests for per-tick joint, pose and select notifications."""

    def test_joints_every_tick(self, registry, sink):
        hand = create_mock_hand_record()
        for _ in range(4):
            registry.on_frame([hand])

        assert [e[2] for e in sink.named('joints')] == [26] * 4

    def test_unchanged_hand_emits_nothing_else(self, registry, sink):
        """A still hand only reports its joints after the first tick."""
        hand = create_mock_hand_record()
        registry.on_frame([hand])
        sink.clear()

        registry.on_frame([hand])

        assert sink.named('detected', 'lost', 'pose', 'pointer', 'index', 'select') == []

    def test_grip_pose_change(self, registry, sink):
        registry.on_frame([create_mock_hand_record(palm_position=(0.0, 0.0, 0.3))])
        registry.on_frame([create_mock_hand_record(palm_position=(0.0, 0.0, 0.35))])

        poses = sink.named('pose')
        assert len(poses) == 2
        assert poses[-1][2].position == pytest.approx((0.0, 0.0, 0.35))
        assert registry.snapshots[0].grip_pose == poses[-1][2]

    def test_small_rotation_updates_grip(self, registry, sink):
        """A 0.3 degree turn of the hand still refreshes the grip pose."""
        hand = create_mock_hand_record()
        angle = np.radians(0.3)
        turned = dataclasses.replace(hand, direction=(np.sin(angle), 0.0, np.cos(angle)))

        registry.on_frame([hand])
        registry.on_frame([turned])

        snapshot = registry.snapshots[0]
        assert snapshot.grip_pose == snapshot.joints[JointType.PALM]
        assert snapshot.grip_pose.rotation != (0.0, 0.0, 0.0, 1.0)
        assert len(sink.named('pose')) == 2

    def test_grip_is_raw_palm_without_event(self, registry, sink):
        """Sub-tolerance jitter updates the stored pose but emits nothing."""
        registry.on_frame([create_mock_hand_record(palm_position=(0.0, 0.0, 0.3))])
        sink.clear()

        registry.on_frame([create_mock_hand_record(palm_position=(0.0, 0.0, 0.300001))])

        snapshot = registry.snapshots[0]
        assert snapshot.grip_pose == snapshot.joints[JointType.PALM]
        assert snapshot.grip_pose.position[2] == pytest.approx(0.300001)
        assert sink.named('pose') == []

    def test_index_pose_change(self, registry, sink):
        registry.on_frame([create_mock_hand_record(palm_position=(0.0, 0.0, 0.3))])
        registry.on_frame([create_mock_hand_record(palm_position=(0.0, 0.0, 0.3))])
        registry.on_frame([create_mock_hand_record(palm_position=(0.0, 0.0, 0.4))])

        indexes = sink.named('index')
        assert len(indexes) == 2
        assert indexes[-1][2] == registry.snapshots[0].joints[JointType.INDEX_TIP]

    def test_missing_index_tip_emits_nothing(self, registry, sink):
        registry.on_frame([create_mock_hand_record(fingers=[FingerType.THUMB])])

        assert registry.snapshots[0].index_pose is None
        assert sink.named('index') == []

    def test_invalid_config_fails_at_setup(self, sink):
        config = Config()
        config.gesture.start_pinch_distance = 0.06

        with pytest.raises(ValueError):
            HandSessionRegistry(sink=sink, config=config)

    def test_select_follows_pinch(self, registry, sink):
        for d in [0.08, 0.03, 0.045, 0.06, 0.03]:
            registry.on_frame([create_mock_hand_record(pinch_distance=d)])

        assert [e[2] for e in sink.named('select')] == [True, False, True]

        snapshot = registry.snapshots[0]
        assert snapshot.is_pinching is True
        assert snapshot.select is True
        assert snapshot.trigger is True

    def test_index_pose(self, registry):
        registry.on_frame([create_mock_hand_record()])

        snapshot = registry.snapshots[0]
        assert snapshot.index_pose == snapshot.joints[JointType.INDEX_TIP]
        assert snapshot.is_in_pointing_pose is True

    def test_palm_at_origin_has_no_pointer(self, registry, sink):
        registry.on_frame([create_mock_hand_record(palm_position=(0.0, 0.0, 0.0))])

        snapshot = registry.snapshots[0]
        assert snapshot.pointer_pose is None
        assert snapshot.grip_pose is None
        assert snapshot.is_in_pointing_pose is False
        assert sink.named('pose', 'pointer', 'index') == []

    def test_viewpoint_is_kept(self, registry):
        viewpoint = Viewpoint(position=(0.0, 1.6, 0.0))
        registry.on_frame([create_mock_hand_record()], viewpoint)
        registry.on_frame([create_mock_hand_record()])

        assert registry.viewpoint == viewpoint

    def test_snapshot_is_detached(self, registry):
        """Snapshots taken earlier are not changed by later ticks."""
        registry.on_frame([create_mock_hand_record(palm_position=(0.0, 0.0, 0.3))])
        before = registry.snapshots[0]

        registry.on_frame([create_mock_hand_record(palm_position=(0.0, 0.0, 0.5))])

        assert before.joints[JointType.PALM].position == pytest.approx((0.0, 0.0, 0.3))


class TestHandMesh:
    """Tests for mesh relaying."""

    def test_empty_mesh(self):
        assert HandMeshInfo.from_arrays([]) is None

    def test_relay(self, registry, sink):
        registry.on_frame([create_mock_hand_record(sensor_id=9)])
        mesh = HandMeshInfo.from_arrays([[0, 0, 0], [1, 0, 0], [0, 1, 0]], triangles=[0, 1, 2])

        registry.update_hand_mesh(9, mesh)

        meshes = sink.named('mesh')
        assert len(meshes) == 1
        assert meshes[0][2] is mesh

    def test_unknown_or_missing_mesh(self, registry, sink):
        registry.on_frame([create_mock_hand_record(sensor_id=9)])

        registry.update_hand_mesh(9, None)
        registry.update_hand_mesh(10, HandMeshInfo.from_arrays([[0, 0, 0]]))

        assert sink.named('mesh') == []


class TestHandTrackingService:
    """Tests for HandTrackingService enable/disable."""

    def test_enable_without_source(self, sink):
        service = HandTrackingService(sink=sink)

        with pytest.raises(FrameSourceUnavailableError):
            service.enable()

        assert service.enabled is False
        assert sink.events == []

    def test_replay(self, sink):
        recording = create_pinch_recording([0.08, 0.03, 0.03, 0.08])
        source = RecordedFrameSource(recording)
        service = HandTrackingService(sink=sink, frame_source=source)

        service.enable()
        assert source.subscriber_count == 1

        frames = source.play()

        assert frames == 4
        assert service.registry.tick == 4
        assert [e[2] for e in sink.named('select')] == [True, False]

        service.disable()

        assert source.subscriber_count == 0
        assert len(service.registry) == 0
        assert len(sink.named('lost')) == 1

    def test_enable_twice_subscribes_once(self):
        source = RecordedFrameSource(FrameRecording(frames=[]))
        service = HandTrackingService(frame_source=source)

        service.enable()
        service.enable()

        assert source.subscriber_count == 1

    def test_play_max_frames(self):
        recording = FrameRecording(frames=[
            FrameRecord(hands=(create_mock_hand_record(),)) for _ in range(5)
        ])
        source = RecordedFrameSource(recording)
        service = HandTrackingService(frame_source=source)
        service.enable()

        assert source.play(max_frames=2) == 2
        assert service.registry.tick == 2

    def test_logging_sink_counts(self):
        sink = LoggingEventSink("test.events")
        source = RecordedFrameSource(create_pinch_recording([0.08, 0.03]))
        service = HandTrackingService(sink=sink, frame_source=source)

        service.enable()
        source.play()
        service.disable()

        assert sink.counts['hand_detected'] == 1
        assert sink.counts['hand_lost'] == 1
        assert sink.counts['joints_updated'] == 2
        assert sink.counts['select_changed'] == 1
        assert sink.counts['index_pose_changed'] == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
