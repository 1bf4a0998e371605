"""
Hand Tracking Replay

Main entry point for replaying a recorded hand session through the tracking
pipeline (sessions, joints, pinch, pointer) and summarising the events.

Usage:
    python -m handtrack.pipeline --config configs/default.yaml --input recording.json
"""

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from tqdm import tqdm

from .data.recording import FrameRecording, load_recording
from .hand.joints import Pose
from .tracking.events import LoggingEventSink
from .tracking.service import HandTrackingService, RecordedFrameSource
from .tracking.session import HandSnapshot
from .utils.config import Config, load_config
from .utils.logging_utils import setup_logging, get_logger

logger = get_logger(__name__)


class ReplayPipeline:
    """
    Replays a recording through a ``HandTrackingService``.

    Stages:
    1. Load recording
    2. Push every frame through the session registry
    3. Flush remaining hands and collect event counts
    """

    def __init__(self, config: Config):
        """
        Initialize pipeline with configuration.

        Args:
            config: Configuration object
        """
        self.config = config
        self.sink = LoggingEventSink("handtrack.events")

        logger.info("Pipeline initialized")

    def run(
        self,
        recording: FrameRecording,
        max_frames: Optional[int] = None,
        show_progress: bool = True
    ) -> Dict[str, Any]:
        """
        Replay ``recording`` and return a summary.

        Args:
            recording: Frames to replay
            max_frames: Stop after this many frames (None = all)
            show_progress: Show a tqdm progress bar

        Returns:
            Summary dict with frame count, event counts and the snapshots
            alive at the last frame
        """
        source = RecordedFrameSource(recording)
        service = HandTrackingService(self.config, self.sink, frame_source=source)

        total = len(recording) if max_frames is None else min(len(recording), max_frames)

        service.enable()
        with tqdm(total=total, desc="Replaying", disable=not show_progress) as progress:
            frames = source.play(max_frames=max_frames, progress=progress)
        final_snapshots = [snapshot_to_dict(s) for s in service.registry.snapshots]
        service.disable()

        logger.info(f"Replayed {frames} frames")
        for kind, count in sorted(self.sink.counts.items()):
            logger.info(f"  {kind}: {count}")

        return {
            'frames': frames,
            'events': dict(self.sink.counts),
            'final_snapshots': final_snapshots,
        }


def _pose_to_dict(pose: Optional[Pose]) -> Optional[Dict[str, Any]]:
    if pose is None:
        return None
    return {'position': list(pose.position), 'rotation': list(pose.rotation)}


def snapshot_to_dict(snapshot: HandSnapshot) -> Dict[str, Any]:
    """JSON-friendly form of a snapshot."""
    return {
        'session_id': snapshot.session_id,
        'sensor_id': snapshot.sensor_id,
        'handedness': snapshot.handedness.value,
        'is_pinching': snapshot.is_pinching,
        'is_in_pointing_pose': snapshot.is_in_pointing_pose,
        'pointer_pose': _pose_to_dict(snapshot.pointer_pose),
        'grip_pose': _pose_to_dict(snapshot.grip_pose),
        'index_pose': _pose_to_dict(snapshot.index_pose),
        'joints': {joint.name: _pose_to_dict(pose) for joint, pose in snapshot.joints.items()},
        'last_seen_tick': snapshot.last_seen_tick,
    }


def main():
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="Replay a recorded hand tracking session"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Configuration file (defaults are used when omitted)"
    )
    parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="Recording JSON file"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Optional path for a JSON summary"
    )
    parser.add_argument(
        "--max_frames",
        type=int,
        default=None,
        help="Maximum frames to replay"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Verbose output"
    )

    args = parser.parse_args()

    config = load_config(args.config) if args.config else Config()
    level = logging.DEBUG if args.verbose else config.logging.level
    setup_logging(level=level, log_file=config.logging.log_file, use_tqdm=True)

    logger.info("Hand Tracking Replay")
    logger.info(f"Config: {args.config or 'defaults'}")

    recording = load_recording(args.input)
    pipeline = ReplayPipeline(config)
    summary = pipeline.run(recording, max_frames=args.max_frames)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w') as f:
            json.dump(summary, f, indent=2)
        logger.info(f"Summary saved to: {output_path}")


if __name__ == "__main__":
    main()
