"""
Frame Recording Loader

Loads and saves recorded sensor ticks so a session can be replayed offline.

JSON format:
    {
        "metadata": {...},
        "frames": [
            {"viewpoint": {"position": [..], "forward": [..], "up": [..]},
             "hands": [<hand record>, ...]},
            ...
        ]
    }

A bare list of frames is accepted as well. See
``handtrack.hand.skeleton`` for the hand record layout.

Usage:
    from handtrack.data.recording import load_recording

    recording = load_recording("session.json")
    for frame in recording:
        registry.on_frame(frame.hands, frame.viewpoint)
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from ..gesture.pointer import Viewpoint
from ..hand.skeleton import RawHandRecord
from ..utils.logging_utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FrameRecord:
    """One recorded sensor tick."""
    hands: Tuple[RawHandRecord, ...] = ()
    viewpoint: Optional[Viewpoint] = None

    @classmethod
    def from_dict(cls, data: Union[Dict[str, Any], List]) -> 'FrameRecord':
        if isinstance(data, list):
            # frame given as just its hands
            return cls(hands=tuple(RawHandRecord.from_dict(h) for h in data))

        viewpoint = data.get('viewpoint')
        return cls(
            hands=tuple(RawHandRecord.from_dict(h) for h in data.get('hands', [])),
            viewpoint=Viewpoint.from_dict(viewpoint) if viewpoint else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {'hands': [h.to_dict() for h in self.hands]}
        if self.viewpoint is not None:
            data['viewpoint'] = self.viewpoint.to_dict()
        return data


@dataclass
class FrameRecording:
    """Ordered sequence of recorded ticks."""
    frames: List[FrameRecord] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Union[Dict[str, Any], List]) -> 'FrameRecording':
        if isinstance(data, list):
            return cls(frames=[FrameRecord.from_dict(f) for f in data])
        return cls(
            frames=[FrameRecord.from_dict(f) for f in data.get('frames', [])],
            metadata=dict(data.get('metadata', {})),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'metadata': self.metadata,
            'frames': [f.to_dict() for f in self.frames],
        }

    def __len__(self) -> int:
        return len(self.frames)

    def __getitem__(self, idx: int) -> FrameRecord:
        return self.frames[idx]

    def __iter__(self) -> Iterator[FrameRecord]:
        return iter(self.frames)


def load_recording(path: Union[str, Path]) -> FrameRecording:
    """
    Load a recording from a JSON file.

    Args:
        path: Path to JSON file

    Returns:
        FrameRecording with parsed hand records

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError: if a hand record is malformed
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Recording not found: {path}")

    with open(path, 'r') as f:
        data = json.load(f)

    recording = FrameRecording.from_dict(data)
    logger.info(f"Loaded {len(recording)} frames from {path}")
    return recording


def save_recording(recording: FrameRecording, path: Union[str, Path]):
    """Write ``recording`` as JSON, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w') as f:
        json.dump(recording.to_dict(), f)
