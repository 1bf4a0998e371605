"""Recorded and synthetic hand data."""

from .recording import FrameRecord, FrameRecording, load_recording, save_recording
from .synthetic import create_mock_hand_record, create_pinch_recording

__all__ = [
    "FrameRecord",
    "FrameRecording",
    "load_recording",
    "save_recording",
    "create_mock_hand_record",
    "create_pinch_recording",
]
