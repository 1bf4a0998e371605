"""Hand session tracking and event output."""

from .events import HandEventSink, NullEventSink, LoggingEventSink, HandMeshInfo
from .session import HandSession, HandSnapshot
from .registry import HandSessionRegistry
from .service import (
    HandTrackingService,
    FrameSource,
    RecordedFrameSource,
    FrameSourceUnavailableError,
)

__all__ = [
    "HandEventSink",
    "NullEventSink",
    "LoggingEventSink",
    "HandMeshInfo",
    "HandSession",
    "HandSnapshot",
    "HandSessionRegistry",
    "HandTrackingService",
    "FrameSource",
    "RecordedFrameSource",
    "FrameSourceUnavailableError",
]
