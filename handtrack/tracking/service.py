"""
Hand Tracking Service

Connects a push-style frame source to a ``HandSessionRegistry``.

``enable()`` subscribes the registry to the source; without a source it
fails immediately with ``FrameSourceUnavailableError`` and no ticks are
processed. Retrying is left to the caller. ``disable()`` unsubscribes and
reports every remaining hand as lost.

Usage:
    from handtrack.tracking.service import HandTrackingService, RecordedFrameSource

    source = RecordedFrameSource(load_recording("session.json"))
    service = HandTrackingService(config, sink, frame_source=source)
    service.enable()
    source.play()
    service.disable()
"""

from typing import Callable, List, Optional, Protocol, Sequence

from .events import HandEventSink
from .registry import HandSessionRegistry
from ..data.recording import FrameRecording
from ..gesture.pointer import Viewpoint
from ..hand.skeleton import RawHandRecord
from ..utils.config import Config
from ..utils.logging_utils import get_logger

logger = get_logger(__name__)

FrameCallback = Callable[[Sequence[RawHandRecord], Optional[Viewpoint]], object]


class FrameSourceUnavailableError(RuntimeError):
    """Raised when the service is enabled without a frame source."""


class FrameSource(Protocol):
    """Pushes one list of hand records per sensor tick to subscribers."""

    def subscribe(self, callback: FrameCallback):
        ...

    def unsubscribe(self, callback: FrameCallback):
        ...


class RecordedFrameSource:
    """Frame source replaying a ``FrameRecording``."""

    def __init__(self, recording: FrameRecording):
        self.recording = recording
        self._callbacks: List[FrameCallback] = []

    def subscribe(self, callback: FrameCallback):
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unsubscribe(self, callback: FrameCallback):
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks)

    def play(self, max_frames: Optional[int] = None, progress=None) -> int:
        """
        Push recorded frames to all subscribers, one tick at a time.

        Args:
            max_frames: Stop after this many frames (None = all)
            progress: Optional tqdm-like object updated once per frame

        Returns:
            Number of frames pushed
        """
        frames = self.recording.frames
        if max_frames is not None:
            frames = frames[:max_frames]

        pushed = 0
        for frame in frames:
            for callback in list(self._callbacks):
                callback(frame.hands, frame.viewpoint)
            pushed += 1
            if progress is not None:
                progress.update(1)

        return pushed


class HandTrackingService:
    """
    Lifecycle wrapper around the session registry.

    Attributes:
        registry: The registry receiving frames while enabled
        frame_source: Source of per-tick hand records (may be set later)
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        sink: Optional[HandEventSink] = None,
        frame_source: Optional[FrameSource] = None
    ):
        self.config = config or Config()
        self.registry = HandSessionRegistry(sink=sink, config=self.config)
        self.frame_source = frame_source
        self._enabled = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self):
        """
        Start receiving frames.

        Raises:
            FrameSourceUnavailableError: if no frame source is configured
        """
        if self._enabled:
            return

        if self.frame_source is None:
            logger.error("Hand frame source not found")
            raise FrameSourceUnavailableError("Hand frame source not found")

        self.frame_source.subscribe(self.registry.on_frame)
        self._enabled = True
        logger.info("Hand tracking enabled")

    def disable(self):
        """Stop receiving frames and report all hands as lost."""
        if not self._enabled:
            return

        self.frame_source.unsubscribe(self.registry.on_frame)
        self._enabled = False
        self.registry.flush()
        logger.info("Hand tracking disabled")
