"""Frame replay processing."""

from .replay import FrameProcessor, ReplayResult, replay
from .sequencer import FrameSequencer

__all__ = [
    "FrameProcessor",
    "FrameSequencer",
    "ReplayResult",
    "replay",
]
