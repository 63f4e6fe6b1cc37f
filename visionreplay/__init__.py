"""visionreplay - Robot vision log replay with a filtered ball track."""

__version__ = "0.1.0"

# Core exports for library usage
from visionreplay.core.config import VisionReplayConfig, get_config
from visionreplay.core.models import BallDetection, GoalDetection, NavigationSignal
from visionreplay.processing.replay import FrameProcessor, replay
from visionreplay.processing.sequencer import FrameSequencer
from visionreplay.tracking.ball_filter import BallPositionFilter

__all__ = [
    "BallDetection",
    "BallPositionFilter",
    "FrameProcessor",
    "FrameSequencer",
    "GoalDetection",
    "NavigationSignal",
    "VisionReplayConfig",
    "get_config",
    "replay",
]
