"""Core domain models and configuration."""

from visionreplay.core.models import (
    BallDetection,
    Detections,
    FilterState,
    FrameResult,
    FrameTiming,
    GoalDetection,
    NavigationSignal,
    Point2D,
    SequenceSummary,
    SmoothedPosition,
)
from visionreplay.core.config import get_config, VisionReplayConfig
from visionreplay.core.errors import (
    ConfigError,
    FrameUnavailableError,
    InvalidRangeError,
    UsageError,
    VisionReplayError,
)

__all__ = [
    "BallDetection",
    "Detections",
    "FilterState",
    "FrameResult",
    "FrameTiming",
    "GoalDetection",
    "NavigationSignal",
    "Point2D",
    "SequenceSummary",
    "SmoothedPosition",
    "get_config",
    "VisionReplayConfig",
    "ConfigError",
    "FrameUnavailableError",
    "InvalidRangeError",
    "UsageError",
    "VisionReplayError",
]
