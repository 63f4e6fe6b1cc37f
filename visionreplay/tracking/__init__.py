"""Ball tracking module for visionreplay."""

from .ball_filter import BallPositionFilter

__all__ = [
    "BallPositionFilter",
]
