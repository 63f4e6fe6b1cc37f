"""Display and annotation for visionreplay."""

from .display import FrameDisplay, HeadlessNavigator, KeyNavigator, signal_for_key
from .overlay import OverlayRenderer

__all__ = [
    "FrameDisplay",
    "HeadlessNavigator",
    "KeyNavigator",
    "OverlayRenderer",
    "signal_for_key",
]
