"""Ball and goal detection for visionreplay."""

from .pixel_classifier import DetectionCollaborator, PixelClass, PixelClassifier

__all__ = [
    "DetectionCollaborator",
    "PixelClass",
    "PixelClassifier",
]
