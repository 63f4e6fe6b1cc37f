"""Annotation of replayed frames with detections and the filtered ball position."""

from typing import Optional

import cv2
import numpy as np

from visionreplay.core.config import OverlayConfig, get_config
from visionreplay.core.models import FrameResult


class OverlayRenderer:
    """
    Draws detection results on a copy of the frame.

    Features:
    - Raw ball detection as a large red ring
    - Filtered ball position as a small green ring
    - Goal centroid as a filled blue disc
    """

    def __init__(self, style: Optional[OverlayConfig] = None):
        """
        Initialize overlay renderer.

        Args:
            style: Visual style configuration (defaults to the global config)
        """
        self.style = style or get_config().overlay

    def draw_ball(self, frame: np.ndarray, x: float, y: float, radius: float) -> np.ndarray:
        """Draw the raw ball detection (modifies frame in place)."""
        cv2.circle(
            frame,
            (int(x), int(y)),
            int(radius) * self.style.raw_ball_scale,
            self.style.raw_ball_color,
            self.style.thickness,
            cv2.LINE_8,
        )
        return frame

    def draw_smoothed(self, frame: np.ndarray, x: float, y: float) -> np.ndarray:
        """Draw the filtered ball position (modifies frame in place)."""
        cv2.circle(
            frame,
            (int(round(x)), int(round(y))),
            self.style.smoothed_radius,
            self.style.smoothed_color,
            self.style.thickness,
            cv2.LINE_8,
        )
        return frame

    def draw_goal(self, frame: np.ndarray, x: float, y: float) -> np.ndarray:
        """Draw the goal centroid (modifies frame in place)."""
        cv2.circle(
            frame,
            (int(x), int(y)),
            self.style.goal_radius,
            self.style.goal_color,
            self.style.goal_thickness,
            cv2.LINE_8,
        )
        return frame

    def render(self, frame: np.ndarray, result: FrameResult) -> np.ndarray:
        """
        Render all overlays for one processed frame.

        Args:
            frame: Source image (left untouched)
            result: Processing result of that frame

        Returns:
            Annotated copy of the frame
        """
        out = frame.copy()

        ball = result.detections.ball
        if ball is not None:
            self.draw_ball(out, ball.center[0], ball.center[1], ball.radius)

        if result.smoothed is not None:
            self.draw_smoothed(out, result.smoothed.x, result.smoothed.y)

        goal = result.detections.goal
        if goal is not None:
            self.draw_goal(out, goal.centroid[0], goal.centroid[1])

        return out
