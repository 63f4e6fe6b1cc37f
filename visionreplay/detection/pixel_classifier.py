"""Color-based pixel classification and ball/goal detection."""

import logging
from enum import IntEnum
from typing import Optional, Protocol

import cv2
import numpy as np

from visionreplay.core.config import DetectionConfig, get_config
from visionreplay.core.models import BallDetection, Detections, GoalDetection

logger = logging.getLogger(__name__)


class PixelClass(IntEnum):
    """Terrain classes assigned to each pixel."""

    UNKNOWN = 0
    FIELD = 1
    LINE = 2
    BALL = 3
    GOAL = 4


# Display colors (BGR) for the classified mask
CLASS_COLORS: dict[PixelClass, tuple[int, int, int]] = {
    PixelClass.UNKNOWN: (0, 0, 0),
    PixelClass.FIELD: (0, 128, 0),
    PixelClass.LINE: (255, 255, 255),
    PixelClass.BALL: (0, 128, 255),
    PixelClass.GOAL: (0, 255, 255),
}


class DetectionCollaborator(Protocol):
    """Anything that can find the ball and the goal in an image."""

    def detect_ball(self, image: np.ndarray) -> Optional[BallDetection]: ...

    def detect_goal(self, image: np.ndarray) -> Optional[GoalDetection]: ...

    def classified_mask(self, image: np.ndarray) -> np.ndarray: ...

    def detect(self, image: np.ndarray, with_mask: bool = True) -> Detections: ...


class PixelClassifier:
    """
    Classifies pixels by HSV thresholds and extracts ball and goal shapes.

    Classes are assigned in increasing priority (field, line, goal, ball), so
    a pixel matching several ranges ends up in the most specific class.
    Each public call classifies the image it is given; ``detect`` classifies
    once and derives the ball, the goal and the mask from the same labels.
    """

    def __init__(self, config: Optional[DetectionConfig] = None):
        self.config = config or get_config().detection
        self._kernel = np.ones((self.config.morph_kernel, self.config.morph_kernel), np.uint8)

    def _range_mask(
        self,
        hsv: np.ndarray,
        lower: tuple[int, int, int],
        upper: tuple[int, int, int],
    ) -> np.ndarray:
        return cv2.inRange(hsv, np.array(lower, np.uint8), np.array(upper, np.uint8))

    def classify(self, image: np.ndarray) -> np.ndarray:
        """
        Label every pixel with a PixelClass.

        Args:
            image: BGR image

        Returns:
            uint8 array of the image's height and width holding PixelClass values
        """
        hsv = cv2.cvtColor(image, cv2.COLOR_BGR2HSV)
        cfg = self.config
        labels = np.full(image.shape[:2], PixelClass.UNKNOWN, dtype=np.uint8)

        for pixel_class, lower, upper in (
            (PixelClass.FIELD, cfg.field_lower, cfg.field_upper),
            (PixelClass.LINE, cfg.line_lower, cfg.line_upper),
            (PixelClass.GOAL, cfg.goal_lower, cfg.goal_upper),
            (PixelClass.BALL, cfg.ball_lower, cfg.ball_upper),
        ):
            labels[self._range_mask(hsv, lower, upper) > 0] = pixel_class

        return labels

    def _class_mask(self, labels: np.ndarray, pixel_class: PixelClass) -> np.ndarray:
        """Binary (0/255) mask of one class, cleaned with a morphological opening."""
        mask = np.where(labels == pixel_class, 255, 0).astype(np.uint8)
        return cv2.morphologyEx(mask, cv2.MORPH_OPEN, self._kernel)

    def _paint(self, labels: np.ndarray) -> np.ndarray:
        out = np.zeros((*labels.shape, 3), dtype=np.uint8)
        for pixel_class, color in CLASS_COLORS.items():
            out[labels == pixel_class] = color
        return out

    def _find_ball(self, labels: np.ndarray) -> Optional[BallDetection]:
        mask = self._class_mask(labels, PixelClass.BALL)
        contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

        best: Optional[BallDetection] = None
        best_area = 0.0
        for contour in contours:
            area = cv2.contourArea(contour)
            if area <= best_area:
                continue

            ((x, y), radius) = cv2.minEnclosingCircle(contour)
            if not (self.config.min_ball_radius <= radius <= self.config.max_ball_radius):
                continue

            best = BallDetection(center=(float(x), float(y)), radius=float(radius))
            best_area = area

        return best

    def _find_goal(self, labels: np.ndarray) -> Optional[GoalDetection]:
        mask = self._class_mask(labels, PixelClass.GOAL)
        contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
        if not contours:
            return None

        contour = max(contours, key=cv2.contourArea)
        if cv2.contourArea(contour) < self.config.min_goal_area:
            return None

        moments = cv2.moments(contour)
        if moments["m00"] == 0:
            return None
        centroid = (moments["m10"] / moments["m00"], moments["m01"] / moments["m00"])

        epsilon = self.config.goal_approx_epsilon * cv2.arcLength(contour, True)
        approx = cv2.approxPolyDP(contour, epsilon, True)
        polygon = tuple((float(p[0][0]), float(p[0][1])) for p in approx)

        return GoalDetection(polygon=polygon, centroid=(float(centroid[0]), float(centroid[1])))

    def classified_mask(self, image: np.ndarray) -> np.ndarray:
        """Color visualization of the pixel classes (display only)."""
        return self._paint(self.classify(image))

    def detect_ball(self, image: np.ndarray) -> Optional[BallDetection]:
        """
        Find the ball as the largest ball-colored blob of plausible size.

        Returns:
            BallDetection, or None if no blob qualifies
        """
        return self._find_ball(self.classify(image))

    def detect_goal(self, image: np.ndarray) -> Optional[GoalDetection]:
        """
        Find the goal as the largest goal-colored region.

        The region outline is simplified to a polygon and its centroid is taken
        from the image moments.

        Returns:
            GoalDetection, or None if no region is large enough
        """
        return self._find_goal(self.classify(image))

    def detect(self, image: np.ndarray, with_mask: bool = True) -> Detections:
        """
        Detect ball and goal from a single classification of the image.

        Args:
            image: BGR image
            with_mask: Also paint the classified mask (only needed for display)
        """
        labels = self.classify(image)
        return Detections(
            ball=self._find_ball(labels),
            goal=self._find_goal(labels),
            mask=self._paint(labels) if with_mask else None,
        )
