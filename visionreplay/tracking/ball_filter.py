"""
Temporal filtering of the ball position.

A constant-velocity Kalman filter over [x, y, vx, vy] turns the per-frame
stream of ball detections (or absences) into a continuous position estimate.
While the ball is not visible the filter is still corrected every frame, using
the last known position as a stale measurement with a much larger measurement
noise, so the estimate follows the predicted motion instead of snapping back.
"""

import logging
from typing import Optional

import numpy as np
from filterpy.kalman import KalmanFilter

from visionreplay.core.config import BallFilterConfig
from visionreplay.core.models import BallDetection, FilterState, Point2D, SmoothedPosition

logger = logging.getLogger(__name__)


class BallPositionFilter:
    """Predict/correct estimator of the ball position.

    Uninitialized until the first visible detection, which seeds the state
    (position = detection center, velocity = 0) without producing an output.
    From then on every call to ``update`` runs exactly one predict and one
    correct step and returns the corrected position. There is no way back to
    the uninitialized state.
    """

    def __init__(self, config: Optional[BallFilterConfig] = None):
        self.config = config or BallFilterConfig()
        self._kalman: Optional[KalmanFilter] = None
        self._last_known: Optional[Point2D] = None
        self._steps = 0

    @property
    def state(self) -> FilterState:
        if self._kalman is None:
            return FilterState.UNINITIALIZED
        return FilterState.TRACKING

    @property
    def is_tracking(self) -> bool:
        return self._kalman is not None

    @property
    def last_known_position(self) -> Optional[Point2D]:
        """Center of the most recent visible detection."""
        return self._last_known

    @property
    def estimate(self) -> Optional[Point2D]:
        """Current position estimate, or None while uninitialized."""
        if self._kalman is None:
            return None
        return (float(self._kalman.x[0]), float(self._kalman.x[1]))

    @property
    def velocity(self) -> Optional[Point2D]:
        """Current velocity estimate in pixels per frame."""
        if self._kalman is None:
            return None
        return (float(self._kalman.x[2]), float(self._kalman.x[3]))

    @property
    def covariance(self) -> Optional[np.ndarray]:
        if self._kalman is None:
            return None
        return self._kalman.P.copy()

    @property
    def steps(self) -> int:
        """Number of predict/correct steps applied since seeding."""
        return self._steps

    def _init_kalman(self, initial_pos: Point2D) -> KalmanFilter:
        """
        Initialize Kalman filter seeded at a detected position.

        State: [x, y, vx, vy] (position and velocity)
        Measurement: [x, y] (detected position)
        """
        kf = KalmanFilter(dim_x=4, dim_z=2)

        # State transition matrix (constant velocity model)
        # x' = x + vx*dt, y' = y + vy*dt
        dt = 1.0  # Frame interval (normalized)
        kf.F = np.array([
            [1, 0, dt, 0],
            [0, 1, 0, dt],
            [0, 0, 1, 0],
            [0, 0, 0, 1],
        ], dtype=float)

        # Measurement matrix (we only observe position)
        kf.H = np.array([
            [1, 0, 0, 0],
            [0, 1, 0, 0],
        ], dtype=float)

        kf.R = np.eye(2) * self.config.measurement_noise
        kf.Q = np.eye(4) * self.config.process_noise
        kf.P = np.eye(4) * self.config.initial_uncertainty

        kf.x = np.array([initial_pos[0], initial_pos[1], 0.0, 0.0])

        return kf

    def update(self, observation: Optional[BallDetection]) -> Optional[SmoothedPosition]:
        """
        Feed one frame's ball observation.

        Args:
            observation: Detected ball, or None when the ball is not visible

        Returns:
            Corrected position for this frame, or None while uninitialized and
            on the seeding frame
        """
        if self._kalman is None:
            if observation is None:
                return None
            center = (float(observation.center[0]), float(observation.center[1]))
            self._kalman = self._init_kalman(center)
            self._last_known = center
            logger.info("Ball filter seeded at (%.1f, %.1f)", center[0], center[1])
            return None

        self._kalman.predict()

        if observation is not None:
            measurement = (float(observation.center[0]), float(observation.center[1]))
            self._last_known = measurement
            noise = self.config.measurement_noise
        else:
            # Stale measurement: biases the estimate toward the last confirmed
            # location, weighted low so the prediction dominates.
            measurement = self._last_known
            noise = self.config.measurement_noise_occluded

        self._kalman.update(np.array(measurement), R=noise)
        self._steps += 1

        x, y, vx, vy = (float(v) for v in self._kalman.x)
        logger.debug(
            "Ball filter step %d: measured=%s position=(%.1f, %.1f) velocity=(%.2f, %.2f)",
            self._steps, observation is not None, x, y, vx, vy,
        )
        return SmoothedPosition(x=x, y=y, vx=vx, vy=vy, measured=observation is not None)
