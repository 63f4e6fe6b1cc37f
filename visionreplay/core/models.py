"""Core domain models for visionreplay."""

from dataclasses import dataclass, field
from enum import Enum

import numpy as np

Point2D = tuple[float, float]


class FilterState(str, Enum):
    """Lifecycle of the ball position filter."""

    UNINITIALIZED = "uninitialized"
    TRACKING = "tracking"


class NavigationSignal(str, Enum):
    """Outcome of the operator prompt between two frames."""

    CONTINUE = "continue"
    STEP_BACK = "step_back"
    TERMINATE = "terminate"


@dataclass(frozen=True)
class BallDetection:
    """A visible ball in one frame.

    An absent ball is represented by ``None`` wherever a
    ``BallDetection | None`` is expected.
    """

    center: Point2D
    radius: float


@dataclass(frozen=True)
class GoalDetection:
    """A visible goal marker in one frame."""

    polygon: tuple[Point2D, ...]
    centroid: Point2D


@dataclass
class Detections:
    """Everything the detection collaborator reports for one image."""

    ball: BallDetection | None = None
    goal: GoalDetection | None = None
    mask: np.ndarray | None = None

    @property
    def ball_visible(self) -> bool:
        return self.ball is not None

    @property
    def goal_visible(self) -> bool:
        return self.goal is not None


@dataclass(frozen=True)
class SmoothedPosition:
    """Corrected ball position emitted by the filter for one frame."""

    x: float
    y: float
    vx: float
    vy: float
    measured: bool

    @property
    def center(self) -> Point2D:
        """Get (x, y) as a point."""
        return (self.x, self.y)


def _fmt_point(point: Point2D) -> str:
    return f"[{point[0]:g}, {point[1]:g}]"


@dataclass
class FrameResult:
    """Outcome of processing a single frame."""

    frame_id: int
    detections: Detections
    filter_state: FilterState
    smoothed: SmoothedPosition | None = None
    seeded: bool = False
    seed: Point2D | None = None

    def status_lines(self) -> list[str]:
        """Human-readable status report for this frame."""
        lines = []
        ball = self.detections.ball
        if self.detections.ball_visible:
            lines.append(
                f"[BALL] Detected at {_fmt_point(ball.center)} of radius {ball.radius:g}"
            )
        else:
            lines.append("[BALL] Not detected")

        if self.seeded and self.seed is not None:
            lines.append(f"[TRACK] Seeded at {_fmt_point(self.seed)}")
        elif self.smoothed is not None:
            lines.append(
                f"[TRACK] Smoothed position [{self.smoothed.x:.1f}, {self.smoothed.y:.1f}]"
            )

        goal = self.detections.goal
        if self.detections.goal_visible:
            lines.append(f"[GOAL] Detected at {_fmt_point(goal.centroid)}")
        else:
            lines.append("[GOAL] Not detected")
        return lines

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        ball = self.detections.ball
        goal = self.detections.goal
        return {
            "frame_id": self.frame_id,
            "ball": (
                {"x": ball.center[0], "y": ball.center[1], "radius": ball.radius}
                if ball is not None
                else None
            ),
            "goal": (
                {"x": goal.centroid[0], "y": goal.centroid[1]}
                if goal is not None
                else None
            ),
            "smoothed": (
                {
                    "x": self.smoothed.x,
                    "y": self.smoothed.y,
                    "vx": self.smoothed.vx,
                    "vy": self.smoothed.vy,
                    "measured": self.smoothed.measured,
                }
                if self.smoothed is not None
                else None
            ),
        }


@dataclass(frozen=True)
class FrameTiming:
    """Wall-clock processing time of one frame."""

    frame_id: int
    elapsed_ms: float


@dataclass
class SequenceSummary:
    """What happened during one walk over a frame range."""

    start: int
    end: int
    processed: list[int] = field(default_factory=list)
    missing: list[int] = field(default_factory=list)
    timings: list[FrameTiming] = field(default_factory=list)
    terminated: bool = False

    @property
    def processed_count(self) -> int:
        return len(self.processed)

    @property
    def missing_count(self) -> int:
        return len(self.missing)

    @property
    def mean_elapsed_ms(self) -> float:
        """Average processing time per processed frame."""
        if not self.timings:
            return 0.0
        return sum(t.elapsed_ms for t in self.timings) / len(self.timings)

    @property
    def max_elapsed_ms(self) -> float:
        if not self.timings:
            return 0.0
        return max(t.elapsed_ms for t in self.timings)
