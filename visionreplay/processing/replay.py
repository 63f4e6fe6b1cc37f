"""Per-frame replay pipeline: detection, filtering, annotation and display."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

import numpy as np

from visionreplay.core.config import VisionReplayConfig, get_config
from visionreplay.core.frames import FrameSource
from visionreplay.core.models import (
    FilterState,
    FrameResult,
    NavigationSignal,
    SequenceSummary,
)
from visionreplay.core.profiler import PerformanceProfiler, get_profiler
from visionreplay.detection.pixel_classifier import DetectionCollaborator, PixelClassifier
from visionreplay.output.display import FrameDisplay, HeadlessNavigator, KeyNavigator
from visionreplay.output.overlay import OverlayRenderer
from visionreplay.processing.sequencer import FrameSequencer
from visionreplay.tracking.ball_filter import BallPositionFilter

logger = logging.getLogger(__name__)


class FrameProcessor:
    """
    Processes one frame: detect ball and goal, update the ball filter,
    annotate and show the result.

    The processor owns its ball filter, so frames must be passed in the
    order the sequencer visits them.
    """

    def __init__(
        self,
        detector: DetectionCollaborator,
        ball_filter: BallPositionFilter,
        renderer: Optional[OverlayRenderer] = None,
        display: Optional[FrameDisplay] = None,
        profiler: Optional[PerformanceProfiler] = None,
        status_callback: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize frame processor.

        Args:
            detector: Ball/goal detection collaborator
            ball_filter: Filter instance fed with every processed frame
            renderer: Overlay renderer (None = no annotation)
            display: Window display (None = headless)
            profiler: Profiler for per-stage timings (default: global profiler)
            status_callback: Receives human-readable status lines
        """
        self.detector = detector
        self.ball_filter = ball_filter
        self.renderer = renderer
        self.display = display
        self.profiler = profiler or get_profiler()
        self.status_callback = status_callback
        self.results: list[FrameResult] = []

    def process(self, frame_id: int, image: np.ndarray) -> FrameResult:
        """Process a single frame and record its result."""
        with self.profiler.time("detection", "detect", frame_id=frame_id):
            detections = self.detector.detect(image, with_mask=self.display is not None)

        was_tracking = self.ball_filter.is_tracking
        with self.profiler.time("filter", "update", frame_id=frame_id):
            smoothed = self.ball_filter.update(detections.ball)
        seeded = not was_tracking and self.ball_filter.is_tracking

        result = FrameResult(
            frame_id=frame_id,
            detections=detections,
            filter_state=self.ball_filter.state,
            smoothed=smoothed,
            seeded=seeded,
            seed=self.ball_filter.estimate if seeded else None,
        )
        self.results.append(result)

        if self.status_callback is not None:
            for line in result.status_lines():
                self.status_callback(line)

        if self.display is not None:
            with self.profiler.time("display", "show", frame_id=frame_id):
                self.display.reset_layout()
                self.display.show("Base image", image)
                self.display.show("Filtered Terrain", detections.mask)
                annotated = self.renderer.render(image, result) if self.renderer else image
                self.display.show("Result", annotated)

        return result


@dataclass
class ReplayResult:
    """Everything produced by one replay run."""

    summary: SequenceSummary
    frames: list[FrameResult] = field(default_factory=list)

    @property
    def tracking_started(self) -> bool:
        return any(f.filter_state == FilterState.TRACKING for f in self.frames)

    def to_dict(self) -> dict:
        return {
            "start": self.summary.start,
            "end": self.summary.end,
            "frames": [f.to_dict() for f in self.frames],
            "missing": list(self.summary.missing),
            "terminated": self.summary.terminated,
        }

    def to_json(self, path: Path) -> Path:
        """Write the per-frame track to a JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        return path


def replay(
    config: Optional[VisionReplayConfig] = None,
    detector: Optional[DetectionCollaborator] = None,
    navigate: Optional[Callable[[int], NavigationSignal]] = None,
    headless: bool = False,
    status_callback: Optional[Callable[[str], None]] = None,
) -> ReplayResult:
    """
    Replay the configured frame range.

    Args:
        config: Configuration (default: global config)
        detector: Detection collaborator (default: PixelClassifier)
        navigate: Navigation source (default: keyboard, or pacing-only when headless)
        headless: Do not open any window
        status_callback: Receives human-readable status lines

    Returns:
        ReplayResult with the sequence summary and per-frame results

    Raises:
        InvalidRangeError: If the configured range is invalid (before any frame is read)
    """
    config = config or get_config()
    show_windows = config.playback.show_windows and not headless

    source = FrameSource.from_config(config.frames)
    display = FrameDisplay(gap_px=config.playback.window_gap_px) if show_windows else None
    processor = FrameProcessor(
        detector=detector or PixelClassifier(config.detection),
        ball_filter=BallPositionFilter(config.ball_filter),
        renderer=OverlayRenderer(config.overlay),
        display=display,
        status_callback=status_callback,
    )
    if navigate is None:
        navigate = KeyNavigator() if show_windows else HeadlessNavigator()

    sequencer = FrameSequencer(
        start=config.frames.start_frame,
        end=config.frames.end_frame,
        resolve=source.load,
        process=processor.process,
        navigate=navigate,
        pacing_delay_ms=config.playback.pacing_delay_ms,
        frame_name=source.frame_name,
        status_callback=status_callback,
    )

    logger.info(
        "Replaying frames %d-%d from %s",
        sequencer.start, sequencer.end, config.frames.directory,
    )
    try:
        summary = sequencer.run()
    finally:
        if display is not None:
            display.close()

    return ReplayResult(summary=summary, frames=processor.results)
