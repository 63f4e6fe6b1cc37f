"""Integration tests for the replay pipeline."""

import json
from unittest.mock import Mock

import numpy as np
import pytest

from visionreplay.core.config import FrameSourceConfig, PlaybackConfig, VisionReplayConfig
from visionreplay.core.errors import InvalidRangeError
from visionreplay.core.models import (
    BallDetection,
    Detections,
    FilterState,
    GoalDetection,
    NavigationSignal,
)
from visionreplay.core.profiler import PerformanceProfiler
from visionreplay.output.overlay import OverlayRenderer
from visionreplay.processing.replay import FrameProcessor, replay
from visionreplay.processing.sequencer import FrameSequencer
from visionreplay.tracking.ball_filter import BallPositionFilter


class ScriptedDetector:
    """Detector returning a fixed ball observation per frame id.

    Frames are told apart by their first pixel value, set by ``_frame``.
    """

    def __init__(self, balls: dict[int, BallDetection | None]):
        self.balls = balls

    def detect_ball(self, image):
        return self.balls.get(int(image[0, 0, 0]))

    def detect_goal(self, image):
        return None

    def classified_mask(self, image):
        return np.zeros_like(image)

    def detect(self, image, with_mask=True):
        return Detections(
            ball=self.detect_ball(image),
            mask=self.classified_mask(image) if with_mask else None,
        )


def _frame(frame_id: int) -> np.ndarray:
    image = np.zeros((120, 160, 3), dtype=np.uint8)
    image[0, 0, 0] = frame_id % 256
    return image


class TestEndToEndScenario:
    """Seed, missing file, then an occluded frame."""

    def test_seed_missing_occluded(self):
        detector = ScriptedDetector({100: BallDetection(center=(50.0, 60.0), radius=5.0), 102: None})
        ball_filter = BallPositionFilter()
        lines: list[str] = []
        processor = FrameProcessor(
            detector,
            ball_filter,
            profiler=PerformanceProfiler(),
            status_callback=lines.append,
        )
        frames = {100: _frame(100), 102: _frame(102)}

        sequencer = FrameSequencer(
            start=100,
            end=102,
            resolve=frames.get,
            process=processor.process,
            navigate=Mock(return_value=NavigationSignal.CONTINUE),
            status_callback=lines.append,
        )
        summary = sequencer.run()

        assert summary.processed == [100, 102]
        assert summary.missing == [101]

        seed_frame, occluded_frame = processor.results
        assert seed_frame.frame_id == 100
        assert seed_frame.seeded
        assert seed_frame.seed == (50.0, 60.0)
        assert seed_frame.smoothed is None

        assert occluded_frame.frame_id == 102
        assert occluded_frame.smoothed is not None
        assert not occluded_frame.smoothed.measured
        assert occluded_frame.smoothed.x == pytest.approx(50.0)
        assert occluded_frame.smoothed.y == pytest.approx(60.0)

        # The missing frame did not advance the filter
        assert ball_filter.steps == 1

        assert "Unable to load image" in lines
        assert "[TRACK] Seeded at [50, 60]" in lines
        assert lines[:4] == [
            ">> Processing image 100...",
            "[BALL] Detected at [50, 60] of radius 5",
            "[TRACK] Seeded at [50, 60]",
            "[GOAL] Not detected",
        ]
        missing_idx = lines.index("Unable to load image")
        assert lines[missing_idx - 1] == ">> Processing image 101..."
        assert lines[missing_idx + 1] == ">> Processing image 102..."
        assert lines[missing_idx + 2] == "[BALL] Not detected"
        assert lines[missing_idx + 3] == "[TRACK] Smoothed position [50.0, 60.0]"

    def test_invalid_range_fails_before_any_frame(self):
        resolve = Mock()
        processor = FrameProcessor(ScriptedDetector({}), BallPositionFilter())

        with pytest.raises(InvalidRangeError):
            FrameSequencer(10, 5, resolve, processor.process, Mock())

        resolve.assert_not_called()
        assert processor.results == []

    def test_step_back_feeds_filter_in_visit_order(self):
        detector = ScriptedDetector({
            0: BallDetection(center=(0.0, 0.0), radius=3.0),
            1: BallDetection(center=(10.0, 0.0), radius=3.0),
        })
        ball_filter = BallPositionFilter()
        processor = FrameProcessor(detector, ball_filter, profiler=PerformanceProfiler())
        C, B = NavigationSignal.CONTINUE, NavigationSignal.STEP_BACK

        FrameSequencer(
            0, 1, _frame, processor.process, Mock(side_effect=[C, B, C, C]),
        ).run()

        assert [r.frame_id for r in processor.results] == [0, 1, 0, 1]
        assert ball_filter.steps == 3


class TestFrameProcessor:
    """Tests for the per-frame processor."""

    def test_uninitialized_frames_have_no_estimate(self):
        processor = FrameProcessor(ScriptedDetector({}), BallPositionFilter())

        result = processor.process(1, _frame(1))

        assert result.filter_state == FilterState.UNINITIALIZED
        assert result.smoothed is None
        assert not result.seeded

    def test_display_receives_three_windows(self):
        display = Mock()
        renderer = Mock()
        renderer.render.return_value = _frame(9)
        detector = ScriptedDetector({5: BallDetection(center=(20.0, 30.0), radius=4.0)})
        processor = FrameProcessor(
            detector,
            BallPositionFilter(),
            renderer=renderer,
            display=display,
            profiler=PerformanceProfiler(),
        )

        processor.process(5, _frame(5))

        display.reset_layout.assert_called_once()
        names = [c.args[0] for c in display.show.call_args_list]
        assert names == ["Base image", "Filtered Terrain", "Result"]
        renderer.render.assert_called_once()

    def test_profiler_records_stages(self):
        profiler = PerformanceProfiler()
        processor = FrameProcessor(ScriptedDetector({}), BallPositionFilter(), profiler=profiler)

        processor.process(0, _frame(0))

        assert {(t.stage, t.operation) for t in profiler.timings} == {
            ("detection", "detect"),
            ("filter", "update"),
        }
        assert all(t.frame_id == 0 for t in profiler.timings)

    def test_overlay_renders_on_copy(self):
        renderer = OverlayRenderer(VisionReplayConfig().overlay)
        processor = FrameProcessor(
            ScriptedDetector({3: BallDetection(center=(40.0, 40.0), radius=5.0)}),
            BallPositionFilter(),
        )
        image = _frame(3)
        result = processor.process(3, image)
        result.detections = Detections(
            ball=result.detections.ball,
            goal=GoalDetection(polygon=((0, 0),), centroid=(100.0, 60.0)),
        )

        out = renderer.render(image, result)

        assert out is not image
        assert image[1:, :].sum() == 0
        assert out.sum() > 0


class TestReplayFromDisk:
    """Full replay over real image files with the color classifier."""

    def _config(self, directory, start, end) -> VisionReplayConfig:
        return VisionReplayConfig(
            frames=FrameSourceConfig(
                directory=f"{directory}/", start_frame=start, end_frame=end
            ),
            playback=PlaybackConfig(pacing_delay_ms=0, show_windows=False),
        )

    def test_headless_replay(self, frame_dir, make_frame, tmp_path):
        directory = frame_dir({
            100: make_frame(ball=(50, 60, 5), goal=(150, 20, 260, 80)),
            102: make_frame(goal=(150, 20, 260, 80)),
            103: make_frame(ball=(70, 60, 5)),
        })

        result = replay(self._config(directory, 100, 103), headless=True)

        assert result.summary.processed == [100, 102, 103]
        assert result.summary.missing == [101]
        assert result.tracking_started

        seed, occluded, visible = result.frames
        assert seed.seeded
        assert seed.detections.ball.center[0] == pytest.approx(50, abs=1.5)
        assert seed.detections.goal is not None
        assert occluded.detections.ball is None
        assert occluded.smoothed.x == pytest.approx(seed.seed[0])
        assert visible.smoothed.measured
        assert seed.seed[0] < visible.smoothed.x < 71

        output = result.to_json(tmp_path / "out" / "track.json")
        data = json.loads(output.read_text())
        assert data["missing"] == [101]
        assert [f["frame_id"] for f in data["frames"]] == [100, 102, 103]
        assert data["frames"][0]["smoothed"] is None
        assert data["frames"][1]["ball"] is None

    def test_replay_without_any_file(self, tmp_path):
        config = self._config(tmp_path / "nothing", 0, 4)
        detector = Mock()

        result = replay(config, detector=detector, headless=True)

        assert result.summary.missing == [0, 1, 2, 3, 4]
        assert result.frames == []
        detector.detect.assert_not_called()
        assert not result.tracking_started

    def test_navigator_can_terminate(self, frame_dir, make_frame):
        directory = frame_dir({i: make_frame() for i in range(3)})
        navigate = Mock(return_value=NavigationSignal.TERMINATE)

        result = replay(self._config(directory, 0, 2), navigate=navigate, headless=True)

        assert result.summary.terminated
        assert result.summary.processed == [0]

    @pytest.mark.slow
    def test_long_sequence_with_gaps(self, frame_dir, make_frame):
        frames = {
            i: make_frame(ball=(20 + 3 * i, 100, 6)) if i % 7 else make_frame()
            for i in range(80)
            if i % 11 != 5
        }
        directory = frame_dir(frames)

        result = replay(self._config(directory, 0, 79), headless=True)

        assert result.summary.processed == sorted(frames)
        xs = [f.smoothed.x for f in result.frames if f.smoothed is not None]
        assert xs == sorted(xs)
