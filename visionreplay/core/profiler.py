"""Per-stage timing of the replay pipeline."""

import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Generator, Optional

from visionreplay.core.models import SequenceSummary


@dataclass(frozen=True)
class StageTiming:
    """Time spent in one pipeline stage while processing one frame."""

    frame_id: Optional[int]
    stage: str
    operation: str
    elapsed_ms: float

    @property
    def key(self) -> str:
        return f"{self.stage}.{self.operation}"


class PerformanceProfiler:
    """Collects stage timings attributed to frame ids.

    The sequencer measures each frame as a whole; the profiler splits that
    time into stages (detection, filter, display), so the report can show
    where the slowest frames spent their time.

    Usage:
        profiler = PerformanceProfiler()

        with profiler.time("detection", "detect", frame_id=120):
            detections = detector.detect(image)

        report = profiler.report(summary)
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self._timings: list[StageTiming] = []
        self._enabled = True

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        """Disable profiling (timed blocks run untimed)."""
        self._enabled = False

    def clear(self) -> None:
        self._timings.clear()

    @contextmanager
    def time(
        self, stage: str, operation: str, frame_id: Optional[int] = None
    ) -> Generator[None, None, None]:
        """Time the enclosed block as one stage of a frame."""
        if not self._enabled:
            yield
            return

        started = self._clock()
        try:
            yield
        finally:
            elapsed_ms = (self._clock() - started) * 1000.0
            self._timings.append(StageTiming(frame_id, stage, operation, elapsed_ms))

    @property
    def timings(self) -> list[StageTiming]:
        return list(self._timings)

    def frame_breakdown(self, frame_id: int) -> dict[str, float]:
        """Milliseconds per stage for one frame, summed over all its visits."""
        breakdown: dict[str, float] = defaultdict(float)
        for timing in self._timings:
            if timing.frame_id == frame_id:
                breakdown[timing.key] += timing.elapsed_ms
        return dict(breakdown)

    def _stage_rows(self) -> list[dict[str, Any]]:
        by_key: dict[tuple[str, str], list[float]] = defaultdict(list)
        for timing in self._timings:
            by_key[(timing.stage, timing.operation)].append(timing.elapsed_ms)

        total_ms = sum(t.elapsed_ms for t in self._timings)
        rows = [
            {
                "stage": stage,
                "operation": operation,
                "count": len(values),
                "total_ms": sum(values),
                "mean_ms": sum(values) / len(values),
                "max_ms": max(values),
                "share": 100.0 * sum(values) / total_ms if total_ms > 0 else 0.0,
            }
            for (stage, operation), values in by_key.items()
        ]
        return sorted(rows, key=lambda row: row["total_ms"], reverse=True)

    def _slowest_frames(
        self, summary: Optional[SequenceSummary], limit: int
    ) -> list[dict[str, Any]]:
        # Frame totals come from the sequencer when available; a frame
        # revisited with step back keeps its slowest visit.
        totals: dict[int, float] = {}
        visits: dict[int, int] = defaultdict(int)
        if summary is not None:
            for frame_timing in summary.timings:
                visits[frame_timing.frame_id] += 1
                totals[frame_timing.frame_id] = max(
                    totals.get(frame_timing.frame_id, 0.0), frame_timing.elapsed_ms
                )
        else:
            for timing in self._timings:
                if timing.frame_id is not None:
                    totals[timing.frame_id] = totals.get(timing.frame_id, 0.0) + timing.elapsed_ms

        slowest = sorted(totals.items(), key=lambda item: item[1], reverse=True)[:limit]
        frames = []
        for frame_id, elapsed_ms in slowest:
            count = visits.get(frame_id) or 1
            stages = {
                key: value / count for key, value in self.frame_breakdown(frame_id).items()
            }
            frames.append({"frame_id": frame_id, "elapsed_ms": elapsed_ms, "stages": stages})
        return frames

    def report(
        self, summary: Optional[SequenceSummary] = None, slowest: int = 5
    ) -> dict[str, Any]:
        """Summarize stage timings, merged with the sequence summary if given.

        Returns:
            Dict with keys:
            - "stages": per stage/operation rows (count, total/mean/max ms,
              share of the profiled time in percent), slowest first
            - "profiled_ms": total time inside timed blocks
            - "frames": number of processed frames
            - "mean_frame_ms" / "max_frame_ms": per-frame processing time
            - "slowest_frames": frame id, processing time and per-stage
              breakdown of the slowest frames
        """
        profiled_ms = sum(t.elapsed_ms for t in self._timings)
        if summary is not None:
            frames = summary.processed_count
            mean_frame_ms = summary.mean_elapsed_ms
            max_frame_ms = summary.max_elapsed_ms
        else:
            frame_ids = {t.frame_id for t in self._timings if t.frame_id is not None}
            frames = len(frame_ids)
            mean_frame_ms = profiled_ms / frames if frames else 0.0
            max_frame_ms = max(
                (sum(self.frame_breakdown(f).values()) for f in frame_ids), default=0.0
            )

        return {
            "stages": self._stage_rows(),
            "profiled_ms": profiled_ms,
            "frames": frames,
            "mean_frame_ms": mean_frame_ms,
            "max_frame_ms": max_frame_ms,
            "slowest_frames": self._slowest_frames(summary, slowest),
        }


# Global profiler instance (disabled by default)
_global_profiler: Optional[PerformanceProfiler] = None


def get_profiler() -> PerformanceProfiler:
    """Get or create the global profiler instance."""
    global _global_profiler
    if _global_profiler is None:
        _global_profiler = PerformanceProfiler()
        _global_profiler.disable()
    return _global_profiler


def enable_profiling() -> PerformanceProfiler:
    """Enable the global profiler and return it, cleared."""
    profiler = get_profiler()
    profiler.enable()
    profiler.clear()
    return profiler
