"""Interactive walk over a closed range of frame ids."""

import logging
import time
from typing import Callable, Optional

import numpy as np

from visionreplay.core.errors import FrameUnavailableError, InvalidRangeError
from visionreplay.core.models import FrameTiming, NavigationSignal, SequenceSummary

logger = logging.getLogger(__name__)

FrameResolver = Callable[[int], Optional[np.ndarray]]
FrameCallback = Callable[[int, np.ndarray], object]
Navigator = Callable[[int], NavigationSignal]


class FrameSequencer:
    """
    Drives a cursor over ``[start, end]``, one frame at a time.

    For every cursor position the frame is resolved; a frame that cannot be
    resolved is reported and skipped (the cursor always moves forward by one).
    A resolved frame is handed to the processing callback, timed, and then the
    navigator is asked what to do next:

    - CONTINUE moves to the next frame
    - STEP_BACK moves to the previous frame, unless the cursor is already at
      ``start``, in which case the navigator is simply asked again
    - TERMINATE ends the walk

    The walk ends normally once the cursor moves past ``end``.
    """

    def __init__(
        self,
        start: int,
        end: int,
        resolve: FrameResolver,
        process: FrameCallback,
        navigate: Navigator,
        pacing_delay_ms: int = 1000,
        frame_name: Optional[Callable[[int], str]] = None,
        status_callback: Optional[Callable[[str], None]] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        """
        Initialize sequencer.

        Args:
            start: First frame id (inclusive)
            end: Last frame id (inclusive)
            resolve: Returns the image of a frame id, or None if unavailable
            process: Per-frame processing callback
            navigate: Waits up to the pacing delay and returns the next signal
            pacing_delay_ms: Delay passed to the navigator between frames
            frame_name: Formats a frame id for status messages
            status_callback: Receives human-readable status lines
            clock: Time source in seconds

        Raises:
            InvalidRangeError: If a bound is negative or start > end
        """
        if start < 0 or end < 0 or start > end:
            raise InvalidRangeError(start, end)

        self.start = start
        self.end = end
        self.pacing_delay_ms = pacing_delay_ms
        self._resolve = resolve
        self._process = process
        self._navigate = navigate
        self._frame_name = frame_name or str
        self._status_callback = status_callback
        self._clock = clock
        self._cursor = start

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def frame_count(self) -> int:
        """Number of frame ids in the range."""
        return self.end - self.start + 1

    def _report(self, message: str) -> None:
        if self._status_callback is not None:
            self._status_callback(message)

    def _resolve_frame(self, frame_id: int) -> Optional[np.ndarray]:
        try:
            return self._resolve(frame_id)
        except FrameUnavailableError as e:
            logger.debug("%s", e.message)
            return None

    def _next_signal(self) -> NavigationSignal:
        """Ask the navigator until it gives a signal that can be applied."""
        while True:
            signal = self._navigate(self.pacing_delay_ms)
            if signal is NavigationSignal.STEP_BACK and self._cursor - 1 < self.start:
                logger.debug("Already at first frame %d, ignoring step back", self.start)
                continue
            return signal

    def advance(self, signal: NavigationSignal) -> bool:
        """
        Move the cursor according to a navigation signal.

        Returns:
            False if the walk should stop
        """
        if signal is NavigationSignal.TERMINATE:
            return False
        if signal is NavigationSignal.STEP_BACK:
            if self._cursor - 1 >= self.start:
                self._cursor -= 1
            return True
        self._cursor += 1
        return True

    def run(self) -> SequenceSummary:
        """
        Walk the frame range.

        Returns:
            SequenceSummary with processed and missing frames in visit order
        """
        summary = SequenceSummary(start=self.start, end=self.end)
        self._cursor = self.start

        while self._cursor <= self.end:
            frame_id = self._cursor
            name = self._frame_name(frame_id)
            self._report(f">> Processing image {name}...")

            image = self._resolve_frame(frame_id)
            if image is None:
                logger.warning("Unable to load frame %s, skipping", name)
                self._report("Unable to load image")
                summary.missing.append(frame_id)
                self._cursor += 1
                continue

            started = self._clock()
            self._process(frame_id, image)
            elapsed_ms = (self._clock() - started) * 1000.0

            summary.processed.append(frame_id)
            summary.timings.append(FrameTiming(frame_id=frame_id, elapsed_ms=elapsed_ms))
            logger.debug("Frame %d processed in %.1f ms", frame_id, elapsed_ms)
            self._report(f"(Elapsed time for {name} : {elapsed_ms:.0f} ms)")

            if not self.advance(self._next_signal()):
                summary.terminated = True
                logger.info("Replay terminated at frame %d", frame_id)
                break

        return summary
