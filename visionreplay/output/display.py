"""On-screen windows and keyboard navigation."""

import logging
import time
from typing import Optional

import cv2
import numpy as np

from visionreplay.core.models import NavigationSignal

logger = logging.getLogger(__name__)

KEY_ESCAPE = 27
KEY_LEFT_ARROW = 81  # Low byte of the left arrow code reported by highgui

TERMINATE_KEYS = frozenset({KEY_ESCAPE, ord("q")})
STEP_BACK_KEYS = frozenset({KEY_LEFT_ARROW, ord("b")})


def signal_for_key(key: int) -> NavigationSignal:
    """
    Map a ``cv2.waitKey`` return value to a navigation signal.

    Args:
        key: Key code, or -1 when the wait timed out

    Returns:
        TERMINATE for ESC/q, STEP_BACK for left arrow/b, CONTINUE otherwise
    """
    if key < 0:
        return NavigationSignal.CONTINUE

    code = key & 0xFF
    if code in TERMINATE_KEYS:
        return NavigationSignal.TERMINATE
    if code in STEP_BACK_KEYS:
        return NavigationSignal.STEP_BACK
    return NavigationSignal.CONTINUE


class KeyNavigator:
    """Waits for a key press (or the pacing delay) in the OpenCV windows."""

    def __call__(self, delay_ms: int) -> NavigationSignal:
        key = cv2.waitKey(delay_ms)
        signal = signal_for_key(key)
        if signal is not NavigationSignal.CONTINUE:
            logger.debug("Key %d -> %s", key, signal.value)
        return signal


class HeadlessNavigator:
    """Sleeps for the pacing delay and always continues."""

    def __call__(self, delay_ms: int) -> NavigationSignal:
        if delay_ms > 0:
            time.sleep(delay_ms / 1000.0)
        return NavigationSignal.CONTINUE


class FrameDisplay:
    """
    Shows named images side by side, left to right in call order.

    Call ``reset_layout`` at the start of each frame so windows keep their
    positions from one frame to the next.
    """

    def __init__(self, gap_px: int = 0):
        self.gap_px = gap_px
        self._offset = 0
        self._windows: list[str] = []

    def reset_layout(self) -> None:
        self._offset = 0

    def show(self, name: str, image: Optional[np.ndarray]) -> None:
        """Display an image in a window to the right of the previous one."""
        if image is None:
            return
        if name not in self._windows:
            cv2.namedWindow(name)
            self._windows.append(name)
        cv2.moveWindow(name, self._offset, 0)
        self._offset += image.shape[1] + self.gap_px
        cv2.imshow(name, image)

    def close(self) -> None:
        for name in self._windows:
            cv2.destroyWindow(name)
        self._windows.clear()
