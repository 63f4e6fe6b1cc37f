"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Callable, Optional

import cv2
import numpy as np
import pytest

from visionreplay.core.config import reset_config

FIELD_BGR = (0, 128, 0)
BALL_BGR = (0, 128, 255)
GOAL_BGR = (0, 255, 255)


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run slow tests (long synthetic sequences)",
    )


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (run with --run-slow)")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is specified."""
    if config.getoption("--run-slow"):
        return

    skip_slow = pytest.mark.skip(reason="Need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
    """Keep the global config from picking up files or env of the host."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    reset_config()
    yield
    reset_config()


def draw_frame(
    ball: Optional[tuple[int, int, int]] = None,
    goal: Optional[tuple[int, int, int, int]] = None,
    size: tuple[int, int] = (240, 320),
) -> np.ndarray:
    """
    Build a synthetic BGR frame on a green field.

    Args:
        ball: (x, y, radius) of an orange disc
        goal: (x1, y1, x2, y2) of a yellow rectangle
        size: (height, width)
    """
    frame = np.zeros((*size, 3), dtype=np.uint8)
    frame[:] = FIELD_BGR
    if goal is not None:
        x1, y1, x2, y2 = goal
        cv2.rectangle(frame, (x1, y1), (x2, y2), GOAL_BGR, -1)
    if ball is not None:
        x, y, r = ball
        cv2.circle(frame, (x, y), r, BALL_BGR, -1)
    return frame


@pytest.fixture
def make_frame() -> Callable[..., np.ndarray]:
    return draw_frame


@pytest.fixture
def frame_dir(tmp_path) -> Callable[[dict[int, np.ndarray], str, str], Path]:
    """Write frames to a directory as {prefix}{id}{extension}."""

    def _write(frames: dict[int, np.ndarray], prefix: str = "", extension: str = ".png") -> Path:
        directory = tmp_path / "frames"
        directory.mkdir(exist_ok=True)
        for frame_id, image in frames.items():
            cv2.imwrite(str(directory / f"{prefix}{frame_id}{extension}"), image)
        return directory

    return _write
