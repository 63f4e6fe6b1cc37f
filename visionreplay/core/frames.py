"""Numbered still-image sequence access."""

import logging
import os
from pathlib import Path

import cv2
import numpy as np

from visionreplay.core.config import FrameSourceConfig
from visionreplay.core.errors import FrameUnavailableError

logger = logging.getLogger(__name__)


class FrameSource:
    """
    Resolves frame ids to image files named ``{directory}{prefix}{id}{extension}``.

    The directory is joined by plain concatenation when it already ends with a
    path separator, so ``"log/"`` + ``"img_"`` + ``12`` + ``".png"`` gives
    ``log/img_12.png``. A directory without a trailing separator is joined as a
    path component.
    """

    def __init__(
        self,
        directory: Path | str,
        prefix: str = "",
        extension: str = ".png",
        read_flags: int = cv2.IMREAD_COLOR,
    ):
        self.directory = str(directory)
        self.prefix = prefix
        self.extension = extension
        self.read_flags = read_flags

    @classmethod
    def from_config(cls, config: FrameSourceConfig) -> "FrameSource":
        return cls(config.directory, prefix=config.prefix, extension=config.extension)

    def frame_name(self, frame_id: int) -> str:
        """File name of a frame, without directory."""
        return f"{self.prefix}{frame_id}{self.extension}"

    def path_for(self, frame_id: int) -> Path:
        """Full path of a frame."""
        if not self.directory or self.directory.endswith(("/", os.sep)):
            return Path(f"{self.directory}{self.frame_name(frame_id)}")
        return Path(self.directory) / self.frame_name(frame_id)

    def read_frame(self, frame_id: int) -> np.ndarray | None:
        """Read a frame, returning None if it is missing or cannot be decoded."""
        path = self.path_for(frame_id)
        if not path.is_file():
            logger.debug("Frame %d not found at %s", frame_id, path)
            return None

        image = cv2.imread(str(path), self.read_flags)
        if image is None or image.size == 0:
            logger.debug("Frame %d at %s could not be decoded", frame_id, path)
            return None
        return image

    def load(self, frame_id: int) -> np.ndarray:
        """Read a frame, raising FrameUnavailableError if it cannot be loaded."""
        image = self.read_frame(frame_id)
        if image is None:
            raise FrameUnavailableError(frame_id, str(self.path_for(frame_id)))
        return image
