"""Exception hierarchy for visionreplay."""


class VisionReplayError(Exception):
    """Base exception for visionreplay errors."""

    def __init__(self, message: str, hint: str | None = None):
        self.message = message
        self.hint = hint
        super().__init__(message)


USAGE = "Usage: visionreplay replay <image directory> <start image> <end image>"


class UsageError(VisionReplayError):
    """Command invoked with missing or unusable arguments."""

    def __init__(self, message: str, hint: str | None = USAGE):
        super().__init__(message, hint=hint)


class InvalidRangeError(UsageError, ValueError):
    """Frame range bounds are negative or reversed."""

    def __init__(self, start: int, end: int):
        if start < 0 or end < 0:
            message = f"Frame bounds must be non-negative, got start={start}, end={end}"
        else:
            message = f"Start frame {start} is after end frame {end}"
        super().__init__(message)
        self.start = start
        self.end = end


class FrameUnavailableError(VisionReplayError):
    """A frame file is missing or cannot be decoded."""

    def __init__(self, frame_id: int, path: str):
        super().__init__(f"Unable to load image {path}")
        self.frame_id = frame_id
        self.path = path


class ConfigError(VisionReplayError):
    """Configuration file or values are invalid."""
    pass
