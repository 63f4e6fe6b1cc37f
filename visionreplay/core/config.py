"""Configuration management for visionreplay."""

from pathlib import Path
from typing import Optional

import yaml
from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from visionreplay.core.errors import ConfigError

# =============================================================================
# Nested Configuration Classes
# =============================================================================


class FrameSourceConfig(BaseModel):
    """Where frames live and how a frame id maps to a file name."""

    directory: str = "RhobanVisionLog/log2/"
    prefix: str = ""
    extension: str = ".png"
    start_frame: int = 100
    end_frame: int = 150


class PlaybackConfig(BaseModel):
    """Interactive playback configuration."""

    pacing_delay_ms: int = Field(default=1000, ge=0)
    show_windows: bool = True
    window_gap_px: int = 0  # Horizontal gap between tiled windows


class BallFilterConfig(BaseModel):
    """Ball position filter noise parameters.

    Noise is isotropic: each magnitude is applied to every dimension.
    """

    measurement_noise: float = Field(default=1.0, gt=0)
    # Used while the ball is not visible and the last known position is fed back
    measurement_noise_occluded: float = Field(default=100.0, gt=0)
    process_noise: float = Field(default=1.0, ge=0)
    # Covariance right after seeding (0 = seed trusted exactly)
    initial_uncertainty: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def _occluded_noise_dominates(self) -> "BallFilterConfig":
        if self.measurement_noise_occluded < self.measurement_noise:
            raise ValueError(
                "measurement_noise_occluded must be >= measurement_noise "
                f"({self.measurement_noise_occluded} < {self.measurement_noise})"
            )
        return self


class DetectionConfig(BaseModel):
    """Pixel classification thresholds (OpenCV HSV: H 0-179, S/V 0-255)."""

    field_lower: tuple[int, int, int] = (35, 60, 40)
    field_upper: tuple[int, int, int] = (85, 255, 255)
    ball_lower: tuple[int, int, int] = (5, 120, 120)
    ball_upper: tuple[int, int, int] = (20, 255, 255)
    goal_lower: tuple[int, int, int] = (22, 100, 100)
    goal_upper: tuple[int, int, int] = (34, 255, 255)
    line_lower: tuple[int, int, int] = (0, 0, 200)
    line_upper: tuple[int, int, int] = (179, 40, 255)

    min_ball_radius: float = 2.0
    max_ball_radius: float = 120.0
    min_goal_area: float = 150.0
    goal_approx_epsilon: float = 0.02  # Fraction of contour perimeter
    morph_kernel: int = 3


class OverlayConfig(BaseModel):
    """Overlay rendering configuration (BGR colors)."""

    raw_ball_color: tuple[int, int, int] = (0, 0, 255)  # Red
    raw_ball_scale: int = 3  # Drawn radius = detected radius * scale
    smoothed_color: tuple[int, int, int] = (0, 255, 0)  # Green
    smoothed_radius: int = 8
    goal_color: tuple[int, int, int] = (255, 0, 0)  # Blue
    goal_radius: int = 10
    goal_thickness: int = 20
    thickness: int = 4


# =============================================================================
# Main Configuration Class
# =============================================================================


class VisionReplayConfig(BaseSettings):
    """Configuration settings for visionreplay."""

    frames: FrameSourceConfig = Field(default_factory=FrameSourceConfig)
    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)
    ball_filter: BallFilterConfig = Field(default_factory=BallFilterConfig)
    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    overlay: OverlayConfig = Field(default_factory=OverlayConfig)

    model_config = SettingsConfigDict(
        env_prefix="VISIONREPLAY_",
        env_nested_delimiter="__",  # Allows VISIONREPLAY_BALL_FILTER__PROCESS_NOISE
    )

    # -------------------------------------------------------------------------
    # YAML Loading
    # -------------------------------------------------------------------------

    @classmethod
    def from_yaml(cls, path: Path) -> "VisionReplayConfig":
        """Load configuration from YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Cannot parse config file {path}: {e}",
                hint="Check the YAML syntax",
            ) from e
        try:
            return cls(**data) if data else cls()
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {path}:\n{e}") from e

    @classmethod
    def find_and_load(cls) -> "VisionReplayConfig":
        """Find and load config from standard locations."""
        locations = [
            Path.cwd() / "visionreplay.yaml",
            Path(user_config_dir("visionreplay")) / "visionreplay.yaml",
        ]

        for path in locations:
            if path.exists():
                return cls.from_yaml(path)

        # Fall back to defaults + environment variables
        return cls()


# =============================================================================
# Global Config Instance
# =============================================================================

_config: Optional[VisionReplayConfig] = None


def get_config() -> VisionReplayConfig:
    """Get global configuration instance."""
    global _config
    if _config is None:
        _config = VisionReplayConfig.find_and_load()
    return _config


def set_config(config: VisionReplayConfig) -> None:
    """Set global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset global configuration instance (useful for testing)."""
    global _config
    _config = None
