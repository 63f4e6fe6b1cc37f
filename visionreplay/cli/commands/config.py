"""Config command - show the effective configuration."""

from pathlib import Path
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.syntax import Syntax

from visionreplay.cli.utils import handle_errors
from visionreplay.core.config import VisionReplayConfig, get_config

console = Console()


@handle_errors
def show_config(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="YAML configuration file (default: search standard locations)",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """Print the effective configuration as YAML.

    Values come from the configuration file, then VISIONREPLAY_* environment
    variables (e.g. VISIONREPLAY_BALL_FILTER__PROCESS_NOISE=2.0).
    """
    config = VisionReplayConfig.from_yaml(config_path) if config_path else get_config()
    text = yaml.safe_dump(config.model_dump(mode="json"), sort_keys=False)
    console.print(Syntax(text, "yaml"))
