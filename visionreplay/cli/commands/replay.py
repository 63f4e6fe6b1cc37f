"""Replay command - step through a numbered image sequence."""

from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from visionreplay.cli.utils import format_point, handle_errors, print_profile_table
from visionreplay.core.config import BallFilterConfig, VisionReplayConfig, get_config
from visionreplay.core.errors import ConfigError, UsageError
from visionreplay.core.profiler import enable_profiling
from visionreplay.processing.replay import ReplayResult, replay as run_replay

console = Console()


def build_config(
    base: VisionReplayConfig,
    directory: str,
    start: int,
    end: int,
    prefix: Optional[str] = None,
    extension: Optional[str] = None,
    delay_ms: Optional[int] = None,
    measurement_noise: Optional[float] = None,
    occluded_noise: Optional[float] = None,
    process_noise: Optional[float] = None,
) -> VisionReplayConfig:
    """Apply command-line values on top of a loaded configuration."""
    frame_updates: dict = {"directory": directory, "start_frame": start, "end_frame": end}
    if prefix is not None:
        frame_updates["prefix"] = prefix
    if extension is not None:
        frame_updates["extension"] = extension

    playback = base.playback
    if delay_ms is not None:
        playback = playback.model_copy(update={"pacing_delay_ms": delay_ms})

    filter_updates = {
        key: value
        for key, value in (
            ("measurement_noise", measurement_noise),
            ("measurement_noise_occluded", occluded_noise),
            ("process_noise", process_noise),
        )
        if value is not None
    }
    try:
        ball_filter = BallFilterConfig(**{**base.ball_filter.model_dump(), **filter_updates})
    except ValidationError as e:
        raise ConfigError(
            f"Invalid filter parameters:\n{e}",
            hint="Noise values must be positive and --occluded-noise >= --measurement-noise",
        ) from e

    return base.model_copy(
        update={
            "frames": base.frames.model_copy(update=frame_updates),
            "playback": playback,
            "ball_filter": ball_filter,
        }
    )


@handle_errors
def replay(
    directory: Optional[str] = typer.Argument(
        None,
        help="Image directory (joined to the file name as-is when it ends with '/')",
    ),
    start: Optional[int] = typer.Argument(None, help="First image number"),
    end: Optional[int] = typer.Argument(None, help="Last image number (inclusive)"),
    prefix: Optional[str] = typer.Argument(None, help="Image file name prefix"),
    extension: Optional[str] = typer.Argument(None, help="Image file extension (e.g. .png)"),
    delay_ms: Optional[int] = typer.Argument(
        None,
        help="Delay between images in ms (0 = wait for a key)",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="YAML configuration file",
        exists=True,
        dir_okay=False,
    ),
    headless: bool = typer.Option(
        False,
        "--headless",
        help="Do not open windows; always continue after the delay",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Write the per-frame track to a JSON file",
    ),
    measurement_noise: Optional[float] = typer.Option(
        None,
        "--measurement-noise",
        help="Filter measurement noise while the ball is visible",
    ),
    occluded_noise: Optional[float] = typer.Option(
        None,
        "--occluded-noise",
        help="Filter measurement noise while the ball is not visible",
    ),
    process_noise: Optional[float] = typer.Option(
        None,
        "--process-noise",
        help="Filter process noise",
    ),
    profile: bool = typer.Option(
        False,
        "--profile",
        help="Print a per-stage timing breakdown at the end",
    ),
) -> None:
    """
    Replay a numbered image sequence with ball and goal detection.

    Each image is classified, the ball and goal are detected, and the ball
    position is smoothed across frames. Press ESC or q to quit, left arrow or
    b to go back one image, any other key to go forward.

    Examples:
        visionreplay replay RhobanVisionLog/log2/ 100 150
        visionreplay replay logs/ 0 40 img_ .jpg 0
        visionreplay replay logs/ 0 40 --headless -o track.json
    """
    if directory is None or start is None or end is None:
        raise UsageError("Missing image directory, start image or end image")

    base = VisionReplayConfig.from_yaml(config_path) if config_path else get_config()
    config = build_config(
        base,
        directory=directory,
        start=start,
        end=end,
        prefix=prefix,
        extension=extension,
        delay_ms=delay_ms,
        measurement_noise=measurement_noise,
        occluded_noise=occluded_noise,
        process_noise=process_noise,
    )

    profiler = enable_profiling() if profile else None

    result = run_replay(config, headless=headless, status_callback=_print_status)

    _print_summary(result)

    if output is not None:
        result.to_json(output)
        console.print(f"[dim]Track saved to: {output}[/dim]")

    if profiler is not None:
        console.print()
        print_profile_table(profiler.report(result.summary))


def _print_status(line: str) -> None:
    # Status lines contain brackets; keep rich from reading them as markup
    console.print(line, markup=False, highlight=False)
    if line.startswith("(Elapsed time"):
        console.print()


def _print_summary(result: ReplayResult) -> None:
    summary = result.summary

    table = Table(title="Replay Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Frame range", f"{summary.start}-{summary.end}")
    table.add_row("Frames processed", str(summary.processed_count))
    table.add_row("Frames skipped", str(summary.missing_count))
    table.add_row("Mean time (ms)", f"{summary.mean_elapsed_ms:.1f}")
    table.add_row("Max time (ms)", f"{summary.max_elapsed_ms:.1f}")

    last = next((f.smoothed for f in reversed(result.frames) if f.smoothed), None)
    table.add_row("Last ball estimate", format_point(last.center if last else None))
    table.add_row("Stopped by user", "yes" if summary.terminated else "no")

    console.print(table)

    if not result.tracking_started:
        console.print("[yellow]Warning: The ball was never detected[/yellow]")
