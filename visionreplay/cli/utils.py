"""CLI utilities for visionreplay."""

import functools
from collections.abc import Callable
from typing import Any, TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from visionreplay.core.errors import UsageError, VisionReplayError

console = Console()

F = TypeVar("F", bound=Callable[..., Any])


def handle_errors(func: F) -> F:
    """Decorator to handle common errors in CLI commands."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except UsageError as e:
            # Usage error: report and exit cleanly
            console.print(f"\n[red]Error:[/red] {escape(e.message)}")
            if e.hint:
                console.print(f"[dim]{escape(e.hint)}[/dim]")
            raise typer.Exit(0)
        except VisionReplayError as e:
            console.print(f"\n[red]Error:[/red] {escape(e.message)}")
            if e.hint:
                console.print(f"[dim]Hint: {escape(e.hint)}[/dim]")
            raise typer.Exit(1)
        except FileNotFoundError as e:
            console.print(f"\n[red]Error:[/red] File not found: {e.filename}")
            raise typer.Exit(1)
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted by user[/yellow]")
            raise typer.Exit(130)
        except Exception as e:
            console.print(f"\n[red]Unexpected error:[/red] {type(e).__name__}: {e}")
            raise typer.Exit(1)

    return wrapper  # type: ignore[return-value]


def format_point(point: tuple[float, float] | None) -> str:
    """Format a point for tables, '-' when absent."""
    if point is None:
        return "-"
    return f"({point[0]:.1f}, {point[1]:.1f})"


def print_profile_table(report: dict) -> None:
    """Print the stage breakdown and the slowest frames of a replay."""
    console.print(
        f"[bold]Frames:[/bold] {report['frames']}  "
        f"[bold]Mean:[/bold] {report['mean_frame_ms']:.1f} ms  "
        f"[bold]Max:[/bold] {report['max_frame_ms']:.1f} ms"
    )
    console.print(f"[dim]Profiled: {report['profiled_ms']:.1f} ms[/dim]\n")

    if not report["stages"]:
        console.print("[yellow]No profiling data collected[/yellow]")
        return

    table = Table(title="Time Breakdown by Stage")
    table.add_column("Stage", style="cyan")
    table.add_column("Operation", style="white")
    table.add_column("Count", justify="right")
    table.add_column("Mean (ms)", justify="right")
    table.add_column("Max (ms)", justify="right")
    table.add_column("%", justify="right")

    for row in report["stages"]:
        table.add_row(
            row["stage"],
            row["operation"],
            str(row["count"]),
            f"{row['mean_ms']:.2f}",
            f"{row['max_ms']:.2f}",
            f"{row['share']:.1f}%",
        )

    console.print(table)

    if not report["slowest_frames"]:
        return

    frames = Table(title="Slowest Frames")
    frames.add_column("Frame", justify="right", style="cyan")
    frames.add_column("Time (ms)", justify="right")
    frames.add_column("Stages (ms)")

    for frame in report["slowest_frames"]:
        stages = ", ".join(
            f"{key} {value:.1f}"
            for key, value in sorted(frame["stages"].items(), key=lambda kv: kv[1], reverse=True)
        )
        frames.add_row(str(frame["frame_id"]), f"{frame['elapsed_ms']:.1f}", stages or "-")

    console.print(frames)
