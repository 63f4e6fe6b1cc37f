"""Main CLI entry point for visionreplay."""

import logging

import typer
from rich.console import Console

from visionreplay.cli.commands.config import show_config as config_command
from visionreplay.cli.commands.replay import replay as replay_command

app = typer.Typer(
    name="visionreplay",
    help="Robot vision log replay - ball/goal detection with a filtered ball track",
)

console = Console()

# Register commands
app.command(name="replay")(replay_command)
app.command(name="config")(config_command)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """visionreplay - Robot vision log replay CLI."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    if verbose:
        console.print("[dim]Verbose mode enabled[/dim]")
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


if __name__ == "__main__":
    app()
