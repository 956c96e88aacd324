"""Main CLI entry point for metrictest."""

from __future__ import annotations

import click
from rich.panel import Panel
from rich.text import Text

from metrictest import __version__
from metrictest.cli.commands import register_commands
from metrictest.cli.commands.configuration import config_group
from metrictest.cli.commands.metrics import metrics_group
from metrictest.cli.commands.testing import run_command
from metrictest.cli.utils import configure_logging, console
from metrictest.config.models import EnvironmentSettings


@click.group(invoke_without_command=True)
@click.option("--version", is_flag=True, help="Show version information")
@click.option("--config", type=click.Path(exists=True), help="Path to configuration file")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(
    ctx: click.Context,
    version: bool,
    config: str,
    verbose: bool,
) -> None:
    """metrictest - fixture tests for GitHub Archive metric SQL."""
    settings = EnvironmentSettings()
    verbose = verbose or settings.debug

    ctx.ensure_object(dict)
    ctx.obj.update(
        {
            "config": config or settings.config_file,
            "verbose": verbose,
        }
    )
    configure_logging(settings.log_level, verbose)

    if version:
        console.print(f"metrictest v{__version__}")
        return

    if ctx.invoked_subcommand is None:
        show_dashboard()


COMMAND_REGISTRY = [
    run_command,
    metrics_group,
    config_group,
]

register_commands(cli, COMMAND_REGISTRY)


def show_dashboard() -> None:
    """Display a short overview of the available commands."""
    title = Text("metrictest", style="bold blue")
    subtitle = Text("Fixture tests for metric SQL", style="italic")

    dashboard_content = Text()
    dashboard_content.append("run       ", style="bold")
    dashboard_content.append("Execute metric test cases\n")
    dashboard_content.append("metrics   ", style="bold")
    dashboard_content.append("List and render metric templates\n")
    dashboard_content.append("config    ", style="bold")
    dashboard_content.append("Validate or create configuration files\n")
    dashboard_content.append("\nRun 'metrictest --help' for available commands", style="dim")

    panel = Panel(
        dashboard_content,
        title=title,
        subtitle=subtitle,
        border_style="blue",
        padding=(1, 2),
    )

    console.print(panel)


if __name__ == "__main__":
    cli()
