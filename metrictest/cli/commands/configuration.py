"""Configuration management CLI commands."""

from __future__ import annotations

from pathlib import Path

import click

from metrictest.cli.utils import console
from metrictest.config import create_sample_config, get_config
from metrictest.exceptions import ConfigurationError


@click.group(name="config")
def config_group() -> None:
    """Configuration management."""
    pass


@config_group.command(name="validate")
@click.argument("config_file", type=click.Path(exists=True))
def validate_command(config_file: str) -> None:
    """Validate configuration file."""
    try:
        config = get_config(config_file)
        console.print(f"[green]Configuration file '{config_file}' is valid[/green]")
        console.print(
            f"Database: [cyan]{config.database.database_name}[/cyan] "
            f"({config.database.type.value})"
        )
        console.print(f"Metrics: [cyan]{config.metrics.directory}[/cyan]")
        console.print(f"Protected databases: {', '.join(config.protected_databases) or 'none'}")
    except ConfigurationError as exc:
        console.print(f"[red]Configuration validation failed: {exc}[/red]")
        raise SystemExit(1) from exc


@config_group.command(name="sample")
@click.argument("output_file", type=click.Path())
def sample_command(output_file: str) -> None:
    """Create sample configuration file."""
    output_path = Path(output_file)
    if output_path.exists():
        click.confirm(f"File '{output_file}' exists. Overwrite?", abort=True)

    try:
        create_sample_config(output_path)
    except OSError as exc:
        console.print(f"[red]Error creating sample configuration: {exc}[/red]")
        raise SystemExit(1) from exc

    console.print(f"[green]Sample configuration created: {output_file}[/green]")
    console.print("\n[yellow]Next steps:[/yellow]")
    console.print("1. Edit the configuration file to match your database settings")
    console.print("2. Set PG_HOST, PG_DB, PG_USER and PG_PASS or keep the defaults")
    console.print(f"3. Validate: [cyan]metrictest config validate {output_file}[/cyan]")
