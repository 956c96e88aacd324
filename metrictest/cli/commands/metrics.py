"""Metric catalog CLI commands."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import click
from rich.table import Table

from metrictest.cli.utils import console
from metrictest.config import get_config
from metrictest.exceptions import ConfigurationError, QueryError
from metrictest.modules.metric_testing.catalog import MetricCatalog
from metrictest.modules.metric_testing.executor import render_metric

DATETIME_FORMATS = ["%Y-%m-%d", "%Y-%m-%d %H:%M:%S", "%Y-%m-%dT%H:%M:%S"]


def _catalog(ctx: click.Context, metrics_dir: Optional[str], dialect: Optional[str]) -> MetricCatalog:
    """Catalog from explicit options, else from the configuration file if one was given."""
    if metrics_dir is None and ctx.obj.get("config"):
        app_config = get_config(ctx.obj["config"])
        return MetricCatalog(app_config.metrics.directory, dialect or app_config.metrics.dialect)
    return MetricCatalog(metrics_dir or "metrics", dialect)


@click.group(name="metrics")
def metrics_group() -> None:
    """Metric template catalog."""
    pass


@metrics_group.command(name="list")
@click.option("--metrics-dir", type=click.Path(file_okay=False), help="Directory of metric templates")
@click.option("--dialect", help="Dialect sub-directory to prefer, e.g. sqlite")
@click.pass_context
def list_command(ctx: click.Context, metrics_dir: Optional[str], dialect: Optional[str]) -> None:
    """List available metrics."""
    try:
        catalog = _catalog(ctx, metrics_dir, dialect)
    except ConfigurationError as exc:
        console.print(f"[red]Configuration Error: {exc}[/red]")
        raise SystemExit(1) from exc

    names = catalog.names()
    if not names:
        console.print(f"[yellow]No metrics found in {catalog.directory}[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Template", style="white")
    for name in names:
        table.add_row(name, str(catalog.path_for(name).relative_to(catalog.directory)))
    console.print(table)


@metrics_group.command(name="render")
@click.argument("name")
@click.option("--from", "date_from", required=True, type=click.DateTime(DATETIME_FORMATS), help="Window start (inclusive)")
@click.option("--to", "date_to", required=True, type=click.DateTime(DATETIME_FORMATS), help="Window end (exclusive)")
@click.option("--metrics-dir", type=click.Path(file_okay=False), help="Directory of metric templates")
@click.option("--dialect", help="Dialect sub-directory to prefer, e.g. sqlite")
@click.pass_context
def render_command(
    ctx: click.Context,
    name: str,
    date_from: datetime,
    date_to: datetime,
    metrics_dir: Optional[str],
    dialect: Optional[str],
) -> None:
    """Print a metric's SQL with the window filled in."""
    try:
        catalog = _catalog(ctx, metrics_dir, dialect)
        sql = render_metric(catalog.load(name), date_from, date_to)
    except (ConfigurationError, QueryError) as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise SystemExit(1) from exc

    click.echo(sql)
