"""Metric test run command for the metrictest CLI."""

from __future__ import annotations

from typing import List, Optional, Tuple

import click
from rich.table import Table

from metrictest.cli.utils import console, print_exception
from metrictest.config import get_config
from metrictest.exceptions import ConfigurationError, ProtectedTargetError
from metrictest.modules.metric_testing import (
    CaseStatus,
    MetricTestRunner,
    default_cases,
    export_results,
    load_cases,
    select_cases,
)


@click.command(name="run")
@click.option("--cases", "cases_file", type=click.Path(exists=True), help="YAML file with case declarations")
@click.option("--metrics-dir", type=click.Path(exists=True, file_okay=False), help="Directory of metric templates")
@click.option("--filter", "name_filter", help="Run only cases whose name contains this text")
@click.option("--metric", "metrics", multiple=True, help="Run only cases of this metric (repeatable)")
@click.option("--output", "-o", type=click.Path(), help="Export results to JSON file")
@click.pass_context
def run_command(
    ctx: click.Context,
    cases_file: Optional[str],
    metrics_dir: Optional[str],
    name_filter: Optional[str],
    metrics: Tuple[str, ...],
    output: Optional[str],
) -> None:
    """Run metric test cases, each in a fresh database."""
    verbose = ctx.obj.get("verbose", False)
    try:
        app_config = get_config(ctx.obj.get("config"))
        cases_file = cases_file or app_config.cases
        cases = load_cases(cases_file) if cases_file else default_cases()
        cases = select_cases(cases, name_filter=name_filter, metrics=list(metrics) or None)

        console.print("[bold magenta]Metric Tests[/bold magenta]")
        console.print(f"Database: [cyan]{app_config.database.database_name}[/cyan] ({app_config.database.type.value})")
        console.print(f"Cases: [cyan]{cases_file or 'built-in'}[/cyan]")
        console.print()

        if not cases:
            console.print("[yellow]No cases were selected.[/yellow]")
            return

        runner = MetricTestRunner.from_config(app_config, metrics_dir=metrics_dir)
        suite_result = runner.run_suite(cases)

        _render_results(suite_result.case_results, verbose)

        if output:
            export_results(suite_result, output)
            console.print(f"[green]Test results exported to: {output}[/green]")

        if suite_result.halted_for_debug:
            console.print(
                f"\n[yellow]Returning early in debug mode: database "
                f"'{suite_result.database_name}' was kept, "
                f"{suite_result.skipped_cases} case(s) not run[/yellow]"
            )

        failed = suite_result.failed_cases + suite_result.error_cases
        if failed:
            console.print(f"\n[red]{failed}/{len(suite_result.case_results)} cases failed[/red]")
            raise SystemExit(1)

        console.print(f"\n[green]All {len(suite_result.case_results)} cases passed[/green]")

    except ProtectedTargetError as exc:
        console.print(f"[red]Refusing to run: {exc}[/red]")
        raise SystemExit(1) from exc
    except ConfigurationError as exc:
        console.print(f"[red]Configuration Error: {exc}[/red]")
        raise SystemExit(1) from exc
    except Exception as exc:
        print_exception("Error", exc, verbose)
        raise SystemExit(1) from exc


def _render_results(case_results: List, verbose: bool) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Case", style="cyan")
    table.add_column("Status")
    table.add_column("Time", justify="right")
    table.add_column("Details", style="white")

    for result in case_results:
        if result.passed:
            status = "[green]passed[/green]"
            details = f"{len(result.actual or [])} rows"
        elif result.status == CaseStatus.FAILED:
            status = "[red]failed[/red]"
            details = result.mismatch or ""
        else:
            status = "[red]error[/red]"
            details = f"{result.error_type}: {result.error_message}"
        if result.debug:
            details = f"{details} (debug, database kept)"

        elapsed = result.execution_time
        table.add_row(
            str(result.index),
            result.name,
            status,
            f"{elapsed:.2f}s" if elapsed is not None else "",
            details,
        )

    console.print(table)

    if verbose:
        for result in case_results:
            if result.passed:
                continue
            console.print(f"\n[bold red]Case {result.index}: {result.name}[/bold red]")
            console.print(f"States: {' -> '.join(s.value for s in result.states)}")
            console.print(f"Expected: {result.expected}")
            console.print(f"Actual:   {result.actual}")
            if result.sql:
                console.print(f"[dim]{result.sql}[/dim]")
