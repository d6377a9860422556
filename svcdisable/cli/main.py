import json
import logging
import time

import click
from rich.json import JSON
from rich.markup import escape
from rich.table import Table

from svcdisable import __version__
from svcdisable.config import get_settings
from svcdisable.preflight import run_preflight
from svcdisable.services import ServiceError, ServiceHandle, get_controller
from svcdisable.shutdown import AggregateResult, Orchestrator
from svcdisable.utils.logging import setup_logging

from .utils import console, handle_async_command, outcome_label, yes_no


def _collect_names(names, no_defaults: bool, default_services) -> list[str]:
    targets = list(names)
    if not no_defaults:
        targets.extend(default_services)
    return targets


@handle_async_command
async def _run_orchestrator(orchestrator: Orchestrator, names: list[str]) -> AggregateResult:
    return await orchestrator.run(names)


def _print_result(result: AggregateResult) -> None:
    table = Table(title="Service Shutdown")
    table.add_column("Service", style="cyan")
    table.add_column("Stopped")
    table.add_column("Disabled")
    table.add_column("Result")
    table.add_column("Error")
    for outcome in result.outcomes:
        table.add_row(
            escape(outcome.service_name),
            yes_no(outcome.stopped),
            yes_no(outcome.disabled),
            outcome_label(outcome),
            escape(outcome.error or ""),
        )
    console.print(table)

    console.print(
        f"[green]It took {result.elapsed:.3f} seconds to process {result.total_attempted} services.[/green]"
    )
    if result.all_succeeded:
        console.print("[green]Successfully disabled all services![/green]")
    else:
        console.print(
            f"[yellow]{result.total_succeeded} services succeeded out of {result.total_attempted}.[/yellow]"
        )


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enables verbose mode.')
@click.option('--quiet', '-q', is_flag=True, help='Enables quiet mode.')
@click.version_option(__version__, prog_name="svcdisable")
@click.pass_context
def app(ctx, verbose, quiet):
    """
    Stop and disable host background services.
    """
    ctx.ensure_object(dict)
    ctx.obj['VERBOSE'] = verbose
    ctx.obj['QUIET'] = quiet
    ctx.obj['SETTINGS'] = get_settings()

    if verbose:
        setup_logging(level=logging.DEBUG)
    elif quiet:
        setup_logging(level=logging.ERROR)
    else:
        setup_logging()


@app.command()
@click.argument('names', nargs=-1)
@click.option('--no-defaults', is_flag=True, help='Do not append the default service list.')
@click.option('--max-parallel', type=click.IntRange(min=1), help='Maximum services processed at once.')
@click.option('--timeout', type=click.FloatRange(min=0, min_open=True), help='Seconds to wait for each stop.')
@click.option('--json', 'json_output', is_flag=True, help='Output in JSON format.')
@click.option('--skip-preflight', is_flag=True, help='Skip the privilege and platform checks.')
@click.option('--exit-delay', type=click.FloatRange(min=0), help='Seconds to wait before exiting.')
@click.pass_context
def disable(ctx, names, no_defaults, max_parallel, timeout, json_output, skip_preflight, exit_delay):
    """Stops and disables the named services."""
    cfg = ctx.obj['SETTINGS']
    targets = _collect_names(names, no_defaults, cfg.DEFAULT_SERVICES)

    if not skip_preflight:
        problems = run_preflight(require_admin=cfg.REQUIRE_ADMIN)
        if problems:
            for problem in problems:
                console.print(f"[red]{escape(problem)}[/red]")
            ctx.exit(1)

    try:
        controller = get_controller(command_timeout=cfg.COMMAND_TIMEOUT)
    except ServiceError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        ctx.exit(1)

    orchestrator = Orchestrator(
        controller,
        max_parallel=max_parallel or cfg.MAX_PARALLEL,
        stop_timeout=timeout or cfg.STOP_TIMEOUT,
        poll_interval=cfg.POLL_INTERVAL,
    )
    result = _run_orchestrator(orchestrator, targets)

    if json_output:
        console.print(JSON(json.dumps(result.to_dict())), soft_wrap=True)
    else:
        _print_result(result)

    delay = cfg.EXIT_DELAY if exit_delay is None else exit_delay
    if delay > 0:
        if not json_output:
            console.print(f"Exiting in {delay:g} seconds...")
        time.sleep(delay)

    ctx.exit(result.exit_code)


@app.command()
@click.argument('names', nargs=-1)
@click.option('--no-defaults', is_flag=True, help='Do not append the default service list.')
@click.option('--json', 'json_output', is_flag=True, help='Output in JSON format.')
@click.pass_context
def status(ctx, names, no_defaults, json_output):
    """Shows the current state of the named services."""
    cfg = ctx.obj['SETTINGS']
    targets = [name for name in _collect_names(names, no_defaults, cfg.DEFAULT_SERVICES) if name.strip()]

    try:
        controller = get_controller(command_timeout=cfg.COMMAND_TIMEOUT)
    except ServiceError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        ctx.exit(1)

    rows = []
    for name in targets:
        handle = ServiceHandle(name, controller, poll_interval=cfg.POLL_INTERVAL)
        try:
            snapshot = handle.status()
            rows.append({"service_name": name, "state": snapshot.state.value, "can_stop": snapshot.can_stop, "error": None})
        except ServiceError as e:
            rows.append({"service_name": name, "state": None, "can_stop": None, "error": str(e)})

    if json_output:
        console.print(JSON(json.dumps(rows)), soft_wrap=True)
    else:
        console.print("[bold blue]Service Status[/bold blue]")
        for row in rows:
            if row["error"]:
                console.print(f"- [cyan]{escape(row['service_name'])}[/cyan]: [red]{escape(row['error'])}[/red]")
            else:
                console.print(f"- [cyan]{escape(row['service_name'])}[/cyan]: {row['state']}")

    ctx.exit(1 if any(row["error"] for row in rows) else 0)


if __name__ == '__main__':
    app()
