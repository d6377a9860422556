"""
Helpers shared by the CLI commands.
"""
import asyncio
import functools
import logging
import sys

from rich.console import Console
from rich.markup import escape

from svcdisable.shutdown import ShutdownOutcome

logger = logging.getLogger(__name__)

console = Console()


def handle_async_command(async_func):
    """Run a coroutine function to completion, exiting 1 on interrupt or error."""
    @functools.wraps(async_func)
    def wrapper(*args, **kwargs):
        try:
            return asyncio.run(async_func(*args, **kwargs))
        except KeyboardInterrupt:
            console.print("\n[yellow]Operation cancelled by user[/yellow]")
            sys.exit(1)
        except Exception as e:
            logger.debug("Command failed", exc_info=True)
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            sys.exit(1)
    return wrapper


def yes_no(value: bool) -> str:
    return "[green]yes[/green]" if value else "[red]no[/red]"


def outcome_label(outcome: ShutdownOutcome) -> str:
    """Short coloured result for a shutdown outcome."""
    if outcome.succeeded:
        return "[green]OK[/green]"
    return f"[red]{outcome.failed_step} failed[/red]"
