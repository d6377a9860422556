"""
Concurrent stop-and-disable orchestration.

Runs one :class:`ShutdownOperation` per service name on a fixed-size worker
pool, never more than ``max_parallel`` at once, waits for every one of them
and aggregates the outcomes.
"""

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from svcdisable.config import get_settings
from svcdisable.services.base import ServiceController
from svcdisable.services.handle import ServiceHandle
from svcdisable.services.registry import get_controller
from svcdisable.shutdown.operation import HandleFactory, ShutdownOperation, ShutdownOutcome

logger = logging.getLogger(__name__)


class OperationState(Enum):
    """Lifecycle of one submitted name as seen by the orchestrator."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass
class TrackedOperation:
    """A submitted service name and where it is in its lifecycle."""

    service_name: str
    state: OperationState = OperationState.PENDING
    outcome: Optional[ShutdownOutcome] = None


@dataclass
class AggregateResult:
    """Tally of a complete orchestrator run."""

    total_attempted: int = 0
    outcomes: List[ShutdownOutcome] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def total_succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def all_succeeded(self) -> bool:
        return self.total_succeeded == self.total_attempted

    @property
    def failed(self) -> List[ShutdownOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.succeeded]

    @property
    def exit_code(self) -> int:
        """Process exit status: 0 on full success, 1 otherwise."""
        return 0 if self.all_succeeded else 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_attempted': self.total_attempted,
            'total_succeeded': self.total_succeeded,
            'elapsed': round(self.elapsed, 3),
            'outcomes': [outcome.to_dict() for outcome in self.outcomes],
        }


class Orchestrator:
    """
    Stops and disables a set of services concurrently.

    Operations are admitted through a semaphore and executed on a thread
    pool of the same size, since the service manager calls block. Outcomes
    are collected on the event loop thread as each operation finishes.

    Args:
        controller: Service manager backend; detected from the platform when
            neither it nor ``handle_factory`` is given.
        handle_factory: Builds the handle for a name, overriding ``controller``.
        max_parallel: Maximum number of operations in flight.
        stop_timeout: Seconds each stop waits for the stopped state.
        poll_interval: Seconds between state checks during a stop wait.

    Scheduling values left as ``None`` are read from the settings when the
    orchestrator is created.
    """

    def __init__(
        self,
        controller: Optional[ServiceController] = None,
        *,
        handle_factory: Optional[HandleFactory] = None,
        max_parallel: Optional[int] = None,
        stop_timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
    ):
        cfg = get_settings()
        max_parallel = cfg.MAX_PARALLEL if max_parallel is None else max_parallel
        stop_timeout = cfg.STOP_TIMEOUT if stop_timeout is None else stop_timeout
        poll_interval = cfg.POLL_INTERVAL if poll_interval is None else poll_interval

        if max_parallel < 1:
            raise ValueError("max_parallel must be at least 1")

        if handle_factory is None:
            controller = controller or get_controller(command_timeout=cfg.COMMAND_TIMEOUT)
            handle_factory = lambda name: ServiceHandle(name, controller, poll_interval=poll_interval)

        self.controller = controller
        self.handle_factory = handle_factory
        self.max_parallel = max_parallel
        self.stop_timeout = stop_timeout
        self.poll_interval = poll_interval
        self.operations: List[TrackedOperation] = []

    @property
    def active_count(self) -> int:
        """Number of operations currently running."""
        return sum(1 for op in self.operations if op.state is OperationState.RUNNING)

    async def run(self, service_names: Iterable[str]) -> AggregateResult:
        """
        Stop and disable every named service.

        Blank names are dropped and not counted. Duplicates are processed
        independently. Returns only once every operation has completed.

        Args:
            service_names: Names of the services to shut down.

        Returns:
            The aggregated outcomes of the run.
        """
        if service_names is None:
            raise TypeError("service_names must not be None")

        names = [name.strip() for name in service_names if name and name.strip()]
        result = AggregateResult(total_attempted=len(names))
        self.operations = [TrackedOperation(service_name=name) for name in names]
        if not names:
            logger.info("No services to shut down")
            return result

        logger.info(
            "Starting shutdown of %d services (max %d in parallel)", len(names), self.max_parallel
        )
        start = time.monotonic()
        loop = asyncio.get_running_loop()
        semaphore = asyncio.Semaphore(self.max_parallel)

        with ThreadPoolExecutor(
            max_workers=self.max_parallel, thread_name_prefix="svcdisable"
        ) as executor:

            async def run_with_semaphore(tracked: TrackedOperation) -> None:
                async with semaphore:
                    tracked.state = OperationState.RUNNING
                    op_start = time.monotonic()
                    try:
                        operation = ShutdownOperation(
                            tracked.service_name, self.handle_factory, stop_timeout=self.stop_timeout
                        )
                        outcome = await loop.run_in_executor(executor, operation.run)
                    except Exception as e:
                        logger.exception("Shutdown task for '%s' failed", tracked.service_name)
                        outcome = ShutdownOutcome.from_error(
                            tracked.service_name, e, time.monotonic() - op_start
                        )
                    tracked.outcome = outcome
                    tracked.state = OperationState.COMPLETED
                    result.outcomes.append(outcome)

            await asyncio.gather(*(run_with_semaphore(tracked) for tracked in self.operations))

        result.elapsed = time.monotonic() - start
        logger.info(
            "Shutdown completed: %d of %d services succeeded in %.3fs",
            result.total_succeeded,
            result.total_attempted,
            result.elapsed,
        )
        return result

    def run_sync(self, service_names: Iterable[str]) -> AggregateResult:
        """Blocking wrapper around :meth:`run` for synchronous callers."""
        return asyncio.run(self.run(service_names))
