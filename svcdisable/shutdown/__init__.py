"""
Shutdown orchestration for svcdisable.

Stops and disables services concurrently under a concurrency cap and
reports a per-service outcome plus an aggregate tally.
"""

from svcdisable.shutdown.operation import ShutdownOperation, ShutdownOutcome
from svcdisable.shutdown.orchestrator import (
    AggregateResult,
    OperationState,
    Orchestrator,
    TrackedOperation,
)

__all__ = [
    "AggregateResult",
    "OperationState",
    "Orchestrator",
    "ShutdownOperation",
    "ShutdownOutcome",
    "TrackedOperation",
]
