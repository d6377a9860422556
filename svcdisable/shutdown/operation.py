"""
Stop-then-disable sequence for a single service.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from svcdisable.services.errors import ServiceError
from svcdisable.services.handle import DEFAULT_STOP_TIMEOUT, ServiceHandle

logger = logging.getLogger(__name__)

HandleFactory = Callable[[str], ServiceHandle]


@dataclass(frozen=True)
class ShutdownOutcome:
    """Result of stopping and disabling one service."""

    service_name: str
    stopped: bool = False
    disabled: bool = False
    error: Optional[str] = None
    error_kind: Optional[str] = None
    elapsed: float = 0.0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def succeeded(self) -> bool:
        return self.stopped and self.disabled

    @property
    def failed_step(self) -> Optional[str]:
        """Which step failed: ``"stop"``, ``"disable"`` or None."""
        if not self.stopped:
            return "stop"
        if not self.disabled:
            return "disable"
        return None

    @classmethod
    def from_error(cls, service_name: str, error: BaseException, elapsed: float = 0.0) -> "ShutdownOutcome":
        """Build a failed outcome from an exception."""
        kind = error.kind if isinstance(error, ServiceError) else "internal_error"
        return cls(
            service_name=service_name,
            error=str(error) or type(error).__name__,
            error_kind=kind,
            elapsed=elapsed,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/output."""
        return {
            'service_name': self.service_name,
            'stopped': self.stopped,
            'disabled': self.disabled,
            'succeeded': self.succeeded,
            'failed_step': self.failed_step,
            'error': self.error,
            'error_kind': self.error_kind,
            'elapsed': round(self.elapsed, 3),
            'timestamp': self.timestamp.isoformat(),
        }


class ShutdownOperation:
    """
    Stops a service and, only if that succeeded, disables it.

    ``run`` always returns a :class:`ShutdownOutcome`; nothing raised by the
    handle layer escapes it.

    Args:
        service_name: Non-empty service name.
        handle_factory: Creates the :class:`ServiceHandle` for the name.
        stop_timeout: Seconds to wait for the service to stop.
    """

    def __init__(
        self,
        service_name: str,
        handle_factory: HandleFactory,
        stop_timeout: float = DEFAULT_STOP_TIMEOUT,
    ):
        if not service_name or not service_name.strip():
            raise ValueError("service_name must be a non-empty string")
        self.service_name = service_name
        self.handle_factory = handle_factory
        self.stop_timeout = stop_timeout

    def run(self) -> ShutdownOutcome:
        start = time.monotonic()
        try:
            handle = self.handle_factory(self.service_name)

            stopped = handle.request_stop(self.stop_timeout)
            # disable is only attempted once the service is confirmed stopped
            disabled = stopped and handle.request_disable()

            error = handle.last_error if not (stopped and disabled) else None
            outcome = ShutdownOutcome(
                service_name=self.service_name,
                stopped=stopped,
                disabled=disabled,
                error=str(error) if error else None,
                error_kind=error.kind if error else None,
                elapsed=time.monotonic() - start,
            )
        except Exception as e:
            logger.exception("Shutdown of '%s' failed unexpectedly", self.service_name)
            outcome = ShutdownOutcome.from_error(self.service_name, e, time.monotonic() - start)

        if outcome.succeeded:
            logger.info("'%s' stopped and disabled in %.3fs", self.service_name, outcome.elapsed)
        else:
            logger.warning(
                "'%s' failed at %s step: %s", self.service_name, outcome.failed_step, outcome.error
            )
        return outcome
