"""
Base types for service controller backends.

A controller is a thin adapter over the operating system's service manager
(``sc.exe`` on Windows, ``systemctl`` on Linux). It exposes the primitives a
:class:`~svcdisable.services.handle.ServiceHandle` composes into stop and
disable requests, and raises :mod:`svcdisable.services.errors` exceptions on
failure.
"""

import logging
import subprocess
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Type

from svcdisable.services.errors import ServiceError

logger = logging.getLogger(__name__)


class ServiceState(Enum):
    """Lifecycle state reported by the service manager."""
    STOPPED = "stopped"
    START_PENDING = "start_pending"
    STOP_PENDING = "stop_pending"
    RUNNING = "running"
    CONTINUE_PENDING = "continue_pending"
    PAUSE_PENDING = "pause_pending"
    PAUSED = "paused"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ServiceStatus:
    """Point-in-time snapshot of a service."""

    name: str
    state: ServiceState
    can_stop: bool = True


@dataclass
class CommandResult:
    """Result of a service manager command."""

    args: List[str]
    exit_code: int
    stdout: str
    stderr: str
    execution_time: float

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr."""
        if self.stderr:
            return f"{self.stdout}\n{self.stderr}".strip()
        return self.stdout.strip()


class ServiceController(ABC):
    """Abstract service manager backend."""

    name: str = "base"
    # encoding of the tool output; undecodable bytes are replaced
    encoding: str = "utf-8"

    def __init__(self, command_timeout: float = 30.0):
        self.command_timeout = command_timeout

    @abstractmethod
    def query(self, service_name: str) -> ServiceStatus:
        """
        Read the current status of a service.

        Raises:
            ServiceNotFound: If the service is not registered.
            ServiceQueryError: On any other failure.
        """

    @abstractmethod
    def stop(self, service_name: str) -> None:
        """
        Ask the service manager to stop a service without waiting for it.

        Raises:
            StopRejected: If the request is refused.
        """

    @abstractmethod
    def disable(self, service_name: str) -> None:
        """
        Set the startup mode of a service to disabled.

        Raises:
            DisableFailed: If the configuration change fails.
        """

    def run_command(
        self,
        args: Sequence[str],
        service_name: str,
        error_cls: Type[ServiceError],
        timeout: Optional[float] = None,
    ) -> CommandResult:
        """
        Run a service manager command and capture its output.

        Failure to launch the tool or a timeout is raised as ``error_cls``;
        a non-zero exit code is returned to the caller for interpretation.
        """
        timeout = self.command_timeout if timeout is None else timeout
        start = time.monotonic()
        logger.debug("Running %s", " ".join(args))
        try:
            completed = subprocess.run(
                list(args),
                capture_output=True,
                text=True,
                encoding=self.encoding,
                errors="replace",
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise error_cls(
                f"'{args[0]}' timed out after {timeout}s for '{service_name}'", service_name
            ) from e
        except OSError as e:
            raise error_cls(f"Failed to run '{args[0]}': {e}", service_name) from e

        result = CommandResult(
            args=list(args),
            exit_code=completed.returncode,
            stdout=(completed.stdout or "").strip(),
            stderr=(completed.stderr or "").strip(),
            execution_time=time.monotonic() - start,
        )
        logger.debug("%s exited with %d in %.3fs", args[0], result.exit_code, result.execution_time)
        return result
