"""
Service handle: stop and disable requests against one named service.

The handle turns controller primitives into the blocking operations a
shutdown needs. ``request_stop`` and ``request_disable`` never raise: every
failure is logged, kept in ``last_error`` and reported as ``False``.
"""

import logging
import time
from typing import Optional

from svcdisable.services.base import ServiceController, ServiceState, ServiceStatus
from svcdisable.services.errors import (
    DisableFailed,
    ServiceError,
    ServiceQueryError,
    StopRejected,
    StopTimeout,
)

logger = logging.getLogger(__name__)

DEFAULT_STOP_TIMEOUT = 10.0
DEFAULT_POLL_INTERVAL = 0.25


class ServiceHandle:
    """
    A single OS service addressed by name.

    Args:
        name: Service name as known to the service manager.
        controller: Backend used to talk to the service manager.
        poll_interval: Seconds between state checks while waiting for a stop.
    """

    def __init__(
        self,
        name: str,
        controller: ServiceController,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self.name = name
        self.controller = controller
        self.poll_interval = poll_interval
        self.last_error: Optional[ServiceError] = None

    def status(self) -> ServiceStatus:
        """Query the full status snapshot. Raises on failure."""
        return self.controller.query(self.name)

    def query_state(self) -> ServiceState:
        """
        Return the current lifecycle state.

        Raises:
            ServiceNotFound: If the name does not resolve to a service.
            ServiceQueryError: On any other failure.
        """
        return self.status().state

    def request_stop(self, timeout: float = DEFAULT_STOP_TIMEOUT) -> bool:
        """
        Stop the service and wait for it to reach the stopped state.

        Already stopped services are left alone. Services flagged as not
        stoppable are rejected without sending a stop request.

        Args:
            timeout: Seconds to wait for the stopped state.

        Returns:
            True if the service was observed stopped when the wait ended.
        """
        try:
            status = self.status()
            logger.info("'%s' service is currently in '%s' state.", self.name, status.state.value)

            if status.state is ServiceState.STOPPED:
                logger.info("Skipping '%s' service as it is already stopped.", self.name)
                return True

            if not status.can_stop:
                raise StopRejected(f"'{self.name}' service can't be stopped.", self.name)

            logger.info("Trying to stop '%s' service...", self.name)
            self.controller.stop(self.name)

            if self._wait_for_state(ServiceState.STOPPED, timeout):
                logger.info("'%s' service has been stopped.", self.name)
                return True

            raise StopTimeout(
                f"'{self.name}' service did not stop within {timeout:g}s", self.name
            )

        except ServiceError as e:
            self._record(e)
            return False
        except Exception as e:
            logger.exception("Unexpected error while stopping '%s'", self.name)
            self._record(ServiceError(f"Unexpected error while stopping '{self.name}': {e}", self.name))
            return False

    def request_disable(self) -> bool:
        """
        Set the startup mode of the service to disabled.

        Returns:
            True if the configuration change was accepted.
        """
        logger.info("Trying to disable '%s' service...", self.name)
        try:
            self.controller.disable(self.name)
        except ServiceError as e:
            self._record(e)
            logger.error("Failed to disable '%s' service.", self.name)
            return False
        except Exception as e:
            logger.exception("Unexpected error while disabling '%s'", self.name)
            self._record(DisableFailed(f"Unexpected error while disabling '{self.name}': {e}", self.name))
            return False

        logger.info("'%s' service disabled successfully.", self.name)
        return True

    def _wait_for_state(self, target: ServiceState, timeout: float) -> bool:
        deadline = time.monotonic() + timeout
        while True:
            state = self.query_state()
            if state is target:
                return True

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.debug("'%s' still in '%s' after %.1fs", self.name, state.value, timeout)
                return False
            time.sleep(min(self.poll_interval, remaining))

    def _record(self, error: ServiceError) -> None:
        if error.service_name is None:
            error.service_name = self.name
        self.last_error = error
        if isinstance(error, (StopTimeout, ServiceQueryError)):
            logger.error("%s", error)
        else:
            logger.warning("%s", error)
