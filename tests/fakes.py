"""
In-memory service manager used by the test suite.
"""

import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from svcdisable.services.base import ServiceController, ServiceState, ServiceStatus
from svcdisable.services.errors import ServiceError, ServiceNotFound


@dataclass
class FakeService:
    """Scripted behaviour for one service in a FakeController."""

    state: ServiceState = ServiceState.RUNNING
    can_stop: bool = True
    # "stop": reaches STOPPED, "hang": never stops
    stop_behavior: str = "stop"
    # queries answered with STOP_PENDING before reporting STOPPED
    pending_polls: int = 0
    query_error: Optional[ServiceError] = None
    stop_error: Optional[Exception] = None
    disable_error: Optional[Exception] = None
    disabled: bool = False


class FakeController(ServiceController):
    """In-memory service manager recording every call."""

    name = "fake"

    def __init__(self, services: Optional[Dict[str, FakeService]] = None, command_timeout: float = 1.0):
        super().__init__(command_timeout=command_timeout)
        self.services: Dict[str, FakeService] = services or {}
        self.calls: List[Tuple[str, str]] = []
        self._lock = threading.Lock()

    def _record(self, method: str, service_name: str) -> None:
        with self._lock:
            self.calls.append((method, service_name))

    def calls_for(self, method: str) -> List[str]:
        return [name for called, name in self.calls if called == method]

    def _get(self, service_name: str) -> FakeService:
        service = self.services.get(service_name)
        if service is None:
            raise ServiceNotFound(f"Service '{service_name}' does not exist", service_name)
        return service

    def query(self, service_name: str) -> ServiceStatus:
        self._record("query", service_name)
        service = self._get(service_name)
        if service.query_error:
            raise service.query_error
        with self._lock:
            if service.state is ServiceState.STOP_PENDING:
                if service.pending_polls > 0:
                    service.pending_polls -= 1
                elif service.stop_behavior == "stop":
                    service.state = ServiceState.STOPPED
        return ServiceStatus(name=service_name, state=service.state, can_stop=service.can_stop)

    def stop(self, service_name: str) -> None:
        self._record("stop", service_name)
        service = self._get(service_name)
        if service.stop_error:
            raise service.stop_error
        with self._lock:
            if service.stop_behavior == "hang":
                service.state = ServiceState.STOP_PENDING
            elif service.pending_polls > 0:
                service.state = ServiceState.STOP_PENDING
            else:
                service.state = ServiceState.STOPPED

    def disable(self, service_name: str) -> None:
        self._record("disable", service_name)
        service = self._get(service_name)
        if service.disable_error:
            raise service.disable_error
        service.disabled = True
