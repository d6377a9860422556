"""
Windows service controller backed by ``sc.exe``.

``sc queryex`` reports the numeric ``STATE`` code and the control flags of a
service; ``sc stop`` sends the stop control and ``sc config ... start=
disabled`` rewrites the startup mode in the service control manager.
"""

import logging
import re
import sys
from typing import Optional

from svcdisable.services.base import CommandResult, ServiceController, ServiceState, ServiceStatus
from svcdisable.services.errors import (
    DisableFailed,
    ServiceNotFound,
    ServiceQueryError,
    StopRejected,
)

logger = logging.getLogger(__name__)

# Win32 error codes returned by the service control manager
ERROR_ACCESS_DENIED = 5
ERROR_DEPENDENT_SERVICES_RUNNING = 1051
ERROR_INVALID_SERVICE_CONTROL = 1052
ERROR_SERVICE_DOES_NOT_EXIST = 1060
ERROR_SERVICE_NOT_ACTIVE = 1062

SC_STATES = {
    1: ServiceState.STOPPED,
    2: ServiceState.START_PENDING,
    3: ServiceState.STOP_PENDING,
    4: ServiceState.RUNNING,
    5: ServiceState.CONTINUE_PENDING,
    6: ServiceState.PAUSE_PENDING,
    7: ServiceState.PAUSED,
}

_STATE_RE = re.compile(r"^\s*STATE\s*:\s*(\d+)", re.MULTILINE)
_FAILED_RE = re.compile(r"FAILED\s+(\d+)")


def parse_error_code(result: CommandResult) -> Optional[int]:
    """Extract the Win32 error code from a failed ``sc`` invocation."""
    match = _FAILED_RE.search(result.output)
    if match:
        return int(match.group(1))
    return result.exit_code or None


def parse_status(service_name: str, output: str) -> ServiceStatus:
    """Parse ``sc queryex`` output into a :class:`ServiceStatus`."""
    match = _STATE_RE.search(output)
    if not match:
        raise ServiceQueryError(f"Unrecognised sc output for '{service_name}'", service_name)
    state = SC_STATES.get(int(match.group(1)), ServiceState.UNKNOWN)
    # sc lists NOT_STOPPABLE for services that do not accept the stop control
    can_stop = "NOT_STOPPABLE" not in output
    return ServiceStatus(name=service_name, state=state, can_stop=can_stop)


class ScController(ServiceController):
    """Service controller for Windows using ``sc.exe``."""

    name = "sc"
    # sc.exe writes localized text in the console OEM code page
    encoding = "oem" if sys.platform == "win32" else "utf-8"

    def __init__(self, command_timeout: float = 30.0, executable: str = "sc.exe"):
        super().__init__(command_timeout)
        self.executable = executable

    def query(self, service_name: str) -> ServiceStatus:
        result = self.run_command(
            [self.executable, "queryex", service_name], service_name, ServiceQueryError
        )
        if not result.success:
            code = parse_error_code(result)
            if code == ERROR_SERVICE_DOES_NOT_EXIST:
                raise ServiceNotFound(f"Service '{service_name}' does not exist", service_name)
            raise ServiceQueryError(
                f"Failed to query '{service_name}' (error {code}): {result.output}", service_name
            )
        return parse_status(service_name, result.stdout)

    def stop(self, service_name: str) -> None:
        result = self.run_command([self.executable, "stop", service_name], service_name, StopRejected)
        if result.success:
            return

        code = parse_error_code(result)
        if code == ERROR_SERVICE_NOT_ACTIVE:
            logger.debug("'%s' was not running when the stop control was sent", service_name)
            return
        if code == ERROR_SERVICE_DOES_NOT_EXIST:
            raise ServiceNotFound(f"Service '{service_name}' does not exist", service_name)
        if code == ERROR_DEPENDENT_SERVICES_RUNNING:
            raise StopRejected(f"'{service_name}' has running dependent services", service_name)
        if code == ERROR_INVALID_SERVICE_CONTROL:
            raise StopRejected(f"'{service_name}' does not accept the stop control", service_name)
        raise StopRejected(f"Failed to stop '{service_name}' (error {code}): {result.output}", service_name)

    def disable(self, service_name: str) -> None:
        # sc requires the space after "start="
        result = self.run_command(
            [self.executable, "config", service_name, "start=", "disabled"], service_name, DisableFailed
        )
        if result.success:
            return

        code = parse_error_code(result)
        if code == ERROR_SERVICE_DOES_NOT_EXIST:
            raise ServiceNotFound(f"Service '{service_name}' does not exist", service_name)
        if code == ERROR_ACCESS_DENIED:
            raise DisableFailed(f"Access denied while disabling '{service_name}'", service_name)
        raise DisableFailed(f"Failed to disable '{service_name}' (error {code}): {result.output}", service_name)
