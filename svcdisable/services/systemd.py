"""
Linux service controller backed by ``systemctl``.
"""

import logging
from typing import Dict

from svcdisable.services.base import ServiceController, ServiceState, ServiceStatus
from svcdisable.services.errors import (
    DisableFailed,
    ServiceNotFound,
    ServiceQueryError,
    StopRejected,
)

logger = logging.getLogger(__name__)

ACTIVE_STATES = {
    "active": ServiceState.RUNNING,
    "reloading": ServiceState.RUNNING,
    "activating": ServiceState.START_PENDING,
    "deactivating": ServiceState.STOP_PENDING,
    "inactive": ServiceState.STOPPED,
    "failed": ServiceState.STOPPED,
}


def unit_name(service_name: str) -> str:
    """Append ``.service`` unless the name already carries a unit suffix."""
    if "." in service_name:
        return service_name
    return f"{service_name}.service"


def parse_properties(output: str) -> Dict[str, str]:
    """Parse ``systemctl show`` ``Key=Value`` lines."""
    properties = {}
    for line in output.splitlines():
        key, sep, value = line.partition("=")
        if sep:
            properties[key.strip()] = value.strip()
    return properties


class SystemdController(ServiceController):
    """Service controller for systemd hosts."""

    name = "systemd"

    def __init__(self, command_timeout: float = 30.0, executable: str = "systemctl"):
        super().__init__(command_timeout)
        self.executable = executable

    def query(self, service_name: str) -> ServiceStatus:
        unit = unit_name(service_name)
        result = self.run_command(
            [self.executable, "show", unit, "--property=LoadState,ActiveState,CanStop", "--no-pager"],
            service_name,
            ServiceQueryError,
        )
        if not result.success:
            raise ServiceQueryError(f"Failed to query '{unit}': {result.output}", service_name)

        properties = parse_properties(result.stdout)
        if properties.get("LoadState") == "not-found":
            raise ServiceNotFound(f"Unit '{unit}' not found", service_name)

        state = ACTIVE_STATES.get(properties.get("ActiveState", ""), ServiceState.UNKNOWN)
        can_stop = properties.get("CanStop", "yes") == "yes"
        return ServiceStatus(name=service_name, state=state, can_stop=can_stop)

    def stop(self, service_name: str) -> None:
        # --no-block leaves the wait to the caller's own timeout
        unit = unit_name(service_name)
        result = self.run_command(
            [self.executable, "stop", "--no-block", unit], service_name, StopRejected
        )
        if not result.success:
            if "not loaded" in result.output or "not found" in result.output:
                raise ServiceNotFound(f"Unit '{unit}' not found", service_name)
            raise StopRejected(f"Failed to stop '{unit}': {result.output}", service_name)

    def disable(self, service_name: str) -> None:
        unit = unit_name(service_name)
        result = self.run_command([self.executable, "disable", unit], service_name, DisableFailed)
        if not result.success:
            if "does not exist" in result.output or "not found" in result.output:
                raise ServiceNotFound(f"Unit '{unit}' not found", service_name)
            raise DisableFailed(f"Failed to disable '{unit}': {result.output}", service_name)
