"""
Service handles and OS service manager backends.
"""

from svcdisable.services.base import ServiceController, ServiceState, ServiceStatus
from svcdisable.services.errors import (
    DisableFailed,
    ServiceError,
    ServiceNotFound,
    ServiceQueryError,
    StopRejected,
    StopTimeout,
    UnsupportedPlatformError,
)
from svcdisable.services.handle import ServiceHandle
from svcdisable.services.registry import get_controller

__all__ = [
    "DisableFailed",
    "ServiceController",
    "ServiceError",
    "ServiceHandle",
    "ServiceNotFound",
    "ServiceQueryError",
    "ServiceState",
    "ServiceStatus",
    "StopRejected",
    "StopTimeout",
    "UnsupportedPlatformError",
    "get_controller",
]
