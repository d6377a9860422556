"""
Exceptions raised by service controllers and service handles.

Every error carries the service name it concerns and a short ``kind`` tag
that is copied into shutdown outcomes so callers can tell which step failed.
"""

from typing import Optional


class ServiceError(Exception):
    """Base exception for service control errors."""

    kind = "service_error"

    def __init__(self, message: str, service_name: Optional[str] = None):
        super().__init__(message)
        self.service_name = service_name


class ServiceNotFound(ServiceError):
    """The name does not resolve to a registered service."""

    kind = "service_not_found"


class ServiceQueryError(ServiceError):
    """Reading the service state failed (access denied, RPC failure, ...)."""

    kind = "service_query_error"


class StopRejected(ServiceError):
    """The service reports that it cannot be stopped, or refused the request."""

    kind = "stop_rejected"


class StopTimeout(ServiceError):
    """The service did not reach the stopped state in time."""

    kind = "stop_timeout"


class DisableFailed(ServiceError):
    """Changing the startup mode to disabled failed."""

    kind = "disable_failed"


class UnsupportedPlatformError(ServiceError):
    """No service controller backend exists for this platform."""

    kind = "unsupported_platform"
