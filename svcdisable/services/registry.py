"""
Service controller registry.

Maps platform names to controller backends so callers can pick the right
one for the host they are running on.
"""
import logging
import sys
from typing import Dict, Optional, Type

from .base import ServiceController
from .errors import UnsupportedPlatformError
from .sc import ScController
from .systemd import SystemdController

logger = logging.getLogger(__name__)

REGISTRY: Dict[str, Type[ServiceController]] = {
    "win32": ScController,
    "linux": SystemdController,
}


def register(platform: str, cls: Type[ServiceController]) -> None:
    """Registers a controller class for a platform."""
    if platform in REGISTRY:
        logger.warning(f"Service controller for '{platform}' is being overridden.")
    REGISTRY[platform] = cls


def get_controller(platform: Optional[str] = None, command_timeout: float = 30.0) -> ServiceController:
    """
    Create the service controller for a platform.

    Args:
        platform: A ``sys.platform`` value; defaults to the running platform.
        command_timeout: Timeout applied to each service manager command.

    Raises:
        UnsupportedPlatformError: If no backend is registered for the platform.
    """
    platform = platform or sys.platform
    controller_class = REGISTRY.get(platform)
    if controller_class is None:
        raise UnsupportedPlatformError(f"No service controller available for platform '{platform}'")
    logger.debug("Using %s service controller for %s", controller_class.name, platform)
    return controller_class(command_timeout=command_timeout)
