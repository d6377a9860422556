"""
Checks run by the CLI before any service is touched.
"""

import ctypes
import logging
import os
import shutil
import sys
from typing import List, Optional

logger = logging.getLogger(__name__)

# Tool each supported platform needs on PATH
REQUIRED_TOOLS = {
    "win32": "sc.exe",
    "linux": "systemctl",
}


def is_admin() -> bool:
    """Whether the current process runs with administrator/root privileges."""
    if sys.platform == "win32":
        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except (AttributeError, OSError) as e:
            logger.warning("Could not determine administrator status: %s", e)
            return False
    return os.geteuid() == 0


def check_platform(platform: Optional[str] = None) -> List[str]:
    """
    Verify the host has a supported service manager.

    Returns:
        A list of problems; empty when the platform is supported.
    """
    platform = platform or sys.platform
    tool = REQUIRED_TOOLS.get(platform)
    if tool is None:
        return [f"Platform '{platform}' is not supported."]
    if shutil.which(tool) is None:
        return [f"'{tool}' was not found on PATH."]
    return []


def run_preflight(require_admin: bool = True) -> List[str]:
    """Run all prechecks and return the problems found."""
    problems = check_platform()
    if require_admin and not is_admin():
        problems.append("Please run the program as administrator.")
    for problem in problems:
        logger.error(problem)
    return problems
