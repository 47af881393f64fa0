"""Change detection and serialized installs for workspace packages."""

from .detector import needs_update
from .installer import InstallCoordinator
from .orchestrator import Hyperinstall, InstallReport, merge_state

__all__ = [
    "Hyperinstall",
    "InstallCoordinator",
    "InstallReport",
    "merge_state",
    "needs_update",
]
