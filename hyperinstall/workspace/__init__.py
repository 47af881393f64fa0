"""Workspace package list and installation state."""

from .equality import structurally_equal
from .package_list import PackageDescriptor, create_package_list, read_package_list
from .state import InstallationState, PackageFingerprint, StateStore

__all__ = [
    "InstallationState",
    "PackageDescriptor",
    "PackageFingerprint",
    "StateStore",
    "create_package_list",
    "read_package_list",
    "structurally_equal",
]
