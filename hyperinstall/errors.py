"""Exceptions raised while fingerprinting and installing workspace packages."""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "ConfigExistsError",
    "ConfigInvalidError",
    "HyperinstallError",
    "InstallError",
    "LocalDependencyError",
    "LockfileError",
    "ManifestError",
    "SettingsInvalidError",
    "StateInvalidError",
]


class HyperinstallError(RuntimeError):
    """Base class for every fatal error raised during a run."""


class ConfigInvalidError(HyperinstallError):
    """Raised when the package list exists but cannot be parsed."""


class SettingsInvalidError(HyperinstallError):
    """Raised when ``.hyperinstall.toml`` cannot be parsed."""


class ConfigExistsError(HyperinstallError):
    """Raised when ``init`` would overwrite an existing package list."""


class StateInvalidError(HyperinstallError):
    """Raised when the installation state file is corrupt."""


class ManifestError(HyperinstallError):
    """Raised when a package manifest is missing or malformed."""


class LockfileError(HyperinstallError):
    """Raised when a lockfile exists but is not valid JSON."""


class LocalDependencyError(HyperinstallError):
    """Raised when a local dependency points at a path that does not exist."""


class InstallError(HyperinstallError):
    """Raised when the external install command fails."""

    def __init__(self, package: str, path: Path, exit_code: int | None, detail: str | None = None):
        self.package = package
        self.path = path
        self.exit_code = exit_code
        if detail is None:
            detail = f"exited with status {exit_code}"
        super().__init__(f'Installing "{package}" in {path} failed: {detail}')
