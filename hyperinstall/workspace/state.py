"""Persisted installation state: the last recorded fingerprint per package."""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from hyperinstall.errors import StateInvalidError
from hyperinstall.workspace.jsonfile import parse_json

__all__ = [
    "InstallationState",
    "PackageFingerprint",
    "StateStore",
]


@dataclass(frozen=True, slots=True)
class PackageFingerprint:
    """Everything that decides whether a package needs a fresh install."""

    dependencies: dict[str, str]
    unversioned_dependency_checksums: dict[str, str] = field(default_factory=dict)
    shrinkwrap: Any = None
    cache_breaker: Any = None

    def with_cache_breaker(self, cache_breaker: Any) -> PackageFingerprint:
        return replace(self, cache_breaker=cache_breaker)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "dependencies": dict(self.dependencies),
            "unversionedDependencyChecksums": dict(self.unversioned_dependency_checksums),
            "cacheBreaker": self.cache_breaker,
        }
        # An absent lockfile is omitted rather than written as null.
        if self.shrinkwrap is not None:
            payload["shrinkwrap"] = self.shrinkwrap
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> PackageFingerprint:
        dependencies = payload.get("dependencies", {})
        checksums = payload.get("unversionedDependencyChecksums", {})
        if not isinstance(dependencies, dict) or not isinstance(checksums, dict):
            raise StateInvalidError("Package entries must hold dependency mappings")
        return cls(
            dependencies=dict(dependencies),
            unversioned_dependency_checksums=dict(checksums),
            shrinkwrap=payload.get("shrinkwrap"),
            cache_breaker=payload.get("cacheBreaker"),
        )


@dataclass(slots=True)
class InstallationState:
    """The single durable record of a workspace's installs."""

    cache_breaker: Any = None
    packages: dict[str, PackageFingerprint] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "cacheBreaker": self.cache_breaker,
            "packages": {name: entry.to_dict() for name, entry in self.packages.items()},
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> InstallationState:
        raw_packages = payload.get("packages", {})
        if not isinstance(raw_packages, dict):
            raise StateInvalidError("'packages' must be a JSON object")
        packages: dict[str, PackageFingerprint] = {}
        for name, entry in raw_packages.items():
            if not isinstance(entry, dict):
                raise StateInvalidError(f"State entry for {name!r} must be a JSON object")
            packages[name] = PackageFingerprint.from_dict(entry)
        return cls(cache_breaker=payload.get("cacheBreaker"), packages=packages)


class StateStore:
    """Load and persist :class:`InstallationState` as one JSON document."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> InstallationState:
        try:
            contents = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return InstallationState()
        data = parse_json(contents, source=self.path, error=StateInvalidError)
        if not isinstance(data, dict):
            raise StateInvalidError(f"{self.path} must contain a JSON object")
        return InstallationState.from_dict(data)

    def save(self, state: InstallationState) -> None:
        contents = json.dumps(state.to_dict(), indent=2, sort_keys=True, allow_nan=False) + "\n"
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(contents)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def clear(self) -> bool:
        """Delete the state file; return ``False`` when there was nothing to delete."""

        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        return True
