"""Compute the composite fingerprint of one workspace package."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from hyperinstall.config import HyperinstallSettings
from hyperinstall.errors import LockfileError, ManifestError
from hyperinstall.fingerprint.checksum import compute_checksum
from hyperinstall.fingerprint.specifiers import filter_local_dependencies
from hyperinstall.workspace import PackageDescriptor, PackageFingerprint
from hyperinstall.workspace.jsonfile import parse_json

__all__ = ["FingerprintEngine", "merge_dependencies"]

_DEPENDENCY_FIELDS = ("dependencies", "devDependencies")


def merge_dependencies(manifest: dict[str, Any], *, source: Path | None = None) -> dict[str, str]:
    """Merge regular then development dependencies; dev entries win on collision."""

    merged: dict[str, str] = {}
    for field_name in _DEPENDENCY_FIELDS:
        section = manifest.get(field_name)
        if section is None:
            continue
        if not isinstance(section, dict) or not all(
            isinstance(value, str) for value in section.values()
        ):
            location = source or "manifest"
            raise ManifestError(f"'{field_name}' in {location} must map names to version strings")
        merged.update(section)
    return merged


class FingerprintEngine:
    """Read a package's manifest, lockfile and local dependencies into a fingerprint."""

    def __init__(self, settings: HyperinstallSettings) -> None:
        self.settings = settings

    def package_path(self, name: str) -> Path:
        return self.settings.package_path(name)

    async def manifest(self, name: str) -> dict[str, str]:
        path = self.package_path(name) / self.settings.manifest_filename
        try:
            contents = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError as exc:
            raise ManifestError(f'Package "{name}" has no {path.name} at {path}') from exc
        data = parse_json(contents, source=path, error=ManifestError)
        if not isinstance(data, dict):
            raise ManifestError(f"{path} must contain a JSON object")
        return merge_dependencies(data, source=path)

    def local_dependencies(self, name: str, manifest: dict[str, str]) -> dict[str, Path]:
        return filter_local_dependencies(manifest, self.package_path(name))

    async def checksum(self, path: Path) -> str:
        return await compute_checksum(path)

    async def shrinkwrap(self, name: str) -> Any:
        """Return the parsed lockfile, ``""`` for a blank one, ``None`` when absent."""

        path = self.package_path(name) / self.settings.lockfile_filename
        try:
            contents = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return None
        if not contents.strip():
            return ""
        return parse_json(contents, source=path, error=LockfileError)

    async def unversioned_dependency_checksums(
        self, name: str, manifest: dict[str, str]
    ) -> dict[str, str]:
        local = self.local_dependencies(name, manifest)
        checksums = await asyncio.gather(*(self.checksum(path) for path in local.values()))
        return dict(zip(local, checksums, strict=True))

    async def fingerprint(self, package: PackageDescriptor) -> PackageFingerprint:
        dependencies, shrinkwrap = await asyncio.gather(
            self.manifest(package.name),
            self.shrinkwrap(package.name),
        )
        checksums = await self.unversioned_dependency_checksums(package.name, dependencies)
        return PackageFingerprint(
            dependencies=dependencies,
            unversioned_dependency_checksums=checksums,
            shrinkwrap=shrinkwrap,
            cache_breaker=package.cache_breaker,
        )
