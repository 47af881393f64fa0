"""Drive a full install pass over every declared workspace package."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from hyperinstall.config import CACHE_BREAKER, HyperinstallSettings
from hyperinstall.fingerprint import FingerprintEngine
from hyperinstall.runner.detector import needs_update
from hyperinstall.runner.installer import InstallCoordinator
from hyperinstall.workspace import (
    InstallationState,
    PackageDescriptor,
    PackageFingerprint,
    StateStore,
    create_package_list,
    read_package_list,
    structurally_equal,
)

__all__ = ["Hyperinstall", "InstallReport", "merge_state"]

logger = logging.getLogger("hyperinstall.runner")


@dataclass(slots=True)
class InstallReport:
    """Outcome of one install pass."""

    updated: dict[str, PackageFingerprint] = field(default_factory=dict)
    full_reset: bool = False

    @property
    def updated_packages(self) -> list[str]:
        return list(self.updated)

    def summary_lines(self) -> list[str]:
        if not self.updated:
            return []
        count = len(self.updated)
        noun = "package" if count == 1 else "packages"
        return [f"Updated {count} {noun}:", *(f"  {name}" for name in self.updated)]


def merge_state(
    previous: InstallationState,
    declared: list[PackageDescriptor],
    updated: Mapping[str, PackageFingerprint],
    *,
    cache_breaker: Any,
) -> InstallationState:
    """Carry over entries for declared packages, replace updated ones, drop the rest."""

    names = {package.name for package in declared}
    packages = {name: entry for name, entry in previous.packages.items() if name in names}
    packages.update(updated)
    return InstallationState(cache_breaker=cache_breaker, packages=packages)


class Hyperinstall:
    """Reinstall only the workspace packages whose inputs changed."""

    def __init__(
        self,
        settings: HyperinstallSettings,
        *,
        cache_breaker: Any = CACHE_BREAKER,
    ) -> None:
        self.settings = settings
        self.cache_breaker = cache_breaker
        self.state_store = StateStore(settings.state_path)
        self.engine = FingerprintEngine(settings)

    def create_package_list(self) -> Path:
        return create_package_list(self.settings.config_path)

    def clean(self) -> bool:
        """Forget every recorded install so the next run reinstalls everything."""

        removed = self.state_store.clear()
        logger.info(
            "Removed installation state" if removed else "No installation state to remove",
            extra={"state_path": str(self.settings.state_path)},
        )
        return removed

    async def install(self, *, force: bool = False) -> InstallReport:
        state, packages = await asyncio.gather(
            asyncio.to_thread(self.state_store.load),
            asyncio.to_thread(read_package_list, self.settings.config_path),
        )
        # One coordinator (and lock) per run, bound to the running event loop.
        coordinator = InstallCoordinator(self.settings)
        report = InstallReport()

        if not structurally_equal(state.cache_breaker, self.cache_breaker):
            report.full_reset = True
            logger.debug(
                "Schema token changed; reinstalling every package",
                extra={"recorded": state.cache_breaker, "current": self.cache_breaker},
            )
            results = await asyncio.gather(
                *(self._reinstall(coordinator, package) for package in packages)
            )
        else:
            results = await asyncio.gather(
                *(
                    self._update_if_needed(coordinator, package, state, force=force)
                    for package in packages
                )
            )

        for package, fingerprint in zip(packages, results, strict=True):
            if fingerprint is not None:
                report.updated[package.name] = fingerprint

        new_state = merge_state(state, packages, report.updated, cache_breaker=self.cache_breaker)
        await asyncio.to_thread(self.state_store.save, new_state)

        logger.debug(
            "Install pass finished",
            extra={"updated": report.updated_packages, "declared": len(packages)},
        )
        return report

    async def _reinstall(
        self, coordinator: InstallCoordinator, package: PackageDescriptor
    ) -> PackageFingerprint:
        fingerprint = await self.engine.fingerprint(package)
        return await coordinator.install(package.name, fingerprint)

    async def _update_if_needed(
        self,
        coordinator: InstallCoordinator,
        package: PackageDescriptor,
        state: InstallationState,
        *,
        force: bool,
    ) -> PackageFingerprint | None:
        fingerprint = await self.engine.fingerprint(package)
        if force:
            return await coordinator.force_reinstall(package.name, fingerprint)
        recorded = state.packages.get(package.name)
        if needs_update(
            fingerprint,
            recorded,
            reinstall_on_matching_lockfile=self.settings.reinstall_on_matching_lockfile,
        ):
            return await coordinator.install(package.name, fingerprint)
        logger.debug("Package %s is up to date", package.name, extra={"package": package.name})
        return None
