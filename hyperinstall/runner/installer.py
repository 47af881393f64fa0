"""Serialize external install invocations behind one lock."""

from __future__ import annotations

import asyncio
import logging
import shlex
import shutil
from collections.abc import Sequence
from pathlib import Path

from hyperinstall.config import HyperinstallSettings
from hyperinstall.errors import InstallError
from hyperinstall.workspace import PackageFingerprint

__all__ = ["InstallCoordinator"]

logger = logging.getLogger("hyperinstall.runner.install")


class InstallCoordinator:
    """Run the package manager for one package at a time.

    Fingerprinting happens concurrently across packages, but only one install
    subprocess may be active at any instant.
    """

    def __init__(self, settings: HyperinstallSettings) -> None:
        self.settings = settings
        self._lock = asyncio.Lock()

    @property
    def command(self) -> Sequence[str]:
        return self.settings.install_command

    async def install(self, name: str, fingerprint: PackageFingerprint) -> PackageFingerprint:
        """Install ``name`` and return the fingerprint to record for it."""

        package_path = self.settings.package_path(name)
        async with self._lock:
            logger.info(
                'Package "%s" has been updated; installing...',
                name,
                extra={"package": name, "path": str(package_path)},
            )
            exit_code = await self._run_command(name, package_path)
            if exit_code != 0:
                raise InstallError(name, package_path, exit_code)
            logger.info('Finished installing "%s"', name, extra={"package": name})
        return fingerprint

    async def force_reinstall(
        self, name: str, fingerprint: PackageFingerprint
    ) -> PackageFingerprint:
        await self.remove_modules_dir(name)
        return await self.install(name, fingerprint)

    async def remove_modules_dir(self, name: str) -> Path:
        modules_path = self.settings.package_path(name) / self.settings.modules_dirname
        try:
            await asyncio.to_thread(shutil.rmtree, modules_path)
        except FileNotFoundError:
            pass
        logger.info(
            'Removed %s for "%s"',
            self.settings.modules_dirname,
            name,
            extra={"package": name, "path": str(modules_path)},
        )
        return modules_path

    # ------------------------------------------------------------------ helpers
    async def _run_command(self, name: str, cwd: Path) -> int:
        argv = list(self.command)
        logger.debug("Running %s in %s", shlex.join(argv), cwd)
        try:
            # stdio is inherited so the package manager talks straight to the terminal.
            process = await asyncio.create_subprocess_exec(*argv, cwd=str(cwd))
        except OSError as exc:
            raise InstallError(name, cwd, None, f"could not start {argv[0]!r}: {exc}") from exc
        return await process.wait()
