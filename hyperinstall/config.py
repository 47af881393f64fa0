"""Settings shared by the orchestrator, the fingerprint engine and the CLI."""

from __future__ import annotations

import os
import shlex
import tomllib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from hyperinstall.errors import SettingsInvalidError

__all__ = [
    "CACHE_BREAKER",
    "HyperinstallSettings",
    "load_settings",
]

# Bump to force every package to reinstall after a state format change.
CACHE_BREAKER = 0

_SETTINGS_FILENAME = ".hyperinstall.toml"
_ENV_INSTALL_COMMAND = "HYPERINSTALL_INSTALL_COMMAND"
_ENV_STATE_FILE = "HYPERINSTALL_STATE_FILE"
_ENV_LEGACY_LOCKFILE = "HYPERINSTALL_LEGACY_LOCKFILE_CHECK"


@dataclass(frozen=True, slots=True)
class HyperinstallSettings:
    """Filesystem layout and install behaviour for one workspace."""

    root: Path
    config_filename: str = "hyperinstall.json"
    state_filename: str = ".hyperinstall-state.json"
    manifest_filename: str = "package.json"
    lockfile_filename: str = "npm-shrinkwrap.json"
    modules_dirname: str = "node_modules"
    install_command: tuple[str, ...] = ("npm", "install")
    reinstall_on_matching_lockfile: bool = False

    @property
    def config_path(self) -> Path:
        return self.root / self.config_filename

    @property
    def state_path(self) -> Path:
        return self.root / self.state_filename

    def package_path(self, name: str) -> Path:
        return (self.root / name).resolve()

    def merged(
        self,
        *,
        install_command: Sequence[str] | None = None,
        state_filename: str | None = None,
        reinstall_on_matching_lockfile: bool | None = None,
    ) -> HyperinstallSettings:
        """Return a copy that applies file/env/CLI overrides."""

        return replace(
            self,
            install_command=tuple(install_command) if install_command else self.install_command,
            state_filename=state_filename or self.state_filename,
            reinstall_on_matching_lockfile=(
                self.reinstall_on_matching_lockfile
                if reinstall_on_matching_lockfile is None
                else reinstall_on_matching_lockfile
            ),
        )


def _read_settings_file(root: Path) -> dict[str, Any]:
    path = root / _SETTINGS_FILENAME
    if not path.exists():
        return {}
    try:
        data = tomllib.loads(path.read_text("utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise SettingsInvalidError(f"{path} is not valid TOML: {exc}") from exc
    return dict(data.get("hyperinstall", data))


def _parse_flag(value: str | None) -> bool | None:
    if value is None:
        return None
    return value not in {"", "0", "false", "False", "no"}


def load_settings(
    root: Path | str,
    *,
    environ: Mapping[str, str] | None = None,
) -> HyperinstallSettings:
    """Load settings for ``root`` from ``.hyperinstall.toml`` + environment overrides."""

    root = Path(root).resolve()
    env = os.environ if environ is None else environ
    data = _read_settings_file(root)

    command = data.get("install_command")
    if isinstance(command, str):
        command = shlex.split(command)
    settings = HyperinstallSettings(root=root).merged(
        install_command=command,
        state_filename=data.get("state_file"),
        reinstall_on_matching_lockfile=data.get("reinstall_on_matching_lockfile"),
    )
    if "config_file" in data:
        settings = replace(settings, config_filename=str(data["config_file"]))

    env_command = env.get(_ENV_INSTALL_COMMAND)
    return settings.merged(
        install_command=shlex.split(env_command) if env_command else None,
        state_filename=env.get(_ENV_STATE_FILE),
        reinstall_on_matching_lockfile=_parse_flag(env.get(_ENV_LEGACY_LOCKFILE)),
    )
