"""Shared pytest fixtures."""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest

from hyperinstall.config import HyperinstallSettings

_RECORD_SCRIPT = (
    "import os, sys\n"
    "with open(sys.argv[1], 'a', encoding='utf-8') as handle:\n"
    "    handle.write(os.getcwd() + '\\n')\n"
    "sys.exit(int(sys.argv[2]))\n"
)


def write_json(path: Path, payload: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


def write_package(
    root: Path,
    name: str,
    *,
    dependencies: Mapping[str, str] | None = None,
    dev_dependencies: Mapping[str, str] | None = None,
    shrinkwrap: Any = None,
    extra: Mapping[str, Any] | None = None,
) -> Path:
    package_dir = root / name
    manifest: dict[str, Any] = {"name": Path(name).name, "version": "1.0.0"}
    if dependencies is not None:
        manifest["dependencies"] = dict(dependencies)
    if dev_dependencies is not None:
        manifest["devDependencies"] = dict(dev_dependencies)
    manifest.update(extra or {})
    write_json(package_dir / "package.json", manifest)
    if shrinkwrap is not None:
        write_json(package_dir / "npm-shrinkwrap.json", shrinkwrap)
    return package_dir


def write_config(root: Path, packages: Mapping[str, Any]) -> Path:
    return write_json(root / "hyperinstall.json", dict(packages))


class InstallRecorder:
    """Stand-in package manager that logs the directory it was run from."""

    def __init__(self, log_path: Path, exit_code: int = 0):
        self.log_path = log_path
        self.exit_code = exit_code

    @property
    def command(self) -> tuple[str, ...]:
        return (sys.executable, "-c", _RECORD_SCRIPT, str(self.log_path), str(self.exit_code))

    def calls(self) -> list[Path]:
        if not self.log_path.exists():
            return []
        return [Path(line) for line in self.log_path.read_text("utf-8").splitlines() if line]

    def reset(self) -> None:
        self.log_path.unlink(missing_ok=True)


@pytest.fixture()
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "workspace"
    root.mkdir()
    return root.resolve()


@pytest.fixture()
def recorder(tmp_path: Path) -> InstallRecorder:
    return InstallRecorder(tmp_path / "installs.log")


@pytest.fixture()
def settings(workspace: Path, recorder: InstallRecorder) -> HyperinstallSettings:
    return HyperinstallSettings(root=workspace, install_command=recorder.command)
