from __future__ import annotations

import json
import shlex
from pathlib import Path

from click.testing import CliRunner

from hyperinstall.cli.main import app
from tests.conftest import InstallRecorder, write_config, write_package


def _invoke(workspace: Path, recorder: InstallRecorder, *args: str):
    runner = CliRunner()
    return runner.invoke(
        app,
        [
            "--root",
            str(workspace),
            "--install-command",
            shlex.join(recorder.command),
            *args,
        ],
    )


def test_install_prints_summary_once(workspace: Path, recorder: InstallRecorder) -> None:
    write_package(workspace, "pkgA")
    write_config(workspace, {"pkgA": 1})

    result = _invoke(workspace, recorder, "install")
    assert result.exit_code == 0, result.output
    assert "Updated 1 package:\n  pkgA\n" in result.output

    result = _invoke(workspace, recorder, "install")
    assert result.exit_code == 0, result.output
    assert "Updated" not in result.output
    assert len(recorder.calls()) == 1


def test_install_force(workspace: Path, recorder: InstallRecorder) -> None:
    write_package(workspace, "pkgA")
    write_config(workspace, {"pkgA": 1})
    _invoke(workspace, recorder, "install")

    result = _invoke(workspace, recorder, "install", "--force")
    assert result.exit_code == 0, result.output
    assert "  pkgA" in result.output
    assert len(recorder.calls()) == 2


def test_install_failure_reports_error(workspace: Path, tmp_path: Path) -> None:
    write_package(workspace, "pkgA")
    write_config(workspace, {"pkgA": 1})
    failing = InstallRecorder(tmp_path / "failing.log", exit_code=2)

    result = _invoke(workspace, failing, "install")
    assert result.exit_code == 1
    assert 'Installing "pkgA"' in result.output
    assert not (workspace / ".hyperinstall-state.json").exists()


def test_clean_removes_state(workspace: Path, recorder: InstallRecorder) -> None:
    write_package(workspace, "pkgA")
    write_config(workspace, {"pkgA": 1})
    _invoke(workspace, recorder, "install")
    state_path = workspace / ".hyperinstall-state.json"
    assert state_path.exists()

    result = _invoke(workspace, recorder, "clean")
    assert result.exit_code == 0, result.output
    assert not state_path.exists()

    result = _invoke(workspace, recorder, "clean")
    assert result.exit_code == 0, result.output


def test_init_creates_empty_package_list(workspace: Path, recorder: InstallRecorder) -> None:
    result = _invoke(workspace, recorder, "init")
    assert result.exit_code == 0, result.output
    assert json.loads((workspace / "hyperinstall.json").read_text(encoding="utf-8")) == {}

    result = _invoke(workspace, recorder, "init")
    assert result.exit_code == 1
    assert "already exists" in result.output


def test_malformed_settings_file_reports_error(workspace: Path, recorder: InstallRecorder) -> None:
    (workspace / ".hyperinstall.toml").write_text("install_command = [", encoding="utf-8")

    result = _invoke(workspace, recorder, "install")
    assert result.exit_code == 1
    assert "not valid TOML" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)
