"""Tests for the reinstall decision."""

from __future__ import annotations

from dataclasses import replace

import pytest

from hyperinstall.runner import needs_update
from hyperinstall.workspace import PackageFingerprint

LOCKFILE = {"name": "app", "dependencies": {"react": {"version": "18.2.0"}}}


@pytest.fixture()
def recorded() -> PackageFingerprint:
    return PackageFingerprint(
        dependencies={"react": "^18.0.0", "shared": "../shared"},
        unversioned_dependency_checksums={"shared": "aaa"},
        shrinkwrap=None,
        cache_breaker=1,
    )


def test_unchanged_package_is_skipped(recorded: PackageFingerprint) -> None:
    current = replace(recorded, dependencies={"shared": "../shared", "react": "^18.0.0"})
    assert needs_update(current, recorded) is False


def test_never_installed_package_needs_update(recorded: PackageFingerprint) -> None:
    assert needs_update(recorded, None) is True


def test_token_change_forces_update(recorded: PackageFingerprint) -> None:
    assert needs_update(replace(recorded, cache_breaker=2), recorded) is True
    assert needs_update(replace(recorded, cache_breaker="1"), recorded) is True


def test_dependency_change(recorded: PackageFingerprint) -> None:
    current = replace(recorded, dependencies={"react": "^18.2.0", "shared": "../shared"})
    assert needs_update(current, recorded) is True


def test_local_checksum_change(recorded: PackageFingerprint) -> None:
    current = replace(recorded, unversioned_dependency_checksums={"shared": "bbb"})
    assert needs_update(current, recorded) is True


def test_lockfile_change_triggers_update(recorded: PackageFingerprint) -> None:
    locked = replace(recorded, shrinkwrap=LOCKFILE)
    assert needs_update(locked, recorded) is True, "lockfile added"
    assert needs_update(recorded, locked) is True, "lockfile removed"
    bumped = replace(recorded, shrinkwrap={**LOCKFILE, "dependencies": {}})
    assert needs_update(bumped, locked) is True, "lockfile edited"


def test_matching_lockfile_is_skipped_by_default(recorded: PackageFingerprint) -> None:
    locked = replace(recorded, shrinkwrap=LOCKFILE)
    assert needs_update(replace(locked, shrinkwrap=dict(LOCKFILE)), locked) is False


def test_historical_lockfile_check_reinstalls_on_match(recorded: PackageFingerprint) -> None:
    locked = replace(recorded, shrinkwrap=LOCKFILE)
    assert needs_update(locked, locked, reinstall_on_matching_lockfile=True) is True


def test_historical_lockfile_check_ignores_lockfile_changes(
    recorded: PackageFingerprint,
) -> None:
    locked = replace(recorded, shrinkwrap=LOCKFILE)
    edited = replace(recorded, shrinkwrap={"name": "app"})
    assert needs_update(edited, locked, reinstall_on_matching_lockfile=True) is False
    assert needs_update(recorded, locked, reinstall_on_matching_lockfile=True) is False
