"""Decide whether a package must be reinstalled."""

from __future__ import annotations

from hyperinstall.workspace import PackageFingerprint, structurally_equal

__all__ = ["needs_update"]


def needs_update(
    current: PackageFingerprint,
    recorded: PackageFingerprint | None,
    *,
    reinstall_on_matching_lockfile: bool = False,
) -> bool:
    """Compare a fresh fingerprint with the one recorded at the last install.

    ``reinstall_on_matching_lockfile`` restores the historical lockfile check,
    which reinstalls when a present lockfile is *equal* to the recorded one.
    The default reinstalls when the lockfile changed, appeared or disappeared.
    """

    if recorded is None:
        return True
    if not structurally_equal(current.cache_breaker, recorded.cache_breaker):
        return True

    if reinstall_on_matching_lockfile:
        # Historical behaviour: equality triggers a reinstall.
        if current.shrinkwrap is not None and structurally_equal(
            current.shrinkwrap, recorded.shrinkwrap
        ):
            return True
    elif not structurally_equal(current.shrinkwrap, recorded.shrinkwrap):
        return True

    if not structurally_equal(current.dependencies, recorded.dependencies):
        return True
    return not structurally_equal(
        current.unversioned_dependency_checksums,
        recorded.unversioned_dependency_checksums,
    )
