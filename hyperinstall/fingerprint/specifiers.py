"""Classify dependency specifiers as local paths or registry/remote references."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path

__all__ = [
    "classify_specifier",
    "filter_local_dependencies",
    "is_local_specifier",
]

_FILE_PREFIX = "file:"
# ./x, ../x, .x, ~/x, /x, \x, C:\x
_PATH_SPEC = re.compile(r"^(?:\.|~[/\\]|[/\\]|[a-zA-Z]:)")
# dep-1.0.0.tgz, but not https://host/dep-1.0.0.tgz
_FILENAME_SPEC = re.compile(r"\.(?:tgz|tar\.gz|tar)$", re.IGNORECASE)
_URL_SPEC = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]+:")


def is_local_specifier(specifier: str) -> bool:
    specifier = specifier.strip()
    if specifier.startswith(_FILE_PREFIX) or _PATH_SPEC.match(specifier):
        return True
    return bool(_FILENAME_SPEC.search(specifier)) and not _URL_SPEC.match(specifier)


def classify_specifier(dependency: str, specifier: str, base_dir: Path) -> Path | None:
    """Return the absolute path ``specifier`` points at, or ``None`` if it is not local.

    Registry versions and ranges, dist-tags, ``npm:`` aliases, git and tarball
    URLs and ``user/repo`` shorthands are all non-local. Relative paths are
    resolved against ``base_dir`` only; the process working directory is never
    consulted, so packages can be classified concurrently.
    """

    if not is_local_specifier(specifier):
        return None
    base_dir = Path(base_dir)
    if not base_dir.is_absolute():
        raise ValueError(f"base_dir for {dependency!r} must be absolute, got {base_dir}")
    raw = specifier.strip()
    if raw.startswith(_FILE_PREFIX):
        raw = raw[len(_FILE_PREFIX) :]
        if raw.startswith("//"):
            raw = raw[2:]
    if raw.startswith(("~/", "~\\")):
        raw = str(Path.home() / raw[2:])
    return Path(os.path.normpath(base_dir / raw))


def filter_local_dependencies(
    dependencies: Mapping[str, str], base_dir: Path
) -> dict[str, Path]:
    """Return the subset of ``dependencies`` that resolve to local paths."""

    local: dict[str, Path] = {}
    for name, specifier in dependencies.items():
        path = classify_specifier(name, specifier, base_dir)
        if path is not None:
            local[name] = path
    return local
