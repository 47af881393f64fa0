"""Read the workspace package list (``hyperinstall.json``)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from hyperinstall.errors import ConfigExistsError, ConfigInvalidError
from hyperinstall.workspace.jsonfile import parse_json

__all__ = [
    "PackageDescriptor",
    "create_package_list",
    "read_package_list",
]

logger = logging.getLogger("hyperinstall.workspace")

_EMPTY_PACKAGE_LIST = "{\n}\n"


@dataclass(frozen=True, slots=True)
class PackageDescriptor:
    """A declared package and its opaque cache-breaker token."""

    name: str
    cache_breaker: Any


def read_package_list(path: Path) -> list[PackageDescriptor]:
    """Return the declared packages, or an empty list when the file is missing."""

    try:
        contents = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning(
            "Specify the packages to install in %s.",
            path.name,
            extra={"config_path": str(path)},
        )
        return []
    data = parse_json(contents, source=path, error=ConfigInvalidError)
    if not isinstance(data, dict):
        raise ConfigInvalidError(f"{path} must contain a JSON object of package paths")
    return [PackageDescriptor(name=name, cache_breaker=token) for name, token in data.items()]


def create_package_list(path: Path) -> Path:
    """Write an empty package list, refusing to clobber an existing one."""

    try:
        with path.open("x", encoding="utf-8") as handle:
            handle.write(_EMPTY_PACKAGE_LIST)
    except FileExistsError as exc:
        raise ConfigExistsError(f"{path} already exists") from exc
    return path
