"""Strict JSON parsing for workspace files."""

from __future__ import annotations

import json
from typing import Any, NoReturn

from hyperinstall.errors import HyperinstallError

__all__ = ["parse_json"]


def parse_json(contents: str, *, source: object, error: type[HyperinstallError]) -> Any:
    """Decode ``contents`` or raise ``error``; ``NaN`` and ``Infinity`` are rejected."""

    def _reject_constant(name: str) -> NoReturn:
        raise error(f"{source} contains {name}, which is not valid JSON")

    try:
        return json.loads(contents, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise error(f"{source} is not valid JSON: {exc}") from exc
