"""Content checksums over the publishable files of a package directory."""

from __future__ import annotations

import asyncio
import functools
import hashlib
import os
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from hyperinstall.errors import LocalDependencyError, ManifestError
from hyperinstall.workspace.jsonfile import parse_json

__all__ = [
    "IgnoreRule",
    "aggregate_checksum",
    "compute_checksum",
    "file_checksum",
    "list_package_files",
]

_CHUNK_SIZE = 1024 * 1024
_IGNORE_FILES = (".npmignore", ".gitignore")
_ALWAYS_EXCLUDED = (
    ".git",
    ".svn",
    ".hg",
    "CVS",
    ".DS_Store",
    "._*",
    "*.swp",
    ".*.swp",
    "npm-debug.log",
    ".npmrc",
    ".lock-wscript",
    "config.gypi",
    *_IGNORE_FILES,
)
_ALWAYS_INCLUDED = ("package.json", "README*", "LICENSE*", "LICENCE*")


@dataclass(frozen=True, slots=True)
class IgnoreRule:
    """One line of a gitignore-style file."""

    pattern: str
    negated: bool = False
    directory_only: bool = False
    anchored: bool = False

    @classmethod
    def parse(cls, line: str) -> IgnoreRule | None:
        text = line.rstrip("\n").rstrip()
        if not text or text.startswith("#"):
            return None
        negated = text.startswith("!")
        if negated:
            text = text[1:]
        elif text.startswith("\\"):
            text = text[1:]
        directory_only = text.endswith("/")
        text = text.rstrip("/")
        anchored = "/" in text
        text = text.lstrip("/")
        # "**/name" is the same as an unanchored "name"; "**/a/b" stays anchored
        # and relies on "**/" matching any number of leading directories.
        if text.startswith("**/") and "/" not in text[3:]:
            text, anchored = text[3:], False
        if not text:
            return None
        return cls(text, negated=negated, directory_only=directory_only, anchored=anchored)

    def matches(self, relative: str, *, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if self.anchored:
            return _wildmatch(relative, self.pattern)
        return _wildmatch(relative.rsplit("/", 1)[-1], self.pattern)


def _translate_bracket(pattern: str, start: int) -> tuple[str, int] | None:
    index = start + 1
    if index < len(pattern) and pattern[index] in "!^":
        index += 1
    if index < len(pattern) and pattern[index] == "]":
        index += 1
    end = pattern.find("]", index)
    if end == -1:
        return None
    body = pattern[start + 1 : end].replace("\\", "\\\\")
    if body[:1] in ("!", "^"):
        body = "^" + body[1:]
    return f"[{body}]", end + 1


@functools.lru_cache(maxsize=1024)
def _compile(pattern: str) -> re.Pattern[str]:
    """Translate a gitignore-style glob; ``*`` and ``?`` never cross ``/``."""

    parts: list[str] = []
    index, length = 0, len(pattern)
    while index < length:
        if pattern.startswith("**/", index):
            parts.append("(?:.*/)?")
            index += 3
        elif pattern.startswith("**", index):
            parts.append(".*")
            index += 2
        else:
            char = pattern[index]
            if char == "*":
                parts.append("[^/]*")
            elif char == "?":
                parts.append("[^/]")
            elif char == "[" and (bracket := _translate_bracket(pattern, index)) is not None:
                translated, index = bracket
                parts.append(translated)
                continue
            elif char == "\\" and index + 1 < length:
                index += 1
                parts.append(re.escape(pattern[index]))
            else:
                parts.append(re.escape(char))
            index += 1
    return re.compile("".join(parts), re.DOTALL)


def _wildmatch(path: str, pattern: str) -> bool:
    return _compile(pattern).fullmatch(path) is not None


def _read_ignore_rules(directory: Path) -> list[IgnoreRule]:
    for name in _IGNORE_FILES:
        path = directory / name
        if path.is_file():
            lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
            return [rule for rule in map(IgnoreRule.parse, lines) if rule is not None]
    return []


def _read_allow_list(root: Path) -> list[str] | None:
    manifest = root / "package.json"
    try:
        contents = manifest.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    data = parse_json(contents, source=manifest, error=ManifestError)
    files = data.get("files") if isinstance(data, dict) else None
    if not isinstance(files, list):
        return None
    patterns = []
    for entry in files:
        if isinstance(entry, str) and entry.strip():
            patterns.append(entry.strip().removeprefix("./").strip("/"))
    return patterns


def _matches_any(name: str, patterns: Iterable[str]) -> bool:
    return any(_wildmatch(name, pattern) for pattern in patterns)


def _allowed(relative: str, patterns: Sequence[str]) -> bool:
    parts = relative.split("/")
    prefixes = ["/".join(parts[: index + 1]) for index in range(len(parts))]
    for pattern in patterns:
        # Slash-free entries match a file or directory name at any depth.
        candidates = prefixes if "/" in pattern else parts
        if _matches_any_path(candidates, pattern):
            return True
    return False


def _matches_any_path(candidates: Iterable[str], pattern: str) -> bool:
    return any(_wildmatch(candidate, pattern) for candidate in candidates)


def _is_ignored(
    relative: str,
    *,
    is_dir: bool,
    rule_stack: Sequence[tuple[str, Sequence[IgnoreRule]]],
) -> bool:
    ignored = False
    for base, rules in rule_stack:
        local = relative[len(base) + 1 :] if base else relative
        for rule in rules:
            if rule.matches(local, is_dir=is_dir):
                ignored = not rule.negated
    return ignored


def list_package_files(root: Path) -> list[str]:
    """Return the files npm would pack from ``root``, as sorted POSIX relative paths.

    ``.npmignore`` (or ``.gitignore`` when there is none) is honoured in every
    directory, a ``files`` allow-list in ``package.json`` narrows the result and
    the manifest, readme and license are always kept. Symlinked directories are
    not followed.
    """

    root = Path(root)
    allow_list = _read_allow_list(root)
    results: list[str] = []

    def _walk(directory: Path, prefix: str, rule_stack: list[tuple[str, list[IgnoreRule]]]) -> None:
        rules = _read_ignore_rules(directory)
        stack = [*rule_stack, (prefix, rules)] if rules else rule_stack
        with os.scandir(directory) as entries:
            children = sorted(entries, key=lambda entry: entry.name)
        for entry in children:
            relative = f"{prefix}/{entry.name}" if prefix else entry.name
            is_dir = entry.is_dir(follow_symlinks=False)
            if not prefix and entry.is_file() and _matches_any(entry.name, _ALWAYS_INCLUDED):
                results.append(relative)
                continue
            if _matches_any(entry.name, _ALWAYS_EXCLUDED):
                continue
            if not prefix and is_dir and entry.name == "node_modules":
                continue
            if _is_ignored(relative, is_dir=is_dir, rule_stack=stack):
                continue
            if is_dir:
                _walk(Path(entry.path), relative, stack)
            elif entry.is_file():
                if allow_list is None or _allowed(relative, allow_list):
                    results.append(relative)

    _walk(root, "", [])
    return sorted(results)


def file_checksum(path: Path) -> str:
    """Return the hex SHA-1 of the raw bytes at ``path``."""

    digest = hashlib.sha1()  # noqa: S324 - content fingerprint, not security
    with Path(path).open("rb") as handle:
        while chunk := handle.read(_CHUNK_SIZE):
            digest.update(chunk)
    return digest.hexdigest()


def aggregate_checksum(file_checksums: Iterable[str]) -> str:
    """Hash the sorted per-file digests, so discovery order never matters."""

    digest = hashlib.sha1()  # noqa: S324 - content fingerprint, not security
    for checksum in sorted(file_checksums):
        digest.update(checksum.encode("utf-8"))
    return digest.hexdigest()


async def compute_checksum(path: Path) -> str:
    """Return the content checksum of a local dependency directory (or single file)."""

    path = Path(path)
    if path.is_file():
        files = [path]
    elif path.is_dir():
        relative = await asyncio.to_thread(list_package_files, path)
        files = [path / name for name in relative]
    else:
        raise LocalDependencyError(f"Local dependency path {path} does not exist")
    checksums = await asyncio.gather(*(asyncio.to_thread(file_checksum, f) for f in files))
    return aggregate_checksum(checksums)
