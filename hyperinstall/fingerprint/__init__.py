"""Fingerprinting of workspace packages and their local dependencies."""

from .checksum import (
    IgnoreRule,
    aggregate_checksum,
    compute_checksum,
    file_checksum,
    list_package_files,
)
from .engine import FingerprintEngine, merge_dependencies
from .specifiers import classify_specifier, filter_local_dependencies, is_local_specifier

__all__ = [
    "FingerprintEngine",
    "IgnoreRule",
    "aggregate_checksum",
    "classify_specifier",
    "compute_checksum",
    "file_checksum",
    "filter_local_dependencies",
    "is_local_specifier",
    "list_package_files",
    "merge_dependencies",
]
