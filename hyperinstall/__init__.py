"""Selective dependency reinstallation for multi-package workspaces."""

from .version import __version__  # noqa: F401
