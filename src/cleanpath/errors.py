from __future__ import annotations


class CleanPathError(Exception):
    """Base exception for cleanpath."""


class ConfigError(CleanPathError):
    """Config file is missing or invalid."""


class UsageError(CleanPathError):
    """Invalid CLI usage (user error)."""
