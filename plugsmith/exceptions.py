# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""
Plugsmith Exceptions

Custom exceptions for plugin discovery, bundling and build orchestration.
"""

from pathlib import Path


class PlugsmithError(Exception):
    """Base exception for plugsmith errors."""
    pass


class DiscoveryError(PlugsmithError):
    """Raised when the plugin registry cannot be constructed."""
    pass


class NamingCollisionError(DiscoveryError):
    """Raised when two source files normalize to the same canonical name."""

    def __init__(self, name: str, first: Path, second: Path):
        self.name = name
        self.first = first
        self.second = second
        super().__init__(
            f"Plugin name collision: '{first}' and '{second}' both map to '{name}'"
        )


class BundlerError(PlugsmithError):
    """Raised by a bundler adapter when bundling or writing fails."""
    pass


class BundleError(PlugsmithError):
    """Raised when building a single plugin fails.

    Attributes:
        plugin_name: Canonical name of the plugin whose build failed
    """

    def __init__(self, plugin_name: str, message: str):
        self.plugin_name = plugin_name
        super().__init__(f"{plugin_name}: {message}")


class BuildFailedError(PlugsmithError):
    """Raised by the runner when one or more plugin builds failed."""

    def __init__(self, errors: list[BundleError], report=None):
        self.errors = errors
        self.report = report
        names = ", ".join(e.plugin_name for e in errors)
        super().__init__(f"{len(errors)} plugin build(s) failed: {names}")
