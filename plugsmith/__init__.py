# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""plugsmith: build each plugin of a JavaScript library as a standalone UMD bundle.

Public API:
- `entity_name`: file name → public entity name
- `PluginRegistry`, `PluginDescriptor`: plugin discovery
- `resolve`, `Externalizer`: dependency resolution and externalization
- `BundleOrchestrator`, `PluginBuildRunner`, `build_plugins`: building
- `SystemConfig`, `load_config`: configuration
"""

__version__ = "0.1.0"

from .exceptions import (
    BuildFailedError,
    BundleError,
    BundlerError,
    DiscoveryError,
    NamingCollisionError,
    PlugsmithError,
)
from .naming import entity_name
from .orchestrator import BuildResult, BundleOrchestrator
from .registry import PluginDescriptor, PluginRegistry
from .resolver import Externalizer, Resolution, Treatment, resolve
from .runner import PluginBuildRunner, RunReport, build_plugins
from .settings import SystemConfig, load_config

__all__ = [
    "entity_name",
    "PluginDescriptor",
    "PluginRegistry",
    "Treatment",
    "Resolution",
    "resolve",
    "Externalizer",
    "BuildResult",
    "BundleOrchestrator",
    "PluginBuildRunner",
    "RunReport",
    "build_plugins",
    "SystemConfig",
    "load_config",
    "PlugsmithError",
    "DiscoveryError",
    "NamingCollisionError",
    "BundlerError",
    "BundleError",
    "BuildFailedError",
]
