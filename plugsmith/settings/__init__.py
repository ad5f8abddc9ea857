# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Plugsmith configuration module.

Provides type-safe configuration management with Pydantic Settings.
"""

from .loader import get_config, load_config, reset_config
from .schema import BannerConfig, BundlerConfig, LoggingConfig, SystemConfig

__all__ = [
    "SystemConfig",
    "BannerConfig",
    "BundlerConfig",
    "LoggingConfig",
    "load_config",
    "get_config",
    "reset_config",
]
