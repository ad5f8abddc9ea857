# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Bundler capability: module graph construction and bundle writing."""

from .base import Bundler, BundleGraph, BundleRequest, OutputOptions
from .graph import ModuleGraph, find_imports, scan_module_graph
from .rollup import RollupBundler

__all__ = [
    "Bundler",
    "BundleGraph",
    "BundleRequest",
    "OutputOptions",
    "ModuleGraph",
    "find_imports",
    "scan_module_graph",
    "RollupBundler",
]
