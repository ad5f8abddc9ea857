# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""User-facing messages and strings for CLI output.

Centralizes all UI text to separate presentation from business logic.
"""

# ============================================================================
# Package Metadata
# ============================================================================

PACKAGE_NAME = "plugsmith"

# ============================================================================
# Build Messages
# ============================================================================

BUILD_START = "Building individual plugins..."
BUILD_PLUGIN_DONE = "Built {name}"
BUILD_FINISHED = "[{label}] finished in {elapsed:.2f}s"
BUILD_SUMMARY = "{count} plugin bundle(s) written to {dist_dir}"

# ============================================================================
# Error Detail Messages
# ============================================================================

DISCOVERY_HINTS = [
    "Check that source_dir points at the plugin sources (--source-dir or plugsmith.yaml)",
    "Rename one of the colliding files if two plugins share a name",
]

BUILD_ERROR_HINT = "Run with --log-level debug for per-import resolution details"

NO_PLUGINS_FOUND = "No plugins found in {source_dir} matching {pattern}"
