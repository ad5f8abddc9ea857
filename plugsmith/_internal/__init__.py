# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Internal utilities for plugsmith.

This package contains private implementation details that are not part of
the public API and may change without notice.

Subpackages:
- io: YAML loading utilities

Modules:
- logging: Logging configuration
"""
