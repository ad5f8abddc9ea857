# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""I/O utilities.

Private utilities for loading and writing YAML. Not part of the public API.
"""
