# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Plugsmith command-line interface.

Commands: build, list, config
Usage: plugsmith build --fail-fast

Architecture:
- CLI factory create_cli() in cli.py, commands loaded lazily
- Configuration managed through ApplicationContext (context.py)
- Commands auto-receive context via @click.pass_obj decorator

Entry point defined in setup.py.
"""

from .cli import create_cli, main

__all__ = [
    "create_cli",
    "main",
]
