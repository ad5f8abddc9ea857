# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""YAML utilities for plugsmith.

Provides basic YAML operations:
- expand_env_vars(): Recursively expand ${VAR} syntax
- deep_merge(): Deep merge two dictionaries
- format_yaml(): Render data as block-style YAML text

All implementations do not mutate os.environ.
"""

import os
from typing import Any

import yaml


def deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deep merge with overlay taking precedence. Recursively merges nested dicts.

    Returns new dict without mutating inputs.
    """
    result = base.copy()

    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def expand_env_vars(data: Any) -> Any:
    """Recursively expand environment variables (supports ${VAR} and $VAR).

    Leaves undefined variables unchanged (e.g., "${UNDEFINED_VAR}" stays as-is).
    """
    if isinstance(data, str):
        return os.path.expandvars(data)
    elif isinstance(data, dict):
        return {k: expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    else:
        return data


def format_yaml(data: dict[str, Any], **kwargs) -> str:
    """Render data as clean block-style YAML.

    - 2-space indentation
    - Block style (not inline)
    - Preserved key ordering
    - No document markers (---, ...)
    """
    default_kwargs = {
        'default_flow_style': False,
        'sort_keys': False,
        'allow_unicode': True,
        'width': 80,
        'indent': 2,
    }
    default_kwargs.update(kwargs)
    return yaml.safe_dump(data, **default_kwargs)
