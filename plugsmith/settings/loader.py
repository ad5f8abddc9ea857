# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Configuration loading and management for plugsmith."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError
from rich.console import Console

from plugsmith._internal.io.yaml import deep_merge

from .schema import SystemConfig

console = Console(stderr=True)

ENV_LOG_LEVEL = "PLUGSMITH_LOG_LEVEL"


def _is_path_field(key: str) -> bool:
    """Check if a field name suggests it's a path field.

    Uses naming convention: fields ending with _dir, _path, _file or _root
    are treated as paths.
    """
    return key.endswith(('_dir', '_path', '_file', '_root'))


def _resolve_cli_paths(cli_overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Resolve relative paths in CLI overrides to CWD.

    CLI paths resolve relative to where the command was run, following
    standard shell semantics.
    """
    result = {}
    cwd = Path.cwd()

    for key, value in cli_overrides.items():
        if _is_path_field(key) and value is not None and isinstance(value, (str, Path)):
            path = Path(value)
            result[key] = str((cwd / path).resolve()) if not path.is_absolute() else str(value)
        else:
            result[key] = value

    return result


def load_config(
    project_file: Optional[Path] = None,
    **cli_overrides
) -> SystemConfig:
    """Load configuration with hierarchical priority.

    Priority order (highest to lowest):
    1. CLI arguments (passed as kwargs)
    2. Environment variables (PLUGSMITH_* prefix)
    3. Project config file (plugsmith.yaml)
    4. Built-in defaults

    PLUGSMITH_LOG_LEVEL overrides logging.level (shorthand for
    PLUGSMITH_LOGGING__LEVEL) unless the CLI sets it.

    Args:
        project_file: Path to project config file (for non-standard locations)
        **cli_overrides: CLI argument overrides; None values are ignored

    Returns:
        SystemConfig object

    Raises:
        ValidationError: If any setting is invalid (details are printed first)
    """
    try:
        cli_overrides = {k: v for k, v in cli_overrides.items() if v is not None}
        cli_overrides = _resolve_cli_paths(cli_overrides)

        if ENV_LOG_LEVEL in os.environ:
            shorthand = {'logging': {'level': os.environ[ENV_LOG_LEVEL]}}
            cli_overrides = deep_merge(shorthand, cli_overrides)

        if project_file:
            cli_overrides['config_file'] = Path(project_file).resolve()

        return SystemConfig(**cli_overrides)

    except ValidationError as e:
        console.print("[bold red]Configuration validation failed:[/bold red]")
        for error in e.errors():
            field = " → ".join(str(x) for x in error["loc"])
            console.print(f"  [red]{field}: {error['msg']}[/red]")
        raise


@lru_cache(maxsize=1)
def get_config() -> SystemConfig:
    """Get cached configuration instance."""
    return load_config()


def reset_config() -> None:
    """Reset the cached configuration (mainly for testing)."""
    get_config.cache_clear()
