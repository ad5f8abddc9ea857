# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Plugsmith configuration schema using Pydantic.

Configuration Priority
----------------------
Settings are loaded from multiple sources with the following priority (highest to lowest):
1. CLI arguments (passed to SystemConfig constructor)
2. Environment variables (PLUGSMITH_* prefix, nested with __)
3. Project config file (plugsmith.yaml)
4. Built-in defaults (Field defaults in SystemConfig)

Path Resolution
---------------
- Full paths are used as-is
- Relative paths from CLI resolve to the current working directory (in load_config)
- Relative paths from YAML/env/defaults resolve to the project directory

The project directory is where plugsmith.yaml is located, found by walking up
from CWD (or PLUGSMITH_PROJECT_DIR when set). Without a config file it is CWD.
"""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from plugsmith._internal.io.yaml import expand_env_vars

PROJECT_CONFIG_FILE = "plugsmith.yaml"
ENV_PROJECT_DIR = "PLUGSMITH_PROJECT_DIR"

LOG_LEVELS = ("quiet", "normal", "verbose", "debug")


def _find_project_config() -> Path | None:
    """Find project configuration file with upward directory walk.

    Search order:
    1. If PLUGSMITH_PROJECT_DIR is set, check that directory only
    2. Otherwise, walk up from CWD to find plugsmith.yaml
    """
    if project_dir_override := os.environ.get(ENV_PROJECT_DIR):
        candidate = Path(project_dir_override).resolve() / PROJECT_CONFIG_FILE
        return candidate if candidate.exists() else None

    current = Path.cwd().resolve()
    while current != current.parent:
        candidate = current / PROJECT_CONFIG_FILE
        if candidate.exists():
            return candidate
        current = current.parent

    return None


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Settings source reading the project YAML file."""

    def __init__(self, settings_cls: type[BaseSettings], config_file: Path | None = None):
        super().__init__(settings_cls)
        self.config_file = None

        if config_file:
            if Path(config_file).exists():
                self.config_file = Path(config_file).resolve()
        else:
            self.config_file = _find_project_config()

        self._data = self._load_yaml_file() if self.config_file else {}

    def _load_yaml_file(self) -> dict[str, Any]:
        """Load the YAML file with ${VAR} expansion.

        Raises:
            yaml.YAMLError: If the config file has syntax errors
        """
        try:
            with open(self.config_file) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            if hasattr(e, "problem_mark"):
                mark = e.problem_mark
                location = f"line {mark.line + 1}, column {mark.column + 1}"
            else:
                location = "unknown location"

            raise yaml.YAMLError(
                f"\n\nInvalid YAML in config file: {self.config_file}\n"
                f"Error at {location}: {getattr(e, 'problem', None) or str(e)}\n\n"
                f"Fix the syntax error and try again."
            ) from e

        if not isinstance(data, dict):
            raise yaml.YAMLError(f"Config file {self.config_file} must contain a mapping")

        return expand_env_vars(data)

    def get_field_value(self, field_name: str, field_info: Any) -> tuple[Any, str, bool]:
        if field_name in self._data:
            return self._data[field_name], field_name, True
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        data = self._data.copy()
        if self.config_file:
            data["config_file"] = self.config_file
        return data


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default="normal", description="Console verbosity level: quiet | normal | verbose | debug"
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        value = value.lower()
        if value not in LOG_LEVELS:
            raise ValueError(
                f"Unsupported log level: {value}. Supported levels: {', '.join(LOG_LEVELS)}"
            )
        return value


class BundlerConfig(BaseModel):
    """Options passed to the bundler adapter."""

    command: list[str] = Field(
        default_factory=lambda: ["npx", "rollup"],
        description="Command that starts rollup",
    )
    babel: bool = Field(default=True, description="Transpile sources with @rollup/plugin-babel")
    babel_exclude: list[str] = Field(
        default_factory=lambda: ["node_modules/**"],
        description="Globs excluded from transpilation (third-party code)",
    )
    babel_helpers: str = Field(
        default="bundled", description="Babel helpers mode (one copy of each helper per bundle)"
    )
    generated_code: str = Field(default="es2015", description="Language level of generated wrapper code")
    extensions: list[str] = Field(
        default_factory=lambda: [".js", ".mjs"],
        description="Extensions tried when following relative imports",
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("command")
    @classmethod
    def validate_command(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("Bundler command cannot be empty")
        return value


class BannerConfig(BaseModel):
    """Text of the license banner placed at the top of every bundle."""

    project_name: str = Field(default="", description="Library name shown before the plugin path")
    version: str = Field(default="", description="Library version")
    homepage: str | None = Field(default=None, description="Library homepage URL")
    authors: str = Field(default="", description="Copyright holders")
    authors_url: str | None = Field(default=None, description="URL listing the authors")
    license_name: str = Field(default="MIT", description="License name")
    license_url: str | None = Field(default=None, description="URL of the license text")
    start_year: int | None = Field(default=None, description="First copyright year")
    year: int | None = Field(default=None, description="Last copyright year (defaults to the current year)")

    model_config = ConfigDict(extra="forbid")


class SystemConfig(BaseSettings):
    """Configuration schema with hierarchical priority.

    Priority order (highest to lowest):
    1. CLI arguments (passed to constructor)
    2. Environment variables (PLUGSMITH_* prefix)
    3. Project config (plugsmith.yaml)
    4. Built-in defaults
    """

    source_dir: Path = Field(default=Path("js/src"), description="Directory holding the plugin sources")
    dist_dir: Path = Field(default=Path("js/dist"), description="Directory receiving the plugin bundles")
    pattern: str = Field(default="**/*.js", description="Glob selecting plugin files under source_dir")

    resolution: Literal["exact", "substring"] = Field(
        default="exact",
        description=(
            "How relative imports are matched against plugins: 'exact' resolves the path "
            "from the importing file, 'substring' matches any plugin path containing it"
        ),
    )

    max_workers: int | None = Field(
        default=None, ge=1, description="Maximum concurrent plugin builds (unbounded when unset)"
    )
    build_timeout: float | None = Field(
        default=None, gt=0, description="Per-plugin build timeout in seconds (none when unset)"
    )
    fail_fast: bool = Field(
        default=False,
        description="Cancel remaining builds on the first failure instead of collecting all failures",
    )

    bundler: BundlerConfig = Field(default_factory=BundlerConfig, description="Bundler options")
    banner: BannerConfig = Field(default_factory=BannerConfig, description="License banner text")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")

    config_file: Path | None = Field(default=None, description="Project config file in use")
    project_dir: Path | None = Field(
        default=None, description="Project directory (where plugsmith.yaml lives, else CWD)"
    )

    model_config = SettingsConfigDict(
        env_prefix="PLUGSMITH_",
        env_nested_delimiter="__",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False,
        env_file=None,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources.

        Priority order (first source wins):
        1. Init settings (CLI/constructor args) - paths already resolved to CWD
        2. Environment variables (PLUGSMITH_*)
        3. YAML project file
        4. Field defaults
        """
        config_file = init_settings().get("config_file")

        return (
            init_settings,
            env_settings,
            YamlSettingsSource(settings_cls, config_file=config_file),
        )

    def model_post_init(self, __context: Any) -> None:
        """Resolve the project directory and make all paths absolute."""
        if self.project_dir is None:
            self.project_dir = self.config_file.parent if self.config_file else Path.cwd().resolve()
        self.source_dir = self._resolve(self.source_dir, self.project_dir)
        self.dist_dir = self._resolve(self.dist_dir, self.project_dir)

    @staticmethod
    def _resolve(path: Path, base: Path) -> Path:
        path = Path(path)
        return path if path.is_absolute() else (base / path).resolve()
