# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

from __future__ import annotations  # PEP 563: Postponed evaluation of annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TYPE_CHECKING

# Type hints only - settings imported lazily inside methods
if TYPE_CHECKING:
    from plugsmith.settings import SystemConfig

logger = logging.getLogger(__name__)


@dataclass
class ApplicationContext:
    """CLI execution context with SystemConfig loading and CLI argument handling."""

    no_progress: bool = False
    config_file: Path | None = None
    overrides: dict[str, Any] = field(default_factory=dict)

    config: "SystemConfig | None" = None

    @classmethod
    def from_cli_args(
        cls,
        config_file: Path | None,
        source_dir: Path | None,
        dist_dir: Path | None,
        log_level: str | None,
        no_progress: bool,
    ) -> "ApplicationContext":
        """Create context from CLI arguments, set up logging and load configuration.

        Args:
            config_file: Path to config file override
            source_dir: Plugin source directory override
            dist_dir: Bundle output directory override
            log_level: CLI verbosity (None keeps the configured level)
            no_progress: Disable progress indicators
        """
        from plugsmith._internal.logging import setup_logging

        context = cls(config_file=config_file, no_progress=no_progress)

        if source_dir:
            context.overrides["source_dir"] = str(source_dir)
        if dist_dir:
            context.overrides["dist_dir"] = str(dist_dir)
        if log_level:
            context.overrides["logging"] = {"level": log_level}

        context.load_configuration()
        setup_logging(level=context.config.logging.level)
        logger.debug(
            f"CLI initialized with logs={context.config.logging.level}, no_progress={no_progress}"
        )

        return context

    def load_configuration(self) -> None:
        from plugsmith.settings import load_config

        # Pydantic handles validation and priority (CLI overrides > env > file > defaults)
        self.config = load_config(
            project_file=self.config_file,
            **self.overrides
        )

    def get_effective_config(self) -> "SystemConfig":
        if not self.config:
            self.load_configuration()
        return self.config

    def with_overrides(self, **overrides: Any) -> "SystemConfig":
        """Return the effective config with command-level overrides applied."""
        overrides = {k: v for k, v in overrides.items() if v is not None}
        config = self.get_effective_config()
        if not overrides:
            return config
        return config.model_copy(update=overrides)
