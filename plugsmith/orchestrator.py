# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Build of a single plugin bundle.

For one registry entry the orchestrator runs the bundler's graph phase with
a fresh Externalizer bound to that plugin, then writes a UMD bundle named
after the plugin, carrying the license banner, a source map and the
collected globals.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from .banner import BannerGenerator
from .bundler import RollupBundler
from .bundler.base import (
    DEFAULT_TRANSPILE_EXCLUDE,
    Bundler,
    BundleGraph,
    BundleRequest,
    OutputOptions,
)
from .exceptions import BundleError, PlugsmithError
from .registry import PluginDescriptor, PluginRegistry
from .resolver import RESOLUTION_EXACT, Externalizer
from .settings import SystemConfig

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Outcome of one successful plugin build."""

    plugin: PluginDescriptor
    files: list[Path]
    globals: dict[str, str] = field(default_factory=dict)
    internal: dict[str, str] = field(default_factory=dict)
    unresolved: list[str] = field(default_factory=list)
    inlined: list[Path] = field(default_factory=list)
    duration: float = 0.0


class BundleOrchestrator:
    """Bundle and write plugins of one registry.

    Args:
        registry: Registry of all plugins (read-only)
        bundler: Bundler adapter
        banner: Banner generator
        strategy: Relative import matching strategy ('exact' or 'substring')
        transpile_exclude: Globs excluded from transpilation
        generated_code: Language level of generated wrapper code
    """

    def __init__(
        self,
        registry: PluginRegistry,
        bundler: Bundler,
        banner: BannerGenerator | None = None,
        strategy: str = RESOLUTION_EXACT,
        transpile_exclude: tuple[str, ...] = DEFAULT_TRANSPILE_EXCLUDE,
        generated_code: str = "es2015",
    ):
        self.registry = registry
        self.bundler = bundler
        self.banner = banner or BannerGenerator()
        self.strategy = strategy
        self.transpile_exclude = tuple(transpile_exclude)
        self.generated_code = generated_code

    @classmethod
    def from_config(
        cls,
        config: SystemConfig,
        registry: PluginRegistry,
        bundler: Bundler | None = None,
    ) -> "BundleOrchestrator":
        """Create an orchestrator from settings, defaulting to the rollup adapter."""
        return cls(
            registry=registry,
            bundler=bundler or RollupBundler.from_config(config),
            banner=BannerGenerator(config.banner),
            strategy=config.resolution,
            transpile_exclude=tuple(config.bundler.babel_exclude),
            generated_code=config.bundler.generated_code,
        )

    def externalizer_for(self, plugin: PluginDescriptor) -> Externalizer:
        return Externalizer(self.registry, plugin, strategy=self.strategy)

    async def analyze(self, plugin: PluginDescriptor) -> tuple[Externalizer, BundleGraph]:
        """Run only the graph phase for `plugin`.

        Raises:
            BundleError: If the bundler cannot build the module graph
        """
        externalizer = self.externalizer_for(plugin)
        request = BundleRequest(
            entry=plugin.source_file,
            external=externalizer,
            transpile_exclude=self.transpile_exclude,
        )
        try:
            graph = await self.bundler.bundle(request)
        except Exception as e:
            raise BundleError(plugin.name, _describe_error(e)) from e
        return externalizer, graph

    async def build_one(self, plugin: PluginDescriptor) -> BuildResult:
        """Bundle `plugin` and write its artifact pair.

        Raises:
            BundleError: If bundling or writing fails
        """
        start = time.perf_counter()
        externalizer, graph = await self.analyze(plugin)

        options = OutputOptions(
            file=plugin.output_path,
            name=plugin.name,
            banner=self.banner.render(plugin.display_name),
            globals=dict(externalizer.table),
            sourcemap=True,
            generated_code=self.generated_code,
        )

        try:
            files = await self.bundler.write(graph, options)
        except Exception as e:
            raise BundleError(plugin.name, _describe_error(e)) from e

        duration = time.perf_counter() - start
        logger.info(f"Wrote {plugin.output_path} ({duration:.2f}s)")

        return BuildResult(
            plugin=plugin,
            files=files,
            globals=options.globals,
            internal=dict(externalizer.internal),
            unresolved=list(externalizer.unresolved),
            inlined=list(graph.modules.modules),
            duration=duration,
        )


def _describe_error(error: Exception) -> str:
    if isinstance(error, PlugsmithError):
        return str(error)
    return f"{type(error).__name__}: {error}"
