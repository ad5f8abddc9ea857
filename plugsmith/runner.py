# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Concurrent build of every plugin in a registry.

All builds are launched together as asyncio tasks. With ``max_workers``
set, a semaphore caps how many run at once; with ``timeout`` set, each
build is bounded by ``asyncio.wait_for``.

Failure policies:
    - collect-all (default): every build runs to completion, then all
      failures are raised together as BuildFailedError
    - fail-fast: the first failure cancels the remaining builds; the
      failures seen up to that point are raised as BuildFailedError
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable

from .bundler import Bundler
from .exceptions import BuildFailedError, BundleError
from .orchestrator import BuildResult, BundleOrchestrator
from .registry import PluginDescriptor, PluginRegistry
from .settings import SystemConfig

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """Summary of a run over the registry."""

    results: list[BuildResult] = field(default_factory=list)
    errors: list[BundleError] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def succeeded(self) -> bool:
        return not self.errors


class PluginBuildRunner:
    """Build plugins concurrently through a BundleOrchestrator.

    Args:
        orchestrator: Orchestrator performing single builds
        max_workers: Maximum concurrent builds (None = unbounded)
        timeout: Per-plugin timeout in seconds (None = no timeout)
        fail_fast: Cancel remaining builds on first failure
        on_built: Called with each BuildResult as soon as it completes
    """

    def __init__(
        self,
        orchestrator: BundleOrchestrator,
        max_workers: int | None = None,
        timeout: float | None = None,
        fail_fast: bool = False,
        on_built: Callable[[BuildResult], None] | None = None,
    ):
        self.orchestrator = orchestrator
        self.max_workers = max_workers
        self.timeout = timeout
        self.fail_fast = fail_fast
        self.on_built = on_built

    async def run(self, plugins: Iterable[PluginDescriptor] | None = None) -> RunReport:
        """Build `plugins` (default: the whole registry).

        Returns:
            RunReport with results in registry order

        Raises:
            BuildFailedError: If any build failed
        """
        if plugins is None:
            plugins = self.orchestrator.registry.values()
        plugins = list(plugins)

        semaphore = asyncio.Semaphore(self.max_workers) if self.max_workers else None
        start = time.perf_counter()

        async def build(plugin: PluginDescriptor) -> BuildResult:
            if semaphore is None:
                result = await self._build_with_timeout(plugin)
            else:
                async with semaphore:
                    result = await self._build_with_timeout(plugin)
            if self.on_built:
                self.on_built(result)
            return result

        tasks = [asyncio.create_task(build(plugin), name=plugin.name) for plugin in plugins]

        if self.fail_fast:
            outcomes = await self._wait_fail_fast(tasks)
        else:
            outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        report = RunReport(elapsed=time.perf_counter() - start)
        for plugin, outcome in zip(plugins, outcomes):
            if isinstance(outcome, BuildResult):
                report.results.append(outcome)
            elif isinstance(outcome, BundleError):
                report.errors.append(outcome)
            elif isinstance(outcome, BaseException) and not isinstance(outcome, asyncio.CancelledError):
                report.errors.append(BundleError(plugin.name, f"{type(outcome).__name__}: {outcome}"))

        logger.info(
            f"Built {len(report.results)}/{len(plugins)} plugins in {report.elapsed:.2f}s"
        )

        if report.errors:
            raise BuildFailedError(report.errors, report)
        return report

    async def _build_with_timeout(self, plugin: PluginDescriptor) -> BuildResult:
        if self.timeout is None:
            return await self.orchestrator.build_one(plugin)
        try:
            return await asyncio.wait_for(self.orchestrator.build_one(plugin), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise BundleError(plugin.name, f"build timed out after {self.timeout}s")

    async def _wait_fail_fast(self, tasks: list[asyncio.Task]) -> list:
        """Wait until all tasks finish or one fails; cancel the rest on failure."""
        if not tasks:
            return []

        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        if pending:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        outcomes = []
        for task in tasks:
            if task.cancelled():
                outcomes.append(asyncio.CancelledError())
            elif task.exception() is not None:
                outcomes.append(task.exception())
            else:
                outcomes.append(task.result())
        return outcomes


def build_plugins(
    config: SystemConfig,
    bundler: Bundler | None = None,
    on_built: Callable[[BuildResult], None] | None = None,
) -> RunReport:
    """Discover every plugin and build them all.

    Args:
        config: Effective configuration
        bundler: Bundler adapter (defaults to rollup)
        on_built: Called with each BuildResult as soon as it completes

    Raises:
        DiscoveryError: If the registry cannot be built (no build starts)
        BuildFailedError: If any build failed
    """
    registry = PluginRegistry.discover(config.source_dir, config.dist_dir, config.pattern)
    orchestrator = BundleOrchestrator.from_config(config, registry, bundler)
    runner = PluginBuildRunner(
        orchestrator,
        max_workers=config.max_workers,
        timeout=config.build_timeout,
        fail_fast=config.fail_fast,
        on_built=on_built,
    )
    return asyncio.run(runner.run())
