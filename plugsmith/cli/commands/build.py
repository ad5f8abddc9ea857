# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Build every plugin into its own UMD bundle."""

import time

import click
from rich.markup import escape

from plugsmith.exceptions import BuildFailedError, DiscoveryError
from plugsmith.orchestrator import BuildResult
from plugsmith.runner import build_plugins

from ..constants import CLI_NAME
from ..context import ApplicationContext
from ..exceptions import CommandError
from ..messages import (
    BUILD_ERROR_HINT,
    BUILD_FINISHED,
    BUILD_PLUGIN_DONE,
    BUILD_START,
    BUILD_SUMMARY,
    DISCOVERY_HINTS,
    NO_PLUGINS_FOUND,
)
from ..utils import console, err_console, progress_spinner, success, warning


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.option('--fail-fast/--collect-all', default=None,
              help='Cancel remaining builds on the first failure, or run all and report every failure')
@click.option('--max-workers', '-j', type=click.IntRange(min=1), default=None,
              help='Maximum number of concurrent builds (unbounded by default)')
@click.option('--timeout', type=click.FloatRange(min=0, min_open=True), default=None,
              help='Per-plugin build timeout in seconds')
@click.option('--resolution', type=click.Choice(['exact', 'substring']), default=None,
              help='How relative imports are matched against plugins')
@click.pass_obj
def build(
    app_ctx: ApplicationContext,
    fail_fast: bool | None,
    max_workers: int | None,
    timeout: float | None,
    resolution: str | None,
) -> None:
    """Bundle every plugin found under the source directory.

    Each plugin becomes a UMD bundle named after its file (alert.js → Alert)
    with a license banner and a source map. Imports of other plugins and of
    third-party packages are left external.
    """
    config = app_ctx.with_overrides(
        fail_fast=fail_fast,
        max_workers=max_workers,
        build_timeout=timeout,
        resolution=resolution,
    )

    label = f"{CLI_NAME} build"
    console.print(BUILD_START)
    start = time.perf_counter()

    def report(result: BuildResult) -> None:
        success(BUILD_PLUGIN_DONE.format(name=result.plugin.name))

    try:
        with progress_spinner("Bundling plugins...", no_progress=app_ctx.no_progress):
            run_report = build_plugins(config, on_built=report)
    except DiscoveryError as e:
        raise CommandError(str(e), details=DISCOVERY_HINTS) from e
    except BuildFailedError as e:
        for error in e.errors:
            err_console.print(f"[red]✗[/red] {escape(str(error))}")
        raise CommandError(str(e), details=[BUILD_ERROR_HINT]) from e

    if not run_report.results:
        warning(NO_PLUGINS_FOUND.format(source_dir=config.source_dir, pattern=config.pattern))

    console.print(BUILD_SUMMARY.format(count=len(run_report.results), dist_dir=config.dist_dir))
    console.print(escape(BUILD_FINISHED.format(label=label, elapsed=time.perf_counter() - start)))
