# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Plugin discovery listing."""

import asyncio

import click
from rich.table import Table

from plugsmith.exceptions import BundleError, DiscoveryError
from plugsmith.orchestrator import BundleOrchestrator
from plugsmith.registry import PluginRegistry

from ..context import ApplicationContext
from ..exceptions import CommandError
from ..messages import DISCOVERY_HINTS, NO_PLUGINS_FOUND
from ..utils import console, progress_spinner, warning


async def _analyze_all(orchestrator: BundleOrchestrator) -> dict:
    """Run the graph phase for every plugin; failures are returned per plugin."""
    plugins = list(orchestrator.registry.values())
    outcomes = await asyncio.gather(
        *(orchestrator.analyze(plugin) for plugin in plugins),
        return_exceptions=True,
    )
    return {plugin.name: outcome for plugin, outcome in zip(plugins, outcomes)}


def _show_dependencies(registry: PluginRegistry, analyses: dict) -> None:
    table = Table(title="Plugin Dependencies")
    table.add_column("Plugin", style="cyan", no_wrap=True)
    table.add_column("Plugins", style="green")
    table.add_column("Third-party", style="white")
    table.add_column("Unmapped", style="yellow")

    failures = {}
    for name in registry:
        outcome = analyses[name]
        if isinstance(outcome, BaseException):
            failures[name] = outcome
            table.add_row(name, "[red]✗ failed[/red]", "", "")
            continue

        externalizer, _graph = outcome
        plugins = ", ".join(sorted(set(externalizer.internal.values())))
        third_party = ", ".join(externalizer.third_party)
        unmapped = ", ".join(externalizer.unresolved)
        table.add_row(name, plugins or "-", third_party or "-", unmapped or "-")

    console.print(table)

    if failures:
        console.print(f"\n[bold red]Found {len(failures)} error(s):[/bold red]\n")
        for name, error in failures.items():
            message = str(error) if isinstance(error, BundleError) else f"{type(error).__name__}: {error}"
            console.print(f"  [red]✗[/red] {name}")
            console.print(f"    [dim]{message}[/dim]")


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.option('--deps', is_flag=True, help='Analyze imports and show each plugin\'s dependencies (no bundles written)')
@click.pass_obj
def list_plugins(app_ctx: ApplicationContext, deps: bool) -> None:
    """Show every plugin found under the source directory.

    Lists the public name, the source file and the bundle path of each
    plugin. With --deps, the import graph of each plugin is walked and the
    plugins, third-party packages and unmapped references it depends on
    are shown.
    """
    config = app_ctx.get_effective_config()

    try:
        registry = PluginRegistry.discover(config.source_dir, config.dist_dir, config.pattern)
    except DiscoveryError as e:
        raise CommandError(str(e), details=DISCOVERY_HINTS) from e

    if not registry:
        warning(NO_PLUGINS_FOUND.format(source_dir=config.source_dir, pattern=config.pattern))
        return

    table = Table(title=f"Plugins in {config.source_dir}")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Source", style="white", no_wrap=True)
    table.add_column("Output", style="green", overflow="fold")

    for descriptor in registry.values():
        table.add_row(
            descriptor.name,
            descriptor.display_name,
            str(descriptor.output_path),
        )

    console.print(table)

    if deps:
        orchestrator = BundleOrchestrator.from_config(config, registry)
        with progress_spinner("Analyzing imports...", no_progress=app_ctx.no_progress):
            analyses = asyncio.run(_analyze_all(orchestrator))
        console.print()
        _show_dependencies(registry, analyses)
    else:
        console.print("\n[dim]Use --deps to see each plugin's dependencies[/dim]")
