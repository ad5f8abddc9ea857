# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Bundler capability interface.

A bundler works in two phases, mirroring rollup's JavaScript API:

1. ``bundle()`` builds the module graph of one entry, consulting the
   externalization callback for every import reference.
2. ``write()`` emits the bundle and its source map for that graph.

The graph phase is implemented here in Python; adapters only implement
``write()``.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from .graph import ExternalCallback, ModuleGraph, scan_module_graph

DEFAULT_TRANSPILE_EXCLUDE = ("node_modules/**",)


@dataclass(frozen=True)
class BundleRequest:
    """Input of the graph phase.

    Attributes:
        entry: Entry module
        external: Externalization callback (reference, importer) → bool
        transpile_exclude: Globs excluded from transpilation
    """

    entry: Path
    external: ExternalCallback
    transpile_exclude: tuple[str, ...] = DEFAULT_TRANSPILE_EXCLUDE


@dataclass
class BundleGraph:
    """Result of the graph phase, consumed by ``write()``."""

    request: BundleRequest
    modules: ModuleGraph

    @property
    def entry(self) -> Path:
        return self.request.entry

    @property
    def externals(self) -> list[str]:
        return self.modules.externals


@dataclass(frozen=True)
class OutputOptions:
    """Input of the write phase.

    Attributes:
        file: Bundle path; the source map is written next to it
        name: Global name of the UMD bundle
        banner: Comment block placed at the top of the bundle
        globals: Module id → global name for externalized dependencies
        format: Output module format
        sourcemap: Whether to emit a source map
        generated_code: Language level of generated wrapper code
    """

    file: Path
    name: str
    banner: str = ""
    globals: dict[str, str] = field(default_factory=dict)
    format: str = "umd"
    sourcemap: bool = True
    generated_code: str = "es2015"

    @property
    def sourcemap_file(self) -> Path:
        return self.file.with_name(self.file.name + ".map")


class Bundler(ABC):
    """Base class for bundler adapters."""

    def __init__(self, extensions: tuple[str, ...] = (".js", ".mjs")):
        self.extensions = tuple(extensions)

    async def bundle(self, request: BundleRequest) -> BundleGraph:
        """Build the module graph for `request.entry`.

        Raises:
            BundlerError: If a module cannot be read or resolved
        """
        modules = await asyncio.to_thread(
            scan_module_graph, request.entry, request.external, self.extensions
        )
        return BundleGraph(request=request, modules=modules)

    @abstractmethod
    async def write(self, graph: BundleGraph, options: OutputOptions) -> list[Path]:
        """Write the bundle (and source map) for `graph`.

        Returns:
            Paths of the written files

        Raises:
            BundlerError: If the output cannot be produced
        """
        pass
