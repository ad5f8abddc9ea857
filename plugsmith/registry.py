# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Plugin discovery and the read-only plugin registry.

Every file matching the discovery pattern under the source root is one
plugin. The registry maps each plugin's entity name to its descriptor and
serves as the lookup table for dependency resolution during bundling.

The registry is built once, before any build starts, and never changes
afterwards, so concurrent builds can share it freely.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from .exceptions import DiscoveryError, NamingCollisionError
from .naming import entity_name

logger = logging.getLogger(__name__)

DEFAULT_PATTERN = "**/*.js"


@dataclass(frozen=True)
class PluginDescriptor:
    """One discoverable plugin.

    Attributes:
        name: Entity name, unique across the registry
        source_file: Absolute path to the entry source file
        output_path: Absolute path of the bundle to write
        display_name: Path relative to the source root, for banner text
    """

    name: str
    source_file: Path
    output_path: Path
    display_name: str

    @property
    def source_path(self) -> str:
        """Extension-less source path, normalized to host conventions."""
        return os.path.normpath(str(self.source_file.with_suffix("")))

    @property
    def sourcemap_path(self) -> Path:
        return self.output_path.with_name(self.output_path.name + ".map")


class PluginRegistry(Mapping[str, PluginDescriptor]):
    """Immutable mapping of entity name → PluginDescriptor.

    Iteration follows discovery order (sorted source paths).
    """

    def __init__(self, descriptors: Iterable[PluginDescriptor] = ()):
        entries: dict[str, PluginDescriptor] = {}
        for descriptor in descriptors:
            existing = entries.get(descriptor.name)
            if existing is not None:
                raise NamingCollisionError(
                    descriptor.name, existing.source_file, descriptor.source_file
                )
            entries[descriptor.name] = descriptor
        self._entries = MappingProxyType(entries)

    @classmethod
    def discover(
        cls,
        source_root: Path,
        dist_root: Path,
        pattern: str = DEFAULT_PATTERN,
    ) -> "PluginRegistry":
        """Scan source_root for plugins and build the registry.

        Args:
            source_root: Directory holding one source file per plugin
            dist_root: Directory mirroring source_root for the bundles
            pattern: Glob pattern (relative to source_root) selecting plugins

        Raises:
            DiscoveryError: If source_root is missing or unreadable
            NamingCollisionError: If two files share an entity name
        """
        source_root = Path(source_root).resolve()
        dist_root = Path(dist_root).resolve()

        if not source_root.is_dir():
            raise DiscoveryError(f"Plugin source directory not found: {source_root}")

        try:
            files = sorted(p for p in source_root.glob(pattern) if p.is_file())
        except OSError as e:
            raise DiscoveryError(f"Cannot read plugin source directory {source_root}: {e}") from e

        registry = cls(_describe(path, source_root, dist_root) for path in files)
        logger.info(f"Discovered {len(registry)} plugins in {source_root}")
        return registry

    def __getitem__(self, name: str) -> PluginDescriptor:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"PluginRegistry({list(self._entries)})"

    def find_by_source_path(self, source_path: str) -> PluginDescriptor | None:
        """Return the plugin whose extension-less source path equals source_path."""
        target = os.path.normpath(source_path)
        for descriptor in self._entries.values():
            if descriptor.source_path == target:
                return descriptor
        return None


def _describe(path: Path, source_root: Path, dist_root: Path) -> PluginDescriptor:
    relative = path.relative_to(source_root)
    return PluginDescriptor(
        name=entity_name(path.stem),
        source_file=path,
        output_path=dist_root / relative,
        display_name=relative.as_posix(),
    )
