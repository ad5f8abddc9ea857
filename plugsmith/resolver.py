# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Dependency resolution and externalization for plugin bundles.

While one plugin is bundled, every import reference it (or a module it
inlines) makes is classified:

- External: not a relative path, so a third-party package. Externalized
  under its own name.
- Internal: a relative path that points at another registered plugin.
  Externalized and mapped to that plugin's entity name, so the sibling is
  expected as a global instead of being inlined.
- Unresolved: a relative path matching no plugin. Reported as a warning
  and left to the bundler, which inlines it.

Two matching strategies exist for relative references:

- ``exact`` (default): the reference is resolved against the importing
  file's directory and compared with each plugin's extension-less path.
  The externalized id is the joined path with any extension kept, which is
  the id rollup assigns to that import.
- ``substring``: the leading './' and '../' segments are stripped and the
  first plugin (in discovery order) whose path contains the remainder wins.
  Kept for compatibility with layouts that relied on the loose match.

Logging Strategy:
    - DEBUG: Each classification
    - WARNING: Unmapped relative references (once per reference per build)
"""

import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .registry import PluginDescriptor, PluginRegistry

logger = logging.getLogger(__name__)

RELATIVE_MARKER = re.compile(r"^(?:\.+/)+")

RESOLUTION_EXACT = "exact"
RESOLUTION_SUBSTRING = "substring"
RESOLUTION_STRATEGIES = (RESOLUTION_EXACT, RESOLUTION_SUBSTRING)

SOURCE_EXTENSIONS = (".js", ".mjs")


class Treatment(Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one import reference.

    Attributes:
        treatment: How the bundler should handle the reference
        external_id: Module id in the bundle's dependency list (not set when unresolved)
        global_name: Global variable name used without a module loader
        warning: Message for unresolved references
    """

    treatment: Treatment
    external_id: str | None = None
    global_name: str | None = None
    warning: str | None = None

    @property
    def is_external(self) -> bool:
        return self.treatment is not Treatment.UNRESOLVED


def is_relative(import_ref: str) -> bool:
    return RELATIVE_MARKER.match(import_ref) is not None


def resolve(
    registry: PluginRegistry,
    descriptor: PluginDescriptor,
    import_ref: str,
    importer: Path | None = None,
    strategy: str = RESOLUTION_EXACT,
) -> Resolution:
    """Classify an import reference met while bundling `descriptor`.

    Args:
        registry: Registry of all plugins
        descriptor: Plugin being bundled
        import_ref: Reference string as written in the source
        importer: File containing the reference (defaults to the plugin entry)
        strategy: 'exact' or 'substring' matching for relative references

    Returns:
        Resolution describing the treatment and the externalization entry
    """
    if not is_relative(import_ref):
        return Resolution(Treatment.EXTERNAL, external_id=import_ref, global_name=import_ref)

    if strategy == RESOLUTION_EXACT:
        target = _join_reference(import_ref, importer or descriptor.source_file)
        match = _match_exact(registry, target)
        external_id = target
    elif strategy == RESOLUTION_SUBSTRING:
        match = _match_substring(registry, import_ref)
        external_id = match.source_path if match else None
    else:
        raise ValueError(
            f"Unknown resolution strategy: {strategy}. "
            f"Supported strategies: {', '.join(RESOLUTION_STRATEGIES)}"
        )

    if match is None:
        return Resolution(
            Treatment.UNRESOLVED,
            warning=f"Source {import_ref} is not mapped! (imported by {descriptor.name})",
        )

    return Resolution(Treatment.INTERNAL, external_id=external_id, global_name=match.name)


def _join_reference(import_ref: str, importer: Path) -> str:
    # Same id rollup gives an external relative import: resolve(dirname(importer), ref)
    return os.path.normpath(os.path.join(os.path.dirname(str(importer)), import_ref))


def _match_exact(registry: PluginRegistry, target: str) -> PluginDescriptor | None:
    stem, ext = os.path.splitext(target)
    if ext in SOURCE_EXTENSIONS:
        target = stem
    return registry.find_by_source_path(target)


def _match_substring(registry: PluginRegistry, import_ref: str) -> PluginDescriptor | None:
    fragment = RELATIVE_MARKER.sub("", import_ref)
    for descriptor in registry.values():
        if fragment in descriptor.source_path:
            return descriptor
    return None


@dataclass
class Externalizer:
    """Externalization callback for one plugin build.

    Calling the instance with an import reference returns True when the
    bundler should treat it as external. Every externalized reference is
    recorded in `table` (module id → global name); unmapped relative
    references are logged once and collected in `unresolved`.

    A fresh instance belongs to exactly one build.
    """

    registry: PluginRegistry
    descriptor: PluginDescriptor
    strategy: str = RESOLUTION_EXACT
    table: dict[str, str] = field(default_factory=dict)
    internal: dict[str, str] = field(default_factory=dict)
    unresolved: list[str] = field(default_factory=list)
    _seen: dict[tuple[str, str], Resolution] = field(default_factory=dict, repr=False)

    def __call__(self, import_ref: str, importer: Path | None = None) -> bool:
        importer = importer or self.descriptor.source_file
        key = (import_ref, os.path.dirname(str(importer)))
        if key in self._seen:
            return self._seen[key].is_external

        resolution = resolve(self.registry, self.descriptor, import_ref, importer, self.strategy)
        self._seen[key] = resolution
        logger.debug(f"{self.descriptor.name}: {import_ref} → {resolution.treatment.value}")

        if resolution.treatment is Treatment.UNRESOLVED:
            if import_ref not in self.unresolved:
                self.unresolved.append(import_ref)
                logger.warning(resolution.warning)
            return False

        self.table[resolution.external_id] = resolution.global_name
        if resolution.treatment is Treatment.INTERNAL:
            self.internal[import_ref] = resolution.global_name
        return True

    @property
    def third_party(self) -> list[str]:
        return [ref for ref, name in self.table.items() if ref == name and not os.path.isabs(ref)]
