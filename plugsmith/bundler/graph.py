# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Module graph scanning for ES module sources.

Sources are parsed with tree-sitter's JavaScript grammar. Import specifiers
are read from the syntax tree:

- ``import x from 'y'`` and ``import 'y'`` (import_statement)
- ``export { x } from 'y'`` and ``export * from 'y'`` (export_statement)
- ``import('y')`` with a string literal argument (call_expression)

Comments, strings and template literals never contribute specifiers.
"""

import collections
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Callable

import tree_sitter_javascript
from tree_sitter import Language, Node, Parser

from ..exceptions import BundlerError

logger = logging.getLogger(__name__)

# Statements whose 'source' field holds the module specifier
_SOURCE_STATEMENTS = ("import_statement", "export_statement")

ExternalCallback = Callable[[str, Path], bool]


@lru_cache(maxsize=None)
def load_language() -> Language:
    """Return the JavaScript grammar bundled with tree-sitter-javascript."""
    return Language(tree_sitter_javascript.language())


def _string_value(node: Node) -> str | None:
    if node.type != "string":
        return None
    return node.text.decode("utf8")[1:-1]


def _specifier(node: Node) -> str | None:
    if node.type in _SOURCE_STATEMENTS:
        source = node.child_by_field_name("source")
        return _string_value(source) if source is not None else None

    if node.type == "call_expression":
        callee = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        if callee is None or callee.type != "import" or arguments is None:
            return None
        if arguments.named_child_count != 1:
            return None
        return _string_value(arguments.named_children[0])

    return None


def _find_first_error_node(root: Node) -> Node | None:
    queue = collections.deque([root])
    while queue:
        node = queue.popleft()
        if node.type == "ERROR" or node.is_missing:
            return node
        queue.extend(child for child in node.children if child.has_error or child.is_missing)
    return None


def find_imports(source: str, source_name: str = "<source>") -> list[str]:
    """Return the distinct import specifiers of `source` in order of appearance.

    Raises:
        BundlerError: If the source is not valid JavaScript
    """
    tree = Parser(load_language()).parse(bytes(source, "utf8"))

    if tree.root_node.has_error:
        error_node = _find_first_error_node(tree.root_node)
        line = error_node.start_point[0] + 1 if error_node else "unknown"
        col = error_node.start_point[1] + 1 if error_node else "unknown"
        raise BundlerError(f"Invalid JavaScript syntax in {source_name} near line {line}, column {col}")

    specifiers = []
    # Pre-order walk keeps source order
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        specifier = _specifier(node)
        if specifier is not None:
            if specifier not in specifiers:
                specifiers.append(specifier)
            if node.type != "call_expression":
                continue
        stack.extend(reversed(node.children))
    return specifiers


def locate_module(import_ref: str, importer: Path, extensions: tuple[str, ...]) -> Path | None:
    """Find the file a relative reference points to, trying the usual candidates."""
    base = (importer.parent / import_ref).resolve()
    candidates = []
    if base.suffix in extensions:
        candidates.append(base)
    candidates.extend(base.with_name(base.name + ext) for ext in extensions)
    candidates.extend(base / f"index{ext}" for ext in extensions)

    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


@dataclass
class ModuleGraph:
    """Modules reachable from an entry without crossing an external boundary.

    Attributes:
        entry: Entry module
        modules: Inlined modules in visiting order (entry first)
        externals: References the callback externalized
        imports: Specifiers found per inlined module
    """

    entry: Path
    modules: list[Path] = field(default_factory=list)
    externals: list[str] = field(default_factory=list)
    imports: dict[Path, list[str]] = field(default_factory=dict)


def scan_module_graph(
    entry: Path,
    external: ExternalCallback,
    extensions: tuple[str, ...] = (".js", ".mjs"),
) -> ModuleGraph:
    """Walk the module graph from `entry`, asking `external` about every reference.

    Relative references the callback keeps are followed and inlined. Bare
    references are never followed: the resolver's Externalizer always
    externalizes them, but a callback that keeps one gets a warning and the
    reference is left as an unresolved external, as rollup does.

    Raises:
        BundlerError: If a module cannot be read or parsed, or an inlined
            reference points to no file
    """
    entry = Path(entry).resolve()
    graph = ModuleGraph(entry=entry)
    pending = [entry]
    visited = set()

    while pending:
        module = pending.pop(0)
        if module in visited:
            continue
        visited.add(module)
        graph.modules.append(module)

        try:
            source = module.read_text(encoding="utf-8")
        except OSError as e:
            raise BundlerError(f"Cannot read module {module}: {e}") from e

        specifiers = find_imports(source, str(module))
        graph.imports[module] = specifiers

        for specifier in specifiers:
            if external(specifier, module):
                if specifier not in graph.externals:
                    graph.externals.append(specifier)
                continue

            if not specifier.startswith("."):
                logger.warning(f"'{specifier}' is imported by {module.name} but could not be resolved")
                if specifier not in graph.externals:
                    graph.externals.append(specifier)
                continue

            target = locate_module(specifier, module, extensions)
            if target is None:
                raise BundlerError(f"Could not resolve '{specifier}' from {module}")
            pending.append(target)

    return graph
