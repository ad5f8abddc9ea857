# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Tests for plugin discovery and the plugin registry."""

import os

import pytest

from plugsmith.exceptions import DiscoveryError, NamingCollisionError
from plugsmith.registry import PluginDescriptor, PluginRegistry


def test_discover_finds_every_plugin(registry):
    """Verify every .js file under the source root becomes a plugin."""
    assert set(registry) == {"Alert", "BaseComponent", "EventHandler", "Foo", "FooBar", "Config"}


def test_helper_modules_outside_pattern_are_not_plugins(registry):
    """Verify .mjs helpers are not matched by the default pattern."""
    assert "Compute" not in registry


def test_descriptor_paths(registry, source_root, dist_root):
    """Verify source, output and display paths of a nested plugin."""
    handler = registry["EventHandler"]

    assert handler.source_file == source_root / "dom" / "event-handler.js"
    assert handler.output_path == dist_root / "dom" / "event-handler.js"
    assert handler.display_name == "dom/event-handler.js"
    assert handler.source_path == os.path.normpath(str(source_root / "dom" / "event-handler"))
    assert handler.sourcemap_path == dist_root / "dom" / "event-handler.js.map"


def test_output_paths_are_unique(registry):
    """Verify no two plugins write to the same bundle."""
    outputs = [descriptor.output_path for descriptor in registry.values()]
    assert len(outputs) == len(set(outputs))


def test_discovery_order_is_sorted(registry):
    """Verify iteration follows sorted source paths."""
    sources = [descriptor.source_file for descriptor in registry.values()]
    assert sources == sorted(sources)


def test_registry_is_read_only(registry):
    """Verify the registry cannot be modified after discovery."""
    with pytest.raises(TypeError):
        registry["Other"] = registry["Alert"]
    with pytest.raises(TypeError):
        registry._entries["Other"] = registry["Alert"]


def test_find_by_source_path(registry, source_root):
    """Verify lookup by extension-less source path."""
    found = registry.find_by_source_path(str(source_root / "foo"))
    assert found is registry["Foo"]
    assert registry.find_by_source_path(str(source_root / "missing")) is None


def test_name_collision_is_fatal(tmp_path):
    """Verify two files with the same entity name abort discovery."""
    root = tmp_path / "src"
    (root / "a").mkdir(parents=True)
    (root / "b").mkdir(parents=True)
    (root / "a" / "alert.js").write_text("export default 1\n")
    (root / "b" / "alert.js").write_text("export default 2\n")

    with pytest.raises(NamingCollisionError) as exc_info:
        PluginRegistry.discover(root, tmp_path / "dist")

    assert exc_info.value.name == "Alert"
    assert "a/alert.js" in str(exc_info.value.first).replace(os.sep, "/")
    assert "b/alert.js" in str(exc_info.value.second).replace(os.sep, "/")


def test_collision_between_kebab_and_pascal_case(tmp_path):
    """Verify 'foo-bar.js' and 'FooBar.js' collide."""
    root = tmp_path / "src"
    root.mkdir()
    (root / "foo-bar.js").write_text("")
    (root / "FooBar.js").write_text("")

    with pytest.raises(NamingCollisionError):
        PluginRegistry.discover(root, tmp_path / "dist")


def test_collision_is_a_discovery_error():
    assert issubclass(NamingCollisionError, DiscoveryError)


def test_missing_source_root(tmp_path):
    """Verify a missing source directory raises DiscoveryError."""
    with pytest.raises(DiscoveryError, match="not found"):
        PluginRegistry.discover(tmp_path / "nope", tmp_path / "dist")


def test_empty_source_root(tmp_path):
    """Verify an empty source directory yields an empty registry."""
    (tmp_path / "src").mkdir()
    registry = PluginRegistry.discover(tmp_path / "src", tmp_path / "dist")
    assert len(registry) == 0


def test_custom_pattern(source_root, dist_root):
    """Verify the discovery pattern selects the plugin files."""
    registry = PluginRegistry.discover(source_root, dist_root, pattern="*.js")
    assert "EventHandler" not in registry
    assert "Alert" in registry


def test_registry_from_descriptors(tmp_path):
    """Verify a registry can be built from explicit descriptors."""
    descriptor = PluginDescriptor(
        name="Alert",
        source_file=tmp_path / "alert.js",
        output_path=tmp_path / "dist" / "alert.js",
        display_name="alert.js",
    )
    registry = PluginRegistry([descriptor])

    assert registry["Alert"] is descriptor
    assert list(registry) == ["Alert"]
    assert len(registry) == 1
