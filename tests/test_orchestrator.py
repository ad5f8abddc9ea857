# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Tests for single plugin builds."""

import asyncio
import json

import pytest

from plugsmith.banner import BannerGenerator
from plugsmith.bundler import RollupBundler
from plugsmith.exceptions import BundleError
from plugsmith.orchestrator import BundleOrchestrator
from plugsmith.resolver import RESOLUTION_SUBSTRING
from plugsmith.settings import BannerConfig, load_config

from tests.conftest import StubBundler


def _read_globals(path):
    for line in path.read_text().splitlines():
        if line.startswith("// globals "):
            return json.loads(line[len("// globals "):])
    raise AssertionError(f"no globals line in {path}")


def test_build_externalizes_sibling_plugin(registry, stub_bundler):
    """Verify FooBar references Foo as a global instead of inlining it."""
    orchestrator = BundleOrchestrator(registry, stub_bundler)

    result = asyncio.run(orchestrator.build_one(registry["FooBar"]))

    assert result.globals == {registry["Foo"].source_path: "Foo", "lodash": "lodash"}
    assert result.internal == {"./foo": "Foo"}
    assert result.unresolved == ["./helpers/compute.mjs"]
    assert registry["Foo"].source_file not in result.inlined
    assert [p.name for p in result.inlined] == ["foo-bar.js", "compute.mjs"]


def test_build_writes_bundle_and_sourcemap(registry, stub_bundler, dist_root):
    """Verify the bundle pair lands at the mirrored output path."""
    orchestrator = BundleOrchestrator(registry, stub_bundler)

    result = asyncio.run(orchestrator.build_one(registry["EventHandler"]))

    bundle = dist_root / "dom" / "event-handler.js"
    assert result.files == [bundle, dist_root / "dom" / "event-handler.js.map"]
    assert bundle.exists()
    assert "// umd EventHandler" in bundle.read_text()
    assert _read_globals(bundle) == {}


def test_build_places_banner(registry, stub_bundler, dist_root):
    banner = BannerGenerator(BannerConfig(project_name="Bootstrap", version="5.3.0"))
    orchestrator = BundleOrchestrator(registry, stub_bundler, banner=banner)

    asyncio.run(orchestrator.build_one(registry["Alert"]))

    text = (dist_root / "alert.js").read_text()
    assert text.startswith("/*!\n  * Bootstrap alert.js v5.3.0\n")


def test_transitive_plugin_imports_stay_external(registry, stub_bundler, source_root):
    """Verify plugins reached through another plugin are not inlined."""
    orchestrator = BundleOrchestrator(registry, stub_bundler)

    result = asyncio.run(orchestrator.build_one(registry["Alert"]))

    assert result.globals == {
        str(source_root / "dom" / "event-handler.js"): "EventHandler",
        registry["BaseComponent"].source_path: "BaseComponent",
    }
    assert [p.name for p in result.inlined] == ["alert.js"]


def test_analyze_does_not_write(registry, stub_bundler, dist_root):
    orchestrator = BundleOrchestrator(registry, stub_bundler)

    externalizer, graph = asyncio.run(orchestrator.analyze(registry["BaseComponent"]))

    assert externalizer.internal == {"./dom/event-handler": "EventHandler", "./util/config": "Config"}
    assert graph.entry == registry["BaseComponent"].source_file
    assert not dist_root.exists()
    assert stub_bundler.written == []


def test_builds_use_fresh_externalizers(registry, stub_bundler):
    """Verify one build's table never leaks into another's."""
    orchestrator = BundleOrchestrator(registry, stub_bundler)

    first = asyncio.run(orchestrator.build_one(registry["FooBar"]))
    second = asyncio.run(orchestrator.build_one(registry["Foo"]))

    assert first.globals
    assert second.globals == {}


def test_substring_strategy(registry, stub_bundler):
    orchestrator = BundleOrchestrator(registry, stub_bundler, strategy=RESOLUTION_SUBSTRING)

    result = asyncio.run(orchestrator.build_one(registry["BaseComponent"]))

    assert set(result.internal.values()) == {"EventHandler", "Config"}


def test_write_failure_is_wrapped(registry):
    """Verify bundler failures are reported against the plugin."""
    orchestrator = BundleOrchestrator(registry, StubBundler(fail={"Alert"}))

    with pytest.raises(BundleError) as exc_info:
        asyncio.run(orchestrator.build_one(registry["Alert"]))

    assert exc_info.value.plugin_name == "Alert"
    assert str(exc_info.value) == "Alert: cannot bundle Alert"


def test_graph_failure_is_wrapped(registry, source_root, stub_bundler):
    (source_root / "foo.js").write_text("import x from './missing-helper'\n")
    orchestrator = BundleOrchestrator(registry, stub_bundler)

    with pytest.raises(BundleError, match="Foo: Could not resolve './missing-helper'"):
        asyncio.run(orchestrator.build_one(registry["Foo"]))


def test_usage_example_in_doc_comment_is_not_an_import(registry, source_root, stub_bundler):
    """Verify a path inside a doc comment neither inlines nor fails the build."""
    (source_root / "foo.js").write_text(
        "/** Usage: import Foo from './path/to/your-copy' */\n"
        "export default class Foo {}\n"
    )
    orchestrator = BundleOrchestrator(registry, stub_bundler)

    result = asyncio.run(orchestrator.build_one(registry["Foo"]))

    assert result.globals == {}
    assert result.unresolved == []
    assert [p.name for p in result.inlined] == ["foo.js"]


def test_unexpected_error_is_wrapped(registry):
    class BrokenBundler(StubBundler):
        async def write(self, graph, options):
            raise RuntimeError("disk on fire")

    orchestrator = BundleOrchestrator(registry, BrokenBundler())

    with pytest.raises(BundleError, match="Foo: RuntimeError: disk on fire"):
        asyncio.run(orchestrator.build_one(registry["Foo"]))


def test_from_config_defaults_to_rollup(registry, tmp_path):
    """Verify settings flow into the orchestrator and the rollup adapter."""
    (tmp_path / "plugsmith.yaml").write_text(
        "resolution: substring\n"
        "banner:\n"
        "  project_name: Bootstrap\n"
        "bundler:\n"
        "  command: [node_modules/.bin/rollup]\n"
    )
    config = load_config()

    orchestrator = BundleOrchestrator.from_config(config, registry)

    assert isinstance(orchestrator.bundler, RollupBundler)
    assert orchestrator.bundler.command == ["node_modules/.bin/rollup"]
    assert orchestrator.bundler.work_dir == config.project_dir
    assert orchestrator.strategy == "substring"
    assert orchestrator.banner.config.project_name == "Bootstrap"
    assert orchestrator.transpile_exclude == ("node_modules/**",)
