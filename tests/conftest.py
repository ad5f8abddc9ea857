# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Shared fixtures: an isolated project directory, a small plugin tree and a
bundler stand-in that walks the real module graph but fakes the write phase."""

import asyncio
import json
import logging
import os
from pathlib import Path

import pytest

from plugsmith.bundler import Bundler
from plugsmith.exceptions import BundlerError
from plugsmith.registry import PluginRegistry
from plugsmith.settings import reset_config

PLUGIN_SOURCES = {
    "alert.js": (
        "import EventHandler from './dom/event-handler.js'\n"
        "import BaseComponent from './base-component'\n"
        "\n"
        "export default class Alert extends BaseComponent {}\n"
    ),
    "base-component.js": (
        "import EventHandler from './dom/event-handler'\n"
        "import Config from './util/config'\n"
        "\n"
        "export default class BaseComponent extends Config {}\n"
    ),
    "dom/event-handler.js": "export default {}\n",
    "foo.js": "export default class Foo {}\n",
    "foo-bar.js": (
        "import Foo from './foo'\n"
        "import { compute } from './helpers/compute.mjs'\n"
        "import lodash from 'lodash'\n"
        "\n"
        "export default class FooBar extends Foo {}\n"
    ),
    "util/config.js": "export default class Config {}\n",
}

HELPER_SOURCES = {
    "helpers/compute.mjs": "export function compute() {\n  return 1\n}\n",
}


@pytest.fixture(autouse=True)
def isolated_project(tmp_path, monkeypatch):
    """Run every test inside an empty project directory with a clean environment."""
    for key in list(os.environ):
        if key.startswith("PLUGSMITH_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("PLUGSMITH_PROJECT_DIR", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield tmp_path
    reset_config()


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging system between tests."""
    from rich.logging import RichHandler

    root = logging.getLogger()
    saved_level = root.level
    saved_handler_levels = {handler: handler.level for handler in root.handlers}
    for handler in root.handlers[:]:
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    yield
    for handler in root.handlers[:]:
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    for handler, level in saved_handler_levels.items():
        handler.setLevel(level)
    root.setLevel(saved_level)


@pytest.fixture
def source_root(tmp_path) -> Path:
    """Plugin sources under js/src (the default source directory)."""
    root = tmp_path / "js" / "src"
    for relative, content in {**PLUGIN_SOURCES, **HELPER_SOURCES}.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root.resolve()


@pytest.fixture
def dist_root(tmp_path) -> Path:
    return (tmp_path / "js" / "dist").resolve()


@pytest.fixture
def registry(source_root, dist_root) -> PluginRegistry:
    return PluginRegistry.discover(source_root, dist_root)


class StubBundler(Bundler):
    """Bundler with the real graph phase and a fake write phase.

    The written bundle lists the banner, the UMD name, the globals table and
    the inlined modules, which is enough to check what a real bundler would
    have been told.

    Args:
        delays: Seconds to wait in write(), per plugin name
        fail: Plugin names whose write() raises BundlerError
    """

    def __init__(self, delays: dict[str, float] | None = None, fail=(), default_delay: float = 0.0):
        super().__init__()
        self.delays = delays or {}
        self.default_delay = default_delay
        self.fail = set(fail)
        self.active = 0
        self.peak = 0
        self.written: list[str] = []

    async def write(self, graph, options):
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            delay = self.delays.get(options.name, self.default_delay)
            if delay:
                await asyncio.sleep(delay)
            if options.name in self.fail:
                raise BundlerError(f"cannot bundle {options.name}")

            lines = [
                options.banner,
                f"// {options.format} {options.name}",
                f"// globals {json.dumps(options.globals, sort_keys=True)}",
            ]
            lines.extend(f"// inlined {module.name}" for module in graph.modules.modules)

            options.file.parent.mkdir(parents=True, exist_ok=True)
            options.file.write_text("\n".join(lines) + "\n")
            options.sourcemap_file.write_text(json.dumps({"version": 3, "file": options.file.name}))
        finally:
            self.active -= 1

        self.written.append(options.name)
        return [options.file, options.sourcemap_file]


@pytest.fixture
def stub_bundler() -> StubBundler:
    return StubBundler()
