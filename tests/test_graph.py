# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Tests for import scanning and module graph walking."""

import asyncio
import logging

import pytest

from plugsmith.bundler import BundleRequest, find_imports, scan_module_graph
from plugsmith.exceptions import BundlerError
from plugsmith.resolver import Externalizer


def _third_party_only(ref, importer):
    return not ref.startswith(".")


def test_find_imports_covers_import_forms():
    """Verify static, re-export, side-effect and dynamic imports are found in order."""
    source = (
        "import a from 'alpha'\n"
        "import { b,\n"
        "  c } from \"./beta\"\n"
        "export * from './gamma.js'\n"
        "import './side-effect'\n"
        "const d = import('delta')\n"
    )
    assert find_imports(source) == ["alpha", "./beta", "./gamma.js", "./side-effect", "delta"]


def test_find_imports_deduplicates():
    source = "import a from './a'\nexport { a } from './a'\n"
    assert find_imports(source) == ["./a"]


def test_find_imports_ignores_comments_and_strings():
    """Verify specifiers inside comments, strings and templates are not imports."""
    source = (
        "/**\n"
        " * Usage: import Foo from './path/to/your-copy'\n"
        " */\n"
        "// import './commented-out'\n"
        "const hint = \"import x from './in-a-string'\"\n"
        "const lazy = `import('./in-a-template')`\n"
        "import real from './real'\n"
        "export default class Foo {}\n"
    )
    assert find_imports(source) == ["./real"]


def test_find_imports_skips_computed_dynamic_import():
    assert find_imports("const name = 'x'\nimport(`./${name}`)\n") == []


def test_find_imports_rejects_invalid_syntax():
    with pytest.raises(BundlerError, match="Invalid JavaScript syntax in broken.js"):
        find_imports("const a = 1\nimport { from './x'\n", "broken.js")


def test_scan_follows_relative_imports(tmp_path):
    """Verify kept relative references are inlined, bare ones left external."""
    (tmp_path / "lib").mkdir()
    (tmp_path / "main.js").write_text("import x from './lib/x'\nimport y from 'y-package'\n")
    (tmp_path / "lib" / "x.js").write_text("import z from '../z.mjs'\n")
    (tmp_path / "z.mjs").write_text("export default 1\n")

    graph = scan_module_graph(tmp_path / "main.js", _third_party_only)

    assert [m.name for m in graph.modules] == ["main.js", "x.js", "z.mjs"]
    assert graph.externals == ["y-package"]
    assert graph.imports[graph.entry] == ["./lib/x", "y-package"]


def test_scan_resolves_directory_index(tmp_path):
    (tmp_path / "util").mkdir()
    (tmp_path / "main.js").write_text("import u from './util'\n")
    (tmp_path / "util" / "index.js").write_text("export default 1\n")

    graph = scan_module_graph(tmp_path / "main.js", _third_party_only)

    assert graph.modules[-1] == (tmp_path / "util" / "index.js").resolve()


def test_scan_visits_shared_module_once(tmp_path):
    (tmp_path / "main.js").write_text("import a from './a'\nimport b from './b'\n")
    (tmp_path / "a.js").write_text("import s from './shared'\n")
    (tmp_path / "b.js").write_text("import s from './shared'\n")
    (tmp_path / "shared.js").write_text("export default 1\n")

    graph = scan_module_graph(tmp_path / "main.js", _third_party_only)

    assert [m.name for m in graph.modules] == ["main.js", "a.js", "b.js", "shared.js"]


def test_scan_fails_for_missing_relative_module(tmp_path):
    """Verify an inlined reference to no file is a bundler error."""
    (tmp_path / "main.js").write_text("import x from './missing'\n")

    with pytest.raises(BundlerError, match="Could not resolve './missing'"):
        scan_module_graph(tmp_path / "main.js", _third_party_only)


def test_scan_fails_for_unreadable_entry(tmp_path):
    with pytest.raises(BundlerError, match="Cannot read module"):
        scan_module_graph(tmp_path / "absent.js", _third_party_only)


def test_scan_keeps_unresolvable_bare_import_external(tmp_path, caplog):
    """Verify a bare reference the callback keeps is left external with a warning."""
    caplog.set_level(logging.WARNING, logger="plugsmith.bundler.graph")
    (tmp_path / "main.js").write_text("import x from 'x-package'\n")

    graph = scan_module_graph(tmp_path / "main.js", lambda ref, importer: False)

    assert graph.externals == ["x-package"]
    assert any("could not be resolved" in r.getMessage() for r in caplog.records)


def test_callback_receives_importer(tmp_path):
    """Verify the callback is told which module made each reference."""
    (tmp_path / "main.js").write_text("import x from './x'\n")
    (tmp_path / "x.js").write_text("import y from 'y'\n")
    calls = []

    def external(ref, importer):
        calls.append((ref, importer.name))
        return not ref.startswith(".")

    scan_module_graph(tmp_path / "main.js", external)

    assert calls == [("./x", "main.js"), ("y", "x.js")]


def test_bundle_with_externalizer(registry, stub_bundler):
    """Verify sibling plugins are externalized and unmapped helpers inlined."""
    plugin = registry["FooBar"]
    externalizer = Externalizer(registry, plugin)
    request = BundleRequest(entry=plugin.source_file, external=externalizer)

    graph = asyncio.run(stub_bundler.bundle(request))

    assert [m.name for m in graph.modules.modules] == ["foo-bar.js", "compute.mjs"]
    assert graph.externals == ["./foo", "lodash"]
    assert externalizer.unresolved == ["./helpers/compute.mjs"]
