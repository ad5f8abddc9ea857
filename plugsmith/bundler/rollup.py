# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Rollup adapter for the write phase.

Renders a rollup configuration for one bundle into a temporary ES module
inside the working directory (so Node resolves the rollup plugins from the
project's node_modules) and runs the rollup CLI on it.
"""

import asyncio
import contextlib
import json
import logging
import os
import signal
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from ..exceptions import BundlerError
from .base import Bundler, BundleGraph, OutputOptions

if TYPE_CHECKING:
    from plugsmith.settings import SystemConfig

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = ("npx", "rollup")


class RollupBundler(Bundler):
    """Write bundles by running the rollup CLI.

    Args:
        command: Command that starts rollup (e.g. ['npx', 'rollup'])
        work_dir: Directory rollup runs in; must see the project's node_modules
        babel: Transpile with @rollup/plugin-babel
        babel_helpers: Babel helpers mode ('bundled' keeps one copy per bundle)
        extensions: Source extensions tried when following relative imports
    """

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_COMMAND,
        work_dir: Path | None = None,
        babel: bool = True,
        babel_helpers: str = "bundled",
        extensions: tuple[str, ...] = (".js", ".mjs"),
    ):
        super().__init__(extensions=extensions)
        self.command = list(command)
        self.work_dir = Path(work_dir) if work_dir else Path.cwd()
        self.babel = babel
        self.babel_helpers = babel_helpers

    @classmethod
    def from_config(cls, config: "SystemConfig") -> "RollupBundler":
        bundler_config = config.bundler
        return cls(
            command=bundler_config.command,
            work_dir=config.project_dir,
            babel=bundler_config.babel,
            babel_helpers=bundler_config.babel_helpers,
            extensions=tuple(bundler_config.extensions),
        )

    def render_config(self, graph: BundleGraph, options: OutputOptions) -> str:
        """Render the rollup configuration module for one bundle."""
        external = list(graph.externals)
        for module_id in options.globals:
            if module_id not in external:
                external.append(module_id)

        output = {
            "banner": options.banner,
            "format": options.format,
            "name": options.name,
            "sourcemap": options.sourcemap,
            "globals": options.globals,
            "generatedCode": options.generated_code,
            "file": str(options.file),
        }

        lines = []
        if self.babel:
            lines.append("import { babel } from '@rollup/plugin-babel'")
            lines.append("")
            babel_options = {
                "exclude": list(graph.request.transpile_exclude),
                "babelHelpers": self.babel_helpers,
            }
            plugins = f"[babel({json.dumps(babel_options)})]"
        else:
            plugins = "[]"

        lines.append("export default {")
        lines.append(f"  input: {json.dumps(str(graph.entry))},")
        lines.append(f"  external: {json.dumps(external)},")
        lines.append(f"  plugins: {plugins},")
        lines.append(f"  output: {json.dumps(output, indent=2)}")
        lines.append("}")
        return "\n".join(lines) + "\n"

    async def write(self, graph: BundleGraph, options: OutputOptions) -> list[Path]:
        options.file.parent.mkdir(parents=True, exist_ok=True)

        fd, config_path = tempfile.mkstemp(
            prefix=f".rollup.{options.name}.", suffix=".config.mjs", dir=self.work_dir
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(self.render_config(graph, options))
            await self._run(["--config", config_path, "--silent"])
        finally:
            os.unlink(config_path)

        written = [options.file]
        if options.sourcemap:
            written.append(options.sourcemap_file)
        return written

    async def _run(self, args: list[str]) -> None:
        cmd = self.command + args
        logger.debug(f"Running {' '.join(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=self.work_dir,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except FileNotFoundError as e:
            raise BundlerError(f"Bundler command not found: {self.command[0]}") from e

        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            # npx runs rollup as a child process, so stop the whole group
            if process.returncode is None:
                logger.debug(f"Stopping {self.command[0]} (pid {process.pid})")
                with contextlib.suppress(ProcessLookupError):
                    os.killpg(process.pid, signal.SIGKILL)
            await process.wait()
            raise

        if process.returncode != 0:
            message = stderr.decode(errors="replace").strip() or stdout.decode(errors="replace").strip()
            raise BundlerError(f"rollup exited with code {process.returncode}: {message}")
