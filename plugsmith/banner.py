# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""License banner placed at the top of every bundle."""

import datetime

from .settings.schema import BannerConfig


class BannerGenerator:
    """Render the license header comment for a plugin bundle."""

    def __init__(self, config: BannerConfig | None = None):
        self.config = config or BannerConfig()

    def render(self, display_name: str) -> str:
        """Return the banner for the plugin at `display_name` (relative source path)."""
        cfg = self.config
        year = cfg.year or datetime.date.today().year

        title = " ".join(part for part in (cfg.project_name, display_name) if part)
        if cfg.version:
            title += f" v{cfg.version}"
        lines = [_with_link(title, cfg.homepage)]

        if cfg.authors:
            years = str(year) if not cfg.start_year or cfg.start_year >= year else f"{cfg.start_year}-{year}"
            lines.append(_with_link(f"Copyright {years} {cfg.authors}", cfg.authors_url))

        if cfg.license_name:
            lines.append(_with_link(f"Licensed under {cfg.license_name}", cfg.license_url))

        body = "\n".join(f"  * {line}" for line in lines)
        return f"/*!\n{body}\n  */"


def _with_link(text: str, url: str | None) -> str:
    return f"{text} ({url})" if url else text
