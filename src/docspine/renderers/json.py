"""
JSON renderer.

Writes ``<output>/<basename(output)>.json`` containing
``{title, date, files, tree}``. The output directory is cleared first unless
``keep_out_dir`` is set; ``format_json`` indents the document.
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Any

from docspine.errors import RenderError
from docspine.logging import get_logger
from docspine.renderers.base import BaseRenderer

if TYPE_CHECKING:
    from docspine.config import DocSpineConfig
    from docspine.resolver.tree import DocTree

logger = get_logger(__name__)


def output_file(output: Path) -> Path:
    """``docs/api`` → ``docs/api/api.json``."""
    name = output.resolve().name or "docs"
    return output / f"{name}.json"


class JSONRenderer(BaseRenderer):
    """Render the resolved tree as one JSON document."""

    name = "json"

    def render(self, tree: DocTree, config: DocSpineConfig) -> None:
        output = Path(config.output)
        if not config.keep_out_dir:
            self._clear(output)
        output.mkdir(parents=True, exist_ok=True)

        context = self.context(tree, config)
        document: dict[str, Any] = {
            "title": context["title"],
            "date": context["date"],
            "files": context["files"],
            "tree": tree.to_dict(),
        }

        target = output_file(output)
        with open(target, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=4 if config.format_json else None)
            if config.format_json:
                f.write("\n")

        logger.info("json_written", file=str(target), records=len(tree))

    def _clear(self, output: Path) -> None:
        resolved = output.resolve()
        cwd = Path.cwd().resolve()
        if resolved == cwd or resolved in cwd.parents:
            raise RenderError(
                f"Refusing to clear {output}: it contains the working directory; use keep_out_dir"
            )
        if resolved.exists():
            shutil.rmtree(resolved)
            logger.debug("output_cleared", output=str(output))


def render_json(tree: DocTree, config: DocSpineConfig) -> None:
    JSONRenderer()(tree, config)


__all__ = ["JSONRenderer", "output_file", "render_json"]
