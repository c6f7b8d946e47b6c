"""
Base renderer.

Provides what every renderer needs besides its own output format: the run
metadata (title rendered from its template, date, contributing files) and
uniform error wrapping into ``RenderError``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from email.utils import formatdate
from typing import TYPE_CHECKING, Any

from docspine.errors import DocSpineError, RenderError
from docspine.logging import get_logger
from docspine.templating import load_package_metadata, render_title

if TYPE_CHECKING:
    from docspine.config import DocSpineConfig
    from docspine.resolver.tree import DocTree

logger = get_logger(__name__)


class BaseRenderer(ABC):
    """Base class for renderers.

    Manifesto:
        Renderers are strictly downstream of resolution. They read the
        frozen tree, compute whatever presentation values they need into
        view objects, and write output. They never write back onto records.

    Architecture:
        ```
        DocTree ──► BaseRenderer.__call__(tree, config)
                         │
                         ├──► context()  title, date, files, package
                         │
                         └──► render()   format-specific output
                                  │
                                  ▼
                          RenderError on failure
        ```

    Tags:
        - renderer
        - plugin
        - core_infrastructure
    """

    # Registry name
    name: str = ""

    def __call__(self, tree: DocTree, config: DocSpineConfig) -> None:
        logger.info("render_started", renderer=self.name, records=len(tree))
        try:
            self.render(tree, config)
        except DocSpineError as e:
            raise e.with_context(renderer=self.name)
        except (OSError, TypeError, ValueError) as e:
            raise RenderError(f"{self.name} renderer failed: {e}", cause=e).with_context(renderer=self.name)
        logger.info("render_completed", renderer=self.name)

    @abstractmethod
    def render(self, tree: DocTree, config: DocSpineConfig) -> None:
        """Produce output for a resolved tree."""

    def context(self, tree: DocTree, config: DocSpineConfig) -> dict[str, Any]:
        """Run metadata shared by renderers."""
        package = load_package_metadata(config.package_file)
        return {
            "title": render_title(config.title, package),
            "date": formatdate(usegmt=True),
            "files": tree.files,
            "package": package,
        }


__all__ = ["BaseRenderer"]
