"""Built-in renderers.

- ``json``: one JSON document with the resolved tree
- ``console``: rich tree printed to the terminal
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from docspine.renderers.base import BaseRenderer
from docspine.renderers.console import ConsoleRenderer, render_console
from docspine.renderers.json import JSONRenderer, render_json
from docspine.renderers.view import NodeView, ViewModel, html_id

if TYPE_CHECKING:
    from docspine.registry import PluginRegistry


def register(registry: PluginRegistry) -> None:
    """Plugin registering the built-in renderers."""
    registry.register_renderer("json", render_json)
    registry.register_renderer("console", render_console)


__all__ = [
    "BaseRenderer",
    "JSONRenderer",
    "ConsoleRenderer",
    "NodeView",
    "ViewModel",
    "html_id",
    "render_json",
    "render_console",
    "register",
]
