"""Console renderer: prints the resolved tree with rich."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from docspine.renderers.base import BaseRenderer
from docspine.renderers.view import NodeView, ViewModel

if TYPE_CHECKING:
    from docspine.config import DocSpineConfig
    from docspine.resolver.tree import DocTree

TYPE_STYLES = {
    "section": "bold magenta",
    "class": "bold cyan",
    "constructor": "green",
    "event": "yellow",
    "utility": "blue",
}


def node_label(view: NodeView) -> str:
    record = view.record
    style = TYPE_STYLES.get(record.type, "white")
    label = f"[{style}]{escape(view.name)}[/] [dim]{escape(record.type)}[/]"
    if record.out_file:
        label += f" [dim]→ {escape(view.href)}[/]"
    if record.inherited_from:
        label += f" [italic dim](from {escape(record.inherited_from)})[/]"
    if record.superclass:
        label += f" [dim]extends {escape(record.superclass)}[/]"
    if record.subclasses:
        label += f" [dim]subclasses: {escape(', '.join(record.subclasses))}[/]"
    if record.aliases:
        label += f" [dim]aliases: {escape(', '.join(record.aliases))}[/]"
    return label


class ConsoleRenderer(BaseRenderer):
    """Print the tree; the title is the root label."""

    name = "console"

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def render(self, tree: DocTree, config: DocSpineConfig) -> None:
        context = self.context(tree, config)
        root = Tree(f"[bold]{escape(context['title'].strip() or 'API documentation')}[/]")
        for view in ViewModel(tree, config).build():
            self._add(root, view)
        self.console.print(root)

    def _add(self, parent: Tree, view: NodeView) -> None:
        branch = parent.add(node_label(view))
        for child in view.children:
            self._add(branch, child)


def render_console(tree: DocTree, config: DocSpineConfig) -> None:
    ConsoleRenderer()(tree, config)


__all__ = ["ConsoleRenderer", "node_label", "render_console"]
