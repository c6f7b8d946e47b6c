"""
View model: render-time values computed beside the frozen tree.

Records are never rewritten for presentation. Anything a renderer needs
that is not part of resolution (HTML-safe ids, anchors, hrefs into output
partitions, links to external docs for global objects) lives on
``NodeView`` values built here.

Usage:
    views = ViewModel(tree, config).build()
    for view in views[0].walk():
        print(view.html_id, view.href)
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from docspine.model.records import SymbolRecord
from docspine.profiles import get_profile

if TYPE_CHECKING:
    from docspine.config import DocSpineConfig
    from docspine.resolver.tree import DocTree

_UNSAFE = re.compile(r"\s+")


def html_id(record_id: str) -> str:
    """``docspine/errors`` → ``docspine-errors``; ``new Foo`` → ``new-Foo``."""
    return _UNSAFE.sub("-", record_id.replace("/", "-"))


@dataclass(frozen=True)
class NodeView:
    """Presentation values for one tree node."""

    record: SymbolRecord
    html_id: str
    anchor: str
    href: str
    children: tuple[NodeView, ...] = ()
    superclass_href: str | None = None

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def name(self) -> str:
        return self.record.name or self.record.id

    @property
    def type(self) -> str:
        return self.record.type

    def walk(self) -> Iterator[NodeView]:
        yield self
        for child in self.children:
            yield from child.walk()


class ViewModel:
    """Builds ``NodeView`` trees and resolves links.

    Args:
        tree: Resolved tree
        config: Supplies ``global_profile`` and ``doc_path``
    """

    def __init__(self, tree: DocTree, config: DocSpineConfig):
        self.tree = tree
        self.globals = get_profile(config.global_profile)
        self.doc_path = config.doc_path

    def build(self) -> tuple[NodeView, ...]:
        return tuple(self.view(child) for child in self.tree.children)

    def view(self, record: SymbolRecord) -> NodeView:
        return NodeView(
            record=record,
            html_id=html_id(record.id),
            anchor=self.anchor(record),
            href=self.href(record),
            children=tuple(self.view(child) for child in record.children),
            superclass_href=self.link(record.superclass) if record.superclass else None,
        )

    def anchor(self, record: SymbolRecord) -> str:
        return html_id(record.path or record.id)

    def href(self, record: SymbolRecord) -> str:
        """Classes and sections own their page; members are anchors in it."""
        page = f"{record.out_file or ''}.html"
        if record.is_class or record.is_section:
            return page
        return f"{page}#{self.anchor(record)}"

    def link(self, target: str) -> str | None:
        """Href for an id: a record in the tree, else a global object's doc page.

        Unknown targets return None; broken link handling is not applied.
        """
        record = self.tree.get(target)
        if record is not None:
            return self.href(record)
        if target in self.globals and self.doc_path:
            return self.doc_path.replace("%s", target)
        return None


__all__ = ["NodeView", "ViewModel", "html_id"]
