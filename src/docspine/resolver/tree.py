"""
Tree resolver: runs every resolution stage once and returns a frozen tree.

Manifesto:
    Resolution is a single synchronous pass over a sealed collection. Its
    result depends only on the collection's content: every positional
    decision is re-derived from the canonical sort, never from the order
    files were parsed in.

Architecture:
    ::

        RecordCollection ──seal()──┐
                                   ▼
        ┌──────────────┐  ┌───────────┐  ┌────────────┐
        │   sections   │─▶│ hierarchy │─▶│  classify  │
        └──────────────┘  └───────────┘  └────────────┘
                                                 │
        ┌──────────────┐  ┌─────────────┐        │
        │   DocTree    │◀─│  grouping   │◀─ inheritance
        │   (frozen)   │  └─────────────┘
        └──────────────┘

Guardrails:
    ❌ DON'T: Resolve the same collection twice
    ✅ DO: Build a new collection per run (ResolutionStateError otherwise)

    ❌ DON'T: Write render-time values onto resolved records
    ✅ DO: Compute them into view objects (docspine.renderers.view)

Examples:
    >>> collection = RecordCollection()
    >>> _ = collection.add(SymbolRecord(id="Button", type="class", section="UI"))
    >>> tree = TreeResolver().resolve(collection)
    >>> tree.get("Button").out_file
    'button'

Tags:
    resolver, tree, immutability, pipeline, docspine

Doc-Types:
    - API Reference
    - Architecture Guide
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from docspine.logging import get_logger, log_stage
from docspine.model.records import SymbolRecord
from docspine.resolver.classify import classify_records, link_bound_pairs
from docspine.resolver.collection import RecordCollection
from docspine.resolver.diagnostics import DiagnosticReport
from docspine.resolver.grouping import GroupingOptions, OutputGrouper
from docspine.resolver.hierarchy import build_hierarchy
from docspine.resolver.inheritance import InheritanceResolver
from docspine.resolver.sections import guess_sections

if TYPE_CHECKING:
    from docspine.config import DocSpineConfig

logger = get_logger(__name__)


@dataclass(frozen=True)
class DocTree:
    """Resolved, read-only documentation tree.

    Attributes:
        children: Top-level nodes in canonical order
        records: Final id to record, sections excluded
        sections: Lowercased section id to section record
        order: Canonical collection keys the tree was built from
        diagnostics: Everything reported while collecting and resolving
    """

    children: tuple[SymbolRecord, ...]
    records: Mapping[str, SymbolRecord]
    sections: Mapping[str, SymbolRecord]
    order: tuple[str, ...]
    diagnostics: DiagnosticReport

    def get(self, record_id: str) -> SymbolRecord | None:
        return self.records.get(record_id)

    def walk(self) -> Iterator[SymbolRecord]:
        """Depth-first, in display order."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    @property
    def files(self) -> list[str]:
        """Source files that contributed records, sorted."""
        return sorted({record.file for record in self.records.values() if record.file})

    def to_dict(self) -> dict[str, Any]:
        return {"children": [child.to_dict() for child in self.children]}

    def __len__(self) -> int:
        return len(self.records)


class TreeResolver:
    """Runs sections → hierarchy → classify → inheritance → grouping.

    Args:
        config: Supplies grouping flags, prefix/suffix and strict mode
        strict: Overrides ``config.strict``; raise the first error-severity
            diagnostic after resolution
    """

    def __init__(self, config: DocSpineConfig | None = None, strict: bool | None = None):
        if config is None:
            from docspine.config import DocSpineConfig

            config = DocSpineConfig()
        self.config = config
        self.grouping = GroupingOptions.from_options(
            split_by_class=config.split_by_class,
            split_from_ns=config.split_from_ns,
            prefix=config.prefix,
            suffix=config.suffix,
        )
        self.strict = config.strict if strict is None else strict

    def resolve(self, collection: RecordCollection) -> DocTree:
        """Resolve a collection into a frozen DocTree.

        Raises:
            ResolutionStateError: The collection was already resolved
            ResolutionError: In strict mode, the first error-severity diagnostic
        """
        collection.seal()
        report = collection.diagnostics

        with log_stage("sections", records=len(collection) - 1) as timer:
            timer.add_metric("relocated", guess_sections(collection, report))

        with log_stage("hierarchy"):
            hierarchy = build_hierarchy(collection, report)

        with log_stage("classify"):
            dropped: list[SymbolRecord] = []
            records = classify_records(hierarchy.records, report, dropped)
            link_bound_pairs(records)
            if dropped:
                hierarchy.top_level = _unlink(collection, hierarchy.top_level, dropped)

        with log_stage("inheritance"):
            promoted = InheritanceResolver(records, report).run()

        top_level = list(hierarchy.top_level)
        top_level.extend(promoted)
        top_level.sort(key=hierarchy.position)

        with log_stage("grouping", policy=self.grouping.policy.value):
            top_level = OutputGrouper(self.grouping, records).assign(top_level)

        tree = DocTree(
            children=tuple(top_level),
            records=MappingProxyType(records),
            sections=MappingProxyType(hierarchy.sections),
            order=hierarchy.order,
            diagnostics=report,
        )
        _freeze(tree, collection)

        logger.info(
            "tree_resolved",
            records=len(records),
            top_level=len(tree.children),
            diagnostics=len(report),
            errors=len(report.errors),
        )

        if self.strict and report.has_errors:
            raise report.first_error()
        return tree


def _unlink(
    collection: RecordCollection,
    top_level: list[SymbolRecord],
    dropped: list[SymbolRecord],
) -> list[SymbolRecord]:
    """Detach clash losers from their parents; returns the filtered top level."""
    lost = {id(record) for record in dropped}
    for _, record in collection.items():
        if any(id(child) in lost for child in record.children):
            record.children = [child for child in record.children if id(child) not in lost]
    return [record for record in top_level if id(record) not in lost]


def _freeze(tree: DocTree, collection: RecordCollection) -> None:
    for node in tree.walk():
        node.freeze()
    for record in tree.records.values():
        record.freeze()
    for _, record in collection.items():
        record.freeze()


__all__ = ["DocTree", "TreeResolver"]
