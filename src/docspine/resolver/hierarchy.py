"""
Hierarchy builder: flat sorted keys to a parent/children tree.

Algorithm:
    1. Compute each record's final id (key without its section segment;
       sections are lowercased). Colliding final ids are name clashes and
       are settled by the survivor policy before any reparenting.
    2. Walk the canonical key list in reverse. A key's parent is the key
       without its trailing ``(segment, qualifier)`` pair. When a record
       exists there, the current record moves to the front of the parent's
       children, so siblings end up in ascending order.
    3. Rewrite ids to be section-relative and derive ``name``,
       ``name_prefix`` and ``path``.
    4. Prune sections from the flat map and flatten the top level: the
       root section's children are hoisted, every other top-level node is
       kept as one node.

Reverse canonical order visits every child before any of its ancestors,
so one pass suffices.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from docspine.errors import NameClashError
from docspine.logging import get_logger
from docspine.model.identifiers import QualifiedName
from docspine.model.records import SymbolRecord
from docspine.resolver.collection import ROOT_KEY, RecordCollection, choose_survivor
from docspine.resolver.diagnostics import DiagnosticReport

logger = get_logger(__name__)


@dataclass
class HierarchyResult:
    """Output of ``build_hierarchy``.

    Attributes:
        order: Canonical keys the tree was built from (root excluded)
        records: Final id to record, sections pruned, in canonical order
        top_level: Flattened top-level nodes
        sections: Lowercased section id to section record
    """

    order: tuple[str, ...]
    records: dict[str, SymbolRecord]
    top_level: list[SymbolRecord]
    sections: dict[str, SymbolRecord] = field(default_factory=dict)

    def position(self, record: SymbolRecord) -> int:
        """Canonical index of a record's key; the root sorts first."""
        if record.key == ROOT_KEY:
            return -1
        return self._positions[record.key]

    def __post_init__(self) -> None:
        self._positions = {key: index for index, key in enumerate(self.order)}


def final_id(key: str, record: SymbolRecord) -> str:
    """Section-relative id a record ends up with."""
    if record.is_section:
        return key.lower()
    return str(QualifiedName.parse(key).relative())


def _settle_final_id_clashes(collection: RecordCollection, report: DiagnosticReport) -> int:
    groups: dict[tuple[bool, str], list[str]] = {}
    for key in collection.sorted_keys():
        record = collection[key]
        groups.setdefault((record.is_section, final_id(key, record)), []).append(key)

    dropped = 0
    for (_, resolved_id), keys in groups.items():
        if len(keys) < 2:
            continue
        survivor_key = keys[0]
        for key in keys[1:]:
            kept, lost = choose_survivor(collection[survivor_key], collection[key])
            lost_key = survivor_key if kept is collection[key] else key
            survivor_key = key if kept is collection[key] else survivor_key
            report.record(
                NameClashError(resolved_id, kept=kept.location, dropped=lost.location).with_context(
                    key=lost_key
                )
            )
            collection.drop(lost_key)
            dropped += 1
    return dropped


def build_hierarchy(collection: RecordCollection, report: DiagnosticReport | None = None) -> HierarchyResult:
    """Nest the collection's records into a tree.

    Args:
        collection: Records after section guessing
        report: Where name clashes go; defaults to the collection's report

    Returns:
        HierarchyResult with the flat map and the flattened top level
    """
    if report is None:
        report = collection.diagnostics

    _settle_final_id_clashes(collection, report)

    keys = collection.sorted_keys(include_root=True)
    for key in keys:
        collection[key].children = []

    nested: set[str] = set()
    for key in reversed(keys):
        parent = QualifiedName.parse(key).parent
        if parent is None:
            continue
        parent_record = collection.get(str(parent))
        if parent_record is None:
            continue
        parent_record.children.insert(0, collection[key])
        nested.add(key)

    records: dict[str, SymbolRecord] = {}
    sections: dict[str, SymbolRecord] = {}
    for key in keys:
        record = collection[key]
        relative = QualifiedName.parse(key) if record.is_section else QualifiedName.parse(key).relative()
        record.name = relative.name
        record.name_prefix = relative.name_prefix
        record.id = final_id(key, record)
        record.path = QualifiedName.parse(record.id).path()
        if record.is_section:
            record.section = None
            if not record.root:
                sections[record.id] = record
        else:
            record.section = QualifiedName.parse(key).section or None
            records[record.id] = record

    top_level: list[SymbolRecord] = []
    for key in keys:
        if key in nested:
            continue
        record = collection[key]
        if record.root:
            top_level.extend(record.children)
        else:
            top_level.append(record)

    order = tuple(key for key in keys if key != ROOT_KEY)
    logger.debug(
        "hierarchy_built",
        records=len(records),
        sections=len(sections),
        top_level=len(top_level),
    )
    return HierarchyResult(order=order, records=records, top_level=top_level, sections=sections)


__all__ = ["HierarchyResult", "build_hierarchy", "final_id"]
