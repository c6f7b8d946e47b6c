"""
Inheritance and alias resolution.

Manifesto:
    Two relations look alike but mean different things, and both must be
    resolved without ever looping:

    - **superclass** is a single-parent *display* relation: the class is
      listed in its superclass's ``subclasses`` and shown as its own branch
    - **inherits** is a possibly-multiple *content* relation: ancestor
      members are merged into the class as tagged copies

Architecture:
    ::

        run()
          │
          ├─ resolve_aliases()      alias_of  → target.aliases
          ├─ copy_inheritdoc()      inheritdoc → description/extra copied
          ├─ group_superclasses()   superclass → subclasses, promoted nodes
          └─ merge_inherits()       inherits  → merged children + hierarchy

        merge_inherits walk for ``Panel inherits [Widget, Draggable]``:

            Panel ─┬─ Widget ── Node          (own children of each visited
                   └─ Draggable                ancestor, tagged copies)

Guardrails:
    ❌ DON'T: Recurse through ``inherits`` without tracking the path
    ✅ DO: Stop at an ancestor already on the path and report a CycleError

    ❌ DON'T: Let an inherited member shadow the class's own member
    ✅ DO: Dedupe on ``(qualifier, name)``; own children, then earlier
       ancestors, win

Tags:
    inheritance, mixins, aliases, cycle-detection, resolver

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Iterable

from docspine.errors import CycleError, MissingAncestorError, UnresolvedReferenceError
from docspine.logging import get_logger
from docspine.model.records import InheritanceNode, SymbolRecord
from docspine.resolver.diagnostics import DiagnosticReport, Severity

logger = get_logger(__name__)


def _unique(ids: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for value in ids:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def _name_sort_key(record: SymbolRecord) -> tuple:
    name = record.name or ""
    return (name.lower(), name, record.member_key[0].rank)


class InheritanceResolver:
    """Resolves aliases, superclass grouping, ``inherits`` and ``inheritdoc``.

    Args:
        records: Final id to record, in canonical order
        report: Diagnostics sink
    """

    def __init__(self, records: dict[str, SymbolRecord], report: DiagnosticReport):
        self.records = records
        self.report = report
        self._reported_missing: set[tuple[str, str]] = set()

    def run(self) -> list[SymbolRecord]:
        """Run every step. Returns records promoted to the top level."""
        self.resolve_aliases()
        self.copy_inheritdoc()
        promoted = self.group_superclasses()
        self.merge_inherits()
        return promoted

    # ------------------------------------------------------------------
    # Aliases
    # ------------------------------------------------------------------

    def resolve_aliases(self) -> int:
        linked = 0
        for record in self.records.values():
            if not record.alias_of:
                continue
            target = self.records.get(record.alias_of)
            if target is None:
                self.report.record(
                    UnresolvedReferenceError(
                        record.id,
                        record.alias_of,
                        record.location,
                        message=f"'{record.id}' is an alias of '{record.alias_of}' which does not exist",
                    ),
                    code="unresolved_alias",
                )
                continue
            if record.id not in target.aliases:
                target.aliases.append(record.id)
                linked += 1
        return linked

    # ------------------------------------------------------------------
    # inheritdoc
    # ------------------------------------------------------------------

    def copy_inheritdoc(self) -> int:
        done: set[str] = set()
        copied = 0
        for record in self.records.values():
            if record.inheritdoc and self._apply_inheritdoc(record, (), done):
                copied += 1
        return copied

    def _apply_inheritdoc(self, record: SymbolRecord, path: tuple[str, ...], done: set[str]) -> bool:
        if record.id in done:
            return False
        done.add(record.id)

        target = self.records.get(record.inheritdoc)
        if target is None:
            self.report.record(
                UnresolvedReferenceError(
                    record.id,
                    record.inheritdoc,
                    record.location,
                    message=f"'{record.id}' inherits documentation from '{record.inheritdoc}' which does not exist",
                ),
                code="unresolved_inheritdoc",
                severity=Severity.WARNING,
            )
            return False

        chain = path + (record.id,)
        if target.id in chain:
            self.report.record(CycleError(chain + (target.id,)), code="inheritdoc_cycle")
            return False

        if target.inheritdoc:
            self._apply_inheritdoc(target, chain, done)

        if not record.description:
            record.description = target.description
        if not record.short_description:
            record.short_description = target.short_description
        for key, value in target.extra.items():
            record.extra.setdefault(key, value)
        return True

    # ------------------------------------------------------------------
    # superclass display grouping
    # ------------------------------------------------------------------

    def group_superclasses(self) -> list[SymbolRecord]:
        promoted: list[SymbolRecord] = []
        for record in self.records.values():
            if not record.is_class or not record.superclass:
                continue
            parent = self.records.get(record.superclass)
            if parent is None or not parent.is_class:
                self._missing(record, record.superclass, relation="superclass")
                continue
            if record.id not in parent.subclasses:
                parent.subclasses.append(record.id)
            if any(child is record for child in parent.children):
                parent.children = [child for child in parent.children if child is not record]
                promoted.append(record)
                logger.debug("subclass_promoted", record_id=record.id, superclass=parent.id)
        return promoted

    # ------------------------------------------------------------------
    # inherits content merge
    # ------------------------------------------------------------------

    def merge_inherits(self) -> int:
        own_children = {rid: tuple(record.children) for rid, record in self.records.items()}
        merged_classes = 0

        for record in self.records.values():
            if not record.is_class or not record.inherits:
                continue

            collected: list[tuple[str, SymbolRecord]] = []
            cycles: list[tuple[str, ...]] = []
            record.hierarchy = tuple(
                self._walk(ancestor, (record.id,), own_children, collected, cycles)
                for ancestor in _unique(record.inherits)
            )

            if cycles:
                self.report.record(CycleError(cycles[0]))
                record.children = list(own_children[record.id])
                continue

            seen = {child.member_key for child in own_children[record.id]}
            merged = list(own_children[record.id])
            for ancestor_id, member in collected:
                member_key = member.member_key
                if member_key in seen:
                    continue
                seen.add(member_key)
                merged.append(member.inherited_copy(ancestor_id))

            record.children = sorted(merged, key=_name_sort_key)
            merged_classes += 1
            logger.debug(
                "inherits_merged",
                record_id=record.id,
                inherited=len(merged) - len(own_children[record.id]),
            )
        return merged_classes

    def _walk(
        self,
        ancestor_id: str,
        path: tuple[str, ...],
        own_children: dict[str, tuple[SymbolRecord, ...]],
        collected: list[tuple[str, SymbolRecord]],
        cycles: list[tuple[str, ...]],
    ) -> InheritanceNode:
        if ancestor_id in path:
            cycles.append(path + (ancestor_id,))
            return InheritanceNode(ancestor_id, cycle=True)

        ancestor = self.records.get(ancestor_id)
        if ancestor is None:
            self._missing(self.records[path[-1]], ancestor_id, relation="inherits")
            return InheritanceNode(ancestor_id, missing=True)

        collected.extend((ancestor_id, child) for child in own_children[ancestor_id])
        parents = tuple(
            self._walk(parent, path + (ancestor_id,), own_children, collected, cycles)
            for parent in _unique(ancestor.inherits)
        )
        return InheritanceNode(ancestor_id, parents=parents)

    def _missing(self, record: SymbolRecord, target: str, relation: str) -> None:
        if (record.id, target) in self._reported_missing:
            return
        self._reported_missing.add((record.id, target))
        self.report.record(
            MissingAncestorError(
                record.id,
                target,
                record.location,
                message=f"'{record.id}' names {relation} '{target}' which is not a known class",
            )
        )


__all__ = ["InheritanceNode", "InheritanceResolver"]
