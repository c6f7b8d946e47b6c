"""
Output grouper: assigns each record its output partition (``out_file``).

Policies (mutually exclusive):

    default
        Partition is the lowercased stem of the record's source file with
        the configured prefix/suffix: ``lib/Ajax.js`` → ``ajax``.
    split_by_class
        Classes get a partition named after themselves; other members use
        their owner's partition, falling back to the file partition when
        they have no owner.
    split_from_ns
        Default partitioning, then every top-level non-section node hands
        its directly nested static classes back to the top level. Inside a
        named section, namespaces hand theirs back to the section.

In every policy ``extension`` records (members defined in another file than
their owner) follow their owner; ``original_file`` keeps their own file.
Inherited member copies take the partition of the class they were merged
into.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath

from docspine.errors import ConfigurationError
from docspine.logging import get_logger
from docspine.model.identifiers import Qualifier
from docspine.model.records import SymbolRecord

logger = get_logger(__name__)

_DELIMITERS = ".#@"


class GroupingPolicy(str, Enum):
    DEFAULT = "default"
    SPLIT_BY_CLASS = "split_by_class"
    SPLIT_FROM_NS = "split_from_ns"


@dataclass(frozen=True)
class GroupingOptions:
    """Partitioning policy plus partition naming."""

    policy: GroupingPolicy = GroupingPolicy.DEFAULT
    prefix: str = ""
    suffix: str = ""

    @classmethod
    def from_options(
        cls,
        split_by_class: bool = False,
        split_from_ns: bool = False,
        prefix: str = "",
        suffix: str = "",
    ) -> GroupingOptions:
        """Pick the policy from the two configuration flags.

        Raises:
            ConfigurationError: Both flags are set
        """
        if split_by_class and split_from_ns:
            raise ConfigurationError(
                "split_by_class and split_from_ns are mutually exclusive"
            ).with_context(split_by_class=True, split_from_ns=True)
        if split_by_class:
            policy = GroupingPolicy.SPLIT_BY_CLASS
        elif split_from_ns:
            policy = GroupingPolicy.SPLIT_FROM_NS
        else:
            policy = GroupingPolicy.DEFAULT
        return cls(policy=policy, prefix=prefix or "", suffix=suffix or "")

    def name(self, stem: str) -> str:
        return f"{self.prefix}{stem}{self.suffix}"


class OutputGrouper:
    """Assigns ``out_file`` across a resolved tree.

    Args:
        options: Policy and naming
        records: Final id to record
    """

    def __init__(self, options: GroupingOptions, records: dict[str, SymbolRecord]):
        self.options = options
        self.records = records
        self._partitions: dict[int, str] = {}

    def assign(self, top_level: list[SymbolRecord]) -> list[SymbolRecord]:
        """Assign partitions and return the (possibly reshaped) top level."""
        for node in top_level:
            self._assign_subtree(node)
        for record in self.records.values():
            if record.out_file is None:
                record.out_file = self.partition(record)

        if self.options.policy is GroupingPolicy.SPLIT_FROM_NS:
            top_level = self.hoist_namespace_classes(top_level)

        logger.debug(
            "partitions_assigned",
            policy=self.options.policy.value,
            partitions=len(set(self._partitions.values())),
        )
        return top_level

    def _assign_subtree(self, node: SymbolRecord) -> None:
        if node.inherited_from is None:
            node.out_file = self.partition(node)
        for child in node.children:
            if child.inherited_from is not None:
                child.out_file = node.out_file
            self._assign_subtree(child)

    def partition(self, record: SymbolRecord) -> str:
        """Partition for one record (memoized)."""
        cached = self._partitions.get(id(record))
        if cached is not None:
            return cached

        if record.extension:
            owner = self.owner(record)
            if owner is not None:
                record.original_file = record.file
                if self.options.policy is GroupingPolicy.SPLIT_BY_CLASS:
                    value = self.partition(owner)
                else:
                    value = self.file_partition(owner)
                self._partitions[id(record)] = value
                return value

        if self.options.policy is GroupingPolicy.SPLIT_BY_CLASS and not record.is_section:
            record.original_file = record.file
            if record.is_class:
                value = self.options.name(record.name or record.id)
            else:
                owner = self.owner(record)
                value = self.partition(owner) if owner is not None else self.file_partition(record)
        else:
            value = self.file_partition(record)

        self._partitions[id(record)] = value
        return value

    def file_partition(self, record: SymbolRecord) -> str:
        stem = PurePath(record.file).stem if record.file else record.id
        return self.options.name(stem.lower())

    def owner(self, record: SymbolRecord) -> SymbolRecord | None:
        """Logical owner: the id without its trailing name segment.

        Tolerates an owner id with or without a leading delimiter.
        """
        if not record.name_prefix:
            return None
        owner_id = record.name_prefix[:-1]
        candidates = [owner_id, "." + owner_id]
        if owner_id[:1] in _DELIMITERS:
            candidates.append(owner_id[1:])
        for candidate in candidates:
            owner = self.records.get(candidate)
            if owner is not None and owner is not record:
                return owner
        return None

    def hoist_namespace_classes(self, top_level: list[SymbolRecord]) -> list[SymbolRecord]:
        """Move static class children of namespaces up one level.

        Top-level namespaces hand their classes to the top level. Namespaces
        directly inside a named section hand theirs to that section, so a
        hoisted class stays grouped under its section.
        """
        result = self._hoist(top_level)
        for node in result:
            if node.is_section:
                node.children = self._hoist(node.children)
        return result

    def _hoist(self, nodes: list[SymbolRecord]) -> list[SymbolRecord]:
        result = list(nodes)
        hoisted: list[SymbolRecord] = []
        for node in nodes:
            if node.is_section:
                continue
            keep = []
            for child in node.children:
                if (
                    child.is_class
                    and child.inherited_from is None
                    and child.qualified_name.qualifier is Qualifier.STATIC
                ):
                    hoisted.append(child)
                else:
                    keep.append(child)
            node.children = keep
        result.extend(hoisted)
        return result


__all__ = ["GroupingPolicy", "GroupingOptions", "OutputGrouper"]
