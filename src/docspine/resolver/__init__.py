"""Symbol tree resolver: collection, resolution stages and the frozen tree."""

from docspine.resolver.classify import classify, classify_records, link_bound_pairs
from docspine.resolver.collection import RecordCollection, choose_survivor, compose_key
from docspine.resolver.diagnostics import Diagnostic, DiagnosticReport, Severity
from docspine.resolver.grouping import GroupingOptions, GroupingPolicy, OutputGrouper
from docspine.resolver.hierarchy import HierarchyResult, build_hierarchy
from docspine.resolver.inheritance import InheritanceResolver
from docspine.resolver.sections import guess_sections
from docspine.resolver.tree import DocTree, TreeResolver

__all__ = [
    "RecordCollection",
    "compose_key",
    "choose_survivor",
    "Diagnostic",
    "DiagnosticReport",
    "Severity",
    "guess_sections",
    "HierarchyResult",
    "build_hierarchy",
    "classify",
    "classify_records",
    "link_bound_pairs",
    "InheritanceResolver",
    "GroupingPolicy",
    "GroupingOptions",
    "OutputGrouper",
    "DocTree",
    "TreeResolver",
]
