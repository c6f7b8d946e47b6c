"""Record model shared by parsers, the resolver and renderers."""

from docspine.model.identifiers import QualifiedName, Qualifier, sort_ids
from docspine.model.records import InheritanceNode, RecordType, SourceLocation, SymbolRecord

__all__ = [
    "QualifiedName",
    "Qualifier",
    "sort_ids",
    "InheritanceNode",
    "RecordType",
    "SourceLocation",
    "SymbolRecord",
]
