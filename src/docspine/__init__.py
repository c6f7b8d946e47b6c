"""
docspine

Resolves flat documentation records (sections, classes, members, events)
parsed from source files into one cross-linked documentation tree, then
renders it.

Example:
    >>> from docspine import DocSpineConfig, DocumentationOrchestrator
    >>> config = DocSpineConfig(paths=["src"], output=Path("docs/api"))
    >>> DocumentationOrchestrator(config).run().rendered
    True
"""

__version__ = "0.1.0"

from docspine.config import DocSpineConfig
from docspine.errors import DocSpineError
from docspine.model import QualifiedName, RecordType, SymbolRecord
from docspine.orchestrator import DocumentationOrchestrator
from docspine.registry import PluginRegistry
from docspine.resolver import DocTree, RecordCollection, TreeResolver

__all__ = [
    "DocSpineConfig",
    "DocSpineError",
    "DocTree",
    "DocumentationOrchestrator",
    "PluginRegistry",
    "QualifiedName",
    "RecordCollection",
    "RecordType",
    "SymbolRecord",
    "TreeResolver",
    "__version__",
]
