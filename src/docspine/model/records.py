"""
Symbol records: the shape every parser emits and every stage mutates.

Records are created once by a parser, threaded through the resolver stages
and mutated in place. The generated bound sibling and the tagged copies of
inherited members are the only derived records. When the tree resolver
returns, every record is frozen: list fields become tuples and any further
assignment raises ``FrozenRecordError``.

Examples:
    >>> record = SymbolRecord(id="Ajax.Request#send", type="method", section="ajax")
    >>> record.qualified_name.qualifier
    <Qualifier.INSTANCE: '#'>
    >>> record.freeze()
    >>> record.description = "changed"
    Traceback (most recent call last):
    ...
    docspine.errors.FrozenRecordError: Record 'Ajax.Request#send' is frozen; cannot set 'description'
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from docspine.errors import FrozenRecordError
from docspine.model.identifiers import QualifiedName, Qualifier


class RecordType(str, Enum):
    """Record types a parser may emit."""

    SECTION = "section"
    CLASS = "class"
    METHOD = "method"
    PROPERTY = "property"
    CONSTRUCTOR = "constructor"
    EVENT = "event"
    CFG = "cfg"
    CSS_VAR = "css_var"
    CSS_MIXIN = "css_mixin"
    UTILITY = "utility"
    NAMESPACE = "namespace"

    @classmethod
    def values(cls) -> set[str]:
        return {member.value for member in cls}


@dataclass(frozen=True, order=True)
class SourceLocation:
    """Where a record was declared."""

    file: str = ""
    line: int = 0

    def sort_key(self) -> tuple[str, int]:
        return (self.file, self.line)

    def to_dict(self) -> dict[str, Any]:
        return {"file": self.file, "line": self.line}

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class InheritanceNode:
    """One ancestor visited by the ``inherits`` walk.

    Attributes:
        id: Ancestor id as referenced
        parents: Ancestors this one inherits from, in declaration order
        missing: The referenced class does not exist
        cycle: The walk stopped here because the id was already on the path
    """

    id: str
    parents: tuple[InheritanceNode, ...] = ()
    missing: bool = False
    cycle: bool = False

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"id": self.id}
        if self.parents:
            result["parents"] = [parent.to_dict() for parent in self.parents]
        if self.missing:
            result["missing"] = True
        if self.cycle:
            result["cycle"] = True
        return result


# Fields that become tuples on freeze
_LIST_FIELDS = ("children", "subclasses", "inherits", "aliases")

# Serialized field order for to_dict()
_SERIALIZED_FIELDS = (
    "id",
    "type",
    "name",
    "name_prefix",
    "path",
    "section",
    "description",
    "short_description",
    "href",
    "superclass",
    "subclasses",
    "inherits",
    "alias_of",
    "aliases",
    "bound",
    "extension",
    "inheritdoc",
    "inherited_from",
    "out_file",
    "original_file",
)


@dataclass(eq=False)
class SymbolRecord:
    """One documented entity.

    Attributes:
        id: Record id; section-relative after resolution
        type: Record type; may become ``instance <type>``/``class <type>``
        section: Owning section name, None when unknown
        children: Nested records, populated by the hierarchy builder
        description: Full documentation text
        short_description: One-line summary
        location: Source file and line
        superclass: Single display parent class id
        subclasses: Ids of classes naming this record as superclass
        inherits: Class ids whose members are merged into this one
        alias_of: Id of the canonical record this one aliases
        aliases: Ids of records aliasing this one
        bound: True on input for bound methods; the sibling's id afterwards
        extension: Record augments an entity defined in another file
        inheritdoc: Id whose documentation this record reuses
        href: Link to the source location
        extra: Parser-specific payload (signature, params, returns, ...)
        name: Trailing id segment
        name_prefix: Id up to and including the boundary delimiter
        path: Navigation path (``#`` → ``.prototype.``, ``@`` → ``.event.``)
        out_file: Output partition
        original_file: Source file when the partition comes from elsewhere
        inherited_from: Ancestor id on merged copies of inherited members
        hierarchy: Ancestry walked for ``inherits``
        root: Marks the root section
        key: Collection key the record was stored under
    """

    id: str
    type: str = RecordType.METHOD.value
    section: str | None = None
    children: list[SymbolRecord] = field(default_factory=list)
    description: str = ""
    short_description: str = ""
    location: SourceLocation = field(default_factory=SourceLocation)
    superclass: str | None = None
    subclasses: list[str] = field(default_factory=list)
    inherits: list[str] = field(default_factory=list)
    alias_of: str | None = None
    aliases: list[str] = field(default_factory=list)
    bound: bool | str | None = None
    extension: bool = False
    inheritdoc: str | None = None
    href: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    name: str | None = None
    name_prefix: str | None = None
    path: str | None = None
    out_file: str | None = None
    original_file: str | None = None
    inherited_from: str | None = None
    hierarchy: tuple[InheritanceNode, ...] | None = None
    root: bool = False
    key: str | None = field(default=None, repr=False)
    _frozen: bool = field(default=False, init=False, repr=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise FrozenRecordError(
                f"Record '{self.id}' is frozen; cannot set '{name}'"
            ).with_context(record_id=self.id)
        object.__setattr__(self, name, value)

    @classmethod
    def root_section(cls) -> SymbolRecord:
        """The implicit root section every collection starts with."""
        return cls(id="", type=RecordType.SECTION.value, href="#", root=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any], file: str | None = None) -> SymbolRecord:
        """Build a record from a mapping.

        ``file``/``line`` keys become the source location; keys that are not
        record fields are kept in ``extra``.

        Raises:
            ValueError: ``id`` is missing or a field has the wrong shape
        """
        if "id" not in data or not isinstance(data["id"], str):
            raise ValueError("record needs a string 'id'")

        known = {f.name for f in dataclasses.fields(cls) if f.init} - {
            "children", "location", "hierarchy", "key", "name", "name_prefix",
            "path", "out_file", "original_file", "inherited_from", "root",
            "subclasses", "aliases",
        }
        kwargs: dict[str, Any] = {}
        extra = dict(data.get("extra") or {})
        for key, value in data.items():
            if key in ("file", "line", "extra"):
                continue
            if key in known:
                kwargs[key] = value
            else:
                extra[key] = value

        inherits = kwargs.get("inherits")
        if isinstance(inherits, str):
            kwargs["inherits"] = [inherits]
        elif inherits is None:
            kwargs.pop("inherits", None)
        elif not isinstance(inherits, list):
            raise ValueError(f"'inherits' must be a list, got {type(inherits).__name__}")

        line = data.get("line", 0)
        if not isinstance(line, int):
            raise ValueError(f"'line' must be an integer, got {line!r}")
        location = SourceLocation(file=data.get("file", file or ""), line=line)
        return cls(location=location, extra=extra, **kwargs)

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def file(self) -> str:
        return self.location.file

    @property
    def line(self) -> int:
        return self.location.line

    @property
    def qualified_name(self) -> QualifiedName:
        return QualifiedName.parse(self.id)

    @property
    def is_section(self) -> bool:
        return self.type == RecordType.SECTION.value

    @property
    def is_class(self) -> bool:
        return self.type == RecordType.CLASS.value

    @property
    def member_key(self) -> tuple[Qualifier, str]:
        """Identity of a member within its owner, used to dedupe merged children."""
        qualified = self.qualified_name
        return (qualified.qualifier, self.name if self.name is not None else qualified.name)

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ------------------------------------------------------------------
    # Derived records
    # ------------------------------------------------------------------

    def copy(self, **changes: Any) -> SymbolRecord:
        """Shallow copy with fresh containers."""
        base = {
            "children": list(self.children),
            "subclasses": list(self.subclasses),
            "inherits": list(self.inherits),
            "aliases": list(self.aliases),
            "extra": dict(self.extra),
        }
        base.update(changes)
        return dataclasses.replace(self, **base)

    def make_bound_sibling(self) -> SymbolRecord | None:
        """Create the instance-qualified twin of a bound static method.

        ``Element.foo`` yields ``Element#foo``; each record's ``bound`` then
        names the other. Returns None when the id has no static boundary.
        If the twin later loses a name clash, ``link_bound_pairs`` relinks
        the static record with the survivor.
        """
        qualified = self.qualified_name
        if len(qualified.parts) < 2 or qualified.qualifier is not Qualifier.STATIC:
            return None
        sibling_id = str(qualified.with_qualifier(Qualifier.INSTANCE))
        sibling = self.copy(id=sibling_id, bound=self.id, key=None)
        self.bound = sibling_id
        return sibling

    def inherited_copy(self, ancestor_id: str) -> SymbolRecord:
        """Copy of this member tagged with the ancestor it was merged from."""
        return self.copy(inherited_from=ancestor_id)

    # ------------------------------------------------------------------
    # Freezing / serialization
    # ------------------------------------------------------------------

    def freeze(self) -> None:
        """Make this record read-only. Children are not frozen here."""
        if self._frozen:
            return
        for name in _LIST_FIELDS:
            object.__setattr__(self, name, tuple(getattr(self, name)))
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))
        object.__setattr__(self, "_frozen", True)

    def to_dict(self, include_children: bool = True) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary. ``None`` fields are omitted."""
        result: dict[str, Any] = {}
        for name in _SERIALIZED_FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, tuple):
                value = list(value)
            result[name] = value
        result["file"] = self.location.file
        result["line"] = self.location.line
        if self.extra:
            result["extra"] = dict(self.extra)
        if self.hierarchy is not None:
            result["hierarchy"] = [node.to_dict() for node in self.hierarchy]
        if include_children:
            result["children"] = [child.to_dict() for child in self.children]
        return result

    def __repr__(self) -> str:
        return f"SymbolRecord(id={self.id!r}, type={self.type!r}, location={str(self.location)!r})"


__all__ = [
    "RecordType",
    "SourceLocation",
    "InheritanceNode",
    "SymbolRecord",
]
