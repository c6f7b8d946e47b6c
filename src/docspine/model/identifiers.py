"""
Structured qualified identifiers.

A symbol id such as ``ajax.Ajax.Request#send@complete`` encodes its position
in the tree with three delimiters: ``.`` for static members and nested
classes, ``#`` for instance members and ``@`` for events. ``QualifiedName``
parses the string once into ``(segment, Qualifier)`` pairs so the rest of
the resolver never scans strings for delimiters.

Priority rule:
    When ``@`` is present, the first ``@`` is the structural boundary and
    everything after it is the event name (it may itself contain ``.``,
    ``#`` or ``@``). Otherwise each ``.``/``#`` starts a new segment.

Canonical order:
    Ids are ordered by ``QualifiedName.sort_key``, not by their lowercased
    strings. Pairs are compared one by one: the lowercased segment first,
    then the qualifier rank (root, ``.``, ``#``, ``@``). So ``Button.disable``
    precedes ``Button#render`` even though ``#`` sorts before ``.`` as a
    character. Sorting an already sorted list is a no-op under this key.

Examples:
    >>> name = QualifiedName.parse("UI.Button#render")
    >>> name.segments
    ('UI', 'Button', 'render')
    >>> str(name.parent)
    'UI.Button'
    >>> name.qualifier
    <Qualifier.INSTANCE: '#'>
    >>> str(name.relative())
    'Button#render'
    >>> QualifiedName.parse("Button#render@click.once").path()
    'Button.prototype.render.event.click.once'
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

_HEAD_SPLIT = re.compile(r"([.#])")


class Qualifier(str, Enum):
    """How a segment attaches to its parent."""

    ROOT = ""
    STATIC = "."
    INSTANCE = "#"
    EVENT = "@"

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {
    Qualifier.ROOT: 0,
    Qualifier.STATIC: 1,
    Qualifier.INSTANCE: 2,
    Qualifier.EVENT: 3,
}

_BY_DELIMITER = {
    ".": Qualifier.STATIC,
    "#": Qualifier.INSTANCE,
}


@dataclass(frozen=True)
class QualifiedName:
    """Ordered ``(segment, Qualifier)`` pairs; the first pair is always ROOT."""

    parts: tuple[tuple[str, Qualifier], ...]

    @classmethod
    def parse(cls, text: str) -> QualifiedName:
        """Parse a delimited id string."""
        event: str | None = None
        at = text.find("@")
        if at != -1:
            head, event = text[:at], text[at + 1:]
        else:
            head = text

        tokens = _HEAD_SPLIT.split(head)
        parts: list[tuple[str, Qualifier]] = [(tokens[0], Qualifier.ROOT)]
        for i in range(1, len(tokens), 2):
            parts.append((tokens[i + 1], _BY_DELIMITER[tokens[i]]))
        if event is not None:
            parts.append((event, Qualifier.EVENT))
        return cls(tuple(parts))

    def __str__(self) -> str:
        first, *rest = self.parts
        return first[0] + "".join(q.value + seg for seg, q in rest)

    @property
    def name(self) -> str:
        """Trailing segment."""
        return self.parts[-1][0]

    @property
    def qualifier(self) -> Qualifier:
        """Qualifier of the trailing segment."""
        return self.parts[-1][1]

    @property
    def section(self) -> str:
        """Leading segment (empty for unsectioned keys)."""
        return self.parts[0][0]

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(seg for seg, _ in self.parts)

    @property
    def parent(self) -> QualifiedName | None:
        """The id without its trailing pair, or None for a single segment."""
        if len(self.parts) == 1:
            return None
        return QualifiedName(self.parts[:-1])

    @property
    def name_prefix(self) -> str | None:
        """Everything up to and including the boundary delimiter."""
        if len(self.parts) == 1:
            return None
        text = str(self)
        return text[: len(text) - len(self.name)]

    def child(self, name: str, qualifier: Qualifier) -> QualifiedName:
        return QualifiedName(self.parts + ((name, qualifier),))

    def relative(self) -> QualifiedName:
        """Id without its section segment.

        Only a static boundary separates a section from its members; ids whose
        second pair is an instance member or an event are returned unchanged.
        """
        if len(self.parts) < 2 or self.parts[1][1] is not Qualifier.STATIC:
            return self
        head, *rest = self.parts[1:]
        return QualifiedName(((head[0], Qualifier.ROOT), *rest))

    def with_section(self, section: str) -> QualifiedName:
        """Replace the leading segment."""
        return QualifiedName(((section, Qualifier.ROOT),) + self.parts[1:])

    def with_qualifier(self, qualifier: Qualifier) -> QualifiedName:
        """Replace the qualifier of the trailing pair."""
        if len(self.parts) == 1:
            raise ValueError(f"Cannot requalify single-segment name '{self}'")
        return QualifiedName(self.parts[:-1] + ((self.name, qualifier),))

    def sort_key(self) -> tuple:
        """Case-insensitive, segment-wise ordering key.

        A parent is a prefix of its descendants, so it always sorts first.
        The raw string breaks ties between ids differing only in case.
        """
        return (tuple((seg.lower(), q.rank) for seg, q in self.parts), str(self))

    def path(self) -> str:
        """Navigation path: ``#`` becomes ``.prototype.``, the first ``@`` ``.event.``."""
        return str(self).replace("#", ".prototype.").replace("@", ".event.", 1)


def sort_ids(ids) -> list[str]:
    """Sort id strings in canonical order."""
    return sorted(ids, key=lambda value: QualifiedName.parse(value).sort_key())


__all__ = ["Qualifier", "QualifiedName", "sort_ids"]
