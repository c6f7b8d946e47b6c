"""
Record collection: the per-run container parsers merge into.

Manifesto:
    The collection is the only shared mutable resource of a run. It is
    filled file by file, handed once to the tree resolver and sealed.

    - **Composed keys:** sections are stored under their own id, every
      other record under ``(section or "") + "." + id``
    - **Bound siblings:** a bound static method also yields its instance twin
    - **No silent overwrite:** a second record on an occupied key is a
      reported name clash, resolved by the survivor policy below

Survivor policy:
    The record whose source location sorts first ``(file, line)`` survives,
    the other is dropped. Ties fall back to type, id and description so the
    outcome never depends on the order files were parsed in.

Examples:
    >>> collection = RecordCollection()
    >>> _ = collection.add(SymbolRecord(id="Element.foo", type="method", bound=True))
    >>> sorted(collection.keys())
    ['', '.Element#foo', '.Element.foo']
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from docspine.errors import NameClashError, ResolutionStateError
from docspine.logging import get_logger
from docspine.model.identifiers import QualifiedName
from docspine.model.records import RecordType, SymbolRecord
from docspine.resolver.diagnostics import DiagnosticReport

logger = get_logger(__name__)

ROOT_KEY = ""


def compose_key(record: SymbolRecord) -> str:
    """Collection key for a record."""
    if record.is_section:
        return record.id
    return (record.section or "") + "." + record.id


def _survivor_key(record: SymbolRecord) -> tuple:
    return (record.location.sort_key(), record.type, record.id, record.description)


def choose_survivor(first: SymbolRecord, second: SymbolRecord) -> tuple[SymbolRecord, SymbolRecord]:
    """Apply the clash policy. Returns ``(kept, dropped)``."""
    if _survivor_key(second) < _survivor_key(first):
        return second, first
    return first, second


class RecordCollection:
    """Collected records keyed by composed key, plus the root section."""

    def __init__(self, diagnostics: DiagnosticReport | None = None):
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticReport()
        root = SymbolRecord.root_section()
        root.key = ROOT_KEY
        self._records: dict[str, SymbolRecord] = {ROOT_KEY: root}
        self._sealed = False

    # ------------------------------------------------------------------
    # Writes (rejected once sealed)
    # ------------------------------------------------------------------

    def add(self, record: SymbolRecord) -> SymbolRecord:
        """Add one record, generating its bound sibling when needed.

        Returns the record stored under the key (the survivor on a clash).
        """
        self._check_writable()
        stored = self._store(compose_key(record), record)

        if record.type == RecordType.METHOD.value and record.bound is True:
            sibling = record.make_bound_sibling()
            if sibling is not None:
                self._store(compose_key(sibling), sibling)
        return stored

    def merge(self, records: Iterable[SymbolRecord]) -> int:
        """Add records from one parsed file. Returns the number added."""
        count = 0
        for record in records:
            self.add(record)
            count += 1
        return count

    def seal(self) -> None:
        """Hand the collection to resolution; later writes are rejected."""
        if self._sealed:
            raise ResolutionStateError(
                "Record collection has already been resolved; build a new collection for another run"
            )
        self._sealed = True
        logger.debug("collection_sealed", records=len(self._records) - 1)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def _check_writable(self) -> None:
        if self._sealed:
            raise ResolutionStateError("Record collection is sealed; no records can be added")

    # ------------------------------------------------------------------
    # Resolution-time operations
    # ------------------------------------------------------------------

    def relocate(self, old_key: str, new_key: str) -> SymbolRecord:
        """Move a record to another key, applying the clash policy on arrival."""
        record = self._records.pop(old_key)
        return self._store(new_key, record)

    def drop(self, key: str) -> SymbolRecord:
        return self._records.pop(key)

    def _store(self, key: str, record: SymbolRecord) -> SymbolRecord:
        existing = self._records.get(key)
        if existing is None or existing is record:
            record.key = key
            self._records[key] = record
            return record

        kept, dropped = choose_survivor(existing, record)
        self.diagnostics.record(
            NameClashError(record.id, kept=kept.location, dropped=dropped.location).with_context(
                key=key
            )
        )
        kept.key = key
        self._records[key] = kept
        return kept

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def root(self) -> SymbolRecord:
        return self._records[ROOT_KEY]

    def get(self, key: str) -> SymbolRecord | None:
        return self._records.get(key)

    def keys(self) -> list[str]:
        return list(self._records)

    def items(self) -> list[tuple[str, SymbolRecord]]:
        return list(self._records.items())

    def sorted_keys(self, include_root: bool = False) -> list[str]:
        """Keys in canonical (case-insensitive, segment-wise) order."""
        keys = sorted(self._records, key=lambda key: QualifiedName.parse(key).sort_key())
        if include_root:
            return keys
        return [key for key in keys if key != ROOT_KEY]

    def __getitem__(self, key: str) -> SymbolRecord:
        return self._records[key]

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)


__all__ = ["ROOT_KEY", "RecordCollection", "compose_key", "choose_survivor"]
