"""
Type classifier.

Generic ``method``/``property`` records get their final subtype from the
section-relative id, first match wins:

    ========================  ==================
    id                        type
    ========================  ==================
    starts with ``$``         ``utility``
    contains ``@``            ``event``
    contains ``#``            ``instance <type>``
    contains ``.``            ``class <type>``
    ========================  ==================

Constructors are renamed ``new <owner>`` (``Ajax.Request.new`` becomes
``new Ajax.Request``) and re-keyed in the flat map.
"""

from __future__ import annotations

import re

from docspine.errors import NameClashError
from docspine.model.records import RecordType, SymbolRecord
from docspine.resolver.collection import choose_survivor
from docspine.resolver.diagnostics import DiagnosticReport

_TRAILING_NEW = re.compile(r"\.new$")

_GENERIC_TYPES = (RecordType.METHOD.value, RecordType.PROPERTY.value)


def classify(record: SymbolRecord) -> str:
    """Reclassify one record in place and return its (possibly new) id."""
    if record.type == RecordType.CONSTRUCTOR.value:
        record.id = "new " + _TRAILING_NEW.sub("", record.id)
        return record.id

    if record.type not in _GENERIC_TYPES:
        return record.id

    if record.id.startswith("$"):
        record.type = RecordType.UTILITY.value
    elif "@" in record.id:
        record.type = RecordType.EVENT.value
    elif "#" in record.id:
        record.type = f"instance {record.type}"
    elif "." in record.id:
        record.type = f"class {record.type}"
    return record.id


def classify_records(
    records: dict[str, SymbolRecord],
    report: DiagnosticReport | None = None,
    dropped_records: list[SymbolRecord] | None = None,
) -> dict[str, SymbolRecord]:
    """Classify every record and return the flat map re-keyed by final id.

    Canonical order is preserved; a constructor whose new id is already
    taken is a name clash settled by the survivor policy. Losers are
    appended to ``dropped_records`` so the caller can unlink them.
    """
    if report is None:
        report = DiagnosticReport()

    result: dict[str, SymbolRecord] = {}
    for record in records.values():
        new_id = classify(record)
        existing = result.get(new_id)
        if existing is None:
            result[new_id] = record
            continue
        kept, dropped = choose_survivor(existing, record)
        report.record(NameClashError(new_id, kept=kept.location, dropped=dropped.location))
        result[new_id] = kept
        if dropped_records is not None:
            dropped_records.append(dropped)
    return result


def link_bound_pairs(records: dict[str, SymbolRecord]) -> None:
    """Make ``bound`` links mutual among the records that survived clashes.

    A generated instance twin can lose a clash to an explicitly documented
    member of the same id; the survivor is then linked back to the static
    record. A link whose partner is gone or bound elsewhere is cleared.
    """
    for record in records.values():
        if not isinstance(record.bound, str):
            continue
        partner = records.get(record.bound)
        if partner is None or partner is record:
            record.bound = None
        elif not isinstance(partner.bound, str):
            partner.bound = record.id
        elif partner.bound != record.id:
            record.bound = None


__all__ = ["classify", "classify_records", "link_bound_pairs"]
