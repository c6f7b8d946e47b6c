"""
Section guessing for records parsed without a section.

``.Ajax.Updater`` has an empty first segment. If some sectioned key such as
``ajax.Ajax`` shares its second segment, the record is relocated to
``ajax.Ajax.Updater``.

Policy:
    Candidates are scanned in canonical order and the first match wins. When
    several distinct sections hold an entity with the same name the choice
    is still the first one, and an ``ambiguous_section`` warning lists the
    candidates. This is a documented limitation, not a semantic guarantee.
"""

from __future__ import annotations

from docspine.logging import get_logger
from docspine.model.identifiers import QualifiedName
from docspine.resolver.collection import RecordCollection
from docspine.resolver.diagnostics import DiagnosticReport, Severity

logger = get_logger(__name__)


def guess_sections(collection: RecordCollection, report: DiagnosticReport | None = None) -> int:
    """Relocate unsectioned records under a matching section.

    Args:
        collection: Collected records
        report: Where ambiguity warnings go; defaults to the collection's report

    Returns:
        Number of relocated records
    """
    if report is None:
        report = collection.diagnostics

    parted = [(key, QualifiedName.parse(key)) for key in collection.sorted_keys()]
    sectioned = [(key, name) for key, name in parted if name.section and len(name.parts) > 1]

    relocated = 0
    for key, name in parted:
        if name.section or len(name.parts) < 2:
            continue

        target = name.segments[1]
        candidates: list[str] = []
        for _, other in sectioned:
            if other.segments[1] == target and other.section not in candidates:
                candidates.append(other.section)
        if not candidates:
            continue

        section = candidates[0]
        record = collection[key]
        if len(candidates) > 1:
            report.report(
                "ambiguous_section",
                f"'{record.id}' matches sections {', '.join(candidates)}; using '{section}'",
                severity=Severity.WARNING,
                record_id=record.id,
                locations=[record.location],
            )

        new_key = str(name.with_section(section))
        record.section = section
        collection.relocate(key, new_key)
        relocated += 1
        logger.debug("section_guessed", key=key, new_key=new_key)

    return relocated


__all__ = ["guess_sections"]
