"""
Records parser: pre-extracted symbol records in JSON or YAML.

Accepted shapes:
    - a list of record mappings
    - ``{"records": [...]}``
    - a mapping of id → record mapping (the key supplies a missing ``id``)

Each record may carry ``file``/``line``; the file defaults to the parsed
file itself.

Example (YAML):
    ::

        - id: UI
          type: section
        - id: Button
          type: class
          section: UI
          description: A clickable button.
        - id: Button#render
          type: method
          section: UI
"""

from __future__ import annotations

import json
from pathlib import Path, PurePath
from typing import TYPE_CHECKING, Any

import yaml

from docspine.errors import ParseError
from docspine.model.records import RecordType, SymbolRecord
from docspine.registry import ParseResult
from docspine.resolver.diagnostics import Diagnostic, Severity

if TYPE_CHECKING:
    from docspine.config import DocSpineConfig


def _load(path: PurePath) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"Cannot read file: {e}", file=str(path), cause=e)

    if path.suffix.lower() == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(e.msg, file=str(path), line=e.lineno, cause=e)

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line = mark.line + 1 if mark is not None else None
        raise ParseError(f"Invalid YAML: {getattr(e, 'problem', None) or e}", file=str(path), line=line, cause=e)


def _entries(data: Any, path: PurePath) -> list[dict[str, Any]]:
    if data is None:
        return []
    if isinstance(data, dict) and "records" in data:
        data = data["records"]
    if isinstance(data, list):
        entries = data
    elif isinstance(data, dict):
        entries = []
        for key, value in data.items():
            if not isinstance(value, dict):
                raise ParseError(f"Record '{key}' must be a mapping", file=str(path))
            entries.append({"id": key, **value})
    else:
        raise ParseError(
            f"Expected a list or mapping of records, got {type(data).__name__}", file=str(path)
        )

    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ParseError(f"Record #{index} must be a mapping, got {type(entry).__name__}", file=str(path))
    return entries


def parse_records(path: PurePath, config: DocSpineConfig | None = None) -> ParseResult:
    """Parse one JSON/YAML records file.

    Raises:
        ParseError: Unreadable file, invalid syntax, wrong shape, unknown type
    """
    path = Path(path)
    result = ParseResult()
    known_types = RecordType.values()

    for index, entry in enumerate(_entries(_load(path), path)):
        try:
            record = SymbolRecord.from_dict(entry, file=str(path))
        except (TypeError, ValueError) as e:
            raise ParseError(f"Record #{index}: {e}", file=str(path), line=entry.get("line"), cause=e)

        if record.type not in known_types:
            raise ParseError(
                f"Record '{record.id}' has unknown type '{record.type}'",
                file=str(path),
                line=record.line or None,
            )

        if not record.description and not record.is_section:
            result.diagnostics.append(
                Diagnostic(
                    code="missing_description",
                    message=f"'{record.id}' has no description",
                    severity=Severity.INFO,
                    record_id=record.id,
                    locations=(record.location,),
                )
            )
        result.records.append(record)

    return result


__all__ = ["parse_records"]
