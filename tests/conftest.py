"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest
import structlog

from docspine.config import DocSpineConfig
from docspine.model import SourceLocation, SymbolRecord
from docspine.resolver import RecordCollection, TreeResolver


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop any logging configuration a CLI test installed."""
    yield
    structlog.reset_defaults()


@pytest.fixture(scope="session")
def fixtures_path():
    """Path to test fixtures."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def make_record():
    """Factory for records with a source location."""

    def _make(record_id, type="method", section=None, file="lib/ui.js", line=1, **kwargs):
        return SymbolRecord(
            id=record_id,
            type=type,
            section=section,
            location=SourceLocation(file, line),
            **kwargs,
        )

    return _make


@pytest.fixture
def collect():
    """Build a collection from records, in the given order."""

    def _collect(*records):
        collection = RecordCollection()
        collection.merge(records)
        return collection

    return _collect


@pytest.fixture
def resolve(collect):
    """Resolve records into a DocTree with optional config overrides."""

    def _resolve(*records, **config):
        return TreeResolver(DocSpineConfig(**config)).resolve(collect(*records))

    return _resolve


@pytest.fixture
def ui_records(make_record):
    """Section UI with a Button class, one sectioned and one unsectioned member."""

    def _records():
        return [
            make_record("UI", type="section", line=1),
            make_record("Button", type="class", section="UI", line=2, description="A button."),
            make_record("Button#render", section="UI", line=5, description="Draw it."),
            make_record("Button.disable", file="lib/extra.js", line=3, description="Disable it."),
        ]

    return _records


@pytest.fixture
def temp_output_dir(tmp_path):
    """Temporary output directory for generated docs."""
    output_dir = tmp_path / "generated_docs"
    output_dir.mkdir()
    return output_dir
