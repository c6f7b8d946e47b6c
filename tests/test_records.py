"""Tests for symbol records."""

import pytest

from docspine.errors import FrozenRecordError
from docspine.model import RecordType, SourceLocation, SymbolRecord


class TestFromDict:
    """Tests for SymbolRecord.from_dict."""

    def test_location_and_extra(self):
        """Test that file/line build the location and unknown keys go to extra."""
        record = SymbolRecord.from_dict(
            {"id": "Button", "type": "class", "line": 4, "signature": "Button()"},
            file="lib/ui.js",
        )

        assert record.location == SourceLocation("lib/ui.js", 4)
        assert record.extra == {"signature": "Button()"}

    def test_string_inherits_is_wrapped(self):
        """Test that a single inherits id becomes a list."""
        record = SymbolRecord.from_dict({"id": "Panel", "type": "class", "inherits": "Widget"})

        assert record.inherits == ["Widget"]

    def test_missing_id(self):
        """Test that a record without an id is rejected."""
        with pytest.raises(ValueError):
            SymbolRecord.from_dict({"type": "class"})

    def test_bad_line(self):
        """Test that a non-integer line is rejected."""
        with pytest.raises(ValueError):
            SymbolRecord.from_dict({"id": "x", "line": "four"})

    def test_derived_fields_are_not_accepted_from_input(self):
        """Test that resolver-owned fields from input land in extra."""
        record = SymbolRecord.from_dict({"id": "x", "out_file": "elsewhere"})

        assert record.out_file is None
        assert record.extra["out_file"] == "elsewhere"


class TestBoundSibling:
    """Tests for make_bound_sibling."""

    def test_static_method_gets_instance_twin(self):
        """Test that both records name each other in bound."""
        record = SymbolRecord(id="Element.foo", type="method", bound=True)

        sibling = record.make_bound_sibling()

        assert sibling.id == "Element#foo"
        assert sibling.bound == "Element.foo"
        assert record.bound == "Element#foo"

    def test_non_static_id_has_no_twin(self):
        """Test that an instance id yields no sibling."""
        record = SymbolRecord(id="Element#foo", type="method", bound=True)

        assert record.make_bound_sibling() is None
        assert record.bound is True


class TestFreeze:
    """Tests for freezing records."""

    def test_assignment_raises(self):
        """Test that a frozen record rejects attribute writes."""
        record = SymbolRecord(id="Button", type=RecordType.CLASS.value)
        record.freeze()

        with pytest.raises(FrozenRecordError):
            record.description = "changed"

    def test_frozen_error_is_attribute_error(self):
        """Test that callers catching AttributeError also catch it."""
        record = SymbolRecord(id="Button")
        record.freeze()

        with pytest.raises(AttributeError):
            record.type = "class"

    def test_containers_become_read_only(self):
        """Test that list fields become tuples and extra a read-only mapping."""
        record = SymbolRecord(id="Button", aliases=["Btn"], extra={"a": 1})
        record.freeze()

        assert record.aliases == ("Btn",)
        with pytest.raises(TypeError):
            record.extra["b"] = 2

    def test_copy_of_frozen_record_is_mutable(self):
        """Test that copies start unfrozen with fresh containers."""
        record = SymbolRecord(id="Button", aliases=["Btn"])
        record.freeze()

        copy = record.copy(description="new")

        assert not copy.frozen
        copy.aliases.append("B")
        assert record.aliases == ("Btn",)


class TestToDict:
    """Tests for SymbolRecord.to_dict."""

    def test_omits_none_and_includes_location(self):
        """Test serialization shape."""
        record = SymbolRecord(id="Button", type="class", location=SourceLocation("ui.js", 3))

        data = record.to_dict()

        assert data["id"] == "Button"
        assert data["file"] == "ui.js"
        assert data["line"] == 3
        assert "superclass" not in data
        assert data["children"] == []

    def test_without_children(self):
        """Test that children can be left out."""
        record = SymbolRecord(id="Button", children=[SymbolRecord(id="Button#x")])

        assert "children" not in record.to_dict(include_children=False)
