"""Tests for qualified identifiers."""

import pytest

from docspine.model.identifiers import QualifiedName, Qualifier, sort_ids


# =============================================================================
# Parsing
# =============================================================================


class TestQualifiedNameParse:
    """Tests for QualifiedName.parse."""

    def test_static_and_instance_segments(self):
        """Test that . and # both start segments with their qualifier."""
        name = QualifiedName.parse("ajax.Ajax.Request#send")

        assert name.segments == ("ajax", "Ajax", "Request", "send")
        assert [q for _, q in name.parts] == [
            Qualifier.ROOT,
            Qualifier.STATIC,
            Qualifier.STATIC,
            Qualifier.INSTANCE,
        ]

    def test_first_at_is_the_event_boundary(self):
        """Test that everything after the first @ is the event name."""
        name = QualifiedName.parse("Button#render@before.draw#x@y")

        assert name.name == "before.draw#x@y"
        assert name.qualifier is Qualifier.EVENT
        assert name.segments == ("Button", "render", "before.draw#x@y")

    def test_empty_section(self):
        """Test that a key without a section has an empty first segment."""
        name = QualifiedName.parse(".Button.disable")

        assert name.section == ""
        assert name.segments == ("", "Button", "disable")

    def test_round_trip_string(self):
        """Test that str() reproduces the parsed text."""
        for text in ("UI.Button#render", "a@b.c", ".x.y", "solo", ""):
            assert str(QualifiedName.parse(text)) == text


# =============================================================================
# Derived values
# =============================================================================


class TestQualifiedNameDerived:
    """Tests for parent, prefix, relative and path."""

    def test_parent(self):
        """Test that parent drops only the trailing pair."""
        assert str(QualifiedName.parse("UI.Button#render").parent) == "UI.Button"
        assert QualifiedName.parse("UI").parent is None

    def test_name_prefix(self):
        """Test that the prefix includes the boundary delimiter."""
        assert QualifiedName.parse("Ajax.Request#send").name_prefix == "Ajax.Request#"
        assert QualifiedName.parse("Button@click").name_prefix == "Button@"
        assert QualifiedName.parse("Button").name_prefix is None

    def test_relative_drops_section(self):
        """Test that a static boundary after the section is removed."""
        assert str(QualifiedName.parse("ui.Button#render").relative()) == "Button#render"
        assert str(QualifiedName.parse(".Button").relative()) == "Button"

    def test_relative_keeps_non_static_second_pair(self):
        """Test that ids whose second pair is # or @ are unchanged."""
        assert str(QualifiedName.parse("Button#render").relative()) == "Button#render"
        assert str(QualifiedName.parse("Button@click").relative()) == "Button@click"

    def test_with_section(self):
        """Test replacing the leading segment."""
        name = QualifiedName.parse(".Button.disable").with_section("UI")

        assert str(name) == "UI.Button.disable"

    def test_with_qualifier(self):
        """Test requalifying the trailing pair."""
        name = QualifiedName.parse("Element.foo").with_qualifier(Qualifier.INSTANCE)

        assert str(name) == "Element#foo"

    def test_with_qualifier_rejects_single_segment(self):
        """Test that a single segment cannot be requalified."""
        with pytest.raises(ValueError):
            QualifiedName.parse("Element").with_qualifier(Qualifier.INSTANCE)

    def test_path(self):
        """Test navigation path substitutions."""
        assert QualifiedName.parse("Ajax.Request#send").path() == "Ajax.Request.prototype.send"
        assert QualifiedName.parse("Button@click").path() == "Button.event.click"


# =============================================================================
# Ordering
# =============================================================================


class TestSortOrder:
    """Tests for canonical ordering."""

    def test_parent_sorts_before_descendants(self):
        """Test that a parent id precedes every id nested under it."""
        ids = ["UI.Button#render", "UI.Button", "UI", "UI.Button.disable"]

        assert sort_ids(ids) == ["UI", "UI.Button", "UI.Button.disable", "UI.Button#render"]

    def test_case_insensitive(self):
        """Test that case does not decide the order of different names."""
        assert sort_ids(["b", "A", "a.c", "C"]) == ["A", "a.c", "b", "C"]

    def test_case_tie_is_deterministic(self):
        """Test that ids differing only in case still get a fixed order."""
        assert sort_ids(["x.foo", "x.Foo"]) == sort_ids(["x.Foo", "x.foo"])

    def test_static_before_instance_before_event(self):
        """Test qualifier rank for siblings with the same name."""
        ids = ["A@x", "A#x", "A.x"]

        assert sort_ids(ids) == ["A.x", "A#x", "A@x"]

    def test_segment_compared_before_qualifier(self):
        """Test that the name segment decides before the delimiter character does."""
        ids = ["Button#render", "Button.disable"]

        assert sort_ids(ids) == ["Button.disable", "Button#render"]
        assert sorted(ids, key=str.lower) == ["Button#render", "Button.disable"]

    def test_sort_is_idempotent(self):
        """Test that sorting a sorted list changes nothing."""
        ids = sort_ids(["z", "a#b", "a.b", "A", ".q.r", "a@e"])

        assert sort_ids(ids) == ids
