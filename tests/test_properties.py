"""Tests for property derivation and the property-block upsert."""

from jref.models import NormalizedIssue
from jref.properties import build_properties, merge_properties
from jref.settings import RenderConfig

ALL_ON = RenderConfig(
    add_properties=True,
    show_summary=True,
    show_assignee=True,
    show_priority=True,
    show_fix_version=True,
    show_status=True,
    show_reporter=True,
    show_resolution=True,
)


class TestMergeProperties:
    def test_upsert(self) -> None:
        result = merge_properties("foo:: 1\nbar:: 2", {"foo": "9", "baz": "3"})
        assert result == "foo:: 9\nbar:: 2\nbaz:: 3"

    def test_empty_text(self) -> None:
        assert merge_properties("", {"status": "Done"}) == "status:: Done"

    def test_no_properties_is_noop(self) -> None:
        assert merge_properties("text\nfoo:: 1", {}) == "text\nfoo:: 1"

    def test_non_property_lines_untouched(self) -> None:
        text = "ENG-1 is blocked\n  indented note\nfoo:: 1"
        assert merge_properties(text, {"foo": "2"}) == "ENG-1 is blocked\n  indented note\nfoo:: 2"

    def test_indentation_preserved(self) -> None:
        assert merge_properties("  foo :: 1", {"foo": "9"}) == "  foo:: 9"

    def test_duplicate_lines_collapse(self) -> None:
        assert merge_properties("foo:: 1\nfoo:: 2", {"foo": "9"}) == "foo:: 9\nfoo:: 9"

    def test_key_suffix_not_confused(self) -> None:
        assert merge_properties("xfoo:: 1", {"foo": "9"}) == "xfoo:: 1\nfoo:: 9"

    def test_value_is_literal(self) -> None:
        assert merge_properties("foo:: 1", {"foo": r"C:\temp\1"}) == r"foo:: C:\temp\1"

    def test_custom_separator(self) -> None:
        result = merge_properties("foo = 1\nbar = 2", {"foo": "9", "baz": "3"}, separator="=")
        assert result == "foo= 9\nbar = 2\nbaz= 3"


class TestBuildProperties:
    def test_all_enabled(self, done_issue: NormalizedIssue) -> None:
        assert build_properties(done_issue, ALL_ON) == {
            "summary": "Fix null check",
            "assignee": "Jane Doe",
            "priority": "High",
            "fix-version": "1.2",
            "status": "Closed",
            "reporter": "Bob Smith",
            "resolution": "Fixed",
        }

    def test_nothing_enabled(self, done_issue: NormalizedIssue) -> None:
        assert build_properties(done_issue, RenderConfig()) == {}

    def test_unresolved_issue_omits_resolution(self, open_issue: NormalizedIssue) -> None:
        props = build_properties(open_issue, ALL_ON)
        assert "resolution" not in props
        # other absent fields keep the "None" sentinel
        assert props["fix-version"] == "None"

    def test_selected_subset(self, done_issue: NormalizedIssue) -> None:
        config = RenderConfig(show_status=True, show_assignee=True)
        assert build_properties(done_issue, config) == {"assignee": "Jane Doe", "status": "Closed"}
