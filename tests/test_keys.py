"""Tests for issue-key extraction and dialect patterns."""

from jref.keys import MARKDOWN_PATTERNS, ORG_PATTERNS, extract_issue_keys, patterns_for
from jref.models import Dialect


class TestExtractIssueKeys:
    def test_order_of_first_appearance(self) -> None:
        assert extract_issue_keys("ENG-2 then ENG-1 and ENG-2 again") == ["ENG-2", "ENG-1"]

    def test_no_keys_returns_empty(self) -> None:
        assert extract_issue_keys("nothing to see here") == []
        assert extract_issue_keys("") == []

    def test_case_sensitive(self) -> None:
        assert extract_issue_keys("eng-1 Eng-2") == []

    def test_full_number_only(self) -> None:
        assert extract_issue_keys("ENG-123") == ["ENG-123"]

    def test_project_key_with_digits(self) -> None:
        assert extract_issue_keys("see AB2-7") == ["AB2-7"]

    def test_ignores_markup(self) -> None:
        text = "- **ENG-1**, (OPS-9) and `WEB-3`"
        assert extract_issue_keys(text) == ["ENG-1", "OPS-9", "WEB-3"]

    def test_skips_keys_glued_to_other_tokens(self) -> None:
        assert extract_issue_keys("ENG-1x ENG-2-3 #ENG-4 REL-ENG-5 ENG-6") == ["ENG-6"]

    def test_extracted_bare_keys_are_spliceable(self) -> None:
        text = "ENG-1x, ENG-2, (OPS-9) and `WEB-3`-ish ENG-4_b"
        key_pattern = MARKDOWN_PATTERNS[2].pattern
        assert extract_issue_keys(text) == [m.group("issue") for m in key_pattern.finditer(text)]

    def test_finds_key_in_browse_url(self) -> None:
        assert extract_issue_keys("https://example.atlassian.net/browse/ENG-7") == ["ENG-7"]

    def test_finds_key_again_in_rendered_reference(self) -> None:
        text = "[✅ Done - ENG-1|Fix](https://example.atlassian.net/browse/ENG-1)"
        assert extract_issue_keys(text) == ["ENG-1"]


class TestPatternsFor:
    def test_markdown(self) -> None:
        assert patterns_for(Dialect.MARKDOWN) is MARKDOWN_PATTERNS

    def test_org(self) -> None:
        assert patterns_for(Dialect.ORG) is ORG_PATTERNS

    def test_priority_order(self) -> None:
        assert [p.name for p in MARKDOWN_PATTERNS] == ["link", "url", "key"]
        assert [p.name for p in ORG_PATTERNS] == ["link", "url", "key"]

    def test_link_pattern_captures_key(self) -> None:
        link = MARKDOWN_PATTERNS[0]
        match = link.pattern.search("x [old [label]](https://example.atlassian.net/browse/ENG-7) y")
        assert match is not None
        assert link.key(match) == "ENG-7"
        assert match.group(0) == "[old [label]](https://example.atlassian.net/browse/ENG-7)"

    def test_org_link_pattern_captures_key(self) -> None:
        link = ORG_PATTERNS[0]
        match = link.pattern.search("[[https://example.atlassian.net/browse/ENG-7][old]]")
        assert match is not None
        assert link.key(match) == "ENG-7"

    def test_key_pattern_skips_paths(self) -> None:
        key = MARKDOWN_PATTERNS[2]
        assert key.pattern.search("docs/ENG-1.md") is None
