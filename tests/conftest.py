"""Shared test fixtures."""

from collections.abc import Callable

import pytest

from jref.buffer import TextBuffer
from jref.models import Block, NormalizedIssue
from jref.settings import JrefSettings, OrgContext

BASE_URL = "https://example.atlassian.net"


class MemoryBuffer(TextBuffer):
    """In-memory host buffer; records every write."""

    def __init__(self, blocks: dict[str, str], current: str | None = None) -> None:
        self.blocks = dict(blocks)
        self.current = current
        self.writes: list[tuple[str, str]] = []

    def get_current(self) -> Block | None:
        if self.current is None:
            return None
        return self.get_by_identifier(self.current)

    def get_by_identifier(self, identifier: str) -> Block | None:
        if identifier not in self.blocks:
            return None
        return Block(identifier=identifier, content=self.blocks[identifier])

    def replace_by_identifier(self, identifier: str, text: str) -> None:
        self.blocks[identifier] = text
        self.writes.append((identifier, text))


@pytest.fixture
def make_buffer() -> Callable[..., MemoryBuffer]:
    return MemoryBuffer


@pytest.fixture
def make_payload() -> Callable[..., dict]:
    def _payload(
        key: str,
        summary: str = "Fix null check",
        category: str = "Done",
        color: str = "green",
        resolution: str | None = "Fixed",
    ) -> dict:
        fields = {
            "summary": summary,
            "status": {"name": "Closed", "statusCategory": {"name": category, "colorName": color}},
            "issuetype": {"name": "Bug"},
            "priority": {"name": "High"},
            "creator": {"displayName": "Bob Smith"},
            "reporter": {"displayName": "Bob Smith"},
            "assignee": {"displayName": "Jane Doe"},
            "fixVersions": [{"name": "1.2"}, {"name": "1.3"}],
            "resolution": {"name": resolution} if resolution else None,
        }
        return {"key": key, "fields": fields}

    return _payload


@pytest.fixture
def org() -> OrgContext:
    return OrgContext(
        base_url="example.atlassian.net",
        username="jane@example.com",
        api_token="tok_secret",  # type: ignore[arg-type]
    )


@pytest.fixture
def settings(tmp_path) -> JrefSettings:
    return JrefSettings(  # type: ignore[call-arg]
        jira_base_url="example.atlassian.net",
        jira_username="jane@example.com",
        jira_api_token="tok_secret",
        journal_path=tmp_path / "journal.sqlite3",
    )


@pytest.fixture
def done_issue() -> NormalizedIssue:
    return NormalizedIssue(
        key="ENG-1",
        url=f"{BASE_URL}/browse/ENG-1",
        summary="Fix null check",
        status="Closed",
        status_category="Done",
        status_color="green",
        type="Bug",
        priority="High",
        creator="Bob Smith",
        reporter="Bob Smith",
        assignee="Jane Doe",
        fix_version="1.2",
        resolution="Fixed",
    )


@pytest.fixture
def open_issue() -> NormalizedIssue:
    return NormalizedIssue(
        key="ENG-2",
        url=f"{BASE_URL}/browse/ENG-2",
        summary="Add retry to sync",
        status="In Progress",
        status_category="In Progress",
        status_color="yellow",
        assignee="Jane Doe",
    )
