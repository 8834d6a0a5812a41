"""Shared pydantic models passed between the provider, renderer and orchestrator."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

NONE = "None"


class Dialect(StrEnum):
    MARKDOWN = "markdown"
    ORG = "org"


class NormalizedIssue(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str  # ABC-123
    url: str  # browse URL
    summary: str = NONE
    status: str = NONE
    status_category: str = NONE
    status_color: str = NONE  # statusCategory.colorName, drives the glyph
    type: str = NONE
    priority: str = NONE
    creator: str = NONE
    reporter: str = NONE
    assignee: str = NONE
    fix_version: str = NONE
    resolution: str | None = None  # unresolved issues have no resolution at all


class ReferenceEntry(BaseModel):
    """A resolved issue together with its rendered single-line reference."""

    model_config = ConfigDict(frozen=True)

    issue: NormalizedIssue
    rendered: str


class Resolution(BaseModel):
    """Result of one resolver call: fetched issues plus the keys that failed and why."""

    model_config = ConfigDict(frozen=True)

    issues: dict[str, NormalizedIssue] = {}
    failures: dict[str, str] = {}


class ProcessedReference(BaseModel):
    """Journal row recording that a block was enriched with a set of keys."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    keys: str  # comma-joined
    use_second_org: bool = False
    timestamp: int  # epoch ms


class ProcessResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    keys: list[str]
    failures: dict[str, str] = {}


class Block(BaseModel):
    """A unit of host text addressed by a stable identifier."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    content: str
