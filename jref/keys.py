"""Issue-key grammar, extraction, and the per-dialect surface patterns used for splicing."""

import re
from typing import NamedTuple

from jref.models import Dialect

ISSUE_KEY = r"[A-Z][A-Z0-9]+-[0-9]+"

# Same boundaries as the bare-key splice pattern, except that "/" may precede a
# key so URLs and paths are still scanned.
_KEY_RE = re.compile(rf"(?<![\w#-])({ISSUE_KEY})(?![\w-])")

# One level of nested brackets is allowed inside a link label: "[x] fix [y]".
# Markdown labels may also carry backslash escapes such as "\]".
_ORG_LABEL = r"(?:[^\[\]\n]|\[[^\[\]\n]*\])*"
_MD_LABEL = r"(?:\\.|[^\[\]\n\\]|\[(?:\\.|[^\[\]\n\\])*\])*"
_BROWSE_URL = rf"[^\s\[\]()]+/browse/(?P<issue>{ISSUE_KEY})"


class ReferencePattern(NamedTuple):
    """One textual shape an issue reference can take, and where its key sits in the match."""

    name: str
    pattern: re.Pattern[str]
    group: str = "issue"

    def key(self, match: re.Match[str]) -> str:
        return match.group(self.group)


_BARE_URL = ReferencePattern("url", re.compile(rf"https?://{_BROWSE_URL}(?![\w-])"))
_BARE_KEY = ReferencePattern("key", re.compile(rf"(?<![\w/#-])(?P<issue>{ISSUE_KEY})(?![\w-])"))

# Priority order matters: an existing link wins over a bare URL, which wins over a bare key.
MARKDOWN_PATTERNS: tuple[ReferencePattern, ...] = (
    ReferencePattern("link", re.compile(rf"\[{_MD_LABEL}\]\({_BROWSE_URL}\)")),
    _BARE_URL,
    _BARE_KEY,
)

ORG_PATTERNS: tuple[ReferencePattern, ...] = (
    ReferencePattern("link", re.compile(rf"\[\[{_BROWSE_URL}\]\[{_ORG_LABEL}\]\]")),
    _BARE_URL,
    _BARE_KEY,
)


def patterns_for(dialect: Dialect) -> tuple[ReferencePattern, ...]:
    match dialect:
        case Dialect.ORG:
            return ORG_PATTERNS
        case _:
            return MARKDOWN_PATTERNS


def extract_issue_keys(text: str) -> list[str]:
    """Return distinct issue keys in order of first appearance.

    Keys inside already-rendered references are found again, so re-running on
    processed text yields the same keys.
    """
    return list(dict.fromkeys(_KEY_RE.findall(text or "")))
