"""Reference rendering: one resolved issue → one line of markdown or org-mode text."""

from collections.abc import Mapping

from jref.models import Dialect, NormalizedIssue, ReferenceEntry

GLYPH_SUCCESS = "✅"
GLYPH_ATTENTION = "🔴"
GLYPH_NEUTRAL = "⚪"

_STATUS_GLYPH = {
    "green": GLYPH_SUCCESS,
    "yellow": GLYPH_ATTENTION,
    "red": GLYPH_ATTENTION,
}


def status_category_glyph(color_name: str | None) -> str:
    """Map a Jira statusCategory colorName to a glyph; unknown colors get the neutral one."""
    return _STATUS_GLYPH.get((color_name or "").strip().lower(), GLYPH_NEUTRAL)


def _single_line(text: str) -> str:
    return " ".join(text.split())


# Labels must re-match the link pattern on the next pass. Org mode has no escape
# syntax, so its brackets become braces.
_MD_ESCAPES = str.maketrans({"\\": "\\\\", "[": "\\[", "]": "\\]"})
_ORG_ESCAPES = str.maketrans({"[": "{", "]": "}"})


def _label_text(text: str, dialect: Dialect) -> str:
    table = _ORG_ESCAPES if dialect == Dialect.ORG else _MD_ESCAPES
    return _single_line(text).translate(table)


def render_reference(issue: NormalizedIssue, dialect: Dialect) -> str:
    label = (
        f"{status_category_glyph(issue.status_color)} {_label_text(issue.status_category, dialect)}"
        f" - {issue.key}|{_label_text(issue.summary, dialect)}"
    )
    if dialect == Dialect.ORG:
        return f"[[{issue.url}][{label}]]"
    return f"[{label}]({issue.url})"


def build_reference_set(issues: Mapping[str, NormalizedIssue], dialect: Dialect) -> dict[str, ReferenceEntry]:
    """Render every resolved issue, keyed by the key it was requested under."""
    return {key: ReferenceEntry(issue=issue, rendered=render_reference(issue, dialect)) for key, issue in issues.items()}
