"""Property annotation: derive key/value pairs from an issue and upsert them into a text block."""

import re

from jref.models import NormalizedIssue
from jref.settings import RenderConfig


def build_properties(issue: NormalizedIssue, config: RenderConfig) -> dict[str, str]:
    properties: dict[str, str] = {}

    if config.show_summary:
        properties["summary"] = issue.summary
    if config.show_assignee:
        properties["assignee"] = issue.assignee
    if config.show_priority:
        properties["priority"] = issue.priority
    if config.show_fix_version:
        properties["fix-version"] = issue.fix_version
    if config.show_status:
        properties["status"] = issue.status
    if config.show_reporter:
        properties["reporter"] = issue.reporter
    # resolution is None for unresolved issues, never the "None" sentinel
    if config.show_resolution and issue.resolution:
        properties["resolution"] = issue.resolution

    return properties


def _existing_keys(text: str, separator: str) -> set[str]:
    keys = set()
    for line in text.split("\n"):
        head, sep, _ = line.partition(separator)
        if sep:
            keys.add(head.strip())
    return keys


def merge_properties(text: str, properties: dict[str, str], separator: str = "::") -> str:
    """Update existing property lines in place and append missing ones.

    Every line defining a key is rewritten, so duplicate lines for the same
    key all end up with the new value. Keys absent from ``properties`` and
    non-property lines are left as they are.
    """
    existing = _existing_keys(text, separator)
    merged = text

    for key, value in properties.items():
        line = f"{key}{separator} {value}"
        if key not in existing:
            merged = f"{merged}\n{line}" if merged else line
            continue
        pattern = re.compile(rf"^([ \t]*){re.escape(key)}[ \t]*{re.escape(separator)}.*$", re.MULTILINE)
        merged = pattern.sub(lambda m, line=line: f"{m.group(1)}{line}", merged)

    return merged
