"""Rewrite issue references in text with their rendered form, leaving all other text untouched."""

import re
from collections.abc import Mapping

from jref.keys import ReferencePattern, patterns_for
from jref.models import Dialect, ReferenceEntry


def splice(text: str, refs: Mapping[str, ReferenceEntry], dialect: Dialect) -> str:
    """Replace the first qualifying occurrence of each known key with its rendered reference.

    Patterns run in the dialect's priority order, each as one pass over the
    whole current text. A key substituted by an earlier pattern is not touched
    again by a later one; unknown or already-substituted matches are echoed.
    """
    replaced: set[str] = set()

    def _substitute(matcher: ReferencePattern, match: re.Match[str]) -> str:
        key = matcher.key(match)
        if key in replaced or key not in refs:
            return match.group(0)
        replaced.add(key)
        return refs[key].rendered

    for matcher in patterns_for(dialect):
        text = matcher.pattern.sub(lambda m, matcher=matcher: _substitute(matcher, m), text)

    return text
