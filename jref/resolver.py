"""Resolve a batch of issue keys against one Jira organization."""

from collections.abc import Iterable

import httpx

from jref.errors import TotalResolutionFailure
from jref.models import Resolution
from jref.providers.jira import JiraProvider
from jref.settings import OrgContext


async def resolve_issues(keys: Iterable[str], org: OrgContext) -> Resolution:
    """Fetch ``keys`` from ``org``.

    Raises MissingCredentials before any request when the context is
    incomplete. Per-key failures come back in ``Resolution.failures``; only a
    failure of the batch as a whole raises TotalResolutionFailure.
    """
    provider = JiraProvider(org)
    try:
        return await provider.get_issues(keys)
    except (httpx.HTTPError, httpx.InvalidURL, OSError, ValueError) as exc:
        raise TotalResolutionFailure(f"Failed to fetch issues: {exc}") from exc
