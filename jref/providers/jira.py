"""Jira REST API provider: one concurrent request per issue key, JQL search."""

import asyncio
import logging
from collections.abc import Iterable

import httpx

from jref.errors import JiraApiError, JrefError
from jref.models import NONE, NormalizedIssue, Resolution
from jref.providers.base import IssueSource
from jref.settings import OrgContext

logger = logging.getLogger(__name__)

TIMEOUT = 30

# Anything one key's request can raise; caught per key so siblings keep running.
_PER_KEY_ERRORS = (httpx.HTTPError, httpx.InvalidURL, JrefError, ValueError)


def _or_none(value: str | None) -> str:
    return NONE if value is None else value


def _attr(node: dict | None, name: str) -> str | None:
    return (node or {}).get(name)


class JiraProvider(IssueSource):
    def __init__(self, org: OrgContext) -> None:
        org.require_credentials()
        self._org = org
        self._headers = {
            "Accept": "application/json",
            "Authorization": org.auth_header(),
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(headers=self._headers, verify=self._org.verify_ssl, timeout=TIMEOUT)

    async def _get(self, client: httpx.AsyncClient, path: str, params: dict | None = None) -> dict:
        response = await client.get(self._org.api_url(path), params=params)
        if response.status_code == 401:
            raise JiraApiError("Jira API returned 401. Check jira_username and jira_api_token for the active profile.")
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise JiraApiError(f"Unexpected Jira response for {path}")
        return data

    def _issue_from_payload(self, payload: dict, requested_key: str | None = None) -> NormalizedIssue:
        key = payload.get("key") or requested_key
        if not key:
            raise JiraApiError("Jira issue payload has no key")
        fields = payload.get("fields") or {}
        status = fields.get("status") or {}
        category = status.get("statusCategory") or {}
        fix_versions = fields.get("fixVersions") or []
        return NormalizedIssue(
            key=key,
            url=self._org.browse_url(key),
            summary=_or_none(fields.get("summary")),
            status=_or_none(status.get("name")),
            status_category=_or_none(category.get("name")),
            status_color=_or_none(category.get("colorName")),
            type=_or_none(_attr(fields.get("issuetype"), "name")),
            priority=_or_none(_attr(fields.get("priority"), "name")),
            creator=_or_none(_attr(fields.get("creator"), "displayName")),
            reporter=_or_none(_attr(fields.get("reporter"), "displayName")),
            assignee=_or_none(_attr(fields.get("assignee"), "displayName")),
            fix_version=_or_none(_attr(fix_versions[0], "name") if fix_versions else None),
            resolution=_attr(fields.get("resolution"), "name"),
        )

    async def _fetch_one(self, client: httpx.AsyncClient, key: str) -> tuple[str, NormalizedIssue | None, str | None]:
        try:
            payload = await self._get(client, f"issue/{key}")
            return key, self._issue_from_payload(payload, key), None
        except _PER_KEY_ERRORS as exc:
            logger.warning("Failed to fetch %s: %s", key, exc)
            return key, None, str(exc) or type(exc).__name__

    async def get_issues(self, keys: Iterable[str]) -> Resolution:
        """Fetch every key concurrently; failed keys are omitted and reported in ``failures``."""
        keys = list(dict.fromkeys(keys))
        logger.debug("Fetching %d issue(s) from %s", len(keys), self._org.root)
        async with self._client() as client:
            results = await asyncio.gather(*(self._fetch_one(client, key) for key in keys))

        issues: dict[str, NormalizedIssue] = {}
        failures: dict[str, str] = {}
        for key, issue, error in results:
            if issue is None:
                failures[key] = error or "unknown error"
            else:
                issues[key] = issue
        return Resolution(issues=issues, failures=failures)

    async def search(self, jql: str) -> list[NormalizedIssue]:
        # NOTE: first page only (Jira's default maxResults). Pagination not implemented.
        async with self._client() as client:
            data = await self._get(client, "search", params={"jql": jql})
        return [self._issue_from_payload(node) for node in data.get("issues", [])]
