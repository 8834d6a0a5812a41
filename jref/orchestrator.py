"""Compose extraction, resolution, rendering, splicing and property merging."""

import logging
import time
from contextlib import nullcontext

import httpx
from pydantic import BaseModel

from jref.buffer import TextBuffer
from jref.errors import JrefError, NoCurrentSelection, NoIssueKeysFound, TotalResolutionFailure
from jref.journal import Journal
from jref.keys import extract_issue_keys
from jref.models import Block, NormalizedIssue, ProcessedReference, ProcessResult
from jref.properties import build_properties, merge_properties
from jref.providers.jira import JiraProvider
from jref.render import build_reference_set, render_reference
from jref.resolver import resolve_issues
from jref.settings import JrefSettings, OrgContext, RenderConfig
from jref.splice import splice

logger = logging.getLogger(__name__)


class RefreshReport(BaseModel):
    refreshed: list[str] = []
    failed: dict[str, str] = {}  # identifier -> reason


async def process_text(text: str, org: OrgContext, render: RenderConfig) -> ProcessResult:
    """Return ``text`` enriched with references and properties for the issues it mentions."""
    keys = extract_issue_keys(text)
    if not keys:
        raise NoIssueKeysFound("Couldn't find any Jira issues.")

    resolution = await resolve_issues(keys, org)
    if not resolution.issues:
        detail = "; ".join(f"{key}: {reason}" for key, reason in resolution.failures.items())
        raise TotalResolutionFailure(f"Failed to fetch {detail or ', '.join(keys)}")

    refs = build_reference_set(resolution.issues, render.dialect)

    new_text = text
    if render.update_inline_text:
        new_text = splice(new_text, refs, render.dialect)

    if render.add_properties:
        first = next(key for key in keys if key in resolution.issues)
        properties = build_properties(resolution.issues[first], render)
        new_text = merge_properties(new_text, properties, render.property_separator)

    return ProcessResult(text=new_text, keys=keys, failures=resolution.failures)


def _load_block(buffer: TextBuffer, identifier: str | None) -> Block:
    block = buffer.get_by_identifier(identifier) if identifier else buffer.get_current()
    if block is None:
        raise NoCurrentSelection("Select a block before running this command")
    return block


async def update_issue(
    buffer: TextBuffer,
    journal: Journal,
    settings: JrefSettings,
    use_second_org: bool = False,
    identifier: str | None = None,
    record: bool = True,
) -> ProcessResult:
    """Enrich one block in place and journal it for later refreshes.

    Nothing is written and nothing is journaled if any step fails.
    """
    block = _load_block(buffer, identifier)
    org = settings.org_context(use_second_org)
    result = await process_text(block.content, org, settings.render_config())

    entry = ProcessedReference(
        identifier=block.identifier,
        keys=",".join(result.keys),
        use_second_org=use_second_org,
        timestamp=int(time.time() * 1000),
    )
    # the journal row is rolled back if the write fails
    with journal.recording(entry) if record else nullcontext():
        buffer.replace_by_identifier(block.identifier, result.text)
    logger.info("Updated %s with %s", block.identifier, ", ".join(result.keys))
    return result


async def pull_jql_results(
    buffer: TextBuffer,
    settings: JrefSettings,
    use_second_org: bool = False,
    query: str | None = None,
    identifier: str | None = None,
) -> list[NormalizedIssue]:
    """Replace a block with the JQL title (or its own content) followed by one reference line per result."""
    jql = query or settings.jql_query
    if not jql:
        raise JrefError("No JQL query configured. Set jql_query in the profile or pass --query.")

    block = _load_block(buffer, identifier)
    provider = JiraProvider(settings.org_context(use_second_org))
    issues = await provider.search(jql)

    dialect = settings.dialect
    head = settings.jql_query_title or block.content.rstrip("\n")
    lines = [head] if head else []
    lines += [f"- {render_reference(issue, dialect)}" for issue in issues]
    buffer.replace_by_identifier(block.identifier, "\n".join(lines))
    return issues


async def refresh_all(buffer: TextBuffer, journal: Journal, settings: JrefSettings) -> RefreshReport:
    """Replay the latest journal entry of every block, one at a time."""
    report = RefreshReport()
    for entry in journal.latest_by_identifier():
        try:
            await update_issue(
                buffer,
                journal,
                settings,
                use_second_org=entry.use_second_org,
                identifier=entry.identifier,
                record=False,
            )
        except (JrefError, httpx.HTTPError) as exc:
            logger.warning("Refresh of %s failed: %s", entry.identifier, exc)
            report.failed[entry.identifier] = str(exc)
        else:
            report.refreshed.append(entry.identifier)
    return report
