"""jref CLI: all commands."""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated

import httpx
import tomlkit
import typer
from rich import print as rprint
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from jref.buffer import FileBuffer
from jref.errors import JrefError, PartialResolutionFailure
from jref.journal import Journal
from jref.orchestrator import pull_jql_results, refresh_all, update_issue
from jref.settings import CONFIG_PATH, _list_profiles, get_settings

app = typer.Typer(help="jref: enrich notes with live Jira issue references", no_args_is_help=True)

ProfileOpt = Annotated[
    str | None,
    typer.Option("--profile", "-p", help="Profile name from ~/.config/jref/config.toml"),
]
SecondOrgOpt = Annotated[
    bool,
    typer.Option("--second-org", "-2", help="Query the second Jira organization"),
]
NoteArg = Annotated[
    Path,
    typer.Argument(help="Note file to enrich", exists=True, dir_okay=False, resolve_path=True),
]


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, markup=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log requests and decisions")] = False,
) -> None:
    _configure_logging(verbose)


# ---------------------------------------------------------------------------
# Error boundary
# ---------------------------------------------------------------------------


def _fail(message: str) -> None:
    rprint(f"[red]{escape(message)}[/red]")
    raise typer.Exit(1)


def _run(coro):
    """Run one orchestration; every known failure becomes a short message and exit 1."""
    try:
        return asyncio.run(coro)
    except JrefError as exc:
        _fail(str(exc))
    except httpx.HTTPError as exc:
        _fail(f"Jira request failed: {exc}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("update")
def update_cmd(
    note: NoteArg,
    profile: ProfileOpt = None,
    second_org: SecondOrgOpt = False,
) -> None:
    """Replace issue keys in a note with live Jira references."""
    settings = get_settings(profile=profile)
    with Journal(settings.journal_path) as journal:
        result = _run(update_issue(FileBuffer(note), journal, settings, use_second_org=second_org))

    if result.failures:
        rprint(f"[yellow]{escape(str(PartialResolutionFailure(result.failures)))}[/yellow]")
    resolved = [key for key in result.keys if key not in result.failures]
    rprint(f"[green]✓[/green] Updated {', '.join(resolved)} in {note}")


@app.command("jql")
def jql_cmd(
    note: NoteArg,
    query: Annotated[str | None, typer.Option("--query", "-q", help="JQL query (defaults to jql_query)")] = None,
    profile: ProfileOpt = None,
    second_org: SecondOrgOpt = False,
) -> None:
    """Write the results of a JQL query into a note, one reference per line."""
    settings = get_settings(profile=profile)
    issues = _run(pull_jql_results(FileBuffer(note), settings, use_second_org=second_org, query=query))
    rprint(f"[green]✓[/green] Wrote {len(issues)} issue(s) to {note}")


@app.command("refresh")
def refresh_cmd(profile: ProfileOpt = None) -> None:
    """Re-render every note recorded in the journal."""
    settings = get_settings(profile=profile)
    with Journal(settings.journal_path) as journal:
        report = _run(refresh_all(FileBuffer(), journal, settings))

    for identifier, reason in report.failed.items():
        rprint(f"[yellow]Skipped {escape(identifier)}:[/yellow] {escape(reason)}")
    rprint(f"[green]✓[/green] Refreshed {len(report.refreshed)} note(s)")


@app.command("history")
def history_cmd(profile: ProfileOpt = None) -> None:
    """List journaled notes and the issue keys they reference."""
    settings = get_settings(profile=profile)

    table = Table(title="Processed References")
    table.add_column("Note", style="cyan")
    table.add_column("Issues")
    table.add_column("Org")
    table.add_column("When", style="dim")

    with Journal(settings.journal_path) as journal:
        for entry in journal:
            when = datetime.fromtimestamp(entry.timestamp / 1000).strftime("%Y-%m-%d %H:%M")
            table.add_row(entry.identifier, entry.keys.replace(",", ", "), "2nd" if entry.use_second_org else "1st", when)

    rprint(table)


@app.command("set-default")
def set_default(
    profile: Annotated[str, typer.Argument(help="Profile name to set as default")],
) -> None:
    """Set the default profile in ~/.config/jref/config.toml."""
    if not CONFIG_PATH.exists():
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        doc = tomlkit.document()
        doc.add("default_profile", profile)
        CONFIG_PATH.write_text(tomlkit.dumps(doc))
        rprint(f'[green]✓[/green] Default profile set to "{profile}" in {CONFIG_PATH}')
        return

    doc = tomlkit.load(CONFIG_PATH.open())
    profiles = _list_profiles(doc)
    if profile not in profiles:
        rprint(f"[red]Profile '{profile}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}[/red]")
        raise typer.Exit(1)

    doc["default_profile"] = profile
    CONFIG_PATH.write_text(tomlkit.dumps(doc))
    rprint(f'[green]✓[/green] Default profile set to "{profile}" in {CONFIG_PATH}')


@app.command("config-show")
def config_show(profile: ProfileOpt = None) -> None:
    """Show resolved configuration (masks credentials)."""
    try:
        settings = get_settings(profile=profile)
    except SystemExit:
        return

    def mask(val: str | None) -> str:
        if val is None:
            return "[dim](not set)[/dim]"
        if len(val) <= 5:
            return "***"
        return f"...{val[-5:]}"

    def plain(val: object) -> str:
        return "[dim](not set)[/dim]" if val in (None, "") else escape(str(val))

    table = Table(title="jref Configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("default_profile", plain(settings.default_profile))
    table.add_row("jira_base_url", plain(settings.jira_base_url))
    table.add_row("jira_username", plain(settings.jira_username))
    table.add_row(
        "jira_api_token",
        mask(settings.jira_api_token.get_secret_value() if settings.jira_api_token else None),
    )
    table.add_row("jira_api_version", settings.jira_api_version)
    table.add_row("jira_auth_type", settings.jira_auth_type)
    table.add_row("enable_second", str(settings.enable_second))
    if settings.enable_second:
        table.add_row("jira_base_url_2", plain(settings.jira_base_url_2))
        table.add_row("jira_username_2", plain(settings.jira_username_2))
        table.add_row(
            "jira_api_token_2",
            mask(settings.jira_api_token_2.get_secret_value() if settings.jira_api_token_2 else None),
        )
        table.add_row("jira_api_version_2", settings.jira_api_version_2)
        table.add_row("jira_auth_type_2", settings.jira_auth_type_2)
    table.add_row("dialect", settings.dialect.value)
    table.add_row("update_inline_text", str(settings.update_inline_text))
    table.add_row("add_to_block_properties", str(settings.add_to_block_properties))
    table.add_row("property_separator", escape(settings.property_separator))
    table.add_row("jql_query", plain(settings.jql_query))
    table.add_row("journal_path", str(settings.journal_path))

    rprint(table)
