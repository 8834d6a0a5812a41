"""Settings resolution with profile precedence and the explicit structs handed to the core."""

import base64
import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Literal

import tomlkit
import typer
from pydantic import BaseModel, ConfigDict, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from jref.errors import MissingCredentials
from jref.models import Dialect

CONFIG_PATH = Path.home() / ".config" / "jref" / "config.toml"
JOURNAL_PATH = Path.home() / ".config" / "jref" / "journal.sqlite3"

AuthType = Literal["basic", "pat"]


class OrgContext(BaseModel):
    """Endpoint, credentials and API version for one Jira organization."""

    model_config = ConfigDict(frozen=True)

    base_url: str | None = None
    username: str | None = None
    api_token: SecretStr | None = None
    api_version: str = "3"
    auth_type: AuthType = "basic"
    use_second_org: bool = False
    verify_ssl: bool = True

    def require_credentials(self) -> None:
        missing = [
            name
            for name, value in (
                ("base URL", self.base_url),
                ("API token", self.api_token),
                ("username", self.username),
            )
            if not value
        ]
        if missing:
            suffix = "_2" if self.use_second_org else ""
            raise MissingCredentials(
                f"Jira credentials not set ({', '.join(missing)}). "
                f"Set jira_base_url{suffix}, jira_api_token{suffix} and jira_username{suffix} in {CONFIG_PATH}"
            )

    @property
    def root(self) -> str:
        """Base URL with a scheme and without a trailing slash."""
        base = (self.base_url or "").strip().rstrip("/")
        if "://" not in base:
            base = f"https://{base}"
        return base

    def api_url(self, path: str) -> str:
        return f"{self.root}/rest/api/{self.api_version}/{path.lstrip('/')}"

    def browse_url(self, key: str) -> str:
        return f"{self.root}/browse/{key}"

    def auth_header(self) -> str:
        token = self.api_token.get_secret_value() if self.api_token else ""
        if self.auth_type == "pat":
            return f"Bearer {token}"
        creds = base64.b64encode(f"{self.username}:{token}".encode()).decode()
        return f"Basic {creds}"


class RenderConfig(BaseModel):
    """Output options for splicing and property annotation."""

    model_config = ConfigDict(frozen=True)

    dialect: Dialect = Dialect.MARKDOWN
    update_inline_text: bool = True
    add_properties: bool = False
    property_separator: str = "::"

    show_summary: bool = False
    show_assignee: bool = False
    show_priority: bool = False
    show_fix_version: bool = False
    show_status: bool = False
    show_reporter: bool = False
    show_resolution: bool = False


class JrefSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="JREF_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_profile: str | None = None

    # First organization
    jira_base_url: str | None = None  # e.g. example.atlassian.net
    jira_username: str | None = None
    jira_api_token: SecretStr | None = None
    jira_api_version: str = "3"
    jira_auth_type: AuthType = "basic"

    # Second organization
    enable_second: bool = False
    jira_base_url_2: str | None = None
    jira_username_2: str | None = None
    jira_api_token_2: SecretStr | None = None
    jira_api_version_2: str = "3"
    jira_auth_type_2: AuthType = "basic"

    verify_ssl: bool = True

    # Output
    dialect: Dialect = Dialect.MARKDOWN
    update_inline_text: bool = True
    add_to_block_properties: bool = False
    property_separator: str = "::"
    show_summary: bool = False
    show_assignee: bool = False
    show_priority: bool = False
    show_fix_version: bool = False
    show_status: bool = False
    show_reporter: bool = False
    show_resolution: bool = False

    # JQL pull
    jql_query: str | None = None
    jql_query_title: str | None = None

    journal_path: Path = JOURNAL_PATH

    def org_context(self, use_second_org: bool = False) -> OrgContext:
        if not use_second_org:
            return OrgContext(
                base_url=self.jira_base_url,
                username=self.jira_username,
                api_token=self.jira_api_token,
                api_version=self.jira_api_version or "3",
                auth_type=self.jira_auth_type,
                verify_ssl=self.verify_ssl,
            )
        if not self.enable_second:
            raise MissingCredentials("Second organization is not enabled. Set enable_second = true in the profile.")
        return OrgContext(
            base_url=self.jira_base_url_2,
            username=self.jira_username_2,
            api_token=self.jira_api_token_2,
            api_version=self.jira_api_version_2 or "3",
            auth_type=self.jira_auth_type_2,
            use_second_org=True,
            verify_ssl=self.verify_ssl,
        )

    def render_config(self) -> RenderConfig:
        return RenderConfig(
            dialect=self.dialect,
            update_inline_text=self.update_inline_text,
            add_properties=self.add_to_block_properties,
            property_separator=self.property_separator,
            show_summary=self.show_summary,
            show_assignee=self.show_assignee,
            show_priority=self.show_priority,
            show_fix_version=self.show_fix_version,
            show_status=self.show_status,
            show_reporter=self.show_reporter,
            show_resolution=self.show_resolution,
        )


@lru_cache(maxsize=1)
def _load_toml() -> tomlkit.TOMLDocument:
    """Load ~/.config/jref/config.toml, returning empty document if missing."""
    if not CONFIG_PATH.exists():
        return tomlkit.document()
    return tomlkit.load(CONFIG_PATH.open())


def _list_profiles(config: Mapping) -> list[str]:
    # tomlkit Table implements MutableMapping but not dict, so check Mapping
    return [k for k, v in config.items() if isinstance(v, Mapping)]


def get_settings(profile: str | None = None) -> JrefSettings:
    """Resolve the active profile and return a fully populated JrefSettings.

    Precedence (highest to lowest):
    1. profile argument (--profile CLI flag)
    2. JREF_DEFAULT_PROFILE env var
    3. default_profile key in ~/.config/jref/config.toml
    4. First profile defined in ~/.config/jref/config.toml

    Credentials are not validated here; the resolver raises MissingCredentials
    for the organization it is asked to query.
    """
    toml_config = _load_toml()

    active = (
        profile
        or os.environ.get("JREF_DEFAULT_PROFILE")
        or toml_config.get("default_profile")
        or ((_profiles := _list_profiles(toml_config)) and _profiles[0] or None)
    )

    profile_defaults: dict = {}
    if active:
        if active in toml_config and isinstance(toml_config[active], Mapping):
            profile_defaults = dict(toml_config[active])
        elif active not in toml_config:
            profiles = _list_profiles(toml_config)
            typer.echo(f"Profile '{active}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}")
            raise typer.Exit(1)

    # profile values are init kwargs, so they win over JREF_* env vars and .env
    return JrefSettings(**profile_defaults)
