"""Error taxonomy shared by the resolver, orchestrator and CLI."""


class JrefError(RuntimeError):
    """Base class for every failure the CLI reports as a short notice."""


class MissingCredentials(JrefError):
    """Base URL, API token or username is missing for the selected organization."""


class NoIssueKeysFound(JrefError):
    pass


class NoCurrentSelection(JrefError):
    pass


class JiraApiError(JrefError):
    pass


class NoteAccessError(JrefError):
    """A note file could not be read as UTF-8 text or could not be written."""


class TotalResolutionFailure(JrefError):
    """The resolver call failed as a whole or returned nothing usable."""


class PartialResolutionFailure(JrefError):
    """Some keys could not be fetched; the rest were processed."""

    def __init__(self, failures: dict[str, str]) -> None:
        self.failures = dict(failures)
        keys = ", ".join(self.failures)
        super().__init__(f"Failed to fetch {keys}")
