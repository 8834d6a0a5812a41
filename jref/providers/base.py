"""Abstract base class for issue sources."""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from jref.models import NormalizedIssue, Resolution


class IssueSource(ABC):
    @abstractmethod
    async def get_issues(self, keys: Iterable[str]) -> Resolution: ...

    @abstractmethod
    async def search(self, jql: str) -> list[NormalizedIssue]: ...
