"""Host buffer capability interface and a file-backed implementation."""

from abc import ABC, abstractmethod
from pathlib import Path

from jref.errors import NoteAccessError
from jref.models import Block


class TextBuffer(ABC):
    @abstractmethod
    def get_current(self) -> Block | None: ...

    @abstractmethod
    def get_by_identifier(self, identifier: str) -> Block | None: ...

    @abstractmethod
    def replace_by_identifier(self, identifier: str, text: str) -> None: ...


class FileBuffer(TextBuffer):
    """Treats each note file as one block; the identifier is its absolute path.

    ``current`` is the file a command was pointed at, or None for commands
    that address blocks only by identifier (the refresh sweep).
    """

    def __init__(self, current: Path | None = None) -> None:
        self._current = current.expanduser().resolve() if current else None

    def get_current(self) -> Block | None:
        if self._current is None:
            return None
        return self.get_by_identifier(str(self._current))

    def get_by_identifier(self, identifier: str) -> Block | None:
        path = Path(identifier)
        if not path.is_file():
            return None
        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise NoteAccessError(f"Note is not valid UTF-8 ({exc.reason}): {path}") from exc
        except OSError as exc:
            raise NoteAccessError(f"Cannot read note ({exc.strerror or exc}): {path}") from exc
        return Block(identifier=str(path), content=content)

    def replace_by_identifier(self, identifier: str, text: str) -> None:
        try:
            Path(identifier).write_text(text, encoding="utf-8")
        except OSError as exc:
            raise NoteAccessError(f"Cannot write note ({exc.strerror or exc}): {identifier}") from exc
