from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ChatPorterError(Exception):
    """Base exception for errors in the chatporter package."""

    def __str__(self) -> str:
        return str(getattr(self, "message", "") or self.__class__.__doc__)


@dataclass(frozen=True)
class MissingApiKeyError(ChatPorterError):
    """Raised when no API credential is available for a remote submission."""

    message: str = (
        "V0_API_KEY not found. Set it in your environment or use --api-key option.\n"
        "Get your API key from: https://v0.app/settings/api"
    )


@dataclass(frozen=True)
class NoValidFilesError(ChatPorterError):
    """Raised when none of the given paths is a readable markdown file."""

    message: str = "No valid markdown files found."


@dataclass(frozen=True)
class EmptyDirectoryError(ChatPorterError):
    """Raised when a directory import collects no files."""

    folder: Path
    message: str = "No files found in directory"


@dataclass(frozen=True)
class UnsupportedSourceError(ChatPorterError):
    """Raised when a source kind is used without the API mode it requires."""

    message: str


@dataclass(frozen=True)
class ClientUnavailableError(ChatPorterError):
    """Raised when the optional chat client library cannot be imported."""

    module: str
    message: str = "Chat client library is not installed."


@dataclass(frozen=True)
class SubmissionError(ChatPorterError):
    """Raised when the chat API rejects a request or cannot be reached."""

    message: str
    status_code: int | None = None


@dataclass(frozen=True)
class OutputWriteError(ChatPorterError):
    """Raised when the formatted output cannot be written to the requested file."""

    path: Path
    message: str
