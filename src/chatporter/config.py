from __future__ import annotations

from enum import StrEnum, auto
from functools import wraps
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

if TYPE_CHECKING:
    from collections.abc import Callable

    FormatterFn = Callable[["CombinedDocument"], str]

_ = Path()


class Platform(StrEnum):
    """Target chat platforms a combined document can be formatted for."""

    RAW = auto()
    CHATGPT = auto()
    CLAUDE = auto()
    CURSOR = auto()
    V0 = auto()

    @classmethod
    def resolve(cls, value: str | Platform | None) -> Platform:
        """Map a user-supplied platform name to a member, defaulting to raw.

        Args:
            value: platform name such as ``"claude"`` or ``"v0-text"``; None or
                unknown names select ``Platform.RAW``.

        Returns:
            Platform: the matching platform.
        """
        if isinstance(value, Platform):
            return value
        name = (value or "").strip().lower()
        name = PLATFORM_ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            return cls.RAW


PLATFORM_ALIASES: dict[str, str] = {
    "v0-text": "v0",
    "v0-api": "v0",
}


class IngestionMode(StrEnum):
    """Kind of source imported by a single invocation."""

    REPO = auto()
    DIR = auto()
    ZIP = auto()
    FILES = auto()


IGNORED_NAMES: frozenset[str] = frozenset(
    {
        "node_modules",
        ".git",
        ".next",
        ".vercel",
        "dist",
        "build",
        ".DS_Store",
        ".env",
        ".env.local",
        "coverage",
        ".nyc_output",
    },
)

IGNORED_SUFFIXES: tuple[str, ...] = (".log",)

MARKDOWN_SUFFIX = ".md"

GITHUB_URL_PATTERN = r"^https?://(www\.)?github\.com/[\w\-.]+/[\w\-.]+"

PLATFORM_URLS: dict[str, str] = {
    "v0": "https://v0.dev/chat",
    "chatgpt": "https://chat.openai.com",
    "claude": "https://claude.ai",
    "cursor": "cursor://",
}

FORMATTERS: dict[Platform, Callable[[CombinedDocument], str]] = {}


class SourceFile(BaseModel):
    """A file read from disk, ready to be combined or uploaded.

    Attributes:
        name: Relative path (directory imports) or base name (file lists).
        content: Decoded UTF-8 text of the file.
        size: Size in bytes.
        path: Absolute path on disk, when the file came from disk.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Name unique within a batch")
    content: str = Field(..., description="Raw file text")
    size: int = Field(..., ge=0, description="Size in bytes")
    path: Path | None = Field(default=None, description="Absolute file path")

    @computed_field
    @property
    def size_kb(self) -> float:
        """Size in kibibytes, rounded for display."""
        return round(self.size / 1024, 2)


class CombinedDocument(BaseModel):
    """Several source files merged into one text, with the ordered file names."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(default="", description="Combined text")
    file_list: list[str] = Field(default_factory=list, description="Ordered file names")

    @computed_field
    @property
    def file_count(self) -> int:
        """Number of files merged into the document."""
        return len(self.file_list)


class FormatRequest(BaseModel):
    """A document and the platform it should be rendered for."""

    model_config = ConfigDict(frozen=True)

    document: CombinedDocument
    platform: Platform = Platform.RAW


def register_formatter(
    platform: Platform,
) -> Callable[[FormatterFn], FormatterFn]:
    """Decorator to register the formatting function of a platform.

    Args:
        platform (Platform): the platform the decorated function renders for.

    Returns:
        Callable[[FormatterFn], FormatterFn]: A decorator that registers the given function
        in the FORMATTERS mapping under the platform and returns the original function.
    """

    def decorator(func: FormatterFn) -> FormatterFn:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
            return func(*args, **kwargs)

        FORMATTERS[platform] = wrapper
        return wrapper

    return decorator
