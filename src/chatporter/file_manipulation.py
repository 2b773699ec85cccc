from __future__ import annotations

import os
import re
import stat
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from chatporter.config import (
    GITHUB_URL_PATTERN,
    IGNORED_NAMES,
    IGNORED_SUFFIXES,
    MARKDOWN_SUFFIX,
    IngestionMode,
    SourceFile,
)
from chatporter.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

_GITHUB_URL_RE = re.compile(GITHUB_URL_PATTERN)


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            If path is not under root, returns the original path as a string.
    """
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def is_regular_file(path: Path) -> bool:
    """Check if a file is regular.

    Args:
        path (Path): path to test.

    Returns:
        bool: True if the file is regular, False otherwise.
    """
    try:
        st = path.stat()
        return stat.S_ISREG(st.st_mode)
    except OSError:
        return False


def is_github_url(value: str) -> bool:
    """Check whether a string looks like a GitHub repository URL."""
    return _GITHUB_URL_RE.match(value) is not None


def is_directory(value: str | Path) -> bool:
    """Check whether a path names an existing directory, swallowing stat errors."""
    try:
        return Path(value).is_dir()
    except OSError:
        return False


def classify_source(sources: Sequence[str]) -> IngestionMode:
    """Decide which ingestion mode applies to the positional source arguments.

    A single GitHub URL is a repository import whatever the filesystem holds; a
    single existing directory is a directory import; anything else is treated as
    a list of markdown files. Archive imports are never inferred.

    Args:
        sources (Sequence[str]): the paths or URLs given by the user

    Returns:
        IngestionMode: the mode to use for this invocation
    """
    if len(sources) == 1:
        source = sources[0]
        if is_github_url(source):
            return IngestionMode.REPO
        if is_directory(source):
            return IngestionMode.DIR
    return IngestionMode.FILES


def is_ignored(rel: str | PurePosixPath) -> bool:
    """Check a relative POSIX path against the fixed ignore set.

    A path is ignored when any of its segments is one of ``IGNORED_NAMES``, or
    when its last segment ends with one of ``IGNORED_SUFFIXES``.

    Args:
        rel (str | PurePosixPath): path relative to the walked root

    Returns:
        bool: True if the path must be skipped
    """
    parts = PurePosixPath(rel).parts
    if not parts:
        return False
    if any(part in IGNORED_NAMES for part in parts):
        return True
    return parts[-1].endswith(IGNORED_SUFFIXES)


def read_source_file(path: Path, name: str) -> SourceFile:
    """Read a file as UTF-8 text.

    Raises:
        OSError: if the file cannot be read.
        UnicodeDecodeError: if the content is not valid UTF-8.
    """
    content = path.read_text(encoding="utf-8")
    return SourceFile(name=name, content=content, size=len(content.encode("utf-8")), path=path)


def walk_directory(root: Path, _base: Path | None = None) -> Iterator[SourceFile]:
    """Yield every readable text file under `root`, depth first.

    Entries are visited in the order the filesystem lists them. Ignored entries
    (see `is_ignored`) are skipped and ignored directories are not descended into.
    Unreadable or non UTF-8 files are skipped with a warning; a directory that
    cannot be listed is logged and contributes nothing.

    Args:
        root (Path): the directory to walk
        _base (Path | None): the top-level root that names are made relative to

    Yields:
        Iterator[SourceFile]: one record per collected file, named by its POSIX relative path
    """
    base = root if _base is None else _base
    try:
        with os.scandir(root) as it:
            entries = list(it)
    except OSError as e:
        logger.error("Error reading directory %s: %s", root, e)
        return

    for entry in entries:
        full = Path(entry.path)
        rel = relpath(full, base)
        if is_ignored(rel):
            continue
        try:
            is_dir = entry.is_dir(follow_symlinks=True)
            is_file = entry.is_file(follow_symlinks=True)
        except OSError as e:
            logger.warning("Skipping %s: %s", rel, e)
            continue
        if is_dir:
            yield from walk_directory(full, base)
        elif is_file:
            try:
                yield read_source_file(full, rel)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping %s: %s", rel, e)


def read_markdown_files(paths: Sequence[str | Path]) -> list[SourceFile]:
    """Read an explicit list of markdown files, keeping the input order.

    Entries that are not regular files or do not carry a ``.md`` suffix are skipped
    with a warning. Files that fail to read are logged and skipped.

    Args:
        paths (Sequence[str | Path]): the user supplied file paths

    Returns:
        list[SourceFile]: records named by base name, sized by their on-disk size
    """
    files: list[SourceFile] = []
    for raw in paths:
        full = Path(raw).resolve()
        if not is_regular_file(full):
            logger.warning("Skipping %s: not a file", raw)
            continue
        if full.suffix.lower() != MARKDOWN_SUFFIX:
            logger.warning("Skipping %s: not a markdown file", raw)
            continue
        try:
            content = full.read_text(encoding="utf-8")
            size = full.stat().st_size
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Error reading %s: %s", raw, e)
            continue
        files.append(SourceFile(name=full.name, content=content, size=size, path=full))
    return files
