"""
chatporter: port markdown documents and code into AI chat conversations.

Overview
--------
Reads markdown files (or a whole directory) and either

1) formats their combined text for a chat platform (``--platform``: raw, v0,
   chatgpt, claude, cursor) and prints it or writes it to ``--output``, or
2) creates a v0 chat preloaded with the files through the v0 Platform API
   (``--api --platform v0``, requires ``V0_API_KEY``).

GitHub repositories and zip archives can only be imported through the API.

Usage
-----
    chatporter upload README.md docs/guide.md --platform claude
    chatporter upload notes.md --api --platform v0 --name "Notes"
    chatporter repo https://github.com/user/repo --branch develop
    chatporter dir ./my-project --lock-files
    chatporter zip https://github.com/user/repo/archive/main.zip
"""

from __future__ import annotations

import argparse
import sys
import webbrowser
from pathlib import Path
from typing import TYPE_CHECKING

from chatporter import __version__
from chatporter.config import PLATFORM_URLS, IngestionMode, Platform
from chatporter.exceptions import ChatPorterError, NoValidFilesError, OutputWriteError, UnsupportedSourceError
from chatporter.file_manipulation import classify_source, read_markdown_files
from chatporter.logging import logger, setup_logging
from chatporter.output_construction import combine_files, format_document, frame_for_console
from chatporter.settings import ApiConfig, Settings
from chatporter.submission import SubmissionAdapter, SubmissionResult, SubmitOptions

if TYPE_CHECKING:
    from collections.abc import Sequence

PLATFORM_CHOICES = [p.value for p in Platform]


def _add_api_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--api-key", type=str, default=None, help="v0 API key (or set V0_API_KEY env var).")
    p.add_argument("--name", type=str, default=None, help="Chat name.")
    p.add_argument("--project-id", type=str, default=None, help="v0 Project ID (optional).")
    p.add_argument(
        "--lock-all-files",
        action="store_true",
        help="Lock all files from AI modification.",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with its ``upload``, ``repo``, ``dir`` and ``zip`` subcommands."""
    p = argparse.ArgumentParser(
        prog="chatporter",
        description="Port markdown documents into AI chat conversations.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--log-file", type=str, default="", help="Log file path.")
    sub = p.add_subparsers(dest="command")

    upload = sub.add_parser("upload", help="Upload markdown file(s), a directory, or a GitHub repository.")
    upload.add_argument("sources", nargs="+", help="File(s), directory, or GitHub repo URL to upload.")
    upload.add_argument(
        "-p",
        "--platform",
        type=str,
        default="raw",
        help=f"Target platform ({', '.join(PLATFORM_CHOICES)}).",
    )
    upload.add_argument("-o", "--output", type=Path, default=None, help="Save formatted output to file.")
    upload.add_argument(
        "--open",
        type=str,
        default=None,
        help="Open in browser (v0, chatgpt, claude, cursor).",
    )
    upload.add_argument(
        "--api",
        action="store_true",
        help="Use the v0 Platform API to create an actual chat (requires V0_API_KEY).",
    )
    _add_api_options(upload)
    upload.add_argument("--lock-files", action="store_true", help="Lock files from AI modification.")
    upload.add_argument("--branch", type=str, default="main", help="Git branch (for GitHub repo imports).")

    repo = sub.add_parser("repo", help="Import a GitHub repository to a v0 chat.")
    repo.add_argument("sources", nargs=1, metavar="repo_url", help="GitHub repository URL.")
    _add_api_options(repo)
    repo.add_argument("--branch", type=str, default="main", help="Git branch to import.")

    directory = sub.add_parser("dir", help="Import a local directory to a v0 chat.")
    directory.add_argument("sources", nargs=1, metavar="directory", help="Local directory path to import.")
    _add_api_options(directory)
    directory.add_argument("--lock-files", action="store_true", help="Lock files from AI modification.")

    archive = sub.add_parser("zip", help="Import a zip archive from a URL to a v0 chat.")
    archive.add_argument("sources", nargs=1, metavar="zip_url", help="URL to a zip archive.")
    _add_api_options(archive)

    for api_only in (repo, directory, archive):
        api_only.add_argument(
            "--no-open",
            dest="open_browser",
            action="store_false",
            help="Don't open the browser after creation.",
        )
    return p


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    args = build_parser().parse_args(argv)
    return Settings(**{k: v for k, v in vars(args).items() if v is not None})


def submit_options(settings: Settings) -> SubmitOptions:
    return SubmitOptions(
        name=settings.name,
        project_id=settings.project_id,
        lock_files=settings.lock_files,
        lock_all_files=settings.lock_all_files,
        branch=settings.branch,
    )


def open_url(url: str) -> None:
    """Open a URL in the default browser."""
    webbrowser.open(url)


def open_in_platform(platform: str) -> bool:
    """Open the home page of a chat platform.

    Args:
        platform (str): one of the keys of ``PLATFORM_URLS``

    Returns:
        bool: True if the platform is known and was opened
    """
    url = PLATFORM_URLS.get(platform.strip().lower())
    if url is None:
        logger.warning("Unknown platform: %s", platform)
        return False
    print(f"\nOpening {platform}...")
    open_url(url)
    print("Tip: Copy the formatted content above and paste it into the chat.")
    return True


def report_submission(result: SubmissionResult, *, open_browser: bool) -> int:
    """Print a submission outcome and open the created chat when asked to."""
    if not result.ok:
        print(f"Error creating v0 chat: {result.message}", file=sys.stderr)
        return 1
    print("Chat created successfully!")
    print(f"  Chat ID: {result.chat_id}")
    print(f"  Chat URL: {result.url}")
    if open_browser and result.url:
        open_url(result.url)
        print("\nOpened chat in browser")
    return 0


def wants_api(settings: Settings) -> bool:
    return settings.api and Platform.resolve(settings.platform) is Platform.V0


def run_upload(settings: Settings, adapter: SubmissionAdapter) -> int:
    """Route an ``upload`` invocation according to the classified source.

    Repositories and directories need API mode. For a list of markdown files the
    API is tried when requested, and a failed submission falls back to text output.

    Raises:
        UnsupportedSourceError: for a repository or directory without ``--api --platform v0``.
        NoValidFilesError: if no markdown file could be read.
        OutputWriteError: if ``--output`` cannot be written.
    """
    mode = classify_source(settings.sources)
    options = submit_options(settings)

    if mode is IngestionMode.REPO:
        if not wants_api(settings):
            raise UnsupportedSourceError(message="Repository imports require --api flag with --platform v0")
        return report_submission(adapter.submit_repo(settings.sources[0], options), open_browser=True)

    if mode is IngestionMode.DIR:
        if not wants_api(settings):
            raise UnsupportedSourceError(message="Directory imports require --api flag with --platform v0")
        result = adapter.submit_directory(Path(settings.sources[0]).resolve(), options)
        return report_submission(result, open_browser=True)

    print("ChatPorter: Reading files...\n")
    files = read_markdown_files(settings.sources)
    if not files:
        raise NoValidFilesError
    print(f"Found {len(files)} file(s):")
    for f in files:
        print(f"  - {f.name} ({f.size_kb:.2f} KB)")

    if wants_api(settings):
        result = adapter.submit_files(files, options)
        if result.ok:
            return report_submission(result, open_browser=settings.open_browser)
        print(f"Error creating v0 chat: {result.message}", file=sys.stderr)
        print("\nFalling back to text formatting...\n")

    formatted = format_document(settings.platform, combine_files(files))
    if settings.output:
        try:
            settings.output.write_text(formatted, encoding="utf-8")
        except OSError as e:
            raise OutputWriteError(path=settings.output, message=f"Cannot write {settings.output}: {e}") from e
        print(f"\nFormatted content written to: {settings.output}")
    else:
        print(frame_for_console(formatted))

    if settings.open:
        open_in_platform(settings.open)
    return 0


def run(settings: Settings, adapter: SubmissionAdapter | None = None) -> int:
    """Execute a parsed command.

    Args:
        settings (Settings): the parsed command line
        adapter (SubmissionAdapter | None): adapter to use; built from the environment when None

    Returns:
        int: the process exit code
    """
    if adapter is None:
        adapter = SubmissionAdapter(ApiConfig.from_env(api_key=settings.api_key))
    options = submit_options(settings)

    if settings.command == "upload":
        return run_upload(settings, adapter)
    if settings.command == "repo":
        result = adapter.submit_repo(settings.sources[0], options)
    elif settings.command == "dir":
        result = adapter.submit_directory(Path(settings.sources[0]).resolve(), options)
    else:
        result = adapter.submit_zip(settings.sources[0], options)
    return report_submission(result, open_browser=settings.open_browser)


def main(argv: Sequence[str] | None = None, adapter: SubmissionAdapter | None = None) -> int:
    settings = parse_args(argv)
    if settings.log_file:
        setup_logging(settings.log_file)
    if not settings.command:
        build_parser().print_help()
        return 2

    try:
        return run(settings, adapter)
    except ChatPorterError as e:
        logger.error("%s failed: %s", settings.command, e)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
