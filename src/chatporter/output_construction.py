from __future__ import annotations

import io
from typing import TYPE_CHECKING

from chatporter.config import FORMATTERS, CombinedDocument, FormatRequest, Platform, register_formatter

if TYPE_CHECKING:
    from collections.abc import Sequence

    from chatporter.config import SourceFile

FILE_SEPARATOR = "\n\n---\n\n"
BANNER = "=" * 60


def combine_files(files: Sequence[SourceFile]) -> CombinedDocument:
    """Merge source files into a single document.

    A single file is passed through verbatim. Several files each get a ``# <name>``
    heading and are joined with a horizontal rule, in input order.

    Args:
        files (Sequence[SourceFile]): the files to merge

    Returns:
        CombinedDocument: the combined text and the ordered file names
    """
    names = [f.name for f in files]
    if len(files) == 1:
        return CombinedDocument(text=files[0].content, file_list=names)
    text = FILE_SEPARATOR.join(f"# {f.name}\n\n{f.content}" for f in files)
    return CombinedDocument(text=text, file_list=names)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count > 1 else ''}"


@register_formatter(Platform.RAW)
def format_raw(document: CombinedDocument) -> str:
    """Return the combined text unchanged."""
    return document.text


@register_formatter(Platform.V0)
def format_v0(document: CombinedDocument) -> str:
    """Wrap the document for v0: a heading and, for several files, a numbered file list."""
    out = io.StringIO()
    out.write("# Context Upload\n\n")
    if document.file_count > 1:
        out.write("## Files Included\n\n")
        for idx, name in enumerate(document.file_list, start=1):
            out.write(f"{idx}. `{name}`\n")
        out.write("\n---\n\n")
    out.write(document.text)
    return out.getvalue()


@register_formatter(Platform.CHATGPT)
def format_chatgpt(document: CombinedDocument) -> str:
    """Introduce the documents in a sentence followed by one heading per document."""
    out = io.StringIO()
    out.write(f"I'm sharing {_plural(document.file_count, 'document')} for context:\n\n")
    for idx, name in enumerate(document.file_list, start=1):
        out.write(f"## Document {idx}: {name}\n\n")
    out.write(f"\n---\n\n{document.text}")
    return out.getvalue()


@register_formatter(Platform.CLAUDE)
def format_claude(document: CombinedDocument) -> str:
    """List the documents inside a ``<documents>`` block, then append the text.

    The per-file ``<document>`` tags are left open; the combined text follows the
    closing ``</documents>`` tag.
    """
    out = io.StringIO()
    out.write("<documents>\n")
    for name in document.file_list:
        out.write(f'<document name="{name}">\n')
    out.write(f"</documents>\n\n{document.text}")
    return out.getvalue()


@register_formatter(Platform.CURSOR)
def format_cursor(document: CombinedDocument) -> str:
    """Prefix the text with a comment banner giving the file count."""
    return f"// Context from {_plural(document.file_count, 'file')}\n\n{document.text}"


def format_document(platform: Platform | str | None, document: CombinedDocument) -> str:
    """Render a combined document for a target platform.

    Args:
        platform (Platform | str | None): the target platform; unknown names render raw
        document (CombinedDocument): the document to render

    Returns:
        str: the platform specific text
    """
    formatter = FORMATTERS.get(Platform.resolve(platform), format_raw)
    return formatter(document)


def render(request: FormatRequest) -> str:
    """Render a format request."""
    return format_document(request.platform, request.document)


def frame_for_console(text: str) -> str:
    """Surround formatted output with the banner used when printing to stdout."""
    return f"\n{BANNER}\nFormatted Content:\n\n{text}\n\n{BANNER}"
