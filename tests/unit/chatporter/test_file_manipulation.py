from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from chatporter import file_manipulation
from chatporter.config import IngestionMode
from chatporter.file_manipulation import (
    classify_source,
    is_github_url,
    is_ignored,
    read_markdown_files,
    relpath,
    walk_directory,
)

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.mark.unit
@pytest.mark.parametrize(
    "url",
    [
        "https://github.com/user/repo",
        "http://www.github.com/some-org/some.repo/tree/main",
    ],
)
def test_is_github_url_accepts_repository_urls(url: str) -> None:
    assert is_github_url(url)


@pytest.mark.unit
@pytest.mark.parametrize("url", ["https://github.com/user", "https://gitlab.com/user/repo", "github.com/user/repo"])
def test_is_github_url_rejects_other_strings(url: str) -> None:
    assert not is_github_url(url)


@pytest.mark.unit
def test_classify_source_prefers_repo_url_over_filesystem(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # a local directory whose relative path happens to spell the URL must not win
    monkeypatch.chdir(tmp_path)
    (tmp_path / "https:" / "github.com" / "user" / "repo").mkdir(parents=True)

    assert classify_source(["https://github.com/user/repo"]) is IngestionMode.REPO


@pytest.mark.unit
def test_classify_source_directory_and_files(tmp_path: Path) -> None:
    doc = _write(tmp_path / "a.md", "Hello")

    assert classify_source([str(tmp_path)]) is IngestionMode.DIR
    assert classify_source([str(doc)]) is IngestionMode.FILES
    assert classify_source([str(tmp_path), str(doc)]) is IngestionMode.FILES
    assert classify_source([str(tmp_path / "missing")]) is IngestionMode.FILES
    assert classify_source([]) is IngestionMode.FILES


@pytest.mark.unit
def test_classify_source_never_infers_zip() -> None:
    assert classify_source(["https://example.com/archive/main.zip"]) is IngestionMode.FILES


@pytest.mark.unit
@pytest.mark.parametrize(
    ("rel", "expected"),
    [
        ("node_modules", True),
        ("src/node_modules/pkg/index.js", True),
        (".git/HEAD", True),
        ("app/.env.local", True),
        ("logs/server.log", True),
        ("src/x.js", False),
        ("src/distance.js", False),
        ("blog.md", False),
        ("rebuild/notes.md", False),
        ("", False),
    ],
)
def test_is_ignored(rel: str, *, expected: bool) -> None:
    assert is_ignored(rel) is expected


@pytest.mark.unit
def test_walk_directory_skips_ignored_entries(tmp_path: Path) -> None:
    _write(tmp_path / "src" / "x.js", "console.log(1)")
    _write(tmp_path / "node_modules" / "y.js", "y")
    _write(tmp_path / ".git" / "HEAD", "ref: refs/heads/main")

    names = [f.name for f in walk_directory(tmp_path)]

    assert names == ["src/x.js"]


@pytest.mark.unit
def test_walk_directory_records_relative_names_and_sizes(tmp_path: Path) -> None:
    _write(tmp_path / "docs" / "guide" / "intro.md", "héllo")
    _write(tmp_path / "debug.log", "noise")

    files = list(walk_directory(tmp_path))

    assert len(files) == 1
    assert files[0].name == "docs/guide/intro.md"
    assert files[0].content == "héllo"
    assert files[0].size == len("héllo".encode())


@pytest.mark.unit
def test_walk_directory_is_lazy(tmp_path: Path) -> None:
    _write(tmp_path / "a.txt", "a")

    gen = walk_directory(tmp_path)

    assert next(gen).name == "a.txt"
    with pytest.raises(StopIteration):
        next(gen)


@pytest.mark.unit
def test_walk_directory_skips_binary_files(tmp_path: Path) -> None:
    (tmp_path / "image.png").write_bytes(b"\x89PNG\r\n\x1a\n\xff\xfe\x00")
    _write(tmp_path / "readme.md", "text")

    names = [f.name for f in walk_directory(tmp_path)]

    assert names == ["readme.md"]


@pytest.mark.unit
def test_walk_directory_unreadable_subdirectory_does_not_stop_siblings(
    tmp_path: Path,
    mocker: MockerFixture,
) -> None:
    _write(tmp_path / "locked" / "secret.md", "secret")
    _write(tmp_path / "open" / "public.md", "public")
    real_scandir = os.scandir

    def scandir(path: str | os.PathLike[str]) -> object:
        if Path(path).name == "locked":
            msg = "denied"
            raise PermissionError(msg)
        return real_scandir(path)

    mocker.patch.object(file_manipulation.os, "scandir", side_effect=scandir)

    names = [f.name for f in walk_directory(tmp_path)]

    assert names == ["open/public.md"]


@pytest.mark.unit
def test_walk_directory_missing_root_yields_nothing(tmp_path: Path) -> None:
    assert list(walk_directory(tmp_path / "missing")) == []


@pytest.mark.unit
def test_read_markdown_files_skips_invalid_entries(tmp_path: Path) -> None:
    a = _write(tmp_path / "a.md", "Hello")
    b = _write(tmp_path / "B.MD", "World")
    txt = _write(tmp_path / "notes.txt", "ignored")

    files = read_markdown_files([str(b), str(txt), str(tmp_path), str(tmp_path / "gone.md"), str(a)])

    assert [f.name for f in files] == ["B.MD", "a.md"]
    assert files[1].content == "Hello"
    assert files[1].size == a.stat().st_size
    assert files[1].path == a.resolve()


@pytest.mark.unit
def test_read_markdown_files_skips_undecodable_file(tmp_path: Path) -> None:
    (tmp_path / "bad.md").write_bytes(b"\xff\xfe")
    good = _write(tmp_path / "good.md", "fine")

    files = read_markdown_files([str(tmp_path / "bad.md"), str(good)])

    assert [f.name for f in files] == ["good.md"]


@pytest.mark.unit
def test_relpath_outside_root_returns_original(tmp_path: Path) -> None:
    other = Path("/elsewhere/file.md")

    assert relpath(tmp_path / "sub" / "f.md", tmp_path) == "sub/f.md"
    assert relpath(other, tmp_path) == str(other)
