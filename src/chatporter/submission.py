"""Create remote chats through the v0 Platform API.

Two interchangeable clients implement ``init_chat``: `SdkChatClient` drives an
optional client library when it is installed, and `HttpChatClient` posts the same
JSON payload directly. `SubmissionAdapter` tries the former and falls back to the
latter once.
"""

from __future__ import annotations

import importlib
import json
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal, Protocol

import httpx
from pydantic import BaseModel, ConfigDict, Field

from chatporter.config import IngestionMode
from chatporter.exceptions import (
    ClientUnavailableError,
    EmptyDirectoryError,
    MissingApiKeyError,
    SubmissionError,
)
from chatporter.file_manipulation import walk_directory
from chatporter.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from chatporter.config import SourceFile
    from chatporter.settings import ApiConfig

UPLOAD_PREFIX = "docs/"
NAME_PREFIX = "ChatPorter"


class ChatFile(BaseModel):
    """A file entry of a ``files`` chat init request."""

    model_config = ConfigDict(frozen=True)

    name: str
    content: str
    locked: bool = False


class RepoRef(BaseModel):
    """Repository reference of a ``repo`` chat init request."""

    model_config = ConfigDict(frozen=True)

    url: str
    branch: str | None = None


class ZipRef(BaseModel):
    """Archive reference of a ``zip`` chat init request."""

    model_config = ConfigDict(frozen=True)

    url: str


class ChatInitRequest(BaseModel):
    """Body of a chat init call; exactly one of files, repo or zip is set."""

    model_config = ConfigDict(frozen=True)

    type: Literal["files", "repo", "zip"]
    files: list[ChatFile] | None = None
    repo: RepoRef | None = None
    zip: ZipRef | None = None
    name: str
    project_id: str | None = Field(default=None, serialization_alias="projectId")
    lock_all_files: bool = Field(default=False, serialization_alias="lockAllFiles")

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON body expected by the API."""
        return self.model_dump(by_alias=True, exclude_none=True)


class SubmitOptions(BaseModel):
    """User options shared by every submission."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    project_id: str | None = None
    lock_files: bool = False
    lock_all_files: bool = False
    branch: str | None = None


class SubmissionResult(BaseModel):
    """Outcome of a submission: a chat id and URL, or a failure message."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    mode: IngestionMode
    chat_id: str | None = None
    url: str | None = None
    message: str = ""


class ChatClient(Protocol):
    """Anything able to create a chat from an init request."""

    def init_chat(self, request: ChatInitRequest) -> Mapping[str, Any]: ...


def _as_mapping(chat: Any) -> dict[str, Any]:  # noqa: ANN401
    if isinstance(chat, Mapping):
        return dict(chat)
    if hasattr(chat, "model_dump"):
        return dict(chat.model_dump())
    return {"id": getattr(chat, "id", None)}


def error_message(response: httpx.Response) -> str:
    """Extract a readable error from a failed response.

    Uses the ``message`` field of a JSON body, else the raw body, else the reason phrase.

    Args:
        response (httpx.Response): the non-2xx response

    Returns:
        str: the message to show to the user
    """
    text = response.text
    try:
        data = json.loads(text)
    except ValueError:
        return text or response.reason_phrase
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return response.reason_phrase


class SdkChatClient:
    """Create chats through the optional client library named by ``ApiConfig.sdk_module``."""

    def __init__(self, config: ApiConfig) -> None:
        self.config = config

    def _load(self) -> Any:  # noqa: ANN401
        try:
            return importlib.import_module(self.config.sdk_module)
        except ImportError as e:
            raise ClientUnavailableError(module=self.config.sdk_module) from e

    def init_chat(self, request: ChatInitRequest) -> Mapping[str, Any]:
        sdk = self._load()
        api_key = self.config.api_key.get_secret_value() if self.config.api_key else None
        client = sdk.create_client(api_key=api_key)
        return _as_mapping(client.chats.init(**request.to_payload()))


class HttpChatClient:
    """Create chats with a direct JSON POST to ``ApiConfig.api_url``."""

    def __init__(self, config: ApiConfig, transport: httpx.BaseTransport | None = None) -> None:
        self.config = config
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        api_key = self.config.api_key.get_secret_value() if self.config.api_key else ""
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def init_chat(self, request: ChatInitRequest) -> Mapping[str, Any]:
        """POST the request and return the decoded chat.

        Raises:
            SubmissionError: on transport errors, non-2xx responses or a non-JSON body.
        """
        try:
            with httpx.Client(timeout=self.config.timeout, transport=self.transport) as client:
                resp = client.post(
                    self.config.api_url,
                    json=request.to_payload(),
                    headers=self._headers(),
                )
        except httpx.HTTPError as e:
            raise SubmissionError(message=f"Request to {self.config.api_url} failed: {e}") from e

        if not resp.is_success:
            raise SubmissionError(
                message=f"API Error: {resp.status_code} - {error_message(resp)}",
                status_code=resp.status_code,
            )
        try:
            data = resp.json()
        except ValueError as e:
            raise SubmissionError(message="API returned a non-JSON response", status_code=resp.status_code) from e
        return _as_mapping(data)


class SubmissionAdapter:
    """Submit files, repositories or archives and report a `SubmissionResult`.

    Args:
        config (ApiConfig): credentials and endpoints
        primary (ChatClient | None): first client to try; defaults to `SdkChatClient`
        fallback (ChatClient | None): client used when the primary fails; defaults to `HttpChatClient`
    """

    def __init__(
        self,
        config: ApiConfig,
        primary: ChatClient | None = None,
        fallback: ChatClient | None = None,
    ) -> None:
        self.config = config
        self.primary = primary if primary is not None else SdkChatClient(config)
        self.fallback = fallback if fallback is not None else HttpChatClient(config)

    def _require_key(self) -> None:
        if self.config.api_key is None or not self.config.api_key.get_secret_value():
            raise MissingApiKeyError

    def submit_files(
        self,
        files: Sequence[SourceFile],
        options: SubmitOptions | None = None,
        *,
        mode: IngestionMode = IngestionMode.FILES,
    ) -> SubmissionResult:
        """Create a chat preloaded with the given files, each uploaded under ``docs/``."""
        self._require_key()
        opts = options or SubmitOptions()
        request = ChatInitRequest(
            type="files",
            files=[
                ChatFile(name=f"{UPLOAD_PREFIX}{f.name}", content=f.content, locked=opts.lock_files)
                for f in files
            ],
            name=opts.name or f"{NAME_PREFIX}: {len(files)} file(s)",
            project_id=opts.project_id,
            lock_all_files=opts.lock_all_files,
        )
        logger.info("Creating chat from %d file(s)", len(files))
        return self.submit(request, mode)

    def submit_directory(self, root: Path, options: SubmitOptions | None = None) -> SubmissionResult:
        """Collect a directory and submit its files.

        Raises:
            EmptyDirectoryError: if nothing was collected.
        """
        self._require_key()
        opts = options or SubmitOptions()
        logger.info("Reading directory %s", root)
        files = list(walk_directory(root))
        if not files:
            raise EmptyDirectoryError(folder=root)
        logger.info("Found %d file(s) in directory", len(files))
        named = opts.model_copy(update={"name": opts.name or f"{NAME_PREFIX}: {Path(root).name}"})
        return self.submit_files(files, named, mode=IngestionMode.DIR)

    def submit_repo(self, url: str, options: SubmitOptions | None = None) -> SubmissionResult:
        """Create a chat from a repository URL."""
        self._require_key()
        opts = options or SubmitOptions()
        request = ChatInitRequest(
            type="repo",
            repo=RepoRef(url=url, branch=opts.branch or None),
            name=opts.name or f"{NAME_PREFIX}: {url.rstrip('/').rsplit('/', 1)[-1]}",
            project_id=opts.project_id,
            lock_all_files=opts.lock_all_files,
        )
        logger.info("Creating chat from repository %s", url)
        return self.submit(request, IngestionMode.REPO)

    def submit_zip(self, url: str, options: SubmitOptions | None = None) -> SubmissionResult:
        """Create a chat from a zip archive URL."""
        self._require_key()
        opts = options or SubmitOptions()
        request = ChatInitRequest(
            type="zip",
            zip=ZipRef(url=url),
            name=opts.name or f"{NAME_PREFIX}: Zip Archive",
            project_id=opts.project_id,
            lock_all_files=opts.lock_all_files,
        )
        logger.info("Creating chat from zip archive %s", url)
        return self.submit(request, IngestionMode.ZIP)

    def init_with_fallback(self, request: ChatInitRequest) -> Mapping[str, Any]:
        """Try the primary client once, then the fallback client once.

        A missing client library falls back quietly; any other primary failure is
        logged as a warning first. Fallback errors propagate.
        """
        try:
            return self.primary.init_chat(request)
        except ClientUnavailableError as e:
            logger.debug("%s not found, using direct API calls", e.module)
        except Exception as e:  # noqa: BLE001
            logger.warning("Client library error, falling back to direct API: %s", e)
        return self.fallback.init_chat(request)

    def submit(self, request: ChatInitRequest, mode: IngestionMode) -> SubmissionResult:
        """Send a prepared request and turn the outcome into a `SubmissionResult`."""
        self._require_key()
        try:
            chat = self.init_with_fallback(request)
        except SubmissionError as e:
            logger.error("Error creating chat: %s", e)
            return SubmissionResult(ok=False, mode=mode, message=str(e))

        chat_id = chat.get("id")
        if not chat_id:
            return SubmissionResult(ok=False, mode=mode, message="API response did not contain a chat id")
        chat_id = str(chat_id)
        logger.info("Chat created: %s", chat_id)
        return SubmissionResult(
            ok=True,
            mode=mode,
            chat_id=chat_id,
            url=self.config.chat_url(chat_id),
            message="Chat created successfully!",
        )
