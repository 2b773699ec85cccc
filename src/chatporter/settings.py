from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr

if TYPE_CHECKING:
    from collections.abc import Mapping

ENV_FILE = find_dotenv(usecwd=True)

DEFAULT_API_URL = "https://api.v0.dev/v1/chats/init"
DEFAULT_CHAT_BASE_URL = "https://v0.dev/chat"
DEFAULT_SDK_MODULE = "v0_sdk"


class Settings(BaseModel):
    """Command line options for the chatporter CLI."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    command: str = Field(default="", description="Subcommand: upload, repo, dir or zip.")
    sources: list[str] = Field(default_factory=list, description="Paths or URLs to import.")
    platform: str = Field(default="raw", description="Target platform.")
    output: Path | None = Field(default=None, description="Save formatted output to file.")
    open: str | None = Field(default=None, description="Platform to open in the browser.")
    api: bool = Field(default=False, description="Create a chat through the API.")
    api_key: str | None = Field(default=None, description="API key override.")
    name: str | None = Field(default=None, description="Chat name.")
    project_id: str | None = Field(default=None, description="Project id.")
    lock_files: bool = Field(default=False, description="Lock uploaded files.")
    lock_all_files: bool = Field(default=False, description="Lock all files.")
    branch: str | None = Field(default=None, description="Git branch for repository imports.")
    open_browser: bool = Field(default=True, description="Open the created chat.")
    log_file: str = Field(default="", description="Log file path.")


class ApiConfig(BaseModel):
    """Connection settings for the chat API, resolved once and passed explicitly."""

    model_config = ConfigDict(frozen=True)

    api_key: SecretStr | None = Field(default=None, description="Bearer token.")
    api_url: str = Field(default=DEFAULT_API_URL, description="Chat init endpoint.")
    chat_base_url: str = Field(default=DEFAULT_CHAT_BASE_URL, description="Browser chat URL prefix.")
    sdk_module: str = Field(default=DEFAULT_SDK_MODULE, description="Optional client library module.")
    timeout: float = Field(default=60.0, gt=0, description="HTTP timeout in seconds.")

    @classmethod
    def from_env(
        cls,
        api_key: str | None = None,
        environ: Mapping[str, str | None] | None = None,
    ) -> ApiConfig:
        """Build the configuration from the environment and an optional flag override.

        Values from the process environment take precedence over the ``.env`` file,
        and an explicit ``api_key`` takes precedence over both.

        Args:
            api_key: key given on the command line, if any.
            environ: environment mapping; defaults to ``.env`` values merged with ``os.environ``.

        Returns:
            ApiConfig: the resolved configuration.
        """
        if environ is None:
            environ = {**dotenv_values(ENV_FILE), **os.environ} if ENV_FILE else dict(os.environ)
        key = api_key or environ.get("V0_API_KEY") or None
        return cls(
            api_key=SecretStr(key) if key else None,
            api_url=environ.get("V0_API_URL") or DEFAULT_API_URL,
        )

    def chat_url(self, chat_id: str) -> str:
        """Browser URL of a created chat."""
        return f"{self.chat_base_url.rstrip('/')}/{chat_id}"
