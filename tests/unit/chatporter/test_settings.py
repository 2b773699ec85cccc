from __future__ import annotations

from pathlib import Path

import pytest
from dotenv import find_dotenv

from chatporter import settings as settings_module
from chatporter.config import Platform
from chatporter.settings import DEFAULT_API_URL, ApiConfig, Settings


@pytest.mark.unit
def test_settings_defaults() -> None:
    settings = Settings()

    assert settings.command == ""
    assert settings.platform == "raw"
    assert settings.output is None
    assert settings.api is False
    assert settings.open_browser is True


@pytest.mark.unit
def test_api_config_reads_environment() -> None:
    config = ApiConfig.from_env(environ={"V0_API_KEY": "env-key", "V0_API_URL": "https://api.test/init"})

    assert config.api_key is not None
    assert config.api_key.get_secret_value() == "env-key"
    assert config.api_url == "https://api.test/init"


@pytest.mark.unit
def test_api_config_flag_overrides_environment() -> None:
    config = ApiConfig.from_env(api_key="flag-key", environ={"V0_API_KEY": "env-key"})

    assert config.api_key is not None
    assert config.api_key.get_secret_value() == "flag-key"
    assert config.api_url == DEFAULT_API_URL


@pytest.mark.unit
def test_api_config_without_key() -> None:
    config = ApiConfig.from_env(environ={})

    assert config.api_key is None
    assert "env-key" not in repr(ApiConfig.from_env(environ={"V0_API_KEY": "env-key"}))


@pytest.mark.unit
def test_chat_url() -> None:
    config = ApiConfig(chat_base_url="https://v0.dev/chat/")

    assert config.chat_url("abc") == "https://v0.dev/chat/abc"


@pytest.mark.unit
@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("claude", Platform.CLAUDE),
        (" ChatGPT ", Platform.CHATGPT),
        ("v0-text", Platform.V0),
        ("v0", Platform.V0),
        ("nope", Platform.RAW),
        (None, Platform.RAW),
        (Platform.CURSOR, Platform.CURSOR),
    ],
)
def test_platform_resolve(value: str | Platform | None, expected: Platform) -> None:
    assert Platform.resolve(value) is expected


@pytest.mark.unit
def test_api_config_process_environment_beats_dotenv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("V0_API_KEY=dotenv-key\nV0_API_URL=https://dotenv.test/init\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(settings_module, "ENV_FILE", find_dotenv(usecwd=True))
    monkeypatch.setenv("V0_API_KEY", "process-key")
    monkeypatch.delenv("V0_API_URL", raising=False)

    config = ApiConfig.from_env()

    assert config.api_key is not None
    assert config.api_key.get_secret_value() == "process-key"
    assert config.api_url == "https://dotenv.test/init"
