import json
import logging
from pathlib import Path

import pytest

from coinbase_client.exchanges.base_client import COINBASE_SANDBOX_API_URL
from coinbase_client.exchanges.private_client import PrivateClient
from coinbase_client.exchanges.public_client import PublicClient
from coinbase_client.utils.config_loader import (
    ClientSettings,
    ConfigLoader,
    build_private_client,
    build_public_client,
)


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_settings_are_read_from_yaml(tmp_path):
    _write(
        tmp_path / "config" / "settings.yaml",
        "client:\n"
        "  sandbox: false\n"
        "  api_url: https://api.example.test\n"
        "  user_agent: desk-bot/1.0\n"
        "logging:\n"
        "  level: debug\n",
    )
    settings = ConfigLoader(base_path=tmp_path).load_settings()
    assert settings.sandbox is False
    assert settings.base_url == "https://api.example.test"
    assert settings.user_agent == "desk-bot/1.0"
    assert settings.log_level == "debug"
    assert settings.log_file is None


def test_settings_fall_back_to_example_file(tmp_path):
    _write(tmp_path / "config" / "settings.example.yaml", "logging:\n  level: WARNING\n")
    settings = ConfigLoader(base_path=tmp_path).load_settings()
    assert settings.sandbox is True
    assert settings.base_url == COINBASE_SANDBOX_API_URL
    assert settings.log_level == "WARNING"


def test_empty_settings_file_uses_defaults(tmp_path):
    _write(tmp_path / "config" / "settings.yaml", "")
    assert ConfigLoader(base_path=tmp_path).load_settings() == ClientSettings()


def test_missing_config_lists_searched_paths(tmp_path):
    with pytest.raises(FileNotFoundError) as excinfo:
        ConfigLoader(base_path=tmp_path).load_credentials()
    assert "credentials.local.json" in str(excinfo.value)


def test_credentials_are_read_from_json(tmp_path):
    _write(
        tmp_path / "config" / "credentials.local.json",
        json.dumps({"api_key": "k", "secret": "c2VjcmV0", "passphrase": "p"}),
    )
    credentials = ConfigLoader(base_path=tmp_path).load_credentials()
    assert credentials.api_key == "k"
    assert credentials.secret == "c2VjcmV0"
    assert credentials.passphrase == "p"


def test_build_logger_maps_level_names(tmp_path):
    settings = ClientSettings(log_level="warning", log_file=str(tmp_path / "logs" / "client.log"))
    logger = settings.build_logger("coinbase_client.config-test")
    assert logger.name == "coinbase_client.config-test"
    assert logging.getLogger("coinbase_client.config-test").level == logging.WARNING
    assert (tmp_path / "logs").is_dir()


@pytest.mark.asyncio
async def test_clients_built_from_settings(tmp_path):
    _write(tmp_path / "config" / "settings.yaml", "client:\n  sandbox: true\n  user_agent: ua-test\n")
    _write(
        tmp_path / "config" / "credentials.json",
        json.dumps({"api_key": "k", "secret": "c2VjcmV0", "passphrase": "p"}),
    )
    loader = ConfigLoader(base_path=tmp_path)
    settings = loader.load_settings()
    public = build_public_client(settings)
    private = build_private_client(settings, loader.load_credentials())
    assert isinstance(public, PublicClient)
    assert isinstance(private, PrivateClient)
    assert public.base_url == COINBASE_SANDBOX_API_URL
    assert private.user_agent == "ua-test"
    assert private.signer.user_agent == "ua-test"
    await public.close()
    await private.close()
