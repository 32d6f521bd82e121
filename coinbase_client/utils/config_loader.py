from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

import aiohttp
import yaml

from coinbase_client.core.models import Credentials
from coinbase_client.exchanges.base_client import COINBASE_API_URL, COINBASE_SANDBOX_API_URL
from coinbase_client.exchanges.private_client import PrivateClient
from coinbase_client.exchanges.public_client import PublicClient
from coinbase_client.exchanges.signer import DEFAULT_USER_AGENT
from coinbase_client.utils.logger import ClientLogger


@dataclass(slots=True)
class ClientSettings:
    sandbox: bool = True
    api_url: str = COINBASE_API_URL
    sandbox_url: str = COINBASE_SANDBOX_API_URL
    user_agent: str = DEFAULT_USER_AGENT
    log_level: str = "INFO"
    log_file: str | None = None
    log_console: bool = True

    @property
    def base_url(self) -> str:
        return self.sandbox_url if self.sandbox else self.api_url

    def build_logger(self, name: str) -> ClientLogger:
        level = logging.getLevelName(self.log_level.upper())
        if not isinstance(level, int):
            level = logging.INFO
        return ClientLogger(
            name,
            level=level,
            log_file=Path(self.log_file) if self.log_file else None,
            console=self.log_console,
        )


class ConfigLoader:
    """Loads client settings and API credentials from the config directory."""

    def __init__(self, base_path: Path | None = None):
        self.base_path = base_path or Path.cwd()
        self._config_dir = self.base_path / "config"

    def _resolve_config_file(self, filename: str, fallbacks: list[str] | None = None) -> Path:
        candidates = [self._config_dir / filename]
        if fallbacks:
            candidates.extend(self._config_dir / name for name in fallbacks)
        for path in candidates:
            if path.exists():
                return path
        searched = ", ".join(str(path) for path in candidates)
        raise FileNotFoundError(f"missing config file; searched: {searched}")

    def load_settings(self) -> ClientSettings:
        settings_path = self._resolve_config_file(
            "settings.yaml",
            ["settings.local.yaml", "settings.example.yaml"],
        )
        with settings_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
        return self._parse_settings(raw)

    def load_credentials(self) -> Credentials:
        credentials_path = self._resolve_config_file(
            "credentials.json",
            ["credentials.local.json", "credentials.example.json"],
        )
        data = json.loads(credentials_path.read_text(encoding="utf-8"))
        return Credentials(
            api_key=data["api_key"],
            secret=data["secret"],
            passphrase=data["passphrase"],
        )

    def _parse_settings(self, raw: Dict[str, object]) -> ClientSettings:
        client_cfg = raw.get("client", {}) or {}
        logging_cfg = raw.get("logging", {}) or {}
        return ClientSettings(
            sandbox=bool(client_cfg.get("sandbox", True)),
            api_url=str(client_cfg.get("api_url", COINBASE_API_URL)),
            sandbox_url=str(client_cfg.get("sandbox_url", COINBASE_SANDBOX_API_URL)),
            user_agent=str(client_cfg.get("user_agent", DEFAULT_USER_AGENT)),
            log_level=str(logging_cfg.get("level", "INFO")),
            log_file=logging_cfg.get("file"),
            log_console=bool(logging_cfg.get("console", True)),
        )


def build_public_client(
    settings: ClientSettings, session: aiohttp.ClientSession | None = None
) -> PublicClient:
    return PublicClient(
        base_url=settings.base_url,
        session=session,
        logger=settings.build_logger("coinbase_client.public"),
        user_agent=settings.user_agent,
    )


def build_private_client(
    settings: ClientSettings,
    credentials: Credentials,
    session: aiohttp.ClientSession | None = None,
) -> PrivateClient:
    return PrivateClient(
        credentials,
        base_url=settings.base_url,
        session=session,
        logger=settings.build_logger("coinbase_client.private"),
        user_agent=settings.user_agent,
    )
