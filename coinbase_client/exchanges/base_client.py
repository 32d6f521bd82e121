from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from decimal import InvalidOperation
from typing import Any, Callable, Dict, List, Optional, TypeVar

import aiohttp
from yarl import URL

from coinbase_client.core.errors import DecodeError, StatusError, TransportError
from coinbase_client.exchanges.signer import DEFAULT_USER_AGENT
from coinbase_client.utils.logger import ROOT_LOGGER_NAME, ClientLogger

COINBASE_API_URL = "https://api.pro.coinbase.com"
COINBASE_SANDBOX_API_URL = "https://api-public.sandbox.pro.coinbase.com"

T = TypeVar("T")

_PARSE_ERRORS = (KeyError, IndexError, TypeError, ValueError, AttributeError, InvalidOperation)


class BaseExchangeClient(ABC):
    """Request/response plumbing shared by the public and private clients.

    Every call is a single round trip: nothing is retried, and any failure
    surfaces as a :class:`~coinbase_client.core.errors.ExchangeError`.
    """

    def __init__(
        self,
        base_url: str,
        session: aiohttp.ClientSession | None = None,
        logger: ClientLogger | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.base_url = base_url.rstrip("/")
        self.logger = logger or ClientLogger(f"{ROOT_LOGGER_NAME}.{self.__class__.__name__}")
        self.user_agent = user_agent
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        response = await self._send(method, path, payload)
        try:
            return json.loads(response)
        except json.JSONDecodeError as exc:
            raise DecodeError(f"invalid JSON from {method} {path}", exc) from exc

    async def _request_text(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> str:
        return await self._send(method, path, payload)

    async def _send(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]],
    ) -> str:
        method = method.upper()
        serialized_body: Optional[str] = None
        if payload is not None:
            serialized_body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        headers = self._build_headers(method, path, serialized_body)
        # path is already percent-encoded and signed as-is; stop yarl from requoting it
        url = URL(f"{self.base_url}{path}", encoded=True)
        data = serialized_body.encode("utf-8") if serialized_body is not None else None
        session = self._ensure_session()
        try:
            async with session.request(method, url, data=data, headers=headers) as response:
                raw = await response.read()
                self.logger.debug("request", method=method, path=path, status=response.status)
                if not 200 <= response.status < 300:
                    text = raw.decode("utf-8", errors="replace")
                    raise self._status_error(response.status, text, method, path)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            self.logger.error("transport failure", method=method, path=path, error=repr(exc))
            raise TransportError(f"{method} {path} failed: {exc!r}", exc) from exc
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"response to {method} {path} is not valid UTF-8", exc) from exc

    def _status_error(self, status: int, text: str, method: str, path: str) -> StatusError:
        message = text
        try:
            envelope = json.loads(text)
        except json.JSONDecodeError:
            envelope = None
        if isinstance(envelope, dict) and envelope.get("message") is not None:
            message = str(envelope["message"])
        self.logger.warn(
            "exchange returned error status",
            method=method,
            path=path,
            status=status,
            body=text[:200],
        )
        return StatusError(status, message)

    def _build_headers(
        self,
        method: str,
        path: str,
        serialized_body: Optional[str],
    ) -> Dict[str, str]:
        combined = {"User-Agent": self.user_agent, "Content-Type": "application/json"}
        combined.update(self._auth_headers(method, path, serialized_body))
        return combined

    @abstractmethod
    def _auth_headers(
        self,
        method: str,
        path: str,
        serialized_body: Optional[str] = None,
    ) -> Dict[str, str]:
        """Return headers required for authenticated endpoints."""

    @staticmethod
    def _decode(parser: Callable[[Any], T], data: Any) -> T:
        try:
            return parser(data)
        except _PARSE_ERRORS as exc:
            raise DecodeError(f"unexpected response shape: {exc!r}", exc) from exc

    @classmethod
    def _decode_many(cls, parser: Callable[[Any], T], data: Any) -> List[T]:
        if not isinstance(data, list):
            raise DecodeError(f"expected a JSON array, got {type(data).__name__}")
        return [cls._decode(parser, item) for item in data]

    async def _get(self, path: str, parser: Callable[[Any], T]) -> T:
        return self._decode(parser, await self._request("GET", path))

    async def _get_many(self, path: str, parser: Callable[[Any], T]) -> List[T]:
        return self._decode_many(parser, await self._request("GET", path))

    async def _get_json(self, path: str) -> Any:
        return await self._request("GET", path)
