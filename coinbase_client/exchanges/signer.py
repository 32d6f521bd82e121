from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import time
from typing import Callable, Dict, Optional

from coinbase_client.core.errors import CredentialError
from coinbase_client.core.models import Credentials

DEFAULT_USER_AGENT = "coinbase-client"


def current_timestamp() -> str:
    return str(int(time.time()))


class RequestSigner:
    """Builds the CB-ACCESS-* header set for authenticated requests.

    The signature is the base64 HMAC-SHA256, keyed with the base64-decoded
    secret, of ``timestamp + method + path + body``.  ``path`` includes the
    query string and excludes the host; ``body`` is left out of the prehash
    entirely when the request has none.
    """

    def __init__(
        self,
        credentials: Credentials,
        user_agent: str = DEFAULT_USER_AGENT,
        clock: Callable[[], str] = current_timestamp,
    ):
        self.credentials = credentials
        self.user_agent = user_agent
        self._clock = clock

    def _secret_key(self) -> bytes:
        try:
            return base64.b64decode(self.credentials.secret, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise CredentialError("API secret is not valid base64", exc) from exc

    def sign(self, path: str, body: Optional[str], timestamp: str, method: str) -> str:
        prehash = f"{timestamp}{method}{path}"
        if body is not None:
            prehash += body
        digest = hmac.new(self._secret_key(), prehash.encode("utf-8"), hashlib.sha256).digest()
        return base64.b64encode(digest).decode("ascii")

    def headers(self, method: str, path: str, body: Optional[str] = None) -> Dict[str, str]:
        # fresh timestamp per request; the exchange rejects stale ones
        timestamp = self._clock()
        method = method.upper()
        return {
            "User-Agent": self.user_agent,
            "CB-ACCESS-KEY": self.credentials.api_key,
            "CB-ACCESS-SIGN": self.sign(path, body, timestamp, method),
            "CB-ACCESS-TIMESTAMP": timestamp,
            "CB-ACCESS-PASSPHRASE": self.credentials.passphrase,
        }
