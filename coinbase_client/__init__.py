"""Async client for the Coinbase Pro / Exchange REST API.

``PublicClient`` serves unauthenticated market data; ``PrivateClient`` signs
every request and covers trading, transfers, reports and profiles.
"""

from __future__ import annotations

from coinbase_client.core.errors import (
    CredentialError,
    DecodeError,
    ExchangeError,
    StatusError,
    TransportError,
    ValidationError,
)
from coinbase_client.core.models import Credentials, Granularity, OrderStatus
from coinbase_client.core.orders import (
    CancelAfter,
    FillOrKill,
    GoodTillCancel,
    GoodTillTime,
    ImmediateOrCancel,
    LimitOrder,
    MarketOrder,
    OrderBuilder,
    OrderSide,
    OrderStop,
    SelfTradePrevention,
    StopOrder,
)
from coinbase_client.core.reports import Report, ReportBuilder, ReportFormat
from coinbase_client.exchanges.private_client import PrivateClient
from coinbase_client.exchanges.public_client import PublicClient
from coinbase_client.exchanges.signer import RequestSigner

__all__ = [
    "CancelAfter",
    "CredentialError",
    "Credentials",
    "DecodeError",
    "ExchangeError",
    "FillOrKill",
    "GoodTillCancel",
    "GoodTillTime",
    "Granularity",
    "ImmediateOrCancel",
    "LimitOrder",
    "MarketOrder",
    "OrderBuilder",
    "OrderSide",
    "OrderStatus",
    "OrderStop",
    "PrivateClient",
    "PublicClient",
    "Report",
    "ReportBuilder",
    "ReportFormat",
    "RequestSigner",
    "SelfTradePrevention",
    "StatusError",
    "StopOrder",
    "TransportError",
    "ValidationError",
]
