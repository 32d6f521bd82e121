from __future__ import annotations

from datetime import datetime
from functools import partial
from typing import Dict, List, Optional, Union

import aiohttp

from coinbase_client.core.models import (
    BookEntry,
    Currency,
    FullBookEntry,
    Granularity,
    HistoricRate,
    OrderBook,
    OrderLevel,
    Product,
    ServerTime,
    Ticker,
    Trade,
    TwentyFourHourStats,
)
from coinbase_client.exchanges.base_client import (
    COINBASE_API_URL,
    COINBASE_SANDBOX_API_URL,
    BaseExchangeClient,
)
from coinbase_client.exchanges.pagination import (
    build_path,
    configure_pagination,
    encode_params,
    segment,
)
from coinbase_client.exchanges.signer import DEFAULT_USER_AGENT
from coinbase_client.utils.logger import ClientLogger

TRADES_PAGE_LIMIT = 1000


def _iso(value: Union[datetime, str, None]) -> Optional[str]:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class PublicClient(BaseExchangeClient):
    """Async interface for the unauthenticated market data endpoints."""

    def __init__(
        self,
        sandbox: bool = False,
        base_url: str | None = None,
        session: aiohttp.ClientSession | None = None,
        logger: ClientLogger | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        url = base_url or (COINBASE_SANDBOX_API_URL if sandbox else COINBASE_API_URL)
        super().__init__(url, session, logger, user_agent)

    def _auth_headers(
        self,
        method: str,
        path: str,
        serialized_body: str | None = None,
    ) -> Dict[str, str]:
        return {}

    async def get_products(self) -> List[Product]:
        return await self._get_many("/products", Product.from_json)

    async def get_product(self, product_id: str) -> Product:
        return await self._get(f"/products/{segment(product_id)}", Product.from_json)

    async def _get_order_book(self, product_id: str, level: OrderLevel, entry) -> OrderBook:
        path = build_path(
            f"/products/{segment(product_id)}/book", encode_params([("level", int(level))])
        )
        return await self._get(path, partial(OrderBook.from_json, entry=entry))

    async def get_product_order_book(self, product_id: str) -> OrderBook[BookEntry]:
        """Best bid and ask only."""
        return await self._get_order_book(product_id, OrderLevel.BEST, BookEntry.from_json)

    async def get_product_order_book_top50(self, product_id: str) -> OrderBook[BookEntry]:
        """Top 50 aggregated bids and asks."""
        return await self._get_order_book(product_id, OrderLevel.TOP_50, BookEntry.from_json)

    async def get_product_order_book_all(self, product_id: str) -> OrderBook[FullBookEntry]:
        """Full, non-aggregated book with one entry per resting order."""
        return await self._get_order_book(product_id, OrderLevel.FULL, FullBookEntry.from_json)

    async def get_product_ticker(
        self,
        product_id: str,
        before: Optional[str] = None,
        after: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Ticker:
        path = build_path(
            f"/products/{segment(product_id)}/ticker",
            configure_pagination(before, after, limit),
        )
        return await self._get(path, Ticker.from_json)

    async def get_product_trades(
        self,
        product_id: str,
        before: Optional[str] = None,
        after: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Trade]:
        """Latest trades, newest first. ``limit`` is capped at 1000."""
        path = build_path(
            f"/products/{segment(product_id)}/trades",
            configure_pagination(before, after, limit, max_limit=TRADES_PAGE_LIMIT),
        )
        return await self._get_many(path, Trade.from_json)

    async def get_product_historic_rates(
        self,
        product_id: str,
        start: Union[datetime, str, None] = None,
        end: Union[datetime, str, None] = None,
        granularity: Optional[Granularity] = None,
    ) -> List[HistoricRate]:
        query = encode_params(
            [
                ("start", _iso(start)),
                ("end", _iso(end)),
                (
                    "granularity",
                    int(Granularity(granularity)) if granularity is not None else None,
                ),
            ]
        )
        path = build_path(f"/products/{segment(product_id)}/candles", query)
        return await self._get_many(path, HistoricRate.from_json)

    async def get_product_24hr_stats(self, product_id: str) -> TwentyFourHourStats:
        return await self._get(
            f"/products/{segment(product_id)}/stats", TwentyFourHourStats.from_json
        )

    async def get_currencies(self) -> List[Currency]:
        return await self._get_many("/currencies", Currency.from_json)

    async def get_currency(self, currency_id: str) -> Currency:
        return await self._get(f"/currencies/{segment(currency_id)}", Currency.from_json)

    async def get_time(self) -> ServerTime:
        return await self._get("/time", ServerTime.from_json)
