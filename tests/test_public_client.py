import asyncio
import re
from datetime import datetime, timezone
from decimal import Decimal

import aiohttp
import pytest

from coinbase_client.core.errors import DecodeError, StatusError, TransportError
from coinbase_client.core.models import FullBookEntry, Granularity
from coinbase_client.exchanges.base_client import COINBASE_API_URL, COINBASE_SANDBOX_API_URL
from coinbase_client.exchanges.public_client import PublicClient
from tests.conftest import API_URL, sent_requests

PRODUCT = {
    "id": "BTC-USD",
    "display_name": "BTC/USD",
    "base_currency": "BTC",
    "quote_currency": "USD",
    "base_increment": "0.00000001",
    "quote_increment": "0.01",
    "base_min_size": "0.0001",
    "base_max_size": "280",
    "min_market_funds": "5",
    "max_market_funds": "1000000",
    "status": "online",
    "status_message": "",
    "cancel_only": False,
    "limit_only": False,
    "post_only": False,
    "trading_disabled": False,
}


def _client(logger):
    return PublicClient(base_url=API_URL, logger=logger)


def test_base_url_selection():
    assert PublicClient().base_url == COINBASE_API_URL
    assert PublicClient(sandbox=True).base_url == COINBASE_SANDBOX_API_URL
    assert PublicClient(base_url="http://localhost:8080/").base_url == "http://localhost:8080"


@pytest.mark.asyncio
async def test_get_products_parses_decimals(http_mocks, logger):
    http_mocks.get(f"{API_URL}/products", payload=[PRODUCT])
    async with _client(logger) as client:
        products = await client.get_products()
    assert len(products) == 1
    assert products[0].id == "BTC-USD"
    assert products[0].base_increment == Decimal("0.00000001")
    assert products[0].base_max_size == Decimal("280")


@pytest.mark.asyncio
async def test_requests_carry_user_agent_without_auth(http_mocks, logger):
    http_mocks.get(f"{API_URL}/products/BTC-USD", payload=PRODUCT)
    async with _client(logger) as client:
        product = await client.get_product("BTC-USD")
    assert product.display_name == "BTC/USD"
    (_, kwargs), = sent_requests(http_mocks, "GET")
    assert kwargs["headers"]["User-Agent"] == "coinbase-client"
    assert not any(name.startswith("CB-ACCESS") for name in kwargs["headers"])


@pytest.mark.asyncio
async def test_order_book_levels(http_mocks, logger):
    http_mocks.get(
        f"{API_URL}/products/BTC-USD/book?level=1",
        payload={"sequence": 3, "bids": [["295.96", "4.39088265", 2]], "asks": [["295.97", "25.23542881", 12]]},
    )
    http_mocks.get(
        f"{API_URL}/products/BTC-USD/book?level=3",
        payload={
            "sequence": 4,
            "bids": [["295.96", "0.05088265", "3b0f1225-7f84-490b-a29f-0faef9de823a"]],
            "asks": [],
        },
    )
    async with _client(logger) as client:
        best = await client.get_product_order_book("BTC-USD")
        full = await client.get_product_order_book_all("BTC-USD")
    assert best.sequence == 3
    assert best.bids[0].price == Decimal("295.96")
    assert best.asks[0].num_orders == 12
    assert full.bids == [
        FullBookEntry(
            price=Decimal("295.96"),
            size=Decimal("0.05088265"),
            order_id="3b0f1225-7f84-490b-a29f-0faef9de823a",
        )
    ]
    assert full.asks == []


@pytest.mark.asyncio
async def test_trades_limit_is_capped_at_trade_page_size(http_mocks, logger):
    http_mocks.get(
        f"{API_URL}/products/BTC-USD/trades?limit=1000",
        payload=[
            {
                "time": "2021-06-04T00:00:00.123Z",
                "trade_id": 74,
                "price": "10.00000000",
                "size": "0.01000000",
                "side": "buy",
            }
        ],
    )
    async with _client(logger) as client:
        trades = await client.get_product_trades("BTC-USD", limit=5000)
    assert trades[0].trade_id == 74
    assert trades[0].time.tzinfo is not None


@pytest.mark.asyncio
async def test_historic_rates(http_mocks, logger):
    http_mocks.get(
        re.compile(rf"^{re.escape(API_URL)}/products/BTC-USD/candles\?.*granularity=3600"),
        payload=[[1415398768, 0.32, 4.2, 0.35, 4.2, 12.3], [1415398708, 0.31, 4.1, 0.33, 4.0, 10]],
    )
    async with _client(logger) as client:
        rates = await client.get_product_historic_rates(
            "BTC-USD",
            start=datetime(2014, 11, 7, tzinfo=timezone.utc),
            end=datetime(2014, 11, 8, tzinfo=timezone.utc),
            granularity=Granularity.ONE_HOUR,
        )
    assert [rate.time for rate in rates] == [1415398768, 1415398708]
    assert rates[0].low == Decimal("0.32")
    assert rates[1].volume == Decimal("10")


@pytest.mark.asyncio
async def test_unsupported_granularity_is_rejected(logger):
    async with _client(logger) as client:
        with pytest.raises(ValueError):
            await client.get_product_historic_rates("BTC-USD", granularity=120)


@pytest.mark.asyncio
async def test_get_time(http_mocks, logger):
    http_mocks.get(
        f"{API_URL}/time", payload={"iso": "2015-01-07T23:47:25.201Z", "epoch": 1420674445.201}
    )
    async with _client(logger) as client:
        server_time = await client.get_time()
    assert server_time.epoch == Decimal("1420674445.201")
    assert server_time.iso == datetime(2015, 1, 7, 23, 47, 25, 201000, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_error_status_carries_exchange_message(http_mocks, logger):
    http_mocks.get(f"{API_URL}/products/NOPE-USD", status=404, payload={"message": "NotFound"})
    async with _client(logger) as client:
        with pytest.raises(StatusError) as excinfo:
            await client.get_product("NOPE-USD")
    assert excinfo.value.code == 404
    assert excinfo.value.message == "NotFound"
    assert str(excinfo.value) == "status code: 404, message: NotFound"


@pytest.mark.asyncio
async def test_error_status_with_plain_body(http_mocks, logger):
    http_mocks.get(f"{API_URL}/time", status=502, body="Bad Gateway")
    async with _client(logger) as client:
        with pytest.raises(StatusError) as excinfo:
            await client.get_time()
    assert excinfo.value.code == 502
    assert excinfo.value.message == "Bad Gateway"


@pytest.mark.asyncio
async def test_missing_field_is_decode_error(http_mocks, logger):
    broken = dict(PRODUCT)
    del broken["quote_currency"]
    http_mocks.get(f"{API_URL}/products/BTC-USD", payload=broken)
    async with _client(logger) as client:
        with pytest.raises(DecodeError):
            await client.get_product("BTC-USD")


@pytest.mark.asyncio
async def test_invalid_json_is_decode_error(http_mocks, logger):
    http_mocks.get(f"{API_URL}/currencies", body="<html>")
    async with _client(logger) as client:
        with pytest.raises(DecodeError):
            await client.get_currencies()


@pytest.mark.asyncio
async def test_object_where_list_expected_is_decode_error(http_mocks, logger):
    http_mocks.get(f"{API_URL}/products", payload={"id": "BTC-USD"})
    async with _client(logger) as client:
        with pytest.raises(DecodeError):
            await client.get_products()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc", [aiohttp.ClientConnectionError("connection refused"), asyncio.TimeoutError()]
)
async def test_transport_failures(http_mocks, logger, exc):
    http_mocks.get(f"{API_URL}/time", exception=exc)
    async with _client(logger) as client:
        with pytest.raises(TransportError) as excinfo:
            await client.get_time()
    assert excinfo.value.original is exc


@pytest.mark.asyncio
async def test_supplied_session_is_left_open(http_mocks, logger):
    http_mocks.get(f"{API_URL}/time", payload={"iso": "2015-01-07T23:47:25.201Z", "epoch": 1})
    async with aiohttp.ClientSession() as session:
        async with PublicClient(base_url=API_URL, session=session, logger=logger) as client:
            await client.get_time()
        assert not session.closed


@pytest.mark.asyncio
async def test_body_that_is_not_utf8_is_decode_error(http_mocks, logger):
    http_mocks.get(f"{API_URL}/time", body=b'{"iso": "\xff\xfe", "epoch": 1}')
    async with _client(logger) as client:
        with pytest.raises(DecodeError) as excinfo:
            await client.get_time()
    assert isinstance(excinfo.value.original, UnicodeDecodeError)


@pytest.mark.asyncio
async def test_error_status_survives_undecodable_body(http_mocks, logger):
    http_mocks.get(f"{API_URL}/time", status=500, body=b"upstream \xff failure")
    async with _client(logger) as client:
        with pytest.raises(StatusError) as excinfo:
            await client.get_time()
    assert excinfo.value.code == 500
    assert excinfo.value.message == "upstream \ufffd failure"


@pytest.mark.asyncio
async def test_product_id_is_escaped_in_path(http_mocks, logger):
    http_mocks.get(re.compile(rf"^{re.escape(API_URL)}/products/"), payload=PRODUCT)
    async with _client(logger) as client:
        await client.get_product("BTC/USD")
    (url, _), = sent_requests(http_mocks, "GET")
    assert url.endswith("/products/BTC%2FUSD")
