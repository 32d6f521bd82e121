from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar


def to_decimal(value: Any) -> Decimal:
    """Coerce a JSON number or numeric string into a Decimal without float rounding."""
    if isinstance(value, bool) or value is None:
        raise TypeError(f"expected a numeric value, got {value!r}")
    return Decimal(str(value))


def to_optional_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return to_decimal(value)


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO 8601 / RFC 3339 timestamp as returned by the exchange."""
    if not isinstance(value, str):
        raise TypeError(f"expected an ISO 8601 string, got {value!r}")
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def parse_optional_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    return parse_timestamp(value)


class OrderLevel(IntEnum):
    BEST = 1
    TOP_50 = 2
    FULL = 3


class Granularity(IntEnum):
    """Desired candle timeslice in seconds."""

    ONE_MINUTE = 60
    FIVE_MINUTES = 300
    FIFTEEN_MINUTES = 900
    ONE_HOUR = 3600
    SIX_HOURS = 21600
    ONE_DAY = 86400


class OrderStatus(str, Enum):
    OPEN = "open"
    ACTIVE = "active"
    PENDING = "pending"


class TransferType(str, Enum):
    DEPOSIT = "deposit"
    INTERNAL_DEPOSIT = "internal_deposit"
    WITHDRAW = "withdraw"
    INTERNAL_WITHDRAW = "internal_withdraw"


@dataclass(frozen=True, slots=True)
class Credentials:
    api_key: str
    secret: str = field(repr=False)
    passphrase: str = field(repr=False)


@dataclass(slots=True)
class Product:
    id: str
    display_name: str
    base_currency: str
    quote_currency: str
    base_increment: Decimal
    quote_increment: Decimal
    base_min_size: Optional[Decimal]
    base_max_size: Optional[Decimal]
    min_market_funds: Optional[Decimal]
    max_market_funds: Optional[Decimal]
    status: str
    status_message: str
    cancel_only: bool
    limit_only: bool
    post_only: bool
    trading_disabled: bool

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "Product":
        return cls(
            id=payload["id"],
            display_name=payload["display_name"],
            base_currency=payload["base_currency"],
            quote_currency=payload["quote_currency"],
            base_increment=to_decimal(payload["base_increment"]),
            quote_increment=to_decimal(payload["quote_increment"]),
            base_min_size=to_optional_decimal(payload.get("base_min_size")),
            base_max_size=to_optional_decimal(payload.get("base_max_size")),
            min_market_funds=to_optional_decimal(payload.get("min_market_funds")),
            max_market_funds=to_optional_decimal(payload.get("max_market_funds")),
            status=payload["status"],
            status_message=payload.get("status_message") or "",
            cancel_only=bool(payload["cancel_only"]),
            limit_only=bool(payload["limit_only"]),
            post_only=bool(payload["post_only"]),
            trading_disabled=bool(payload["trading_disabled"]),
        )


@dataclass(slots=True)
class BookEntry:
    """Aggregated price level (order book levels 1 and 2)."""

    price: Decimal
    size: Decimal
    num_orders: int

    @classmethod
    def from_json(cls, row: List[Any]) -> "BookEntry":
        return cls(price=to_decimal(row[0]), size=to_decimal(row[1]), num_orders=int(row[2]))


@dataclass(slots=True)
class FullBookEntry:
    """Single resting order (order book level 3)."""

    price: Decimal
    size: Decimal
    order_id: str

    @classmethod
    def from_json(cls, row: List[Any]) -> "FullBookEntry":
        return cls(price=to_decimal(row[0]), size=to_decimal(row[1]), order_id=str(row[2]))


EntryT = TypeVar("EntryT", BookEntry, FullBookEntry)


@dataclass(slots=True)
class OrderBook(Generic[EntryT]):
    sequence: int
    bids: List[EntryT] = field(default_factory=list)
    asks: List[EntryT] = field(default_factory=list)

    @classmethod
    def from_json(
        cls, payload: Dict[str, Any], entry: Callable[[List[Any]], EntryT]
    ) -> "OrderBook[EntryT]":
        return cls(
            sequence=int(payload["sequence"]),
            bids=[entry(row) for row in payload["bids"]],
            asks=[entry(row) for row in payload["asks"]],
        )


@dataclass(slots=True)
class Ticker:
    trade_id: int
    price: Decimal
    size: Decimal
    bid: Decimal
    ask: Decimal
    volume: Decimal
    time: datetime

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "Ticker":
        return cls(
            trade_id=int(payload["trade_id"]),
            price=to_decimal(payload["price"]),
            size=to_decimal(payload["size"]),
            bid=to_decimal(payload["bid"]),
            ask=to_decimal(payload["ask"]),
            volume=to_decimal(payload["volume"]),
            time=parse_timestamp(payload["time"]),
        )


@dataclass(slots=True)
class Trade:
    time: datetime
    trade_id: int
    price: Decimal
    size: Decimal
    side: str

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "Trade":
        return cls(
            time=parse_timestamp(payload["time"]),
            trade_id=int(payload["trade_id"]),
            price=to_decimal(payload["price"]),
            size=to_decimal(payload["size"]),
            side=payload["side"],
        )


@dataclass(slots=True)
class HistoricRate:
    """One candle; the exchange sends ``[time, low, high, open, close, volume]``."""

    time: int
    low: Decimal
    high: Decimal
    open: Decimal
    close: Decimal
    volume: Decimal

    @classmethod
    def from_json(cls, row: List[Any]) -> "HistoricRate":
        time, low, high, open_, close, volume = row
        return cls(
            time=int(time),
            low=to_decimal(low),
            high=to_decimal(high),
            open=to_decimal(open_),
            close=to_decimal(close),
            volume=to_decimal(volume),
        )


@dataclass(slots=True)
class TwentyFourHourStats:
    open: Decimal
    high: Decimal
    low: Decimal
    volume: Decimal
    last: Decimal
    volume_30day: Decimal

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "TwentyFourHourStats":
        return cls(
            open=to_decimal(payload["open"]),
            high=to_decimal(payload["high"]),
            low=to_decimal(payload["low"]),
            volume=to_decimal(payload["volume"]),
            last=to_decimal(payload["last"]),
            volume_30day=to_decimal(payload["volume_30day"]),
        )


@dataclass(slots=True)
class CurrencyDetails:
    type: str
    symbol: Optional[str]
    network_confirmations: Optional[int]
    sort_order: Optional[int]
    crypto_address_link: Optional[str]
    crypto_transaction_link: Optional[str]
    push_payment_methods: List[str] = field(default_factory=list)
    group_types: Optional[List[str]] = None
    display_name: Optional[str] = None
    processing_time_seconds: Optional[Decimal] = None
    min_withdrawal_amount: Optional[Decimal] = None
    max_withdrawal_amount: Optional[Decimal] = None

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "CurrencyDetails":
        confirmations = payload.get("network_confirmations")
        sort_order = payload.get("sort_order")
        return cls(
            type=payload["type"],
            symbol=payload.get("symbol"),
            network_confirmations=int(confirmations) if confirmations is not None else None,
            sort_order=int(sort_order) if sort_order is not None else None,
            crypto_address_link=payload.get("crypto_address_link"),
            crypto_transaction_link=payload.get("crypto_transaction_link"),
            push_payment_methods=list(payload.get("push_payment_methods") or []),
            group_types=payload.get("group_types"),
            display_name=payload.get("display_name"),
            processing_time_seconds=to_optional_decimal(payload.get("processing_time_seconds")),
            min_withdrawal_amount=to_optional_decimal(payload.get("min_withdrawal_amount")),
            max_withdrawal_amount=to_optional_decimal(payload.get("max_withdrawal_amount")),
        )


@dataclass(slots=True)
class Currency:
    id: str
    name: str
    min_size: Decimal
    status: str
    max_precision: Decimal
    details: CurrencyDetails
    message: Optional[str] = None
    convertible_to: Optional[List[str]] = None

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "Currency":
        return cls(
            id=payload["id"],
            name=payload["name"],
            min_size=to_decimal(payload["min_size"]),
            status=payload["status"],
            max_precision=to_decimal(payload["max_precision"]),
            details=CurrencyDetails.from_json(payload["details"]),
            message=payload.get("message"),
            convertible_to=payload.get("convertible_to"),
        )


@dataclass(slots=True)
class ServerTime:
    iso: datetime
    epoch: Decimal

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "ServerTime":
        return cls(iso=parse_timestamp(payload["iso"]), epoch=to_decimal(payload["epoch"]))


@dataclass(slots=True)
class Account:
    id: str
    currency: str
    balance: Decimal
    available: Decimal
    hold: Decimal
    profile_id: str
    trading_enabled: bool

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "Account":
        return cls(
            id=payload["id"],
            currency=payload["currency"],
            balance=to_decimal(payload["balance"]),
            available=to_decimal(payload["available"]),
            hold=to_decimal(payload["hold"]),
            profile_id=payload["profile_id"],
            trading_enabled=bool(payload["trading_enabled"]),
        )


@dataclass(slots=True)
class AccountHistoryDetails:
    order_id: Optional[str] = None
    trade_id: Optional[str] = None
    product_id: Optional[str] = None

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "AccountHistoryDetails":
        trade_id = payload.get("trade_id")
        return cls(
            order_id=payload.get("order_id"),
            trade_id=str(trade_id) if trade_id is not None else None,
            product_id=payload.get("product_id"),
        )


@dataclass(slots=True)
class AccountHistory:
    """Ledger entry of an account."""

    id: str
    created_at: datetime
    amount: Decimal
    balance: Decimal
    type: str
    details: AccountHistoryDetails

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "AccountHistory":
        return cls(
            id=str(payload["id"]),
            created_at=parse_timestamp(payload["created_at"]),
            amount=to_decimal(payload["amount"]),
            balance=to_decimal(payload["balance"]),
            type=payload["type"],
            details=AccountHistoryDetails.from_json(payload.get("details") or {}),
        )


@dataclass(slots=True)
class Hold:
    id: str
    account_id: str
    created_at: datetime
    updated_at: datetime
    amount: Decimal
    type: str
    ref: str

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "Hold":
        return cls(
            id=payload["id"],
            account_id=payload["account_id"],
            created_at=parse_timestamp(payload["created_at"]),
            updated_at=parse_timestamp(payload["updated_at"]),
            amount=to_decimal(payload["amount"]),
            type=payload["type"],
            ref=payload["ref"],
        )


@dataclass(slots=True)
class OrderInfo:
    """Exchange-side view of an order."""

    id: str
    product_id: str
    side: str
    type: str
    created_at: datetime
    fill_fees: Decimal
    filled_size: Decimal
    executed_value: Decimal
    status: str
    settled: bool
    post_only: bool = False
    price: Optional[Decimal] = None
    size: Optional[Decimal] = None
    funds: Optional[Decimal] = None
    stp: Optional[str] = None
    time_in_force: Optional[str] = None

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "OrderInfo":
        return cls(
            id=payload["id"],
            product_id=payload["product_id"],
            side=payload["side"],
            type=payload["type"],
            created_at=parse_timestamp(payload["created_at"]),
            fill_fees=to_decimal(payload["fill_fees"]),
            filled_size=to_decimal(payload["filled_size"]),
            executed_value=to_decimal(payload["executed_value"]),
            status=payload["status"],
            settled=bool(payload["settled"]),
            post_only=bool(payload.get("post_only", False)),
            price=to_optional_decimal(payload.get("price")),
            size=to_optional_decimal(payload.get("size")),
            funds=to_optional_decimal(payload.get("funds")),
            stp=payload.get("stp"),
            time_in_force=payload.get("time_in_force"),
        )


@dataclass(slots=True)
class Fill:
    trade_id: int
    product_id: str
    price: Decimal
    size: Decimal
    order_id: str
    created_at: datetime
    liquidity: str
    fee: Decimal
    settled: bool
    side: str

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "Fill":
        return cls(
            trade_id=int(payload["trade_id"]),
            product_id=payload["product_id"],
            price=to_decimal(payload["price"]),
            size=to_decimal(payload["size"]),
            order_id=payload["order_id"],
            created_at=parse_timestamp(payload["created_at"]),
            liquidity=payload["liquidity"],
            fee=to_decimal(payload["fee"]),
            settled=bool(payload["settled"]),
            side=payload["side"],
        )


@dataclass(slots=True)
class Fees:
    maker_fee_rate: Decimal
    taker_fee_rate: Decimal
    usd_volume: Optional[Decimal] = None

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "Fees":
        return cls(
            maker_fee_rate=to_decimal(payload["maker_fee_rate"]),
            taker_fee_rate=to_decimal(payload["taker_fee_rate"]),
            usd_volume=to_optional_decimal(payload.get("usd_volume")),
        )


@dataclass(slots=True)
class Profile:
    id: str
    user_id: str
    name: str
    active: bool
    is_default: bool
    created_at: datetime

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "Profile":
        return cls(
            id=payload["id"],
            user_id=payload["user_id"],
            name=payload["name"],
            active=bool(payload["active"]),
            is_default=bool(payload["is_default"]),
            created_at=parse_timestamp(payload["created_at"]),
        )


@dataclass(slots=True)
class DepositInfo:
    id: str
    amount: Decimal
    currency: str
    payout_at: Optional[datetime] = None

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "DepositInfo":
        return cls(
            id=payload["id"],
            amount=to_decimal(payload["amount"]),
            currency=payload["currency"],
            payout_at=parse_optional_timestamp(payload.get("payout_at")),
        )


@dataclass(slots=True)
class WithdrawInfo:
    id: str
    amount: Decimal
    currency: str

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "WithdrawInfo":
        return cls(
            id=payload["id"],
            amount=to_decimal(payload["amount"]),
            currency=payload["currency"],
        )


@dataclass(slots=True)
class StablecoinConversion:
    id: str
    amount: Decimal
    from_account_id: str
    to_account_id: str
    from_currency: str
    to_currency: str

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "StablecoinConversion":
        return cls(
            id=payload["id"],
            amount=to_decimal(payload["amount"]),
            from_account_id=payload["from_account_id"],
            to_account_id=payload["to_account_id"],
            from_currency=payload["from"],
            to_currency=payload["to"],
        )


@dataclass(slots=True)
class ReportParams:
    start_date: datetime
    end_date: datetime

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "ReportParams":
        return cls(
            start_date=parse_timestamp(payload["start_date"]),
            end_date=parse_timestamp(payload["end_date"]),
        )


@dataclass(slots=True)
class ReportInfo:
    id: str
    type: str
    status: str
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    file_url: Optional[str] = None
    params: Optional[ReportParams] = None

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "ReportInfo":
        params = payload.get("params")
        return cls(
            id=payload["id"],
            type=payload["type"],
            status=payload["status"],
            created_at=parse_optional_timestamp(payload.get("created_at")),
            completed_at=parse_optional_timestamp(payload.get("completed_at")),
            expires_at=parse_optional_timestamp(payload.get("expires_at")),
            file_url=payload.get("file_url"),
            params=ReportParams.from_json(params) if params else None,
        )
