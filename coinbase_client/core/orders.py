"""Outbound order variants and the builder that enforces field legality.

An order is one of :class:`MarketOrder`, :class:`LimitOrder` or
:class:`StopOrder`.  Each variant renders exactly one of the exchange's order
wire shapes through ``to_payload()``; fields that do not belong to a variant
are left out of the payload rather than sent as zero or null.

Orders are meant to be created through :class:`OrderBuilder`::

    order = (
        OrderBuilder.limit(OrderSide.BUY, "BTC-USD", price="36000", size="0.5")
        .time_in_force(GoodTillTime(CancelAfter.HOUR, post_only=True))
        .client_oid("my-order-1")
        .build()
    )
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional, Union

from coinbase_client.core.errors import ValidationError


class OrderSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class OrderStop(str, Enum):
    LOSS = "LOSS"
    ENTRY = "ENTRY"


class CancelAfter(str, Enum):
    MINUTE = "MINUTE"
    HOUR = "HOUR"
    DAY = "DAY"


class SelfTradePrevention(str, Enum):
    DECREASE_CANCEL = "DECREASE_CANCEL"
    CANCEL_OLDEST = "CANCEL_OLDEST"
    CANCEL_NEWEST = "CANCEL_NEWEST"
    CANCEL_BOTH = "CANCEL_BOTH"


SIDE_WIRE = {OrderSide.BUY: "buy", OrderSide.SELL: "sell"}
STOP_WIRE = {OrderStop.LOSS: "loss", OrderStop.ENTRY: "entry"}
CANCEL_AFTER_WIRE = {CancelAfter.MINUTE: "min", CancelAfter.HOUR: "hour", CancelAfter.DAY: "day"}
STP_WIRE = {
    SelfTradePrevention.DECREASE_CANCEL: "dc",
    SelfTradePrevention.CANCEL_OLDEST: "co",
    SelfTradePrevention.CANCEL_NEWEST: "cn",
    SelfTradePrevention.CANCEL_BOTH: "cb",
}


@dataclass(frozen=True, slots=True)
class GoodTillCancel:
    post_only: bool = False


@dataclass(frozen=True, slots=True)
class GoodTillTime:
    cancel_after: CancelAfter
    post_only: bool = False


@dataclass(frozen=True, slots=True)
class ImmediateOrCancel:
    pass


@dataclass(frozen=True, slots=True)
class FillOrKill:
    pass


TimeInForce = Union[GoodTillCancel, GoodTillTime, ImmediateOrCancel, FillOrKill]

TIME_IN_FORCE_WIRE = {
    GoodTillCancel: "GTC",
    GoodTillTime: "GTT",
    ImmediateOrCancel: "IOC",
    FillOrKill: "FOK",
}

Amount = Union[Decimal, str, int, float]


def to_amount(name: str, value: Amount) -> Decimal:
    """Validate a positive order/transfer amount and return it as a Decimal."""
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be numeric")
    try:
        # str() keeps floats at their shortest repr instead of the binary expansion
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"{name} must be numeric, got {value!r}", exc) from exc
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{name} must be positive, got {value!r}")
    return amount


def _time_in_force_fields(tif: TimeInForce) -> Dict[str, Any]:
    fields: Dict[str, Any] = {"time_in_force": TIME_IN_FORCE_WIRE[type(tif)]}
    if isinstance(tif, GoodTillTime):
        fields["cancel_after"] = CANCEL_AFTER_WIRE[tif.cancel_after]
    if isinstance(tif, (GoodTillCancel, GoodTillTime)):
        fields["post_only"] = tif.post_only
    return fields


@dataclass(frozen=True, slots=True)
class MarketOrder:
    side: OrderSide
    product_id: str
    size: Optional[Decimal] = None
    funds: Optional[Decimal] = None
    client_oid: Optional[str] = None
    stp: Optional[SelfTradePrevention] = None

    def to_payload(self) -> Dict[str, Any]:
        payload = {
            "type": "market",
            "side": SIDE_WIRE[self.side],
            "product_id": self.product_id,
            "size": str(self.size) if self.size is not None else None,
            "funds": str(self.funds) if self.funds is not None else None,
            "client_oid": self.client_oid,
            "stp": STP_WIRE[self.stp] if self.stp else None,
        }
        return {k: v for k, v in payload.items() if v is not None}


@dataclass(frozen=True, slots=True)
class LimitOrder:
    side: OrderSide
    product_id: str
    price: Decimal
    size: Decimal
    time_in_force: Optional[TimeInForce] = None
    client_oid: Optional[str] = None
    stp: Optional[SelfTradePrevention] = None

    def to_payload(self) -> Dict[str, Any]:
        payload = {
            "type": "limit",
            "side": SIDE_WIRE[self.side],
            "product_id": self.product_id,
            "price": str(self.price),
            "size": str(self.size),
            "client_oid": self.client_oid,
            "stp": STP_WIRE[self.stp] if self.stp else None,
        }
        payload = {k: v for k, v in payload.items() if v is not None}
        if self.time_in_force is not None:
            payload.update(_time_in_force_fields(self.time_in_force))
        return payload


@dataclass(frozen=True, slots=True)
class StopOrder:
    """Stop-limit order; the exchange takes it as a limit order with a stop trigger."""

    side: OrderSide
    product_id: str
    price: Decimal
    size: Decimal
    stop: OrderStop
    stop_price: Decimal
    client_oid: Optional[str] = None
    stp: Optional[SelfTradePrevention] = None

    def to_payload(self) -> Dict[str, Any]:
        payload = {
            "type": "limit",
            "side": SIDE_WIRE[self.side],
            "product_id": self.product_id,
            "price": str(self.price),
            "size": str(self.size),
            "stop": STOP_WIRE[self.stop],
            "stop_price": str(self.stop_price),
            "client_oid": self.client_oid,
            "stp": STP_WIRE[self.stp] if self.stp else None,
        }
        return {k: v for k, v in payload.items() if v is not None}


Order = Union[MarketOrder, LimitOrder, StopOrder]


class OrderBuilder:
    """Fluent builder; the only place where per-kind field rules are checked."""

    def __init__(self, kind: type, fields: Dict[str, Any]):
        self._kind = kind
        self._fields = fields

    @classmethod
    def market(
        cls,
        side: OrderSide,
        product_id: str,
        size: Amount | None = None,
        funds: Amount | None = None,
    ) -> "OrderBuilder":
        if (size is None) == (funds is None):
            raise ValidationError("market order requires exactly one of size or funds")
        return cls(
            MarketOrder,
            {
                "side": OrderSide(side),
                "product_id": _product(product_id),
                "size": to_amount("size", size) if size is not None else None,
                "funds": to_amount("funds", funds) if funds is not None else None,
            },
        )

    @classmethod
    def limit(cls, side: OrderSide, product_id: str, price: Amount, size: Amount) -> "OrderBuilder":
        return cls(
            LimitOrder,
            {
                "side": OrderSide(side),
                "product_id": _product(product_id),
                "price": to_amount("price", price),
                "size": to_amount("size", size),
            },
        )

    @classmethod
    def stop(
        cls,
        side: OrderSide,
        product_id: str,
        price: Amount,
        size: Amount,
        stop_price: Amount,
        stop: OrderStop,
    ) -> "OrderBuilder":
        return cls(
            StopOrder,
            {
                "side": OrderSide(side),
                "product_id": _product(product_id),
                "price": to_amount("price", price),
                "size": to_amount("size", size),
                "stop": OrderStop(stop),
                "stop_price": to_amount("stop_price", stop_price),
            },
        )

    def time_in_force(self, time_in_force: TimeInForce) -> "OrderBuilder":
        if self._kind is not LimitOrder:
            raise ValidationError("time_in_force only applies to limit orders")
        if type(time_in_force) not in TIME_IN_FORCE_WIRE:
            raise ValidationError(f"unknown time_in_force {time_in_force!r}")
        self._fields["time_in_force"] = time_in_force
        return self

    def client_oid(self, client_oid: str) -> "OrderBuilder":
        self._fields["client_oid"] = client_oid
        return self

    def self_trade_prevention(self, stp: SelfTradePrevention) -> "OrderBuilder":
        self._fields["stp"] = SelfTradePrevention(stp)
        return self

    def build(self) -> Order:
        return self._kind(**self._fields)


def _product(product_id: str) -> str:
    if not product_id:
        raise ValidationError("product_id required")
    return product_id
