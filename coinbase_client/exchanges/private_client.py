from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Union

import aiohttp

from coinbase_client.core.models import (
    Account,
    AccountHistory,
    Credentials,
    DepositInfo,
    Fees,
    Fill,
    Hold,
    OrderInfo,
    OrderStatus,
    Profile,
    ReportInfo,
    StablecoinConversion,
    TransferType,
    WithdrawInfo,
    to_decimal,
)
from coinbase_client.core.orders import Order, to_amount
from coinbase_client.core.reports import Report
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
from coinbase_client.exchanges.signer import DEFAULT_USER_AGENT, RequestSigner
from coinbase_client.utils.logger import ClientLogger

Amount = Union[Decimal, str, int, float]


def _order_id(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected an order id string, got {value!r}")
    return value


# fixed emission order for repeated status filters
_STATUS_ORDER = (OrderStatus.OPEN, OrderStatus.ACTIVE, OrderStatus.PENDING)


class PrivateClient(BaseExchangeClient):
    """Async interface for the authenticated trading and account endpoints.

    Each request is signed with a fresh timestamp over the exact path
    (query string included) and body that are sent.
    """

    def __init__(
        self,
        credentials: Credentials,
        sandbox: bool = False,
        base_url: str | None = None,
        session: aiohttp.ClientSession | None = None,
        logger: ClientLogger | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        url = base_url or (COINBASE_SANDBOX_API_URL if sandbox else COINBASE_API_URL)
        super().__init__(url, session, logger, user_agent)
        self.signer = RequestSigner(credentials, user_agent=user_agent)

    def _auth_headers(
        self,
        method: str,
        path: str,
        serialized_body: str | None = None,
    ) -> Dict[str, str]:
        return self.signer.headers(method, path, serialized_body)

    async def _post(self, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        return await self._request("POST", path, payload=payload)

    async def _delete(self, path: str) -> Any:
        return await self._request("DELETE", path)

    # ------------------------------------------------------------------
    # accounts
    # ------------------------------------------------------------------
    async def get_accounts(self) -> List[Account]:
        return await self._get_many("/accounts", Account.from_json)

    async def get_account(self, account_id: str) -> Account:
        return await self._get(f"/accounts/{segment(account_id)}", Account.from_json)

    async def get_account_history(
        self,
        account_id: str,
        before: Optional[str] = None,
        after: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[AccountHistory]:
        path = build_path(
            f"/accounts/{segment(account_id)}/ledger",
            configure_pagination(before, after, limit),
        )
        return await self._get_many(path, AccountHistory.from_json)

    async def get_account_holds(
        self,
        account_id: str,
        before: Optional[str] = None,
        after: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Hold]:
        path = build_path(
            f"/accounts/{segment(account_id)}/holds",
            configure_pagination(before, after, limit),
        )
        return await self._get_many(path, Hold.from_json)

    # ------------------------------------------------------------------
    # orders
    # ------------------------------------------------------------------
    async def place_order(self, order: Order) -> str:
        """Submit an order built with ``OrderBuilder``; returns the exchange order id."""
        data = await self._post("/orders", order.to_payload())
        self.logger.info(
            "order placed",
            product_id=order.product_id,
            client_oid=order.client_oid,
        )
        return self._decode(lambda payload: _order_id(payload["id"]), data)

    async def cancel_order(self, order_id: str) -> str:
        return self._decode(_order_id, await self._delete(f"/orders/{segment(order_id)}"))

    async def cancel_order_by_oid(self, client_oid: str) -> str:
        path = f"/orders/client:{segment(client_oid)}"
        return self._decode(_order_id, await self._delete(path))

    async def cancel_orders(self, product_id: Optional[str] = None) -> List[str]:
        path = build_path("/orders", encode_params([("product_id", product_id)]))
        return self._decode_many(_order_id, await self._delete(path))

    async def get_orders(
        self,
        statuses: Optional[Iterable[OrderStatus]] = None,
        before: Optional[str] = None,
        after: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[OrderInfo]:
        wanted = {OrderStatus(status) for status in statuses or ()}
        status_query = encode_params(
            ("status", status.value) for status in _STATUS_ORDER if status in wanted
        )
        path = build_path("/orders", status_query, configure_pagination(before, after, limit))
        return await self._get_many(path, OrderInfo.from_json)

    async def get_order(self, order_id: str) -> OrderInfo:
        return await self._get(f"/orders/{segment(order_id)}", OrderInfo.from_json)

    async def get_order_by_oid(self, client_oid: str) -> OrderInfo:
        return await self._get(f"/orders/client:{segment(client_oid)}", OrderInfo.from_json)

    # ------------------------------------------------------------------
    # fills and limits
    # ------------------------------------------------------------------
    async def get_fills_by_order_id(
        self,
        order_id: str,
        before: Optional[str] = None,
        after: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Fill]:
        path = build_path(
            "/fills",
            encode_params([("order_id", order_id)]),
            configure_pagination(before, after, limit),
        )
        return await self._get_many(path, Fill.from_json)

    async def get_fills_by_product_id(
        self,
        product_id: str,
        before: Optional[str] = None,
        after: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Fill]:
        path = build_path(
            "/fills",
            encode_params([("product_id", product_id)]),
            configure_pagination(before, after, limit),
        )
        return await self._get_many(path, Fill.from_json)

    async def get_limits(self) -> Any:
        return await self._get_json("/users/self/exchange-limits")

    # ------------------------------------------------------------------
    # transfers
    # ------------------------------------------------------------------
    async def _get_transfers(
        self,
        transfer_type: TransferType,
        profile_id: Optional[str],
        before: Optional[str],
        after: Optional[str],
        limit: Optional[int],
    ) -> Any:
        path = build_path(
            "/transfers",
            encode_params([("type", transfer_type.value), ("profile_id", profile_id)]),
            configure_pagination(before, after, limit),
        )
        return await self._get_json(path)

    async def get_deposits(
        self,
        profile_id: Optional[str] = None,
        before: Optional[str] = None,
        after: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Any:
        return await self._get_transfers(TransferType.DEPOSIT, profile_id, before, after, limit)

    async def get_internal_deposits(
        self,
        profile_id: Optional[str] = None,
        before: Optional[str] = None,
        after: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Any:
        return await self._get_transfers(
            TransferType.INTERNAL_DEPOSIT, profile_id, before, after, limit
        )

    async def get_deposit(self, transfer_id: str) -> Any:
        return await self._get_json(f"/transfers/{segment(transfer_id)}")

    async def get_withdrawals(
        self,
        profile_id: Optional[str] = None,
        before: Optional[str] = None,
        after: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Any:
        return await self._get_transfers(TransferType.WITHDRAW, profile_id, before, after, limit)

    async def get_internal_withdrawals(
        self,
        profile_id: Optional[str] = None,
        before: Optional[str] = None,
        after: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Any:
        return await self._get_transfers(
            TransferType.INTERNAL_WITHDRAW, profile_id, before, after, limit
        )

    async def get_withdrawal(self, transfer_id: str) -> Any:
        return await self._get_json(f"/transfers/{segment(transfer_id)}")

    async def get_payment_methods(self) -> Any:
        return await self._get_json("/payment-methods")

    async def deposit_funds(
        self, amount: Amount, currency: str, payment_method_id: str
    ) -> DepositInfo:
        payload = {
            "amount": str(to_amount("amount", amount)),
            "currency": currency,
            "payment_method_id": payment_method_id,
        }
        return self._decode(DepositInfo.from_json, await self._post("/deposits/payment-method", payload))

    async def deposit_funds_from_coinbase(
        self, amount: Amount, currency: str, coinbase_account_id: str
    ) -> DepositInfo:
        payload = {
            "amount": str(to_amount("amount", amount)),
            "currency": currency,
            "coinbase_account_id": coinbase_account_id,
        }
        return self._decode(
            DepositInfo.from_json, await self._post("/deposits/coinbase-account", payload)
        )

    async def get_coinbase_accounts(self) -> Any:
        return await self._get_json("/coinbase-accounts")

    async def generate_crypto_deposit_address(self, coinbase_account_id: str) -> Any:
        path = f"/coinbase-accounts/{segment(coinbase_account_id)}/addresses"
        return await self._post(path)

    async def withdraw_funds(
        self, amount: Amount, currency: str, payment_method_id: str
    ) -> WithdrawInfo:
        payload = {
            "amount": str(to_amount("amount", amount)),
            "currency": currency,
            "payment_method_id": payment_method_id,
        }
        return self._decode(
            WithdrawInfo.from_json, await self._post("/withdrawals/payment-method", payload)
        )

    async def withdraw_to_coinbase(
        self, amount: Amount, currency: str, coinbase_account_id: str
    ) -> WithdrawInfo:
        payload = {
            "amount": str(to_amount("amount", amount)),
            "currency": currency,
            "coinbase_account_id": coinbase_account_id,
        }
        return self._decode(
            WithdrawInfo.from_json, await self._post("/withdrawals/coinbase-account", payload)
        )

    async def withdraw_to_crypto_address(
        self,
        amount: Amount,
        currency: str,
        crypto_address: str,
        destination_tag: Optional[str] = None,
        no_destination_tag: Optional[bool] = None,
        add_network_fee_to_total: Optional[bool] = None,
    ) -> Any:
        payload = {
            "amount": str(to_amount("amount", amount)),
            "currency": currency,
            "crypto_address": crypto_address,
            "destination_tag": destination_tag,
            "no_destination_tag": no_destination_tag,
            "add_network_fee_to_total": add_network_fee_to_total,
        }
        payload = {k: v for k, v in payload.items() if v is not None}
        return await self._post("/withdrawals/crypto", payload)

    # ------------------------------------------------------------------
    # fees and conversions
    # ------------------------------------------------------------------
    async def get_fees(self) -> Fees:
        return await self._get("/fees", Fees.from_json)

    async def get_fee_estimate(self, currency: str, crypto_address: str) -> Decimal:
        path = build_path(
            "/withdrawals/fee-estimate",
            encode_params([("currency", currency), ("crypto_address", crypto_address)]),
        )
        return await self._get(path, lambda payload: to_decimal(payload["fee"]))

    async def convert_stablecoin(
        self, from_currency: str, to_currency: str, amount: Amount
    ) -> StablecoinConversion:
        payload = {
            "from": from_currency,
            "to": to_currency,
            "amount": str(to_amount("amount", amount)),
        }
        return self._decode(StablecoinConversion.from_json, await self._post("/conversions", payload))

    # ------------------------------------------------------------------
    # reports and profiles
    # ------------------------------------------------------------------
    async def create_report(self, report: Report) -> ReportInfo:
        return self._decode(ReportInfo.from_json, await self._post("/reports", report.to_payload()))

    async def get_report(self, report_id: str) -> ReportInfo:
        return await self._get(f"/reports/{segment(report_id)}", ReportInfo.from_json)

    async def get_profiles(self) -> List[Profile]:
        return await self._get_many("/profiles", Profile.from_json)

    async def get_profile(self, profile_id: str) -> Profile:
        return await self._get(f"/profiles/{segment(profile_id)}", Profile.from_json)

    async def create_profile_transfer(
        self, from_profile: str, to_profile: str, currency: str, amount: Amount
    ) -> str:
        """Move funds between profiles; the exchange answers with plain text ("OK")."""
        payload = {
            "from": from_profile,
            "to": to_profile,
            "currency": currency,
            "amount": str(to_amount("amount", amount)),
        }
        return await self._request_text("POST", "/profiles/transfer", payload)

    async def oracle(self) -> Any:
        return await self._get_json("/oracle")

