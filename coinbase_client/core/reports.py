from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

from coinbase_client.core.errors import ValidationError


class ReportType(str, Enum):
    FILLS = "fills"
    ACCOUNT = "account"


class ReportFormat(str, Enum):
    PDF = "pdf"
    CSV = "csv"


DateLike = Union[datetime, str]


def _date(value: DateLike) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    if not value:
        raise ValidationError("report start/end date required")
    return value


@dataclass(frozen=True, slots=True)
class Report:
    type: ReportType
    start_date: str
    end_date: str
    format: ReportFormat = ReportFormat.PDF
    product_id: Optional[str] = None
    account_id: Optional[str] = None
    email: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload = {
            "type": self.type.value,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "product_id": self.product_id,
            "account_id": self.account_id,
            "format": self.format.value,
            "email": self.email,
        }
        return {k: v for k, v in payload.items() if v is not None}


class ReportBuilder:
    """Builds fills or account reports; each type only takes its own options."""

    def __init__(self, report_type: ReportType, fields: Dict[str, Any]):
        self._type = report_type
        self._fields = fields

    @classmethod
    def fills(cls, start_date: DateLike, end_date: DateLike, product_id: str) -> "ReportBuilder":
        if not product_id:
            raise ValidationError("fills report requires product_id")
        return cls(
            ReportType.FILLS,
            {"start_date": _date(start_date), "end_date": _date(end_date), "product_id": product_id},
        )

    @classmethod
    def account(cls, start_date: DateLike, end_date: DateLike, account_id: str) -> "ReportBuilder":
        if not account_id:
            raise ValidationError("account report requires account_id")
        return cls(
            ReportType.ACCOUNT,
            {"start_date": _date(start_date), "end_date": _date(end_date), "account_id": account_id},
        )

    def account_id(self, account_id: str) -> "ReportBuilder":
        if self._type is not ReportType.FILLS:
            raise ValidationError("account_id option only applies to fills reports")
        self._fields["account_id"] = account_id
        return self

    def product_id(self, product_id: str) -> "ReportBuilder":
        if self._type is not ReportType.ACCOUNT:
            raise ValidationError("product_id option only applies to account reports")
        self._fields["product_id"] = product_id
        return self

    def format(self, report_format: ReportFormat) -> "ReportBuilder":
        self._fields["format"] = ReportFormat(report_format)
        return self

    def email(self, email: str) -> "ReportBuilder":
        self._fields["email"] = email
        return self

    def build(self) -> Report:
        return Report(type=self._type, **self._fields)
