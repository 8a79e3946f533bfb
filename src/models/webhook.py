import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Any

from src.errors import ErrorKind, InvalidSignatureError
from src.models.transaction import TransactionStatus, TransactionType
from src.utils.fields import lookup

DEFAULT_CURRENCY = "EUR"
UDF_SLOTS = range(1, 6)

_CURRENCY_RE = re.compile(r"^[A-Za-z]{3}$")


def _empty() -> Mapping:
    return MappingProxyType({})


def _reject(message: str) -> InvalidSignatureError:
    return InvalidSignatureError(message, kind=ErrorKind.SCHEMA_MISMATCH)


def _text(value: Any, name: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, (dict, list, bool)):
        raise _reject(f"field {name!r} must be a string, got {type(value).__name__}")
    return str(value)


def _amount(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise _reject(f"invalid amount {value!r}")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise _reject(f"invalid amount {value!r}") from None
    if not amount.is_finite() or amount < 0:
        raise _reject(f"invalid amount {value!r}")
    return amount


def _currency(value: Any) -> str:
    if value is None:
        return DEFAULT_CURRENCY
    if not isinstance(value, str) or not _CURRENCY_RE.match(value):
        raise _reject(f"invalid currency {value!r}")
    return value.upper()


def _timestamp(value: Any) -> datetime | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise _reject(f"invalid processedAt {value!r}")
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise _reject(f"invalid processedAt {value!r}") from None


def _enum(enum_cls, value: Any, name: str):
    if value is None:
        raise _reject(f"missing required field {name!r}")
    try:
        return enum_cls(value)
    except ValueError:
        raise _reject(f"unrecognized {name} {value!r}") from None


@dataclass(frozen=True)
class WebhookPayload:
    """A verified gateway notification, normalized to snake_case fields."""

    transaction_id: str
    status: TransactionStatus
    transaction_type: TransactionType
    amount: Decimal
    currency: str
    gateway_id: str = ""
    auth_code: str | None = None
    card_number: str | None = None  # masked, e.g. 4111****1111
    card_scheme: str | None = None
    bank_response: str | None = None
    unique_reference: str | None = None
    customer_email: str | None = None
    three_d_secure: Mapping[str, Any] | None = field(default=None, hash=False)
    udf_fields: Mapping[str, str | None] = field(default_factory=_empty, hash=False)
    processed_at: datetime | None = None
    raw: Mapping[str, Any] = field(default_factory=_empty, repr=False, hash=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WebhookPayload":
        """Build a payload from a decoded webhook body.

        Every field is looked up under each of its known key spellings. Missing
        optional fields become None; a missing transaction id, status or
        transaction type, or a value that cannot be understood, raises
        InvalidSignatureError with kind SCHEMA_MISMATCH.
        """
        transaction_id = _text(lookup(data, "transaction_id"), "transactionId")
        if not transaction_id:
            raise _reject("missing required field 'transactionId'")

        three_d_secure = lookup(data, "three_d_secure")
        if three_d_secure is not None and not isinstance(three_d_secure, Mapping):
            raise _reject("field 'threeDSecure' must be an object")

        return cls(
            transaction_id=transaction_id,
            gateway_id=_text(lookup(data, "gateway_id"), "gatewayId") or "",
            status=_enum(TransactionStatus, lookup(data, "status"), "status"),
            transaction_type=_enum(TransactionType, lookup(data, "transaction_type"), "transactionType"),
            amount=_amount(lookup(data, "amount")),
            currency=_currency(lookup(data, "currency")),
            auth_code=_text(lookup(data, "auth_code"), "authCode"),
            card_number=_text(lookup(data, "card_number"), "cardNumber"),
            card_scheme=_text(lookup(data, "card_scheme"), "cardScheme"),
            bank_response=_text(lookup(data, "bank_response"), "bankResponse"),
            unique_reference=_text(lookup(data, "unique_reference"), "uniqueReference"),
            customer_email=_text(lookup(data, "customer_email"), "customerEmail"),
            three_d_secure=MappingProxyType(dict(three_d_secure)) if three_d_secure is not None else None,
            udf_fields=MappingProxyType(
                {f"udf{n}": _text(lookup(data, f"udf{n}"), f"udf{n}") for n in UDF_SLOTS}
            ),
            processed_at=_timestamp(lookup(data, "processed_at")),
            raw=MappingProxyType(dict(data)),
        )

    def is_processed(self) -> bool:
        return self.status is TransactionStatus.PROCESSED

    def is_declined(self) -> bool:
        return self.status is TransactionStatus.DECLINED

    def is_pending(self) -> bool:
        return self.status is TransactionStatus.PENDING

    def is_authorized(self) -> bool:
        return self.status is TransactionStatus.AUTHORIZED

    def is_refunded(self) -> bool:
        return self.status is TransactionStatus.REFUNDED

    def is_cancelled(self) -> bool:
        return self.status is TransactionStatus.CANCELLED

    def is_failed(self) -> bool:
        return self.status is TransactionStatus.FAILED

    def udf(self, number: int) -> str | None:
        """Value of user-defined field 1-5, or None if it was not sent."""
        if number not in UDF_SLOTS:
            raise ValueError("UDF field number must be between 1 and 5")
        return self.udf_fields.get(f"udf{number}")
