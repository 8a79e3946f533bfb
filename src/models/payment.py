from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from src.models.transaction import TransactionStatus, TransactionType

_CENTS = Decimal("0.01")


def format_amount(amount: Decimal) -> str:
    """Two-decimal string the gateway expects, e.g. Decimal('5') -> '5.00'."""
    return str(Decimal(str(amount)).quantize(_CENTS, rounding=ROUND_HALF_UP))


@dataclass
class PaymentRequest:
    """Hosted Payment Page request."""

    amount: Decimal
    unique_reference: str
    transaction_type: TransactionType = TransactionType.SALE
    customer_email: str | None = None
    customer_first_name: str | None = None
    customer_last_name: str | None = None
    customer_phone: str | None = None
    description: str | None = None
    redirect_url: str | None = None
    callback_url: str | None = None
    cancel_url: str | None = None
    is_test: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    udf_fields: dict[int, str] = field(default_factory=dict)

    def __post_init__(self):
        self.amount = Decimal(str(self.amount))
        if self.amount <= 0:
            raise ValueError("amount must be positive")
        if not self.unique_reference:
            raise ValueError("unique_reference is required")
        for number in self.udf_fields:
            _check_udf_number(number)

    def set_udf(self, number: int, value: str) -> "PaymentRequest":
        _check_udf_number(number)
        self.udf_fields[number] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "Amount": format_amount(self.amount),
            "UniqueReference": self.unique_reference,
            "TransactionType": self.transaction_type.value,
            "IsTest": self.is_test,
        }
        optional = {
            "CustomerEmail": self.customer_email,
            "CustomerFirstName": self.customer_first_name,
            "CustomerLastName": self.customer_last_name,
            "CustomerPhone": self.customer_phone,
            "Description": self.description,
            "RedirectUrl": self.redirect_url,
            "CallbackUrl": self.callback_url,
            "CancelUrl": self.cancel_url,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        data.update(self.metadata)
        for number in sorted(self.udf_fields):
            data[f"UDF{number}"] = self.udf_fields[number]
        return data


def _check_udf_number(number: int) -> None:
    if number not in range(1, 6):
        raise ValueError("UDF field number must be between 1 and 5")


@dataclass
class TransactionRequest:
    """Follow-up operation (capture, refund, void) on an existing transaction."""

    transaction_id: str
    transaction_type: TransactionType
    amount: Decimal | None = None
    unique_reference: str | None = None
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "TransactionId": self.transaction_id,
            "TransactionType": self.transaction_type.value,
        }
        if self.amount is not None:
            data["Amount"] = format_amount(self.amount)
        if self.unique_reference is not None:
            data["UniqueReference"] = self.unique_reference
        if self.description is not None:
            data["Description"] = self.description
        return data


@dataclass
class PaymentResponse:
    success: bool
    transaction_id: str | None = None
    gateway_id: str | None = None
    status: TransactionStatus | None = None
    payment_url: str | None = None
    message: str | None = None
    process_id: str | None = None
    date_time: str | None = None
    raw: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict) -> "PaymentResponse":
        """Map a gateway response envelope. Raises ValueError on an unknown status."""
        result = data.get("result")
        if not isinstance(result, dict):
            result = {}
        status = result.get("status")
        return cls(
            success=bool(data.get("success", False)),
            transaction_id=result.get("transactionId"),
            gateway_id=result.get("gatewayId"),
            status=TransactionStatus(status) if status is not None else None,
            payment_url=result.get("paymentUrl"),
            message=data.get("message") or result.get("message"),
            process_id=data.get("processId"),
            date_time=data.get("dateTime"),
            raw=data,
        )
