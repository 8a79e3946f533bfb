from collections.abc import Iterable, Mapping
from typing import Any


# Candidate keys per logical field, in lookup order. The gateway has been seen
# sending both camelCase and PascalCase spellings of the same field.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "transaction_id": ("transactionId", "TransactionId"),
    "gateway_id": ("gatewayId", "GatewayId"),
    "status": ("status", "Status"),
    "transaction_type": ("transactionType", "TransactionType"),
    "amount": ("amount", "Amount"),
    "currency": ("currency", "Currency"),
    "auth_code": ("authCode", "AuthCode"),
    "card_number": ("cardNumber", "CardNumber"),
    "card_scheme": ("cardScheme", "CardScheme"),
    "bank_response": ("bankResponse", "BankResponse"),
    "unique_reference": ("uniqueReference", "UniqueReference"),
    "customer_email": ("customerEmail", "CustomerEmail"),
    "three_d_secure": ("threeDSecure", "ThreeDSecure"),
    "processed_at": ("processedAt", "ProcessedAt"),
    **{f"udf{n}": (f"udf{n}", f"Udf{n}", f"UDF{n}") for n in range(1, 6)},
}


def first_present(data: Mapping[str, Any], keys: Iterable[str]) -> Any | None:
    """Return the value of the first key that is present and not null."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def lookup(data: Mapping[str, Any], field: str) -> Any | None:
    return first_present(data, FIELD_ALIASES[field])
