import json
import uuid
from datetime import datetime, timezone

from src.utils.crypto import generate_signature


def _transaction_id(prefix: str = "TXN") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12].upper()}"


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class WebhookFactory:
    """Factory for gateway webhook bodies with sensible defaults."""

    @staticmethod
    def create_payload(status: str = "PROCESSED", **overrides) -> dict:
        transaction_type = "AUTH" if status == "AUTHORIZED" else "SALE"
        payload = {
            "transactionId": _transaction_id(),
            "gatewayId": f"GW_{uuid.uuid4().hex[:8]}",
            "status": status,
            "transactionType": transaction_type,
            "amount": 50.00,
            "currency": "EUR",
            "cardNumber": "4111****1111",
            "cardScheme": "VISA",
            "uniqueReference": f"ORDER_{uuid.uuid4().hex[:8]}",
            "customerEmail": "customer@example.com",
            "processedAt": _now(),
            "merchantId": "MERCHANT_TEST_001",
        }

        if status in ("PROCESSED", "AUTHORIZED"):
            payload["authCode"] = "AUTH123456"
            payload["bankResponse"] = "APPROVED"
            payload["threeDSecure"] = {"authenticated": True, "eci": "05"}
        elif status == "DECLINED":
            payload["bankResponse"] = "INSUFFICIENT_FUNDS"
            payload["declineReason"] = "Insufficient funds"

        payload.update(overrides)
        return payload

    @staticmethod
    def create_body(status: str = "PROCESSED", **overrides) -> bytes:
        return WebhookFactory.encode(WebhookFactory.create_payload(status, **overrides))

    @staticmethod
    def encode(payload: dict) -> bytes:
        return json.dumps(payload, default=str).encode("utf-8")

    @staticmethod
    def sign(body: bytes, secret: str) -> str:
        return generate_signature(body, secret)


class GatewayResponseFactory:
    """Factory for gateway API response envelopes."""

    @staticmethod
    def envelope(result, success: bool = True, **extra) -> dict:
        data = {
            "success": success,
            "result": result,
            "processId": f"PROC_{uuid.uuid4().hex[:12]}",
            "dateTime": _now(),
        }
        data.update(extra)
        return data

    @staticmethod
    def payment_created(transaction_id: str | None = None, **overrides) -> dict:
        transaction_id = transaction_id or _transaction_id()
        result = {
            "transactionId": transaction_id,
            "gatewayId": f"GW_{uuid.uuid4().hex[:8]}",
            "status": "PENDING",
            "paymentUrl": f"https://gpg.apcopay.com/pay/{transaction_id}",
            "amount": 50.00,
            "currency": "EUR",
        }
        result.update(overrides)
        return GatewayResponseFactory.envelope(result)

    @staticmethod
    def transaction_updated(transaction_id: str | None = None, status: str = "PROCESSED", **overrides) -> dict:
        """Response to a capture (PROCESSED), refund (REFUNDED) or void (CANCELLED)."""
        result = {
            "transactionId": transaction_id or _transaction_id(),
            "gatewayId": f"GW_{uuid.uuid4().hex[:8]}",
            "status": status,
            "amount": 50.00,
            "currency": "EUR",
        }
        result.update(overrides)
        return GatewayResponseFactory.envelope(result)

    @staticmethod
    def transaction_details(transaction_id: str | None = None, status: str = "PROCESSED") -> dict:
        result = WebhookFactory.create_payload(status, transactionId=transaction_id or _transaction_id())
        return GatewayResponseFactory.envelope(result)

    @staticmethod
    def transaction_list(count: int = 3) -> dict:
        transactions = [WebhookFactory.create_payload() for _ in range(count)]
        return GatewayResponseFactory.envelope({"transactions": transactions, "total": count})

    @staticmethod
    def error(message: str, errors: dict | None = None) -> dict:
        data = {"success": False, "message": message}
        if errors:
            data["errors"] = errors
        return data
