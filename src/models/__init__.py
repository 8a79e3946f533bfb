from .transaction import TransactionStatus, TransactionType
from .webhook import WebhookPayload
from .payment import PaymentRequest, PaymentResponse, TransactionRequest
from .delivery import NotificationAttempt

__all__ = [
    "TransactionStatus", "TransactionType",
    "WebhookPayload",
    "PaymentRequest", "PaymentResponse", "TransactionRequest",
    "NotificationAttempt",
]
