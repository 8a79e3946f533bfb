from .verifier import SIGNATURE_HEADER, WebhookVerifier

__all__ = [
    "SIGNATURE_HEADER",
    "WebhookVerifier",
]
