import hashlib
import json
from decimal import Decimal

from src.errors import ErrorKind, InvalidSignatureError
from src.models.webhook import WebhookPayload
from src.utils.crypto import verify_signature

SIGNATURE_HEADER = "X-GPG-Signature"


class WebhookVerifier:
    """Authenticates and parses inbound gateway notifications.

    Holds no mutable state, so one instance can be shared between request
    handlers running on different threads.
    """

    def __init__(self, algorithm=hashlib.sha256):
        self.algorithm = algorithm

    def verify_signature(self, raw_body: bytes | str, provided_signature: str, shared_secret: str) -> bool:
        return verify_signature(raw_body, shared_secret, provided_signature, self.algorithm)

    def parse(
        self,
        raw_body: bytes | str,
        provided_signature: str | None = None,
        shared_secret: str | None = None,
    ) -> WebhookPayload:
        """Verify (when a signature and secret are given) and parse a webhook body.

        If either the signature or the secret is None the check is skipped.
        Deciding whether unsigned notifications can be trusted is up to the
        caller; this is meant for local testing.

        Raises:
            InvalidSignatureError: kind FORGED when the signature does not
                match, MALFORMED when the body is not a JSON object, and
                SCHEMA_MISMATCH when the object is not a usable notification.
        """
        if provided_signature is not None and shared_secret is not None:
            if not self.verify_signature(raw_body, provided_signature, shared_secret):
                raise InvalidSignatureError("Webhook signature verification failed", kind=ErrorKind.FORGED)

        return WebhookPayload.from_dict(self._decode(raw_body))

    @staticmethod
    def _decode(raw_body: bytes | str) -> dict:
        try:
            data = json.loads(raw_body, parse_float=Decimal)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError, RecursionError) as e:
            raise InvalidSignatureError(f"invalid payload: {e}", kind=ErrorKind.MALFORMED) from None
        if not isinstance(data, dict):
            raise InvalidSignatureError(
                f"invalid payload: expected a JSON object, got {type(data).__name__}",
                kind=ErrorKind.MALFORMED,
            )
        return data
