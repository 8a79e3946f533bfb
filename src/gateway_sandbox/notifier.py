import hashlib
import json
import time
import uuid
from datetime import datetime, timezone

import requests

from src.models.delivery import NotificationAttempt
from src.utils.crypto import generate_signature
from src.webhook_verifier.verifier import SIGNATURE_HEADER


class WebhookNotifier:
    """Pushes signed gateway notifications to a merchant endpoint.

    Each call is a single POST; failed notifications are not retried.
    """

    def __init__(self, secret: str | None, timeout_seconds: float = 30, algorithm=hashlib.sha256):
        self.secret = secret
        self.timeout_seconds = timeout_seconds
        self.algorithm = algorithm

    def notify(self, url: str, payload: dict | bytes, signature: str | None = None) -> NotificationAttempt:
        """POST a notification to ``url``.

        Dict payloads are JSON encoded. The body is signed with the notifier's
        secret unless ``signature`` is passed explicitly; with neither, no
        signature header is sent.
        """
        body = payload if isinstance(payload, bytes) else json.dumps(payload, default=str).encode("utf-8")
        if signature is None and self.secret is not None:
            signature = generate_signature(body, self.secret, self.algorithm)

        headers = {"Content-Type": "application/json"}
        if signature is not None:
            headers[SIGNATURE_HEADER] = signature

        transaction_id = ""
        if isinstance(payload, dict):
            transaction_id = str(payload.get("transactionId") or payload.get("TransactionId") or "")

        start = time.monotonic()
        status_code = None
        error = None

        try:
            resp = requests.post(url, data=body, headers=headers, timeout=self.timeout_seconds)
            status_code = resp.status_code
        except requests.exceptions.Timeout:
            error = "timeout"
        except requests.exceptions.ConnectionError:
            error = "connection_error"
        except requests.exceptions.RequestException as e:
            error = str(e)

        elapsed_ms = (time.monotonic() - start) * 1000

        return NotificationAttempt(
            attempt_id=f"ntf_{uuid.uuid4().hex[:16]}",
            transaction_id=transaction_id,
            url=url,
            status_code=status_code,
            timestamp=datetime.now(timezone.utc),
            response_time_ms=elapsed_ms,
            error=error,
        )
