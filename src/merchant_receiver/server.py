import json
import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Self

from src.errors import ErrorKind, InvalidSignatureError
from src.models.transaction import TransactionStatus
from src.models.webhook import WebhookPayload
from src.webhook_verifier.verifier import SIGNATURE_HEADER, WebhookVerifier

logger = logging.getLogger(__name__)


class _WebhookHandler(BaseHTTPRequestHandler):
    """Answers 200 for accepted notifications, 403 for forged and 400 for malformed ones."""

    def do_POST(self):
        content_length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(content_length)

        server_config = self.server.config  # type: ignore[attr-defined]
        secret = server_config["signature_secret"]
        signature = self.headers.get(SIGNATURE_HEADER)

        if secret and not signature:
            logger.warning("Rejected webhook without %s header", SIGNATURE_HEADER)
            self._respond(403, {"error": "missing signature"})
            return

        try:
            payload = server_config["verifier"].parse(body, signature if secret else None, secret)
        except InvalidSignatureError as exc:
            if exc.kind is ErrorKind.FORGED:
                logger.warning("Rejected webhook with invalid signature from %s", self.client_address[0])
            else:
                logger.info("Rejected webhook (%s): %s; body=%r", exc.kind.value, exc, body[:512])
            self._respond(exc.http_status, {"error": str(exc)})
            return

        # Gateways redeliver; (transaction id, status) is the idempotency key.
        key = (payload.transaction_id, payload.status)
        with server_config["lock"]:
            if key in server_config["processed_ids"]:
                server_config["duplicate_count"] += 1
                duplicate = True
            else:
                server_config["processed_ids"].add(key)
                server_config["received"].append(payload)
                duplicate = False

        if duplicate:
            self._respond(200, {"status": "already_processed"})
            return

        callback = server_config["on_payload"]
        if callback is not None:
            try:
                callback(payload)
            except Exception:
                logger.exception("Processing failed for webhook %s (%s)", payload.transaction_id, payload.status.value)
                with server_config["lock"]:
                    server_config["processed_ids"].discard(key)
                    server_config["received"].remove(payload)
                self._respond(500, {"error": "processing failed"})
                return

        self._respond(200, {"status": "ok"})

    def _respond(self, code: int, body: dict):
        raw = json.dumps(body).encode()
        self.send_response(code)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(raw)))
        self.end_headers()
        self.wfile.write(raw)

    def log_message(self, format, *args):
        logger.debug("receiver: " + format, *args)


class MerchantWebhookServer:
    """Reference merchant endpoint for gateway notifications.

    Shows how an application wraps WebhookVerifier: it verifies and parses
    each POST, maps rejections to 403/400 and deduplicates redeliveries by
    transaction id and status, so a REFUNDED notice for an already
    processed id is a new delivery. Business processing belongs in
    ``on_payload``; if it raises, the notification is forgotten and answered
    500 so the gateway delivers it again.
    """

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 0,
        secret: str | None = None,
        verifier: WebhookVerifier | None = None,
        on_payload=None,
    ):
        self._host = host
        self._port = port
        self._config = {
            "signature_secret": secret,
            "verifier": verifier or WebhookVerifier(),
            "on_payload": on_payload,
            "received": [],
            "processed_ids": set(),
            "duplicate_count": 0,
            "lock": threading.Lock(),
        }
        self._server: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    def enable_signature_verification(self, secret: str) -> Self:
        self._config["signature_secret"] = secret
        return self

    def start(self) -> None:
        self._server = ThreadingHTTPServer((self._host, self._port), _WebhookHandler)
        self._server.config = self._config  # type: ignore[attr-defined]
        # Get the actual port (useful when port=0)
        self._port = self._server.server_address[1]
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._server:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
        if self._thread:
            self._thread.join(timeout=5)
            self._thread = None

    @property
    def url(self) -> str:
        return f"http://{self._host}:{self._port}/webhook"

    @property
    def port(self) -> int:
        return self._port

    def get_received_payloads(self) -> list[WebhookPayload]:
        with self._config["lock"]:
            return list(self._config["received"])

    def get_processed_count(self) -> int:
        with self._config["lock"]:
            return len(self._config["received"])

    def get_duplicate_count(self) -> int:
        with self._config["lock"]:
            return self._config["duplicate_count"]

    def was_transaction_processed(self, transaction_id: str, status: TransactionStatus | None = None) -> bool:
        with self._config["lock"]:
            return any(
                seen_id == transaction_id and (status is None or seen_status is status)
                for seen_id, seen_status in self._config["processed_ids"]
            )

    def clear(self) -> None:
        with self._config["lock"]:
            self._config["received"].clear()
            self._config["processed_ids"].clear()
            self._config["duplicate_count"] = 0
