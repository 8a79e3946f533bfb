import logging
from decimal import Decimal
from urllib.parse import quote

import requests

from src.errors import ErrorKind, GatewayError
from src.gateway_client.config import GatewayConfig
from src.models.payment import PaymentRequest, PaymentResponse, TransactionRequest
from src.models.transaction import TransactionType
from src.models.webhook import WebhookPayload
from src.webhook_verifier.verifier import WebhookVerifier

logger = logging.getLogger(__name__)


class GpgClient:
    """Client for the Malta Government Payment Gateway REST API.

    Every failure is raised as GatewayError; inspect ``kind`` to tell network
    problems, rejected credentials, validation errors and other API errors
    apart. Requests are never retried.
    """

    def __init__(
        self,
        config: GatewayConfig,
        session: requests.Session | None = None,
        verifier: WebhookVerifier | None = None,
    ):
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        self.verifier = verifier or WebhookVerifier()

    @property
    def test_mode(self) -> bool:
        return self.config.test_mode

    def create_payment(self, request: PaymentRequest) -> PaymentResponse:
        """Create a Hosted Payment Page transaction.

        In test mode every payment is flagged ``IsTest`` regardless of the
        request's own setting.
        """
        body = request.to_dict()
        if self.config.test_mode:
            body["IsTest"] = True
        return self._to_response(self._request("POST", "/HostedPaymentPage", json_body=body))

    def capture_payment(
        self,
        transaction_id: str,
        amount: Decimal | None = None,
        unique_reference: str | None = None,
    ) -> PaymentResponse:
        """Capture a pre-authorized payment; pass ``amount`` for a partial capture."""
        request = TransactionRequest(
            transaction_id=transaction_id,
            transaction_type=TransactionType.CAPTURE,
            amount=amount,
            unique_reference=unique_reference,
        )
        return self._to_response(self._request("PUT", "/Transaction", json_body=request.to_dict()))

    def refund_payment(
        self,
        transaction_id: str,
        amount: Decimal | None = None,
        unique_reference: str | None = None,
    ) -> PaymentResponse:
        """Refund a processed payment; pass ``amount`` for a partial refund."""
        request = TransactionRequest(
            transaction_id=transaction_id,
            transaction_type=TransactionType.REFUND,
            amount=amount,
            unique_reference=unique_reference,
        )
        return self._to_response(self._request("PUT", "/Transaction", json_body=request.to_dict()))

    def void_payment(self, transaction_id: str) -> PaymentResponse:
        request = TransactionRequest(transaction_id=transaction_id, transaction_type=TransactionType.VOID)
        return self._to_response(self._request("PUT", "/Transaction", json_body=request.to_dict()))

    def get_transaction(self, transaction_id: str) -> dict:
        return self._request("GET", f"/Transaction/{quote(transaction_id, safe='')}")

    def get_transactions(self, filters: dict | None = None) -> dict:
        return self._request("POST", "/Transactions/GetTransactions", json_body=filters or {})

    def build_payment_page_url(self, transaction_id: str) -> str:
        return f"{self.config.hpp_base_url.rstrip('/')}/{quote(transaction_id, safe='')}"

    def verify_webhook_signature(self, payload: bytes | str, signature: str, secret: str) -> bool:
        return self.verifier.verify_signature(payload, signature, secret)

    def parse_webhook(
        self,
        payload: bytes | str,
        signature: str | None = None,
        secret: str | None = None,
    ) -> WebhookPayload:
        return self.verifier.parse(payload, signature, secret)

    def _request(self, method: str, endpoint: str, json_body: dict | None = None) -> dict:
        url = f"{self.config.api_base_url.rstrip('/')}{endpoint}"
        logger.debug("%s %s", method, endpoint)

        try:
            resp = self.session.request(method, url, json=json_body, timeout=self.config.timeout)
        except requests.exceptions.Timeout as e:
            logger.warning("%s %s timed out after %ss", method, endpoint, self.config.timeout)
            raise GatewayError(f"Request timed out: {e}", kind=ErrorKind.NETWORK) from e
        except requests.exceptions.ConnectionError as e:
            logger.warning("%s %s connection failed", method, endpoint)
            raise GatewayError(f"Connection failed: {e}", kind=ErrorKind.NETWORK) from e
        except requests.exceptions.RequestException as e:
            logger.warning("%s %s failed: %s", method, endpoint, e)
            raise GatewayError(f"Request failed: {e}", kind=ErrorKind.NETWORK) from e

        if resp.status_code >= 400:
            error = self._error_for(resp)
            logger.warning("%s %s returned %s (%s)", method, endpoint, resp.status_code, error.kind.value)
            raise error

        try:
            data = resp.json()
        except ValueError:
            raise GatewayError(
                "Invalid JSON response",
                kind=ErrorKind.API,
                status_code=resp.status_code,
                response_body=resp.text,
            ) from None
        if not isinstance(data, dict):
            raise GatewayError(
                "Invalid JSON response: expected an object",
                kind=ErrorKind.API,
                status_code=resp.status_code,
                response_body=resp.text,
            )
        return data

    @staticmethod
    def _error_for(resp: requests.Response) -> GatewayError:
        body = resp.text
        try:
            error_data = resp.json()
        except ValueError:
            error_data = None
        if not isinstance(error_data, dict):
            error_data = {}

        status_code = resp.status_code
        message = error_data.get("message") or f"HTTP {status_code} {resp.reason or ''}".strip()
        errors = error_data.get("errors") or []

        if status_code == 401:
            kind = ErrorKind.AUTHENTICATION
        elif status_code in (400, 422):
            kind = ErrorKind.VALIDATION
        else:
            kind = ErrorKind.API
            if status_code >= 500:
                message = f"Server error: {message}"

        return GatewayError(message, kind=kind, status_code=status_code, response_body=body, errors=errors)

    @staticmethod
    def _to_response(data: dict) -> PaymentResponse:
        try:
            return PaymentResponse.from_dict(data)
        except ValueError as e:
            raise GatewayError(f"Unexpected response: {e}", kind=ErrorKind.API) from e
