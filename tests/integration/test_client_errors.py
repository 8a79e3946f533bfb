"""Integration tests for GpgClient error translation."""

import logging
import socket
from decimal import Decimal

import pytest

from src.errors import ErrorKind, GatewayError
from src.gateway_client.client import GpgClient
from src.gateway_client.config import GatewayConfig
from src.models.payment import PaymentRequest
from src.utils.factories import GatewayResponseFactory


pytestmark = pytest.mark.integration


def _request() -> PaymentRequest:
    return PaymentRequest(amount=Decimal("50"), unique_reference="ORDER_ERR")


def _unused_port() -> int:
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class TestHttpErrors:
    """4xx / 5xx responses map to error kinds."""

    def test_401_is_authentication(self, client, sandbox):
        sandbox.set_response("POST", "/HostedPaymentPage", 401, GatewayResponseFactory.error("Invalid API key"))

        with pytest.raises(GatewayError) as exc_info:
            client.create_payment(_request())

        assert exc_info.value.kind is ErrorKind.AUTHENTICATION
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Invalid API key"

    @pytest.mark.parametrize("status_code", [400, 422])
    def test_validation_errors_carry_field_errors(self, client, sandbox, status_code):
        errors = {"Amount": ["must be greater than 0"]}
        sandbox.set_response(
            "POST", "/HostedPaymentPage", status_code, GatewayResponseFactory.error("Validation failed", errors),
        )

        with pytest.raises(GatewayError) as exc_info:
            client.create_payment(_request())

        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert exc_info.value.status_code == status_code
        assert exc_info.value.errors == errors

    def test_404_is_api_error(self, client, sandbox):
        sandbox.set_response("GET", "/Transaction/*", 404, GatewayResponseFactory.error("Transaction not found"))

        with pytest.raises(GatewayError) as exc_info:
            client.get_transaction("TXN_MISSING")

        assert exc_info.value.kind is ErrorKind.API
        assert exc_info.value.status_code == 404
        assert "Transaction not found" in exc_info.value.response_body

    def test_5xx_is_server_error(self, client, sandbox):
        sandbox.set_response("PUT", "/Transaction", 503, "Service Unavailable")

        with pytest.raises(GatewayError) as exc_info:
            client.refund_payment("TXN_1")

        assert exc_info.value.kind is ErrorKind.API
        assert exc_info.value.status_code == 503
        assert exc_info.value.message.startswith("Server error:")
        assert exc_info.value.response_body == "Service Unavailable"

    def test_errors_are_not_retried(self, client, sandbox):
        sandbox.set_response("PUT", "/Transaction", 500, GatewayResponseFactory.error("boom"))

        with pytest.raises(GatewayError):
            client.void_payment("TXN_1")

        assert len(sandbox.get_requests()) == 1

    def test_failures_are_logged(self, client, sandbox, caplog):
        sandbox.set_response("POST", "/HostedPaymentPage", 401, GatewayResponseFactory.error("nope"))

        with caplog.at_level(logging.WARNING, logger="src.gateway_client.client"):
            with pytest.raises(GatewayError):
                client.create_payment(_request())

        assert "401" in caplog.text
        assert "authentication" in caplog.text


class TestInvalidResponses:
    """2xx responses that cannot be understood."""

    def test_non_json_body(self, client, sandbox):
        sandbox.set_response("POST", "/HostedPaymentPage", 200, "<html>oops</html>")

        with pytest.raises(GatewayError) as exc_info:
            client.create_payment(_request())

        assert exc_info.value.kind is ErrorKind.API
        assert exc_info.value.response_body == "<html>oops</html>"

    def test_non_object_json_body(self, client, sandbox):
        sandbox.set_response("POST", "/Transactions/GetTransactions", 200, "[1, 2, 3]")

        with pytest.raises(GatewayError) as exc_info:
            client.get_transactions()

        assert exc_info.value.kind is ErrorKind.API

    def test_unknown_status_in_response(self, client, sandbox):
        sandbox.set_response(
            "PUT", "/Transaction", 200, GatewayResponseFactory.transaction_updated("TXN_1", status="SETTLED"),
        )

        with pytest.raises(GatewayError) as exc_info:
            client.capture_payment("TXN_1")

        assert exc_info.value.kind is ErrorKind.API
        assert "SETTLED" in exc_info.value.message


class TestNetworkErrors:
    """Transport failures map to NETWORK."""

    def test_connection_refused(self):
        config = GatewayConfig(api_key="k", timeout=2, api_base_url=f"http://127.0.0.1:{_unused_port()}/api")
        client = GpgClient(config)

        with pytest.raises(GatewayError) as exc_info:
            client.get_transaction("TXN_1")

        assert exc_info.value.kind is ErrorKind.NETWORK
        assert exc_info.value.status_code is None

    def test_timeout(self, sandbox):
        sandbox.set_response_delay(2)
        config = GatewayConfig(api_key="k", timeout=0.5, api_base_url=sandbox.api_url)
        client = GpgClient(config)

        with pytest.raises(GatewayError) as exc_info:
            client.get_transaction("TXN_1")

        assert exc_info.value.kind is ErrorKind.NETWORK
        assert "timed out" in exc_info.value.message
