import pytest

from src.gateway_client.client import GpgClient
from src.gateway_client.config import GatewayConfig
from src.gateway_sandbox.notifier import WebhookNotifier
from src.gateway_sandbox.server import GatewaySandboxServer
from src.merchant_receiver.server import MerchantWebhookServer
from src.utils.factories import GatewayResponseFactory, WebhookFactory
from src.webhook_verifier.verifier import WebhookVerifier


WEBHOOK_SECRET = "test_webhook_secret_12345"
API_KEY = "test_api_key"


@pytest.fixture
def webhook_secret():
    return WEBHOOK_SECRET


@pytest.fixture
def verifier():
    return WebhookVerifier()


@pytest.fixture
def sandbox():
    server = GatewaySandboxServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def client(sandbox):
    config = GatewayConfig(api_key=API_KEY, timeout=5, api_base_url=sandbox.api_url)
    return GpgClient(config)


@pytest.fixture
def merchant_server():
    server = MerchantWebhookServer(secret=WEBHOOK_SECRET)
    server.start()
    yield server
    server.stop()


@pytest.fixture
def merchant_server_no_auth():
    """Merchant server that accepts unsigned notifications."""
    server = MerchantWebhookServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def notifier():
    return WebhookNotifier(WEBHOOK_SECRET, timeout_seconds=5)


@pytest.fixture
def webhook_factory():
    return WebhookFactory


@pytest.fixture
def response_factory():
    return GatewayResponseFactory
