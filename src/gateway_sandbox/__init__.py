from .notifier import WebhookNotifier
from .server import GatewaySandboxServer

__all__ = [
    "WebhookNotifier",
    "GatewaySandboxServer",
]
