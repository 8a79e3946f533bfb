from .client import GpgClient
from .config import GatewayConfig

__all__ = [
    "GpgClient",
    "GatewayConfig",
]
