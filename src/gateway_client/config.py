from dataclasses import dataclass

API_BASE_URL = "https://gpgapi.apcopay.com/api"
HPP_BASE_URL = "https://gpg.apcopay.com/pay"


@dataclass(frozen=True)
class GatewayConfig:
    """Connection settings for GpgClient.

    The base URLs default to the production gateway; point them at a sandbox
    (see src.gateway_sandbox) for local development and tests.
    """

    api_key: str
    test_mode: bool = False
    timeout: float = 30
    api_base_url: str = API_BASE_URL
    hpp_base_url: str = HPP_BASE_URL

    def __post_init__(self):
        if not self.api_key:
            raise ValueError("api_key is required")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    def __repr__(self) -> str:
        return (
            f"GatewayConfig(api_key='***', test_mode={self.test_mode}, timeout={self.timeout}, "
            f"api_base_url={self.api_base_url!r}, hpp_base_url={self.hpp_base_url!r})"
        )
