"""Application configuration via environment variables."""

from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./wonderful_gateway.db"
    log_level: str = "INFO"

    # Merchant credential: bearer token for the API and AES-256 key for payloads
    merchant_key: SecretStr = SecretStr("")

    api_endpoint: str = "https://api.wonderful-one.test"
    hosted_ui_url: str = "https://wonderful-one.test"
    site_url: str = "http://localhost:8000"
    currency: str = "GBP"
    plugin_id: str = "wonderful_payments_gateway"
    plugin_version: str = "0.6.0"
    plain_permalinks: bool = False

    # Only disable for controlled test environments
    ssl_verify: bool = True
    http_timeout_seconds: float = 10.0
    banks_cache_seconds: int = 300

    provider: Literal["live", "mock"] = "live"
    mock_latency_ms: int = 100  # Simulated provider latency
    mock_status: str = "completed"  # Status the mock provider reports for every payment

    model_config = {"env_prefix": "WONDERFUL_", "env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def source_tag(self) -> str:
        return f"woocommerce_{self.plugin_version}"


settings = Settings()
