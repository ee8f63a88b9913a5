"""Configuration for the Auto-API client."""

from pydantic import PositiveInt, SecretStr, field_validator

from applause_reporter.models.base import BaseUrl, Model
from applause_reporter.models.dto import TestRailOptions

DEFAULT_AUTO_API_URL = "https://prod-auto-api.cloud.applause.com/"


class AutoApiConfig(Model):
    """Configuration for the Auto-API client."""

    auto_api_base_url: BaseUrl = DEFAULT_AUTO_API_URL
    api_key: SecretStr
    product_id: PositiveInt
    test_rail_options: TestRailOptions | None = None
    applause_test_cycle_id: int | None = None
    # Seconds, applies to each request independently
    timeout: float = 300.0

    @field_validator("api_key")
    @classmethod
    def api_key_not_empty(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("apiKey is an empty string!")
        return value
