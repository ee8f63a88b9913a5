"""Configuration for the Public-API client."""

from pydantic import PositiveInt, SecretStr, field_validator

from applause_reporter.models.base import BaseUrl, Model

DEFAULT_PUBLIC_API_URL = "https://api.applause.com/"


class PublicApiConfig(Model):
    """Configuration for the Public-API client."""

    public_api_base_url: BaseUrl = DEFAULT_PUBLIC_API_URL
    api_key: SecretStr
    product_id: PositiveInt
    applause_test_cycle_id: int | None = None

    @field_validator("api_key")
    @classmethod
    def api_key_not_empty(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("apiKey is an empty string!")
        return value
