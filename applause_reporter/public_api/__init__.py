"""Public-API client module."""

from applause_reporter.public_api.client import PublicApi, PublicApiError
from applause_reporter.public_api.config import PublicApiConfig
from applause_reporter.public_api.models import (
    SessionDetails,
    TestRunAutoResult,
    TestRunAutoResultStatus,
)

__all__ = [
    "PublicApi",
    "PublicApiConfig",
    "PublicApiError",
    "SessionDetails",
    "TestRunAutoResult",
    "TestRunAutoResultStatus",
]
