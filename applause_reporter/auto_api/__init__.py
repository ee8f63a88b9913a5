"""Auto-API client module."""

from applause_reporter.auto_api.client import AutoApi, AutoApiError
from applause_reporter.auto_api.config import DEFAULT_AUTO_API_URL, AutoApiConfig

__all__ = ["DEFAULT_AUTO_API_URL", "AutoApi", "AutoApiConfig", "AutoApiError"]
