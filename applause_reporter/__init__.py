"""Report automated test runs and results to Applause."""

from applause_reporter.auto_api import AutoApi, AutoApiConfig, AutoApiError
from applause_reporter.config import ApplauseConfig, ConfigError, load_config
from applause_reporter.email_helper import EmailHelper, Inbox
from applause_reporter.heartbeat import TestRunHeartbeatService
from applause_reporter.log_records import (
    APPLAUSE_LOG_RECORDS,
    ApplauseLogHandler,
    construct_default_logger,
)
from applause_reporter.models.dto import (
    AdditionalTestCaseParams,
    AdditionalTestCaseResultParams,
    AssetType,
    TestResultProviderInfo,
    TestResultStatus,
)
from applause_reporter.public_api import PublicApi, PublicApiConfig
from applause_reporter.reporter import (
    ApplauseReporter,
    RunCreationError,
    RunInitializer,
    RunReporter,
    RunStateError,
)
from applause_reporter.test_case import ParsedTestCaseName, parse_test_case_name

__all__ = [
    "APPLAUSE_LOG_RECORDS",
    "AdditionalTestCaseParams",
    "AdditionalTestCaseResultParams",
    "ApplauseConfig",
    "ApplauseLogHandler",
    "ApplauseReporter",
    "AssetType",
    "AutoApi",
    "AutoApiConfig",
    "AutoApiError",
    "ConfigError",
    "EmailHelper",
    "Inbox",
    "ParsedTestCaseName",
    "PublicApi",
    "PublicApiConfig",
    "RunCreationError",
    "RunInitializer",
    "RunReporter",
    "RunStateError",
    "TestResultProviderInfo",
    "TestResultStatus",
    "TestRunHeartbeatService",
    "construct_default_logger",
    "load_config",
    "parse_test_case_name",
]
