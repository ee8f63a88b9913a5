"""Models for requests and responses exchanged with the Auto-API."""

from collections.abc import Sequence
from enum import StrEnum

from pydantic import Field

from applause_reporter.models.base import Model


class TestResultStatus(StrEnum):
    """Status of a single test result."""

    __test__ = False

    NOT_RUN = "NOT_RUN"
    IN_PROGRESS = "IN_PROGRESS"
    PASSED = "PASSED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"
    CANCELED = "CANCELED"
    ERROR = "ERROR"


class AssetType(StrEnum):
    """Kind of asset uploaded against a test result."""

    SCREENSHOT = "SCREENSHOT"
    FAILURE_SCREENSHOT = "FAILURE_SCREENSHOT"
    VIDEO = "VIDEO"
    NETWORK_HAR = "NETWORK_HAR"
    VITALS_LOG = "VITALS_LOG"
    CONSOLE_LOG = "CONSOLE_LOG"
    NETWORK_LOG = "NETWORK_LOG"
    DEVICE_LOG = "DEVICE_LOG"
    SELENIUM_LOG = "SELENIUM_LOG"
    SELENIUM_LOG_JSON = "SELENIUM_LOG_JSON"
    BROWSER_LOG = "BROWSER_LOG"
    FRAMEWORK_LOG = "FRAMEWORK_LOG"
    EMAIL = "EMAIL"
    PAGE_SOURCE = "PAGE_SOURCE"
    CODE_BUNDLE = "CODE_BUNDLE"
    RESULTS_ZIP = "RESULTS_ZIP"
    SESSION_DETAILS = "SESSION_DETAILS"
    DEVICE_DETAILS = "DEVICE_DETAILS"
    UNKNOWN = "UNKNOWN"


class TestRailOptions(Model):
    """TestRail settings. Their presence enables TestRail reporting."""

    __test__ = False

    project_id: int
    suite_id: int
    plan_name: str
    run_name: str
    add_all_tests_to_plan: bool | None = None
    override_test_rail_run_uniqueness: bool | None = None


class TestRunCreate(Model):
    """Request used to create a new test run."""

    __test__ = False

    tests: Sequence[str] = Field(
        default_factory=list, description="Test case names to pre-create"
    )
    itw_test_cycle_id: int | None = None


class TestRunCreateResponse(Model):
    """Response to a test run creation request."""

    __test__ = False

    run_id: int


class AdditionalTestCaseParams(Model):
    """Optional caller-supplied fields for test result creation.

    Defined case ids take precedence over the ids parsed from the test name.
    """

    provider_session_ids: Sequence[str] | None = None
    test_case_id: str | None = None
    itw_test_case_id: str | None = None


class CreateTestCaseResult(AdditionalTestCaseParams):
    """Request marking the start of a test result."""

    test_run_id: int
    test_case_name: str


class CreateTestCaseResultResponse(Model):
    """Response to a test result creation request."""

    test_result_id: int


class AdditionalTestCaseResultParams(Model):
    """Optional caller-supplied fields for test result submission."""

    provider_session_guids: Sequence[str] | None = None
    test_rail_case_id: int | None = None
    itw_case_id: int | None = None
    failure_reason: str | None = None


class SubmitTestCaseResult(AdditionalTestCaseResultParams):
    """Request submitting the final status of an in-progress test result."""

    test_result_id: int
    status: TestResultStatus


class TestResultProviderInfo(Model):
    """Provider session link for a test result, returned at the end of a run."""

    __test__ = False

    test_result_id: int
    provider_url: str
    provider_session_id: str


class EmailAddressResponse(Model):
    """Generated email address for testing."""

    email_address: str


class EmailFetchRequest(Model):
    """Request to download the latest email sent to an address."""

    email_address: str
