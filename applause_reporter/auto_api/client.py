"""Auto-API client used to report test runs and results."""

import logging
from collections.abc import AsyncGenerator, Iterator, Sequence
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError, version
from typing import Any

import aiohttp
from yarl import URL

from applause_reporter.auto_api.config import AutoApiConfig
from applause_reporter.models.dto import (
    AssetType,
    CreateTestCaseResult,
    CreateTestCaseResultResponse,
    EmailAddressResponse,
    EmailFetchRequest,
    SubmitTestCaseResult,
    TestResultProviderInfo,
    TestRunCreate,
    TestRunCreateResponse,
)

log = logging.getLogger(__name__)

try:
    SDK_VERSION = f"python:{version('applause-reporter')}"
except PackageNotFoundError:  # pragma: no cover
    SDK_VERSION = "python:unknown"


class AutoApiError(Exception):
    """Raised when the Auto-API answers with a non-success status."""

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"Auto-API request failed: {status} {body}")
        self.status = status
        self.body = body


@dataclass(kw_only=True)
class AutoApi:
    """Client for the Auto-API.

    Tracks the number of HTTP calls in progress so reporters can tell when
    their asynchronous work has finished.
    """

    config: AutoApiConfig
    session: aiohttp.ClientSession = field(repr=False)
    _calls_in_flight: int = field(default=0, init=False, repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: AutoApiConfig
    ) -> AsyncGenerator["AutoApi", None]:
        """Create client with managed session lifecycle."""
        headers = {
            "X-Api-Key": config.api_key.get_secret_value(),
            "Accept": "application/json",
        }
        async with aiohttp.ClientSession(
            base_url=URL(config.auto_api_base_url).origin(),
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=config.timeout),
        ) as session:
            yield cls(config=config, session=session)

    @property
    def calls_in_flight(self) -> int:
        """Number of requests currently in progress."""
        return self._calls_in_flight

    @contextmanager
    def _track_call(self) -> Iterator[None]:
        self._calls_in_flight += 1
        try:
            yield
        finally:
            self._calls_in_flight -= 1

    def _path(self, endpoint: str) -> str:
        # Session base_url holds only the origin, keep the configured path
        base_path = URL(self.config.auto_api_base_url).path.rstrip("/")
        return f"{base_path}{endpoint}"

    async def start_test_run(self, info: TestRunCreate) -> TestRunCreateResponse:
        """Create a new test run."""
        test_rail = self.config.test_rail_options
        payload: dict[str, Any] = {
            **info.to_wire(),
            "sdkVersion": SDK_VERSION,
            "productId": self.config.product_id,
            "itwTestCycleId": (
                self.config.applause_test_cycle_id or info.itw_test_cycle_id
            ),
            "testRailReportingEnabled": test_rail is not None,
        }
        if test_rail is not None:
            payload |= {
                "addAllTestsToPlan": test_rail.add_all_tests_to_plan,
                "testRailProjectId": test_rail.project_id,
                "testRailSuiteId": test_rail.suite_id,
                "testRailPlanName": test_rail.plan_name,
                "testRailRunName": test_rail.run_name,
                "overrideTestRailRunNameUniqueness": (
                    test_rail.override_test_rail_run_uniqueness
                ),
            }
        payload = {key: value for key, value in payload.items() if value is not None}

        with self._track_call():
            async with self.session.post(
                self._path("/api/v1.0/test-run/create"), json=payload
            ) as response:
                await _raise_for_status(response)
                data = await response.json()
        return TestRunCreateResponse.model_validate(data)

    async def end_test_run(self, test_run_id: int) -> None:
        """Mark a test run as complete."""
        with self._track_call():
            async with self.session.delete(
                self._path(f"/api/v1.0/test-run/{test_run_id}"),
                params={"endingStatus": "COMPLETE"},
            ) as response:
                await _raise_for_status(response)

    async def start_test_case(
        self, params: CreateTestCaseResult
    ) -> CreateTestCaseResultResponse:
        """Create an in-progress test result."""
        with self._track_call():
            async with self.session.post(
                self._path("/api/v1.0/test-result/create-result"), json=params.to_wire()
            ) as response:
                await _raise_for_status(response)
                data = await response.json()
        return CreateTestCaseResultResponse.model_validate(data)

    async def submit_test_case_result(self, params: SubmitTestCaseResult) -> None:
        """Submit the final status of a test result."""
        with self._track_call():
            async with self.session.post(
                self._path("/api/v1.0/test-result"), json=params.to_wire()
            ) as response:
                await _raise_for_status(response)

    async def get_provider_session_links(
        self, result_ids: Sequence[int | None]
    ) -> Sequence[TestResultProviderInfo]:
        """Fetch provider session links for the given test results.

        Falsy ids (None, 0) are dropped before the request.
        """
        valid_ids = [result_id for result_id in result_ids if result_id]
        with self._track_call():
            async with self.session.post(
                self._path("/api/v1.0/test-result/provider-info"), json=valid_ids
            ) as response:
                await _raise_for_status(response)
                data = await response.json()
        return [TestResultProviderInfo.model_validate(item) for item in data or []]

    async def send_sdk_heartbeat(self, test_run_id: int) -> None:
        """Signal that the test run is still alive."""
        with self._track_call():
            async with self.session.post(
                self._path("/api/v2.0/sdk-heartbeat"), json={"testRunId": test_run_id}
            ) as response:
                await _raise_for_status(response)

    async def get_email_address(self, email_prefix: str) -> EmailAddressResponse:
        """Generate an email address for the given prefix."""
        with self._track_call():
            async with self.session.get(
                self._path("/api/v1.0/email/get-address"),
                params={"prefix": email_prefix},
            ) as response:
                await _raise_for_status(response)
                data = await response.json()
        return EmailAddressResponse.model_validate(data)

    async def get_email_content(self, request: EmailFetchRequest) -> bytes:
        """Download the raw content of the latest email for an address."""
        with self._track_call():
            async with self.session.post(
                self._path("/api/v1.0/email/download-email"), json=request.to_wire()
            ) as response:
                await _raise_for_status(response)
                return await response.read()

    async def upload_asset(
        self,
        result_id: int,
        file: bytes,
        asset_name: str,
        provider_session_guid: str,
        asset_type: AssetType,
    ) -> None:
        """Upload an asset as multipart form data against a test result."""
        form = aiohttp.FormData()
        form.add_field("file", file, filename=asset_name)
        form.add_field("assetName", asset_name)
        form.add_field("providerSessionGuid", provider_session_guid)
        form.add_field("assetType", str(asset_type))

        with self._track_call():
            async with self.session.post(
                self._path(f"/api/v1.0/test-result/{result_id}/upload"), data=form
            ) as response:
                await _raise_for_status(response)


async def _raise_for_status(response: aiohttp.ClientResponse) -> None:
    if 200 <= response.status < 300:
        return
    text = await response.text()
    log.error(
        "Auto-Api returned error-code [%s] with error [%s]", response.status, text
    )
    raise AutoApiError(response.status, text)
