"""Integration tests for the Auto-API client."""

from collections.abc import AsyncGenerator

import aiohttp
import pytest
from aioresponses import aioresponses as aioresponses_cls
from pydantic import SecretStr
from yarl import URL

from applause_reporter.auto_api import AutoApi, AutoApiConfig, AutoApiError
from applause_reporter.auto_api.client import SDK_VERSION
from applause_reporter.models.dto import (
    AssetType,
    CreateTestCaseResult,
    EmailFetchRequest,
    SubmitTestCaseResult,
    TestRailOptions,
    TestResultStatus,
    TestRunCreate,
)

API_BASE_URL = "http://auto-api.test"


@pytest.fixture
def config() -> AutoApiConfig:
    """Create test configuration."""
    return AutoApiConfig(
        auto_api_base_url=API_BASE_URL,
        api_key=SecretStr("test-key"),
        product_id=12,
    )


@pytest.fixture
async def auto_api(
    config: AutoApiConfig, aioresponses: aioresponses_cls
) -> AsyncGenerator[AutoApi, None]:
    """Create client with managed session."""
    async with AutoApi.from_config(config) as impl:
        yield impl


class TestStartTestRun:
    """Tests for start_test_run."""

    async def test_creates_run(
        self, auto_api: AutoApi, aioresponses: aioresponses_cls
    ) -> None:
        """Sends tests with product and SDK details, returns the run id."""
        url = f"{API_BASE_URL}/api/v1.0/test-run/create"
        aioresponses.post(url, status=200, payload={"runId": 55})

        response = await auto_api.start_test_run(TestRunCreate(tests=["A", "B"]))

        assert response.run_id == 55
        call = aioresponses.requests[("POST", URL(url))][0]
        assert call.kwargs["json"] == {
            "tests": ["A", "B"],
            "sdkVersion": SDK_VERSION,
            "productId": 12,
            "testRailReportingEnabled": False,
        }

    async def test_sends_test_rail_options(
        self, config: AutoApiConfig, aioresponses: aioresponses_cls
    ) -> None:
        """Copies TestRail settings and the test cycle into the request."""
        url = f"{API_BASE_URL}/api/v1.0/test-run/create"
        aioresponses.post(url, status=201, payload={"runId": 56})
        config = config.model_copy(
            update={
                "applause_test_cycle_id": 8,
                "test_rail_options": TestRailOptions(
                    project_id=1,
                    suite_id=2,
                    plan_name="plan",
                    run_name="run",
                    add_all_tests_to_plan=True,
                ),
            }
        )

        async with AutoApi.from_config(config) as auto_api:
            await auto_api.start_test_run(TestRunCreate())

        payload = aioresponses.requests[("POST", URL(url))][0].kwargs["json"]
        assert payload["itwTestCycleId"] == 8
        assert payload["testRailReportingEnabled"] is True
        assert payload["addAllTestsToPlan"] is True
        assert payload["testRailProjectId"] == 1
        assert payload["testRailSuiteId"] == 2
        assert payload["testRailPlanName"] == "plan"
        assert payload["testRailRunName"] == "run"
        assert "overrideTestRailRunNameUniqueness" not in payload

    async def test_raises_on_error_response(
        self, auto_api: AutoApi, aioresponses: aioresponses_cls
    ) -> None:
        """Raises AutoApiError carrying the status and body."""
        aioresponses.post(
            f"{API_BASE_URL}/api/v1.0/test-run/create", status=401, body="denied"
        )

        with pytest.raises(AutoApiError) as exc_info:
            await auto_api.start_test_run(TestRunCreate())

        assert exc_info.value.status == 401
        assert exc_info.value.body == "denied"
        assert auto_api.calls_in_flight == 0


async def test_end_test_run(auto_api: AutoApi, aioresponses: aioresponses_cls) -> None:
    """Ends the run with a COMPLETE status."""
    url = f"{API_BASE_URL}/api/v1.0/test-run/55?endingStatus=COMPLETE"
    aioresponses.delete(url, status=200)

    await auto_api.end_test_run(55)

    aioresponses.assert_called_once()  # type: ignore[no-untyped-call]


async def test_start_test_case(
    auto_api: AutoApi, aioresponses: aioresponses_cls
) -> None:
    """Creates a result, sending only defined fields."""
    url = f"{API_BASE_URL}/api/v1.0/test-result/create-result"
    aioresponses.post(url, status=200, payload={"testResultId": 101})

    response = await auto_api.start_test_case(
        CreateTestCaseResult(
            test_case_name="Case X", itw_test_case_id="9", test_run_id=55
        )
    )

    assert response.test_result_id == 101
    payload = aioresponses.requests[("POST", URL(url))][0].kwargs["json"]
    assert payload == {"testCaseName": "Case X", "itwTestCaseId": "9", "testRunId": 55}


async def test_submit_test_case_result(
    auto_api: AutoApi, aioresponses: aioresponses_cls
) -> None:
    """Submits the status of a result."""
    url = f"{API_BASE_URL}/api/v1.0/test-result"
    aioresponses.post(url, status=200)

    await auto_api.submit_test_case_result(
        SubmitTestCaseResult(
            test_result_id=101,
            status=TestResultStatus.FAILED,
            failure_reason="timeout",
            provider_session_guids=["guid-1"],
        )
    )

    payload = aioresponses.requests[("POST", URL(url))][0].kwargs["json"]
    assert payload == {
        "testResultId": 101,
        "status": "FAILED",
        "failureReason": "timeout",
        "providerSessionGuids": ["guid-1"],
    }


async def test_get_provider_session_links(
    auto_api: AutoApi, aioresponses: aioresponses_cls
) -> None:
    """Drops falsy ids and parses the returned links."""
    url = f"{API_BASE_URL}/api/v1.0/test-result/provider-info"
    aioresponses.post(
        url,
        status=200,
        payload=[
            {
                "testResultId": 101,
                "providerUrl": "https://provider.test/101",
                "providerSessionId": "session-101",
            }
        ],
    )

    links = await auto_api.get_provider_session_links([101, 0, None])

    assert aioresponses.requests[("POST", URL(url))][0].kwargs["json"] == [101]
    assert len(links) == 1
    assert links[0].test_result_id == 101
    assert links[0].provider_url == "https://provider.test/101"
    assert links[0].provider_session_id == "session-101"


async def test_send_sdk_heartbeat(
    auto_api: AutoApi, aioresponses: aioresponses_cls
) -> None:
    """Sends the run id to the heartbeat endpoint."""
    url = f"{API_BASE_URL}/api/v2.0/sdk-heartbeat"
    aioresponses.post(url, status=200)

    await auto_api.send_sdk_heartbeat(55)

    payload = aioresponses.requests[("POST", URL(url))][0].kwargs["json"]
    assert payload == {"testRunId": 55}


async def test_email_endpoints(
    auto_api: AutoApi, aioresponses: aioresponses_cls
) -> None:
    """Generates an address and downloads raw email content."""
    aioresponses.get(
        f"{API_BASE_URL}/api/v1.0/email/get-address?prefix=signup",
        status=200,
        payload={"emailAddress": "signup-1@inbox.test"},
    )
    download_url = f"{API_BASE_URL}/api/v1.0/email/download-email"
    aioresponses.post(download_url, status=200, body=b"Subject: Hi\r\n\r\nBody")

    address = await auto_api.get_email_address("signup")
    content = await auto_api.get_email_content(
        EmailFetchRequest(email_address=address.email_address)
    )

    assert address.email_address == "signup-1@inbox.test"
    assert content == b"Subject: Hi\r\n\r\nBody"
    payload = aioresponses.requests[("POST", URL(download_url))][0].kwargs["json"]
    assert payload == {"emailAddress": "signup-1@inbox.test"}


async def test_upload_asset(auto_api: AutoApi, aioresponses: aioresponses_cls) -> None:
    """Uploads the asset as multipart form data."""
    url = f"{API_BASE_URL}/api/v1.0/test-result/101/upload"
    aioresponses.post(url, status=200)

    await auto_api.upload_asset(
        101, b"png-bytes", "shot.png", "guid-1", AssetType.SCREENSHOT
    )

    form = aioresponses.requests[("POST", URL(url))][0].kwargs["data"]
    assert isinstance(form, aiohttp.FormData)


async def test_tracks_calls_in_flight(
    auto_api: AutoApi, aioresponses: aioresponses_cls
) -> None:
    """Counts a request while it is running and releases it afterwards."""
    observed: list[int] = []

    def callback(url: URL, **kwargs: object) -> None:
        observed.append(auto_api.calls_in_flight)

    aioresponses.post(
        f"{API_BASE_URL}/api/v2.0/sdk-heartbeat", status=200, callback=callback
    )

    await auto_api.send_sdk_heartbeat(55)

    assert observed == [1]
    assert auto_api.calls_in_flight == 0


async def test_keeps_base_url_path(
    config: AutoApiConfig, aioresponses: aioresponses_cls
) -> None:
    """Requests go below the path of the configured base URL."""
    url = f"{API_BASE_URL}/applause/api/v2.0/sdk-heartbeat"
    aioresponses.post(url, status=200)
    config = config.model_copy(
        update={"auto_api_base_url": f"{API_BASE_URL}/applause/"}
    )

    async with AutoApi.from_config(config) as auto_api:
        await auto_api.send_sdk_heartbeat(55)

    payload = aioresponses.requests[("POST", URL(url))][0].kwargs["json"]
    assert payload == {"testRunId": 55}
