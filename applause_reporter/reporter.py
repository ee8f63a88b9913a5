"""Reporting of test runs and their results to the Applause Auto-API."""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator, Callable, Sequence
from contextlib import asynccontextmanager
from pathlib import Path
from typing import NoReturn

from applause_reporter.auto_api.client import AutoApi, AutoApiError
from applause_reporter.auto_api.config import AutoApiConfig
from applause_reporter.heartbeat import HEARTBEAT_INTERVAL, TestRunHeartbeatService
from applause_reporter.models.dto import (
    AdditionalTestCaseParams,
    AdditionalTestCaseResultParams,
    AssetType,
    CreateTestCaseResult,
    SubmitTestCaseResult,
    TestResultStatus,
    TestRunCreate,
)
from applause_reporter.test_case import parse_test_case_name

log = logging.getLogger(__name__)

PROVIDER_URLS_FILE = "providerUrls.txt"


class RunStateError(RuntimeError):
    """Raised when a reporter operation is called out of order."""


class RunCreationError(RuntimeError):
    """Raised when the Auto-API refuses to create a test run."""


class RunReporter:
    """Correlates local test ids with Auto-API test results for one run.

    ``start_test_case`` and ``submit_test_case_result`` register their work
    as tasks keyed by the caller's local id before returning, so results can
    be reported without awaiting each call. ``runner_end`` drains everything
    registered so far.
    """

    def __init__(
        self,
        auto_api: AutoApi,
        test_run_id: int,
        heartbeat_service: TestRunHeartbeatService | None = None,
        output_dir: Path = Path("."),
        logger: logging.Logger | None = None,
    ) -> None:
        self.auto_api = auto_api
        self.test_run_id = test_run_id
        self.heartbeat_service = heartbeat_service
        self.output_dir = output_dir
        self.logger = logger or log
        self._uid_to_result_id: dict[str, asyncio.Task[int]] = {}
        self._result_submissions: dict[str, asyncio.Task[int | None]] = {}

    def start_test_case(
        self,
        local_id: str,
        test_case_name: str,
        params: AdditionalTestCaseParams | None = None,
    ) -> asyncio.Task[int]:
        """Create a test result and track its id under the local id.

        Case ids embedded in the name are extracted. Case ids set in
        ``params`` take precedence over the extracted ones.

        Returns:
            Task resolving to the Auto-API test result id

        Raises:
            ValueError: If the test case name is empty

        """
        if not test_case_name:
            self.logger.error("testCaseName is required")
            raise ValueError("testCaseName is required")

        parsed = parse_test_case_name(test_case_name, self.logger)
        fields = {
            "test_case_name": parsed.test_case_name,
            "test_case_id": parsed.test_rail_test_case_id,
            "itw_test_case_id": parsed.applause_test_case_id,
            "test_run_id": self.test_run_id,
        }
        if params is not None:
            fields |= params.model_dump(exclude_none=True)
        request = CreateTestCaseResult.model_validate(fields)
        creation = asyncio.create_task(self._create_result(request))
        self._uid_to_result_id[local_id] = creation
        return creation

    def submit_test_case_result(
        self,
        local_id: str,
        status: TestResultStatus,
        params: AdditionalTestCaseResultParams | None = None,
    ) -> asyncio.Task[int | None]:
        """Submit the status of the test result tracked under the local id.

        The submission waits for the result creation to finish first. When
        no test case was started for ``local_id`` nothing is sent and the task
        resolves to None.

        Returns:
            Task resolving to the Auto-API test result id

        """
        creation = self._uid_to_result_id.get(local_id)
        if creation is None:
            self.logger.warning(
                "No test case was started for id %s, result %s is not submitted",
                local_id,
                status,
            )
        submission = asyncio.create_task(
            self._submit_result(creation, status, params)
        )
        self._result_submissions[local_id] = submission
        return submission

    async def attach_test_case_asset(
        self,
        local_id: str,
        asset_name: str,
        provider_session_guid: str,
        asset_type: AssetType,
        asset: bytes,
    ) -> None:
        """Upload an asset for the test result tracked under the local id."""
        creation = self._uid_to_result_id.get(local_id)
        if creation is None:
            self.logger.warning(
                "No test case was started for id %s, asset %s is not uploaded",
                local_id,
                asset_name,
            )
            return
        result_id = await creation
        await self.auto_api.upload_asset(
            result_id, asset, asset_name, provider_session_guid, asset_type
        )

    async def runner_end(self) -> None:
        """Drain all pending work, end the run and save provider session links.

        Result creations registered so far are awaited before submissions, then
        the heartbeat is stopped and the run is ended. Provider session links
        are written as JSON to ``providerUrls.txt`` in ``output_dir``.
        """
        creations = list(self._uid_to_result_id.values())
        submissions = list(self._result_submissions.values())

        result_ids = await asyncio.gather(*creations)
        await asyncio.gather(*submissions)

        if self.heartbeat_service is not None:
            await self.heartbeat_service.end()
        await self.auto_api.end_test_run(self.test_run_id)

        links = await self.auto_api.get_provider_session_links(result_ids)
        if links:
            json_array = [
                link.model_dump(mode="json", by_alias=True) for link in links
            ]
            self.logger.info("Provider session links: %s", json.dumps(json_array))
            (self.output_dir / PROVIDER_URLS_FILE).write_text(
                json.dumps(json_array, indent=1)
            )

    async def _create_result(self, request: CreateTestCaseResult) -> int:
        response = await self.auto_api.start_test_case(request)
        return response.test_result_id

    async def _submit_result(
        self,
        creation: asyncio.Task[int] | None,
        status: TestResultStatus,
        params: AdditionalTestCaseResultParams | None,
    ) -> int | None:
        if creation is None:
            return None
        result_id = await creation
        await self.auto_api.submit_test_case_result(
            SubmitTestCaseResult(
                test_result_id=result_id,
                status=status,
                **(params.model_dump(exclude_none=True) if params else {}),
            )
        )
        return result_id


class RunInitializer:
    """Creates test runs and starts their heartbeat."""

    def __init__(
        self,
        auto_api: AutoApi,
        heartbeat_interval: float = HEARTBEAT_INTERVAL,
        output_dir: Path = Path("."),
        on_heartbeat_error: Callable[[Exception], None] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.auto_api = auto_api
        self.heartbeat_interval = heartbeat_interval
        self.output_dir = output_dir
        self.on_heartbeat_error = on_heartbeat_error
        self.logger = logger or log

    async def initialize_run(self, tests: Sequence[str] | None = None) -> RunReporter:
        """Create a test run and return a reporter for it.

        Args:
            tests: Test case names to pre-create, case ids are stripped

        Raises:
            RunCreationError: If the Auto-API refuses to create the run

        """
        cleaned_tests = [
            parse_test_case_name(test_name, self.logger).test_case_name
            for test_name in tests or []
        ]
        try:
            response = await self.auto_api.start_test_run(
                TestRunCreate(tests=cleaned_tests)
            )
        except AutoApiError as exc:
            self.logger.error(
                "Failed to create Applause Test Run: "
                "received error response with status %s.",
                exc.status,
            )
            raise RunCreationError("Unable to create test run") from exc

        run_id = response.run_id
        self.logger.info("Test Run %s initialized", run_id)

        heartbeat_service = TestRunHeartbeatService(
            test_run_id=run_id,
            auto_api=self.auto_api,
            interval=self.heartbeat_interval,
            on_error=self.on_heartbeat_error,
        )
        await heartbeat_service.start()
        return RunReporter(
            self.auto_api,
            run_id,
            heartbeat_service,
            output_dir=self.output_dir,
            logger=self.logger,
        )


class ApplauseReporter:
    """Reports a single test run, enforcing start, test cases, end ordering.

    Build it around an existing ``AutoApi`` client, or from configuration with
    ``ApplauseReporter.from_config``. Passing ``run_id`` resumes a run that
    was started elsewhere instead of creating a new one. Once ``runner_end``
    was called, the run accepts no further operations.
    """

    def __init__(
        self,
        auto_api: AutoApi,
        run_id: int | None = None,
        heartbeat_interval: float = HEARTBEAT_INTERVAL,
        output_dir: Path = Path("."),
        on_heartbeat_error: Callable[[Exception], None] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.auto_api = auto_api
        self._initializer = RunInitializer(
            auto_api,
            heartbeat_interval=heartbeat_interval,
            output_dir=output_dir,
            on_heartbeat_error=on_heartbeat_error,
            logger=logger,
        )
        self._reporter: RunReporter | None = None
        self._initializing: asyncio.Task[RunReporter] | None = None
        self._run_started = False
        self._run_ending = False
        self._run_finished = False
        if run_id is not None:
            self._reporter = RunReporter(
                auto_api, run_id, output_dir=output_dir, logger=logger
            )
            self._run_started = True

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls,
        config: AutoApiConfig,
        run_id: int | None = None,
        heartbeat_interval: float = HEARTBEAT_INTERVAL,
        output_dir: Path = Path("."),
        on_heartbeat_error: Callable[[Exception], None] | None = None,
        logger: logging.Logger | None = None,
    ) -> AsyncGenerator["ApplauseReporter", None]:
        """Create reporter with a managed Auto-API client."""
        async with AutoApi.from_config(config) as auto_api:
            yield cls(
                auto_api,
                run_id=run_id,
                heartbeat_interval=heartbeat_interval,
                output_dir=output_dir,
                on_heartbeat_error=on_heartbeat_error,
                logger=logger,
            )

    async def runner_start(self, tests: Sequence[str] | None = None) -> int:
        """Create the test run.

        Returns:
            The test run id

        Raises:
            RunStateError: If a run was already started or finished

        """
        if self._reporter is not None or self._initializing is not None:
            _fail("Cannot start a run - run already started or run already finished")
        self._initializing = asyncio.create_task(
            self._initializer.initialize_run(tests)
        )
        self._reporter = await self._initializing
        self._run_started = True
        return self._reporter.test_run_id

    async def start_test_case(
        self,
        local_id: str,
        test_case_name: str,
        params: AdditionalTestCaseParams | None = None,
    ) -> int:
        """Start a test case, returning its Auto-API test result id."""
        reporter = await self._get_reporter(
            "Cannot start a test case for a run that was never initialized"
        )
        return await reporter.start_test_case(local_id, test_case_name, params)

    async def submit_test_case_result(
        self,
        local_id: str,
        status: TestResultStatus,
        params: AdditionalTestCaseResultParams | None = None,
    ) -> int | None:
        """Submit a test case status, returning its Auto-API test result id."""
        reporter = await self._get_reporter(
            "Cannot submit test case result for a run that was never initialized"
        )
        return await reporter.submit_test_case_result(local_id, status, params)

    async def attach_test_case_asset(
        self,
        local_id: str,
        asset_name: str,
        provider_session_guid: str,
        asset_type: AssetType,
        asset: bytes,
    ) -> None:
        """Attach an asset to a started test case."""
        reporter = await self._get_reporter(
            "Cannot attach an asset for a run that was never initialized"
        )
        await reporter.attach_test_case_asset(
            local_id, asset_name, provider_session_guid, asset_type, asset
        )

    async def runner_end(self) -> None:
        """Wait for all reported work and end the test run."""
        reporter = await self._get_reporter(
            "Cannot end a run that was never initialized"
        )
        self._run_ending = True
        await reporter.runner_end()
        self._run_finished = True

    def is_synchronized(self) -> bool:
        """Check that no run is in progress and no Auto-API call is in flight."""
        return (
            not self._run_started or self._run_finished
        ) and self.auto_api.calls_in_flight == 0

    async def _get_reporter(self, message: str) -> RunReporter:
        if self._run_ending:
            _fail("Cannot report to a run - run already finished")
        if self._reporter is not None:
            return self._reporter
        if self._initializing is None:
            _fail(message)
        reporter = await self._initializing
        if self._run_ending:
            _fail("Cannot report to a run - run already finished")
        return reporter


def _fail(message: str) -> NoReturn:
    log.error(message)
    raise RunStateError(message)
