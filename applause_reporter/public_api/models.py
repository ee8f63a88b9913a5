"""Models for results submitted through the Public-API."""

from datetime import datetime
from enum import StrEnum

from applause_reporter.models.base import Model


class TestRunAutoResultStatus(StrEnum):
    """Final status of an automated test case result."""

    __test__ = False

    PASSED = "PASSED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"
    CANCELED = "CANCELED"
    ERROR = "ERROR"


class SessionDetailsValue(Model):
    """Capabilities of the session the test ran in."""

    device_name: str | None = None
    orientation: str | None = None
    platform_name: str | None = None
    platform_version: str | None = None
    browser_name: str | None = None
    browser_version: str | None = None


class SessionDetails(Model):
    """Session details attached to a result."""

    value: SessionDetailsValue


class TestRunAutoResult(Model):
    """Result of an automated test case within a test cycle."""

    __test__ = False

    test_cycle_id: int
    status: TestRunAutoResultStatus
    failure_reason: str | None = None
    session_details_json: SessionDetails | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
