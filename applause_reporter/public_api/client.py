"""Public-API client used to submit automated results to test cycles."""

import logging
from collections.abc import AsyncGenerator, Iterator
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass, field

import aiohttp
from yarl import URL

from applause_reporter.public_api.config import PublicApiConfig
from applause_reporter.public_api.models import TestRunAutoResult

log = logging.getLogger(__name__)

# Seconds
PUBLIC_API_TIMEOUT = 10.0


class PublicApiError(Exception):
    """Raised when the Public-API answers with a non-success status."""

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"Public-API request failed: {status} {body}")
        self.status = status
        self.body = body


@dataclass(kw_only=True)
class PublicApi:
    """Client for the Public-API."""

    config: PublicApiConfig
    session: aiohttp.ClientSession = field(repr=False)
    _calls_in_flight: int = field(default=0, init=False, repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: PublicApiConfig
    ) -> AsyncGenerator["PublicApi", None]:
        """Create client with managed session lifecycle."""
        headers = {
            "X-Api-Key": config.api_key.get_secret_value(),
            "Accept": "application/json",
        }
        async with aiohttp.ClientSession(
            base_url=URL(config.public_api_base_url).origin(),
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=PUBLIC_API_TIMEOUT),
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
        base_path = URL(self.config.public_api_base_url).path.rstrip("/")
        return f"{base_path}{endpoint}"

    async def submit_result(self, test_case_id: int, info: TestRunAutoResult) -> None:
        """Submit the result of a test case to its test cycle."""
        with self._track_call():
            async with self.session.post(
                self._path(f"/v2/test-case-results/{test_case_id}/submit"),
                json=info.to_wire(),
            ) as response:
                if not 200 <= response.status < 300:
                    text = await response.text()
                    log.error(
                        "Public-Api returned error-code [%s] with error [%s]",
                        response.status,
                        text,
                    )
                    raise PublicApiError(response.status, text)
