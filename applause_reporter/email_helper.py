"""Generated inboxes for tests that need to receive email."""

from dataclasses import dataclass, field
from email import policy
from email.message import EmailMessage
from email.parser import BytesParser
from typing import cast

from applause_reporter.auto_api.client import AutoApi
from applause_reporter.models.dto import EmailFetchRequest


@dataclass(frozen=True, kw_only=True)
class Inbox:
    """Email inbox behind a generated address."""

    email_address: str
    auto_api: AutoApi = field(repr=False)

    async def get_email(self) -> EmailMessage:
        """Download and parse the latest email sent to this inbox."""
        content = await self.auto_api.get_email_content(
            EmailFetchRequest(email_address=self.email_address)
        )
        message = BytesParser(policy=policy.default).parsebytes(content)
        return cast(EmailMessage, message)


@dataclass(frozen=True, kw_only=True)
class EmailHelper:
    """Creates inboxes through the Auto-API."""

    auto_api: AutoApi

    async def get_inbox(self, email_prefix: str) -> Inbox:
        """Generate an address for ``email_prefix`` and return its inbox."""
        response = await self.auto_api.get_email_address(email_prefix)
        return Inbox(email_address=response.email_address, auto_api=self.auto_api)
