"""Tests for the email helper."""

from unittest.mock import Mock

from applause_reporter.auto_api.client import AutoApi
from applause_reporter.email_helper import EmailHelper
from applause_reporter.models.dto import EmailAddressResponse, EmailFetchRequest

RAW_EMAIL = (
    b"From: noreply@example.com\r\n"
    b"To: signup-123@inbox.test\r\n"
    b"Subject: Welcome\r\n"
    b"Content-Type: text/plain; charset=utf-8\r\n"
    b"\r\n"
    b"Hello there\r\n"
)


async def test_get_inbox_and_email() -> None:
    """Generates an inbox and parses the email it received."""
    auto_api = Mock(spec=AutoApi)
    auto_api.get_email_address.return_value = EmailAddressResponse(
        email_address="signup-123@inbox.test"
    )
    auto_api.get_email_content.return_value = RAW_EMAIL

    inbox = await EmailHelper(auto_api=auto_api).get_inbox("signup")
    email = await inbox.get_email()

    assert inbox.email_address == "signup-123@inbox.test"
    auto_api.get_email_address.assert_awaited_once_with("signup")
    auto_api.get_email_content.assert_awaited_once_with(
        EmailFetchRequest(email_address="signup-123@inbox.test")
    )
    assert email["Subject"] == "Welcome"
    assert email.get_content().strip() == "Hello there"
