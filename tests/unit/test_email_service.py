"""
Unit tests for EmailService.

Tests send guards, Resend payload construction, provider failures and
review email rendering.
"""

from unittest.mock import MagicMock

import pytest

from app.models import ServiceDocument, ServiceRequest
from app.services.email_service import EmailService


@pytest.fixture
def mock_settings():
    """Create a mock settings object with email enabled."""
    settings = MagicMock()
    settings.EMAIL_ENABLED = True
    settings.RESEND_API_KEY = "re_test_key"
    settings.EMAIL_FROM = "Service Reviews <reviews@example.com>"
    return settings


@pytest.fixture
def mock_resend():
    resend = MagicMock()
    resend.Emails.send.return_value = {"id": "email-123"}
    return resend


def _service(**overrides) -> ServiceRequest:
    service = ServiceRequest(
        requester_email=overrides.pop("requester_email", "requester@example.com"),
        title=overrides.pop("title", "Quarterly filings"),
    )
    service.documents = [
        ServiceDocument(
            original_name="<b>report</b>.pdf",
            review_status="needs-update",
            review="Totals & dates don't match",
            suggestion="",
        )
    ]
    return service


class TestSendGuards:
    """Early exits that return False without calling the provider."""

    def test_email_disabled(self, mock_settings, mock_resend):
        mock_settings.EMAIL_ENABLED = False
        service = EmailService(mock_settings)
        service._resend_client = mock_resend

        assert service.send("a@example.com", "Subject", "<p>hi</p>") is False
        mock_resend.Emails.send.assert_not_called()

    def test_no_resend_key(self, mock_settings):
        mock_settings.RESEND_API_KEY = None

        assert EmailService(mock_settings).send("a@example.com", "Subject", "<p>hi</p>") is False


class TestSend:
    """Payload and provider error handling."""

    def test_payload_with_cc_and_reply_to(self, mock_settings, mock_resend):
        service = EmailService(mock_settings)
        service._resend_client = mock_resend

        assert service.send("a@example.com", "Subject", "<p>hi</p>", cc="r@example.com", reply_to="r@example.com")

        params = mock_resend.Emails.send.call_args[0][0]
        assert params == {
            "from": "Service Reviews <reviews@example.com>",
            "to": ["a@example.com"],
            "subject": "Subject",
            "html": "<p>hi</p>",
            "cc": ["r@example.com"],
            "reply_to": "r@example.com",
        }

    def test_payload_without_cc(self, mock_settings, mock_resend):
        service = EmailService(mock_settings)
        service._resend_client = mock_resend

        service.send("a@example.com", "Subject", "<p>hi</p>")

        params = mock_resend.Emails.send.call_args[0][0]
        assert "cc" not in params
        assert "reply_to" not in params

    def test_provider_error_returns_false(self, mock_settings, mock_resend):
        mock_resend.Emails.send.side_effect = Exception("rate limited")
        service = EmailService(mock_settings)
        service._resend_client = mock_resend

        assert service.send("a@example.com", "Subject", "<p>hi</p>") is False


class TestServiceReviewEmail:
    """Review notification content."""

    def test_subject_and_recipients(self, mock_settings, mock_resend):
        email_service = EmailService(mock_settings)
        email_service._resend_client = mock_resend

        sent = email_service.send_service_review(_service(), "Rita Reviewer", "rita@reviews.test", "See notes")

        assert sent is True
        params = mock_resend.Emails.send.call_args[0][0]
        assert params["subject"] == "Service Review Update - Quarterly filings"
        assert params["to"] == ["requester@example.com"]
        assert params["cc"] == ["rita@reviews.test"]
        assert params["reply_to"] == "rita@reviews.test"

    def test_subject_default_title(self, mock_settings, mock_resend):
        email_service = EmailService(mock_settings)
        email_service._resend_client = mock_resend

        email_service.send_service_review(_service(title=""), "Rita Reviewer", None)

        params = mock_resend.Emails.send.call_args[0][0]
        assert params["subject"] == "Service Review Update - Document Review"
        assert "cc" not in params

    def test_html_escapes_user_text(self, mock_settings):
        html = EmailService(mock_settings)._render_review_html(
            _service(), "Rita <admin>", "rita@reviews.test", "<script>alert(1)</script>"
        )

        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "&lt;b&gt;report&lt;/b&gt;.pdf" in html
        assert "Totals &amp; dates don&#x27;t match" in html
        assert "Rita &lt;admin&gt;" in html
        assert "No suggestions yet." in html
        assert "needs-update" in html

    def test_message_block_omitted_when_empty(self, mock_settings):
        html = EmailService(mock_settings)._render_review_html(_service(), "Rita", None, "")

        assert "Additional Message" not in html
        assert "Contact:" not in html
