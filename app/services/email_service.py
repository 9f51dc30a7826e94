# app/services/email_service.py
"""
Email notification service for service request reviews.

Uses Resend API to send the HTML review summary to the requester, with the
reviewing admin in cc and as reply-to. Sending never raises: callers get a
boolean and decide how to report it.
"""

import html
import logging

from app.config import Settings, get_settings
from app.models import ServiceRequest

logger = logging.getLogger(__name__)


class EmailService:
    """
    Service for sending review notification emails.

    Uses Resend API for delivery.
    """

    def __init__(self, settings: Settings | None = None):
        """Initialize email service with settings."""
        self.settings = settings or get_settings()
        self._resend_client = None

    @property
    def resend_client(self):
        """Lazy-load Resend client."""
        if self._resend_client is None and self.settings.RESEND_API_KEY:
            import resend

            resend.api_key = self.settings.RESEND_API_KEY
            self._resend_client = resend
        return self._resend_client

    def send(
        self,
        to: str,
        subject: str,
        html_content: str,
        cc: str | None = None,
        reply_to: str | None = None,
    ) -> bool:
        """
        Send one email.

        Returns:
            True if the provider accepted the message, False otherwise
            (disabled, not configured, or provider error)
        """
        if not self.settings.EMAIL_ENABLED:
            logger.info("[EMAIL] Email notifications disabled")
            return False

        if not self.settings.RESEND_API_KEY:
            logger.warning("[EMAIL] RESEND_API_KEY not configured")
            return False

        params: dict = {
            "from": self.settings.EMAIL_FROM,
            "to": [to],
            "subject": subject,
            "html": html_content,
        }
        if cc:
            params["cc"] = [cc]
        if reply_to:
            params["reply_to"] = reply_to

        try:
            response = self.resend_client.Emails.send(params)
        except Exception as e:
            logger.error(f"[EMAIL] Failed to send email to {to}: {e}")
            return False

        logger.info(f"[EMAIL] Sent email to {to}, id={(response or {}).get('id')}")
        return True

    def send_service_review(
        self,
        service: ServiceRequest,
        reviewer_name: str,
        reviewer_email: str | None,
        email_message: str = "",
    ) -> bool:
        """Send the review summary for a service request to its requester."""
        subject = f"Service Review Update - {service.title or 'Document Review'}"
        html_content = self._render_review_html(service, reviewer_name, reviewer_email, email_message)
        return self.send(
            to=service.requester_email,
            subject=subject,
            html_content=html_content,
            cc=reviewer_email,
            reply_to=reviewer_email,
        )

    def _render_review_html(
        self,
        service: ServiceRequest,
        reviewer_name: str,
        reviewer_email: str | None,
        email_message: str,
    ) -> str:
        """Render the review email. All user-supplied text is escaped."""
        esc = html.escape

        docs_html = ""
        for idx, doc in enumerate(service.documents, start=1):
            docs_html += f"""
          <div style="padding:12px;border:1px solid #e5e7eb;border-radius:8px;margin-bottom:10px;">
            <p style="margin:0 0 6px 0;"><strong>{idx}. {esc(doc.original_name or "")}</strong></p>
            <p style="margin:0 0 4px 0;"><strong>Status:</strong> {esc(doc.review_status or "")}</p>
            <p style="margin:0 0 4px 0;"><strong>Review:</strong> {esc(doc.review or "No comments yet.")}</p>
            <p style="margin:0;"><strong>Suggestion:</strong> {esc(doc.suggestion or "No suggestions yet.")}</p>
          </div>"""

        message_html = ""
        if email_message:
            message_html = f"""
          <div style="background:#f8fafc;border-left:4px solid #3b82f6;padding:12px;margin:12px 0;">
            <p style="margin:0;"><strong>Additional Message:</strong></p>
            <p style="margin:6px 0 0 0;">{esc(email_message)}</p>
          </div>"""

        contact_html = f"<br/>Contact: {esc(reviewer_email)}" if reviewer_email else ""

        return f"""
      <div style="font-family: Arial, sans-serif; max-width: 700px; margin: 0 auto;">
        <div style="background:#0f172a;color:white;padding:18px 20px;border-radius:12px 12px 0 0;">
          <h2 style="margin:0;">Service Review</h2>
          <p style="margin:8px 0 0 0;opacity:0.9;">Your submitted documents were reviewed.</p>
        </div>
        <div style="border:1px solid #e5e7eb;border-top:0;padding:20px;border-radius:0 0 12px 12px;">
          <p><strong>Service Title:</strong> {esc(service.title or "Document Review Request")}</p>
          {message_html}
          <h3 style="margin:18px 0 10px;">Document Feedback</h3>
          {docs_html}
          <p style="margin-top:18px;">
            Reviewed by: <strong>{esc(reviewer_name)}</strong>{contact_html}
          </p>
        </div>
      </div>
    """
