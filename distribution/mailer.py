# SPDX-License-Identifier: AGPL-3.0-only

"""
Mailgun client for statement delivery, with retries and timeouts.
"""

import time
from datetime import date
from typing import List, Optional, Sequence

import requests

from common.config import ToolsConfig, config as default_config
from common.logger import get_logger
from .models import DeliveryResult, EmailTemplate, ReconciledRecord, RenderedEmail
from .templates import render_email

logger = get_logger(__name__)

TRANSIENT_STATUS_CODES = {429, 500, 502, 503, 504}


class DeliveryError(Exception):
    """Raised when an email could not be handed to the mail API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class _TransientError(Exception):
    pass


class MailgunClient:
    """Sends rendered statement emails through the Mailgun HTTP API."""

    def __init__(self, settings: Optional[ToolsConfig] = None, session: Optional[requests.Session] = None):
        settings = settings or default_config
        mail = settings.get_mail_config()
        self.domain = mail["domain"]
        self.api_key = mail["api_key"]
        self.base_url = mail["base_url"].rstrip("/")
        self.sender = f"{mail['from_name']} <{mail['from_email']}>"
        self.timeout = mail["timeout"]
        self.max_retries = max(1, mail["max_retries"])
        self.configured = settings.is_mail_configured()
        self.session = session or requests.Session()

    @property
    def messages_url(self) -> str:
        return f"{self.base_url}/{self.domain}/messages"

    def send(self, to: str, rendered: RenderedEmail, attachment_name: str, attachment: bytes) -> str:
        """
        Send one email with a PDF attachment.

        Returns:
            The message id reported by Mailgun

        Raises:
            DeliveryError: mail is not configured, the API rejected the
                message, or every attempt failed
        """
        if not self.configured:
            raise DeliveryError("Mail delivery is not configured")
        if not to:
            raise DeliveryError("No recipient email address")

        for attempt in range(self.max_retries):
            try:
                return self._post(to, rendered, attachment_name, attachment)
            except _TransientError as e:
                if attempt == self.max_retries - 1:
                    raise DeliveryError(f"Email to {to} failed after {self.max_retries} attempts: {str(e)}")
                logger.warning("Attempt %d to send to %s failed: %s", attempt + 1, to, e)
                time.sleep(2 ** attempt)  # Exponential backoff

        raise DeliveryError(f"Email to {to} failed")

    def _post(self, to: str, rendered: RenderedEmail, attachment_name: str, attachment: bytes) -> str:
        try:
            resp = self.session.post(
                self.messages_url,
                auth=("api", self.api_key),
                data={
                    "from": self.sender,
                    "to": to,
                    "subject": rendered.subject,
                    "html": rendered.body,
                },
                files=[("attachment", (attachment_name, attachment, "application/pdf"))],
                timeout=self.timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            raise _TransientError(str(e))

        if resp.status_code in TRANSIENT_STATUS_CODES:
            raise _TransientError(f"HTTP {resp.status_code}")
        if resp.status_code >= 400:
            raise DeliveryError(f"Mailgun rejected message: HTTP {resp.status_code} {resp.text}", resp.status_code)

        try:
            return resp.json().get("id", "")
        except ValueError:
            return ""

    def deliver(self, record: ReconciledRecord, template: EmailTemplate,
                to: Optional[str] = None, subject_prefix: str = "",
                today: Optional[date] = None) -> DeliveryResult:
        """Render and send one record, turning failures into a DeliveryResult."""
        recipient = to or record.customer.email
        rendered = render_email(template, record, today)
        if subject_prefix:
            rendered = rendered.model_copy(update={"subject": f"{subject_prefix} {rendered.subject}"})

        try:
            message_id = self.send(recipient, rendered, _attachment_name(record), record.segment.content)
        except DeliveryError as e:
            logger.error("Failed to send statement %s to %s: %s", record.segment.account_number, recipient, e)
            return DeliveryResult(
                account_number=record.segment.account_number,
                email=recipient,
                success=False,
                error=str(e),
            )
        return DeliveryResult(
            account_number=record.segment.account_number,
            email=recipient,
            success=True,
            message_id=message_id or None,
        )

    def send_batch(self, records: Sequence[ReconciledRecord], template: EmailTemplate,
                   today: Optional[date] = None) -> List[DeliveryResult]:
        """
        Send every matched record, one after another.

        Unmatched records are skipped; each matched record yields exactly one
        DeliveryResult whether or not it was delivered.
        """
        results = [self.deliver(r, template, today=today) for r in records if r.matched]
        sent = sum(1 for r in results if r.success)
        logger.info("Sent %d of %d statements", sent, len(results))
        return results

    def send_test(self, to: str, record: ReconciledRecord, template: EmailTemplate,
                  today: Optional[date] = None) -> DeliveryResult:
        """Send one record's statement to a test address with a [TEST] subject."""
        return self.deliver(record, template, to=to, subject_prefix="[TEST]", today=today)


def _attachment_name(record: ReconciledRecord) -> str:
    name = record.segment.source_file_name.replace("\\", "/").rsplit("/", 1)[-1]
    return name or f"{record.segment.account_number}.pdf"
