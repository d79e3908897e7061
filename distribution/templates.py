# SPDX-License-Identifier: AGPL-3.0-only

"""
Statement email templates.

Templates use ``{{customerName}}``, ``{{accountNumber}}``, ``{{currentMonth}}``
and ``{{currentDate}}`` placeholders, filled in per reconciled record.
"""

import re
from datetime import date
from typing import Optional

from .models import EmailTemplate, ReconciledRecord, RenderedEmail

DEFAULT_TEMPLATE = EmailTemplate(
    subject="Your {{currentMonth}} Statement",
    body=(
        "Dear {{customerName}},<br>\n"
        "<br>\n"
        "Please find attached your {{currentMonth}} statement for account {{accountNumber}}.<br>\n"
        "<br>\n"
        "Thank you,<br>\n"
        "Billing Department"
    ),
)

_NAME_NOISE = [
    re.compile(r"\d{1,2}[/-]\d{1,2}[/-]?\d{0,4}"),
    re.compile(r"\d{4}[/-]\d{1,2}[/-]\d{1,2}"),
    re.compile(r"\d{1,2}[/-]\d{1,2}"),
    re.compile(r"\d{4}"),
    re.compile(r"(?<![A-Za-z])(january|february|march|april|may|june|july|august|september|october|november|december)\d{0,4}(?![A-Za-z])", re.IGNORECASE),
    re.compile(r"(?<![A-Za-z])(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)\d{0,4}(?![A-Za-z])", re.IGNORECASE),
]


def clean_customer_name(name: str) -> str:
    """Strip date and period fragments a file name left in a customer name."""
    for pattern in _NAME_NOISE:
        name = pattern.sub("", name or "")
    return re.sub(r"[_\-\s]+", " ", name).strip() or "Customer"


def fill_placeholders(text: str, customer_name: str, account_number: str, today: date) -> str:
    values = {
        "customerName": customer_name,
        "accountNumber": account_number,
        "currentMonth": f"{today:%B} {today.year}",
        "currentDate": f"{today.month}/{today.day}/{today.year}",
    }
    return re.sub(
        r"\{\{(\w+)\}\}",
        lambda m: values.get(m.group(1), m.group(0)),
        text,
    )


def render_email(template: EmailTemplate, record: ReconciledRecord, today: Optional[date] = None) -> RenderedEmail:
    """
    Fill a template for one reconciled record.

    Args:
        template: Subject and body with placeholders
        record: Record supplying the customer name and account number
        today: Date used for the month/date placeholders (defaults to today)

    Returns:
        RenderedEmail
    """
    today = today or date.today()
    name = clean_customer_name(record.customer.customer_name)
    account = record.customer.account_number
    return RenderedEmail(
        subject=fill_placeholders(template.subject, name, account, today),
        body=fill_placeholders(template.body, name, account, today),
    )
