# SPDX-License-Identifier: AGPL-3.0-only

"""
Pytest configuration and fixtures.

This module provides shared fixtures and configuration for all tests.
"""

import io
import zipfile
import pytest
from unittest.mock import Mock

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from common.config import ToolsConfig
from distribution.models import CustomerRecord, ExtractedSegment


STATEMENT_PAGES = [
    "Account Number: ABC12345\nCustomer Name: John Smith\nStatement Date: 01/15/2024\nTotal: $1,234.56",
    "Account Number: ABC12345\nPage 2 of 2",
    "Account Number: XYZ98765\nCustomer Name: Mary Jones\nStatement Date: 01/15/2024\nTotal: $88.10",
]


def build_pdf(pages):
    """Render each page's lines as plain text into a PDF."""
    buf = io.BytesIO()
    pdf = canvas.Canvas(buf, pagesize=letter)
    for page in pages:
        y = 720
        for line in page.split("\n"):
            pdf.drawString(72, y, line)
            y -= 18
        pdf.showPage()
    pdf.save()
    return buf.getvalue()


def build_zip(members):
    """Zip (name, bytes) pairs in memory."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, mode="w") as zf:
        for name, content in members:
            zf.writestr(name, content)
    return buf.getvalue()


@pytest.fixture
def zip_factory():
    """Build ZIP bytes from (name, content) pairs."""
    return build_zip


@pytest.fixture
def statement_pages():
    """Per-page text of a two-account statement run."""
    return list(STATEMENT_PAGES)


@pytest.fixture
def statement_pdf():
    """A three page statement PDF: two pages for ABC12345, one for XYZ98765."""
    return build_pdf(STATEMENT_PAGES)


@pytest.fixture
def sample_text():
    """Sample statement text for testing."""
    return "\n".join(STATEMENT_PAGES)


@pytest.fixture
def statement_zip(statement_pdf):
    """Archive of individually named statements plus a non-PDF member."""
    return build_zip([
        ("statements/FBNWSTX123456_John Smith_May 2025.pdf", statement_pdf),
        ("statements/SMNWSTX56789_Mary Jones_May 2025.pdf", statement_pdf),
        ("statements/readme.txt", b"not a statement"),
    ])


@pytest.fixture
def customer_csv():
    """Customer list matching one of the archived statements."""
    return (
        "Account Number,Email,Customer Name\n"
        "FBNWSTX123456,John.Smith@Example.com,John Smith\n"
        "OTHER0001,other@example.com,Someone Else\n"
    )


@pytest.fixture
def segments():
    return [
        ExtractedSegment(account_number="ABC123", customer_name="Alice Adams", source_file_name="ABC123_Alice Adams.pdf", content=b"%PDF-1"),
        ExtractedSegment(account_number="ZZZ999", customer_name="Zed Zulu", source_file_name="ZZZ999_Zed Zulu.pdf", content=b"%PDF-2"),
    ]


@pytest.fixture
def customers():
    return [
        CustomerRecord(account_number="abc123 ", email="alice@example.com", customer_name="Alice Adams"),
        CustomerRecord(account_number="DEF456", email="dan@example.com", customer_name="Dan Doe"),
    ]


@pytest.fixture
def mail_settings():
    """Settings with a real looking (non placeholder) mail configuration."""
    return ToolsConfig(
        mailgun_domain="mg.example.org",
        mailgun_api_key="key-0123456789",
        from_email="billing@example.org",
        from_name="Billing",
        mail_max_retries=3,
    )


@pytest.fixture
def settings(tmp_path):
    """Settings writing the pattern library into a temp dir."""
    return ToolsConfig(
        upload_folder=str(tmp_path / "uploads"),
        pattern_library_path=str(tmp_path / "pattern_library.json"),
    )


@pytest.fixture
def mock_session():
    """requests.Session stand-in that accepts every message."""
    session = Mock()
    response = Mock(status_code=200, text='{"id": "<1@mg.example.org>"}')
    response.json.return_value = {"id": "<1@mg.example.org>", "message": "Queued. Thank you."}
    session.post.return_value = response
    return session


# Pytest configuration
def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection."""
    # Endpoint tests are integration tests, everything else is a unit test
    for item in items:
        if "test_app" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
