# SPDX-License-Identifier: AGPL-3.0-only

"""
Customer list ingestion.

Reads an uploaded CSV whose column names vary ("Account Number",
"account_no", "E-mail", "Name", ...), maps the columns onto the canonical
fields and validates every row. Bad rows are reported and skipped; the rest
of the file is still imported.
"""

import csv
import io
import re
from typing import Dict, Iterable, Optional

from marshmallow import ValidationError

from common.logger import get_logger
from validators import CustomerRowSchema
from .models import CustomerImport, CustomerRecord, ExtractedSegment

logger = get_logger(__name__)

ACCOUNT_ALIASES = {"accountnumber", "accountno", "accountnum", "account", "acctnumber", "acctno", "acct"}
REQUIRED_COLUMNS = ("account_number", "email", "customer_name")
ROW_FIELD_ORDER = ("account_number", "email", "customer_name")
CSV_HEADERS = ["Account Number", "Email", "Customer Name"]
PLACEHOLDER_EMAIL = "customer@email.com"

_row_schema = CustomerRowSchema()


def _normalize_header(column: str) -> str:
    return re.sub(r"[\s_\-]", "", (column or "").lower())


def resolve_columns(columns: Iterable[str]) -> Dict[str, str]:
    """
    Map canonical field names to the CSV's own column names.

    Args:
        columns: Header row of the uploaded file

    Returns:
        Dict with whichever of account_number, email, customer_name were found
    """
    resolved: Dict[str, str] = {}
    for column in columns:
        if column is None:
            continue
        lowered = column.lower()
        key = _normalize_header(column)

        if "account_number" not in resolved and (
            key in ACCOUNT_ALIASES
            or ("account" in lowered and any(t in lowered for t in ("number", "no", "num", "id")))
        ):
            resolved["account_number"] = column
        elif "email" not in resolved and "mail" in lowered:
            resolved["email"] = column
        elif "customer_name" not in resolved and "name" in lowered:
            resolved["customer_name"] = column
    return resolved


def _row_error(err: ValidationError) -> str:
    messages = err.messages if isinstance(err.messages, dict) else {}
    for field in ROW_FIELD_ORDER:
        if field in messages:
            msgs = messages[field]
            return msgs[0] if isinstance(msgs, list) else str(msgs)
    return "Invalid row"


def parse_customer_rows(rows: Iterable[Dict[str, Optional[str]]], columns: Iterable[str]) -> CustomerImport:
    """Validate already-split rows against the detected columns."""
    columns = list(columns)
    result = CustomerImport()
    mapping = resolve_columns(columns)

    missing = [c for c in REQUIRED_COLUMNS if c not in mapping]
    if missing:
        result.errors.append(
            "CSV must contain columns: Account Number, Email, Customer Name (or similar variations)"
        )
        result.errors.append(f"Available columns: {', '.join(c for c in columns if c)}")
        return result

    # Line 1 is the header
    for line_no, row in enumerate(rows, start=2):
        raw = {field: row.get(column) for field, column in mapping.items()}
        try:
            data = _row_schema.load(raw)
        except ValidationError as err:
            message = f"Row {line_no}: {_row_error(err)}"
            logger.warning("Rejected customer row: %s", message)
            result.errors.append(message)
            continue
        result.customers.append(CustomerRecord(
            account_number=data["account_number"],
            email=data["email"].lower(),
            customer_name=data["customer_name"],
        ))

    logger.debug("Imported %d customers, %d rows rejected", len(result.customers), len(result.errors))
    return result


def parse_customer_csv(text: str) -> CustomerImport:
    """
    Parse customer CSV text into validated records.

    Args:
        text: CSV content with a header row

    Returns:
        CustomerImport with accepted customers and per-row error messages
    """
    text = (text or "").lstrip("\ufeff")
    reader = csv.DictReader(io.StringIO(text))
    columns = reader.fieldnames or []
    if not columns:
        return CustomerImport(errors=["CSV file appears to be empty or invalid"])

    rows = [row for row in reader if any((v or "").strip() for v in row.values() if isinstance(v, str))]
    return parse_customer_rows(rows, columns)


def customers_to_csv(segments: Iterable[ExtractedSegment], placeholder_email: str = PLACEHOLDER_EMAIL) -> str:
    """Write a starter customer CSV listing each segment's account and name."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for segment in segments:
        writer.writerow([segment.account_number, placeholder_email, segment.customer_name])
    return buf.getvalue()
