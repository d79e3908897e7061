# SPDX-License-Identifier: AGPL-3.0-only

"""
Filename decomposition for statement PDFs.

Statement files arrive with no fixed naming convention, e.g.
``FBNWSTX123456_John Smith_May 2025.pdf``, ``Smith-FBNWSTX12-05-25.pdf`` or
``12345678.pdf``. parse_filename tries a chain of strategies, first hit wins,
and always returns both fields (``"Unknown"`` when nothing usable is found).
"""

import posixpath
import re
from typing import List, Optional, Tuple

from .models import UNKNOWN, FilenameParseResult

# Embedded account number: 2-6 capitals then 2-8 capitals/digits
ACCOUNT_SEARCH = re.compile(r"[A-Z]{2,6}[A-Z0-9]{2,8}")
ACCOUNT_EXACT = re.compile(r"^[A-Z]{2,6}[A-Z0-9]{2,8}$")

# A split segment that is only a date (12/25, 12-25-2023, 1/2/)
BARE_DATE = re.compile(r"^\d{1,2}[/-]\d{1,2}[/-]?\d{0,4}$")

_MONTHS = (
    r"January|February|March|April|May|June|July|August|September|October|November|December"
    r"|Jan|Feb|Mar|Apr|Jun|Jul|Aug|Sept|Sep|Oct|Nov|Dec"
)

DATE_FRAGMENTS = [
    re.compile(r"\d{1,2}[/-]\d{1,2}[/-]\d{2,4}"),   # 12/25/2023, 12-25-23
    re.compile(r"\d{4}[/-]\d{1,2}[/-]\d{1,2}"),     # 2023/12/25
    re.compile(r"\d{1,2}[/-]\d{1,2}"),              # 12/25
    re.compile(rf"(?<![A-Za-z])(?:{_MONTHS})\.?[\s_-]*\d{{4}}(?!\d)", re.IGNORECASE),  # May 2025
]

SEPARATORS = re.compile(r"[_\-\s]+")
UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def strip_extension(filename: str) -> str:
    """Drop any directory part and a trailing .pdf extension."""
    base = posixpath.basename((filename or "").replace("\\", "/"))
    return re.sub(r"\.pdf$", "", base, flags=re.IGNORECASE)


def strip_date_fragments(value: str) -> str:
    for pattern in DATE_FRAGMENTS:
        value = pattern.sub(" ", value)
    return value


def _or_unknown(value: Optional[str]) -> str:
    value = (value or "").strip()
    return value or UNKNOWN


def _from_embedded_account(name: str) -> Optional[Tuple[str, str]]:
    match = ACCOUNT_SEARCH.search(name)
    if not match:
        return None
    account = match.group(0)
    remaining = name.replace(account, " ", 1)
    customer = SEPARATORS.sub(" ", strip_date_fragments(remaining)).strip()
    return account, customer


def _from_underscores(name: str) -> Optional[Tuple[str, str]]:
    if "_" not in name:
        return None
    parts = name.split("_")
    if ACCOUNT_EXACT.match(parts[0]):
        return parts[0], parts[1]
    # CustomerName_AccountNumber ordering
    return parts[1], parts[0]


def _from_delimited(name: str, delimiter: str) -> Optional[Tuple[str, str]]:
    if delimiter not in name:
        return None
    parts: List[str] = name.split(delimiter)
    for i, part in enumerate(parts):
        if ACCOUNT_EXACT.match(part):
            others = [p for j, p in enumerate(parts) if j != i and not BARE_DATE.match(p)]
            return part, " ".join(p for p in others if p).strip()
    # No recognisable account: assume account first, name second
    return parts[0], parts[1]


def parse_filename(filename: str) -> FilenameParseResult:
    """
    Recover an account number and customer name from a file name.

    Strategies, in order:
        1. an embedded account number anywhere in the name; the rest, minus
           dates and separators, is the customer name
        2. underscore separated fields
        3. space separated fields
        4. dash separated fields
        5. the whole name as the account number

    Args:
        filename: File name, optionally with directories and a .pdf extension

    Returns:
        FilenameParseResult with both fields non-empty
    """
    name = strip_extension(filename)

    parsed = (
        _from_embedded_account(name)
        or _from_underscores(name)
        or _from_delimited(name, " ")
        or _from_delimited(name, "-")
        or (name, UNKNOWN)
    )
    account, customer = parsed
    return FilenameParseResult(
        account_number=_or_unknown(account),
        customer_name=_or_unknown(customer),
    )


def build_output_filename(account_number: str, customer_name: str, month_year: Optional[str] = None) -> str:
    """
    Name a split statement ``{account}_{customer}_{monthYear}.pdf``.

    The month part is omitted when blank; characters that are not allowed in
    file names are removed from every part.
    """
    parts = [account_number, customer_name]
    if month_year and month_year.strip():
        parts.append(month_year)
    cleaned = [_or_unknown(UNSAFE_FILENAME_CHARS.sub("", p or "")) for p in parts]
    return "_".join(cleaned) + ".pdf"
