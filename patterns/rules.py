# SPDX-License-Identifier: AGPL-3.0-only

"""
Default rule catalog and candidate validators.

Rules refer to validators by name; VALIDATORS maps those names to predicates
taking the candidate string and returning whether it should be kept.
"""

import re
from typing import Callable, Dict, Iterable, List

from .models import PatternRule, ValueType


# Stoplist used to suppress capitalized phrases that are not names
COMMON_WORDS = frozenset({
    'THE', 'AND', 'FOR', 'ARE', 'BUT', 'NOT', 'YOU', 'ALL', 'CAN', 'HER', 'WAS', 'ONE', 'OUR',
    'HAD', 'BY', 'WORD', 'OIL', 'SIT', 'SET', 'RUN', 'EAT', 'FAR', 'SEA', 'EYE', 'OLD', 'SEE',
    'HIM', 'TWO', 'HOW', 'ITS', 'WHO', 'DID', 'YES', 'HIS', 'HAS', 'LET', 'PUT', 'TOO',
    'USE', 'WAY', 'MAY', 'SAY', 'SHE', 'NEW', 'TRY', 'MAN', 'DAY', 'GET', 'NOW',
})

_COMMON_NUMBER_PATTERNS = [
    re.compile(r"^(19|20)\d{2}$"),                            # years
    re.compile(r"^(0[1-9]|1[0-2])(0[1-9]|[12]\d|3[01])$"),    # MMDD
    re.compile(r"^[01]\d{3}$"),                               # time-like
    re.compile(r"^(555|800|888|877|866|855|844|833|822)\d{7}$"),  # phone prefixes
]


def is_common_number(num: str) -> bool:
    """True for digit strings that look like years, MMDD, times or toll-free numbers."""
    return any(p.match(num) for p in _COMMON_NUMBER_PATTERNS)


def is_common_word(text: str) -> bool:
    """True if the phrase, or the word it starts with, is on the stoplist."""
    words = text.upper().split()
    if not words:
        return False
    return " ".join(words) in COMMON_WORDS or words[0] in COMMON_WORDS


def is_valid_name(name: str) -> bool:
    cleaned = name.strip()
    if len(cleaned) < 2:
        return False
    if not re.search(r"[A-Za-z]", cleaned):
        return False
    if cleaned.isdigit():
        return False
    # Letters, spaces and & ' . - are name characters; tolerate two others
    if len(re.findall(r"[^A-Za-z\s&'.\-]", cleaned)) > 2:
        return False
    return True


def is_valid_date(date_str: str) -> bool:
    """Validate a month/day/year token split on '/' or '-'."""
    parts = re.split(r"[-/]", date_str)
    if len(parts) != 3:
        return False
    try:
        month, day, year = (int(p) for p in parts)
    except ValueError:
        return False
    if month < 1 or month > 12:
        return False
    if day < 1 or day > 31:
        return False
    if year < 1900 or year > 2100:
        return False
    return True


def _valid_labeled_account(value: str) -> bool:
    return 4 <= len(value) <= 20


def _valid_alphanumeric_code(value: str) -> bool:
    return re.fullmatch(r"[A-Z]{2,6}\d{4,12}", value) is not None


def _valid_numeric_account(value: str) -> bool:
    num = re.sub(r"\D", "", value)
    return 6 <= len(num) <= 15 and not is_common_number(num)


def _valid_proper_name(value: str) -> bool:
    return is_valid_name(value) and not is_common_word(value)


def _valid_decimal_amount(value: str) -> bool:
    try:
        amount = float(value.replace(",", ""))
    except ValueError:
        return False
    return 0 < amount < 1_000_000


def _valid_zip_code(value: str) -> bool:
    return re.fullmatch(r"\d{5}(-\d{4})?", value) is not None


VALIDATORS: Dict[str, Callable[[str], bool]] = {
    "account_label_length": _valid_labeled_account,
    "alphanumeric_code": _valid_alphanumeric_code,
    "numeric_account": _valid_numeric_account,
    "name": is_valid_name,
    "proper_name": _valid_proper_name,
    "numeric_date": is_valid_date,
    "decimal_amount": _valid_decimal_amount,
    "zip_code": _valid_zip_code,
}


DEFAULT_RULES: List[PatternRule] = [
    # Account numbers
    PatternRule(
        name="labeled_account_numbers",
        pattern=r"(?:account\s*(?:number|nbr|#)|acct\s*(?:number|nbr|#))[:\s]+([A-Z0-9\-]+)",
        ignore_case=True,
        description="Account numbers with labels",
        value_type=ValueType.ACCOUNT,
        priority=10,
        validator="account_label_length",
    ),
    PatternRule(
        name="alphanumeric_codes",
        pattern=r"\b[A-Z]{2,6}\d{4,12}\b",
        description="Alphanumeric account codes (e.g., FBNWSTX123456)",
        value_type=ValueType.ACCOUNT,
        priority=8,
        validator="alphanumeric_code",
    ),
    PatternRule(
        name="numeric_accounts",
        pattern=r"\b\d{6,15}\b",
        description="Long numeric sequences (potential account numbers)",
        value_type=ValueType.ACCOUNT,
        priority=6,
        validator="numeric_account",
    ),

    # Customer names
    PatternRule(
        name="labeled_customer_names",
        pattern=r"(?:customer\s*name|bill\s*to|account\s*holder)[:\s]+([A-Z][a-z]+(?:[ \t]+[A-Z&][a-z]*)*(?:[ \t]+[A-Z][a-z]+)*)",
        ignore_case=True,
        description="Customer names with labels",
        value_type=ValueType.NAME,
        priority=10,
        validator="name",
    ),
    PatternRule(
        name="couple_names",
        pattern=r"\b[A-Z][a-z]+\s*&\s*[A-Z][a-z]+[ \t]+[A-Z][a-z]+(?:'?s)?\b",
        description="Couple names (John & Mary Smith)",
        value_type=ValueType.NAME,
        priority=9,
        validator="name",
    ),
    PatternRule(
        name="formal_names",
        pattern=r"\b[A-Z][a-z]+[ \t]+[A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)?\b",
        description="Formal names (First Last or First Middle Last)",
        value_type=ValueType.NAME,
        priority=7,
        validator="proper_name",
    ),
    PatternRule(
        name="all_caps_names",
        pattern=r"\b[A-Z]{2,}[ \t]+[A-Z]{2,}(?:[ \t]+[A-Z]{2,})?\b",
        description="ALL CAPS names",
        value_type=ValueType.NAME,
        priority=6,
        validator="proper_name",
    ),

    # Dates
    PatternRule(
        name="slash_dates",
        pattern=r"\b\d{1,2}/\d{1,2}/\d{2,4}\b",
        description="MM/DD/YYYY format dates",
        value_type=ValueType.DATE,
        priority=8,
        validator="numeric_date",
    ),
    PatternRule(
        name="dash_dates",
        pattern=r"\b\d{1,2}-\d{1,2}-\d{2,4}\b",
        description="MM-DD-YYYY format dates",
        value_type=ValueType.DATE,
        priority=8,
        validator="numeric_date",
    ),
    PatternRule(
        name="written_dates",
        pattern=(
            r"\b(?:January|February|March|April|May|June|July|August|September|October|November|December"
            r"|Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\s+\d{1,2},?\s+\d{4}\b"
        ),
        ignore_case=True,
        description="Written dates (January 15, 2024)",
        value_type=ValueType.DATE,
        priority=9,
    ),

    # Currency
    PatternRule(
        name="dollar_amounts",
        pattern=r"\$\d{1,3}(?:,\d{3})*(?:\.\d{2})?",
        description="Dollar amounts with $ symbol",
        value_type=ValueType.CURRENCY,
        priority=9,
    ),
    PatternRule(
        name="decimal_amounts",
        pattern=r"\b\d{1,3}(?:,\d{3})*\.\d{2}\b",
        description="Decimal amounts (123.45)",
        value_type=ValueType.CURRENCY,
        priority=7,
        validator="decimal_amount",
    ),

    # Addresses
    PatternRule(
        name="street_addresses",
        pattern=(
            r"\b\d+\s+[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\s+"
            r"(?:Street|St|Avenue|Ave|Road|Rd|Drive|Dr|Lane|Ln|Boulevard|Blvd|Circle|Cir|Court|Ct)\b"
        ),
        ignore_case=True,
        description="Street addresses",
        value_type=ValueType.ADDRESS,
        priority=8,
    ),
    PatternRule(
        name="zip_codes",
        pattern=r"\b\d{5}(?:-\d{4})?\b",
        description="ZIP codes",
        value_type=ValueType.ADDRESS,
        priority=7,
        validator="zip_code",
    ),

    # Contact details
    PatternRule(
        name="phone_numbers",
        pattern=r"\b(?:\(\d{3}\)\s*|\d{3}[-.\s]?)\d{3}[-.\s]?\d{4}\b",
        description="Phone numbers",
        value_type=ValueType.PHONE,
        priority=8,
    ),
    PatternRule(
        name="email_addresses",
        pattern=r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b",
        description="Email addresses",
        value_type=ValueType.EMAIL,
        priority=9,
    ),
]


def rules_by_type(rules: Iterable[PatternRule], value_type: ValueType) -> List[PatternRule]:
    """Filter a catalog down to the rules of one value type, keeping catalog order."""
    return [r for r in rules if r.value_type == value_type]


def get_rule(rules: Iterable[PatternRule], name: str) -> PatternRule:
    """Look up a rule by name; raises KeyError if absent."""
    for rule in rules:
        if rule.name == name:
            return rule
    raise KeyError(name)
