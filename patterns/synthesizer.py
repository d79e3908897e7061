# SPDX-License-Identifier: AGPL-3.0-only

"""
Regex synthesis from example values.

Derives a best-effort pattern source from a handful of examples so a user can
seed a new rule. The result is not checked against the examples; run it
through the pattern tester before saving it.
"""

import re
from typing import List, Sequence

from .models import ValueType


def _count(regex: str, value: str) -> int:
    return len(re.findall(regex, value))


def generate_account_pattern(examples: Sequence[str]) -> str:
    has_letters = any(re.search(r"[A-Za-z]", ex) for ex in examples)
    has_digits = any(re.search(r"\d", ex) for ex in examples)

    if has_letters and has_digits:
        letters = max(_count(r"[A-Za-z]", ex) for ex in examples)
        digits = max(_count(r"\d", ex) for ex in examples)
        return (
            f"[A-Z]{{{max(1, letters - 1)},{letters + 1}}}"
            f"\\d{{{max(1, digits - 1)},{digits + 1}}}"
        )
    if has_digits:
        lengths = [len(ex) for ex in examples]
        return f"\\d{{{min(lengths)},{max(lengths)}}}"

    return "[A-Z0-9]+"


def generate_name_pattern(examples: Sequence[str]) -> str:
    if any("&" in ex for ex in examples):
        return r"[A-Z][a-z]+\s*&\s*[A-Z][a-z]+\s+[A-Z][a-z]+"

    max_words = max(len(ex.split()) for ex in examples)
    if max_words >= 3:
        return r"[A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,2}"

    return r"[A-Z][a-z]+\s+[A-Z][a-z]+"


def generate_generic_pattern(examples: Sequence[str]) -> str:
    """Turn the first example into a character-class template.

    Only examples[0] is used; the other examples do not widen the pattern.
    """
    parts: List[str] = []
    for ch in examples[0]:
        if ch.isascii() and ch.isalpha():
            parts.append("[A-Za-z]")
        elif ch.isdigit():
            parts.append(r"\d")
        elif ch.isspace():
            parts.append(r"\s*")
        else:
            parts.append(re.escape(ch))
    return "".join(parts)


def generate_regex_pattern(examples: Sequence[str], value_type) -> str:
    """
    Synthesize a pattern source generalizing the examples.

    Args:
        examples: Sample values (an empty list yields an empty pattern)
        value_type: ValueType or its string value

    Returns:
        Regular expression source
    """
    if not examples:
        return ""

    kind = value_type.value if isinstance(value_type, ValueType) else str(value_type)
    if kind == ValueType.ACCOUNT.value:
        return generate_account_pattern(examples)
    if kind == ValueType.NAME.value:
        return generate_name_pattern(examples)
    return generate_generic_pattern(examples)
