# SPDX-License-Identifier: AGPL-3.0-only

"""
Pattern tester.

Runs user supplied patterns against sample text. An invalid expression is
reported on that pattern's result and never stops the others.
"""

import re
from typing import List, Sequence

from common.logger import get_logger
from .library import PatternLibrary
from .models import PatternTestResult

logger = get_logger(__name__)


def evaluate_pattern(pattern: str, text: str, limit: int = 50) -> PatternTestResult:
    """
    Run one pattern case-insensitively over text.

    Args:
        pattern: Regular expression source
        text: Text to search
        limit: Maximum number of distinct values reported

    Returns:
        PatternTestResult with distinct values in order of appearance
    """
    try:
        regex = re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        logger.warning("Pattern %r failed to compile: %s", pattern, e)
        return PatternTestResult(pattern=pattern, matches=[], success=False, error=str(e))

    matches: List[str] = []
    for match in regex.finditer(text):
        value = (match.group(1) if regex.groups else None) or match.group(0)
        if value and value not in matches:
            matches.append(value)
        if len(matches) >= limit:
            break

    return PatternTestResult(pattern=pattern, matches=matches, success=True)


def evaluate_patterns(patterns: Sequence[str], text: str, limit: int = 50) -> List[PatternTestResult]:
    return [evaluate_pattern(p, text, limit) for p in patterns]


def evaluate_library(library: PatternLibrary, text: str, limit: int = 50) -> List[PatternTestResult]:
    """Test every saved account and name pattern against text."""
    return evaluate_patterns(library.account_patterns + library.name_patterns, text, limit)
