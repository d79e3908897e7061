# SPDX-License-Identifier: AGPL-3.0-only

"""
Pattern discovery over a sample document.

Reports which catalog rules fire on a sample statement, with example values
and a frequency-based confidence, so a user can pick the ones worth saving
to their pattern library.
"""

from typing import Dict, List, Optional, Sequence

from common.logger import get_logger
from .matcher import PatternRuleError, iter_candidates
from .models import DiscoveredPattern, DiscoveryResult, PatternRule, ValueType
from .rules import DEFAULT_RULES

logger = get_logger(__name__)

# value type -> (matches needed for full confidence, examples kept)
DISCOVERY_PROFILE: Dict[ValueType, tuple] = {
    ValueType.ACCOUNT: (10, 5),
    ValueType.NAME: (5, 5),
    ValueType.DATE: (3, 3),
    ValueType.CURRENCY: (5, 3),
}


def _distinct(values: List[str], limit: int) -> List[str]:
    examples: List[str] = []
    for value in values:
        if value not in examples:
            examples.append(value)
        if len(examples) == limit:
            break
    return examples


def discover_patterns(text: str, rules: Optional[Sequence[PatternRule]] = None) -> List[DiscoveredPattern]:
    """
    Find the account, name, date and currency rules that match a sample text.

    Args:
        text: Sample document text
        rules: Catalog to analyse with, defaults to DEFAULT_RULES

    Returns:
        Discovered patterns sorted by descending confidence
    """
    rules = DEFAULT_RULES if rules is None else rules
    patterns: List[DiscoveredPattern] = []

    for rule in rules:
        profile = DISCOVERY_PROFILE.get(rule.value_type)
        if profile is None:
            continue
        full_at, keep = profile
        try:
            values = [m.value for m in iter_candidates(text, rule)]
        except PatternRuleError as e:
            logger.warning("Discovery skipped rule %s: %s", rule.name, e)
            continue
        if not values:
            continue
        patterns.append(DiscoveredPattern(
            value_type=rule.value_type,
            pattern_source=rule.pattern,
            description=rule.description,
            examples=_distinct(values, keep),
            confidence=min(len(values) / full_at, 1.0),
            frequency=len(values),
        ))

    return sorted(patterns, key=lambda p: p.confidence, reverse=True)


def generate_suggestions(text: str, patterns: Sequence[DiscoveredPattern]) -> List[str]:
    suggestions = []

    if "customer name:" in text.lower():
        suggestions.append("Document uses 'Customer Name:' labels - patterns can target this structure")

    if "account" in text.lower():
        suggestions.append("Document contains account references - look for consistent numbering patterns")

    if sum(1 for p in patterns if p.value_type == ValueType.ACCOUNT) > 1:
        suggestions.append("Multiple account number formats detected - consider creating separate patterns for each")

    if sum(1 for p in patterns if p.value_type == ValueType.NAME) > 1:
        suggestions.append("Various name formats found - patterns should handle different name structures")

    return suggestions


def analyze_document(
    pages_text: Sequence[str],
    max_pages: int = 5,
    rules: Optional[Sequence[PatternRule]] = None,
) -> DiscoveryResult:
    """Run discovery over the first pages of a document."""
    text = "".join(page + "\n" for page in list(pages_text)[:max_pages])
    patterns = discover_patterns(text, rules)
    logger.debug("Discovery found %d candidate patterns", len(patterns))
    return DiscoveryResult(
        text=text,
        patterns=patterns,
        suggestions=generate_suggestions(text, patterns),
    )
