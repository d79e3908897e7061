# SPDX-License-Identifier: AGPL-3.0-only

"""
Pattern matcher.

Applies a rule catalog to free-form text and produces, per rule, a
de-duplicated list of matches ranked by a heuristic confidence score.
Every call compiles and iterates the rules afresh, so no matcher state is
shared between calls.
"""

import re
from typing import Dict, Iterator, List, Optional, Sequence

from common.logger import get_logger
from .models import DetectionReport, PatternMatch, PatternRule, ValueType
from .rules import DEFAULT_RULES, VALIDATORS

logger = get_logger(__name__)

CONTEXT_WINDOW = 50
LABEL_WORDS = ('name', 'account', 'number', 'customer', 'bill', 'to', 'holder')

_ACCOUNT_SHAPE = re.compile(r"^[A-Z]+\d+$")


class PatternRuleError(Exception):
    """A rule whose pattern or validator cannot be used."""


def calculate_confidence(value: str, context: str, rule: PatternRule) -> float:
    """
    Score how likely a candidate is a real field value.

    Args:
        value: Extracted candidate
        context: Text surrounding the match
        rule: Rule that produced the candidate

    Returns:
        Confidence clamped to [0, 1]
    """
    confidence = 0.5
    confidence += (rule.priority / 10) * 0.3

    lowered = context.lower()
    if any(word in lowered for word in LABEL_WORDS):
        confidence += 0.2

    if rule.value_type == ValueType.ACCOUNT and _ACCOUNT_SHAPE.match(value):
        confidence += 0.1

    if len(value) < 3 or len(value) > 50:
        confidence -= 0.2

    return max(0.0, min(1.0, confidence))


def _resolve_validator(rule: PatternRule):
    if rule.validator is None:
        return None
    try:
        return VALIDATORS[rule.validator]
    except KeyError:
        raise PatternRuleError(f"Unknown validator '{rule.validator}'") from None


def iter_candidates(text: str, rule: PatternRule) -> Iterator[PatternMatch]:
    """
    Yield validated matches of one rule in source order, without de-duplication.

    Raises:
        PatternRuleError: if the rule's pattern does not compile or its
            validator is not registered
    """
    try:
        regex = rule.compile()
    except re.error as e:
        raise PatternRuleError(f"Invalid pattern: {e}") from e
    validator = _resolve_validator(rule)

    if rule.find_all:
        found = regex.finditer(text)
    else:
        first = regex.search(text)
        found = [first] if first else []

    for match in found:
        value = (match.group(1) if regex.groups else None) or match.group(0)
        if not value:
            continue
        if validator is not None and not validator(value):
            continue

        position = match.start()
        context_start = max(0, position - CONTEXT_WINDOW)
        context_end = min(len(text), match.end() + CONTEXT_WINDOW)
        context = text[context_start:context_end]

        yield PatternMatch(
            value=value,
            position=position,
            confidence=calculate_confidence(value, context, rule),
            context=context.strip(),
        )


def remove_duplicates(matches: List[PatternMatch]) -> List[PatternMatch]:
    """Drop case-insensitive repeats, keeping the first occurrence."""
    seen = set()
    unique = []
    for match in matches:
        key = match.value.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(match)
    return unique


def match_rule(text: str, rule: PatternRule) -> List[PatternMatch]:
    """All distinct matches of one rule, highest confidence first (stable)."""
    unique = remove_duplicates(list(iter_candidates(text, rule)))
    return sorted(unique, key=lambda m: m.confidence, reverse=True)


def detect_report(text: str, rules: Optional[Sequence[PatternRule]] = None) -> DetectionReport:
    """
    Run a rule catalog over text, collecting pattern errors per rule.

    Args:
        text: Source text (typically one page)
        rules: Catalog to apply, defaults to DEFAULT_RULES

    Returns:
        DetectionReport with matches for rules that found something and the
        error message for rules that could not be evaluated
    """
    rules = DEFAULT_RULES if rules is None else rules
    report = DetectionReport()

    for rule in rules:
        try:
            matches = match_rule(text or "", rule)
        except PatternRuleError as e:
            logger.warning("Skipping rule %s: %s", rule.name, e)
            report.errors[rule.name] = str(e)
            continue
        if matches:
            report.matches[rule.name] = matches

    logger.debug(
        "Detected %d matching rules (%d errors) over %d characters",
        len(report.matches), len(report.errors), len(text or ""),
    )
    return report


def detect_patterns(text: str, rules: Optional[Sequence[PatternRule]] = None) -> Dict[str, List[PatternMatch]]:
    """Map rule name to its ranked matches; rules without matches are absent."""
    return detect_report(text, rules).matches


def best_match(
    text: str,
    rules: Sequence[PatternRule],
    value_type: ValueType,
) -> Optional[PatternMatch]:
    """
    Pick the single most confident match of a value type across a catalog.

    Ties are broken by catalog order, then by position in the text.
    """
    best: Optional[PatternMatch] = None
    matches = detect_patterns(text, [r for r in rules if r.value_type == value_type])
    for rule in rules:
        for match in matches.get(rule.name, []):
            if best is None or match.confidence > best.confidence:
                best = match
    return best
