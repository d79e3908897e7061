# SPDX-License-Identifier: AGPL-3.0-only

"""
User pattern library.

Holds the account and name patterns a user has saved, either typed in or
promoted from a discovery run, and turns them into rules that take precedence
over the default catalog.
"""

import os
from typing import Iterable, List, Sequence, Tuple
from pydantic import BaseModel, Field, ValidationError

from common.logger import get_logger
from .models import DiscoveredPattern, PatternRule, ValueType
from .rules import DEFAULT_RULES

logger = get_logger(__name__)

CUSTOM_RULE_PRIORITY = 10


class PatternLibrary(BaseModel):
    """Saved custom patterns, in the order they were added."""
    account_patterns: List[str] = Field(default_factory=list)
    name_patterns: List[str] = Field(default_factory=list)

    def add_account_pattern(self, pattern: str) -> bool:
        return self._add(self.account_patterns, pattern)

    def add_name_pattern(self, pattern: str) -> bool:
        return self._add(self.name_patterns, pattern)

    def remove_pattern(self, pattern: str) -> bool:
        removed = False
        for bucket in (self.account_patterns, self.name_patterns):
            if pattern in bucket:
                bucket.remove(pattern)
                removed = True
        return removed

    @staticmethod
    def _add(bucket: List[str], pattern: str) -> bool:
        pattern = (pattern or "").strip()
        if not pattern or pattern in bucket:
            return False
        bucket.append(pattern)
        return True

    def promote(self, discovered: Sequence[DiscoveredPattern], selected: Iterable[int]) -> Tuple[int, int]:
        """
        Save the selected discovered patterns into the library.

        Only account and name patterns can be saved; others are skipped.

        Args:
            discovered: Patterns from a discovery run
            selected: Indexes into ``discovered`` chosen by the user

        Returns:
            Tuple of (saved_count, skipped_count)
        """
        saved = skipped = 0
        for index in sorted(set(selected)):
            if index < 0 or index >= len(discovered):
                skipped += 1
                continue
            pattern = discovered[index]
            if pattern.value_type == ValueType.ACCOUNT:
                self.add_account_pattern(pattern.pattern_source)
                saved += 1
            elif pattern.value_type == ValueType.NAME:
                self.add_name_pattern(pattern.pattern_source)
                saved += 1
            else:
                skipped += 1
        return saved, skipped

    def to_rules(self) -> List[PatternRule]:
        """Custom rules, accounts first, each case-insensitive at top priority."""
        rules = []
        for i, pattern in enumerate(self.account_patterns, start=1):
            rules.append(PatternRule(
                name=f"custom_account_{i}",
                pattern=pattern,
                ignore_case=True,
                description="Saved account pattern",
                value_type=ValueType.ACCOUNT,
                priority=CUSTOM_RULE_PRIORITY,
            ))
        for i, pattern in enumerate(self.name_patterns, start=1):
            rules.append(PatternRule(
                name=f"custom_name_{i}",
                pattern=pattern,
                ignore_case=True,
                description="Saved name pattern",
                value_type=ValueType.NAME,
                priority=CUSTOM_RULE_PRIORITY,
                validator="name",
            ))
        return rules

    def build_catalog(self, base: Sequence[PatternRule] = None) -> List[PatternRule]:
        """Custom rules followed by the base catalog (DEFAULT_RULES by default)."""
        base = DEFAULT_RULES if base is None else base
        return self.to_rules() + list(base)


def load_library(path: str) -> PatternLibrary:
    """Read a saved library; a missing or unreadable file gives an empty one."""
    if not path or not os.path.exists(path):
        return PatternLibrary()
    try:
        with open(path, "r", encoding="utf-8") as f:
            return PatternLibrary.model_validate_json(f.read())
    except (OSError, ValidationError) as e:
        logger.warning("Ignoring unreadable pattern library %s: %s", path, e)
        return PatternLibrary()


def save_library(library: PatternLibrary, path: str) -> None:
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    tmp_path = f"{path}.tmp"
    with open(tmp_path, "w", encoding="utf-8") as f:
        f.write(library.model_dump_json(indent=2))
    os.replace(tmp_path, path)
