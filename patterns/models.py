# SPDX-License-Identifier: AGPL-3.0-only

"""
Pydantic models for the pattern engine.

This module defines the rule, match and discovery structures shared by the
matcher, the synthesizer, the discovery analysis and the pattern tester.
"""

import re
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ValueType(str, Enum):
    """Kinds of values a pattern rule extracts."""
    ACCOUNT = "account"
    NAME = "name"
    ADDRESS = "address"
    DATE = "date"
    CURRENCY = "currency"
    PHONE = "phone"
    EMAIL = "email"


class PatternRule(BaseModel):
    """A named, prioritized extraction rule.

    Rules are plain data: the pattern is kept as source text and the optional
    validator is referenced by the name it is registered under, so catalogs
    can be stored and reloaded as JSON.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Unique rule name")
    pattern: str = Field(description="Regular expression source")
    ignore_case: bool = Field(False, description="Match case-insensitively")
    find_all: bool = Field(True, description="Report every match (False = first match only)")
    description: str = Field("", description="Human readable description")
    value_type: ValueType = Field(description="Type of value extracted")
    priority: int = Field(default=5, ge=0, le=10, description="Rule priority (higher = more authoritative)")
    validator: Optional[str] = Field(None, description="Name of a registered candidate predicate")

    def compile(self) -> "re.Pattern[str]":
        """Compile the rule's pattern with its flags (raises re.error)."""
        return re.compile(self.pattern, re.IGNORECASE if self.ignore_case else 0)


class PatternMatch(BaseModel):
    """A single validated match of a rule against text."""
    model_config = ConfigDict(frozen=True)

    value: str
    position: int = Field(ge=0, description="Offset of the match in the source text")
    confidence: float = Field(ge=0.0, le=1.0, description="Heuristic extraction confidence")
    context: str = Field("", description="Text surrounding the match")


class DetectionReport(BaseModel):
    """Matches per rule plus the rules that could not be evaluated."""
    matches: Dict[str, List[PatternMatch]] = Field(default_factory=dict)
    errors: Dict[str, str] = Field(default_factory=dict, description="Pattern errors by rule name")


class DiscoveredPattern(BaseModel):
    """A candidate pattern found while analysing a sample document."""
    value_type: ValueType
    pattern_source: str
    description: str = ""
    examples: List[str] = Field(default_factory=list, max_length=5)
    confidence: float = Field(ge=0.0, le=1.0)
    frequency: int = Field(ge=0)


class DiscoveryResult(BaseModel):
    """Result of analysing a sample document for patterns."""
    text: str = ""
    patterns: List[DiscoveredPattern] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)


class PatternTestResult(BaseModel):
    """Outcome of running one user supplied pattern against text."""
    pattern: str
    matches: List[str] = Field(default_factory=list)
    success: bool = True
    error: Optional[str] = None
