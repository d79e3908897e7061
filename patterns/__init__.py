# SPDX-License-Identifier: AGPL-3.0-only

"""
Pattern engine: rule catalog, matcher, synthesizer, discovery and tester.
"""

from .models import (
    ValueType,
    PatternRule,
    PatternMatch,
    DetectionReport,
    DiscoveredPattern,
    DiscoveryResult,
    PatternTestResult,
)
from .rules import DEFAULT_RULES, VALIDATORS, rules_by_type
from .matcher import detect_patterns, detect_report, best_match
from .synthesizer import generate_regex_pattern
from .discovery import discover_patterns, analyze_document
from .tester import evaluate_pattern, evaluate_library
from .library import PatternLibrary, load_library, save_library


__all__ = [
    'ValueType',
    'PatternRule',
    'PatternMatch',
    'DetectionReport',
    'DiscoveredPattern',
    'DiscoveryResult',
    'PatternTestResult',
    'DEFAULT_RULES',
    'VALIDATORS',
    'rules_by_type',
    'detect_patterns',
    'detect_report',
    'best_match',
    'generate_regex_pattern',
    'discover_patterns',
    'analyze_document',
    'evaluate_pattern',
    'evaluate_library',
    'PatternLibrary',
    'load_library',
    'save_library',
]
