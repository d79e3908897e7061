# SPDX-License-Identifier: AGPL-3.0-only

"""
Tests for record reconciliation.
"""

from distribution.models import CustomerRecord, ExtractedSegment
from distribution.reconciler import (
    build_customer_index,
    match_stats,
    matched_only,
    normalize_account_key,
    reconcile,
    unmatched_only,
)


class TestReconcile:
    """Test pairing segments with customers."""

    def test_case_and_whitespace_variant_matches(self):
        customers = [CustomerRecord(account_number="ABC123", email="a@x.com", customer_name="A")]
        segments = [ExtractedSegment(account_number="abc123 ")]
        (record,) = reconcile(segments, customers)
        assert record.matched
        assert record.customer.email == "a@x.com"

    def test_unmatched_gets_placeholder(self, customers):
        segment = ExtractedSegment(account_number="ZZZ999", customer_name="Zed Zulu")
        (record,) = reconcile([segment], customers)
        assert not record.matched
        assert record.customer.email == ""
        assert record.customer.account_number == "ZZZ999"
        assert record.customer.customer_name == "Zed Zulu"

    def test_every_segment_kept_in_order(self, segments, customers):
        records = reconcile(segments, customers)
        assert len(records) == len(segments)
        assert [r.segment.account_number for r in records] == ["ABC123", "ZZZ999"]
        assert [r.matched for r in records] == [True, False]

    def test_matched_bounded_by_distinct_keys(self, customers):
        segments = [ExtractedSegment(account_number=a) for a in ("ABC123", "abc123", "DEF456", "X")]
        records = reconcile(segments, customers)
        distinct_keys = {normalize_account_key(c.account_number) for c in customers}
        assert len(records) == 4
        assert sum(r.matched for r in records) <= len(segments)
        # Segments sharing an account each match, so distinct matched keys are bounded, not entries
        assert len({normalize_account_key(r.customer.account_number) for r in records if r.matched}) <= len(distinct_keys)

    def test_blank_email_hit_is_unmatched(self):
        customers = [
            CustomerRecord(account_number="A1", email="", customer_name="X"),
            CustomerRecord(account_number="B2", email="  ", customer_name="Y"),
        ]
        segments = [
            ExtractedSegment(account_number="a1", customer_name="Alpha One"),
            ExtractedSegment(account_number="B2"),
        ]
        records = reconcile(segments, customers)
        assert [r.matched for r in records] == [False, False]
        assert records[0].customer.email == ""
        assert records[0].customer.customer_name == "Alpha One"
        assert records[0].customer.account_number == "a1"
        assert matched_only(records) == []

    def test_empty_inputs(self, segments):
        assert reconcile([], []) == []
        records = reconcile(segments, [])
        assert not any(r.matched for r in records)

    def test_deterministic(self, segments, customers):
        assert reconcile(segments, customers) == reconcile(segments, customers)

    def test_later_duplicate_wins(self):
        customers = [
            CustomerRecord(account_number="ABC123", email="old@x.com", customer_name="Old"),
            CustomerRecord(account_number="abc123", email="new@x.com", customer_name="New"),
        ]
        assert build_customer_index(customers)["abc123"].email == "new@x.com"
        (record,) = reconcile([ExtractedSegment(account_number="ABC123")], customers)
        assert record.customer.customer_name == "New"


class TestStats:
    """Test match summaries."""

    def test_stats_and_filters(self, segments, customers):
        records = reconcile(segments, customers)
        stats = match_stats(records)
        assert (stats.total, stats.matched, stats.unmatched) == (2, 1, 1)
        assert [r.segment.account_number for r in matched_only(records)] == ["ABC123"]
        assert [r.segment.account_number for r in unmatched_only(records)] == ["ZZZ999"]
