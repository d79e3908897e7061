# SPDX-License-Identifier: AGPL-3.0-only

"""
Record reconciliation.

Joins statement segments to customer records on the account number, compared
case-insensitively with surrounding whitespace ignored. Every segment comes
back exactly once, matched or not, so unmatched statements can be shown to
the user instead of silently disappearing.
"""

from typing import Dict, Iterable, List, Sequence

from common.logger import get_logger
from .models import CustomerRecord, ExtractedSegment, MatchStats, ReconciledRecord

logger = get_logger(__name__)


def normalize_account_key(account_number: str) -> str:
    return (account_number or "").strip().casefold()


def build_customer_index(customers: Iterable[CustomerRecord]) -> Dict[str, CustomerRecord]:
    """Index customers by normalized account; a later duplicate replaces an earlier one."""
    index: Dict[str, CustomerRecord] = {}
    for customer in customers:
        key = normalize_account_key(customer.account_number)
        if key in index:
            logger.debug("Duplicate customer account %r, keeping the later row", customer.account_number)
        index[key] = customer
    return index


def reconcile(
    segments: Sequence[ExtractedSegment],
    customers: Sequence[CustomerRecord],
) -> List[ReconciledRecord]:
    """
    Pair each segment with its customer record.

    Args:
        segments: Statement segments labelled with an account number
        customers: Customer list entries

    Returns:
        One ReconciledRecord per segment, in segment order. Unmatched segments,
        including those whose customer row has a blank email, carry a
        placeholder customer with an empty email and the segment's own
        customer name.
    """
    index = build_customer_index(customers)
    records: List[ReconciledRecord] = []

    for segment in segments:
        customer = index.get(normalize_account_key(segment.account_number))
        # A hit without an email address cannot be delivered
        if customer is None or not customer.email.strip():
            records.append(ReconciledRecord(
                segment=segment,
                customer=CustomerRecord(
                    account_number=segment.account_number,
                    email="",
                    customer_name=segment.customer_name,
                ),
                matched=False,
            ))
        else:
            records.append(ReconciledRecord(segment=segment, customer=customer, matched=True))

    stats = match_stats(records)
    logger.debug("Reconciled %d segments: %d matched, %d unmatched", stats.total, stats.matched, stats.unmatched)
    return records


def match_stats(records: Sequence[ReconciledRecord]) -> MatchStats:
    matched = sum(1 for r in records if r.matched)
    return MatchStats(total=len(records), matched=matched, unmatched=len(records) - matched)


def matched_only(records: Iterable[ReconciledRecord]) -> List[ReconciledRecord]:
    """Records that may be handed to email delivery."""
    return [r for r in records if r.matched]


def unmatched_only(records: Iterable[ReconciledRecord]) -> List[ReconciledRecord]:
    return [r for r in records if not r.matched]
