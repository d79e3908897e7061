# SPDX-License-Identifier: AGPL-3.0-only

"""
Statement distribution: file name parsing, customer lists, archive unpacking,
PDF splitting, reconciliation and email delivery.
"""

from .models import (
    UNKNOWN,
    FilenameParseResult,
    ExtractedSegment,
    CustomerRecord,
    CustomerImport,
    ReconciledRecord,
    MatchStats,
    ArchiveImport,
    SplitResult,
    EmailTemplate,
    RenderedEmail,
    DeliveryResult,
)
from .filenames import parse_filename, build_output_filename
from .customers import parse_customer_csv, customers_to_csv
from .archive import extract_archive
from .splitter import split_pdf, segment_pages, bundle_zip
from .reconciler import reconcile, match_stats, matched_only
from .templates import DEFAULT_TEMPLATE, render_email, clean_customer_name
from .mailer import MailgunClient, DeliveryError


__all__ = [
    'UNKNOWN',
    'FilenameParseResult',
    'ExtractedSegment',
    'CustomerRecord',
    'CustomerImport',
    'ReconciledRecord',
    'MatchStats',
    'ArchiveImport',
    'SplitResult',
    'EmailTemplate',
    'RenderedEmail',
    'DeliveryResult',
    'parse_filename',
    'build_output_filename',
    'parse_customer_csv',
    'customers_to_csv',
    'extract_archive',
    'split_pdf',
    'segment_pages',
    'bundle_zip',
    'reconcile',
    'match_stats',
    'matched_only',
    'DEFAULT_TEMPLATE',
    'render_email',
    'clean_customer_name',
    'MailgunClient',
    'DeliveryError',
]
