# SPDX-License-Identifier: AGPL-3.0-only

"""
Statement splitting.

Decides which pages of a multi-statement PDF belong to which account and
writes each page run out as its own PDF named after the account and customer.
"""

import io
import zipfile
from typing import List, Optional, Sequence, Tuple

from common.logger import get_logger
from common.pdf_utils import PDFProcessingError, export_pages, extract_text_by_page, open_pdf
from patterns.matcher import best_match
from patterns.models import PatternRule, ValueType
from patterns.rules import DEFAULT_RULES
from .filenames import build_output_filename
from .models import UNKNOWN, ExtractedSegment, OutputFile, SplitResult

logger = get_logger(__name__)


def segment_pages(
    pages_text: Sequence[str],
    rules: Optional[Sequence[PatternRule]] = None,
    source_file_name: str = "",
) -> Tuple[List[ExtractedSegment], List[str]]:
    """
    Group consecutive pages by the account number found on them.

    A page with a new account number opens a segment; a page with the same
    account number, or with none, continues the open segment. Pages before
    the first account number are grouped under "Unknown".

    Args:
        pages_text: Plain text of each page, in page order
        rules: Catalog used to find account numbers and names
        source_file_name: Name of the PDF the pages came from

    Returns:
        Tuple of (segments, errors)
    """
    rules = DEFAULT_RULES if rules is None else rules
    segments: List[ExtractedSegment] = []
    errors: List[str] = []
    current: Optional[ExtractedSegment] = None

    for index, text in enumerate(pages_text):
        account = best_match(text or "", rules, ValueType.ACCOUNT)
        name = best_match(text or "", rules, ValueType.NAME)

        if account is None:
            if current is None or current.account_number == UNKNOWN:
                errors.append(f"Page {index + 1}: no account number found")
            if current is None:
                current = ExtractedSegment(
                    account_number=UNKNOWN,
                    customer_name=name.value if name else UNKNOWN,
                    source_file_name=source_file_name,
                    page_index=index,
                    page_count=0,
                )
                segments.append(current)
            current.page_count += 1
            continue

        if current is not None and current.account_number.casefold() == account.value.casefold():
            current.page_count += 1
            if current.customer_name == UNKNOWN and name is not None:
                current.customer_name = name.value
            continue

        current = ExtractedSegment(
            account_number=account.value,
            customer_name=name.value if name else UNKNOWN,
            source_file_name=source_file_name,
            page_index=index,
            page_count=1,
        )
        segments.append(current)

    return segments, errors


def split_pdf(
    data: bytes,
    rules: Optional[Sequence[PatternRule]] = None,
    month_year: Optional[str] = None,
    source_file_name: str = "statement.pdf",
) -> SplitResult:
    """
    Split a statement PDF into one file per account.

    Args:
        data: Raw PDF bytes
        rules: Catalog used to label pages, defaults to DEFAULT_RULES
        month_year: Optional period appended to output names, e.g. "May 2025"
        source_file_name: Upload name, recorded on each segment

    Returns:
        SplitResult with segments, output files and errors
    """
    result = SplitResult()
    try:
        reader = open_pdf(data)
        pages_text = extract_text_by_page(data)
    except PDFProcessingError as e:
        result.errors.append(f"{source_file_name}: {str(e)}")
        return result

    segments, errors = segment_pages(pages_text, rules, source_file_name)
    result.errors.extend(errors)

    used_names = set()
    for segment in segments:
        page_indexes = range(segment.page_index, segment.page_index + segment.page_count)
        try:
            content = export_pages(reader, page_indexes)
        except PDFProcessingError as e:
            result.errors.append(f"Pages {segment.page_index + 1}-{segment.page_index + segment.page_count}: {str(e)}")
            continue

        file_name = _unique_name(
            build_output_filename(segment.account_number, segment.customer_name, month_year),
            used_names,
        )
        segment = segment.model_copy(update={"content": content})
        result.segments.append(segment)
        result.files.append(OutputFile(file_name=file_name, content=content, segment=segment))

    logger.info(
        "Split %s (%d pages) into %d files with %d issues",
        source_file_name, len(pages_text), len(result.files), len(result.errors),
    )
    return result


def _unique_name(file_name: str, used: set) -> str:
    candidate = file_name
    stem = file_name[:-4] if file_name.lower().endswith(".pdf") else file_name
    n = 2
    while candidate.lower() in used:
        candidate = f"{stem} ({n}).pdf"
        n += 1
    used.add(candidate.lower())
    return candidate


def bundle_zip(files: Sequence[OutputFile]) -> bytes:
    """Pack split statements into one ZIP for download."""
    mem = io.BytesIO()
    with zipfile.ZipFile(mem, mode='w', compression=zipfile.ZIP_DEFLATED) as zf:
        for f in files:
            zf.writestr(f.file_name, f.content)
    return mem.getvalue()
