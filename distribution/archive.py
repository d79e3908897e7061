# SPDX-License-Identifier: AGPL-3.0-only

"""
Archive ingestion.

Unpacks statement PDFs from an uploaded ZIP and labels each one with the
account number and customer name recovered from its file name.
"""

import io
import zipfile
from typing import Iterable, Tuple

from common.logger import get_logger
from .filenames import parse_filename
from .models import ArchiveImport, ExtractedSegment

logger = get_logger(__name__)


def segment_from_file(filename: str, content: bytes) -> ExtractedSegment:
    """Label one statement file by its name."""
    parsed = parse_filename(filename)
    return ExtractedSegment(
        account_number=parsed.account_number,
        customer_name=parsed.customer_name,
        source_file_name=filename,
        page_index=0,
        content=content,
    )


def segments_from_files(files: Iterable[Tuple[str, bytes]]) -> ArchiveImport:
    """Label (filename, payload) pairs that were already unpacked elsewhere."""
    result = ArchiveImport()
    for filename, content in files:
        result.segments.append(segment_from_file(filename, content))
    return result


def extract_archive(data: bytes, archive_name: str = "archive.zip") -> ArchiveImport:
    """
    Extract every PDF in a ZIP archive.

    Args:
        data: Raw ZIP bytes
        archive_name: Upload name, used in error messages

    Returns:
        ArchiveImport with one segment per PDF and per-file error messages
    """
    result = ArchiveImport()
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, OSError, ValueError) as e:
        result.errors.append(f"Failed to process {archive_name}: {str(e)}")
        return result

    with archive:
        members = [
            info for info in archive.infolist()
            if not info.is_dir() and info.filename.lower().endswith(".pdf")
        ]
        if not members:
            result.errors.append(f"No PDF files found in {archive_name}")

        for info in members:
            try:
                content = archive.read(info)
            except (zipfile.BadZipFile, OSError, RuntimeError, ValueError) as e:
                result.errors.append(f"Failed to extract {info.filename}: {str(e)}")
                continue
            result.segments.append(segment_from_file(info.filename, content))

    logger.debug("Extracted %d PDFs from %s", len(result.segments), archive_name)
    return result
