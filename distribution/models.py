# SPDX-License-Identifier: AGPL-3.0-only

"""
Pydantic models for the statement distribution workflow.

Segments come from splitting a PDF or unpacking an archive, customers come
from an uploaded list, and reconciled records pair the two for delivery.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

UNKNOWN = "Unknown"


class FilenameParseResult(BaseModel):
    """Account and customer name recovered from a file name."""
    model_config = ConfigDict(frozen=True)

    account_number: str = Field(min_length=1)
    customer_name: str = Field(min_length=1)


class ExtractedSegment(BaseModel):
    """One page or page run attributed to a single account."""
    account_number: str
    customer_name: str = UNKNOWN
    source_file_name: str = ""
    page_index: int = Field(default=0, ge=0, description="First page of the segment (0-based)")
    page_count: int = Field(default=1, ge=0, description="Number of pages in the segment")
    content: bytes = Field(default=b"", repr=False)


class CustomerRecord(BaseModel):
    """A row of the uploaded customer list."""
    account_number: str
    email: str
    customer_name: str


class CustomerImport(BaseModel):
    """Parsed customer list with one message per rejected row."""
    customers: List[CustomerRecord] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class ReconciledRecord(BaseModel):
    """A segment paired with the customer it belongs to, if any."""
    segment: ExtractedSegment
    customer: CustomerRecord
    matched: bool


class MatchStats(BaseModel):
    total: int = 0
    matched: int = 0
    unmatched: int = 0


class ArchiveImport(BaseModel):
    """PDFs unpacked from an archive, labelled by file name."""
    segments: List[ExtractedSegment] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class OutputFile(BaseModel):
    file_name: str
    content: bytes = Field(repr=False)
    segment: ExtractedSegment


class SplitResult(BaseModel):
    """Result of splitting one statement PDF by account."""
    segments: List[ExtractedSegment] = Field(default_factory=list)
    files: List[OutputFile] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class EmailTemplate(BaseModel):
    subject: str
    body: str

    @classmethod
    def from_text(cls, text: str, default_subject: str = "Your Statement") -> "EmailTemplate":
        """
        Parse a plain-text template whose first ``Subject:`` line is the subject.

        Everything after the subject line is the body. Without a subject line
        the whole text is the body.
        """
        lines = (text or "").split("\n")
        for i, line in enumerate(lines):
            if line.startswith("Subject:"):
                subject = line[len("Subject:"):].strip() or default_subject
                return cls(subject=subject, body="\n".join(lines[i + 1:]).strip())
        return cls(subject=default_subject, body=(text or "").strip())


class RenderedEmail(BaseModel):
    subject: str
    body: str


class DeliveryResult(BaseModel):
    """Outcome of sending one statement email."""
    account_number: str
    email: str
    success: bool
    error: Optional[str] = None
    message_id: Optional[str] = None
