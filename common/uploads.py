"""
Upload helpers shared by the HTTP endpoints.
"""
from typing import Tuple

from flask import request
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

MIME_TYPES = {
    ".pdf": {"application/pdf"},
    ".zip": {"application/zip", "application/x-zip-compressed"},
    ".csv": {"text/csv", "application/vnd.ms-excel"},
}


class UploadError(Exception):
    """Raised when a request is missing a usable file."""


def allowed_file(fileobj: FileStorage, extension: str) -> bool:
    """Lenient check: accept if either the extension or the MIME type matches."""
    if not fileobj or not fileobj.filename:
        return False
    ext = fileobj.filename.lower().endswith(extension)
    mime = fileobj.mimetype in MIME_TYPES.get(extension, set())
    return ext or mime


def read_upload(field: str, extension: str) -> Tuple[str, bytes]:
    """
    Read an uploaded file from the current request.

    Returns:
        Tuple of (safe filename, raw bytes)

    Raises:
        UploadError: the field is missing or the file has the wrong type
    """
    if field not in request.files:
        raise UploadError(f"No {field} provided")
    fileobj = request.files[field]
    if not allowed_file(fileobj, extension):
        raise UploadError(f"Only {extension[1:].upper()} files allowed for {field}")
    return secure_filename(fileobj.filename) or f"upload{extension}", fileobj.read()
