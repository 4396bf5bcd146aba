"""Upload Rules — MIME whitelist and size caps per upload kind.

Invariants:
    - Videos: video/(mp4|avi|mov|wmv|flv|webm|mkv), at most 100 MB
    - Documents: */(pdf|doc|docx|jpg|jpeg|png|txt), at most 10 MB
    - check_upload and oversize_problem are PURE: they return an error descriptor or None
"""

import os
import re

from learnhub.core.domain_types import UploadKind

MAX_VIDEO_BYTES: int = 100 * 1024 * 1024
MAX_DOCUMENT_BYTES: int = 10 * 1024 * 1024

_RULES: dict[UploadKind, tuple[re.Pattern[str], int, str]] = {
    UploadKind.VIDEO: (
        re.compile(r"/(mp4|avi|mov|wmv|flv|webm|mkv)$"),
        MAX_VIDEO_BYTES,
        "Only video files are allowed",
    ),
    UploadKind.DOCUMENT: (
        re.compile(r"/(pdf|doc|docx|jpg|jpeg|png|txt)$"),
        MAX_DOCUMENT_BYTES,
        "Only document files are allowed",
    ),
}


def max_upload_bytes(kind: UploadKind) -> int:
    return _RULES[kind][1]


def oversize_problem(kind: UploadKind, size: int) -> dict | None:
    """The size check alone, usable before the whole file has been read."""
    max_bytes = max_upload_bytes(kind)
    if size > max_bytes:
        return {
            "error_code": "FILE_TOO_LARGE",
            "message": f"File exceeds the {max_bytes // (1024 * 1024)} MB limit",
        }
    return None


def check_upload(kind: UploadKind, content_type: str | None, size: int) -> dict | None:
    pattern, _, type_message = _RULES[kind]
    if not content_type or not pattern.search(content_type):
        return {"error_code": "UNSUPPORTED_FILE_TYPE", "message": type_message}
    if size <= 0:
        return {"error_code": "EMPTY_FILE", "message": "Uploaded file is empty"}
    return oversize_problem(kind, size)


def file_extension(filename: str | None) -> str:
    """Lower-cased extension including the dot, or '' when absent."""
    if not filename:
        return ""
    return os.path.splitext(filename)[1].lower()
