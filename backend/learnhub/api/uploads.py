"""Upload Reading — pull multipart files into memory without exceeding their size cap.

Invariants:
    - A declared size (UploadFile.size) over the cap is rejected before any read
    - Otherwise the file is read in chunks and rejected as soon as the running
      total passes the cap, so at most cap + one chunk is ever held
    - Rejection is BusinessRuleError FILE_TOO_LARGE (400)
"""

from fastapi import UploadFile

from learnhub.core.domain_types import UploadKind
from learnhub.core.errors import BusinessRuleError
from learnhub.core.upload_rules import oversize_problem

UPLOAD_CHUNK_BYTES = 1024 * 1024


def _reject_oversize(kind: UploadKind, size: int) -> None:
    problem = oversize_problem(kind, size)
    if problem:
        raise BusinessRuleError(problem["message"], problem["error_code"])


async def read_capped(file: UploadFile, kind: UploadKind) -> bytes:
    if file.size is not None:
        _reject_oversize(kind, file.size)

    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(UPLOAD_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        _reject_oversize(kind, total)
        chunks.append(chunk)
    return b"".join(chunks)


async def read_optional_document(
    file: UploadFile | None,
) -> tuple[bytes, str | None, str | None] | None:
    """(content, filename, content_type) for an attached document, None when absent."""
    if file is None or not file.filename:
        return None
    return await read_capped(file, UploadKind.DOCUMENT), file.filename, file.content_type
