"""Upload reading — size caps enforced while reading, not after."""

import io

import pytest
from fastapi import UploadFile

from learnhub.api.uploads import UPLOAD_CHUNK_BYTES, read_capped, read_optional_document
from learnhub.core.domain_types import UploadKind
from learnhub.core.errors import BusinessRuleError
from learnhub.core.upload_rules import MAX_DOCUMENT_BYTES


async def test_reads_file_within_cap():
    upload = UploadFile(file=io.BytesIO(b"%PDF-1.4 notes"), filename="notes.pdf")
    assert await read_capped(upload, UploadKind.DOCUMENT) == b"%PDF-1.4 notes"


async def test_declared_size_over_cap_rejected_before_reading():
    stream = io.BytesIO(b"tiny")
    upload = UploadFile(file=stream, filename="scan.pdf", size=MAX_DOCUMENT_BYTES + 1)

    with pytest.raises(BusinessRuleError) as exc_info:
        await read_capped(upload, UploadKind.DOCUMENT)
    assert exc_info.value.code == "FILE_TOO_LARGE"
    assert stream.tell() == 0


async def test_undeclared_size_stops_reading_past_cap():
    payload = b"\x00" * (MAX_DOCUMENT_BYTES + 5 * UPLOAD_CHUNK_BYTES)
    stream = io.BytesIO(payload)
    upload = UploadFile(file=stream, filename="scan.pdf")
    assert upload.size is None

    with pytest.raises(BusinessRuleError, match="10 MB"):
        await read_capped(upload, UploadKind.DOCUMENT)
    assert stream.tell() <= MAX_DOCUMENT_BYTES + UPLOAD_CHUNK_BYTES
    assert stream.tell() < len(payload)


async def test_optional_document_absent():
    assert await read_optional_document(None) is None
    assert await read_optional_document(UploadFile(file=io.BytesIO(b""), filename="")) is None


async def test_optional_document_keeps_name_and_type():
    upload = UploadFile(
        file=io.BytesIO(b"answers"),
        filename="answers.txt",
        headers={"content-type": "text/txt"},
    )
    assert await read_optional_document(upload) == (b"answers", "answers.txt", "text/txt")
