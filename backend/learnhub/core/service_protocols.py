"""Boundary Protocols — contracts between services and external adapters.

Invariants:
    - Services NEVER import firebase_admin or boto3; they depend on these Protocols
    - Implementations live in infrastructure/ and are injected via FastAPI dependencies
    - Adapters raise PushDeliveryError / StorageError, never vendor exceptions

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Result types are frozen dataclasses: plain values crossing the boundary
"""

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class PushResponse:
    """Per-token outcome reported by the push transport."""
    token: str
    success: bool
    message_id: str | None = None
    error_code: str | None = None


@dataclass(frozen=True)
class PushResult:
    success_count: int
    failure_count: int
    responses: list[PushResponse] = field(default_factory=list)

    @property
    def first_message_id(self) -> str | None:
        for r in self.responses:
            if r.success and r.message_id:
                return r.message_id
        return None


@dataclass(frozen=True)
class StoredFile:
    """Location of an uploaded object. `path` is the key used for deletion."""
    url: str
    path: str
    size: int


class PushSender(Protocol):
    """Contract for multicast push delivery, implemented by FirebasePushSender."""
    async def send_to_tokens(
        self,
        tokens: list[str],
        title: str,
        body: str,
        data: dict[str, str] | None = None,
        image_url: str | None = None,
    ) -> PushResult: ...


class FileStorage(Protocol):
    """Contract for object storage, implemented by S3FileStorage."""
    async def upload(
        self, content: bytes, folder: str, filename: str | None, content_type: str | None,
    ) -> StoredFile: ...

    async def delete(self, path: str) -> None: ...
