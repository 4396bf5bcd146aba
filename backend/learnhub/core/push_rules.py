"""Push Delivery Rules — token filtering and FCM payload shaping.

Invariants:
    - filter_deliverable_tokens preserves input order and drops duplicates
    - Placeholder tokens and anything <= MIN_FCM_TOKEN_LENGTH chars never reach the transport
    - build_push_data returns dict[str, str] (FCM data maps accept strings only)
    - All functions PURE: no IO, no mutation of arguments

Design Decisions:
    - Filtering in core, not the FCM adapter: the dispatcher decides "nothing to send"
      before paying for a transport call (ADR: impureim sandwich)
"""

import json
from collections.abc import Iterable
from typing import Any

MIN_FCM_TOKEN_LENGTH: int = 50
PLACEHOLDER_TOKENS: frozenset[str] = frozenset(
    {"mock-token-1", "mock-token-2", "mock-token-3"},
)
UNREGISTERED_ERROR_CODE: str = "unregistered"


def is_deliverable_token(token: str | None) -> bool:
    if not token or not token.strip():
        return False
    if token in PLACEHOLDER_TOKENS:
        return False
    return len(token) > MIN_FCM_TOKEN_LENGTH


def filter_deliverable_tokens(tokens: Iterable[str | None]) -> list[str]:
    """Drop empty, placeholder, short and duplicate tokens."""
    seen: set[str] = set()
    result: list[str] = []
    for token in tokens:
        if not is_deliverable_token(token) or token in seen:
            continue
        seen.add(token)
        result.append(token)
    return result


def build_push_data(data: dict[str, Any] | None) -> dict[str, str]:
    """Stringify a notification's data payload for the FCM data map."""
    if not data:
        return {}
    result: dict[str, str] = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, str):
            result[str(key)] = value
        else:
            result[str(key)] = json.dumps(value, default=str)
    return result


def tokens_to_prune(responses: Iterable[Any]) -> list[str]:
    """Tokens the transport reported as no longer registered to any app install."""
    return [
        r.token for r in responses
        if not r.success and r.error_code == UNREGISTERED_ERROR_CODE
    ]


def dedupe_ids(ids: Iterable[int]) -> list[int]:
    """Order-preserving de-duplication of recipient ids."""
    return list(dict.fromkeys(ids))
