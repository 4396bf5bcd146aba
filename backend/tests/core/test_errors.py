"""Error Hierarchy — HTTP status mapping and the REST error envelope."""

from learnhub.core.errors import (
    AuthenticationError, BusinessRuleError, ConflictError, DatabaseError,
    ErrorContext, LearnHubError, PermissionDeniedError, PushDeliveryError,
    ResourceNotFoundError, StorageError, ValidationFailedError,
)


def test_status_codes():
    assert ValidationFailedError("bad", "field").http_status == 400
    assert BusinessRuleError("rule", "RULE").http_status == 400
    assert AuthenticationError("no").http_status == 401
    assert PermissionDeniedError("no").http_status == 403
    assert ResourceNotFoundError("User", 1).http_status == 404
    assert ConflictError("dup").http_status == 409
    assert PushDeliveryError("down").http_status == 502
    assert StorageError("down").http_status == 502
    assert DatabaseError("down", "commit").http_status == 503


def test_all_errors_share_base():
    assert isinstance(ConflictError("dup"), LearnHubError)


def test_not_found_message():
    err = ResourceNotFoundError("Lesson", 42)
    assert err.message == "Lesson '42' not found"
    assert err.code == "RESOURCE_NOT_FOUND"


def test_to_response_envelope():
    err = AuthenticationError(
        "Refresh token has expired", "REFRESH_TOKEN_EXPIRED",
        context=ErrorContext(user_id=3),
    )
    body = err.to_response()["error"]
    assert body["code"] == "REFRESH_TOKEN_EXPIRED"
    assert body["message"] == "Refresh token has expired"
    assert body["category"] == "authentication"
    assert body["severity"] == "warning"
    assert body["context"]["user_id"] == 3
    assert "timestamp" in body
