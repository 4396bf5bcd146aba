"""RefreshTokenService — direct service tests for paths the routes don't expose."""

from datetime import timedelta

import pytest
from sqlalchemy import select

from learnhub.core.errors import AuthenticationError
from learnhub.core.token_rules import UNKNOWN_DEVICE, UNKNOWN_IP
from learnhub.models.refresh_token import RefreshToken
from learnhub.services.refresh_tokens import RefreshTokenService


async def test_defaults_for_missing_device_and_ip(test_db, student):
    service = RefreshTokenService(test_db)
    raw = await service.create(student.id)
    row = await service.validate(raw)
    assert row.device_info == UNKNOWN_DEVICE
    assert row.ip_address == UNKNOWN_IP


async def test_validate_records_last_use(test_db, student):
    service = RefreshTokenService(test_db)
    raw = await service.create(student.id, "Mac", "10.0.0.1")
    row = await service.validate(raw)
    assert row.last_used_at is not None


async def test_revoke_by_id(test_db, student):
    service = RefreshTokenService(test_db)
    raw = await service.create(student.id, "Mac")
    row = await service.validate(raw)

    assert await service.revoke(row.id) is True
    assert await service.revoke(row.id) is False
    with pytest.raises(AuthenticationError, match="revoked"):
        await service.validate(raw)


async def test_revoke_by_device_leaves_other_devices(test_db, student):
    service = RefreshTokenService(test_db)
    await service.create(student.id, "Mac")
    await service.create(student.id, "Mobile Device")

    assert await service.revoke_by_device(student.id, "Mac") == 1
    active = await service.list_active(student.id)
    assert [s.device_info for s in active] == ["Mobile Device"]


async def test_cleanup_with_nothing_expired(test_db, student):
    service = RefreshTokenService(test_db)
    await service.create(student.id, "Mac")
    assert await service.cleanup_expired() == {"deleted_count": 0}


async def test_timestamps_reload_as_utc(test_db, fresh_db, student):
    await RefreshTokenService(test_db).create(student.id, "Mac")
    async with fresh_db() as db:
        row = (await db.execute(select(RefreshToken))).scalar_one()
    assert row.expires_at.utcoffset() == timedelta(0)
    assert row.created_at.utcoffset() == timedelta(0)
