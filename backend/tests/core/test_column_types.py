"""Column types — UTC timestamps and guarded relationships."""

from datetime import datetime, timedelta, timezone

from learnhub.db.types import UTCDateTime
from learnhub.models.notification import Notification


def test_naive_driver_values_come_back_as_utc():
    column = UTCDateTime()
    loaded = column.process_result_value(datetime(2026, 3, 1, 12, 30), None)
    assert loaded == datetime(2026, 3, 1, 12, 30, tzinfo=timezone.utc)


def test_bound_values_converted_to_utc():
    column = UTCDateTime()
    local = datetime(2026, 3, 1, 14, 30, tzinfo=timezone(timedelta(hours=2)))
    assert column.process_bind_param(local, None) == datetime(
        2026, 3, 1, 12, 30, tzinfo=timezone.utc,
    )
    assert column.process_bind_param(None, None) is None


def test_notification_recipients_never_load_implicitly():
    assert Notification.recipients.property.lazy == "raise"
