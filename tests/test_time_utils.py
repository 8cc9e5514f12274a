from datetime import UTC, date, datetime

from invoicedesk.app.core.time import epoch_millis, format_long_date, utc_now, utc_today


def test_utc_now_is_timezone_aware_utc():
    value = utc_now()
    assert value.tzinfo is UTC


def test_utc_today_matches_utc_now():
    assert utc_today() == utc_now().date()


def test_epoch_millis():
    assert epoch_millis(datetime(1970, 1, 1, 0, 0, 1, tzinfo=UTC)) == 1000


def test_format_long_date():
    assert format_long_date(date(2026, 10, 5)) == "October 5, 2026"
    assert format_long_date(None) == ""
