from datetime import date, datetime, timedelta, timezone

from datetime_utils import ensure_utc, format_ledger_date, parse_iso_utc, to_iso_utc, utc_now


def test_format_ledger_date_from_iso_string_and_date():
    assert format_ledger_date("2024-01-15") == "15 January 2024"
    assert format_ledger_date(date(2023, 12, 1)) == "01 December 2023"
    assert format_ledger_date(datetime(2024, 2, 29, 18, 0)) == "29 February 2024"


def test_iso_helpers_normalise_to_utc():
    eat = timezone(timedelta(hours=3))
    local = datetime(2024, 1, 15, 12, 0, tzinfo=eat)

    assert to_iso_utc(local) == "2024-01-15T09:00:00Z"
    assert parse_iso_utc("2024-01-15T09:00:00Z") == local
    assert parse_iso_utc("2024-01-15T09:00:00") == datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)
    assert parse_iso_utc("yesterday") is None
    assert parse_iso_utc(None) is None


def test_ensure_utc_and_now():
    assert ensure_utc(None) is None
    assert ensure_utc(datetime(2024, 1, 1)).tzinfo is timezone.utc
    assert utc_now().tzinfo is timezone.utc
