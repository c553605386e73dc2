from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


UTC = timezone.utc

# Date pattern the ledger expects alongside ``transactionDate``.
LEDGER_DATE_FORMAT = "dd MMMM yyyy"
LEDGER_LOCALE = "en"

_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_iso_utc(dt: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime as an ISO-8601 UTC string with a ``Z`` suffix."""

    value = ensure_utc(dt)
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")


def parse_iso_utc(value: Optional[str]) -> Optional[datetime]:
    """Inverse of :func:`to_iso_utc`; naive values are assumed to be UTC."""

    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def format_ledger_date(value: date | str) -> str:
    """Format a date the way the ledger parses ``dd MMMM yyyy``.

    Strings are accepted in ISO form (``2024-01-15``) and converted.
    The month name is spelled out explicitly so the result does not depend on
    the process locale.
    """

    if isinstance(value, str):
        value = date.fromisoformat(value.strip())
    if isinstance(value, datetime):
        value = value.date()
    return f"{value.day:02d} {_MONTHS[value.month - 1]} {value.year:04d}"


__all__ = [
    "UTC",
    "LEDGER_DATE_FORMAT",
    "LEDGER_LOCALE",
    "ensure_utc",
    "format_ledger_date",
    "parse_iso_utc",
    "to_iso_utc",
    "utc_now",
]
