"""
Entry Date Resolution
=====================

Works out the date an entry is compared against the recency threshold.

The chain is: published date, then last-updated date, then "now". Each
step yields an ``Ok``/``Err`` result so a bad field only moves the chain on
to the next one.

feedparser already reads most feed dates into UTC time tuples; those are
used first. The raw string is only parsed here when feedparser gave up on it.
"""

from datetime import datetime, timezone
from typing import Optional, Sequence, Tuple

from dateutil import parser as date_parser

from rssdigest.models import RawEntry
from rssdigest.utils.exceptions import DateResolutionError
from rssdigest.utils.result import Err, Ok, Result, first_ok

HOUR = 3600

# RFC 822 zone names, which dateutil does not resolve on its own
RFC822_ZONES = {
    "UT": 0,
    "GMT": 0,
    "EST": -5 * HOUR,
    "EDT": -4 * HOUR,
    "CST": -6 * HOUR,
    "CDT": -5 * HOUR,
    "MST": -7 * HOUR,
    "MDT": -6 * HOUR,
    "PST": -8 * HOUR,
    "PDT": -7 * HOUR,
}


def parse_date(
    value: Optional[str],
    field_name: str = "date",
    parsed: Optional[Sequence[int]] = None,
) -> Result:
    """Parse a feed date into an aware UTC datetime.

    Args:
        value: Date string as it appeared in the feed
        field_name: Field the value came from, for error context
        parsed: feedparser's UTC time tuple for the same field, if any

    Returns:
        ``Ok(datetime)``, or ``Err(DateResolutionError)`` when the field is
        absent or cannot be read. Naive values are taken to be UTC.
    """
    if parsed:
        try:
            return Ok(datetime(*parsed[:6], tzinfo=timezone.utc))
        except (ValueError, OverflowError, TypeError) as e:
            return Err(
                DateResolutionError(
                    f"{field_name} is out of range: {value!r} ({e})", field_name=field_name
                )
            )

    if value is None or not str(value).strip():
        return Err(DateResolutionError(f"{field_name} is absent", field_name=field_name))

    try:
        date = date_parser.parse(str(value), tzinfos=RFC822_ZONES)
        if date.tzinfo is None:
            date = date.replace(tzinfo=timezone.utc)
        return Ok(date.astimezone(timezone.utc))
    except (ValueError, OverflowError, TypeError) as e:
        return Err(
            DateResolutionError(
                f"{field_name} is not a date: {value!r} ({e})", field_name=field_name
            )
        )


def resolve_entry_date(entry: RawEntry) -> Result:
    """Resolve the entry's own date, ``Err`` if neither field is usable."""
    return first_ok(
        lambda: parse_date(entry.date_published, "date_published", entry.published_parsed),
        lambda: parse_date(entry.last_updated, "last_updated", entry.updated_parsed),
    )


def comparison_date(entry: RawEntry, now: datetime) -> Tuple[datetime, bool]:
    """Date to compare against the threshold and whether the entry supplied it.

    Entries without a usable date get ``now`` and are therefore always kept.
    """
    result = resolve_entry_date(entry)
    if result.is_ok:
        return result.value, True
    return now, False
