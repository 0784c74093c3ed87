"""
Field coercion for OFX values.

OFX carries every value as text. Two kinds need strict conversion because
getting them wrong silently corrupts financial data:

Dates (``DTPOSTED`` etc.) use the OFX datetime form::

    YYYYMMDD
    YYYYMMDDHHMMSS
    YYYYMMDDHHMMSS.XXX
    YYYYMMDDHHMMSS.XXX[-5:EST]     (offset with optional zone name)

Only the calendar date is kept, as written in the file (no time zone
conversion).

Amounts (``TRNAMT``) are signed decimals. They become ``decimal.Decimal``
straight from the text, so ``"12.345"`` stays exactly 12.345. OFX allows a
comma as the decimal separator (``"-42,50"``); thousands separators and
currency symbols are rejected.

Both functions raise ``ValueError``; the extractor re-raises it as a
positioned field error.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

_OFX_DATE = re.compile(
    r"""
    (?P<year>\d{4})(?P<month>\d{2})(?P<day>\d{2})
    (?:
        (?P<hour>\d{2})(?P<minute>\d{2})(?P<second>\d{2})
        (?:\.(?P<fraction>\d{1,6}))?
    )?
    (?:\s*\[(?P<offset>[+-]?\d{1,2}(?:\.\d{1,2})?)(?::(?P<zone>[A-Za-z0-9_]+))?\])?
    """,
    re.VERBOSE,
)

_AMOUNT = re.compile(r"[+-]?(?:\d+(?:[.,]\d*)?|[.,]\d+)")


def parse_ofx_date(text: str) -> date:
    """Parse an OFX date/datetime string into a calendar date.

    Raises:
        ValueError: If *text* is not one of the recognized forms or names an
            impossible date or time.
    """
    cleaned = text.strip()
    match = _OFX_DATE.fullmatch(cleaned)
    if match is None:
        raise ValueError(f"Unrecognized OFX date: {text!r}")

    parts = match.groupdict()
    # datetime() validates both the calendar date and the time of day
    datetime(
        int(parts["year"]),
        int(parts["month"]),
        int(parts["day"]),
        int(parts["hour"] or 0),
        int(parts["minute"] or 0),
        int(parts["second"] or 0),
    )
    return date(int(parts["year"]), int(parts["month"]), int(parts["day"]))


def parse_amount(text: str) -> Decimal:
    """Parse an OFX amount into an exact ``Decimal``.

    Raises:
        ValueError: If *text* is not a plain signed decimal number.
    """
    cleaned = text.strip()
    if not _AMOUNT.fullmatch(cleaned):
        raise ValueError(f"Not a decimal amount: {text!r}")
    try:
        return Decimal(cleaned.replace(",", "."))
    except InvalidOperation as exc:
        raise ValueError(f"Not a decimal amount: {text!r}") from exc
