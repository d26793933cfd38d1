"""Display formatting for submission dates and times.

Dates are shown as ``D/M/YYYY`` and times as ``h:mm:ss am/pm`` (no leading
zero on the day, month or hour; lowercase meridiem). Older rows were stored
as ``DD/MM/YYYY`` with ``HH:MM:SS AM`` or bare 24-hour times, so the
``normalize_*`` helpers rewrite those shapes into the current display form.
"""

import re
from datetime import date, datetime, time

_DMY_PATTERN = re.compile(r"^(\d{1,2})[/.\-](\d{1,2})[/.\-](\d{4})$")
_ISO_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ].*)?$")
_MERIDIEM_TIME_PATTERN = re.compile(
    r"^(\d{1,2}):(\d{1,2})(?::(\d{1,2}))?\s*([AaPp])\.?\s*[Mm]\.?$"
)
_24H_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{1,2})(?::(\d{1,2}))?$")


def format_display_date(value: date | datetime) -> str:
    """Format a date as ``D/M/YYYY``."""
    return f"{value.day}/{value.month}/{value.year}"


def format_display_time(value: datetime | time) -> str:
    """Format a time as ``h:mm:ss am/pm``."""
    hour = value.hour % 12 or 12
    meridiem = "am" if value.hour < 12 else "pm"
    return f"{hour}:{value.minute:02d}:{value.second:02d} {meridiem}"


def normalize_date_text(text: str) -> str:
    """Rewrite a stored date string as ``D/M/YYYY``.

    Accepts ``DD/MM/YYYY`` (also with ``-`` or ``.``) and ISO
    ``YYYY-MM-DD`` dates. Anything unrecognised is returned stripped but
    otherwise unchanged.
    """
    text = text.strip()

    match = _DMY_PATTERN.match(text)
    if match:
        day, month, year = match.groups()
        return f"{int(day)}/{int(month)}/{year}"

    match = _ISO_DATE_PATTERN.match(text)
    if match:
        year, month, day = match.groups()
        return f"{int(day)}/{int(month)}/{year}"

    return text


def normalize_time_text(text: str) -> str:
    """Rewrite a stored time string into the 12-hour display form.

    Three shapes are handled:

    - ``8:05:01 am`` (already correct) is returned as-is
    - ``08:05:01 AM`` loses the leading zero and the meridiem is lowercased
    - bare 24-hour ``HH:MM[:SS]`` is converted: hour 0 -> 12 am,
      12 -> 12 pm, above 12 -> hour - 12 pm, otherwise am. Minutes are
      written as integers and missing seconds become ``00``, so
      ``13:05:00`` becomes ``1:5:00 pm``.
    """
    text = text.strip()

    match = _MERIDIEM_TIME_PATTERN.match(text)
    if match:
        hour, minute, second, meridiem = match.groups()
        result = f"{int(hour)}:{minute}"
        if second is not None:
            result += f":{second}"
        return f"{result} {meridiem.lower()}m"

    match = _24H_TIME_PATTERN.match(text)
    if match:
        hour_text, minute, second = match.groups()
        hour = int(hour_text)
        if hour == 0:
            hour, meridiem = 12, "am"
        elif hour == 12:
            meridiem = "pm"
        elif hour > 12:
            hour, meridiem = hour - 12, "pm"
        else:
            meridiem = "am"
        return f"{hour}:{int(minute)}:{second or '00'} {meridiem}"

    return text


def normalize_date_value(value):
    """Normalise a date cell value.

    Temporal values are returned untouched so the workbook keeps them as
    real dates; strings are rewritten with :func:`normalize_date_text`.
    ``None`` becomes an empty string.
    """
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value
    return normalize_date_text(str(value))


def normalize_time_value(value):
    """Normalise a time cell value (see :func:`normalize_date_value`)."""
    if value is None:
        return ""
    if isinstance(value, (datetime, time)):
        return value
    return normalize_time_text(str(value))


def date_display_text(value) -> str:
    """Return the ``D/M/YYYY`` text for any stored date value."""
    value = normalize_date_value(value)
    if isinstance(value, (datetime, date)):
        return format_display_date(value)
    return value


def time_display_text(value) -> str:
    """Return the ``h:mm:ss am/pm`` text for any stored time value."""
    value = normalize_time_value(value)
    if isinstance(value, (datetime, time)):
        return format_display_time(value)
    return value
