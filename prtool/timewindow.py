"""Relative time window parsing.

Turns expressions such as ``-7d``, ``-1m`` or ``-1yr`` into the absolute
cutoff instant used to filter merged pull requests.
"""

import re
from datetime import datetime, timedelta
from logging import getLogger

from dateutil.relativedelta import relativedelta

from .errors import EmptyInput, InvalidFormat

logger = getLogger(__name__)

# ASCII digits only; matched with fullmatch so a trailing newline is rejected
_EXPRESSION = re.compile(r"([0-9]+)([a-zA-Z]+)")

# Calendar units go through relativedelta; clock units are fixed durations.
_CALENDAR_UNITS = {
    "d": "days",
    "day": "days",
    "days": "days",
    "w": "weeks",
    "week": "weeks",
    "weeks": "weeks",
    "m": "months",
    "month": "months",
    "months": "months",
    "y": "years",
    "yr": "years",
    "year": "years",
    "years": "years",
}

_CLOCK_UNITS = {
    "h": "hours",
    "hour": "hours",
    "hours": "hours",
    "min": "minutes",
    "minute": "minutes",
    "minutes": "minutes",
    "s": "seconds",
    "sec": "seconds",
    "second": "seconds",
    "seconds": "seconds",
}

SUPPORTED_UNITS = "d, w, m, y, h, min, s"


def resolve_cutoff(expression: str, now: datetime) -> datetime:
    """Resolve a relative duration expression into an absolute cutoff.

    Args:
        expression: Relative duration such as "-7d", "-2weeks" or "-1yr"
        now: Timezone-aware reference instant the duration is subtracted from

    Returns:
        The cutoff instant, always strictly before ``now``

    Raises:
        EmptyInput: If the expression is empty
        InvalidFormat: If the expression is not ``-<positive integer><unit>``
        ValueError: If ``now`` is naive
    """
    if now.tzinfo is None or now.utcoffset() is None:
        raise ValueError("now must be timezone-aware")

    if not expression:
        raise EmptyInput()

    # Only past windows make sense
    if not expression.startswith("-"):
        raise InvalidFormat(expression, "duration must be negative (past time)")

    match = _EXPRESSION.fullmatch(expression[1:])
    if match is None:
        raise InvalidFormat(expression, "expected format -<number><unit>")

    amount = int(match.group(1))
    if amount <= 0:
        raise InvalidFormat(expression, f"duration number must be positive: {amount}")

    unit = match.group(2).lower()
    if unit not in _CALENDAR_UNITS and unit not in _CLOCK_UNITS:
        raise InvalidFormat(expression, f"unsupported time unit {unit!r} (supported: {SUPPORTED_UNITS})")

    try:
        if unit in _CALENDAR_UNITS:
            cutoff = now - relativedelta(**{_CALENDAR_UNITS[unit]: amount})
        else:
            cutoff = now - timedelta(**{_CLOCK_UNITS[unit]: amount})
    except (OverflowError, ValueError) as e:
        raise InvalidFormat(expression, "duration is out of range") from e

    logger.debug(f"Resolved {expression} relative to {now.isoformat()} as {cutoff.isoformat()}")
    return cutoff
