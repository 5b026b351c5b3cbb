from typing import Optional
import datetime

from django.utils import timezone

# Urgency lost per hour of remaining time (100 -> 0 over ~50 hours)
DECAY_PER_HOUR = 2.0

# Anything due within this many hours counts as due now
MIN_HOURS_LEFT = 1.0

MAX_URGENCY = 100.0


def hours_until(deadline: datetime.datetime, now: Optional[datetime.datetime] = None) -> float:
    """Signed number of hours between ``now`` and ``deadline``."""
    if now is None:
        now = timezone.now()
    return (deadline - now).total_seconds() / 3600.0


def compute_urgency(
    deadline: datetime.datetime,
    now: Optional[datetime.datetime] = None,
) -> float:
    """
    Maps a deadline to an urgency contribution between 0.0 and 100.0.

    Overdue and imminent (<= 1h) deadlines saturate at 100; urgency then
    decays linearly at 2 points per hour and reaches 0 about 50 hours out.

    deadline: aware datetime, already validated by the projection layer
    now: reference time, defaults to ``timezone.now()``
    """
    hours_left = max(MIN_HOURS_LEFT, hours_until(deadline, now))
    if hours_left <= MIN_HOURS_LEFT:
        return MAX_URGENCY
    urgency = MAX_URGENCY - min(MAX_URGENCY, hours_left * DECAY_PER_HOUR)
    return max(0.0, min(MAX_URGENCY, urgency))
