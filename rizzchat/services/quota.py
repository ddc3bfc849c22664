"""Free-tier daily message quota.

Pure functions over already-loaded transcripts: no storage or network access.
The quota counts user-authored messages whose timestamp falls on the same
calendar date as ``today`` in the configured zone (a calendar day, not a
rolling 24 hours), summed over every chat the user owns.
"""

from collections.abc import Iterable, Mapping
from datetime import UTC, date, datetime, tzinfo
from typing import Any


def message_date(timestamp: str, tz: tzinfo) -> date | None:
    """Calendar date of an ISO-8601 timestamp in ``tz``.

    Naive timestamps are read as UTC. Returns None for unparseable values,
    which therefore never count against the quota.
    """
    try:
        moment = datetime.fromisoformat(timestamp)
    except (TypeError, ValueError):
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(tz).date()


def count_user_messages_on(
    histories: Iterable[Iterable[Mapping[str, Any]]],
    today: date,
    tz: tzinfo = UTC,
) -> int:
    """Number of ``role == "user"`` messages dated ``today`` across all histories."""
    return sum(
        1
        for messages in histories
        for message in messages
        if message.get("role") == "user"
        and message_date(message.get("timestamp", ""), tz) == today
    )


def is_message_allowed(
    is_pro: bool,
    histories: Iterable[Iterable[Mapping[str, Any]]],
    today: date,
    daily_limit: int,
    tz: tzinfo = UTC,
) -> bool:
    """Whether the user may send one more message today.

    The count excludes the candidate message: with a limit of 10 the 10th
    message is allowed and the 11th is rejected.
    """
    if is_pro:
        return True
    return count_user_messages_on(histories, today, tz) < daily_limit


def remaining_allowance(
    is_pro: bool,
    histories: Iterable[Iterable[Mapping[str, Any]]],
    today: date,
    daily_limit: int,
    tz: tzinfo = UTC,
) -> tuple[int, int | None]:
    """``(used_today, remaining)``; ``remaining`` is None for pro users."""
    used = count_user_messages_on(histories, today, tz)
    if is_pro:
        return used, None
    return used, max(daily_limit - used, 0)
