"""Unit tests for the daily message quota."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from rizzchat.services.quota import (
    count_user_messages_on,
    is_message_allowed,
    message_date,
    remaining_allowance,
)

TODAY = date(2026, 3, 14)


def _msg(role: str, when: datetime | str) -> dict[str, str]:
    timestamp = when if isinstance(when, str) else when.isoformat()
    return {"role": role, "content": "x", "timestamp": timestamp}


def _user_msgs(count: int, day: date = TODAY) -> list[dict[str, str]]:
    noon = datetime(day.year, day.month, day.day, 12, tzinfo=timezone.utc)
    return [_msg("user", noon + timedelta(minutes=i)) for i in range(count)]


class TestMessageDate:
    """Timestamp → calendar date bucketing."""

    def test_utc_timestamp(self) -> None:
        assert message_date("2026-03-14T23:59:59+00:00", timezone.utc) == TODAY

    def test_zulu_suffix(self) -> None:
        assert message_date("2026-03-14T08:00:00.123Z", timezone.utc) == TODAY

    def test_naive_timestamp_read_as_utc(self) -> None:
        assert message_date("2026-03-14T10:00:00", timezone.utc) == TODAY

    def test_converted_to_quota_zone(self) -> None:
        seoul = ZoneInfo("Asia/Seoul")
        # 20:00 UTC on the 14th is already the 15th in Seoul.
        assert message_date("2026-03-14T20:00:00+00:00", seoul) == date(2026, 3, 15)

    def test_unparseable_returns_none(self) -> None:
        assert message_date("yesterday-ish", timezone.utc) is None
        assert message_date("", timezone.utc) is None


class TestCountUserMessagesOn:
    """Counting across chats."""

    def test_counts_only_user_role(self) -> None:
        noon = datetime(2026, 3, 14, 12, tzinfo=timezone.utc)
        history = [_msg("user", noon), _msg("assistant", noon), _msg("user", noon)]
        assert count_user_messages_on([history], TODAY) == 2

    def test_ignores_other_days(self) -> None:
        history = _user_msgs(3, TODAY) + _user_msgs(4, TODAY - timedelta(days=1))
        assert count_user_messages_on([history], TODAY) == 3

    def test_sums_across_chats(self) -> None:
        histories = [_user_msgs(4), _user_msgs(0), _user_msgs(5)]
        assert count_user_messages_on(histories, TODAY) == 9

    def test_calendar_day_not_rolling_window(self) -> None:
        late_yesterday = datetime(2026, 3, 13, 23, 59, tzinfo=timezone.utc)
        early_today = datetime(2026, 3, 14, 0, 1, tzinfo=timezone.utc)
        history = [_msg("user", late_yesterday), _msg("user", early_today)]
        assert count_user_messages_on([history], TODAY) == 1

    def test_unparseable_timestamps_not_counted(self) -> None:
        history = [_msg("user", "garbage"), {"role": "user", "content": "no ts"}]
        assert count_user_messages_on([history], TODAY) == 0


class TestIsMessageAllowed:
    """Free vs pro gating at the cap boundary."""

    def test_ninth_used_allows_tenth(self) -> None:
        assert is_message_allowed(False, [_user_msgs(9)], TODAY, 10) is True

    def test_ten_used_rejects_eleventh(self) -> None:
        assert is_message_allowed(False, [_user_msgs(10)], TODAY, 10) is False

    def test_cap_spread_over_chats(self) -> None:
        histories = [_user_msgs(3), _user_msgs(3), _user_msgs(4)]
        assert is_message_allowed(False, histories, TODAY, 10) is False

    def test_yesterday_does_not_count(self) -> None:
        histories = [_user_msgs(10, TODAY - timedelta(days=1))]
        assert is_message_allowed(False, histories, TODAY, 10) is True

    def test_pro_always_allowed(self) -> None:
        assert is_message_allowed(True, [_user_msgs(500)], TODAY, 10) is True

    def test_zero_limit_blocks_free_users(self) -> None:
        assert is_message_allowed(False, [], TODAY, 0) is False


class TestRemainingAllowance:
    """Usage summary."""

    def test_free_user(self) -> None:
        assert remaining_allowance(False, [_user_msgs(3)], TODAY, 10) == (3, 7)

    def test_never_negative(self) -> None:
        assert remaining_allowance(False, [_user_msgs(12)], TODAY, 10) == (12, 0)

    def test_pro_user_unlimited(self) -> None:
        assert remaining_allowance(True, [_user_msgs(12)], TODAY, 10) == (12, None)
