"""Free-tier quota and entitlement configuration."""

from zoneinfo import ZoneInfo

from pydantic import BaseModel


class QuotaConfig(BaseModel, frozen=True):
    """Daily message cap for free users and related defaults."""

    daily_message_limit: int
    timezone: str
    default_chat_title: str
    redeem_rate_limit: str

    @property
    def tzinfo(self) -> ZoneInfo:
        """Zone whose calendar date defines "today" for the daily cap."""
        return ZoneInfo(self.timezone)
