"""
Prompt entitlement ledger.
Tracks the daily free prompt quota and the purchased credit balance.
The quota resets when the local calendar date changes, never by elapsed time.
The ledger holds no storage or clock of its own: the caller passes today's
date in and persists the state afterwards.
"""
from dataclasses import dataclass
from datetime import date

from htasks.exceptions import InvalidArgumentException, InsufficientBalanceException


def _require_positive_int(field: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentException(field, "must be an integer")
    if value <= 0:
        raise InvalidArgumentException(field, "must be greater than 0")


@dataclass
class EntitlementLedger:
    daily_quota: int
    daily_remaining: int
    purchased_balance: int
    last_reset_date: date

    def __post_init__(self):
        if isinstance(self.daily_quota, bool) or not isinstance(self.daily_quota, int):
            raise InvalidArgumentException("daily_quota", "must be an integer")
        if self.daily_quota < 0:
            raise InvalidArgumentException("daily_quota", "must not be negative")
        # Stored state may predate a quota change
        self.daily_remaining = min(max(0, self.daily_remaining), self.daily_quota)
        self.purchased_balance = max(0, self.purchased_balance)

    @classmethod
    def open(cls, daily_quota: int, today: date) -> "EntitlementLedger":
        """Create a ledger on first use with a full daily quota"""
        return cls(
            daily_quota=daily_quota,
            daily_remaining=daily_quota,
            purchased_balance=0,
            last_reset_date=today
        )

    def reset_daily(self, today: date) -> bool:
        """
        Restore the daily quota if today is a new calendar date.

        Idempotent within the same day.

        Returns:
            True if a reset happened
        """
        if today == self.last_reset_date:
            return False
        self.daily_remaining = self.daily_quota
        self.last_reset_date = today
        return True

    def remaining(self, today: date) -> int:
        """Get daily plus purchased prompts left (applies a pending reset)"""
        self.reset_daily(today)
        return self.daily_remaining + self.purchased_balance

    def can_consume(self, today: date) -> bool:
        return self.remaining(today) > 0

    def consume(self, today: date) -> int:
        """
        Use one prompt. Purchased credits are spent before the daily quota.

        Returns:
            Prompts remaining after this one

        Raises:
            InsufficientBalanceException: If both balances are exhausted
        """
        self.reset_daily(today)

        if self.purchased_balance > 0:
            self.purchased_balance -= 1
        elif self.daily_remaining > 0:
            self.daily_remaining -= 1
        else:
            raise InsufficientBalanceException(self.daily_remaining, self.purchased_balance)

        return self.daily_remaining + self.purchased_balance

    def add_purchased(self, count: int) -> int:
        """
        Add purchased credits.

        Returns:
            New purchased balance

        Raises:
            InvalidArgumentException: If count is not a positive integer
        """
        _require_positive_int("count", count)
        self.purchased_balance += count
        return self.purchased_balance
