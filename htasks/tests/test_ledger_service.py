"""
Tests for EntitlementLedger.

Tests cover:
1. Consumption order (purchased credits before the daily quota)
2. Daily reset on calendar date change
3. Purchased credit validation
4. Balance invariants
"""
import pytest
from datetime import date, timedelta

from htasks.services.ledger_service import EntitlementLedger
from htasks.exceptions import InsufficientBalanceException, InvalidArgumentException


class TestConsume:
    """Tests for consume function"""

    def test_fresh_ledger_has_full_quota(self, today):
        ledger = EntitlementLedger.open(15, today)

        assert ledger.remaining(today) == 15
        assert ledger.can_consume(today) is True

    def test_daily_quota_exhausted(self, today):
        """15 consumptions succeed, the 16th fails"""
        ledger = EntitlementLedger.open(15, today)

        for expected in range(14, -1, -1):
            assert ledger.consume(today) == expected

        assert ledger.can_consume(today) is False
        with pytest.raises(InsufficientBalanceException):
            ledger.consume(today)
        assert ledger.daily_remaining == 0
        assert ledger.purchased_balance == 0

    def test_purchased_credits_used_first(self, today):
        """Purchased credits are spent before the daily quota"""
        ledger = EntitlementLedger.open(15, today)
        ledger.add_purchased(30)

        remaining = ledger.consume(today)

        assert ledger.purchased_balance == 29
        assert ledger.daily_remaining == 15
        assert remaining == 44

    def test_falls_back_to_daily_after_purchased(self, today):
        ledger = EntitlementLedger(daily_quota=15, daily_remaining=15, purchased_balance=1, last_reset_date=today)

        ledger.consume(today)
        ledger.consume(today)

        assert ledger.purchased_balance == 0
        assert ledger.daily_remaining == 14

    def test_failed_consume_changes_nothing(self, today):
        ledger = EntitlementLedger(daily_quota=15, daily_remaining=0, purchased_balance=0, last_reset_date=today)

        with pytest.raises(InsufficientBalanceException):
            ledger.consume(today)

        assert ledger == EntitlementLedger(15, 0, 0, today)

    def test_zero_quota_only_uses_purchased(self, today):
        ledger = EntitlementLedger.open(0, today)
        assert ledger.can_consume(today) is False

        ledger.add_purchased(1)
        ledger.consume(today)

        with pytest.raises(InsufficientBalanceException):
            ledger.consume(today)


class TestResetDaily:
    """Tests for reset_daily function"""

    def test_new_day_restores_quota(self, today, yesterday):
        """Quota and purchased credits add up after the date changes"""
        ledger = EntitlementLedger(daily_quota=15, daily_remaining=0, purchased_balance=5, last_reset_date=yesterday)

        assert ledger.remaining(today) == 20
        assert ledger.daily_remaining == 15
        assert ledger.last_reset_date == today

    def test_reset_is_idempotent_within_a_day(self, today, yesterday):
        ledger = EntitlementLedger(daily_quota=15, daily_remaining=3, purchased_balance=0, last_reset_date=yesterday)

        assert ledger.reset_daily(today) is True
        ledger.consume(today)
        assert ledger.reset_daily(today) is False

        assert ledger.daily_remaining == 14

    def test_same_day_does_not_reset(self, today):
        ledger = EntitlementLedger(daily_quota=15, daily_remaining=4, purchased_balance=0, last_reset_date=today)

        assert ledger.reset_daily(today) is False
        assert ledger.daily_remaining == 4

    def test_reset_after_several_days(self, today):
        ledger = EntitlementLedger(
            daily_quota=15, daily_remaining=2, purchased_balance=0,
            last_reset_date=today - timedelta(days=10)
        )

        assert ledger.remaining(today) == 15

    def test_clock_moved_backwards_still_resets(self, today):
        """Any change of calendar date resets, not only forward moves"""
        ledger = EntitlementLedger(
            daily_quota=15, daily_remaining=0, purchased_balance=0,
            last_reset_date=today + timedelta(days=1)
        )

        assert ledger.reset_daily(today) is True
        assert ledger.daily_remaining == 15

    def test_reset_keeps_purchased_balance(self, today, yesterday):
        ledger = EntitlementLedger(daily_quota=15, daily_remaining=0, purchased_balance=7, last_reset_date=yesterday)

        ledger.reset_daily(today)

        assert ledger.purchased_balance == 7

    def test_consume_on_new_day_resets_first(self, today, yesterday):
        ledger = EntitlementLedger(daily_quota=15, daily_remaining=0, purchased_balance=0, last_reset_date=yesterday)

        assert ledger.consume(today) == 14


class TestAddPurchased:
    """Tests for add_purchased function"""

    def test_adds_to_balance(self, today):
        ledger = EntitlementLedger.open(15, today)

        assert ledger.add_purchased(30) == 30
        assert ledger.add_purchased(30) == 60
        assert ledger.daily_remaining == 15

    @pytest.mark.parametrize("count", [0, -1, -30, True, 1.5, "30", None])
    def test_rejects_invalid_count(self, today, count):
        """Non-positive and non-integer counts leave the balance unchanged"""
        ledger = EntitlementLedger.open(15, today)

        with pytest.raises(InvalidArgumentException) as exc_info:
            ledger.add_purchased(count)

        assert exc_info.value.field == "count"
        assert ledger.purchased_balance == 0


class TestInvariants:
    """Tests for balance bounds"""

    def test_quota_decrease_clamps_daily_remaining(self, today):
        """Stored state from a larger quota is clamped to the new one"""
        ledger = EntitlementLedger(daily_quota=10, daily_remaining=15, purchased_balance=0, last_reset_date=today)

        assert ledger.daily_remaining == 10

    def test_negative_balances_clamped(self, today):
        ledger = EntitlementLedger(daily_quota=15, daily_remaining=-3, purchased_balance=-1, last_reset_date=today)

        assert ledger.daily_remaining == 0
        assert ledger.purchased_balance == 0

    @pytest.mark.parametrize("quota", [-1, 1.5, True])
    def test_invalid_quota_rejected(self, today, quota):
        with pytest.raises(InvalidArgumentException):
            EntitlementLedger.open(quota, today)

    def test_balances_stay_in_bounds(self, today):
        """daily_remaining stays in [0, quota] over a mixed sequence of operations"""
        ledger = EntitlementLedger.open(3, today)
        ledger.add_purchased(2)
        day = today

        for step in range(20):
            if step % 7 == 6:
                day = day + timedelta(days=1)
            if ledger.can_consume(day):
                ledger.consume(day)
            assert 0 <= ledger.daily_remaining <= ledger.daily_quota
            assert ledger.purchased_balance >= 0
