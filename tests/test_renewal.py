"""
Tests for renewal and date projections.
"""

from datetime import date, datetime, timedelta

import pytest

from advisor_crm.services import renewal
from advisor_crm.services.renewal import (
    as_date,
    calculate_next_renewal_date,
    calculate_days_until_renewal,
    is_renewing_soon,
    calculate_policy_age,
    calculate_commission_maturity_date,
)
from conftest import TODAY, make_policy


class TestNextRenewalDate:
    """Next anniversary of the start date, on or after today."""

    def test_anniversary_later_this_year(self):
        policy = make_policy(start_date=date(2020, 12, 1))
        assert calculate_next_renewal_date(policy, TODAY) == date(2024, 12, 1)

    def test_anniversary_already_passed_rolls_to_next_year(self):
        policy = make_policy(start_date=date(2020, 1, 1))
        assert calculate_next_renewal_date(policy, TODAY) == date(2025, 1, 1)

    def test_anniversary_today(self):
        policy = make_policy(start_date=date(2020, 6, 15))
        assert calculate_next_renewal_date(policy, TODAY) == TODAY

    def test_future_start_is_its_own_renewal(self):
        policy = make_policy(start_date=date(2025, 1, 10))
        assert calculate_next_renewal_date(policy, TODAY) == date(2025, 1, 10)

    def test_no_start_date(self):
        assert calculate_next_renewal_date(make_policy(), TODAY) is None

    def test_leap_day_start_renews_feb_28(self):
        policy = make_policy(start_date=date(2020, 2, 29))
        assert calculate_next_renewal_date(policy, date(2021, 2, 28)) == date(2021, 2, 28)
        assert calculate_next_renewal_date(policy, date(2021, 3, 1)) == date(2022, 2, 28)

    def test_iso_string_start_date(self):
        policy = make_policy(start_date="2020-12-01")
        assert calculate_next_renewal_date(policy, TODAY) == date(2024, 12, 1)

    def test_malformed_date_fails_fast(self):
        with pytest.raises(ValueError):
            calculate_next_renewal_date(make_policy(start_date="2020-13-45"), TODAY)

    def test_never_in_the_past(self):
        """Renewal date is on or after today for any start date."""
        start = date(2012, 2, 29)
        for step in range(150):
            start_date = start + timedelta(days=37 * step)
            for today in (TODAY, date(2024, 2, 29), date(2023, 12, 31)):
                renewal_date = calculate_next_renewal_date(make_policy(start_date=start_date), today)
                assert renewal_date >= today

    def test_defaults_to_service_clock(self, monkeypatch):
        monkeypatch.setattr(renewal, "get_today", lambda: TODAY)
        policy = make_policy(start_date=date(2020, 12, 1))
        assert calculate_next_renewal_date(policy) == date(2024, 12, 1)


class TestDaysUntilRenewal:

    def test_days(self):
        assert calculate_days_until_renewal(make_policy(start_date=date(2020, 12, 1)), TODAY) == 169
        assert calculate_days_until_renewal(make_policy(start_date=date(2020, 1, 1)), TODAY) == 200

    def test_zero_on_anniversary(self):
        assert calculate_days_until_renewal(make_policy(start_date=date(2019, 6, 15)), TODAY) == 0

    def test_no_start_date(self):
        assert calculate_days_until_renewal(make_policy(), TODAY) is None

    def test_renewing_soon_window_is_inclusive(self):
        policy = make_policy(start_date=date(2020, 9, 1))  # 78 days away
        assert is_renewing_soon(policy, 90, TODAY)
        assert is_renewing_soon(policy, 78, TODAY)
        assert not is_renewing_soon(policy, 77, TODAY)

    def test_renewing_soon_without_start_date(self):
        assert not is_renewing_soon(make_policy(), 90, TODAY)


class TestPolicyAgeAndMaturity:

    def test_policy_age_whole_years(self):
        assert calculate_policy_age(make_policy(start_date=date(2020, 6, 15)), TODAY) == 4
        assert calculate_policy_age(make_policy(start_date=date(2020, 6, 16)), TODAY) == 3
        assert calculate_policy_age(make_policy(), TODAY) is None

    def test_commission_maturity_date(self):
        policy = make_policy(start_date=date(2023, 6, 1), commission_duration=5)
        assert calculate_commission_maturity_date(policy) == date(2028, 6, 1)

    def test_commission_maturity_date_leap_day(self):
        policy = make_policy(start_date=date(2020, 2, 29), commission_duration=5)
        assert calculate_commission_maturity_date(policy) == date(2025, 2, 28)

    def test_commission_maturity_needs_both_fields(self):
        assert calculate_commission_maturity_date(make_policy(start_date=date(2023, 6, 1))) is None
        assert calculate_commission_maturity_date(make_policy(commission_duration=5)) is None


class TestAsDate:

    def test_accepts_dates_datetimes_and_strings(self):
        assert as_date(date(2024, 1, 2)) == date(2024, 1, 2)
        assert as_date(datetime(2024, 1, 2, 13, 30)) == date(2024, 1, 2)
        assert as_date("2024-01-02") == date(2024, 1, 2)
        assert as_date("2024-01-02T10:00:00") == date(2024, 1, 2)

    def test_blank_is_none(self):
        assert as_date(None) is None
        assert as_date("") is None
