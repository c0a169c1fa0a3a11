"""
Tests for the commission calculator and display formatting.
"""

import pytest

from advisor_crm.services.commission import (
    calculate_total_commission,
    calculate_first_year_commission,
    clamp_first_year_commission,
    calculate_ongoing_commission,
    calculate_total_expected_commission,
    calculate_premium_to_value_ratio,
)
from advisor_crm.services.formatting import (
    format_currency,
    format_percentage,
    payment_structure_label,
)
from conftest import make_policy


# ============================================================================
# 1. TOTAL / FIRST-YEAR COMMISSION
# ============================================================================

class TestTotalCommission:
    """Test premium * rate / 100 and its missing-data handling."""

    @pytest.mark.parametrize("premium", [0, 1, 999.99, 10000])
    @pytest.mark.parametrize("rate", [0, 2.5, 50, 100])
    def test_formula(self, premium, rate):
        assert calculate_total_commission(premium, rate) == premium * rate / 100

    def test_example(self):
        assert calculate_total_commission(10000, 50) == 5000

    def test_missing_premium_is_none(self):
        assert calculate_total_commission(None, 50) is None

    def test_missing_rate_is_none(self):
        assert calculate_total_commission(10000, None) is None

    def test_zero_is_not_missing(self):
        """A zero rate yields a real zero, not None."""
        assert calculate_total_commission(10000, 0) == 0

    def test_first_year_uses_same_formula(self):
        assert calculate_first_year_commission(2000, 40) == 800
        assert calculate_first_year_commission(None, 40) is None

    def test_clamp(self):
        assert clamp_first_year_commission(6000, 5000) == 5000
        assert clamp_first_year_commission(4000, 5000) == 4000
        assert clamp_first_year_commission(None, 5000) is None
        assert clamp_first_year_commission(4000, None) == 4000


# ============================================================================
# 2. ONGOING COMMISSION
# ============================================================================

class TestOngoingCommission:
    """Test the divisor table per payment structure."""

    @pytest.mark.parametrize("payment_structure_type,expected", [
        ("single_premium", 0),
        ("one_year_term", 0),
        ("regular_premium", 160),
        ("five_year_premium", 200),
        ("ten_year_premium", 160),
        ("lifetime_premium", 160),
    ])
    def test_divisor_table(self, payment_structure_type, expected):
        assert calculate_ongoing_commission(1000, 200, payment_structure_type) == expected

    def test_unknown_structure_pays_nothing(self):
        assert calculate_ongoing_commission(1000, 200, "monthly_whatever") == 0
        assert calculate_ongoing_commission(1000, 200, None) == 0

    def test_missing_amounts_are_none(self):
        assert calculate_ongoing_commission(None, 200, "regular_premium") is None
        assert calculate_ongoing_commission(1000, None, "regular_premium") is None

    def test_full_first_year_leaves_nothing(self):
        assert calculate_ongoing_commission(5000, 5000, "regular_premium") == 0


# ============================================================================
# 3. TOTAL EXPECTED COMMISSION AND RATIOS
# ============================================================================

class TestTotalExpectedCommission:

    def test_first_year_plus_ongoing_years(self):
        policy = make_policy(
            first_year_commission=500,
            annual_ongoing_commission=100,
            commission_duration=3
        )
        assert calculate_total_expected_commission(policy) == 700

    @pytest.mark.parametrize("duration", [None, 0, 1])
    def test_short_duration_is_first_year_only(self, duration):
        policy = make_policy(
            first_year_commission=500,
            annual_ongoing_commission=100,
            commission_duration=duration
        )
        assert calculate_total_expected_commission(policy) == 500

    def test_missing_amounts_count_as_zero(self):
        policy = make_policy(annual_ongoing_commission=100, commission_duration=4)
        assert calculate_total_expected_commission(policy) == 300
        assert calculate_total_expected_commission(make_policy()) == 0

    def test_never_negative(self):
        policy = make_policy(
            first_year_commission=100,
            annual_ongoing_commission=-500,
            commission_duration=3
        )
        assert calculate_total_expected_commission(policy) == 0


class TestPremiumToValueRatio:

    def test_ratio_is_percentage(self):
        assert calculate_premium_to_value_ratio(make_policy(premium=1000, value=50000)) == 2.0

    def test_not_clamped(self):
        assert calculate_premium_to_value_ratio(make_policy(premium=300, value=200)) == 150.0

    @pytest.mark.parametrize("premium,value", [(None, 1000), (1000, None), (0, 1000), (1000, 0)])
    def test_missing_or_zero_is_none(self, premium, value):
        assert calculate_premium_to_value_ratio(make_policy(premium=premium, value=value)) is None


# ============================================================================
# 4. FORMATTING
# ============================================================================

class TestFormatting:

    def test_currency(self):
        assert format_currency(None) == "N/A"
        assert format_currency(0) == "$0"
        assert format_currency(1234) == "$1,234"
        assert format_currency(1234.5) == "$1,234.50"

    def test_percentage(self):
        assert format_percentage(None) == "N/A"
        assert format_percentage(12.5) == "12.5%"
        assert format_percentage(50.0) == "50%"

    def test_payment_structure_label(self):
        assert payment_structure_label("five_year_premium") == "5-Year Premium"
        assert payment_structure_label("custom_plan") == "custom_plan"
        assert payment_structure_label(None) == "N/A"
