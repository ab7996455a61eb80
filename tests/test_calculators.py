"""Tests for the HECS repayment calculators."""

from decimal import Decimal

import pytest

from src.calculators.repayment import (
    _STRATEGIES,
    RepaymentScheme,
    calculate_repayment,
    compare_repayments,
    yearly_repayment,
)
from src.calculators.repayment_data import (
    FY2024_25_SCHEDULE,
    Band,
    build_schedule,
)

# --- Old scheme (non-marginal) tests ---


class TestOldScheme:
    def test_reference_60k(self) -> None:
        """$60,000 falls in the 1% band: whole income at 1% = $600."""
        assert yearly_repayment(60000, 0, "old") == pytest.approx(600.0)

    def test_below_first_threshold(self) -> None:
        assert yearly_repayment(54434, 0, "old") == 0.0

    def test_exact_band_start(self) -> None:
        """$54,435: first dollar of the 1% band is a cliff, not marginal."""
        assert yearly_repayment(54435, 0, "old") == pytest.approx(544.35)

    def test_exact_band_end(self) -> None:
        """$62,850: top of the 1% band."""
        assert yearly_repayment(62850, 0, "old") == pytest.approx(628.5)

    def test_top_band(self) -> None:
        """$200,000 at 10%."""
        assert yearly_repayment(200000, 0, "old") == pytest.approx(20000.0)

    def test_top_band_start(self) -> None:
        assert yearly_repayment(159664, 0, "old") == pytest.approx(15966.4)

    def test_fractional_income_between_bands(self) -> None:
        """$54,434.50 sits between two integer bands and matches neither."""
        result = calculate_repayment(54434.5, 0, RepaymentScheme.OLD)
        assert result.amount == 0
        assert result.band is None
        assert result.normalized is False

    def test_band_is_reported(self) -> None:
        result = calculate_repayment(100000, 0, RepaymentScheme.OLD)
        assert result.band == Band(Decimal("94504"), Decimal("100174"), Decimal("0.055"))
        assert float(result.amount) == pytest.approx(5500.0)

    def test_custom_schedule(self) -> None:
        """A caller-supplied table replaces the default for the old scheme."""
        schedule = build_schedule(
            [
                Band(Decimal("50000"), None, Decimal("0.05")),
                Band(Decimal("0"), Decimal("49999"), Decimal("0")),
            ],
            name="test",
        )
        assert yearly_repayment(60000, 0, "old", schedule) == pytest.approx(3000.0)
        assert yearly_repayment(40000, 0, "old", schedule) == 0.0

    def test_new_scheme_ignores_schedule(self) -> None:
        schedule = build_schedule([Band(Decimal("0"), None, Decimal("0.5"))], name="flat")
        assert yearly_repayment(150000, 0, "new", schedule) == pytest.approx(12950.0)


# --- New scheme (marginal) tests ---


class TestNewScheme:
    def test_at_threshold(self) -> None:
        assert yearly_repayment(67000, 0, "new") == 0.0

    def test_below_threshold(self) -> None:
        assert yearly_repayment(60000, 0, "new") == 0.0

    def test_one_dollar_over(self) -> None:
        assert yearly_repayment(67001, 0, "new") == pytest.approx(0.15)

    def test_lower_tier(self) -> None:
        """$100,000: ($100,000 - $67,000) * 15% = $4,950."""
        assert yearly_repayment(100000, 0, "new") == pytest.approx(4950.0)

    def test_top_of_lower_tier(self) -> None:
        """$124,999: $57,999 * 15% = $8,699.85."""
        assert yearly_repayment(124999, 0, "new") == pytest.approx(8699.85)

    def test_upper_tier_start(self) -> None:
        """$125,000 owes exactly the $8,700 base amount."""
        assert yearly_repayment(125000, 0, "new") == pytest.approx(8700.0)

    def test_upper_tier(self) -> None:
        """$150,000: $8,700 + $25,000 * 17% = $12,950."""
        assert yearly_repayment(150000, 0, "new") == pytest.approx(12950.0)

    def test_continuity_at_breakpoints(self) -> None:
        below = yearly_repayment(124999, 0, "new")
        above = yearly_repayment(125000, 0, "new")
        assert 0 <= above - below < 1

    def test_default_scheme_is_new(self) -> None:
        assert yearly_repayment(150000) == pytest.approx(12950.0)


# --- Indexation tests ---


class TestCpiIndexation:
    def test_old_scheme_indexed_into_higher_band(self) -> None:
        """$60,000 + 5% = $63,000, which is in the 2% band."""
        assert yearly_repayment(60000, 5, "old") == pytest.approx(1260.0)

    def test_new_scheme_indexed(self) -> None:
        """$100,000 + 10% = $110,000: $43,000 * 15% = $6,450."""
        assert yearly_repayment(100000, 10, "new") == pytest.approx(6450.0)

    def test_threshold_compares_indexed_income(self) -> None:
        """$65,000 + 5% = $68,250 crosses the $67,000 threshold."""
        assert yearly_repayment(65000, 5, "new") == pytest.approx(187.5)

    @pytest.mark.parametrize("scheme", ["old", "new"])
    @pytest.mark.parametrize(
        ("income", "cpi"),
        [(60000, 3.5), (80000, 2.0), (130000, 4.2), (50000, 7), (170000, 0.5)],
    )
    def test_indexation_applied_once(self, scheme: str, income: float, cpi: float) -> None:
        indexed = yearly_repayment(income, cpi, scheme)
        pre_adjusted = yearly_repayment(income * (1 + cpi / 100), 0, scheme)
        assert indexed == pytest.approx(pre_adjusted)

    def test_invalid_cpi_means_no_indexation(self) -> None:
        assert yearly_repayment(60000, float("nan"), "old") == pytest.approx(600.0)
        assert yearly_repayment(60000, "3", "old") == pytest.approx(600.0)

    def test_adjusted_income_reported(self) -> None:
        result = calculate_repayment(100000, 2.5, "new")
        assert result.adjusted_income == Decimal("102500")
        assert result.cpi == Decimal("2.5")


# --- Invalid input tests ---


class TestInvalidInput:
    @pytest.mark.parametrize("scheme", ["old", "new"])
    @pytest.mark.parametrize(
        "income",
        [0, -1, -50000, 0.0, float("nan"), float("inf"), None, "60000", True, Decimal("NaN")],
    )
    def test_returns_zero(self, scheme: str, income: object) -> None:
        assert yearly_repayment(income, 0, scheme) == 0.0

    def test_normalized_flag(self) -> None:
        result = calculate_repayment(-100, 0, "new")
        assert result.normalized is True
        assert result.amount == 0
        assert result.reason

    def test_valid_input_not_normalized(self) -> None:
        result = calculate_repayment(150000, 0, "new")
        assert result.normalized is False
        assert result.reason is None

    def test_decimal_input(self) -> None:
        assert yearly_repayment(Decimal("60000"), Decimal("0"), "old") == pytest.approx(600.0)

    def test_unknown_scheme_raises(self) -> None:
        with pytest.raises(ValueError):
            yearly_repayment(60000, 0, "medium")


class TestMonotonicity:
    @pytest.mark.parametrize("scheme", list(RepaymentScheme))
    @pytest.mark.parametrize("cpi", [0, 5])
    def test_non_decreasing_in_income(self, scheme: RepaymentScheme, cpi: float) -> None:
        previous = 0.0
        for income in range(0, 200001, 250):
            amount = yearly_repayment(income, cpi, scheme)
            assert amount >= previous, f"repayment dropped at income {income}"
            previous = amount

    def test_never_negative(self) -> None:
        for income in range(0, 200001, 1000):
            for scheme in RepaymentScheme:
                assert yearly_repayment(income, -50, scheme) >= 0


class TestSchemeDispatch:
    def test_every_scheme_has_a_strategy(self) -> None:
        assert set(_STRATEGIES) == set(RepaymentScheme)

    def test_parse_tag(self) -> None:
        assert RepaymentScheme.parse("old") is RepaymentScheme.OLD
        assert RepaymentScheme.parse(RepaymentScheme.NEW) is RepaymentScheme.NEW


class TestCompare:
    def test_reference_100k(self) -> None:
        result = compare_repayments(100000)
        assert result["schedule"] == FY2024_25_SCHEDULE.name
        assert result["old"]["annual_repayment"] == pytest.approx(5500.0)
        assert result["new"]["annual_repayment"] == pytest.approx(4950.0)
        assert result["difference"] == pytest.approx(-550.0)
        assert result["old"]["effective_rate"] == 5.5
        assert result["new"]["effective_rate"] == 4.95

    def test_zero_income(self) -> None:
        result = compare_repayments(0)
        assert result["old"]["annual_repayment"] == 0.0
        assert result["new"]["annual_repayment"] == 0.0
        assert result["old"]["effective_rate"] == 0.0
        assert result["old"]["normalized"] is True

    def test_old_band_detail(self) -> None:
        result = compare_repayments(60000)
        assert result["old"]["band"] == {"min_income": 54435.0, "max_income": 62850.0, "rate": 0.01}
        assert result["new"]["band"] is None
