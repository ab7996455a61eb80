"""Loan balance projection: year-by-year amortization under old and new schemes.

Repayments are computed once from the starting income and held constant
for the whole horizon; income growth over the loan's life is not modelled.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, NamedTuple

from src.calculators.repayment import (
    RepaymentScheme,
    calculate_repayment,
    to_decimal,
)
from src.calculators.repayment_data import (
    CUT_FRACTION,
    CUT_YEAR,
    MAX_YEARS,
    BandSchedule,
)

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")

BOTH_SCHEMES = (RepaymentScheme.OLD, RepaymentScheme.NEW)


class AmortizationPoint(NamedTuple):
    """Remaining balance at the start of a simulated year. None = scheme not tracked."""

    year: int
    old: float | None
    new: float | None


@dataclass(frozen=True)
class AmortizationRun:
    """A complete projection. Built fresh for each call and never mutated."""

    points: tuple[AmortizationPoint, ...]
    schemes: tuple[RepaymentScheme, ...]
    initial_debt: Decimal
    repayments: dict[RepaymentScheme, Decimal] = field(default_factory=dict)
    cut_amount: Decimal = _ZERO
    flat: bool = False

    def as_records(self) -> list[dict[str, Any]]:
        """Points as {"year", "old", "new"} rows, omitting untracked schemes."""
        records = []
        for point in self.points:
            row: dict[str, Any] = {"year": point.year}
            for scheme in self.schemes:
                row[scheme.value] = getattr(point, scheme.value)
            records.append(row)
        return records


def _point(year: int, balances: dict[RepaymentScheme, Decimal]) -> AmortizationPoint:
    def balance(scheme: RepaymentScheme) -> float | None:
        if scheme not in balances:
            return None
        return float(max(_ZERO, balances[scheme]))

    return AmortizationPoint(year, balance(RepaymentScheme.OLD), balance(RepaymentScheme.NEW))


def _flat_run(
    schemes: tuple[RepaymentScheme, ...],
    debt: Decimal,
    repayments: dict[RepaymentScheme, Decimal],
) -> AmortizationRun:
    balances = {scheme: debt for scheme in schemes}
    return AmortizationRun(
        points=tuple(_point(year, balances) for year in range(MAX_YEARS)),
        schemes=schemes,
        initial_debt=debt,
        repayments=repayments,
        flat=True,
    )


def simulate(
    income: object,
    initial_debt: object,
    cpi: object = 0,
    apply_cut: bool = False,
    schemes: Iterable[RepaymentScheme | str] = BOTH_SCHEMES,
    schedule: BandSchedule | None = None,
) -> AmortizationRun:
    """Project the loan balance until it is repaid or the horizon is reached.

    Each year the scheme's yearly repayment is subtracted from its balance,
    flooring at zero. With apply_cut, the new scheme's balance is reduced by
    CUT_FRACTION at the start of year 1, before that year's point is
    recorded and before its repayment.

    Non-positive or invalid income or debt, or a zero repayment under every
    scheme, give a flat line of MAX_YEARS points at the initial debt.

    Args:
        income: Annual repayment income at the start of the loan.
        initial_debt: Outstanding balance at year 0.
        cpi: Indexation percentage applied to income.
        apply_cut: Apply the one-time balance cut to the new scheme.
        schemes: Schemes to track, old and new by default.
        schedule: Band table for the old scheme.

    Returns:
        AmortizationRun with at most MAX_YEARS + 1 points.
    """
    tracked = tuple(dict.fromkeys(RepaymentScheme.parse(s) for s in schemes))
    if not tracked:
        raise ValueError("At least one repayment scheme must be tracked.")

    income_value = to_decimal(income)
    debt = to_decimal(initial_debt)
    zero_repayments = {scheme: _ZERO for scheme in tracked}

    if income_value is None or income_value <= 0 or debt is None or debt <= 0:
        logger.debug("No movement for income=%r debt=%r", income, initial_debt)
        return _flat_run(tracked, max(_ZERO, debt) if debt is not None else _ZERO, zero_repayments)

    repayments = {
        scheme: calculate_repayment(income_value, cpi, scheme, schedule).amount
        for scheme in tracked
    }
    if all(amount == 0 for amount in repayments.values()):
        logger.debug("Income %s is below every repayment threshold", income_value)
        return _flat_run(tracked, debt, repayments)

    balances = {scheme: debt for scheme in tracked}
    points: list[AmortizationPoint] = []
    cut_amount = _ZERO

    year = 0
    while year < MAX_YEARS and any(b > 0 for b in balances.values()):
        if year == CUT_YEAR and apply_cut and RepaymentScheme.NEW in balances:
            cut_amount = balances[RepaymentScheme.NEW] * CUT_FRACTION
            balances[RepaymentScheme.NEW] -= cut_amount

        points.append(_point(year, balances))

        for scheme in tracked:
            balances[scheme] = max(_ZERO, balances[scheme] - repayments[scheme])
        year += 1

    # Explicit paid-off point for chart consumers
    if all(b == 0 for b in balances.values()):
        points.append(_point(len(points), balances))

    return AmortizationRun(
        points=tuple(points),
        schemes=tracked,
        initial_debt=debt,
        repayments=repayments,
        cut_amount=cut_amount,
    )


def simulate_amortization(
    income: object,
    initial_debt: object,
    cpi: object = 0,
    apply_cut: bool = False,
    schedule: BandSchedule | None = None,
) -> list[dict[str, Any]]:
    """Old vs new projection as a list of {"year", "old", "new"} rows."""
    return simulate(income, initial_debt, cpi, apply_cut, BOTH_SCHEMES, schedule).as_records()


def summarize_run(run: AmortizationRun) -> dict[str, Any]:
    """Per-scheme totals for a projection.

    Returns:
        Dict with initial_debt, years_simulated, flat, cut_amount and, per
        scheme, yearly_repayment, paid_off_year (None if not repaid within
        the horizon), total_repaid and remaining_balance.
    """
    summary: dict[str, Any] = {
        "initial_debt": float(run.initial_debt),
        "years_simulated": len(run.points),
        "flat": run.flat,
        "cut_amount": float(run.cut_amount),
        "schemes": {},
    }

    for scheme in run.schemes:
        repayment = run.repayments.get(scheme, _ZERO)
        balances = [Decimal(str(getattr(p, scheme.value))) for p in run.points]

        paid_off_year = None
        if not run.flat:
            paid_off_year = next(
                (p.year for p, b in zip(run.points, balances) if b == 0), None
            )

        total_repaid = sum((min(repayment, b) for b in balances), _ZERO)
        remaining = max(_ZERO, balances[-1] - repayment) if balances else _ZERO

        summary["schemes"][scheme.value] = {
            "yearly_repayment": float(repayment),
            "paid_off_year": paid_off_year,
            "total_repaid": float(total_repaid),
            "remaining_balance": float(remaining),
        }

    return summary
