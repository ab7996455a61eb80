"""HECS-HELP compulsory repayment calculator: old (banded) and new (marginal) schemes."""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from src.calculators.repayment_data import (
    FY2024_25_SCHEDULE,
    NEW_SCHEME,
    Band,
    BandSchedule,
    find_band,
)

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


class RepaymentScheme(Enum):
    """Which repayment regime to apply."""

    OLD = "old"  # non-marginal: whole income at the band's rate
    NEW = "new"  # marginal: only income above each threshold

    @classmethod
    def parse(cls, value: "RepaymentScheme | str") -> "RepaymentScheme":
        """Accept an enum member or its tag. Unknown tags raise ValueError."""
        if isinstance(value, cls):
            return value
        return cls(value)


@dataclass(frozen=True)
class RepaymentResult:
    """Outcome of a repayment calculation. Always produced, never raised.

    normalized is True when the input was not a usable positive number and
    the amount was forced to zero.
    """

    scheme: RepaymentScheme
    income: Decimal
    cpi: Decimal
    adjusted_income: Decimal
    amount: Decimal
    band: Band | None = None
    normalized: bool = False
    reason: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "scheme": self.scheme.value,
            "income": float(self.income),
            "cpi": float(self.cpi),
            "adjusted_income": float(self.adjusted_income),
            "annual_repayment": float(self.amount),
            "band": _band_dict(self.band) if self.band is not None else None,
            "normalized": self.normalized,
            "reason": self.reason,
        }


def _band_dict(band: Band) -> dict[str, Any]:
    return {
        "min_income": float(band.min_income),
        "max_income": float(band.max_income) if band.max_income is not None else None,
        "rate": float(band.rate),
    }


def to_decimal(value: object) -> Decimal | None:
    """Convert a finite int/float/Decimal to Decimal; anything else gives None."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return Decimal(str(value))
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    return Decimal(value)


def _non_marginal(adjusted_income: Decimal, schedule: BandSchedule) -> tuple[Decimal, Band | None]:
    band = find_band(schedule, adjusted_income)
    if band is None:
        return _ZERO, None
    return adjusted_income * band.rate, band


def _marginal(adjusted_income: Decimal, schedule: BandSchedule) -> tuple[Decimal, Band | None]:
    s = NEW_SCHEME
    if adjusted_income <= s.threshold:
        return _ZERO, None
    if adjusted_income <= s.lower_tier_max:
        return (adjusted_income - s.threshold) * s.lower_rate, None
    return s.upper_base + (adjusted_income - s.upper_tier_start) * s.upper_rate, None


_STRATEGIES: dict[RepaymentScheme, Callable[[Decimal, BandSchedule], tuple[Decimal, Band | None]]] = {
    RepaymentScheme.OLD: _non_marginal,
    RepaymentScheme.NEW: _marginal,
}


def calculate_repayment(
    income: object,
    cpi: object = 0,
    scheme: RepaymentScheme | str = RepaymentScheme.NEW,
    schedule: BandSchedule | None = None,
) -> RepaymentResult:
    """Calculate the yearly compulsory repayment for one scheme.

    Income is indexed by cpi percent before the lookup. Invalid or
    non-positive income yields a zero amount with normalized=True; an
    invalid cpi is treated as no indexation.

    Args:
        income: Annual repayment income.
        cpi: Indexation percentage applied to income, e.g. 3.5.
        scheme: RepaymentScheme member or its "old"/"new" tag.
        schedule: Band table for the old scheme. Defaults to 2024-25.

    Returns:
        RepaymentResult with amount >= 0.
    """
    scheme = RepaymentScheme.parse(scheme)
    if schedule is None:
        schedule = FY2024_25_SCHEDULE

    cpi_value = to_decimal(cpi)
    if cpi_value is None:
        logger.debug("Ignoring invalid cpi %r", cpi)
        cpi_value = _ZERO

    income_value = to_decimal(income)
    if income_value is None or income_value <= 0:
        logger.debug("Normalizing income %r to zero repayment", income)
        return RepaymentResult(
            scheme=scheme,
            income=income_value if income_value is not None else _ZERO,
            cpi=cpi_value,
            adjusted_income=_ZERO,
            amount=_ZERO,
            normalized=True,
            reason="Income must be a positive number.",
        )

    adjusted_income = income_value * (1 + cpi_value / 100)
    amount, band = _STRATEGIES[scheme](adjusted_income, schedule)

    return RepaymentResult(
        scheme=scheme,
        income=income_value,
        cpi=cpi_value,
        adjusted_income=adjusted_income,
        amount=max(_ZERO, amount),
        band=band,
    )


def yearly_repayment(
    income: object,
    cpi: object = 0,
    scheme: RepaymentScheme | str = RepaymentScheme.NEW,
    schedule: BandSchedule | None = None,
) -> float:
    """Yearly repayment amount as a float. Never raises for numeric input."""
    return float(calculate_repayment(income, cpi, scheme, schedule).amount)


def compare_repayments(
    income: object,
    cpi: object = 0,
    schedule: BandSchedule | None = None,
) -> dict[str, Any]:
    """Calculate both schemes side by side.

    Returns:
        Dict with old and new repayment detail, the difference (new - old)
        and each scheme's effective rate as a percent of indexed income.
    """
    if schedule is None:
        schedule = FY2024_25_SCHEDULE
    old = calculate_repayment(income, cpi, RepaymentScheme.OLD, schedule)
    new = calculate_repayment(income, cpi, RepaymentScheme.NEW, schedule)

    def effective_rate(result: RepaymentResult) -> float:
        if result.adjusted_income <= 0:
            return 0.0
        return float(round(result.amount / result.adjusted_income * 100, 2))

    return {
        "income": float(old.income),
        "cpi": float(old.cpi),
        "adjusted_income": float(old.adjusted_income),
        "schedule": schedule.name,
        "old": {**old.as_dict(), "effective_rate": effective_rate(old)},
        "new": {**new.as_dict(), "effective_rate": effective_rate(new)},
        "difference": float(new.amount - old.amount),
    }
