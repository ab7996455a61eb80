"""HECS-HELP repayment constants — band tables and new-scheme thresholds.

Hardcoded Python constants (not user-editable). The old scheme is a
non-marginal band table published each financial year; the new scheme is a
closed three-tier marginal formula.
"""

import logging
from collections.abc import Iterable
from decimal import Decimal
from typing import NamedTuple

logger = logging.getLogger(__name__)


class ScheduleError(ValueError):
    """A band schedule could not be built or loaded."""


class Band(NamedTuple):
    """A single repayment income band."""

    min_income: Decimal  # inclusive
    max_income: Decimal | None  # inclusive, None = no cap
    rate: Decimal


class BandSchedule(NamedTuple):
    """An immutable band table, sorted by min_income.

    Build with build_schedule() so bands are sorted and validated once.
    """

    name: str
    bands: tuple[Band, ...]
    issues: tuple[str, ...] = ()

    @property
    def is_well_formed(self) -> bool:
        return not self.issues


class MarginalSchedule(NamedTuple):
    """Thresholds of the three-tier marginal (new) scheme."""

    threshold: Decimal  # no repayment at or below
    lower_tier_max: Decimal  # inclusive top of the lower tier
    upper_tier_start: Decimal
    lower_rate: Decimal
    upper_base: Decimal  # fixed amount owed at upper_tier_start
    upper_rate: Decimal


def _check_bands(bands: tuple[Band, ...]) -> list[str]:
    issues: list[str] = []
    if not bands:
        return ["schedule has no bands"]

    if bands[0].min_income != 0:
        issues.append(f"lowest band starts at {bands[0].min_income}, not 0")

    unbounded = [b for b in bands if b.max_income is None]
    if len(unbounded) != 1:
        issues.append(f"expected exactly one unbounded band, found {len(unbounded)}")
    elif bands[-1].max_income is not None:
        issues.append("unbounded band is not the highest band")

    for band in bands:
        if not Decimal("0") <= band.rate <= Decimal("1"):
            issues.append(f"band starting at {band.min_income} has rate {band.rate} outside [0, 1]")
        if band.max_income is not None and band.max_income < band.min_income:
            issues.append(f"band starting at {band.min_income} ends below its start")

    for prev, band in zip(bands, bands[1:]):
        if prev.max_income is None:
            continue
        if band.min_income <= prev.max_income:
            issues.append(f"band starting at {band.min_income} overlaps band ending at {prev.max_income}")
        elif band.min_income != prev.max_income + 1:
            issues.append(f"gap between {prev.max_income} and {band.min_income}")
        if band.rate < prev.rate:
            issues.append(f"rate decreases at {band.min_income} ({prev.rate} -> {band.rate})")

    return issues


def build_schedule(bands: Iterable[Band], name: str, strict: bool = False) -> BandSchedule:
    """Sort and validate a band table.

    Bands may arrive in any order; they are stable-sorted by min_income so
    band selection is deterministic. Well-formedness problems are logged and
    recorded on the schedule rather than rejected, unless strict is set.

    Args:
        bands: Band rows in any order.
        name: Label for the schedule, e.g. "2024-25".
        strict: Raise ScheduleError instead of recording issues.

    Returns:
        A BandSchedule with bands sorted ascending.
    """
    ordered = tuple(sorted(bands, key=lambda b: b.min_income))
    issues = _check_bands(ordered)

    if issues and strict:
        raise ScheduleError(f"Malformed schedule {name}: {'; '.join(issues)}")
    for issue in issues:
        logger.warning("Schedule %s: %s", name, issue)

    return BandSchedule(name=name, bands=ordered, issues=tuple(issues))


def find_band(schedule: BandSchedule, adjusted_income: Decimal) -> Band | None:
    """Return the first band containing adjusted_income, or None."""
    for band in schedule.bands:
        if adjusted_income >= band.min_income and (
            band.max_income is None or adjusted_income <= band.max_income
        ):
            return band
    return None


def _band(lower: int, upper: int | None, rate: str) -> Band:
    return Band(Decimal(lower), Decimal(upper) if upper is not None else None, Decimal(rate))


# Source: ATO study and training loan repayment thresholds, 2024-25
FY2024_25_SCHEDULE = build_schedule(
    (
        _band(0, 54434, "0"),
        _band(54435, 62850, "0.01"),
        _band(62851, 66620, "0.02"),
        _band(66621, 70618, "0.025"),
        _band(70619, 74855, "0.03"),
        _band(74856, 79346, "0.035"),
        _band(79347, 84107, "0.04"),
        _band(84108, 89154, "0.045"),
        _band(89155, 94503, "0.05"),
        _band(94504, 100174, "0.055"),
        _band(100175, 106185, "0.06"),
        _band(106186, 112556, "0.065"),
        _band(112557, 119309, "0.07"),
        _band(119310, 126467, "0.075"),
        _band(126468, 134056, "0.08"),
        _band(134057, 142100, "0.085"),
        _band(142101, 150626, "0.09"),
        _band(150627, 159663, "0.095"),
        _band(159664, None, "0.1"),
    ),
    name="2024-25",
    strict=True,
)

NEW_SCHEME = MarginalSchedule(
    threshold=Decimal("67000"),
    lower_tier_max=Decimal("124999"),
    upper_tier_start=Decimal("125000"),
    lower_rate=Decimal("0.15"),
    upper_base=Decimal("8700"),
    upper_rate=Decimal("0.17"),
)

DEFAULT_SCHEDULE = FY2024_25_SCHEDULE.name

# One-time balance cut applied to the new scheme at the start of year 1
CUT_FRACTION = Decimal("0.20")
CUT_YEAR = 1

MAX_YEARS = 30
