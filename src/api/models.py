"""Pydantic models for API request and response bodies."""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from config.settings import settings
from src.calculators.repayment_data import Band, BandSchedule

# --- Requests ---


def _check_limit(value: float, limit: float, name: str) -> float:
    if value > limit:
        raise ValueError(f"{name} must not exceed {limit:,.0f}")
    return value


class RepaymentRequest(BaseModel):
    """Request body for /repayment."""

    income: float = Field(ge=0)
    cpi: float | None = None
    scheme: Literal["old", "new"] = "new"
    schedule: str | None = None

    @field_validator("income")
    @classmethod
    def income_within_limit(cls, value: float) -> float:
        return _check_limit(value, settings.max_income, "income")


class CompareRequest(BaseModel):
    """Request body for /repayment/compare."""

    income: float = Field(ge=0)
    cpi: float | None = None
    schedule: str | None = None

    @field_validator("income")
    @classmethod
    def income_within_limit(cls, value: float) -> float:
        return _check_limit(value, settings.max_income, "income")


class AmortizationRequest(BaseModel):
    """Request body for /amortization."""

    income: float = Field(ge=0)
    debt: float = Field(ge=0)
    cpi: float | None = None
    apply_cut: bool = False
    schedule: str | None = None

    @field_validator("income")
    @classmethod
    def income_within_limit(cls, value: float) -> float:
        return _check_limit(value, settings.max_income, "income")

    @field_validator("debt")
    @classmethod
    def debt_within_limit(cls, value: float) -> float:
        return _check_limit(value, settings.max_debt, "debt")


# --- Responses ---


class BandOut(BaseModel):
    """One income band of a schedule."""

    min_income: float
    max_income: float | None = None  # None = no cap
    rate: float

    @classmethod
    def from_band(cls, band: Band) -> "BandOut":
        return cls(
            min_income=float(band.min_income),
            max_income=float(band.max_income) if band.max_income is not None else None,
            rate=float(band.rate),
        )


class ScheduleOut(BaseModel):
    """A registered band schedule."""

    name: str
    bands: list[BandOut]
    issues: list[str] = []

    @classmethod
    def from_schedule(cls, schedule: BandSchedule) -> "ScheduleOut":
        return cls(
            name=schedule.name,
            bands=[BandOut.from_band(b) for b in schedule.bands],
            issues=list(schedule.issues),
        )


class RepaymentResponse(BaseModel):
    """Yearly repayment for one scheme."""

    scheme: Literal["old", "new"]
    schedule: str
    income: float
    cpi: float
    adjusted_income: float
    annual_repayment: float
    band: BandOut | None = None
    normalized: bool = False
    reason: str | None = None


class AmortizationPointOut(BaseModel):
    """Remaining balance at the start of a year."""

    year: int
    old: float | None = None
    new: float | None = None


class AmortizationResponse(BaseModel):
    """Balance projection plus per-scheme totals."""

    schedule: str
    points: list[AmortizationPointOut]
    summary: dict[str, Any]
