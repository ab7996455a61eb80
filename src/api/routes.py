"""API routes for the HECS repayment calculator."""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request

from config.settings import settings
from src.api.models import (
    AmortizationPointOut,
    AmortizationRequest,
    AmortizationResponse,
    CompareRequest,
    RepaymentRequest,
    RepaymentResponse,
    ScheduleOut,
)
from src.calculators.amortization import simulate, summarize_run
from src.calculators.repayment import calculate_repayment, compare_repayments
from src.calculators.repayment_data import DEFAULT_SCHEDULE, FY2024_25_SCHEDULE, BandSchedule

logger = logging.getLogger(__name__)

router = APIRouter()


def _registry(request: Request) -> dict[str, BandSchedule]:
    registry = getattr(request.app.state, "schedules", None)
    if registry is None:
        return {FY2024_25_SCHEDULE.name: FY2024_25_SCHEDULE}
    return registry


def _get_schedule(request: Request, name: str | None) -> BandSchedule:
    registry = _registry(request)
    schedule = registry.get(name or DEFAULT_SCHEDULE)
    if schedule is None:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown schedule: {name}. Available: {', '.join(sorted(registry))}",
        )
    return schedule


def _cpi(value: float | None) -> float:
    return settings.default_cpi if value is None else value


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Health check listing the registered schedules."""
    return {"status": "ok", "schedules": sorted(_registry(request))}


@router.get("/schedules")
async def list_schedules(request: Request) -> dict[str, Any]:
    """Names of the registered old-scheme band tables."""
    return {"default": DEFAULT_SCHEDULE, "schedules": sorted(_registry(request))}


@router.get("/schedules/{name}", response_model=ScheduleOut)
async def get_schedule(name: str, request: Request) -> ScheduleOut:
    """Bands and validation issues of one schedule."""
    return ScheduleOut.from_schedule(_get_schedule(request, name))


@router.post("/repayment", response_model=RepaymentResponse)
async def repayment(body: RepaymentRequest, request: Request) -> RepaymentResponse:
    """Yearly compulsory repayment under one scheme."""
    schedule = _get_schedule(request, body.schedule)
    result = calculate_repayment(body.income, _cpi(body.cpi), body.scheme, schedule)
    return RepaymentResponse(schedule=schedule.name, **result.as_dict())


@router.post("/repayment/compare")
async def compare(body: CompareRequest, request: Request) -> dict[str, Any]:
    """Old and new scheme repayments side by side."""
    schedule = _get_schedule(request, body.schedule)
    return compare_repayments(body.income, _cpi(body.cpi), schedule)


@router.post("/amortization", response_model=AmortizationResponse)
async def amortization(body: AmortizationRequest, request: Request) -> AmortizationResponse:
    """Year-by-year balance projection under both schemes."""
    schedule = _get_schedule(request, body.schedule)
    run = simulate(body.income, body.debt, _cpi(body.cpi), body.apply_cut, schedule=schedule)
    logger.info(
        "Projected %d years (flat=%s) for income=%.0f debt=%.0f",
        len(run.points), run.flat, body.income, body.debt,
    )
    return AmortizationResponse(
        schedule=schedule.name,
        points=[AmortizationPointOut(**p._asdict()) for p in run.points],
        summary=summarize_run(run),
    )
