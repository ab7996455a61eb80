"""Load old-scheme band tables from YAML files."""

import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from config import load_yaml_config
from src.calculators.repayment_data import (
    FY2024_25_SCHEDULE,
    Band,
    BandSchedule,
    ScheduleError,
    build_schedule,
)

logger = logging.getLogger(__name__)


def _to_amount(value: Any, field_name: str, index: int) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ScheduleError(f"Band {index}: {field_name} must be a number, got {value!r}")
    try:
        amount = Decimal(str(value))
    except InvalidOperation as exc:
        raise ScheduleError(f"Band {index}: {field_name} must be a number, got {value!r}") from exc
    if not amount.is_finite():
        raise ScheduleError(f"Band {index}: {field_name} must be finite")
    return amount


def parse_schedule(data: dict[str, Any], name: str | None = None, strict: bool = False) -> BandSchedule:
    """Build a BandSchedule from a parsed mapping.

    Expected shape::

        name: "2023-24"
        bands:
          - {min_income: 0, max_income: 51549, rate: 0}
          - {min_income: 51550, max_income: null, rate: 0.01}
    """
    if not isinstance(data, dict) or not isinstance(data.get("bands"), list):
        raise ScheduleError("Schedule must be a mapping with a 'bands' list.")

    bands: list[Band] = []
    for index, row in enumerate(data["bands"]):
        if not isinstance(row, dict):
            raise ScheduleError(f"Band {index}: expected a mapping, got {row!r}")
        missing = {"min_income", "rate"} - row.keys()
        if missing:
            raise ScheduleError(f"Band {index}: missing {', '.join(sorted(missing))}")

        max_income = row.get("max_income")
        bands.append(Band(
            min_income=_to_amount(row["min_income"], "min_income", index),
            max_income=_to_amount(max_income, "max_income", index) if max_income is not None else None,
            rate=_to_amount(row["rate"], "rate", index),
        ))

    schedule_name = name or str(data.get("name") or "custom")
    return build_schedule(bands, name=schedule_name, strict=strict)


def load_schedule_file(path: Path | str, name: str | None = None, strict: bool = False) -> BandSchedule:
    """Read a YAML band table from disk."""
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as exc:
        raise ScheduleError(f"Could not read schedule file {path}: {exc}") from exc

    if name is None and isinstance(data, dict) and not data.get("name"):
        name = path.stem
    schedule = parse_schedule(data, name=name, strict=strict)
    logger.info("Loaded schedule %s from %s (%d bands)", schedule.name, path, len(schedule.bands))
    return schedule


def load_registered_schedules(config_file: str = "schedules.yaml") -> dict[str, BandSchedule]:
    """Build the schedule registry: the default table plus any listed in config/.

    Each entry under ``schedules`` in the config file is an inline band
    table in the parse_schedule() shape.
    """
    registry = {FY2024_25_SCHEDULE.name: FY2024_25_SCHEDULE}

    data = load_yaml_config(config_file) or {}
    for entry in data.get("schedules") or []:
        schedule = parse_schedule(entry)
        if schedule.name in registry:
            logger.warning("Schedule %s already registered, skipping", schedule.name)
            continue
        registry[schedule.name] = schedule
        logger.info("Registered schedule %s (%d bands)", schedule.name, len(schedule.bands))

    return registry
