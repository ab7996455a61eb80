"""Print HECS repayments and the balance projection for one borrower.

Usage:
    # Old vs new scheme for a $60k income and $30k debt
    python scripts/repayment_table.py --income 60000 --debt 30000

    # With 3.5% indexation and the one-time 20% cut
    python scripts/repayment_table.py --income 90000 --debt 45000 --cpi 3.5 --cut

    # Use a different year's old-scheme table
    python scripts/repayment_table.py --income 90000 --debt 45000 --schedule-file fy2023.yaml
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config.settings import settings
from src.calculators.amortization import simulate, summarize_run
from src.calculators.repayment import compare_repayments
from src.calculators.repayment_data import DEFAULT_SCHEDULE, ScheduleError
from src.calculators.schedule_loader import load_registered_schedules, load_schedule_file

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="HECS repayment and amortization table")
    parser.add_argument("--income", type=float, required=True, help="Annual repayment income")
    parser.add_argument("--debt", type=float, required=True, help="Outstanding HECS debt")
    parser.add_argument("--cpi", type=float, default=settings.default_cpi, help="Indexation percent")
    parser.add_argument("--cut", action="store_true", help="Apply the one-time 20%% cut to the new scheme")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--schedule", help="Registered schedule name, e.g. 2023-24")
    group.add_argument("--schedule-file", type=Path, help="YAML band table for the old scheme")
    return parser.parse_args()


def _money(value: float | None) -> str:
    return "-" if value is None else f"${value:,.2f}"


def print_table(comparison: dict[str, Any], points: list[dict[str, Any]], summary: dict[str, Any]) -> None:
    """Log the repayments, projection and totals."""
    logger.info("=" * 50)
    logger.info("HECS REPAYMENTS (schedule %s)", comparison["schedule"])
    logger.info("=" * 50)
    logger.info("  Indexed income:      %s", _money(comparison["adjusted_income"]))
    logger.info("  Old scheme:          %s", _money(comparison["old"]["annual_repayment"]))
    logger.info("  New scheme:          %s", _money(comparison["new"]["annual_repayment"]))
    logger.info("  Difference:          %s", _money(comparison["difference"]))

    logger.info("")
    logger.info("%4s  %15s  %15s", "Year", "Old balance", "New balance")
    logger.info("-" * 38)
    for row in points:
        logger.info("%4d  %15s  %15s", row["year"], _money(row["old"]), _money(row["new"]))

    logger.info("")
    for name, totals in summary["schemes"].items():
        paid_off = totals["paid_off_year"]
        logger.info(
            "  %s: repaid %s, %s",
            name,
            _money(totals["total_repaid"]),
            f"paid off in year {paid_off}" if paid_off is not None
            else f"{_money(totals['remaining_balance'])} left after {summary['years_simulated']} years",
        )


def main() -> None:
    args = parse_args()

    try:
        if args.schedule_file:
            schedule = load_schedule_file(args.schedule_file)
        else:
            registry = load_registered_schedules(settings.schedules_file)
            name = args.schedule or DEFAULT_SCHEDULE
            if name not in registry:
                logger.error("Unknown schedule %s. Available: %s", name, ", ".join(sorted(registry)))
                sys.exit(1)
            schedule = registry[name]
    except ScheduleError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    comparison = compare_repayments(args.income, args.cpi, schedule)
    run = simulate(args.income, args.debt, args.cpi, args.cut, schedule=schedule)
    print_table(comparison, run.as_records(), summarize_run(run))


if __name__ == "__main__":
    main()
