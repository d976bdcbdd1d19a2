"""
Create Monthly Salary Payments
==============================
Runs the daily salary sweep once and prints what it did.

Usage:
    python -m scripts.create_monthly_salary_payments
    python -m scripts.create_monthly_salary_payments --date 2024-02-29

Exit code is 1 when the sweep itself fails or any employee failed.
"""

import argparse
import asyncio
import logging
import sys
from datetime import date

from app.database import async_session_factory, close_db
from app.tasks.scheduled_tasks import create_monthly_salary_payments

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create monthly salary payment requests due today")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Run the sweep as if today were this date (YYYY-MM-DD)",
    )
    return parser.parse_args(argv)


def print_summary(result: dict) -> None:
    print(f"Run date:    {result['run_date']}")
    print(f"Candidates:  {result['candidates']}")
    print(f"Created:     {len(result['created'])}")
    for item in result["created"]:
        print(f"  - {item['request_number']} employee {item['employee_id']} R{item['amount']}")
    print(f"Skipped:     {len(result['skipped'])}")
    print(f"Failed:      {len(result['failed'])}")
    for employee_id, error in result["failed"].items():
        print(f"  - {employee_id}: {error}")


async def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        async with async_session_factory() as session:
            result = await create_monthly_salary_payments(session, today=args.date)
    except Exception as e:
        logger.error(f"Monthly salary payment check failed: {e}", exc_info=True)
        return 1
    finally:
        await close_db()

    print_summary(result)
    return 1 if result["failed"] else 0


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    sys.exit(asyncio.run(main()))
