"""Regenerate monthly attendance summaries for every active employee.

Usage: python scripts/summarize_month.py 2026 9 [--department 2]
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src" / "hrm_system"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from config import get_settings_module

from hrm_system.container import build_container


def main() -> None:
    parser = argparse.ArgumentParser(description="Regenerate monthly attendance summaries")
    parser.add_argument("year", type=int)
    parser.add_argument("month", type=int)
    parser.add_argument("--department", type=int, default=None)
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        weekend_days=tuple(getattr(settings, "WEEKEND_DAYS", (5, 6))),
        standard_workday_minutes=int(getattr(settings, "STANDARD_WORKDAY_MINUTES", 480)),
    )
    rows = container.summary_service.summarize_all(args.year, args.month, department_id=args.department)
    for s in rows:
        print(
            f"employee={s.employee_id} worked={s.actual_working_days}/{s.total_working_days} "
            f"absent={s.absent_days} late={s.late_days} rate={s.attendance_rate}%"
        )
    print(f"OK: {len(rows)} summary row(s) for {args.year}-{args.month:02d}")


if __name__ == "__main__":
    main()
