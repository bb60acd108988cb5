"""Yearly leave rollover, meant to be run by an external scheduler.

Usage: python scripts/leave_year.py 2027
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
    parser = argparse.ArgumentParser(description="Roll leave balances into a new year")
    parser.add_argument("year", type=int)
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        strict_balance_release=bool(getattr(settings, "STRICT_BALANCE_RELEASE", False)),
    )
    created = container.balance_ledger.initialize_year(args.year)
    print(f"OK: {created} leave balance(s) created for {args.year}")


if __name__ == "__main__":
    main()
