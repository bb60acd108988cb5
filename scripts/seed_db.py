from __future__ import annotations

import importlib
import logging
import sys
from datetime import date
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src" / "hrm_system"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from config import get_settings_module

from hrm_system.container import build_container
from hrm_system.database.bootstrap import apply_seed_sql


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    seed_path = REPO_ROOT / "database" / "seed.sql"
    apply_seed_sql(db_config, seed_path=seed_path)

    # Seed rows carry no balances; allocate the current year like the yearly job does.
    year = int(sys.argv[1]) if len(sys.argv) > 1 else date.today().year
    created = build_container(db_config=db_config).balance_ledger.initialize_year(year)

    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(balances created for {year}: {created})"
    )


if __name__ == "__main__":
    main()
