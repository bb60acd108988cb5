"""Apply ``database/schema.sql`` and ``database/seed.sql`` to a MySQL server.

Used by ``scripts/init_db.py``, ``scripts/seed_db.py`` and the ``AUTO_INIT_DB``
/ ``AUTO_SEED_DB`` switches in ``create_app``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

# The scripts name a database; the configured one wins.
_DB_SELECTION = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;\s*$")


def _open(config: DBConfig, *, select_db: bool = True):
    params = dict(host=config.host, port=config.port, user=config.user, password=config.password, use_pure=True)
    if select_db:
        params["database"] = config.database
    return mysql.connector.connect(**params)


def split_statements(script: str) -> Iterator[str]:
    """Yield the statements of a SQL script.

    Splits on ``;`` outside string literals; ``--`` comment lines are ignored.
    """
    text = "\n".join(line for line in script.splitlines() if not line.lstrip().startswith("--"))
    start = 0
    quote = None
    i = 0
    while i < len(text):
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 1
            elif ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch == ";":
            stmt = text[start:i].strip()
            if stmt:
                yield stmt
            start = i + 1
        i += 1
    rest = text[start:].strip()
    if rest:
        yield rest


def _execute_file(config: DBConfig, path: Path) -> int:
    script = _DB_SELECTION.sub("", Path(path).read_text(encoding="utf-8"))
    conn = _open(config)
    executed = 0
    try:
        cur = conn.cursor()
        for stmt in split_statements(script):
            cur.execute(stmt)
            executed += 1
        conn.commit()
    finally:
        conn.close()
    return executed


def create_database(db_config: dict) -> None:
    config = DBConfig.from_settings(db_config)
    conn = _open(config, select_db=False)
    try:
        conn.cursor().execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    create_database(db_config)
    executed = _execute_file(DBConfig.from_settings(db_config), Path(schema_path))
    logger.info("Schema %s applied (%d statements)", schema_path, executed)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    executed = _execute_file(DBConfig.from_settings(db_config), Path(seed_path))
    logger.info("Seed %s applied (%d statements)", seed_path, executed)


def list_tables(db_config: dict) -> list[str]:
    conn = _open(DBConfig.from_settings(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return sorted(row[0] for row in cur.fetchall())
    finally:
        conn.close()
