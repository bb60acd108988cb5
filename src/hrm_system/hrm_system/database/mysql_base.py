"""Small helpers shared by the MySQL repositories."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)``.

    Inside ``transaction()`` the shared connection is used and the
    transaction owner commits. Otherwise the call gets its own connection
    and is committed on success.
    """
    shared = conn_factory.current()
    conn = shared if shared is not None else conn_factory.connect()
    cur = conn.cursor(dictionary=dictionary)
    try:
        yield conn, cur
        if shared is None:
            conn.commit()
    except Exception:
        if shared is None:
            conn.rollback()
        raise
    finally:
        cur.close()
        if shared is None:
            conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    return cur.fetchone() or None


def fetchall(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])


def lock_clause(for_update: bool) -> str:
    return " FOR UPDATE" if for_update else ""


def is_duplicate_key(exc: BaseException) -> bool:
    return isinstance(exc, mysql.connector.IntegrityError) and exc.errno == errorcode.ER_DUP_ENTRY


def as_decimal(value: Any) -> Decimal:
    """DECIMAL columns; NULL reads as zero."""
    if value is None:
        return Decimal("0")
    return value if isinstance(value, Decimal) else Decimal(str(value))


def as_bool(value: Any) -> bool:
    return value is not None and bool(int(value))


def normalize_mysql_time(value: Any) -> Optional[time]:
    """TIME columns arrive as ``time``, ``timedelta`` or ``'HH:MM[:SS]'`` depending on the connector."""
    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(seconds // 3600, seconds % 3600 // 60, seconds % 60)
    if isinstance(value, str):
        parts = [int(p) for p in value.strip().split(":") if p]
        if len(parts) < 2:
            raise ValueError(f"Invalid TIME value: {value!r}")
        return time(*parts[:3])
    raise TypeError(f"Unsupported TIME value: {type(value)!r}")
