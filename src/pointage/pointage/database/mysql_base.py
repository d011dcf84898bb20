from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.exceptions import StoreUnavailable
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Open a connection and cursor, commit on success, roll back on error.

    Connector errors surface as StoreUnavailable.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        raise StoreUnavailable(f"Cannot connect to MySQL: {exc}") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        conn.rollback()
        raise StoreUnavailable(str(exc)) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so a key prefix matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
