from __future__ import annotations

import logging
from typing import List, Optional

from .connection import DatabaseConnection
from .kv_store import KeyValueStore
from .mysql_base import db_cursor, escape_like, fetchall, fetchone

logger = logging.getLogger(__name__)

KV_TABLE = "kv_entries"


class MySQLKeyValueStore(KeyValueStore):
    """Key-value contract over a single two-column MySQL table.

    Each call uses its own short-lived connection, so nothing here is atomic
    across keys.
    """

    def __init__(self, conn_factory: DatabaseConnection, *, table: str = KV_TABLE):
        self._conn_factory = conn_factory
        self._table = table

    def get(self, key: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT v FROM {self._table} WHERE k=%s", (key,))
            row = fetchone(cur)
            return row["v"] if row else None

    def put(self, key: str, value: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO {self._table}(k, v)
                VALUES(%s,%s)
                ON DUPLICATE KEY UPDATE v=VALUES(v)
                """,
                (key, value),
            )

    def delete(self, key: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM {self._table} WHERE k=%s", (key,))

    def list_keys(self, prefix: str, limit: Optional[int] = None) -> List[str]:
        sql = f"SELECT k FROM {self._table} WHERE k LIKE %s ORDER BY k"
        params: List[object] = [escape_like(prefix) + "%"]
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            rows = fetchall(cur)
            keys = [r["k"] for r in rows]
        logger.debug("Listed %d key(s) under %r", len(keys), prefix)
        return keys
