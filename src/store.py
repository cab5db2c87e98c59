"""
Persistence Gateway
===================
Thin psycopg2 client exposing table-scoped operations:

    store.select("workouts", filters={"user_id": uid}, order_by="created_at",
                 descending=True, limit=5)
    store.insert("exercises", {"name": "Bench Press", ...})
    store.update("exercises", {"muscle_group": "Chest"}, filters={"id": 3})
    store.delete("workout_splits", filters={"user_id": uid})

Table and column names are checked against constants.TABLE_COLUMNS before
being placed into SQL; values always travel as query parameters.  A filter
value that is a list/tuple becomes ``col = ANY(%s)``.  dict/list row values
are stored as JSONB.

``transaction()`` yields a gateway bound to one connection; everything done
through it commits together or rolls back together.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

import psycopg2
from psycopg2.extras import Json, RealDictCursor

from constants import TABLE_COLUMNS
from db_utils import get_conn_str, to_jsonable

log = logging.getLogger("store")

Row = Dict[str, Any]


def _check_table(table: str) -> List[str]:
    if table not in TABLE_COLUMNS:
        raise ValueError(f"Unknown table: {table}")
    return TABLE_COLUMNS[table]


def _check_columns(table: str, columns: Sequence[str]) -> None:
    known = _check_table(table)
    for col in columns:
        if col not in known:
            raise ValueError(f"Unknown column {col!r} for table {table}")


def _adapt(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return Json(value)
    return value


def _where(table: str, filters: Optional[Dict[str, Any]]) -> tuple:
    if not filters:
        return "", []
    _check_columns(table, filters.keys())
    parts: List[str] = []
    params: List[Any] = []
    for col, value in filters.items():
        if isinstance(value, (list, tuple)):
            parts.append(f"{col} = ANY(%s)")
            params.append(list(value))
        elif value is None:
            parts.append(f"{col} IS NULL")
        else:
            parts.append(f"{col} = %s")
            params.append(value)
    return " WHERE " + " AND ".join(parts), params


class PersistenceGateway:
    """Table-scoped access to the PostgreSQL store."""

    def __init__(self, conn_str: Optional[str] = None, connection: Any = None):
        self.conn_str = conn_str if conn_str is not None else get_conn_str()
        self._conn = connection

    # ─── connection handling ──────────────────────────────────

    def _connect(self):
        if not self.conn_str:
            raise RuntimeError("POSTGRES_CONNECTION_STRING is not set")
        return psycopg2.connect(self.conn_str)

    @contextmanager
    def _cursor(self) -> Iterator[Any]:
        if self._conn is not None:
            with self._conn.cursor(cursor_factory=RealDictCursor) as cur:
                yield cur
            return

        conn = self._connect()
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                yield cur
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator["PersistenceGateway"]:
        """Run several operations atomically on a single connection."""
        if self._conn is not None:
            yield self
            return

        conn = self._connect()
        try:
            yield PersistenceGateway(self.conn_str, connection=conn)
            conn.commit()
        except Exception:
            conn.rollback()
            log.warning("Transaction rolled back")
            raise
        finally:
            conn.close()

    def _run(self, query: str, params: Sequence[Any], returning: bool = True) -> List[Row]:
        with self._cursor() as cur:
            cur.execute(query, tuple(params))
            if not returning:
                return []
            rows = cur.fetchall()
        return [{k: to_jsonable(v) for k, v in dict(row).items()} for row in rows]

    # ─── table operations ─────────────────────────────────────

    def select(
        self,
        table: str,
        columns: Optional[Sequence[str]] = None,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Row]:
        cols = list(columns) if columns else list(_check_table(table))
        _check_columns(table, cols)
        where, params = _where(table, filters)

        query = f"SELECT {', '.join(cols)} FROM {table}{where}"
        if order_by:
            _check_columns(table, [order_by])
            query += f" ORDER BY {order_by} {'DESC' if descending else 'ASC'}"
        if limit is not None:
            query += " LIMIT %s"
            params.append(int(limit))
        if offset:
            query += " OFFSET %s"
            params.append(int(offset))
        return self._run(query, params)

    def select_one(self, table: str, **kwargs: Any) -> Optional[Row]:
        rows = self.select(table, limit=1, **kwargs)
        return rows[0] if rows else None

    def insert(self, table: str, rows: Union[Row, List[Row]],
               on_conflict: Optional[Sequence[str]] = None) -> List[Row]:
        """Insert one or many rows; returns the stored rows.

        With ``on_conflict`` (the unique columns), rows that collide with an
        existing row are skipped and left out of the result.
        """
        batch = [rows] if isinstance(rows, dict) else list(rows)
        if not batch:
            return []
        cols = list(batch[0].keys())
        _check_columns(table, cols)
        for row in batch:
            if list(row.keys()) != cols:
                raise ValueError("All inserted rows must share the same columns")

        placeholders = "(" + ", ".join(["%s"] * len(cols)) + ")"
        query = (
            f"INSERT INTO {table} ({', '.join(cols)}) VALUES "
            + ", ".join([placeholders] * len(batch))
        )
        if on_conflict:
            _check_columns(table, on_conflict)
            query += f" ON CONFLICT ({', '.join(on_conflict)}) DO NOTHING"
        query += " RETURNING *"
        params = [_adapt(row[c]) for row in batch for c in cols]
        return self._run(query, params)

    def update(self, table: str, values: Row, filters: Dict[str, Any]) -> List[Row]:
        if not values:
            raise ValueError("update() needs at least one value")
        if not filters:
            raise ValueError("update() without filters is not allowed")
        _check_columns(table, values.keys())
        assignments = ", ".join(f"{col} = %s" for col in values)
        where, where_params = _where(table, filters)
        query = f"UPDATE {table} SET {assignments}{where} RETURNING *"
        params = [_adapt(v) for v in values.values()] + where_params
        return self._run(query, params)

    def delete(self, table: str, filters: Dict[str, Any]) -> int:
        """Delete matching rows; returns how many were removed."""
        if not filters:
            raise ValueError("delete() without filters is not allowed")
        where, params = _where(table, filters)
        query = f"DELETE FROM {table}{where} RETURNING id"
        return len(self._run(query, params))
