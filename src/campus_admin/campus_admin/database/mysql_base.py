from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ConflictError, DomainError, StoreUnavailable, ValidationError

logger = logging.getLogger(__name__)

_RETRYABLE = {errorcode.ER_LOCK_WAIT_TIMEOUT, errorcode.ER_LOCK_DEADLOCK}
_FK_ERRORS = {errorcode.ER_ROW_IS_REFERENCED_2, errorcode.ER_NO_REFERENCED_ROW_2}


def translate_mysql_error(exc: mysql.connector.Error) -> DomainError:
    """Map a connector error onto the domain error taxonomy."""
    errno = getattr(exc, "errno", None)
    if errno == errorcode.ER_DUP_ENTRY:
        return ConflictError("Duplicate record")
    if errno in _FK_ERRORS:
        return ValidationError("Record is referenced by, or references, missing data")
    if errno in _RETRYABLE:
        return StoreUnavailable("Store is busy, please retry", context={"errno": errno})
    return StoreUnavailable(context={"errno": errno})


@contextmanager
def db_cursor(conn_factory, *, dictionary: bool = True, lock_timeout: Optional[int] = None):
    """Yield ``(conn, cursor)`` inside one transaction.

    Commits on normal exit, rolls back on any exception. Connector errors are
    re-raised as domain errors. ``lock_timeout`` bounds row lock waits (seconds).
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        logger.error("Database connection failed: %s", exc)
        raise translate_mysql_error(exc) from exc
    try:
        # Buffered so several statements can share one cursor.
        cur = conn.cursor(dictionary=dictionary, buffered=True)
        try:
            if lock_timeout:
                cur.execute("SET SESSION innodb_lock_wait_timeout = %s", (int(lock_timeout),))
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        _safe_rollback(conn)
        logger.warning("Database error (errno=%s): %s", getattr(exc, "errno", None), exc)
        raise translate_mysql_error(exc) from exc
    except Exception:
        _safe_rollback(conn)
        raise
    finally:
        conn.close()


def _safe_rollback(conn) -> None:
    try:
        conn.rollback()
    except mysql.connector.Error as exc:
        logger.warning("Rollback failed: %s", exc)


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        return time(hour=total_seconds // 3600, minute=(total_seconds % 3600) // 60, second=total_seconds % 60)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=int(parts[0]), minute=int(parts[1]), second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def dump_json(value: Any) -> str:
    return json.dumps(value, default=str)


def load_json(value: Any, default: Any = None) -> Any:
    """Decode a JSON column (the connector may hand back str or bytes)."""
    if value is None or value == "":
        return default
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value)
    return value


def order_by(sort: Optional[str], descending: bool, columns: dict[str, str], default: str) -> str:
    """Build an ORDER BY clause from a whitelisted column mapping."""
    column = columns.get(sort or "", default)
    return f"ORDER BY {column} {'DESC' if descending else 'ASC'}"
