from __future__ import annotations

from contextlib import contextmanager
import logging
import threading
from typing import Callable, Optional

import pg8000.dbapi as pgapi

from app.core.config import Settings
from app.core.errors import StorageError
from app.db.schema import ensure_schema

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(action: str):
    try:
        yield
    except pgapi.Error as exc:
        logger.exception("Storage failure while %s", action)
        raise StorageError() from exc


class Database:
    """Explicit handle over pg8000 connections.

    Built once at application start and closed at shutdown. Reads and single
    statements reuse one autocommit connection per worker thread;
    ``run_transaction`` opens a dedicated connection for each unit of work.
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._local = threading.local()
        self._opened: list = []
        self._lock = threading.Lock()
        self._schema_ready = False
        self._closed = False

    def _connect(self):
        return pgapi.connect(
            host=self._settings.db_host,
            port=self._settings.db_port,
            database=self._settings.db_name,
            user=self._settings.db_user,
            password=self._settings.db_password,
        )

    def _ensure_schema(self, conn) -> None:
        if self._schema_ready:
            return
        with self._lock:
            if self._schema_ready:
                return
            ensure_schema(conn)
            self._schema_ready = True

    def _open_shared(self):
        conn = self._connect()
        conn.autocommit = True
        self._local.conn = conn
        with self._lock:
            self._opened.append(conn)
        return conn

    def get_conn(self):
        if self._closed:
            raise StorageError("Database handle is closed")
        conn = getattr(self._local, "conn", None)
        with storage_errors("connecting"):
            if conn is None:
                conn = self._open_shared()
            else:
                try:
                    cur = conn.cursor()
                    cur.execute("SELECT 1")
                    cur.close()
                except pgapi.Error:
                    logger.warning("Dropping stale database connection")
                    self._discard(conn)
                    conn = self._open_shared()
            if self._settings.auto_migrate:
                self._ensure_schema(conn)
        return conn

    def _discard(self, conn) -> None:
        with self._lock:
            if conn in self._opened:
                self._opened.remove(conn)
        try:
            conn.close()
        except pgapi.Error:
            logger.debug("Stale connection did not close cleanly", exc_info=True)

    def fetch_all(self, sql: str, params: tuple = ()) -> list[dict]:
        conn = self.get_conn()
        with storage_errors("reading rows"):
            cur = conn.cursor()
            cur.execute(sql, params)
            rows = cur.fetchall()
            columns = [col[0] for col in cur.description]
            cur.close()
        return [dict(zip(columns, row)) for row in rows]

    def fetch_one(self, sql: str, params: tuple = ()) -> Optional[dict]:
        conn = self.get_conn()
        with storage_errors("reading a row"):
            cur = conn.cursor()
            cur.execute(sql, params)
            row = cur.fetchone()
            if row is None:
                cur.close()
                return None
            columns = [col[0] for col in cur.description]
            cur.close()
        return dict(zip(columns, row))

    def execute(self, sql: str, params: tuple = ()) -> int:
        conn = self.get_conn()
        with storage_errors("writing"):
            cur = conn.cursor()
            cur.execute(sql, params)
            affected = cur.rowcount
            cur.close()
        return affected

    def run_transaction(self, handler: Callable):
        if self._closed:
            raise StorageError("Database handle is closed")
        with storage_errors("running a transaction"):
            conn = self._connect()
        try:
            with storage_errors("running a transaction"):
                conn.autocommit = False
                if self._settings.auto_migrate:
                    self._ensure_schema(conn)
                result = handler(conn)
                conn.commit()
            return result
        except Exception:
            try:
                conn.rollback()
            except pgapi.Error:
                logger.warning("Rollback failed", exc_info=True)
            raise
        finally:
            conn.close()

    def migrate(self) -> None:
        conn = self.get_conn()
        with storage_errors("applying schema"):
            ensure_schema(conn)
        self._schema_ready = True

    def close(self) -> None:
        self._closed = True
        with self._lock:
            opened, self._opened = self._opened, []
        for conn in opened:
            try:
                conn.close()
            except pgapi.Error:
                logger.warning("Error closing database connection", exc_info=True)
