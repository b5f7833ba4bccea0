from __future__ import annotations

import os
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from typing import Any

from app.core.config import settings

_conn: sqlite3.Connection | None = None
_conn_path: str | None = None
_conn_lock = threading.Lock()


class IdentityStoreError(RuntimeError):
    def __init__(self, message: str, *, code: str = "identity_store_error"):
        super().__init__(message)
        self.code = code


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _get_connection() -> sqlite3.Connection:
    global _conn, _conn_path
    with _conn_lock:
        db_path = settings.identity_db_path
        if _conn is not None and _conn_path == db_path:
            return _conn

        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        _conn = sqlite3.connect(
            db_path,
            check_same_thread=False,
            timeout=5,
            isolation_level=None,
        )
        _conn_path = db_path
        _conn.execute("PRAGMA journal_mode=WAL;")
        _conn.execute("PRAGMA synchronous=NORMAL;")
        _conn.execute("PRAGMA busy_timeout=5000;")
        _conn.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                created_at TEXT NOT NULL
            );
            """
        )
        _conn.execute(
            """
            CREATE TABLE IF NOT EXISTS user_nicknames (
                user_id TEXT PRIMARY KEY REFERENCES users (id),
                nickname TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )
        _conn.execute(
            """
            CREATE TABLE IF NOT EXISTS user_preferences (
                user_id TEXT PRIMARY KEY REFERENCES users (id),
                dark_mode INTEGER NOT NULL DEFAULT 0,
                updated_at TEXT NOT NULL
            );
            """
        )
        return _conn


def init_identity_store() -> None:
    _get_connection()


def close_identity_store() -> None:
    global _conn, _conn_path
    with _conn_lock:
        if _conn is not None:
            _conn.close()
        _conn = None
        _conn_path = None


def get_current_user(user_id: str | None) -> dict[str, Any] | None:
    if not user_id:
        return None
    conn = _get_connection()
    with _conn_lock:
        row = conn.execute(
            "SELECT id, created_at FROM users WHERE id = ?",
            (user_id,),
        ).fetchone()
    if not row:
        return None
    return {"id": row[0], "created_at": datetime.fromisoformat(row[1])}


def lookup_nickname(user_id: str) -> str | None:
    conn = _get_connection()
    with _conn_lock:
        row = conn.execute(
            "SELECT nickname FROM user_nicknames WHERE user_id = ?",
            (user_id,),
        ).fetchone()
    if not row:
        return None
    return row[0] or None


def register_user(display_name: str) -> dict[str, Any]:
    name = (display_name or "").strip()
    if not name:
        raise IdentityStoreError("Display name is required.", code="invalid_display_name")
    conn = _get_connection()
    user_id = uuid.uuid4().hex
    created_at = _utc_now()
    with _conn_lock:
        conn.execute(
            "INSERT INTO users (id, created_at) VALUES (?, ?)",
            (user_id, created_at),
        )
    return {"id": user_id, "created_at": datetime.fromisoformat(created_at)}


def record_nickname(user_id: str, display_name: str) -> None:
    name = (display_name or "").strip()
    if not name:
        raise IdentityStoreError("Display name is required.", code="invalid_display_name")
    conn = _get_connection()
    try:
        with _conn_lock:
            conn.execute(
                """
                INSERT INTO user_nicknames (user_id, nickname, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT (user_id) DO UPDATE SET
                    nickname = excluded.nickname,
                    updated_at = excluded.updated_at
                """,
                (user_id, name, _utc_now()),
            )
    except sqlite3.Error as exc:
        raise IdentityStoreError(f"Unable to record nickname: {exc}") from exc


def get_dark_mode(user_id: str) -> bool:
    conn = _get_connection()
    with _conn_lock:
        row = conn.execute(
            "SELECT dark_mode FROM user_preferences WHERE user_id = ?",
            (user_id,),
        ).fetchone()
    return bool(row[0]) if row else False


def set_dark_mode(user_id: str, enabled: bool) -> None:
    conn = _get_connection()
    with _conn_lock:
        conn.execute(
            """
            INSERT INTO user_preferences (user_id, dark_mode, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT (user_id) DO UPDATE SET
                dark_mode = excluded.dark_mode,
                updated_at = excluded.updated_at
            """,
            (user_id, 1 if enabled else 0, _utc_now()),
        )
