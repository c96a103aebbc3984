# db.py - SQLite storage for accounts and the export history log
import sqlite3
import logging
from datetime import datetime, timezone
from typing import Optional, List, Dict

import config

logger = logging.getLogger(__name__)

DB_FILE = config.DB_FILE


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_conn() -> sqlite3.Connection:
    """Connection usable from FastAPI worker threads."""
    conn = sqlite3.connect(DB_FILE, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def init_db():
    """Create the users and exports tables."""
    logger.info("Initializing database at %s", DB_FILE)
    conn = get_conn()
    c = conn.cursor()

    c.execute("""
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        email TEXT UNIQUE NOT NULL,
        password_hash TEXT NOT NULL,
        created_at TEXT
    )
    """)
    # one row per generated trip document
    c.execute("""
    CREATE TABLE IF NOT EXISTS exports (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        trip_id TEXT NOT NULL,
        trip_name TEXT NOT NULL,
        filename TEXT NOT NULL,
        page_count INTEGER NOT NULL,
        created_at TEXT,
        FOREIGN KEY(user_id) REFERENCES users(id)
    )
    """)
    conn.commit()
    conn.close()


# user helpers
def create_user(email: str, password_hash: str) -> int:
    """Insert a user and return its id. Raises IntegrityError on a duplicate email."""
    conn = get_conn()
    c = conn.cursor()
    try:
        c.execute("INSERT INTO users (email, password_hash, created_at) VALUES (?,?,?)",
                  (email, password_hash, _now()))
        conn.commit()
        return c.lastrowid
    finally:
        conn.close()


def get_user_by_email(email: str) -> Optional[Dict]:
    conn = get_conn()
    c = conn.cursor()
    c.execute("SELECT id, email, password_hash FROM users WHERE email = ?", (email,))
    row = c.fetchone()
    conn.close()
    if not row:
        return None
    return dict(row)


def get_user_by_id(user_id: int) -> Optional[Dict]:
    conn = get_conn()
    c = conn.cursor()
    c.execute("SELECT id, email, created_at FROM users WHERE id = ?", (user_id,))
    row = c.fetchone()
    conn.close()
    if not row:
        return None
    return dict(row)


# export history helpers
def save_export(user_id: int, trip_id: str, trip_name: str, filename: str, page_count: int) -> int:
    conn = get_conn()
    c = conn.cursor()
    try:
        c.execute(
            "INSERT INTO exports (user_id, trip_id, trip_name, filename, page_count, created_at) VALUES (?,?,?,?,?,?)",
            (user_id, trip_id, trip_name, filename, page_count, _now()))
        conn.commit()
        return c.lastrowid
    finally:
        conn.close()


def get_exports_for_user(user_id: int, limit: int = 100) -> List[Dict]:
    conn = get_conn()
    c = conn.cursor()
    c.execute(
        "SELECT id, trip_id, trip_name, filename, page_count, created_at FROM exports "
        "WHERE user_id = ? ORDER BY id DESC LIMIT ?", (user_id, limit))
    rows = c.fetchall()
    conn.close()
    return [dict(r) for r in rows]
