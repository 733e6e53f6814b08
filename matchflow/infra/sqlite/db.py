"""SQLite connection helpers."""

from __future__ import annotations

import sqlite3


def get_connection(db_path: str, timeout: float = 5.0) -> sqlite3.Connection:
    # Autocommit mode; transactions are opened explicitly with BEGIN IMMEDIATE.
    conn = sqlite3.connect(db_path, timeout=timeout, isolation_level=None)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn
