"""
SQLite schema for the account store.

Database: <data_dir>/accounts.db
"""

from __future__ import annotations

SCHEMA_SQL = """
-- One row per mailbox identity; rowid keeps insertion order
CREATE TABLE IF NOT EXISTS accounts (
    email TEXT PRIMARY KEY,
    added_at TEXT NOT NULL,
    last_used TEXT
);

-- Secret material for the "database" credential storage, one row per account
CREATE TABLE IF NOT EXISTS credentials (
    email TEXT PRIMARY KEY,
    credential_json TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

-- Singleton settings (default account pointer)
CREATE TABLE IF NOT EXISTS skill_state (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

PRAGMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA busy_timeout=5000;
"""

DEFAULT_ACCOUNT_KEY = "default_account"
