"""
Typed query helpers for the account database.

Helpers never commit; the AccountStore owns transaction boundaries.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from .schema import DEFAULT_ACCOUNT_KEY

if TYPE_CHECKING:
  import aiosqlite

log = logging.getLogger("skill.gmail.db.queries")


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


async def insert_account(db: aiosqlite.Connection, email: str, added_at: datetime) -> None:
  await db.execute(
    "INSERT INTO accounts (email, added_at, last_used) VALUES (?, ?, ?)",
    (email, added_at.isoformat(), added_at.isoformat()),
  )


async def delete_account(db: aiosqlite.Connection, email: str) -> bool:
  cursor = await db.execute("DELETE FROM accounts WHERE email = ?", (email,))
  return cursor.rowcount > 0


async def get_account_row(db: aiosqlite.Connection, email: str) -> dict[str, Any] | None:
  cursor = await db.execute(
    "SELECT email, added_at, last_used FROM accounts WHERE email = ?",
    (email,),
  )
  row = await cursor.fetchone()
  return dict(row) if row else None


async def list_account_rows(db: aiosqlite.Connection) -> list[dict[str, Any]]:
  cursor = await db.execute("SELECT email, added_at, last_used FROM accounts ORDER BY rowid")
  rows = await cursor.fetchall()
  return [dict(r) for r in rows]


async def account_exists(db: aiosqlite.Connection, email: str) -> bool:
  cursor = await db.execute("SELECT 1 FROM accounts WHERE email = ?", (email,))
  return await cursor.fetchone() is not None


async def update_last_used(db: aiosqlite.Connection, email: str, when: datetime) -> None:
  await db.execute(
    "UPDATE accounts SET last_used = ? WHERE email = ?",
    (when.isoformat(), email),
  )


# ---------------------------------------------------------------------------
# Default pointer
# ---------------------------------------------------------------------------


async def get_default_account(db: aiosqlite.Connection) -> str | None:
  cursor = await db.execute("SELECT value FROM skill_state WHERE key = ?", (DEFAULT_ACCOUNT_KEY,))
  row = await cursor.fetchone()
  return row["value"] if row else None


async def set_default_account(db: aiosqlite.Connection, email: str) -> None:
  await db.execute(
    """
        INSERT INTO skill_state (key, value) VALUES (?, ?)
        ON CONFLICT (key) DO UPDATE SET value = excluded.value
        """,
    (DEFAULT_ACCOUNT_KEY, email),
  )


async def clear_default_account(db: aiosqlite.Connection) -> None:
  await db.execute("DELETE FROM skill_state WHERE key = ?", (DEFAULT_ACCOUNT_KEY,))


# ---------------------------------------------------------------------------
# Credentials ("database" storage)
# ---------------------------------------------------------------------------


async def get_credential_json(db: aiosqlite.Connection, email: str) -> str | None:
  cursor = await db.execute("SELECT credential_json FROM credentials WHERE email = ?", (email,))
  row = await cursor.fetchone()
  return row["credential_json"] if row else None


async def upsert_credential_json(
  db: aiosqlite.Connection,
  email: str,
  credential_json: str,
  updated_at: datetime,
) -> None:
  await db.execute(
    """
        INSERT INTO credentials (email, credential_json, updated_at) VALUES (?, ?, ?)
        ON CONFLICT (email) DO UPDATE SET
            credential_json = excluded.credential_json,
            updated_at = excluded.updated_at
        """,
    (email, credential_json, updated_at.isoformat()),
  )


async def delete_credential(db: aiosqlite.Connection, email: str) -> None:
  await db.execute("DELETE FROM credentials WHERE email = ?", (email,))
