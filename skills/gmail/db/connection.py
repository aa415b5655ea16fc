"""
aiosqlite connection setup for the account database.
"""

from __future__ import annotations

import logging
import os

import aiosqlite

from .schema import PRAGMA_SQL, SCHEMA_SQL

log = logging.getLogger("skill.gmail.db")


async def open_db(db_path: str) -> aiosqlite.Connection:
  """Open (and create if needed) the account database."""
  os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
  log.info("Opening database at %s", db_path)

  db = await aiosqlite.connect(db_path)
  db.row_factory = aiosqlite.Row

  for line in PRAGMA_SQL.strip().splitlines():
    line = line.strip()
    if line and not line.startswith("--"):
      await db.execute(line)

  await db.executescript(SCHEMA_SQL)
  await db.commit()
  return db
