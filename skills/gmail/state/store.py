"""
Durable account store.

One AccountStore instance owns all account state for the process. It is
opened once at startup and passed to every operation; nothing else keeps a
copy of account state between calls. Every mutation is committed before
the mutating call returns.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING

from ..db import queries
from ..db.connection import open_db
from ..errors import ConflictError, NotFoundError
from .types import AccountInfo, AccountRecord, OAuthCredential, normalize_address, utcnow
from .vault import CredentialVault, DatabaseVault, KeyringVault

if TYPE_CHECKING:
  from collections.abc import Awaitable, Callable

  import aiosqlite

  from ..config import GmailSettings

  Authorizer = Callable[[str], Awaitable[OAuthCredential]]

log = logging.getLogger("skill.gmail.state.store")


class AccountStore:
  def __init__(
    self,
    db: aiosqlite.Connection,
    vault: CredentialVault,
    authorize: Authorizer,
  ) -> None:
    self._db = db
    self._vault = vault
    self._authorize = authorize
    self._write_lock = asyncio.Lock()

  @classmethod
  async def open(cls, settings: GmailSettings, authorize: Authorizer) -> AccountStore:
    """Open the store described by settings and repair a dangling default."""
    db = await open_db(str(settings.db_path))
    vault: CredentialVault
    if settings.credential_storage == "database":
      vault = DatabaseVault(db)
    else:
      vault = KeyringVault(settings.keyring_service)

    store = cls(db, vault, authorize)
    await store._repair_default()
    return store

  async def close(self) -> None:
    await self._db.close()
    log.info("Account store closed")

  async def _repair_default(self) -> None:
    async with self._write_lock:
      default = await queries.get_default_account(self._db)
      if default and not await queries.account_exists(self._db, default):
        log.warning("Default account %s no longer exists, clearing pointer", default)
        await queries.clear_default_account(self._db)
        await self._db.commit()

  # ---------------------------------------------------------------------------
  # Queries
  # ---------------------------------------------------------------------------

  async def exists(self, address: str) -> bool:
    return await queries.account_exists(self._db, normalize_address(address))

  async def get(self, address: str) -> AccountRecord:
    email = normalize_address(address)
    row = await queries.get_account_row(self._db, email)
    if row is None:
      raise NotFoundError(f"Account {email} not found.")
    credential = await self._vault.get(email)
    if credential is None:
      raise NotFoundError(f"No stored credential for account {email}.")
    return _to_record(row, credential)

  async def list(self) -> list[AccountRecord]:
    records = []
    for row in await queries.list_account_rows(self._db):
      credential = await self._vault.get(row["email"])
      if credential is None:
        log.warning("No stored credential for account %s", row["email"])
        credential = OAuthCredential()
      records.append(_to_record(row, credential))
    return records

  async def list_info(self) -> list[AccountInfo]:
    """Listing without secrets, flagged with the default account."""
    default = await self.get_default()
    return [
      AccountInfo(
        email=row["email"],
        added_at=datetime.fromisoformat(row["added_at"]),
        last_used=_parse_ts(row["last_used"]),
        is_default=row["email"] == default,
      )
      for row in await queries.list_account_rows(self._db)
    ]

  async def get_default(self) -> str | None:
    return await queries.get_default_account(self._db)

  # ---------------------------------------------------------------------------
  # Mutations
  # ---------------------------------------------------------------------------

  async def add(self, address: str) -> AccountRecord:
    """Authorize a new account through the consent flow and persist it."""
    email = normalize_address(address)
    if await self.exists(email):
      raise ConflictError(f"Account {email} already exists.")

    credential = await self._authorize(email)
    now = utcnow()

    async with self._write_lock:
      # The consent flow may have taken minutes; check again under the lock.
      if await queries.account_exists(self._db, email):
        raise ConflictError(f"Account {email} already exists.")
      await self._vault.put(email, credential)
      await queries.insert_account(self._db, email, now)
      await self._db.commit()

    log.info("Added account %s", email)
    return AccountRecord(email=email, credential=credential, added_at=now, last_used=now)

  async def remove(self, address: str) -> None:
    email = normalize_address(address)
    async with self._write_lock:
      if not await queries.delete_account(self._db, email):
        raise NotFoundError(f"Account {email} not found.")
      if await queries.get_default_account(self._db) == email:
        await queries.clear_default_account(self._db)
      await self._db.commit()
      await self._vault.delete(email)
    log.info("Removed account %s", email)

  async def set_default(self, address: str) -> None:
    email = normalize_address(address)
    async with self._write_lock:
      if not await queries.account_exists(self._db, email):
        raise NotFoundError(f"Account {email} not found.")
      await queries.set_default_account(self._db, email)
      await self._db.commit()
    log.info("Default account set to %s", email)

  async def update_credential(self, address: str, credential: OAuthCredential) -> None:
    """Overwrite the stored credential of an existing account."""
    email = normalize_address(address)
    async with self._write_lock:
      if not await queries.account_exists(self._db, email):
        raise NotFoundError(f"Account {email} not found.")
      await self._vault.put(email, credential)

  async def touch(self, address: str) -> None:
    """Record a use of the account. Never raises."""
    email = normalize_address(address)
    try:
      async with self._write_lock:
        await queries.update_last_used(self._db, email, utcnow())
        await self._db.commit()
    except Exception as e:
      log.warning("Failed to update last_used for %s: %s", email, e)


def _parse_ts(value: str | None) -> datetime | None:
  return datetime.fromisoformat(value) if value else None


def _to_record(row: dict, credential: OAuthCredential) -> AccountRecord:
  return AccountRecord(
    email=row["email"],
    credential=credential,
    added_at=datetime.fromisoformat(row["added_at"]),
    last_used=_parse_ts(row["last_used"]),
  )
