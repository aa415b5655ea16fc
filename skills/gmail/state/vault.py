"""
Credential vaults: where each account's OAuth secret bundle is kept.

Each account's credential is one JSON blob written in a single call, so a
reader sees either the old or the new token/expiry pair, and never another
account's secret.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Protocol

import keyring
from keyring.errors import PasswordDeleteError

from ..db import queries
from .types import OAuthCredential, utcnow

if TYPE_CHECKING:
  import aiosqlite

log = logging.getLogger("skill.gmail.state.vault")

TOKEN_KEY_SUFFIX = "/token"  # noqa: S105


class CredentialVault(Protocol):
  async def get(self, email: str) -> OAuthCredential | None: ...
  async def put(self, email: str, credential: OAuthCredential) -> None: ...
  async def delete(self, email: str) -> None: ...


class KeyringVault:
  """Secrets in the OS keychain, one entry per account."""

  def __init__(self, service: str) -> None:
    self.service = service

  def _key(self, email: str) -> str:
    return f"{email}{TOKEN_KEY_SUFFIX}"

  async def get(self, email: str) -> OAuthCredential | None:
    raw = await asyncio.to_thread(keyring.get_password, self.service, self._key(email))
    if not raw:
      return None
    return OAuthCredential.model_validate_json(raw)

  async def put(self, email: str, credential: OAuthCredential) -> None:
    await asyncio.to_thread(
      keyring.set_password, self.service, self._key(email), credential.model_dump_json()
    )

  async def delete(self, email: str) -> None:
    with contextlib.suppress(PasswordDeleteError):
      await asyncio.to_thread(keyring.delete_password, self.service, self._key(email))


class DatabaseVault:
  """Secrets in the account database, one `credentials` row per account."""

  def __init__(self, db: aiosqlite.Connection) -> None:
    self._db = db

  async def get(self, email: str) -> OAuthCredential | None:
    raw = await queries.get_credential_json(self._db, email)
    if not raw:
      return None
    return OAuthCredential.model_validate_json(raw)

  async def put(self, email: str, credential: OAuthCredential) -> None:
    await queries.upsert_credential_json(self._db, email, credential.model_dump_json(), utcnow())
    await self._db.commit()

  async def delete(self, email: str) -> None:
    await queries.delete_credential(self._db, email)
    await self._db.commit()
