"""
Access token lifecycle: hand out valid tokens, refreshing and persisting
rotated credentials.

Refreshes are serialized per mailbox with one asyncio.Lock per address, so
unrelated accounts never wait on each other. The refresh-and-persist step
runs as its own shielded task: cancelling a caller abandons the wait, not
the write.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Protocol

from ..errors import ReauthRequiredError
from ..state.types import AuthorizationHandle, OAuthCredential, normalize_address

if TYPE_CHECKING:
  from ..state.store import AccountStore

log = logging.getLogger("skill.gmail.client.tokens")

DEFAULT_REFRESH_MARGIN = timedelta(minutes=5)


class TokenRefresher(Protocol):
  async def refresh(self, email: str, credential: OAuthCredential) -> OAuthCredential: ...


class TokenManager:
  def __init__(
    self,
    store: AccountStore,
    refresher: TokenRefresher,
    margin: timedelta = DEFAULT_REFRESH_MARGIN,
  ) -> None:
    self._store = store
    self._refresher = refresher
    self._margin = margin
    self._locks: dict[str, asyncio.Lock] = {}
    self._pending: dict[str, asyncio.Task[OAuthCredential]] = {}

  def _lock_for(self, email: str) -> asyncio.Lock:
    lock = self._locks.get(email)
    if lock is None:
      lock = asyncio.Lock()
      self._locks[email] = lock
    return lock

  def forget(self, address: str) -> None:
    """Drop per-address bookkeeping after an account is removed."""
    email = normalize_address(address)
    lock = self._locks.get(email)
    if lock is not None and not lock.locked():
      del self._locks[email]

  async def resolve(self, address: str) -> AuthorizationHandle:
    """Return a handle wrapping a currently valid access token."""
    email = normalize_address(address)

    async with self._lock_for(email):
      pending = self._pending.get(email)
      if pending is not None:
        # A cancelled caller left its refresh running; join it.
        credential = await asyncio.shield(pending)
      else:
        record = await self._store.get(email)
        credential = record.credential
        if credential.expires_within(self._margin):
          credential = await asyncio.shield(self._start_refresh(email, credential))

    if not credential.token:
      raise ReauthRequiredError(email, "token endpoint returned no access token")
    return AuthorizationHandle(email=email, access_token=credential.token, expiry=credential.expiry)

  def _start_refresh(self, email: str, credential: OAuthCredential) -> asyncio.Task[OAuthCredential]:
    task = asyncio.ensure_future(self._refresh_and_persist(email, credential))
    self._pending[email] = task

    def _done(t: asyncio.Task[OAuthCredential]) -> None:
      if self._pending.get(email) is t:
        del self._pending[email]
      if not t.cancelled() and t.exception() is not None:
        log.debug("Refresh for %s failed: %s", email, t.exception())

    task.add_done_callback(_done)
    return task

  async def _refresh_and_persist(self, email: str, credential: OAuthCredential) -> OAuthCredential:
    log.info("Access token for %s expires soon, refreshing", email)
    refreshed = await self._refresher.refresh(email, credential)
    await self._store.update_credential(email, refreshed)
    return refreshed
