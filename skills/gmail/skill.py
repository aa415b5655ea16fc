"""
Gmail skill context.

GmailSkill bundles the process-wide instances every operation needs: the
settings, the account store, the token manager and the factory that turns
an authorization into a mail transport. It is built once by `open_skill`
and passed explicitly to the api and handler layers.

Usage:
    skill = await open_skill(get_settings())
    try:
        ...
    finally:
        await skill.close()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING

from .client.gmail_client import GmailClient
from .client.oauth import GoogleConsentFlow, GoogleTokenRefresher
from .client.token_manager import TokenManager
from .state.store import AccountStore

if TYPE_CHECKING:
  from collections.abc import Awaitable, Callable

  from .client.gmail_client import MailTransport
  from .client.token_manager import TokenRefresher
  from .config import GmailSettings
  from .state.types import AuthorizationHandle, OAuthCredential

  TransportFactory = Callable[[AuthorizationHandle], MailTransport]

log = logging.getLogger("skill.gmail.skill")


@dataclass
class GmailSkill:
  settings: GmailSettings
  store: AccountStore
  tokens: TokenManager
  transport_factory: TransportFactory = field(default=GmailClient)

  async def close(self) -> None:
    await self.store.close()
    log.info("Gmail skill closed")


async def open_skill(
  settings: GmailSettings,
  authorize: Callable[[str], Awaitable[OAuthCredential]] | None = None,
  refresher: TokenRefresher | None = None,
  transport_factory: TransportFactory | None = None,
) -> GmailSkill:
  """Open the account store and wire the token manager.

  The consent flow, refresher and transport default to the Google-backed
  implementations; tests pass fakes.
  """
  if authorize is None:
    authorize = GoogleConsentFlow(
      settings.resolved_client_secrets_path,
      port=settings.oauth_port,
    )
  store = await AccountStore.open(settings, authorize)
  tokens = TokenManager(
    store,
    refresher or GoogleTokenRefresher(),
    margin=timedelta(seconds=settings.refresh_margin_seconds),
  )
  log.info(
    "Gmail skill ready (data dir %s, %s credential storage)",
    settings.data_dir,
    settings.credential_storage,
  )
  return GmailSkill(
    settings=settings,
    store=store,
    tokens=tokens,
    transport_factory=transport_factory or GmailClient,
  )
