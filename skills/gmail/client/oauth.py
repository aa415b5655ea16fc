"""
Google OAuth2: installed-app consent flow and refresh-token exchange.

google-auth is synchronous, so network calls run in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from google.auth.exceptions import RefreshError
from google.auth.exceptions import TransportError as GoogleTransportError
from google.auth.transport.requests import Request
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from ..errors import ConsentError, ReauthRequiredError, TransportError
from ..state.types import OAuthCredential, normalize_address

if TYPE_CHECKING:
  from pathlib import Path

  from google.oauth2.credentials import Credentials

log = logging.getLogger("skill.gmail.client.oauth")

SCOPES = [
  "openid",
  "https://www.googleapis.com/auth/userinfo.email",
  "https://www.googleapis.com/auth/gmail.modify",
]


class GoogleConsentFlow:
  """Obtains the first credential for a mailbox through the browser consent flow."""

  def __init__(self, client_secrets_path: Path, scopes: list[str] | None = None, port: int = 0):
    self.client_secrets_path = client_secrets_path
    self.scopes = scopes or SCOPES
    self.port = port

  async def __call__(self, address: str) -> OAuthCredential:
    if not self.client_secrets_path.exists():
      raise ConsentError(f"Gmail OAuth client secrets not found at {self.client_secrets_path}")

    log.info("Starting OAuth consent flow for %s", address)
    try:
      creds, authorized_email = await asyncio.to_thread(self._run_flow, address)
    except ConsentError:
      raise
    except Exception as e:
      raise ConsentError(f"OAuth consent flow failed for {address}: {e}") from e

    if normalize_address(authorized_email) != normalize_address(address):
      raise ConsentError(
        f"Authorized mailbox {authorized_email} does not match requested account {address}."
      )
    return OAuthCredential.from_google(creds)

  def _run_flow(self, address: str) -> tuple[Credentials, str]:
    flow = InstalledAppFlow.from_client_secrets_file(str(self.client_secrets_path), self.scopes)
    creds = flow.run_local_server(port=self.port, login_hint=address)

    service = build("gmail", "v1", credentials=creds, cache_discovery=False)
    profile = service.users().getProfile(userId="me").execute()
    email = profile.get("emailAddress")
    if not email:
      raise ConsentError("Failed to get email address from OAuth token")
    return creds, email


class GoogleTokenRefresher:
  """Exchanges a refresh token at Google's token endpoint."""

  def __init__(self) -> None:
    self.request_factory = Request

  async def refresh(self, email: str, credential: OAuthCredential) -> OAuthCredential:
    if not credential.refresh_token:
      raise ReauthRequiredError(email, "no refresh token stored")

    creds = credential.to_google()
    try:
      await asyncio.to_thread(creds.refresh, self.request_factory())
    except RefreshError as e:
      if getattr(e, "retryable", False):
        raise TransportError(f"Token refresh for {email} failed: {e}") from e
      raise ReauthRequiredError(email, _refresh_reason(e)) from e
    except GoogleTransportError as e:
      raise TransportError(f"Token endpoint unreachable while refreshing {email}: {e}") from e

    refreshed = OAuthCredential.from_google(creds)
    if not refreshed.refresh_token:
      # Google only rotates the refresh token occasionally
      refreshed = refreshed.model_copy(update={"refresh_token": credential.refresh_token})
    log.info("Refreshed access token for %s", email)
    return refreshed


def _refresh_reason(error: RefreshError) -> str:
  args: tuple[Any, ...] = error.args
  if len(args) > 1 and isinstance(args[1], dict):
    return str(args[1].get("error", "")) or str(args[0])
  return str(args[0]) if args else ""
