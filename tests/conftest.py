"""Shared test fixtures for the Gmail skill tests.

This module provides common fixtures used across all test modules:
- Settings isolated in a temporary data directory
- Fake consent flow, token refresher and mail transport
- An in-memory keyring backend

Usage:
    @pytest.mark.asyncio
    async def test_something(skill, transport):
        ...
"""

from __future__ import annotations

import asyncio
import base64
from collections.abc import AsyncGenerator, Generator
from datetime import timedelta
from pathlib import Path
from typing import Any

import keyring
import pytest
import pytest_asyncio
from keyring.backend import KeyringBackend
from keyring.errors import PasswordDeleteError

from skills.gmail.config import GmailSettings
from skills.gmail.errors import NotFoundError
from skills.gmail.skill import GmailSkill, open_skill
from skills.gmail.state.store import AccountStore
from skills.gmail.state.types import AuthorizationHandle, OAuthCredential, utcnow


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def b64url(text: str) -> str:
  """Gmail-style body data: URL-safe base64 without padding."""
  return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def decode_raw(raw: str) -> str:
  return base64.urlsafe_b64decode(raw + "=" * (-len(raw) % 4)).decode("utf-8")


def fresh_credential(token: str = "access-1", minutes: int = 60) -> OAuthCredential:
  return OAuthCredential(
    token=token,
    refresh_token="refresh-1",
    expiry=utcnow() + timedelta(minutes=minutes),
    scopes=["https://www.googleapis.com/auth/gmail.modify"],
  )


def expired_credential(token: str = "stale") -> OAuthCredential:
  return fresh_credential(token=token, minutes=-1)


def headers(**values: str) -> list[dict[str, str]]:
  return [{"name": name.replace("_", "-"), "value": value} for name, value in values.items()]


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeAuthorizer:
  """Stands in for the browser consent flow."""

  def __init__(self) -> None:
    self.calls: list[str] = []
    self.credential_for: dict[str, OAuthCredential] = {}
    self.error: Exception | None = None

  async def __call__(self, address: str) -> OAuthCredential:
    self.calls.append(address)
    if self.error is not None:
      raise self.error
    return self.credential_for.get(address, fresh_credential(token=f"access-{address}"))


class FakeRefresher:
  """Token endpoint stand-in that counts exchanges.

  Set `gate` to hold refreshes until the test releases them.
  """

  def __init__(self) -> None:
    self.calls: list[str] = []
    self.error: Exception | None = None
    self.gate: asyncio.Event | None = None
    self.started = asyncio.Event()

  async def refresh(self, email: str, credential: OAuthCredential) -> OAuthCredential:
    self.calls.append(email)
    self.started.set()
    if self.gate is not None:
      await self.gate.wait()
    else:
      await asyncio.sleep(0.01)
    if self.error is not None:
      raise self.error
    return credential.model_copy(
      update={
        "token": f"refreshed-{len(self.calls)}",
        "expiry": utcnow() + timedelta(hours=1),
      }
    )


class FakeTransport:
  """In-memory mailbox implementing the MailTransport calls."""

  def __init__(self) -> None:
    self.messages: dict[str, dict[str, Any]] = {}
    self.sent: list[dict[str, Any]] = []
    self.modified: list[tuple[str, list[str], list[str]]] = []
    self.list_calls: list[dict[str, Any]] = []
    self.get_calls: list[tuple[str, str, list[str] | None]] = []
    self.authorizations: list[AuthorizationHandle] = []
    self.next_page_token: str | None = None

  def bind(self, authorization: AuthorizationHandle) -> FakeTransport:
    self.authorizations.append(authorization)
    return self

  def add_message(self, message: dict[str, Any]) -> None:
    self.messages[message["id"]] = message

  async def send_raw(self, raw: str, thread_id: str | None = None) -> str:
    message_id = f"sent-{len(self.sent) + 1}"
    self.sent.append({"id": message_id, "raw": raw, "thread_id": thread_id})
    return message_id

  async def list_messages(
    self,
    query: str,
    max_results: int,
    page_token: str | None = None,
  ) -> dict[str, Any]:
    self.list_calls.append({"query": query, "max_results": max_results, "page_token": page_token})
    hits = [{"id": m["id"], "threadId": m.get("threadId")} for m in self.messages.values()]
    result: dict[str, Any] = {"resultSizeEstimate": len(hits)}
    if hits:
      result["messages"] = hits[:max_results]
    if self.next_page_token:
      result["nextPageToken"] = self.next_page_token
    return result

  async def get_message(
    self,
    message_id: str,
    fmt: str = "full",
    metadata_headers: list[str] | None = None,
  ) -> dict[str, Any]:
    self.get_calls.append((message_id, fmt, metadata_headers))
    if message_id not in self.messages:
      raise NotFoundError(f"get message {message_id}: not found")
    return self.messages[message_id]

  async def modify_labels(
    self,
    message_id: str,
    add: list[str] | None = None,
    remove: list[str] | None = None,
  ) -> None:
    if message_id not in self.messages:
      raise NotFoundError(f"modify message {message_id}: not found")
    self.modified.append((message_id, add or [], remove or []))


class MemoryKeyring(KeyringBackend):
  priority = 1

  def __init__(self) -> None:
    super().__init__()
    self.entries: dict[tuple[str, str], str] = {}

  def get_password(self, service: str, username: str) -> str | None:
    return self.entries.get((service, username))

  def set_password(self, service: str, username: str, password: str) -> None:
    self.entries[(service, username)] = password

  def delete_password(self, service: str, username: str) -> None:
    if (service, username) not in self.entries:
      raise PasswordDeleteError("not found")
    del self.entries[(service, username)]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path: Path) -> GmailSettings:
  return GmailSettings(
    data_dir=tmp_path / "data",
    credential_storage="database",
    client_secrets_path=tmp_path / "client_secret.json",
  )


@pytest.fixture
def authorizer() -> FakeAuthorizer:
  return FakeAuthorizer()


@pytest.fixture
def refresher() -> FakeRefresher:
  return FakeRefresher()


@pytest.fixture
def transport() -> FakeTransport:
  return FakeTransport()


@pytest.fixture
def memory_keyring() -> Generator[MemoryKeyring, None, None]:
  previous = keyring.get_keyring()
  backend = MemoryKeyring()
  keyring.set_keyring(backend)
  yield backend
  keyring.set_keyring(previous)


@pytest_asyncio.fixture
async def store(settings: GmailSettings, authorizer: FakeAuthorizer) -> AsyncGenerator[AccountStore, None]:
  store = await AccountStore.open(settings, authorizer)
  yield store
  await store.close()


@pytest_asyncio.fixture
async def skill(
  settings: GmailSettings,
  authorizer: FakeAuthorizer,
  refresher: FakeRefresher,
  transport: FakeTransport,
) -> AsyncGenerator[GmailSkill, None]:
  skill = await open_skill(
    settings,
    authorize=authorizer,
    refresher=refresher,
    transport_factory=transport.bind,
  )
  yield skill
  await skill.close()
