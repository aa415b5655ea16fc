"""Tests for access token resolution and refresh coalescing."""

import asyncio
from datetime import timedelta

import pytest

from skills.gmail.client.token_manager import TokenManager
from skills.gmail.errors import NotFoundError, ReauthRequiredError, TransportError
from skills.gmail.state.types import OAuthCredential, utcnow
from tests.conftest import expired_credential, fresh_credential


async def _add(store, authorizer, address: str, credential: OAuthCredential) -> None:
  authorizer.credential_for[address] = credential
  await store.add(address)


class TestResolve:
  @pytest.mark.asyncio
  async def test_valid_token_is_not_refreshed(self, store, authorizer, refresher):
    await _add(store, authorizer, "alice@example.com", fresh_credential(token="good"))
    tokens = TokenManager(store, refresher)

    handle = await tokens.resolve("Alice@example.com")

    assert handle.email == "alice@example.com"
    assert handle.access_token == "good"
    assert refresher.calls == []

  @pytest.mark.asyncio
  async def test_token_inside_margin_is_refreshed_and_persisted(self, store, authorizer, refresher):
    await _add(store, authorizer, "alice@example.com", fresh_credential(token="soon", minutes=2))
    tokens = TokenManager(store, refresher, margin=timedelta(minutes=5))

    handle = await tokens.resolve("alice@example.com")

    assert handle.access_token == "refreshed-1"
    stored = await store.get("alice@example.com")
    assert stored.credential.token == "refreshed-1"
    assert stored.credential.refresh_token == "refresh-1"
    assert stored.credential.expiry > utcnow() + timedelta(minutes=30)

  @pytest.mark.asyncio
  async def test_missing_expiry_counts_as_valid(self, store, authorizer, refresher):
    await _add(store, authorizer, "alice@example.com", OAuthCredential(token="t", refresh_token="r"))
    tokens = TokenManager(store, refresher)

    assert (await tokens.resolve("alice@example.com")).access_token == "t"
    assert refresher.calls == []

  @pytest.mark.asyncio
  async def test_unknown_account(self, store, refresher):
    with pytest.raises(NotFoundError):
      await TokenManager(store, refresher).resolve("nobody@example.com")


class TestConcurrency:
  @pytest.mark.asyncio
  async def test_concurrent_resolves_refresh_once(self, store, authorizer, refresher):
    await _add(store, authorizer, "alice@example.com", expired_credential())
    tokens = TokenManager(store, refresher)

    handles = await asyncio.gather(*(tokens.resolve("alice@example.com") for _ in range(10)))

    assert refresher.calls == ["alice@example.com"]
    assert {h.access_token for h in handles} == {"refreshed-1"}

  @pytest.mark.asyncio
  async def test_accounts_do_not_block_each_other(self, store, authorizer, refresher):
    await _add(store, authorizer, "slow@example.com", expired_credential())
    await _add(store, authorizer, "fast@example.com", fresh_credential(token="fast-token"))
    refresher.gate = asyncio.Event()
    tokens = TokenManager(store, refresher)

    slow = asyncio.create_task(tokens.resolve("slow@example.com"))
    await refresher.started.wait()

    fast = await asyncio.wait_for(tokens.resolve("fast@example.com"), timeout=1)
    assert fast.access_token == "fast-token"
    assert not slow.done()

    refresher.gate.set()
    assert (await slow).access_token == "refreshed-1"

  @pytest.mark.asyncio
  async def test_cancelled_caller_does_not_abandon_refresh(self, store, authorizer, refresher):
    await _add(store, authorizer, "alice@example.com", expired_credential())
    refresher.gate = asyncio.Event()
    tokens = TokenManager(store, refresher)

    first = asyncio.create_task(tokens.resolve("alice@example.com"))
    await refresher.started.wait()
    first.cancel()
    with pytest.raises(asyncio.CancelledError):
      await first

    second = asyncio.create_task(tokens.resolve("alice@example.com"))
    await asyncio.sleep(0)
    refresher.gate.set()

    assert (await second).access_token == "refreshed-1"
    assert refresher.calls == ["alice@example.com"]
    assert (await store.get("alice@example.com")).credential.token == "refreshed-1"


class TestFailures:
  @pytest.mark.asyncio
  async def test_revoked_refresh_token(self, store, authorizer, refresher):
    await _add(store, authorizer, "alice@example.com", expired_credential(token="old"))
    refresher.error = ReauthRequiredError("alice@example.com", "invalid_grant")
    tokens = TokenManager(store, refresher)

    with pytest.raises(ReauthRequiredError) as exc_info:
      await tokens.resolve("alice@example.com")

    assert "alice@example.com" in str(exc_info.value)
    assert (await store.get("alice@example.com")).credential.token == "old"

  @pytest.mark.asyncio
  async def test_transport_failure_is_retried_on_next_call(self, store, authorizer, refresher):
    await _add(store, authorizer, "alice@example.com", expired_credential())
    refresher.error = TransportError("token endpoint unreachable")
    tokens = TokenManager(store, refresher)

    with pytest.raises(TransportError):
      await tokens.resolve("alice@example.com")

    refresher.error = None
    assert (await tokens.resolve("alice@example.com")).access_token == "refreshed-2"
