"""Tests for the keyring-backed credential vault."""

import pytest

from skills.gmail.state.store import AccountStore
from skills.gmail.state.vault import KeyringVault
from tests.conftest import fresh_credential


class TestKeyringVault:
  @pytest.mark.asyncio
  async def test_round_trip_uses_account_key(self, memory_keyring):
    vault = KeyringVault("gmail-skill/test")
    await vault.put("alice@example.com", fresh_credential(token="abc"))

    assert ("gmail-skill/test", "alice@example.com/token") in memory_keyring.entries
    assert (await vault.get("alice@example.com")).token == "abc"
    assert await vault.get("bob@example.com") is None

  @pytest.mark.asyncio
  async def test_delete_missing_entry(self, memory_keyring):
    vault = KeyringVault("gmail-skill/test")
    await vault.delete("nobody@example.com")
    assert memory_keyring.entries == {}

  @pytest.mark.asyncio
  async def test_store_keeps_secrets_out_of_database(self, settings, authorizer, memory_keyring):
    settings = settings.model_copy(update={"credential_storage": "keyring", "keyring_service": "svc"})
    store = await AccountStore.open(settings, authorizer)
    try:
      await store.add("alice@example.com")
      async with store._db.execute("SELECT COUNT(*) FROM credentials") as cursor:
        (count,) = await cursor.fetchone()
      assert count == 0
      assert ("svc", "alice@example.com/token") in memory_keyring.entries

      await store.remove("alice@example.com")
      assert memory_keyring.entries == {}
    finally:
      await store.close()
