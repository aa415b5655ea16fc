"""
Account operations API: resolve which mailbox a call acts on and manage the
set of authorized accounts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import NotFoundError
from ..state.types import normalize_address

if TYPE_CHECKING:
  from ..client.gmail_client import MailTransport
  from ..skill import GmailSkill
  from ..state.types import AccountInfo, AccountRecord


async def resolve_account(skill: GmailSkill, account: str | None = None) -> str:
  """The explicit account if it exists, otherwise the default account."""
  if account:
    email = normalize_address(account)
    if not await skill.store.exists(email):
      raise NotFoundError(f"Account {email} not found. Use 'add_account' to add it first.")
    return email

  default = await skill.store.get_default()
  if not default:
    raise NotFoundError(
      "No account specified and no default account set. Please add an account first."
    )
  return default


async def authorized_transport(
  skill: GmailSkill,
  account: str | None = None,
) -> tuple[str, MailTransport]:
  """Resolve the account and hand back a transport holding a valid token."""
  email = await resolve_account(skill, account)
  authorization = await skill.tokens.resolve(email)
  await skill.store.touch(email)
  return email, skill.transport_factory(authorization)


async def list_accounts(skill: GmailSkill) -> list[AccountInfo]:
  return await skill.store.list_info()


async def add_account(skill: GmailSkill, email: str) -> AccountRecord:
  """Run the consent flow for a new mailbox and store its credential."""
  return await skill.store.add(email)


async def remove_account(skill: GmailSkill, email: str) -> None:
  await skill.store.remove(email)
  skill.tokens.forget(email)


async def set_default_account(skill: GmailSkill, email: str) -> None:
  await skill.store.set_default(email)
