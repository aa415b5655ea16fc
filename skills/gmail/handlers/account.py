"""
Account management tool handlers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..api import account_api
from ..errors import ConflictError
from ..helpers import ErrorCategory, ToolResult, log_and_format_error, to_json
from ..state.types import dump_json
from ..validation import validate_email_address

if TYPE_CHECKING:
  from ..skill import GmailSkill


async def list_accounts(skill: GmailSkill, args: dict[str, Any]) -> ToolResult:
  try:
    accounts = await account_api.list_accounts(skill)
    if not accounts:
      return ToolResult(content="No Gmail accounts configured. Use 'add_account' to add one.")
    return ToolResult(content=f"Configured Gmail accounts:\n{to_json(dump_json(accounts))}")
  except Exception as e:
    return log_and_format_error("list_accounts", e, ErrorCategory.ACCOUNT)


async def add_account(skill: GmailSkill, args: dict[str, Any]) -> ToolResult:
  try:
    email = validate_email_address(args.get("email"), "email")
    record = await account_api.add_account(skill, email)
    return ToolResult(
      content=f"Account {record.email} added successfully. You may need to authenticate in your browser."
    )
  except ConflictError as e:
    return ToolResult(content=str(e))
  except Exception as e:
    return log_and_format_error("add_account", e, ErrorCategory.AUTH)


async def remove_account(skill: GmailSkill, args: dict[str, Any]) -> ToolResult:
  try:
    email = validate_email_address(args.get("email"), "email")
    await account_api.remove_account(skill, email)
    return ToolResult(content=f"Account {email} removed successfully.")
  except Exception as e:
    return log_and_format_error("remove_account", e, ErrorCategory.ACCOUNT)


async def set_default_account(skill: GmailSkill, args: dict[str, Any]) -> ToolResult:
  try:
    email = validate_email_address(args.get("email"), "email")
    await account_api.set_default_account(skill, email)
    return ToolResult(content=f"Default account set to {email}.")
  except Exception as e:
    return log_and_format_error("set_default_account", e, ErrorCategory.ACCOUNT)
