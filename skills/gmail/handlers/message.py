"""
Message search/read/flag tool handlers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..api import message_api
from ..helpers import ErrorCategory, ToolResult, log_and_format_error, to_json
from ..state.types import dump_json
from ..validation import (
  opt_account,
  opt_number,
  opt_string,
  req_string,
  validate_message_id,
  validate_message_id_list,
)

if TYPE_CHECKING:
  from ..skill import GmailSkill

MAX_RESULTS_CAP = 500


async def search_emails(skill: GmailSkill, args: dict[str, Any]) -> ToolResult:
  try:
    query = req_string(args, "query", allow_empty=True)
    max_results = max(1, min(opt_number(args, "max_results", 10), MAX_RESULTS_CAP))
    page_token = opt_string(args, "page_token")
    account = opt_account(args)

    email, result = await message_api.search_emails(
      skill,
      query,
      max_results=max_results,
      page_token=page_token,
      account=account,
    )
    return ToolResult(content=f"Search results from {email}:\n{to_json(dump_json(result))}")
  except Exception as e:
    return log_and_format_error("search_emails", e, ErrorCategory.SEARCH)


async def read_email(skill: GmailSkill, args: dict[str, Any]) -> ToolResult:
  try:
    message_id = validate_message_id(args.get("message_id"))
    email, message = await message_api.read_email(skill, message_id, account=opt_account(args))
    return ToolResult(content=f"Email from {email}:\n{to_json(message)}")
  except Exception as e:
    return log_and_format_error("read_email", e, ErrorCategory.MSG)


async def read_email_light(skill: GmailSkill, args: dict[str, Any]) -> ToolResult:
  try:
    message_id = validate_message_id(args.get("message_id"))
    _, message = await message_api.read_email_light(skill, message_id, account=opt_account(args))
    return ToolResult(content=to_json(dump_json(message)))
  except Exception as e:
    return log_and_format_error("read_email_light", e, ErrorCategory.MSG)


async def mark_as_read(skill: GmailSkill, args: dict[str, Any]) -> ToolResult:
  try:
    message_ids = validate_message_id_list(args.get("message_ids"))
    email, count = await message_api.mark_as_read(skill, message_ids, account=opt_account(args))
    return ToolResult(content=f"Marked {count} message(s) as read in {email}.")
  except Exception as e:
    return log_and_format_error("mark_as_read", e, ErrorCategory.MSG)
