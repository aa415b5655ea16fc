"""
Tool dispatch: routes tool names to handler functions.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..helpers import ToolResult
from .account import add_account, list_accounts, remove_account, set_default_account
from .message import mark_as_read, read_email, read_email_light, search_emails
from .send import reply_to_email, send_email

if TYPE_CHECKING:
  from ..skill import GmailSkill

log = logging.getLogger("skill.gmail.handlers")

# Map tool names to handler functions
HANDLERS: dict[str, Any] = {
  # Send tools
  "send_email": send_email,
  "reply_to_email": reply_to_email,
  # Message tools
  "search_emails": search_emails,
  "read_email": read_email,
  "read_email_light": read_email_light,
  "mark_as_read": mark_as_read,
  # Account tools
  "list_accounts": list_accounts,
  "add_account": add_account,
  "remove_account": remove_account,
  "set_default_account": set_default_account,
}


async def dispatch_tool(skill: GmailSkill, tool_name: str, args: dict[str, Any]) -> ToolResult:
  """Dispatch a tool call to the appropriate handler."""
  handler = HANDLERS.get(tool_name)
  if not handler:
    log.error("Unknown tool: %s", tool_name)
    return ToolResult(content=f"Unknown tool: {tool_name}", is_error=True)

  return await handler(skill, args)
