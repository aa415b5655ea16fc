"""
Send/reply tool handlers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..api import send_api
from ..helpers import ErrorCategory, ToolResult, log_and_format_error
from ..validation import (
  opt_account,
  opt_boolean,
  opt_email_list,
  req_string,
  validate_email_list,
  validate_message_id,
)

if TYPE_CHECKING:
  from ..skill import GmailSkill


async def send_email(skill: GmailSkill, args: dict[str, Any]) -> ToolResult:
  try:
    to = validate_email_list(args.get("to"), "to")
    subject = req_string(args, "subject", allow_empty=True)
    body = req_string(args, "body", allow_empty=True)

    email, message_id = await send_api.send_email(
      skill,
      to=to,
      subject=subject,
      body=body,
      cc=opt_email_list(args, "cc"),
      bcc=opt_email_list(args, "bcc"),
      account=opt_account(args),
    )
    return ToolResult(content=f"Email sent successfully from {email}. Message ID: {message_id}")
  except Exception as e:
    return log_and_format_error("send_email", e, ErrorCategory.SEND)


async def reply_to_email(skill: GmailSkill, args: dict[str, Any]) -> ToolResult:
  try:
    message_id = validate_message_id(args.get("message_id"))
    body = req_string(args, "body", allow_empty=True)

    email, reply_id = await send_api.reply_to_email(
      skill,
      message_id,
      body,
      cc=opt_email_list(args, "cc"),
      bcc=opt_email_list(args, "bcc"),
      reply_all=opt_boolean(args, "reply_all", False),
      account=opt_account(args),
    )
    return ToolResult(content=f"Reply sent successfully from {email}. Message ID: {reply_id}")
  except Exception as e:
    return log_and_format_error("reply_to_email", e, ErrorCategory.SEND)
