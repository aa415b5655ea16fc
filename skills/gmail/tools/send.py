"""
Send tools (2 tools).
"""

from __future__ import annotations

from mcp.types import Tool

from .common import ACCOUNT_PROPERTY, ADDRESS_LIST_PROPERTY

send_tools: list[Tool] = [
  Tool(
    name="send_email",
    description="Send a plain-text email",
    inputSchema={
      "type": "object",
      "properties": {
        "account": ACCOUNT_PROPERTY,
        "to": {**ADDRESS_LIST_PROPERTY, "description": "Recipient email addresses"},
        "subject": {"type": "string", "description": "Email subject"},
        "body": {"type": "string", "description": "Email body (plain text)"},
        "cc": {**ADDRESS_LIST_PROPERTY, "description": "CC recipients"},
        "bcc": {**ADDRESS_LIST_PROPERTY, "description": "BCC recipients"},
      },
      "required": ["to", "subject", "body"],
    },
  ),
  Tool(
    name="reply_to_email",
    description="Reply to an email in its original thread",
    inputSchema={
      "type": "object",
      "properties": {
        "account": ACCOUNT_PROPERTY,
        "message_id": {"type": "string", "description": "Gmail message ID to reply to"},
        "body": {"type": "string", "description": "Reply body (plain text)"},
        "cc": {**ADDRESS_LIST_PROPERTY, "description": "Additional CC recipients"},
        "bcc": {**ADDRESS_LIST_PROPERTY, "description": "BCC recipients"},
        "reply_all": {
          "type": "boolean",
          "description": "Also reply to the original To and CC recipients",
          "default": False,
        },
      },
      "required": ["message_id", "body"],
    },
  ),
]
