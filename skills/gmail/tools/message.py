"""
Message tools (4 tools).
"""

from __future__ import annotations

from mcp.types import Tool

from .common import ACCOUNT_PROPERTY

message_tools: list[Tool] = [
  Tool(
    name="search_emails",
    description="Search emails using Gmail query syntax (e.g. 'from:alice is:unread')",
    inputSchema={
      "type": "object",
      "properties": {
        "account": ACCOUNT_PROPERTY,
        "query": {"type": "string", "description": "Gmail search query"},
        "max_results": {
          "type": "number",
          "description": "Maximum number of results",
          "default": 10,
        },
        "page_token": {"type": "string", "description": "Token of the results page to fetch"},
      },
      "required": ["query"],
    },
  ),
  Tool(
    name="read_email",
    description="Read the full content of an email, including its MIME structure",
    inputSchema={
      "type": "object",
      "properties": {
        "account": ACCOUNT_PROPERTY,
        "message_id": {"type": "string", "description": "Gmail message ID"},
      },
      "required": ["message_id"],
    },
  ),
  Tool(
    name="read_email_light",
    description="Read an email as headers, plain-text body and cleaned links",
    inputSchema={
      "type": "object",
      "properties": {
        "account": ACCOUNT_PROPERTY,
        "message_id": {"type": "string", "description": "Gmail message ID"},
      },
      "required": ["message_id"],
    },
  ),
  Tool(
    name="mark_as_read",
    description="Mark one or more emails as read",
    inputSchema={
      "type": "object",
      "properties": {
        "account": ACCOUNT_PROPERTY,
        "message_ids": {
          "type": "array",
          "items": {"type": "string"},
          "description": "Gmail message IDs to mark as read",
        },
      },
      "required": ["message_ids"],
    },
  ),
]
