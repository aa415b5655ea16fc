"""
Account tools (4 tools).
"""

from __future__ import annotations

from mcp.types import Tool

account_tools: list[Tool] = [
  Tool(
    name="list_accounts",
    description="List configured Gmail accounts and which one is the default",
    inputSchema={"type": "object", "properties": {}},
  ),
  Tool(
    name="add_account",
    description="Add a Gmail account; opens the browser to authorize access",
    inputSchema={
      "type": "object",
      "properties": {
        "email": {"type": "string", "format": "email", "description": "Gmail address to add"},
      },
      "required": ["email"],
    },
  ),
  Tool(
    name="remove_account",
    description="Remove a Gmail account and its stored credential",
    inputSchema={
      "type": "object",
      "properties": {
        "email": {"type": "string", "format": "email", "description": "Gmail address to remove"},
      },
      "required": ["email"],
    },
  ),
  Tool(
    name="set_default_account",
    description="Set the account used when a tool call names none",
    inputSchema={
      "type": "object",
      "properties": {
        "email": {
          "type": "string",
          "format": "email",
          "description": "Gmail account to set as default",
        },
      },
      "required": ["email"],
    },
  ),
]
