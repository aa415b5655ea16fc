"""
Shared formatting and error handling helpers.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import GmailSkillError
from .validation import ValidationError

log = logging.getLogger("skill.gmail.helpers")


# ---------------------------------------------------------------------------
# Tool result
# ---------------------------------------------------------------------------


@dataclass
class ToolResult:
  content: str
  is_error: bool = False


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def to_json(data: Any) -> str:
  """Indented JSON for tool output."""
  return json.dumps(data, indent=2, ensure_ascii=False, default=str)


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------


class ErrorCategory(str, Enum):
  ACCOUNT = "ACCOUNT"
  MSG = "MSG"
  SEND = "SEND"
  SEARCH = "SEARCH"
  AUTH = "AUTH"
  VALIDATION = "VALIDATION"


def log_and_format_error(
  function_name: str,
  error: Exception,
  category: str | ErrorCategory | None = None,
) -> ToolResult:
  prefix = category.value if isinstance(category, ErrorCategory) else (category or "GEN")
  hash_val = sum(ord(c) for c in function_name) % 1000
  error_code = f"{prefix}-ERR-{hash_val:03d}"

  if isinstance(error, (ValidationError, GmailSkillError)):
    log.warning("[MCP] %s failed - Code: %s - %s", function_name, error_code, error)
    user_message = f"Error: {error}"
  else:
    log.error("[MCP] Error in %s - Code: %s - %s", function_name, error_code, error, exc_info=error)
    user_message = f"Error: {error} (code: {error_code})"

  return ToolResult(content=user_message, is_error=True)
