"""
Input validation helpers for Gmail tool arguments.
"""

from __future__ import annotations

import re
from typing import Any

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ValidationError(Exception):
  pass


def validate_email_address(value: Any, param_name: str) -> str:
  """Validate an email address."""
  if not isinstance(value, str) or not value.strip():
    raise ValidationError(f"Missing required parameter: {param_name}")
  value = value.strip()
  if not _EMAIL_RE.match(value):
    raise ValidationError(f"Invalid email address for {param_name}: {value}")
  return value


def validate_email_list(value: Any, param_name: str) -> list[str]:
  """Validate a list of email addresses or a comma-separated string."""
  if isinstance(value, str):
    parts = [p.strip() for p in value.split(",") if p.strip()]
  elif isinstance(value, list):
    parts = [str(p).strip() for p in value if p]
  else:
    raise ValidationError(f"Invalid {param_name}: must be a list or comma-separated string")

  if not parts:
    raise ValidationError(f"Missing required parameter: {param_name}")

  for addr in parts:
    if not _EMAIL_RE.match(addr):
      raise ValidationError(f"Invalid email address in {param_name}: {addr}")
  return parts


def opt_email_list(args: dict[str, Any], key: str) -> list[str] | None:
  """Read an optional list of email addresses."""
  v = args.get(key)
  if v is None or v == [] or v == "":
    return None
  return validate_email_list(v, key)


def opt_account(args: dict[str, Any], key: str = "account") -> str | None:
  """Read the optional account selector."""
  v = args.get(key)
  if v is None or v == "":
    return None
  return validate_email_address(v, key)


def validate_message_id(value: Any, param_name: str = "message_id") -> str:
  """Validate a Gmail message id (opaque non-empty string)."""
  if isinstance(value, str) and value.strip():
    return value.strip()
  raise ValidationError(f"Missing required parameter: {param_name}")


def validate_message_id_list(value: Any, param_name: str = "message_ids") -> list[str]:
  """Validate a list of Gmail message ids."""
  if isinstance(value, str):
    value = [p for p in value.split(",")]
  if not isinstance(value, list):
    raise ValidationError(f"Invalid {param_name}: must be a list of message ids")
  result = []
  for item in value:
    if not isinstance(item, str) or not item.strip():
      raise ValidationError(f"Invalid message id in {param_name}: {item!r}")
    result.append(item.strip())
  if not result:
    raise ValidationError(f"Missing required parameter: {param_name}")
  return result


def opt_number(args: dict[str, Any], key: str, fallback: int) -> int:
  """Read an optional number from args with a fallback."""
  v = args.get(key)
  if isinstance(v, bool):
    return fallback
  if isinstance(v, (int, float)):
    return int(v)
  return fallback


def opt_string(args: dict[str, Any], key: str) -> str | None:
  """Read an optional string from args."""
  v = args.get(key)
  return v if isinstance(v, str) and v else None


def req_string(args: dict[str, Any], key: str, allow_empty: bool = False) -> str:
  """Read a required string from args."""
  v = args.get(key)
  if not isinstance(v, str) or (not v and not allow_empty):
    raise ValidationError(f"Missing required parameter: {key}")
  return v


def opt_boolean(args: dict[str, Any], key: str, fallback: bool = False) -> bool:
  """Read an optional boolean from args."""
  v = args.get(key)
  return v if isinstance(v, bool) else fallback
