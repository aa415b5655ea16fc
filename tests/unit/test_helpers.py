"""Tests for tool error formatting."""

import logging

from skills.gmail.errors import NotFoundError
from skills.gmail.helpers import ErrorCategory, log_and_format_error
from skills.gmail.validation import ValidationError


def test_domain_error_message_is_verbatim():
  result = log_and_format_error("read_email", NotFoundError("Account x not found."), ErrorCategory.MSG)
  assert result.is_error
  assert result.content == "Error: Account x not found."


def test_validation_error_message_is_verbatim():
  result = log_and_format_error("send_email", ValidationError("Missing required parameter: to"))
  assert result.content == "Error: Missing required parameter: to"


def test_unexpected_error_carries_code(caplog):
  with caplog.at_level(logging.ERROR, logger="skill.gmail.helpers"):
    result = log_and_format_error("search_emails", RuntimeError("boom"), ErrorCategory.SEARCH)

  assert result.content.startswith("Error: boom (code: SEARCH-ERR-")
  assert "SEARCH-ERR-" in caplog.text
