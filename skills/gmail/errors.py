"""
Error taxonomy for the Gmail skill.

Every error here is reported to the tool caller with its message verbatim.
"""

from __future__ import annotations


class GmailSkillError(Exception):
  pass


class NotFoundError(GmailSkillError):
  """An account or message does not exist."""


class ConflictError(GmailSkillError):
  """An account with the same address is already configured."""


class ReauthRequiredError(GmailSkillError):
  """The refresh token was rejected; the account must be added again."""

  def __init__(self, email: str, reason: str = "") -> None:
    self.email = email
    self.reason = reason
    detail = f" ({reason})" if reason else ""
    super().__init__(
      f"Authorization for {email} was revoked or expired{detail}. "
      f"Remove and re-add the account to authorize it again."
    )


class TransportError(GmailSkillError):
  """A call to the mail provider or the token endpoint failed."""

  def __init__(self, message: str, status: int | None = None) -> None:
    self.status = status
    super().__init__(message)


class ConsentError(GmailSkillError):
  """The OAuth consent flow could not produce a credential for the account."""
