"""
Gmail skill data model.

Account and credential types are persisted by the AccountStore; the MIME
types mirror the `payload` tree of a Gmail API message and are only ever
traversed, never mutated.
"""

from __future__ import annotations

import base64
from datetime import UTC, datetime, timedelta
from typing import Any

from google.oauth2.credentials import Credentials
from pydantic import BaseModel, ConfigDict, Field

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


def normalize_address(address: str) -> str:
  """Mailbox identities compare case-insensitively."""
  return address.strip().lower()


def utcnow() -> datetime:
  return datetime.now(tz=UTC)


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


class OAuthCredential(BaseModel):
  """One account's OAuth2 secret bundle, always written as a single unit."""

  model_config = ConfigDict(frozen=True)

  token: str | None = None
  refresh_token: str | None = None
  expiry: datetime | None = None
  scopes: list[str] = Field(default_factory=list)
  token_uri: str = GOOGLE_TOKEN_URI
  client_id: str | None = None
  client_secret: str | None = None

  def expires_within(self, margin: timedelta, now: datetime | None = None) -> bool:
    """True when the access token is missing or expires inside the margin."""
    if not self.token:
      return True
    if self.expiry is None:
      return False
    expiry = self.expiry if self.expiry.tzinfo else self.expiry.replace(tzinfo=UTC)
    return expiry <= (now or utcnow()) + margin

  @classmethod
  def from_google(cls, creds: Credentials) -> OAuthCredential:
    # google-auth keeps expiry as a naive UTC datetime
    expiry = creds.expiry.replace(tzinfo=UTC) if creds.expiry else None
    return cls(
      token=creds.token,
      refresh_token=creds.refresh_token,
      expiry=expiry,
      scopes=list(creds.scopes or []),
      token_uri=creds.token_uri or GOOGLE_TOKEN_URI,
      client_id=creds.client_id,
      client_secret=creds.client_secret,
    )

  def to_google(self) -> Credentials:
    expiry = self.expiry.astimezone(UTC).replace(tzinfo=None) if self.expiry else None
    return Credentials(
      token=self.token,
      refresh_token=self.refresh_token,
      token_uri=self.token_uri,
      client_id=self.client_id,
      client_secret=self.client_secret,
      scopes=self.scopes or None,
      expiry=expiry,
    )


class AccountRecord(BaseModel):
  email: str
  credential: OAuthCredential
  added_at: datetime
  last_used: datetime | None = None


class AccountInfo(BaseModel):
  """Account listing entry; never carries secret material."""

  email: str
  added_at: datetime
  last_used: datetime | None = None
  is_default: bool = False


class AuthorizationHandle(BaseModel):
  """A currently valid access token for one mailbox."""

  model_config = ConfigDict(frozen=True)

  email: str
  access_token: str
  expiry: datetime | None = None

  def to_google(self) -> Credentials:
    # No refresh token: refreshing is owned by the TokenManager.
    return Credentials(token=self.access_token)


# ---------------------------------------------------------------------------
# MIME tree
# ---------------------------------------------------------------------------


class MimeHeader(BaseModel):
  model_config = ConfigDict(frozen=True, extra="ignore")

  name: str = ""
  value: str = ""


class MimeBody(BaseModel):
  model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

  data: str | None = None
  size: int = 0
  attachment_id: str | None = Field(default=None, alias="attachmentId")


class MimeNode(BaseModel):
  model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

  mime_type: str = Field(default="", alias="mimeType")
  filename: str = ""
  headers: list[MimeHeader] = Field(default_factory=list)
  body: MimeBody | None = None
  parts: list[MimeNode] = Field(default_factory=list)

  @property
  def body_data(self) -> str | None:
    return self.body.data if self.body else None

  @property
  def is_multipart(self) -> bool:
    return self.mime_type.lower().startswith("multipart/") or bool(self.parts)

  def is_leaf_of(self, mime_type: str) -> bool:
    """True for a leaf of the given type that carries payload data."""
    return self.mime_type.lower() == mime_type and bool(self.body_data)


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class MessageSummary(BaseModel):
  model_config = ConfigDict(populate_by_name=True)

  id: str
  thread_id: str | None = Field(default=None, serialization_alias="threadId")
  snippet: str = ""
  subject: str = ""
  from_addr: str = Field(default="", serialization_alias="from")
  date: str = ""


class SearchResult(BaseModel):
  messages: list[MessageSummary] = Field(default_factory=list)
  result_size_estimate: int | None = Field(default=None, serialization_alias="resultSizeEstimate")
  next_page_token: str | None = Field(default=None, serialization_alias="nextPageToken")


class LightMessage(BaseModel):
  id: str
  thread_id: str = Field(default="", serialization_alias="threadId")
  from_addr: str = Field(default="", serialization_alias="from")
  to: str = ""
  subject: str = ""
  date: str = ""
  snippet: str = ""
  body: str = ""
  labels: list[str] = Field(default_factory=list)
  links: list[str] = Field(default_factory=list)


class ReplyContext(BaseModel):
  """Threading metadata of the message being replied to."""

  message_id: str
  thread_id: str | None = None
  header_message_id: str = ""
  subject: str = ""
  from_addr: str = ""
  reply_to: str = ""
  to: str = ""
  cc: str = ""
  references: list[str] = Field(default_factory=list)


class ComposedMessage(BaseModel):
  """An outbound RFC 5322 message: ordered headers, blank line, body."""

  model_config = ConfigDict(frozen=True)

  headers: list[tuple[str, str]]
  body: str

  def header(self, name: str) -> str | None:
    for key, value in self.headers:
      if key.lower() == name.lower():
        return value
    return None

  def as_text(self) -> str:
    lines = [f"{name}: {value}" for name, value in self.headers]
    lines.extend(["", self.body])
    return "\r\n".join(lines)

  def to_raw(self) -> str:
    """URL-safe base64 blob for the Gmail `raw` field."""
    return base64.urlsafe_b64encode(self.as_text().encode("utf-8")).decode("ascii").rstrip("=")


def dump_json(model: BaseModel | list[Any]) -> Any:
  """JSON-ready view of a model using the provider's camelCase field names."""
  if isinstance(model, list):
    return [dump_json(m) for m in model]
  return model.model_dump(mode="json", by_alias=True)
