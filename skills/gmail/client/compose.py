"""
Outbound message composition.

Builds a plain-text RFC 5322 message: To, Subject, optional Cc/Bcc, the
threading headers for replies, a fixed UTF-8 Content-Type, a blank line and
the body verbatim. Only the subject is ever re-encoded.
"""

from __future__ import annotations

import base64
import email.utils
import re

from ..errors import NotFoundError
from ..state.types import ComposedMessage, ReplyContext, normalize_address

CONTENT_TYPE = "text/plain; charset=utf-8"

_PRINTABLE_ASCII = re.compile(r"[\x20-\x7E]*")


def encode_subject(subject: str) -> str:
  """RFC 2047 encoded word for non-ASCII subjects; printable ASCII passes through."""
  if _PRINTABLE_ASCII.fullmatch(subject):
    return subject
  return "=?UTF-8?B?" + base64.b64encode(subject.encode("utf-8")).decode("ascii") + "?="


def _assemble(
  to: list[str],
  subject: str,
  body: str,
  cc: list[str] | None,
  bcc: list[str] | None,
  extra: list[tuple[str, str]] | None = None,
) -> ComposedMessage:
  headers = [
    ("To", ", ".join(to)),
    ("Subject", encode_subject(subject)),
  ]
  if cc:
    headers.append(("Cc", ", ".join(cc)))
  if bcc:
    headers.append(("Bcc", ", ".join(bcc)))
  if extra:
    headers.extend(extra)
  headers.append(("Content-Type", CONTENT_TYPE))
  return ComposedMessage(headers=headers, body=body)


def compose(
  to: list[str],
  subject: str,
  body: str,
  cc: list[str] | None = None,
  bcc: list[str] | None = None,
) -> ComposedMessage:
  return _assemble(to, subject, body, cc, bcc)


def reply_subject(subject: str) -> str:
  if subject.lower().startswith("re:"):
    return subject
  return f"Re: {subject}"


def reply_recipients(
  context: ReplyContext,
  account: str,
  reply_all: bool = False,
) -> tuple[list[str], list[str]]:
  """Recipients of a reply: (to, extra cc) derived from the original headers."""
  sender = context.reply_to or context.from_addr
  primary = [addr for _, addr in email.utils.getaddresses([sender]) if addr]
  if not reply_all:
    return primary, []

  skip = {normalize_address(a) for a in primary}
  skip.add(normalize_address(account))
  cc: list[str] = []
  for _, addr in email.utils.getaddresses([context.to, context.cc]):
    key = normalize_address(addr)
    if addr and key not in skip:
      skip.add(key)
      cc.append(addr)
  return primary, cc


def compose_reply(
  context: ReplyContext,
  body: str,
  to: list[str],
  cc: list[str] | None = None,
  bcc: list[str] | None = None,
) -> ComposedMessage:
  """Reply into the original conversation.

  `context` must come from reading the original message first; its
  Message-ID header is what ties the reply to the thread.
  """
  if not context.header_message_id:
    raise NotFoundError(f"Message {context.message_id} has no Message-ID header to reply to.")
  if not to:
    raise NotFoundError(f"Message {context.message_id} has no sender address to reply to.")

  references = [r for r in context.references if r != context.header_message_id]
  references.append(context.header_message_id)
  threading = [
    ("In-Reply-To", context.header_message_id),
    ("References", " ".join(references)),
  ]
  return _assemble(to, reply_subject(context.subject), body, cc, bcc, threading)
