"""
Sending operations API (new messages and replies via the Gmail send endpoint).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..client.compose import compose, compose_reply, reply_recipients
from ..client.parsers import build_reply_context
from ..state.types import normalize_address
from .account_api import authorized_transport

if TYPE_CHECKING:
  from ..skill import GmailSkill

log = logging.getLogger("skill.gmail.api.send")

REPLY_HEADERS = ["Message-ID", "References", "Subject", "From", "Reply-To", "To", "Cc"]


async def send_email(
  skill: GmailSkill,
  to: list[str],
  subject: str,
  body: str,
  cc: list[str] | None = None,
  bcc: list[str] | None = None,
  account: str | None = None,
) -> tuple[str, str]:
  """Compose and send a new plain-text email. Returns (account, message id)."""
  email, transport = await authorized_transport(skill, account)
  message = compose(to, subject, body, cc=cc, bcc=bcc)
  message_id = await transport.send_raw(message.to_raw())
  return email, message_id


async def reply_to_email(
  skill: GmailSkill,
  message_id: str,
  body: str,
  cc: list[str] | None = None,
  bcc: list[str] | None = None,
  reply_all: bool = False,
  account: str | None = None,
) -> tuple[str, str]:
  """Reply within the original thread, preserving threading headers."""
  email, transport = await authorized_transport(skill, account)
  original = await transport.get_message(message_id, "metadata", REPLY_HEADERS)
  context = build_reply_context(original)

  to, extra_cc = reply_recipients(context, email, reply_all=reply_all)
  cc = list(cc or [])
  seen = {normalize_address(a) for a in cc}
  cc.extend(a for a in extra_cc if normalize_address(a) not in seen)
  message = compose_reply(context, body, to, cc=cc or None, bcc=bcc)

  reply_id = await transport.send_raw(message.to_raw(), thread_id=context.thread_id)
  log.info("Reply %s sent to message %s from %s", reply_id, message_id, email)
  return email, reply_id
