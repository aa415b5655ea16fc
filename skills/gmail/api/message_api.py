"""
Message read/search operations API.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from ..client.parsers import build_light_message, build_summary
from ..state.types import SearchResult
from .account_api import authorized_transport

if TYPE_CHECKING:
  from ..skill import GmailSkill
  from ..state.types import LightMessage

log = logging.getLogger("skill.gmail.api.message")

SUMMARY_HEADERS = ["Subject", "From", "Date"]


async def search_emails(
  skill: GmailSkill,
  query: str,
  max_results: int = 10,
  page_token: str | None = None,
  account: str | None = None,
) -> tuple[str, SearchResult]:
  """Search with Gmail query syntax and summarize every hit, in list order."""
  email, transport = await authorized_transport(skill, account)
  listing = await transport.list_messages(query, max_results, page_token)
  hits = listing.get("messages") or []

  details = await asyncio.gather(
    *(transport.get_message(hit["id"], "metadata", SUMMARY_HEADERS) for hit in hits)
  )
  log.debug("Search %r in %s returned %d message(s)", query, email, len(hits))
  return email, SearchResult(
    messages=[build_summary(d) for d in details],
    result_size_estimate=listing.get("resultSizeEstimate"),
    next_page_token=listing.get("nextPageToken"),
  )


async def read_email(
  skill: GmailSkill,
  message_id: str,
  account: str | None = None,
) -> tuple[str, dict[str, Any]]:
  """The full provider message, payload tree included."""
  email, transport = await authorized_transport(skill, account)
  return email, await transport.get_message(message_id, "full")


async def read_email_light(
  skill: GmailSkill,
  message_id: str,
  account: str | None = None,
) -> tuple[str, LightMessage]:
  """Headers, plain-text body and cleaned links of one message."""
  email, transport = await authorized_transport(skill, account)
  message = await transport.get_message(message_id, "full")
  return email, build_light_message(message)


async def mark_as_read(
  skill: GmailSkill,
  message_ids: list[str],
  account: str | None = None,
) -> tuple[str, int]:
  email, transport = await authorized_transport(skill, account)
  await asyncio.gather(*(transport.modify_labels(mid, remove=["UNREAD"]) for mid in message_ids))
  log.info("Marked %d message(s) as read in %s", len(message_ids), email)
  return email, len(message_ids)
