"""
Inbound message extraction.

Turns a Gmail `payload` tree into a plain-text body, a header summary and a
de-duplicated link list. Extraction is best-effort: malformed or unexpected
MIME shapes produce empty results, never exceptions.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qs, unquote, urlsplit

from pydantic import ValidationError as PydanticValidationError

from ..state.types import LightMessage, MessageSummary, MimeNode, ReplyContext

if TYPE_CHECKING:
  from collections.abc import Iterator

log = logging.getLogger("skill.gmail.client.parsers")

# Checked in this order; the first one holding an absolute http(s) URL wins.
DESTINATION_PARAMS = ("url", "u", "redirect", "destination", "target", "link")

TRACKING_MARKERS = (
  "click.",
  "track.",
  "trk.",
  "email.",
  "links.",
  "list-manage.com",
  "mailchimp.com",
  "beehiiv.com/clicks",
  "convertkit.com",
  "substack.com/redirect",
)

_SCRIPT_RE = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")
_HREF_RE = re.compile(r"""href=["']([^"']+)["']""", re.IGNORECASE)

_ENTITIES = (
  ("&nbsp;", " "),
  ("&amp;", "&"),
  ("&lt;", "<"),
  ("&gt;", ">"),
  ("&quot;", '"'),
  ("&#39;", "'"),
)


# ---------------------------------------------------------------------------
# Payload decoding
# ---------------------------------------------------------------------------


def parse_payload(payload: dict[str, Any] | None) -> MimeNode:
  """Build a MimeNode from a provider payload; bad shapes become an empty node."""
  if not isinstance(payload, dict):
    return MimeNode()
  try:
    return MimeNode.model_validate(payload)
  except PydanticValidationError as e:
    log.warning("Unexpected MIME payload shape: %s", e.error_count())
    return MimeNode()


def decode_body(data: str | None) -> str:
  """Decode base64url (or standard base64) body data as UTF-8."""
  if not data:
    return ""
  try:
    raw = base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))
  except (binascii.Error, ValueError):
    return ""
  return raw.decode("utf-8", errors="replace")


def walk(node: MimeNode) -> Iterator[MimeNode]:
  """Pre-order traversal: a node, then each child subtree in order."""
  yield node
  for part in node.parts:
    yield from walk(part)


def get_header(node: MimeNode, name: str) -> str:
  wanted = name.lower()
  for header in node.headers:
    if header.name.lower() == wanted:
      return header.value
  return ""


# ---------------------------------------------------------------------------
# Plain text
# ---------------------------------------------------------------------------


def _find_plain_text(node: MimeNode) -> str:
  if node.is_leaf_of("text/plain"):
    return decode_body(node.body_data)

  for part in node.parts:
    if part.is_leaf_of("text/plain"):
      return decode_body(part.body_data)
    if part.is_multipart:
      nested = _find_plain_text(part)
      if nested:
        return nested
  return ""


def html_to_text(html: str) -> str:
  text = _SCRIPT_RE.sub("", html)
  text = _STYLE_RE.sub("", text)
  text = _TAG_RE.sub(" ", text)
  for entity, char in _ENTITIES:
    text = text.replace(entity, char)
  return _WS_RE.sub(" ", text).strip()


def extract_plain_text(root: MimeNode) -> str:
  """Readable body: the first text/plain leaf, else the first text/html leaf as text."""
  text = _find_plain_text(root)
  if text:
    return text

  for node in walk(root):
    if node.is_leaf_of("text/html"):
      return html_to_text(decode_body(node.body_data))
  return ""


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------


def _is_tracking_host(hostname: str, path: str) -> bool:
  return any(marker in hostname or marker in path for marker in TRACKING_MARKERS)


def clean_tracking_url(url: str) -> str | None:
  """Unwrap a redirect/tracking URL to its destination when it names one.

  Returns None for URLs that cannot be parsed.
  """
  try:
    parsed = urlsplit(url)
    hostname = parsed.hostname or ""
    parsed.port  # noqa: B018 -- raises ValueError on a malformed port
  except ValueError:
    return None
  if not hostname:
    return None

  params = parse_qs(parsed.query, keep_blank_values=True)
  for name in DESTINATION_PARAMS:
    values = params.get(name)
    if not values:
      continue
    destination = values[0]
    if destination.startswith(("http://", "https://")):
      return unquote(destination)

  if _is_tracking_host(hostname, parsed.path):
    # Known no-op: tracking-only links are still returned unchanged.
    log.debug("Keeping tracking link without extractable destination: %s", hostname)
  return url


def _links_in_html(html: str) -> Iterator[str]:
  for match in _HREF_RE.finditer(html):
    url = match.group(1)
    if url.startswith(("mailto:", "javascript:", "#")):
      continue
    if not url.startswith(("http://", "https://")):
      continue
    cleaned = clean_tracking_url(url)
    if cleaned:
      yield cleaned


def extract_links(root: MimeNode) -> list[str]:
  """Links from every text/html leaf, unique, in first-seen document order."""
  links: dict[str, None] = {}
  for node in walk(root):
    if node.is_leaf_of("text/html"):
      for link in _links_in_html(decode_body(node.body_data)):
        links.setdefault(link, None)
  return list(links)


# ---------------------------------------------------------------------------
# Message projections
# ---------------------------------------------------------------------------


def build_summary(message: dict[str, Any]) -> MessageSummary:
  payload = parse_payload(message.get("payload"))
  return MessageSummary(
    id=str(message.get("id", "")),
    thread_id=message.get("threadId"),
    snippet=message.get("snippet", "") or "",
    subject=get_header(payload, "Subject"),
    from_addr=get_header(payload, "From"),
    date=get_header(payload, "Date"),
  )


def build_light_message(message: dict[str, Any]) -> LightMessage:
  payload = parse_payload(message.get("payload"))
  return LightMessage(
    id=str(message.get("id", "")),
    thread_id=message.get("threadId", "") or "",
    from_addr=get_header(payload, "From"),
    to=get_header(payload, "To"),
    subject=get_header(payload, "Subject"),
    date=get_header(payload, "Date"),
    snippet=message.get("snippet", "") or "",
    body=extract_plain_text(payload),
    labels=list(message.get("labelIds") or []),
    links=extract_links(payload),
  )


def build_reply_context(message: dict[str, Any]) -> ReplyContext:
  payload = parse_payload(message.get("payload"))
  return ReplyContext(
    message_id=str(message.get("id", "")),
    thread_id=message.get("threadId"),
    header_message_id=get_header(payload, "Message-ID").strip(),
    subject=get_header(payload, "Subject"),
    from_addr=get_header(payload, "From"),
    reply_to=get_header(payload, "Reply-To"),
    to=get_header(payload, "To"),
    cc=get_header(payload, "Cc"),
    references=re.findall(r"<[^>]+>", get_header(payload, "References")),
  )
