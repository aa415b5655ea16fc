"""
Gmail API transport.

google-api-python-client is synchronous and its httplib2 transport is not
thread-safe, so every call builds its own service object and runs in a
worker thread.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..errors import NotFoundError, TransportError

if TYPE_CHECKING:
  from collections.abc import Callable

  from ..state.types import AuthorizationHandle

log = logging.getLogger("skill.gmail.client.gmail")

USER_ID = "me"


class MailTransport(Protocol):
  """The four provider calls the skill needs, bound to one authorization."""

  async def send_raw(self, raw: str, thread_id: str | None = None) -> str: ...

  async def list_messages(
    self,
    query: str,
    max_results: int,
    page_token: str | None = None,
  ) -> dict[str, Any]: ...

  async def get_message(
    self,
    message_id: str,
    fmt: str = "full",
    metadata_headers: list[str] | None = None,
  ) -> dict[str, Any]: ...

  async def modify_labels(
    self,
    message_id: str,
    add: list[str] | None = None,
    remove: list[str] | None = None,
  ) -> None: ...


class GmailClient:
  """MailTransport backed by the Gmail REST API v1."""

  def __init__(self, authorization: AuthorizationHandle) -> None:
    self.authorization = authorization
    self._credentials = authorization.to_google()

  async def _call(self, what: str, make_request: Callable[[Any], Any]) -> Any:
    def run() -> Any:
      service = build("gmail", "v1", credentials=self._credentials, cache_discovery=False)
      return make_request(service.users().messages()).execute()

    try:
      return await asyncio.to_thread(run)
    except HttpError as e:
      status = e.resp.status if e.resp is not None else None
      if status == 404:
        raise NotFoundError(f"{what}: not found in {self.authorization.email}") from e
      log.error("Gmail API error during %s: %s", what, e)
      raise TransportError(f"{what} failed: {e}", status=status) from e
    except (NotFoundError, TransportError):
      raise
    except Exception as e:
      log.error("Gmail request %s failed: %s", what, e)
      raise TransportError(f"{what} failed: {e}") from e

  async def send_raw(self, raw: str, thread_id: str | None = None) -> str:
    body: dict[str, Any] = {"raw": raw}
    if thread_id:
      body["threadId"] = thread_id
    result = await self._call("send", lambda m: m.send(userId=USER_ID, body=body))
    log.info("Message %s sent from %s", result.get("id"), self.authorization.email)
    return result["id"]

  async def list_messages(
    self,
    query: str,
    max_results: int,
    page_token: str | None = None,
  ) -> dict[str, Any]:
    return await self._call(
      "list messages",
      lambda m: m.list(userId=USER_ID, q=query, maxResults=max_results, pageToken=page_token),
    )

  async def get_message(
    self,
    message_id: str,
    fmt: str = "full",
    metadata_headers: list[str] | None = None,
  ) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"userId": USER_ID, "id": message_id, "format": fmt}
    if metadata_headers:
      kwargs["metadataHeaders"] = metadata_headers
    return await self._call(f"get message {message_id}", lambda m: m.get(**kwargs))

  async def modify_labels(
    self,
    message_id: str,
    add: list[str] | None = None,
    remove: list[str] | None = None,
  ) -> None:
    body = {"addLabelIds": add or [], "removeLabelIds": remove or []}
    await self._call(
      f"modify message {message_id}",
      lambda m: m.modify(userId=USER_ID, id=message_id, body=body),
    )
