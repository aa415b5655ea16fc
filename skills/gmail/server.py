"""
MCP server for the Gmail skill.

Uses the official `mcp` Python SDK over stdio. The skill context is opened
before serving and closed when the client disconnects.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, TextContent, Tool

from .handlers import dispatch_tool
from .skill import open_skill
from .tools import ALL_TOOLS

if TYPE_CHECKING:
  from .config import GmailSettings
  from .skill import GmailSkill

log = logging.getLogger("skill.gmail.server")


def create_mcp_server(skill: GmailSkill) -> Server:
  """Create and configure the MCP server with all tool handlers."""
  server = Server("gmail-skill")

  @server.list_tools()
  async def list_tools() -> list[Tool]:
    return ALL_TOOLS

  @server.call_tool()
  async def call_tool(name: str, arguments: dict[str, Any] | None) -> CallToolResult:
    result = await dispatch_tool(skill, name, arguments or {})
    return CallToolResult(
      content=[TextContent(type="text", text=result.content)],
      isError=result.is_error,
    )

  return server


async def run_server(settings: GmailSettings) -> None:
  """Run the MCP server on stdio."""
  skill = await open_skill(settings)
  try:
    server = create_mcp_server(skill)
    async with stdio_server() as (read_stream, write_stream):
      log.info("Gmail MCP server running on stdio")
      await server.run(read_stream, write_stream, server.create_initialization_options())
  finally:
    await skill.close()
