"""Integration tests: tool calls through the MCP server's request handlers."""

import pytest
from mcp.types import CallToolRequest, CallToolRequestParams, TextContent

from skills.gmail.server import create_mcp_server


async def _call(server, name: str, arguments: dict):
  handler = server.request_handlers[CallToolRequest]
  request = CallToolRequest(method="tools/call", params=CallToolRequestParams(name=name, arguments=arguments))
  response = await handler(request)
  return response.root


class TestCallTool:
  @pytest.mark.asyncio
  async def test_failed_tool_is_flagged_as_error(self, skill):
    server = create_mcp_server(skill)

    result = await _call(server, "read_email", {"message_id": "m1"})

    assert result.isError is True
    assert isinstance(result.content[0], TextContent)
    assert result.content[0].text.startswith("Error: No account specified and no default account set")

  @pytest.mark.asyncio
  async def test_successful_tool_is_not_an_error(self, skill):
    server = create_mcp_server(skill)

    result = await _call(server, "list_accounts", {})

    assert result.isError is False
    assert result.content[0].text == "No Gmail accounts configured. Use 'add_account' to add one."
