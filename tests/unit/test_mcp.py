"""Unit tests for the custom MCP server helper."""

from typing import Any
from unittest.mock import Mock, patch

import pytest
from claude_agent_sdk import SdkMcpTool

from claude_code_stream import ClaudeCodeLanguageModel
from claude_code_stream.mcp import McpToolDefinition, create_custom_mcp_server


async def _add(args: dict[str, Any]) -> dict[str, Any]:
    return {"content": [{"type": "text", "text": str(args["a"] + args["b"])}]}


@pytest.fixture
def add_tool():
    return McpToolDefinition(
        description="Add two numbers",
        input_schema={"a": float, "b": float},
        handler=_add,
    )


class TestCreateCustomMcpServer:
    """Tests for create_custom_mcp_server."""

    def test_returns_sdk_server_config(self, add_tool):
        server = create_custom_mcp_server("calculator", {"add": add_tool})
        assert server["type"] == "sdk"
        assert server["name"] == "calculator"
        assert server["instance"] is not None

    @patch("claude_code_stream.mcp.create_sdk_mcp_server")
    def test_tools_keyed_by_name(self, mock_create_server, add_tool):
        mock_create_server.return_value = Mock()
        create_custom_mcp_server("calculator", {"add": add_tool}, version="2.0.0")

        mock_create_server.assert_called_once()
        kwargs = mock_create_server.call_args.kwargs
        assert kwargs["name"] == "calculator"
        assert kwargs["version"] == "2.0.0"
        [sdk_tool] = kwargs["tools"]
        assert isinstance(sdk_tool, SdkMcpTool)
        assert sdk_tool.name == "add"
        assert sdk_tool.description == "Add two numbers"
        assert sdk_tool.input_schema == {"a": float, "b": float}
        assert sdk_tool.handler is _add

    @patch("claude_code_stream.mcp.create_sdk_mcp_server")
    @patch("claude_code_stream.mcp.tool")
    def test_annotations_forwarded(self, mock_tool, mock_create_server, add_tool):
        mock_tool.return_value = lambda handler: Mock()
        annotations = {"readOnlyHint": True, "destructiveHint": False}
        add_tool.annotations = annotations

        create_custom_mcp_server("calculator", {"add": add_tool})

        mock_tool.assert_called_once_with(
            "add", "Add two numbers", {"a": float, "b": float}, annotations=annotations
        )

    @patch("claude_code_stream.mcp.create_sdk_mcp_server")
    @patch("claude_code_stream.mcp.tool")
    def test_annotations_omitted_when_absent(self, mock_tool, mock_create_server, add_tool):
        mock_tool.return_value = lambda handler: Mock()
        create_custom_mcp_server("calculator", {"add": add_tool})
        mock_tool.assert_called_once_with("add", "Add two numbers", {"a": float, "b": float})

    @patch("claude_code_stream.mcp.create_sdk_mcp_server")
    def test_plain_mapping_definitions(self, mock_create_server):
        create_custom_mcp_server(
            "calculator",
            {"add": {"description": "Add", "input_schema": {"a": float}, "handler": _add}},
        )
        [sdk_tool] = mock_create_server.call_args.kwargs["tools"]
        assert sdk_tool.name == "add"
        assert sdk_tool.handler is _add

    @pytest.mark.asyncio
    async def test_handler_is_served_unchanged(self, add_tool):
        with patch("claude_code_stream.mcp.create_sdk_mcp_server") as mock_create_server:
            create_custom_mcp_server("calculator", {"add": add_tool})
        [sdk_tool] = mock_create_server.call_args.kwargs["tools"]
        result = await sdk_tool.handler({"a": 1, "b": 2})
        assert result["content"][0]["text"] == "3"

    def test_server_accepted_by_settings(self, add_tool):
        server = create_custom_mcp_server("calculator", {"add": add_tool})
        model = ClaudeCodeLanguageModel("sonnet", {"mcp_servers": {"calc": server}})
        assert model.settings.mcp_servers["calc"] is server
