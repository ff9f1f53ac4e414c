"""Helpers for serving in-process MCP tools to the Claude Code CLI."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from claude_agent_sdk import SdkMcpTool, create_sdk_mcp_server, tool

logger = logging.getLogger(__name__)

ToolHandler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


@dataclass
class McpToolDefinition:
    """One tool served by a custom MCP server.

    Attributes:
        description: Description shown to the model.
        input_schema: JSON schema dict, or a ``{"arg": type}`` mapping.
        handler: Coroutine called with the tool arguments; returns an MCP
            result such as ``{"content": [{"type": "text", "text": "..."}]}``.
        annotations: Optional MCP tool annotations (read-only and
            destructive hints, for example).
    """

    description: str
    input_schema: Union[type, dict[str, Any]]
    handler: ToolHandler
    annotations: Optional[Any] = None


def _build_tool(name: str, definition: McpToolDefinition) -> SdkMcpTool[Any]:
    if definition.annotations is None:
        decorator = tool(name, definition.description, definition.input_schema)
    else:
        decorator = tool(name, definition.description, definition.input_schema, annotations=definition.annotations)
    return decorator(definition.handler)


def create_custom_mcp_server(
    name: str,
    tools: Mapping[str, Union[McpToolDefinition, Mapping[str, Any]]],
    version: str = "1.0.0",
) -> Any:
    """Create an in-process MCP server from a mapping of tool definitions.

    The result goes into ``ClaudeCodeSettings.mcp_servers`` under any key;
    the CLI then exposes its tools as ``mcp__<key>__<tool name>``.

    Args:
        name: Server name.
        tools: Tool definitions keyed by tool name. Plain mappings are
            accepted with the same fields as ``McpToolDefinition``.
        version: Server version reported over MCP.

    Returns:
        The SDK server config for the new server.

    Example:
        ```python
        server = create_custom_mcp_server(
            "calculator",
            {"add": McpToolDefinition("Add two numbers", {"a": float, "b": float}, add)},
        )
        model = ClaudeCodeLanguageModel("sonnet", {"mcp_servers": {"calc": server}})
        ```
    """
    sdk_tools = []
    for tool_name, definition in tools.items():
        if not isinstance(definition, McpToolDefinition):
            definition = McpToolDefinition(**definition)
        sdk_tools.append(_build_tool(tool_name, definition))

    logger.debug(f"Creating MCP server '{name}' with tools: {list(tools)}")
    return create_sdk_mcp_server(name=name, version=version, tools=sdk_tools)
