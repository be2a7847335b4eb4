"""
wordforge_bridge.core.tools.mcp_server - MCP Server Surface

Serves loaded tools to an MCP client over stdio:

- tools/list, tools/call     for tools whose mcp_type is "tool" or "resource"
- prompts/list, prompts/get  for tools whose mcp_type is "prompt"

Failed tool calls raise inside the handler so the SDK reports them with
isError=true; the adapter never turns a failure into a successful result.

Requires the `mcp` optional dependency: pip install wordforge-bridge[mcp]

Example:
    >>> router = ToolRouter(client, exclude_categories=["woocommerce"])
    >>> await router.refresh()
    >>> await serve_stdio(router)
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .base import Tool
from .router import ToolRouter

logger = logging.getLogger(__name__)

SERVER_NAME = "wordforge"


class ToolCallFailed(Exception):
    """Raised from the call_tool handler to mark the MCP result as an error."""


def format_tool_output(output: Any) -> str:
    """Render an ability payload as MCP text content."""
    if isinstance(output, str):
        return output
    return json.dumps(output, indent=2, default=str)


def prompt_arguments(tool: Tool) -> list[dict[str, Any]]:
    """Describe a prompt tool's arguments from its input schema."""
    schema = tool.input_schema.json_schema
    required = set(schema.get("required") or [])
    return [
        {
            "name": name,
            "description": (prop or {}).get("description"),
            "required": name in required,
        }
        for name, prop in (schema.get("properties") or {}).items()
    ]


def coerce_prompt_arguments(tool: Tool, arguments: dict[str, str] | None) -> dict[str, Any]:
    """
    Convert MCP prompt arguments (always strings) to the types the schema declares.

    Values that do not parse are passed through unchanged and left to
    argument validation.
    """
    if not arguments:
        return {}
    properties = tool.input_schema.json_schema.get("properties") or {}
    coerced: dict[str, Any] = {}
    for name, value in arguments.items():
        declared = (properties.get(name) or {}).get("type")
        if declared in ("integer", "number", "boolean", "array", "object") and isinstance(value, str):
            try:
                coerced[name] = json.loads(value)
                continue
            except ValueError:
                pass
        coerced[name] = value
    return coerced


def extract_messages(output: Any) -> list[dict[str, str]]:
    """
    Pull prompt messages out of an ability payload.

    Accepts {"messages": [...]} or a bare list of messages. Each message is
    reduced to {"role": ..., "text": ...}.
    """
    messages = output.get("messages", []) if isinstance(output, dict) else output
    if not isinstance(messages, list):
        return [{"role": "user", "text": format_tool_output(output)}]

    extracted = []
    for message in messages:
        if not isinstance(message, dict):
            continue
        role = message.get("role") if message.get("role") in ("user", "assistant") else "user"
        content = message.get("content")
        if isinstance(content, dict):
            text = content.get("text", "")
        else:
            text = "" if content is None else str(content)
        extracted.append({"role": role, "text": text})
    return extracted


def build_server(router: ToolRouter, name: str = SERVER_NAME) -> Any:
    """
    Create an MCP low-level Server wired to `router`.

    Raises:
        ImportError: If the mcp package is not installed
    """
    try:
        from mcp import types
        from mcp.server.lowlevel import Server
    except ImportError as e:
        raise ImportError(
            "The MCP server requires the 'mcp' package: pip install wordforge-bridge[mcp]"
        ) from e

    server: Any = Server(name)

    @server.list_tools()
    async def _list_tools() -> list[types.Tool]:
        return [types.Tool(**definition) for definition in router.get_all_tool_schemas()]

    @server.call_tool()
    async def _call_tool(tool_name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
        result = await router.execute_tool_call(tool_name, arguments)
        if not result.success:
            raise ToolCallFailed(result.error or f"Tool {tool_name} failed")
        return [types.TextContent(type="text", text=format_tool_output(result.output))]

    @server.list_prompts()
    async def _list_prompts() -> list[types.Prompt]:
        return [
            types.Prompt(
                name=tool.mcp_name,
                description=tool.description,
                arguments=[types.PromptArgument(**arg) for arg in prompt_arguments(tool)],
            )
            for tool in router.list_prompts()
        ]

    @server.get_prompt()
    async def _get_prompt(
        prompt_name: str, arguments: dict[str, str] | None
    ) -> types.GetPromptResult:
        tool = router.tool_registry.get_tool_by_name(prompt_name)
        if tool is None:
            raise ValueError(f"Unknown prompt: {prompt_name}")

        result = await router.execute_tool_call(prompt_name, coerce_prompt_arguments(tool, arguments))
        if not result.success:
            raise ToolCallFailed(result.error or f"Prompt {prompt_name} failed")

        return types.GetPromptResult(
            description=tool.description,
            messages=[
                types.PromptMessage(
                    role=message["role"],
                    content=types.TextContent(type="text", text=message["text"]),
                )
                for message in extract_messages(result.output)
            ],
        )

    return server


async def serve_stdio(router: ToolRouter, name: str = SERVER_NAME) -> None:
    """Run the MCP server on stdin/stdout until the client disconnects."""
    try:
        from mcp.server.stdio import stdio_server
    except ImportError as e:
        raise ImportError(
            "The MCP server requires the 'mcp' package: pip install wordforge-bridge[mcp]"
        ) from e

    server = build_server(router, name)

    logger.info(
        f"Serving {len(router.tool_registry)} tools over MCP stdio",
        extra={"server_name": name, "tool_count": len(router.tool_registry)},
    )

    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
