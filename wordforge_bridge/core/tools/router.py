"""
wordforge_bridge.core.tools.router - Unified Tool Router

Agent-facing wrapper around loading and execution:
  - refresh()                               reload tools from the registry
  - get_all_tool_schemas()                  MCP tool definitions
  - execute_tool_call(tool_name, arguments) structured result, never raises

The adapter layer below this raises on every failure; this is the one place
where failures become a "tool call failed" result for the agent.
"""

import logging
from collections.abc import Sequence
from time import time
from typing import Any

from pydantic import BaseModel, Field

from wordforge_bridge.exceptions import BridgeError

from .base import McpType, Tool
from .filters import DEFAULT_NAMESPACE, NamespaceMapping
from .loader import AbilitySource, load_tools
from .registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolCallResult(BaseModel):
    """
    Result of one agent tool call.

    Example:
        >>> result = ToolCallResult(
        ...     tool_name="wordpress_list-content",
        ...     success=True,
        ...     output={"items": [], "total": 0},
        ...     duration_ms=84.2,
        ... )
    """

    tool_name: str = Field(..., description="MCP name of the tool that was called")

    # Outcome
    success: bool = Field(..., description="Whether execution succeeded")
    output: Any | None = Field(default=None, description="Unwrapped ability payload if successful")
    error: str | None = Field(default=None, description="Error message if failed")
    error_type: str | None = Field(
        default=None, description="Exception class name (e.g. 'AbilityExecutionError')"
    )

    # Performance
    duration_ms: float = Field(default=0.0, ge=0, description="Execution duration in milliseconds")


class ToolRouter:
    """
    Loads tools into a ToolRegistry and executes calls by MCP name.

    Example:
        >>> router = ToolRouter(client, exclude_categories=["woocommerce"])
        >>> await router.refresh()
        >>> schemas = router.get_all_tool_schemas()
        >>> result = await router.execute_tool_call(
        ...     "wordpress_list-content", {"post_type": "page"}
        ... )
    """

    def __init__(
        self,
        client: AbilitySource,
        exclude_categories: Sequence[str] = (),
        *,
        namespace: NamespaceMapping = DEFAULT_NAMESPACE,
        validate_arguments: bool = True,
        tool_registry: ToolRegistry | None = None,
    ) -> None:
        self._client = client
        self._exclude_categories = tuple(exclude_categories)
        self._namespace = namespace
        self._validate_arguments = validate_arguments
        self._tool_registry = tool_registry if tool_registry is not None else ToolRegistry()

    @property
    def tool_registry(self) -> ToolRegistry:
        return self._tool_registry

    async def refresh(self) -> list[Tool]:
        """
        Reload tools from the remote registry.

        Raises:
            DiscoveryError: If discovery fails; the previous tools stay in place
        """
        tools = await load_tools(
            self._client,
            self._exclude_categories,
            namespace=self._namespace,
            validate_arguments=self._validate_arguments,
        )
        self._tool_registry.replace(tools)
        return tools

    def get_all_tool_schemas(self) -> list[dict[str, Any]]:
        """MCP definitions for every callable (non-prompt) tool."""
        return [
            tool.to_mcp_definition()
            for tool in self._tool_registry.list_tools()
            if tool.mcp_type != McpType.PROMPT.value
        ]

    def list_prompts(self) -> list[Tool]:
        """Tools the registry declared as prompts."""
        return self._tool_registry.list_tools(mcp_type=McpType.PROMPT.value)

    async def execute_tool_call(
        self, tool_name: str, arguments: dict[str, Any] | None = None
    ) -> ToolCallResult:
        """
        Execute a tool by MCP name.

        Args:
            tool_name: MCP name (e.g. "wordpress_list-content")
            arguments: Tool arguments

        Returns:
            ToolCallResult; failures are reported, not raised
        """
        start_time = time()

        tool = self._tool_registry.get_tool_by_name(tool_name)
        if tool is None:
            logger.warning(f"Unknown tool requested: {tool_name}", extra={"tool_name": tool_name})
            return ToolCallResult(
                tool_name=tool_name,
                success=False,
                error=f"Unknown tool: {tool_name}",
                error_type="UnknownToolError",
            )

        try:
            output = await tool.execute(arguments or {})
            return ToolCallResult(
                tool_name=tool_name,
                success=True,
                output=output,
                duration_ms=(time() - start_time) * 1000,
            )
        except BridgeError as e:
            logger.warning(
                f"Tool '{tool_name}' failed: {e}",
                extra={"tool_name": tool_name, "error_type": type(e).__name__},
            )
            return self._failure(tool_name, e, start_time)
        except Exception as e:
            logger.error(
                f"Tool '{tool_name}' raised unexpectedly: {e}",
                exc_info=True,
                extra={"tool_name": tool_name},
            )
            return self._failure(tool_name, e, start_time)

    @staticmethod
    def _failure(tool_name: str, error: Exception, start_time: float) -> ToolCallResult:
        return ToolCallResult(
            tool_name=tool_name,
            success=False,
            error=str(error),
            error_type=type(error).__name__,
            duration_ms=(time() - start_time) * 1000,
        )

    def __repr__(self) -> str:
        return f"ToolRouter(tools={len(self._tool_registry)}, excluded={list(self._exclude_categories)})"
