"""
wordforge_bridge.core.tools.registry - Tool Registry

Holds the tools produced by one load, keyed by their agent-facing name.
"""

import logging
from collections.abc import Iterable

from .base import Tool

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Registry of loaded tools.

    Features:
    - Lookup by MCP name or original ability name
    - Filtering by category and MCP type
    - Wholesale replacement on reload

    Design: a snapshot, not a cache. Tools are never mutated in place;
    reloading replaces every entry with freshly built Tool objects.

    Example:
        >>> registry = ToolRegistry()
        >>> registry.replace(await load_tools(client, ["woocommerce"]))
        >>> tool = registry.get_tool_by_name("wordpress_list-content")
        >>> prompts = registry.list_tools(mcp_type="prompt")
    """

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        """Initialize the registry, optionally with an initial tool list."""
        self._tools: dict[str, Tool] = {}
        self._ability_to_mcp: dict[str, str] = {}
        for tool in tools:
            self.register_tool(tool)

    def register_tool(self, tool: Tool) -> None:
        """
        Register a tool.

        Raises:
            ValueError: If a different tool is already registered under the same MCP name
        """
        existing = self._tools.get(tool.mcp_name)
        if existing is not None and existing != tool:
            raise ValueError(f"Tool with name '{tool.mcp_name}' already registered")

        self._tools[tool.mcp_name] = tool
        self._ability_to_mcp[tool.name] = tool.mcp_name

        logger.debug(
            f"Registered tool: {tool.mcp_name}",
            extra={
                "ability": tool.name,
                "category": tool.category,
                "http_method": tool.http_method.value,
            },
        )

    def replace(self, tools: Iterable[Tool]) -> None:
        """
        Swap the whole registry for a new load's tools.

        The new tools are registered into a staging registry first; on a
        conflict the current tools stay untouched.

        Raises:
            ValueError: If two different tools share an MCP name
        """
        staged = ToolRegistry(tools)
        self._tools = staged._tools
        self._ability_to_mcp = staged._ability_to_mcp
        logger.info(f"Tool registry loaded with {len(self)} tools", extra={"tool_count": len(self)})

    def get_tool_by_name(self, mcp_name: str) -> Tool | None:
        """Get a tool by its MCP name (e.g. "wordpress_list-content")."""
        return self._tools.get(mcp_name)

    def get_tool_by_ability(self, ability_name: str) -> Tool | None:
        """Get a tool by its original ability name (e.g. "wordforge/list-content")."""
        mcp_name = self._ability_to_mcp.get(ability_name)
        return self._tools.get(mcp_name) if mcp_name else None

    def list_tools(self, category: str | None = None, mcp_type: str | None = None) -> list[Tool]:
        """
        List tools in load order with optional filtering.

        Args:
            category: Filter by exact category slug
            mcp_type: Filter by MCP type ("tool", "prompt", "resource")
        """
        tools = list(self._tools.values())

        if category:
            tools = [t for t in tools if t.category == category]

        if mcp_type:
            tools = [t for t in tools if t.mcp_type == mcp_type]

        return tools

    def clear(self) -> None:
        """Remove all tools."""
        self._tools.clear()
        self._ability_to_mcp.clear()

    def __len__(self) -> int:
        """Return number of registered tools."""
        return len(self._tools)

    def __contains__(self, mcp_name: str) -> bool:
        """Check if a tool with the given MCP name is registered."""
        return mcp_name in self._tools
