"""
wordforge_bridge - Ability-to-Tool Protocol Adapter

Exposes the abilities a WordPress site publishes through its Abilities REST
API as tools an agent runtime can list and call.

Example:
    >>> from wordforge_bridge import DiscoveryClient, load_tools
    >>>
    >>> async with DiscoveryClient(
    ...     "https://example.com/wp-json/wp-abilities/v1",
    ...     username="admin",
    ...     app_password="xxxx xxxx xxxx xxxx",
    ... ) as client:
    ...     tools = await load_tools(client, exclude_categories=["woocommerce"])
    ...     pages = await tools[0].execute({"post_type": "page"})

Architecture:
    - Core: descriptor models, schema conversion, filtering, tool loading
    - Integrations: Abilities REST client (discovery + execution)
    - Catalog: in-process ability registry with an httpx transport
    - CLI: wordforge-bridge tools | categories | run | serve
"""

__version__ = "0.1.0"

from wordforge_bridge.core.tools import Tool, ToolRegistry, ToolRouter, load_tools
from wordforge_bridge.exceptions import (
    AbilityExecutionError,
    ArgumentValidationError,
    BridgeError,
    DiscoveryError,
    ExecutionTransportError,
)
from wordforge_bridge.integrations.abilities import DiscoveryClient

__all__ = [
    "AbilityExecutionError",
    "ArgumentValidationError",
    "BridgeError",
    "DiscoveryClient",
    "DiscoveryError",
    "ExecutionTransportError",
    "Tool",
    "ToolRegistry",
    "ToolRouter",
    "__version__",
    "load_tools",
]
