"""
wordforge_bridge.core.tools - Ability to Tool Adapter

Turns the abilities a remote registry advertises into callable tools for an
agent runtime.

Architecture:
- base.py: AbilityDescriptor (wire model), Tool, ToolAnnotations, HttpMethod
- schema.py: SchemaConverter, JSON Schema -> runtime ArgumentValidator
- filters.py: NamespaceMapping and CategoryFilter
- executor.py: query serialization, envelope unwrapping, AbilityExecutor
- loader.py: load_tools(), the discovery -> tool pipeline
- registry.py: ToolRegistry for loaded tools
- router.py: ToolRouter, agent-facing execution returning ToolCallResult
- mcp_server.py: stdio MCP server over a ToolRouter (optional `mcp` extra)

Example Usage:
    >>> from wordforge_bridge.core.tools import load_tools
    >>> from wordforge_bridge.integrations.abilities import DiscoveryClient
    >>>
    >>> async with DiscoveryClient(url, username=user, app_password=pw) as client:
    ...     tools = await load_tools(client, ["woocommerce"])
    ...     content = await tools[0].execute({"post_type": "page"})
"""

from .base import (
    AbilityAnnotations,
    AbilityCategory,
    AbilityDescriptor,
    ExecutionEnvelope,
    HttpMethod,
    McpType,
    Tool,
    ToolAnnotations,
)
from .executor import AbilityExecutor, build_execution_request, serialize_input, unwrap_envelope
from .filters import DEFAULT_NAMESPACE, CategoryFilter, NamespaceMapping
from .loader import infer_http_method, load_tools, tools_from_descriptors
from .registry import ToolRegistry
from .router import ToolCallResult, ToolRouter
from .schema import ArgumentValidator, SchemaConverter, ValidationIssue, ValidationResult

__all__ = [
    # Wire types
    "AbilityAnnotations",
    "AbilityCategory",
    "AbilityDescriptor",
    "ExecutionEnvelope",
    # Tool types
    "HttpMethod",
    "McpType",
    "Tool",
    "ToolAnnotations",
    # Schema
    "ArgumentValidator",
    "SchemaConverter",
    "ValidationIssue",
    "ValidationResult",
    # Naming and filtering
    "DEFAULT_NAMESPACE",
    "CategoryFilter",
    "NamespaceMapping",
    # Execution
    "AbilityExecutor",
    "build_execution_request",
    "serialize_input",
    "unwrap_envelope",
    # Loading
    "infer_http_method",
    "load_tools",
    "tools_from_descriptors",
    "ToolRegistry",
    "ToolCallResult",
    "ToolRouter",
]
