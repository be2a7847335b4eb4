"""
wordforge_bridge.core.tools.loader - Ability to Tool translation

Discovers the remote ability catalog and turns each descriptor into a Tool.
Loading is a pure function of the discovered catalog and the exclusion list:
nothing is cached between calls.

Example:
    >>> async with DiscoveryClient(url, username=user, app_password=pw) as client:
    ...     tools = await load_tools(client, ["woocommerce", "prompts"])
    ...     for tool in tools:
    ...         print(tool.mcp_name, tool.http_method.value)
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Any, Protocol

from wordforge_bridge.exceptions import DiscoveryError

from .base import AbilityDescriptor, HttpMethod, McpType, Tool, ToolAnnotations
from .executor import AbilityExecutor, AbilityRunner
from .filters import DEFAULT_NAMESPACE, CategoryFilter, NamespaceMapping
from .schema import SchemaConverter

logger = logging.getLogger(__name__)


class AbilitySource(AbilityRunner, Protocol):
    """What load_tools needs from a client: discovery plus execution."""

    async def list_abilities(self) -> list[AbilityDescriptor]: ...


def infer_http_method(descriptor: AbilityDescriptor) -> HttpMethod:
    """
    Pick the transport method for an ability.

    Precedence: destructive -> DELETE, readonly -> GET, declared input
    schema -> POST, otherwise GET. Destructive wins even when readonly is set.
    """
    annotations = descriptor.annotations
    if annotations.destructive:
        return HttpMethod.DELETE
    if annotations.readonly:
        return HttpMethod.GET
    if descriptor.input_schema is not None:
        return HttpMethod.POST
    return HttpMethod.GET


def build_tool(
    descriptor: AbilityDescriptor,
    *,
    executor: Any = None,
    namespace: NamespaceMapping = DEFAULT_NAMESPACE,
    converter: SchemaConverter | None = None,
) -> Tool:
    """Translate one (already filtered) descriptor into a Tool."""
    converter = converter or SchemaConverter()
    mcp_name = namespace.to_mcp_name(descriptor.name)
    annotations = descriptor.annotations

    return Tool(
        mcp_name=mcp_name,
        name=descriptor.name,
        description=descriptor.description,
        category=descriptor.category,
        mcp_type=descriptor.mcp_type or McpType.TOOL.value,
        http_method=infer_http_method(descriptor),
        annotations=ToolAnnotations(
            title=descriptor.label,
            read_only_hint=bool(annotations.readonly),
            destructive_hint=bool(annotations.destructive),
            idempotent_hint=bool(annotations.idempotent),
        ),
        input_schema=converter.convert(descriptor.input_schema, name=mcp_name),
        executor=executor,
    )


def tools_from_descriptors(
    descriptors: Iterable[AbilityDescriptor],
    exclude_categories: Sequence[str] = (),
    *,
    executor: Any = None,
    namespace: NamespaceMapping = DEFAULT_NAMESPACE,
) -> list[Tool]:
    """
    Filter and translate descriptors, preserving their order.

    Descriptors outside the source namespace are dropped first, then those in
    an excluded category. Neither is an error. A descriptor repeated verbatim
    is kept once.

    Raises:
        DiscoveryError: If two different abilities map to the same MCP name
    """
    descriptors = list(descriptors)
    in_namespace = [d for d in descriptors if namespace.accepts(d.name)]
    category_filter = CategoryFilter(exclude_categories)
    kept = category_filter.apply(in_namespace)

    converter = SchemaConverter()
    tools: list[Tool] = []
    by_name: dict[str, Tool] = {}
    for descriptor in kept:
        tool = build_tool(descriptor, executor=executor, namespace=namespace, converter=converter)
        existing = by_name.get(tool.mcp_name)
        if existing is None:
            by_name[tool.mcp_name] = tool
            tools.append(tool)
        elif existing != tool:
            raise DiscoveryError(
                f"Catalog declares conflicting abilities for tool {tool.mcp_name}: "
                f"{existing.name} and {descriptor.name}"
            )

    logger.info(
        f"Loaded {len(tools)} tools from {len(descriptors)} abilities "
        f"(excluded: {', '.join(exclude_categories) or 'none'})",
        extra={
            "discovered": len(descriptors),
            "outside_namespace": len(descriptors) - len(in_namespace),
            "excluded_by_category": len(in_namespace) - len(kept),
            "tool_count": len(tools),
        },
    )
    return tools


async def load_tools(
    client: AbilitySource,
    exclude_categories: Sequence[str] = (),
    *,
    namespace: NamespaceMapping = DEFAULT_NAMESPACE,
    validate_arguments: bool = True,
) -> list[Tool]:
    """
    Discover abilities and build the agent-facing tool list.

    Args:
        client: Discovery client (list_abilities + execute_ability)
        exclude_categories: Category slugs ("wordforge-content") or suffixes ("content")
        namespace: Naming pair; defaults to "wordforge/" -> "wordpress_"
        validate_arguments: Validate arguments before each Tool.execute()

    Returns:
        Tools in discovery order, each bound to an executor over `client`

    Raises:
        DiscoveryError: If the catalog cannot be fetched (no partial catalog)
    """
    descriptors = await client.list_abilities()
    executor = AbilityExecutor(client, validate_arguments=validate_arguments)
    return tools_from_descriptors(
        descriptors, exclude_categories, executor=executor, namespace=namespace
    )
