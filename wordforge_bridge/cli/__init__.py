"""
wordforge_bridge.cli - Command-Line Interface

Inspect and call the tools a site exposes, or serve them over MCP stdio.

Usage:
    wordforge-bridge tools [--exclude woocommerce prompts]
    wordforge-bridge categories
    wordforge-bridge run wordpress_list-content --args '{"post_type": "page"}'
    wordforge-bridge serve

    # Against the in-memory demo site instead of WORDPRESS_ABILITIES_URL
    wordforge-bridge --demo --feature woocommerce tools

Output is JSON on stdout; logs go to stderr so `serve` keeps stdout for the
MCP channel.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from wordforge_bridge.core.tools import ToolRegistry, ToolRouter, load_tools
from wordforge_bridge.exceptions import BridgeError
from wordforge_bridge.integrations.abilities import DiscoveryClient
from wordforge_bridge.settings import BridgeSettings, get_settings

logger = logging.getLogger(__name__)

DEMO_BASE_URL = "http://demo.wordforge.local/wp-json/wp-abilities/v1"
DEMO_CAPABILITIES = frozenset({"read", "edit_posts", "delete_posts", "edit_products"})


def _build_client(args: argparse.Namespace, settings: BridgeSettings) -> DiscoveryClient:
    """Client for the configured site, or for the demo catalog with --demo."""
    if not args.demo:
        return settings.build_client()

    from wordforge_bridge.catalog import Actor, CatalogTransport, FeatureContext, build_demo_catalog

    catalog = build_demo_catalog(features=FeatureContext(features=args.features))
    transport = CatalogTransport(catalog, actor=Actor(user_id=1, capabilities=DEMO_CAPABILITIES))
    return DiscoveryClient(DEMO_BASE_URL, transport=transport, max_retries=0)


def _exclusions(args: argparse.Namespace, settings: BridgeSettings) -> list[str]:
    exclude = getattr(args, "exclude", None)
    return list(exclude) if exclude is not None else list(settings.exclude_categories)


async def _list_tools(
    args: argparse.Namespace, client: DiscoveryClient, settings: BridgeSettings
) -> Any:
    """Tools after namespace and category filtering."""
    tools = await load_tools(
        client, _exclusions(args, settings), validate_arguments=settings.validate_arguments
    )
    return [
        {
            "mcp_name": tool.mcp_name,
            "ability": tool.name,
            "category": tool.category,
            "type": tool.mcp_type,
            "http_method": tool.http_method.value,
            "annotations": tool.annotations.model_dump(by_alias=True, exclude_none=True),
            **({"description": tool.description} if args.verbose else {}),
            **({"input_schema": tool.input_schema.json_schema} if args.verbose else {}),
        }
        for tool in tools
    ]


async def _list_categories(
    _args: argparse.Namespace, client: DiscoveryClient, _settings: BridgeSettings
) -> Any:
    categories = await client.list_categories()
    return [category.model_dump() for category in categories]


async def _run_tool(
    args: argparse.Namespace, client: DiscoveryClient, settings: BridgeSettings
) -> Any:
    """Execute one tool by MCP name or ability name."""
    try:
        tool_args = json.loads(args.args)
    except ValueError as e:
        raise BridgeError(f"--args is not valid JSON: {e}") from e
    if not isinstance(tool_args, dict):
        raise BridgeError("--args must be a JSON object")

    registry = ToolRegistry(
        await load_tools(
            client, _exclusions(args, settings), validate_arguments=settings.validate_arguments
        )
    )
    tool = registry.get_tool_by_name(args.name) or registry.get_tool_by_ability(args.name)
    if tool is None:
        raise BridgeError(f"Unknown tool: {args.name}")

    return await tool.execute(tool_args)


async def _serve(args: argparse.Namespace, client: DiscoveryClient, settings: BridgeSettings) -> Any:
    """Serve loaded tools over MCP stdio until the client disconnects."""
    from wordforge_bridge.core.tools.mcp_server import serve_stdio

    router = ToolRouter(
        client,
        _exclusions(args, settings),
        validate_arguments=settings.validate_arguments,
    )
    await router.refresh()
    await serve_stdio(router)
    return None


async def _dispatch(args: argparse.Namespace, settings: BridgeSettings) -> Any:
    async with _build_client(args, settings) as client:
        return await args.func(args, client, settings)


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="wordforge-bridge",
        description="wordforge-bridge - expose WordPress abilities as agent tools",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WORDFORGE_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Use the in-memory demo site instead of WORDPRESS_ABILITIES_URL",
    )
    parser.add_argument(
        "--feature",
        dest="features",
        action="append",
        default=[],
        help="Feature active on the demo site (repeatable, e.g. woocommerce)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # tools
    tools_p = subparsers.add_parser("tools", help="List loaded tools")
    tools_p.add_argument("--exclude", nargs="*", help="Category slugs or suffixes to exclude")
    tools_p.add_argument("-v", "--verbose", action="store_true", help="Include descriptions and schemas")
    tools_p.set_defaults(func=_list_tools)

    # categories
    categories_p = subparsers.add_parser("categories", help="List ability categories")
    categories_p.set_defaults(func=_list_categories)

    # run
    run_p = subparsers.add_parser("run", help="Execute a tool")
    run_p.add_argument("name", help="MCP name (wordpress_list-content) or ability name")
    run_p.add_argument("--args", default="{}", help="Tool arguments as a JSON object")
    run_p.add_argument("--exclude", nargs="*", help="Category slugs or suffixes to exclude")
    run_p.set_defaults(func=_run_tool)

    # serve
    serve_p = subparsers.add_parser("serve", help="Serve tools over MCP stdio")
    serve_p.add_argument("--exclude", nargs="*", help="Category slugs or suffixes to exclude")
    serve_p.set_defaults(func=_serve)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, args.log_level or settings.effective_log_level),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        result = asyncio.run(_dispatch(args, settings))
    except BridgeError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(0)

    if result is not None:
        print(json.dumps(result, indent=2, default=str))


if __name__ == "__main__":
    main()
