"""
End-to-end tests: DiscoveryClient -> CatalogTransport -> demo AbilityCatalog.

Everything runs in-process; requests go through httpx exactly as they would
against a WordPress site.
"""

import pytest

from wordforge_bridge.catalog import (
    Actor,
    CatalogTransport,
    ContentStore,
    FeatureContext,
    build_demo_catalog,
)
from wordforge_bridge.core.tools import load_tools
from wordforge_bridge.core.tools.base import HttpMethod
from wordforge_bridge.exceptions import (
    AbilityExecutionError,
    ArgumentValidationError,
    DiscoveryError,
    ExecutionTransportError,
)
from wordforge_bridge.integrations.abilities import DiscoveryClient

BASE_URL = "http://catalog.test/wp-json/wp-abilities/v1"

EVERYTHING = {"read", "edit_posts", "delete_posts", "edit_products"}


def make_client(catalog, capabilities=EVERYTHING, **kwargs) -> DiscoveryClient:
    transport = CatalogTransport(
        catalog,
        actor=Actor(user_id=1, capabilities=capabilities),
        max_per_page=kwargs.pop("max_per_page", 100),
    )
    return DiscoveryClient(BASE_URL, transport=transport, max_retries=0, **kwargs)


@pytest.fixture
def store():
    store = ContentStore()
    store.add_post("Hello World", content="Welcome to the site.", status="publish")
    store.add_post("Draft Ideas", content="Half-finished thoughts.", status="draft")
    store.add_post("About", content="About this site.", status="publish", post_type="page")
    store.add_product("Mug", price="12.00")
    store.add_product("Poster", price="20.00", stock_status="outofstock")
    return store


@pytest.fixture
async def client(store):
    async with make_client(build_demo_catalog(store)) as client:
        yield client


@pytest.fixture
async def tools(client):
    tools = await load_tools(client)
    return {t.mcp_name: t for t in tools}


# ============================================================================
# Discovery
# ============================================================================


class TestDiscovery:
    async def test_tools_loaded_with_methods(self, tools):
        assert list(tools) == [
            "wordpress_list-content",
            "wordpress_get-content",
            "wordpress_create-content",
            "wordpress_update-content",
            "wordpress_delete-content",
            "wordpress_generate-content",
        ]
        assert tools["wordpress_list-content"].http_method is HttpMethod.GET
        assert tools["wordpress_create-content"].http_method is HttpMethod.POST
        assert tools["wordpress_update-content"].http_method is HttpMethod.POST
        assert tools["wordpress_delete-content"].http_method is HttpMethod.DELETE
        assert tools["wordpress_generate-content"].mcp_type == "prompt"

    async def test_annotations_surface_as_hints(self, tools):
        annotations = tools["wordpress_delete-content"].annotations
        assert annotations.title == "Delete Content"
        assert annotations.destructive_hint is True
        assert annotations.idempotent_hint is True
        assert annotations.read_only_hint is False

    async def test_pagination_across_pages(self, store):
        async with make_client(build_demo_catalog(store), max_per_page=2) as client:
            abilities = await client.list_abilities()
        assert len(abilities) == 6
        assert abilities[0].name == "wordforge/list-content"

    async def test_two_loads_are_equal(self, client):
        first = await load_tools(client)
        second = await load_tools(client)
        assert first == second

    async def test_categories(self, client):
        categories = await client.list_categories()
        assert [c.slug for c in categories] == [
            "wordforge-content",
            "wordforge-prompts",
            "wordforge-woocommerce",
        ]

    async def test_get_ability(self, client):
        descriptor = await client.get_ability("wordforge/get-content")
        assert descriptor.input_schema["required"] == ["id"]

    async def test_get_unknown_ability(self, client):
        with pytest.raises(DiscoveryError) as exc_info:
            await client.get_ability("wordforge/missing")
        assert exc_info.value.status_code == 404

    async def test_feature_gated_products(self, store):
        catalog = build_demo_catalog(store, features=FeatureContext(features={"woocommerce"}))
        async with make_client(catalog) as client:
            names = [t.mcp_name for t in await load_tools(client)]
            excluded = [t.mcp_name for t in await load_tools(client, ["woocommerce"])]

        assert "wordpress_list-products" in names
        assert "wordpress_list-products" not in excluded
        assert len(excluded) == 6


# ============================================================================
# Execution
# ============================================================================


class TestExecution:
    async def test_get_query_round_trip(self, tools):
        result = await tools["wordpress_list-content"].execute(
            {"status": "publish", "per_page": 5}
        )
        assert [item["title"] for item in result["items"]] == ["Hello World"]
        assert result["per_page"] == 5

    async def test_get_with_pages(self, tools):
        result = await tools["wordpress_list-content"].execute({"per_page": 1, "page": 2})
        assert result["total"] == 2
        assert result["total_pages"] == 2
        assert [item["title"] for item in result["items"]] == ["Draft Ideas"]

    async def test_get_single(self, tools):
        post = await tools["wordpress_get-content"].execute({"id": 3})
        assert post["type"] == "page"

    async def test_post_create(self, tools, store):
        post = await tools["wordpress_create-content"].execute(
            {"title": "New Post", "status": "publish"}
        )
        assert post["title"] == "New Post"
        assert store.posts[post["id"]]["status"] == "publish"

    async def test_post_update(self, tools, store):
        await tools["wordpress_update-content"].execute({"id": 2, "status": "publish"})
        assert store.posts[2]["status"] == "publish"

    async def test_delete_trashes(self, tools, store):
        result = await tools["wordpress_delete-content"].execute({"id": 1})
        assert result == {"id": 1, "deleted": False, "status": "trash"}
        assert store.posts[1]["status"] == "trash"

    async def test_delete_with_force(self, tools, store):
        result = await tools["wordpress_delete-content"].execute({"id": 1, "force": True})
        assert result["deleted"] is True
        assert 1 not in store.posts

    async def test_prompt_returns_messages(self, tools):
        result = await tools["wordpress_generate-content"].execute(
            {"topic": "Composting", "keywords": ["soil", "worms"]}
        )
        text = result["messages"][0]["content"]["text"]
        assert "Composting" in text
        assert "soil, worms" in text

    async def test_handler_failure(self, tools):
        with pytest.raises(AbilityExecutionError, match="not found") as exc_info:
            await tools["wordpress_get-content"].execute({"id": 99})
        assert exc_info.value.code == "not_found"

    async def test_invalid_arguments_rejected_locally(self, tools, store):
        with pytest.raises(ArgumentValidationError):
            await tools["wordpress_list-content"].execute({"per_page": 0})

    async def test_server_rejects_invalid_input(self, client):
        tools = {t.mcp_name: t for t in await load_tools(client, validate_arguments=False)}

        with pytest.raises(ExecutionTransportError) as exc_info:
            await tools["wordpress_get-content"].execute({})

        assert exc_info.value.status_code == 400
        assert "ability_invalid_input" in str(exc_info.value)

    async def test_permission_denied(self, store):
        async with make_client(build_demo_catalog(store), capabilities={"edit_posts"}) as client:
            tools = {t.mcp_name: t for t in await load_tools(client)}

            with pytest.raises(ExecutionTransportError) as exc_info:
                await tools["wordpress_delete-content"].execute({"id": 1})

        assert exc_info.value.status_code == 403
        assert 1 in store.posts
        assert store.posts[1]["status"] == "publish"

    async def test_products_when_enabled(self, store):
        catalog = build_demo_catalog(store, features=FeatureContext(features={"woocommerce"}))
        async with make_client(catalog) as client:
            tools = {t.mcp_name: t for t in await load_tools(client)}
            in_stock = await tools["wordpress_list-products"].execute({"stock_status": "instock"})
            with pytest.raises(AbilityExecutionError):
                await tools["wordpress_get-product"].execute({"id": 1})

        assert [p["name"] for p in in_stock["items"]] == ["Mug"]
