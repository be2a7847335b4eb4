"""
wordforge_bridge.catalog.demo - A small content site held in memory

Registers content, prompt and (behind the "woocommerce" feature) product
abilities over a ContentStore. Used by `wordforge-bridge --demo` and by the
end-to-end tests.
"""

from itertools import count
from typing import Any

from wordforge_bridge.core.tools.base import AbilityCategory, McpType

from .base import (
    AbilityCatalog,
    AbilityDefinition,
    AbilityFailure,
    AbilityModule,
    FeatureContext,
    PermissionPredicate,
    actor_has_capability,
)

POST_STATUSES = ["publish", "draft", "pending", "private", "trash"]

CATEGORIES = [
    AbilityCategory(
        slug="wordforge-content", label="Content", description="Posts, pages and custom post types."
    ),
    AbilityCategory(
        slug="wordforge-prompts", label="Prompts", description="Prompt templates for content work."
    ),
    AbilityCategory(slug="wordforge-woocommerce", label="WooCommerce", description="Store products."),
]


class ContentStore:
    """Posts and products keyed by id."""

    def __init__(self) -> None:
        self._ids = count(1)
        self.posts: dict[int, dict[str, Any]] = {}
        self.products: dict[int, dict[str, Any]] = {}

    def add_post(
        self, title: str, *, content: str = "", status: str = "draft", post_type: str = "post"
    ) -> dict[str, Any]:
        post_id = next(self._ids)
        post = {
            "id": post_id,
            "title": title,
            "slug": title.lower().replace(" ", "-"),
            "status": status,
            "type": post_type,
            "content": content,
        }
        self.posts[post_id] = post
        return post

    def add_product(self, name: str, *, price: str = "0", stock_status: str = "instock") -> dict[str, Any]:
        product_id = next(self._ids)
        product = {"id": product_id, "name": name, "price": price, "stock_status": stock_status}
        self.products[product_id] = product
        return product

    def get_post(self, post_id: int) -> dict[str, Any]:
        post = self.posts.get(post_id)
        if post is None:
            raise AbilityFailure(f"Content {post_id} not found", code="not_found")
        return post


def _paginated(items: list[dict[str, Any]], page: int, per_page: int) -> dict[str, Any]:
    start = (page - 1) * per_page
    return {
        "items": items[start : start + per_page],
        "total": len(items),
        "total_pages": max(-(-len(items) // per_page), 1),
        "page": page,
        "per_page": per_page,
    }


def content_module(store: ContentStore) -> AbilityModule:
    def list_content(args: dict[str, Any]) -> dict[str, Any]:
        post_type = args.get("post_type", "post")
        status = args.get("status", "any")
        search = (args.get("search") or "").lower()
        items = [
            p
            for p in store.posts.values()
            if p["type"] == post_type
            and (status == "any" or p["status"] == status)
            and (not search or search in p["title"].lower() or search in p["content"].lower())
        ]
        return _paginated(items, args.get("page", 1), args.get("per_page", 20))

    def get_content(args: dict[str, Any]) -> dict[str, Any]:
        return store.get_post(args["id"])

    def create_content(args: dict[str, Any]) -> dict[str, Any]:
        post = store.add_post(
            args["title"],
            content=args.get("content", ""),
            status=args.get("status", "draft"),
            post_type=args.get("post_type", "post"),
        )
        return {"success": True, "data": post, "message": f"Created {post['type']} {post['id']}"}

    def update_content(args: dict[str, Any]) -> dict[str, Any]:
        post = store.get_post(args["id"])
        post.update({k: args[k] for k in ("title", "content", "status") if k in args})
        return post

    def delete_content(args: dict[str, Any]) -> dict[str, Any]:
        post = store.get_post(args["id"])
        if args.get("force"):
            del store.posts[post["id"]]
            return {"id": post["id"], "deleted": True}
        post["status"] = "trash"
        return {"id": post["id"], "deleted": False, "status": "trash"}

    id_schema = {"type": "integer", "description": "Content ID.", "minimum": 1}

    return AbilityModule(
        {
            "wordforge/list-content": lambda: AbilityDefinition(
                label="List Content",
                description="List posts, pages or custom post types with filtering and pagination.",
                category="wordforge-content",
                readonly=True,
                input_schema={
                    "type": "object",
                    "properties": {
                        "post_type": {"type": "string", "default": "post"},
                        "status": {"type": "string", "enum": [*POST_STATUSES, "any"], "default": "any"},
                        "per_page": {"type": "integer", "minimum": 1, "maximum": 100, "default": 20},
                        "page": {"type": "integer", "minimum": 1, "default": 1},
                        "search": {"type": "string", "minLength": 1, "maxLength": 200},
                    },
                },
                handler=list_content,
            ),
            "wordforge/get-content": lambda: AbilityDefinition(
                label="Get Content",
                description="Get one content item by ID.",
                category="wordforge-content",
                readonly=True,
                input_schema={"type": "object", "properties": {"id": id_schema}, "required": ["id"]},
                handler=get_content,
            ),
            "wordforge/create-content": lambda: AbilityDefinition(
                label="Create Content",
                description="Create a post, page or custom post type item.",
                category="wordforge-content",
                input_schema={
                    "type": "object",
                    "properties": {
                        "title": {"type": "string", "minLength": 1},
                        "content": {"type": "string"},
                        "status": {"type": "string", "enum": POST_STATUSES, "default": "draft"},
                        "post_type": {"type": "string", "default": "post"},
                    },
                    "required": ["title"],
                },
                handler=create_content,
            ),
            "wordforge/update-content": lambda: AbilityDefinition(
                label="Update Content",
                description="Update the title, content or status of a content item.",
                category="wordforge-content",
                idempotent=True,
                input_schema={
                    "type": "object",
                    "properties": {
                        "id": id_schema,
                        "title": {"type": "string"},
                        "content": {"type": "string"},
                        "status": {"type": "string", "enum": POST_STATUSES},
                    },
                    "required": ["id"],
                },
                handler=update_content,
            ),
            "wordforge/delete-content": lambda: AbilityDefinition(
                label="Delete Content",
                description="Move a content item to the trash, or delete it permanently with force.",
                category="wordforge-content",
                capability="delete_posts",
                destructive=True,
                idempotent=True,
                input_schema={
                    "type": "object",
                    "properties": {"id": id_schema, "force": {"type": "boolean", "default": False}},
                    "required": ["id"],
                },
                handler=delete_content,
            ),
        }
    )


def prompt_module() -> AbilityModule:
    def generate_content(args: dict[str, Any]) -> dict[str, Any]:
        lines = [
            f"Write a {args.get('content_type', 'blog_post').replace('_', ' ')} about: {args['topic']}",
            "",
            "Requirements:",
            f"- Tone: {args.get('tone', 'professional')}",
        ]
        if args.get("keywords"):
            lines.append(f"- Naturally incorporate these keywords: {', '.join(args['keywords'])}")
        return {"messages": [{"role": "user", "content": {"type": "text", "text": "\n".join(lines)}}]}

    return AbilityModule(
        {
            "wordforge/generate-content": lambda: AbilityDefinition(
                label="Generate Content",
                description="Generate a blog post, page or article from a topic, keywords and tone.",
                category="wordforge-prompts",
                mcp_type=McpType.PROMPT.value,
                input_schema={
                    "type": "object",
                    "properties": {
                        "topic": {"type": "string", "description": "The main topic or title for the content."},
                        "content_type": {
                            "type": "string",
                            "enum": ["blog_post", "page", "product_description", "landing_page"],
                            "default": "blog_post",
                        },
                        "keywords": {"type": "array", "items": {"type": "string"}},
                        "tone": {
                            "type": "string",
                            "enum": ["professional", "casual", "friendly", "authoritative", "playful"],
                            "default": "professional",
                        },
                    },
                    "required": ["topic"],
                },
                handler=generate_content,
            ),
        }
    )


def woocommerce_module(store: ContentStore) -> AbilityModule:
    def list_products(args: dict[str, Any]) -> dict[str, Any]:
        items = [
            p
            for p in store.products.values()
            if "stock_status" not in args or p["stock_status"] == args["stock_status"]
        ]
        return _paginated(items, args.get("page", 1), args.get("per_page", 20))

    def get_product(args: dict[str, Any]) -> dict[str, Any]:
        product = store.products.get(args["id"])
        if product is None:
            raise AbilityFailure(f"Product {args['id']} not found", code="not_found")
        return product

    return AbilityModule(
        {
            "wordforge/list-products": lambda: AbilityDefinition(
                label="List Products",
                description="List WooCommerce products.",
                category="wordforge-woocommerce",
                capability="edit_products",
                readonly=True,
                input_schema={
                    "type": "object",
                    "properties": {
                        "stock_status": {"type": "string", "enum": ["instock", "outofstock", "onbackorder"]},
                        "per_page": {"type": "integer", "minimum": 1, "maximum": 100, "default": 20},
                        "page": {"type": "integer", "minimum": 1, "default": 1},
                    },
                },
                handler=list_products,
            ),
            "wordforge/get-product": lambda: AbilityDefinition(
                label="Get Product",
                description="Get one WooCommerce product by ID.",
                category="wordforge-woocommerce",
                capability="edit_products",
                readonly=True,
                input_schema={
                    "type": "object",
                    "properties": {"id": {"type": "integer", "minimum": 1}},
                    "required": ["id"],
                },
                handler=get_product,
            ),
        },
        feature="woocommerce",
    )


def build_demo_catalog(
    store: ContentStore | None = None,
    *,
    features: FeatureContext | None = None,
    permission: PermissionPredicate = actor_has_capability,
) -> AbilityCatalog:
    """Catalog over `store` (a fresh, seeded one when omitted)."""
    if store is None:
        store = ContentStore()
        store.add_post("Hello World", content="Welcome to the site.", status="publish")
        store.add_post("About", content="About this site.", status="publish", post_type="page")
        store.add_product("Mug", price="12.00")

    return AbilityCatalog(
        [content_module(store), prompt_module(), woocommerce_module(store)],
        features=features,
        permission=permission,
        categories=CATEGORIES,
    )
