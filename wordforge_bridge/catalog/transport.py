"""
wordforge_bridge.catalog.transport - Serve an AbilityCatalog over httpx

CatalogTransport answers the Abilities REST routes in-process, so a
DiscoveryClient can talk to a local catalog exactly as it talks to a site:

    >>> transport = CatalogTransport(catalog, actor=Actor(capabilities={"edit_posts"}))
    >>> client = DiscoveryClient("http://catalog.local/wp-json/wp-abilities/v1", transport=transport)
    >>> tools = await load_tools(client)

Routes (relative to `base_path`):
- GET               /abilities              paginated descriptors
- GET               /abilities/{name}       one descriptor
- GET               /categories             paginated categories
- GET|POST|DELETE   /abilities/{name}/run   execute; GET/DELETE read input[...] from the query
"""

import json
import logging
import math
import re
from typing import Any

import httpx

from .base import (
    AbilityCatalog,
    AbilityNotFoundError,
    Actor,
    InvalidInputError,
    PermissionDeniedError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_PATH = "/wp-json/wp-abilities/v1"
INPUT_PARAM = "input"

_ABILITY_ROUTE = re.compile(r"^/abilities/(?P<name>[^/]+/[^/]+?)(?P<run>/run)?/?$")
_INTEGER = re.compile(r"^-?\d+$")
_BRACKET_KEY = re.compile(r"\[([^\]]*)\]")


def parse_bracket_query(items: list[tuple[str, str]], prefix: str = INPUT_PARAM) -> Any:
    """
    Rebuild a nested value from PHP-style bracket parameters.

    input[a][b]=1&input[tags][0]=x  ->  {"a": {"b": "1"}, "tags": ["x"]}

    Mappings whose keys are all integers become lists. Returns None when no
    parameter carries the prefix. Leaf values stay strings.
    """
    root: dict[str, Any] = {}
    found = False
    for key, value in items:
        if key == prefix:
            return value
        if not key.startswith(prefix + "["):
            continue
        found = True
        path = _BRACKET_KEY.findall(key[len(prefix) :])
        node = root
        for part in path[:-1]:
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                break
        else:
            node[path[-1]] = value
    return _listify(root) if found else None


def _listify(value: Any) -> Any:
    if not isinstance(value, dict):
        return value
    converted = {k: _listify(v) for k, v in value.items()}
    if converted and all(_INTEGER.match(k) for k in converted):
        return [converted[k] for k in sorted(converted, key=int)]
    return converted


def coerce_to_schema(value: Any, schema: Any) -> Any:
    """
    Convert query-string leaves to the types `schema` declares.

    Only unambiguous conversions are applied ("12" for an integer, "true" for
    a boolean); anything else is returned unchanged for validation to reject.
    """
    if not isinstance(schema, dict):
        return value

    declared = schema.get("type")
    types = declared if isinstance(declared, list) else [declared]

    if isinstance(value, dict) and "object" in types:
        properties = schema.get("properties") or {}
        return {k: coerce_to_schema(v, properties.get(k)) for k, v in value.items()}
    if isinstance(value, list) and "array" in types:
        return [coerce_to_schema(item, schema.get("items")) for item in value]
    if not isinstance(value, str):
        return value

    for type_name in types:
        if type_name == "integer" and _INTEGER.match(value):
            return int(value)
        if type_name == "number":
            try:
                number = float(value)
            except ValueError:
                continue
            if math.isfinite(number):
                return int(value) if _INTEGER.match(value) else number
        if type_name == "boolean" and value in ("true", "false", "1", "0"):
            return value in ("true", "1")
        if type_name == "string":
            return value
    return value


def _error(status_code: int, code: str, message: str) -> httpx.Response:
    return httpx.Response(
        status_code, json={"code": code, "message": message, "data": {"status": status_code}}
    )


class CatalogTransport(httpx.AsyncBaseTransport):
    """httpx transport backed by an AbilityCatalog; every request runs as `actor`."""

    def __init__(
        self,
        catalog: AbilityCatalog,
        actor: Actor | None = None,
        *,
        base_path: str = DEFAULT_BASE_PATH,
        max_per_page: int = 100,
    ) -> None:
        self.catalog = catalog
        self.actor = actor or Actor()
        self.base_path = base_path.rstrip("/")
        self.max_per_page = max_per_page

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        method = request.method.upper()
        logger.debug(f"Catalog request: {method} {path}", extra={"http_method": method, "path": path})

        if not path.startswith(self.base_path):
            return _error(404, "rest_no_route", "No route was found matching the URL and request method.")
        route = path[len(self.base_path) :] or "/"

        if route.rstrip("/") == "/abilities":
            if method != "GET":
                return _error(405, "rest_no_route", f"{method} is not allowed on {route}")
            return self._paginate(request, self.catalog.describe_all())

        if route.rstrip("/") == "/categories":
            if method != "GET":
                return _error(405, "rest_no_route", f"{method} is not allowed on {route}")
            return self._paginate(request, self.catalog.list_categories())

        match = _ABILITY_ROUTE.match(route)
        if match is None:
            return _error(404, "rest_no_route", "No route was found matching the URL and request method.")

        name = match.group("name")
        if match.group("run"):
            return await self._run(request, name, method)

        if method != "GET":
            return _error(405, "rest_no_route", f"{method} is not allowed on {route}")
        try:
            return httpx.Response(200, json=self.catalog.describe(name))
        except AbilityNotFoundError as e:
            return _error(404, "ability_not_found", str(e))

    async def _run(self, request: httpx.Request, name: str, method: str) -> httpx.Response:
        if method not in ("GET", "POST", "DELETE"):
            return _error(405, "rest_no_route", f"{method} is not allowed for ability execution")

        try:
            args = await self._read_input(request, name, method)
        except ValueError as e:
            return _error(400, "rest_invalid_json", str(e))
        except AbilityNotFoundError as e:
            return _error(404, "ability_not_found", str(e))

        if args is not None and not isinstance(args, dict):
            return _error(400, "ability_invalid_input", f"Input for {name} must be an object")

        try:
            envelope = await self.catalog.execute(name, args, self.actor)
        except AbilityNotFoundError as e:
            return _error(404, "ability_not_found", str(e))
        except PermissionDeniedError as e:
            return _error(403, "ability_invalid_permissions", str(e))
        except InvalidInputError as e:
            return _error(400, "ability_invalid_input", str(e))

        return httpx.Response(200, json=envelope)

    async def _read_input(self, request: httpx.Request, name: str, method: str) -> Any:
        if method == "POST":
            body = await request.aread()
            if not body:
                return None
            payload = json.loads(body)
            return payload.get(INPUT_PARAM) if isinstance(payload, dict) else None

        raw = parse_bracket_query(list(request.url.params.multi_items()))
        if raw is None:
            return None
        return coerce_to_schema(raw, self.catalog.get(name).input_schema)

    def _paginate(self, request: httpx.Request, items: list[Any]) -> httpx.Response:
        params = request.url.params
        try:
            per_page = min(max(int(params.get("per_page", 10)), 1), self.max_per_page)
            page = max(int(params.get("page", 1)), 1)
        except ValueError:
            return _error(400, "rest_invalid_param", "Invalid parameter(s): per_page, page")

        total_pages = max(math.ceil(len(items) / per_page), 1)
        start = (page - 1) * per_page
        return httpx.Response(
            200,
            json=items[start : start + per_page],
            headers={"X-WP-Total": str(len(items)), "X-WP-TotalPages": str(total_pages)},
        )
