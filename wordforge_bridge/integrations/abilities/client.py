"""
Abilities REST client.

Talks to the registry's REST namespace (e.g. https://example.com/wp-json/wp-abilities/v1):

- GET  /abilities              ability catalog (paginated, X-WP-TotalPages)
- GET  /abilities/{name}       one ability descriptor
- GET  /categories             category list
- GET|POST|DELETE /abilities/{name}/run   execute an ability
"""

import asyncio
import logging
import random
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from wordforge_bridge.core.tools.base import AbilityCategory, AbilityDescriptor, HttpMethod
from wordforge_bridge.core.tools.executor import build_execution_request, unwrap_envelope
from wordforge_bridge.exceptions import DiscoveryError, ExecutionTransportError, truncate_body

if TYPE_CHECKING:
    from wordforge_bridge.settings import BridgeSettings

logger = logging.getLogger(__name__)


def _is_transient_status(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


class DiscoveryClient:
    """
    Client for ability discovery and execution.

    Discovery calls and GET executions are retried with exponential backoff on
    network errors, 429 and 5xx responses. POST and DELETE executions are sent
    exactly once: their side effects may already have been applied when a
    failure is observed.

    Example:
        >>> async with DiscoveryClient(
        ...     "https://example.com/wp-json/wp-abilities/v1",
        ...     username="admin",
        ...     app_password="xxxx xxxx xxxx xxxx",
        ... ) as client:
        ...     abilities = await client.list_abilities()
        ...     data = await client.execute_ability(
        ...         "wordforge/list-content", "GET", {"post_type": "page", "per_page": 5}
        ...     )
    """

    PER_PAGE = 100

    def __init__(
        self,
        base_url: str,
        *,
        username: str | None = None,
        app_password: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 2,
        initial_backoff_ms: int = 1000,
        max_backoff_ms: int = 10000,
        backoff_multiplier: float = 2.0,
        transport: httpx.AsyncBaseTransport | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: REST namespace root of the ability registry
            username: Basic-auth user name (optional)
            app_password: Basic-auth application password (optional)
            timeout: Per-request timeout in seconds
            max_retries: Retry attempts for idempotent requests
            initial_backoff_ms: Initial backoff delay in milliseconds
            max_backoff_ms: Maximum backoff delay in milliseconds
            backoff_multiplier: Multiplier for exponential backoff
            transport: Custom httpx transport (tests, in-process catalogs)
            http_client: Pre-configured httpx client; the caller keeps ownership
        """
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.initial_backoff_ms = initial_backoff_ms
        self.max_backoff_ms = max_backoff_ms
        self.backoff_multiplier = backoff_multiplier

        if http_client is not None:
            self._http = http_client
            self._owns_http = False
        else:
            auth = httpx.BasicAuth(username, app_password) if username and app_password else None
            self._http = httpx.AsyncClient(
                auth=auth,
                timeout=timeout,
                transport=transport,
                headers={"Accept": "application/json"},
            )
            self._owns_http = True

    @classmethod
    def from_settings(cls, settings: "BridgeSettings", **kwargs: Any) -> "DiscoveryClient":
        """Build a client from BridgeSettings; kwargs override settings."""
        options: dict[str, Any] = {
            "username": settings.username,
            "app_password": settings.app_password.get_secret_value()
            if settings.app_password
            else None,
            "timeout": settings.timeout_seconds,
            "max_retries": settings.max_retries,
            "initial_backoff_ms": settings.initial_backoff_ms,
            "max_backoff_ms": settings.max_backoff_ms,
            "backoff_multiplier": settings.backoff_multiplier,
        }
        options.update(kwargs)
        return cls(settings.abilities_url, **options)

    async def __aenter__(self) -> "DiscoveryClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    async def list_abilities(self) -> list[AbilityDescriptor]:
        """
        Fetch the full ability catalog.

        Raises:
            DiscoveryError: On transport failure, non-2xx status or malformed data
        """
        logger.debug("Fetching all abilities")
        items = await self._get_collection("/abilities")
        try:
            abilities = [AbilityDescriptor.model_validate(item) for item in items]
        except ValidationError as e:
            raise DiscoveryError(f"Malformed ability descriptor in catalog: {e}") from e

        logger.info(f"Fetched {len(abilities)} abilities", extra={"count": len(abilities)})
        return abilities

    async def list_categories(self) -> list[AbilityCategory]:
        """
        Fetch the category list.

        Raises:
            DiscoveryError: On transport failure, non-2xx status or malformed data
        """
        logger.debug("Fetching all categories")
        items = await self._get_collection("/categories")
        try:
            categories = [AbilityCategory.model_validate(item) for item in items]
        except ValidationError as e:
            raise DiscoveryError(f"Malformed category in listing: {e}") from e

        logger.info(f"Fetched {len(categories)} categories", extra={"count": len(categories)})
        return categories

    async def get_ability(self, name: str) -> AbilityDescriptor:
        """
        Fetch a single ability descriptor.

        Raises:
            DiscoveryError: On transport failure, non-2xx status or malformed data
        """
        logger.debug(f"Fetching ability: {name}")
        response = await self._discovery_get(f"/abilities/{name}")
        payload = self._decode_discovery(response)
        try:
            return AbilityDescriptor.model_validate(payload)
        except ValidationError as e:
            raise DiscoveryError(f"Malformed ability descriptor for {name}: {e}") from e

    async def _get_collection(self, path: str) -> list[Any]:
        items: list[Any] = []
        page = 1
        while True:
            response = await self._discovery_get(path, params={"per_page": self.PER_PAGE, "page": page})
            payload = self._decode_discovery(response)
            if not isinstance(payload, list):
                raise DiscoveryError(
                    f"Expected a JSON list from {path}, got {type(payload).__name__}",
                    status_code=response.status_code,
                )
            items.extend(payload)

            try:
                total_pages = int(response.headers.get("X-WP-TotalPages", "1"))
            except ValueError:
                total_pages = 1
            if page >= total_pages or not payload:
                return items
            page += 1

    async def _discovery_get(self, path: str, params: Any = None) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            response = await self._send("GET", url, params=params, retry=True)
        except httpx.RequestError as e:
            raise DiscoveryError(f"Request to {url} failed: {e!r}") from e

        if not response.is_success:
            raise DiscoveryError(
                f"HTTP {response.status_code} from GET {url}: {truncate_body(response.text)}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _decode_discovery(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise DiscoveryError(
                f"Malformed JSON from {response.request.url}: {e}",
                status_code=response.status_code,
            ) from e

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute_ability(
        self,
        name: str,
        method: HttpMethod | str,
        args: dict[str, Any] | None = None,
    ) -> Any:
        """
        Execute one ability and return the unwrapped envelope payload.

        Args:
            name: Ability name (e.g. "wordforge/list-content")
            method: GET / DELETE put args in the query string, POST in a JSON body
            args: Ability input

        Raises:
            ExecutionTransportError: Non-2xx status, network error or timeout
            AbilityExecutionError: Envelope reports success=false
        """
        request = build_execution_request(name, method, args)
        url = f"{self.base_url}{request.path}"
        logger.debug(
            f"Executing ability: {name} [{request.method.value}]",
            extra={"ability": name, "http_method": request.method.value},
        )

        try:
            response = await self._send(
                request.method.value,
                url,
                params=request.params or None,
                json=request.json,
                retry=request.method is HttpMethod.GET,
            )
        except httpx.RequestError as e:
            raise ExecutionTransportError(
                f"{request.method.value} {name} failed: {e!r}",
            ) from e

        if not response.is_success:
            raise ExecutionTransportError(
                f"HTTP {response.status_code} from {request.method.value} {name}: "
                f"{truncate_body(response.text)}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ExecutionTransportError(
                f"Malformed JSON from {request.method.value} {name}: {truncate_body(response.text)}",
                status_code=response.status_code,
                body=response.text,
            ) from e

        return unwrap_envelope(payload)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: Any = None,
        json: Any = None,
        retry: bool = False,
    ) -> httpx.Response:
        attempts = self.max_retries + 1 if retry else 1

        attempt = 0
        while True:
            is_last = attempt >= attempts - 1
            try:
                response = await self._http.request(method, url, params=params, json=json)
            except httpx.RequestError as e:
                if is_last:
                    raise
                logger.warning(
                    f"{method} {url} failed: {e!r} (attempt {attempt + 1}/{attempts})",
                    extra={"url": url, "attempt": attempt + 1},
                )
            else:
                if is_last or not _is_transient_status(response.status_code):
                    return response
                logger.warning(
                    f"{method} {url} returned HTTP {response.status_code} "
                    f"(attempt {attempt + 1}/{attempts})",
                    extra={"url": url, "attempt": attempt + 1, "status_code": response.status_code},
                )

            await asyncio.sleep(self._backoff_ms(attempt) / 1000)
            attempt += 1

    def _backoff_ms(self, attempt: int) -> float:
        backoff_ms = min(
            self.initial_backoff_ms * (self.backoff_multiplier**attempt),
            self.max_backoff_ms,
        )
        # ±25% jitter
        return backoff_ms + backoff_ms * 0.25 * (2 * random.random() - 1)

    def __repr__(self) -> str:
        return f"DiscoveryClient({self.base_url!r})"
