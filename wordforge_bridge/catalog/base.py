"""
wordforge_bridge.catalog.base - In-process ability registry

The registry side of the protocol: ability definitions grouped into modules,
registered once from an explicit name -> factory table, permission-checked
per call and answered with success/error envelopes.

Example:
    >>> content = AbilityModule(
    ...     {"wordforge/list-content": make_list_content},
    ... )
    >>> shop = AbilityModule({"wordforge/list-products": make_list_products}, feature="woocommerce")
    >>> catalog = AbilityCatalog([content, shop], features=FeatureContext(features={"woocommerce"}))
    >>> envelope = await catalog.execute(
    ...     "wordforge/list-content", {}, Actor(capabilities={"edit_posts"})
    ... )
"""

import inspect
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from wordforge_bridge.core.tools.base import AbilityCategory, McpType
from wordforge_bridge.core.tools.schema import ArgumentValidator, SchemaConverter
from wordforge_bridge.exceptions import BridgeError

logger = logging.getLogger(__name__)

DEFAULT_CAPABILITY = "edit_posts"


class AbilityNotFoundError(BridgeError):
    """No ability is registered under the requested name."""


class PermissionDeniedError(BridgeError):
    """The actor lacks the capability an ability requires."""


class InvalidInputError(BridgeError):
    """Ability input does not match the ability's input schema."""


class AbilityFailure(Exception):
    """
    Raised by handlers to report a coded failure.

    The catalog turns it into {"success": false, "error": {"code", "message"}}.
    """

    def __init__(self, message: str, code: str = "error") -> None:
        super().__init__(message)
        self.code = code


class Actor(BaseModel):
    """The caller an ability runs on behalf of."""

    model_config = ConfigDict(frozen=True)

    user_id: int | str | None = None
    capabilities: frozenset[str] = Field(default_factory=frozenset)

    def can(self, capability: str) -> bool:
        return capability in self.capabilities


# (capability, actor) -> allowed
PermissionPredicate = Callable[[str, Actor], bool]


def actor_has_capability(capability: str, actor: Actor) -> bool:
    """Default permission predicate: the actor holds the capability."""
    return actor.can(capability)


class FeatureContext(BaseModel):
    """Optional features active on the site (e.g. "woocommerce")."""

    model_config = ConfigDict(frozen=True)

    features: frozenset[str] = Field(default_factory=frozenset)

    def is_active(self, feature: str) -> bool:
        return feature in self.features


Handler = Callable[[dict[str, Any]], Any]


class AbilityDefinition(BaseModel):
    """
    One registrable ability.

    `handler` receives the validated input and returns the payload, or a
    complete envelope (a dict with a "success" key) to control the response.
    It may be sync or async.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    label: str
    description: str = ""
    category: str = ""
    capability: str = DEFAULT_CAPABILITY
    input_schema: dict[str, Any] | None = None
    output_schema: dict[str, Any] | None = None
    readonly: bool | None = None
    destructive: bool | None = None
    idempotent: bool | None = None
    mcp_type: str = McpType.TOOL.value
    mcp_public: bool = True
    handler: Handler = Field(exclude=True, repr=False)

    def describe(self, name: str) -> dict[str, Any]:
        """Descriptor in the registry's wire format."""
        annotations = {
            key: value
            for key, value in (
                ("readonly", self.readonly),
                ("destructive", self.destructive),
                ("idempotent", self.idempotent),
            )
            if value is not None
        }
        return {
            "name": name,
            "label": self.label,
            "description": self.description,
            "category": self.category,
            "input_schema": self.input_schema if self.input_schema is not None else [],
            "output_schema": self.output_schema if self.output_schema is not None else [],
            "meta": {
                "show_in_rest": True,
                "mcp": {"public": self.mcp_public, "type": self.mcp_type},
                "annotations": annotations or [],
            },
        }


AbilityFactory = Callable[[], AbilityDefinition]


@dataclass(frozen=True)
class AbilityModule:
    """A group of abilities registered together, optionally behind a feature."""

    factories: Mapping[str, AbilityFactory]
    feature: str | None = None

    def is_enabled(self, features: FeatureContext) -> bool:
        return self.feature is None or features.is_active(self.feature)


class AbilityCatalog:
    """
    Abilities registered from an explicit table, built once.

    Modules whose feature is not active in `features` are skipped entirely.
    Names are unique across modules.
    """

    def __init__(
        self,
        modules: Iterable[AbilityModule],
        *,
        features: FeatureContext | None = None,
        permission: PermissionPredicate = actor_has_capability,
        categories: Iterable[AbilityCategory] = (),
    ) -> None:
        self._features = features or FeatureContext()
        self._permission = permission
        self._abilities: dict[str, AbilityDefinition] = {}
        self._validators: dict[str, ArgumentValidator] = {}
        self._categories = list(categories)

        converter = SchemaConverter()
        for module in modules:
            if not module.is_enabled(self._features):
                logger.debug(f"Skipping ability module for inactive feature: {module.feature}")
                continue
            for name, factory in module.factories.items():
                if name in self._abilities:
                    raise ValueError(f"Ability '{name}' already registered")
                definition = factory()
                self._abilities[name] = definition
                self._validators[name] = converter.convert(definition.input_schema, name=name)

        logger.info(
            f"Ability catalog built with {len(self._abilities)} abilities",
            extra={
                "ability_count": len(self._abilities),
                "features": sorted(self._features.features),
            },
        )

    def names(self) -> list[str]:
        return list(self._abilities)

    def get(self, name: str) -> AbilityDefinition:
        try:
            return self._abilities[name]
        except KeyError:
            raise AbilityNotFoundError(f"Ability not found: {name}") from None

    def describe(self, name: str) -> dict[str, Any]:
        return self.get(name).describe(name)

    def describe_all(self) -> list[dict[str, Any]]:
        return [definition.describe(name) for name, definition in self._abilities.items()]

    def list_categories(self) -> list[dict[str, Any]]:
        """Declared categories, plus any a registered ability uses without declaring."""
        categories = {c.slug: c.model_dump() for c in self._categories}
        for definition in self._abilities.values():
            if definition.category and definition.category not in categories:
                categories[definition.category] = AbilityCategory(
                    slug=definition.category
                ).model_dump()
        return list(categories.values())

    def check_permission(self, name: str, actor: Actor) -> None:
        """
        Raises:
            AbilityNotFoundError: Unknown ability
            PermissionDeniedError: The predicate refused the actor
        """
        definition = self.get(name)
        if not self._permission(definition.capability, actor):
            raise PermissionDeniedError(
                f"Sorry, you are not allowed to execute {name} (requires {definition.capability})"
            )

    async def execute(self, name: str, args: dict[str, Any] | None, actor: Actor) -> dict[str, Any]:
        """
        Run an ability and return its envelope.

        Handler exceptions become success=false envelopes. Lookup, permission
        and input failures raise, so the transport can answer with an HTTP error.

        Raises:
            AbilityNotFoundError: Unknown ability
            PermissionDeniedError: The actor may not run it
            InvalidInputError: Input fails the ability's schema
        """
        self.check_permission(name, actor)
        definition = self._abilities[name]
        args = args or {}

        result = self._validators[name].validate(args)
        if not result.success:
            raise InvalidInputError(f"Invalid input for {name}: {result.summary()}")

        try:
            value = definition.handler(args)
            if inspect.isawaitable(value):
                value = await value
        except AbilityFailure as e:
            return {"success": False, "error": {"code": e.code, "message": str(e)}}
        except Exception as e:
            logger.warning(
                f"Ability '{name}' handler raised: {e}",
                exc_info=True,
                extra={"ability": name},
            )
            return {"success": False, "error": {"code": "ability_error", "message": str(e)}}

        if isinstance(value, dict) and "success" in value:
            return value
        return {"success": True, "data": value}

    def __len__(self) -> int:
        return len(self._abilities)

    def __contains__(self, name: str) -> bool:
        return name in self._abilities
