"""
In-process ability registry.

AbilityCatalog holds ability definitions registered from an explicit table;
CatalogTransport serves it over the Abilities REST routes through httpx, so
the adapter can run end to end without a WordPress site.
"""

from wordforge_bridge.catalog.base import (
    AbilityCatalog,
    AbilityDefinition,
    AbilityFailure,
    AbilityModule,
    AbilityNotFoundError,
    Actor,
    FeatureContext,
    InvalidInputError,
    PermissionDeniedError,
    PermissionPredicate,
    actor_has_capability,
)
from wordforge_bridge.catalog.demo import ContentStore, build_demo_catalog
from wordforge_bridge.catalog.transport import CatalogTransport

__all__ = [
    "AbilityCatalog",
    "AbilityDefinition",
    "AbilityFailure",
    "AbilityModule",
    "AbilityNotFoundError",
    "Actor",
    "CatalogTransport",
    "ContentStore",
    "FeatureContext",
    "InvalidInputError",
    "PermissionDeniedError",
    "PermissionPredicate",
    "actor_has_capability",
    "build_demo_catalog",
]
