"""
wordforge_bridge.core.tools.filters - Descriptor filtering and naming

Decides which discovered abilities become tools:

- NamespaceMapping: source namespace that descriptors must carry, and the
  agent-facing prefix it is rewritten to
- CategoryFilter: drops descriptors whose category was excluded
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from .base import AbilityDescriptor

SOURCE_NAMESPACE = "wordforge/"
TARGET_NAMESPACE = "wordpress_"


class NamespaceMapping(BaseModel):
    """
    Source-namespace to target-namespace naming pair.

    Example:
        >>> mapping = NamespaceMapping()
        >>> mapping.accepts("wordforge/test-ability")
        True
        >>> mapping.to_mcp_name("wordforge/test-ability")
        'wordpress_test-ability'
    """

    model_config = ConfigDict(frozen=True)

    source: str = Field(default=SOURCE_NAMESPACE, min_length=1)
    target: str = Field(default=TARGET_NAMESPACE)

    def accepts(self, name: str) -> bool:
        """Return True if `name` carries the source namespace prefix."""
        return name.startswith(self.source)

    def to_mcp_name(self, name: str) -> str:
        """Replace the leading source namespace with the target namespace."""
        if not self.accepts(name):
            raise ValueError(f"Ability name '{name}' is outside namespace '{self.source}'")
        return self.target + name[len(self.source) :]


DEFAULT_NAMESPACE = NamespaceMapping()


class CategoryFilter:
    """
    Category exclusion filter.

    Each exclusion entry is either a full slug ("wordforge-content") or a
    short suffix ("content"). A category is excluded if it equals an entry,
    or if the part after its first hyphen equals an entry. Matching is
    case-sensitive and exact.

    Example:
        >>> f = CategoryFilter(["content"])
        >>> f.is_excluded("wordforge-content")
        True
        >>> f.is_excluded("wordforge-media")
        False
    """

    def __init__(self, excluded_categories: Iterable[str] = ()) -> None:
        self._excluded = frozenset(excluded_categories)

    @property
    def excluded(self) -> frozenset[str]:
        return self._excluded

    def is_excluded(self, category: str | None) -> bool:
        if not category or not self._excluded:
            return False
        if category in self._excluded:
            return True
        _, hyphen, suffix = category.partition("-")
        return bool(hyphen) and suffix in self._excluded

    def apply(self, descriptors: Iterable[AbilityDescriptor]) -> list[AbilityDescriptor]:
        """Return descriptors not excluded, preserving order."""
        return [d for d in descriptors if not self.is_excluded(d.category)]
