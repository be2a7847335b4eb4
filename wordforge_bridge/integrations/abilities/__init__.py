"""
Ability registry integration.

DiscoveryClient fetches the remote ability catalog and dispatches ability
executions over HTTP (httpx).
"""

from wordforge_bridge.integrations.abilities.client import DiscoveryClient

__all__ = ["DiscoveryClient"]
