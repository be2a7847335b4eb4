"""
wordforge_bridge.core - Adapter Core

This package contains the transport-independent parts of the bridge:
- Ability descriptor and tool models
- JSON Schema conversion and argument validation
- Namespace mapping, category filtering and tool loading
"""

__all__: list[str] = []
