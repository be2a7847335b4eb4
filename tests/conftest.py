"""Shared fixtures for wordforge_bridge tests."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from wordforge_bridge.core.tools.base import AbilityDescriptor
from wordforge_bridge.settings import clear_settings_cache


@pytest.fixture
def make_descriptor():
    """Factory for AbilityDescriptor built from the wire format."""

    def _make(name: str = "wordforge/test-ability", **fields: Any) -> AbilityDescriptor:
        payload: dict[str, Any] = {
            "name": name,
            "label": fields.pop("label", name.rsplit("/", 1)[-1].replace("-", " ").title()),
            "description": fields.pop("description", f"Description of {name}"),
            "category": fields.pop("category", "wordforge-content"),
        }
        payload.update(fields)
        return AbilityDescriptor.model_validate(payload)

    return _make


@pytest.fixture
def stub_client():
    """Client double exposing list_abilities / execute_ability as AsyncMocks."""

    def _make(descriptors: list[AbilityDescriptor], result: Any = None) -> AsyncMock:
        client = AsyncMock()
        client.list_abilities = AsyncMock(return_value=descriptors)
        client.execute_ability = AsyncMock(return_value=result)
        return client

    return _make


@pytest.fixture(autouse=True)
def _clear_settings():
    clear_settings_cache()
    yield
    clear_settings_cache()
